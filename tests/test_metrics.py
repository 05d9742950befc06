"""Tests for review-log metrics and the deck dashboard."""

import dataclasses
from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from srs_engine.analytics import build_deck_dashboard
from srs_engine.analytics.metrics import (
    LOG_COLUMNS,
    build_day_index,
    compute_average_retrievability,
    compute_daily_review_counts,
    compute_retention_rate,
    forecast_due_counts,
    review_logs_df,
)
from srs_engine.fsrs import Rating, new_memory_state


@pytest.fixture
def review_logs(scheduler, make_state, new_state, t0):
    """Three reviews of a graduated item plus one first review."""
    graduated = make_state(stability=10.0, elapsed=10)
    logs = [
        scheduler.review(graduated, Rating.GOOD, t0)[1],
        scheduler.review(graduated, Rating.AGAIN, t0 + timedelta(hours=3))[1],
        scheduler.review(graduated, Rating.EASY, t0 + timedelta(days=2))[1],
        scheduler.review(new_state, Rating.AGAIN, t0 + timedelta(hours=1))[1],
    ]
    return logs


class TestReviewLogsFrame:
    def test_empty_logs_give_empty_frame(self):
        df = review_logs_df([])
        assert df.empty
        assert list(df.columns) == LOG_COLUMNS

    def test_rows_are_sorted_by_review_time(self, review_logs):
        df = review_logs_df(review_logs)
        assert list(df.columns) == LOG_COLUMNS
        assert df["reviewed_at"].is_monotonic_increasing
        assert df["state_before"].tolist() == ["REVIEW", "NEW", "REVIEW", "REVIEW"]


class TestRetentionRate:
    def test_share_of_recalled_graduated_reviews(self, review_logs):
        """Should ignore first reviews and count Again as a failure."""
        rate = compute_retention_rate(review_logs_df(review_logs))
        assert rate == pytest.approx(2 / 3)

    def test_none_without_graduated_reviews(self, scheduler, new_state, t0):
        logs = [scheduler.review(new_state, Rating.GOOD, t0)[1]]
        assert compute_retention_rate(review_logs_df(logs)) is None
        assert compute_retention_rate(review_logs_df([])) is None


class TestAverageRetrievability:
    def test_excludes_first_reviews(self, review_logs):
        value = compute_average_retrievability(review_logs_df(review_logs))
        assert 0.0 < value < 1.0
        assert value == pytest.approx(
            sum(log.retrievability for log in review_logs if not log.state_before.is_new) / 3
        )

    def test_none_when_empty(self):
        assert compute_average_retrievability(review_logs_df([])) is None


class TestDailyReviewCounts:
    def test_zero_fills_missing_days(self, review_logs):
        df = review_logs_df(review_logs)
        daily = compute_daily_review_counts(df, build_day_index(df))
        assert daily.tolist() == [3, 0, 1]
        assert daily.index[0] == pd.Timestamp("2024-03-01", tz="UTC")

    def test_empty_logs(self):
        df = review_logs_df([])
        assert compute_daily_review_counts(df, build_day_index(df)).empty


class TestDueForecast:
    def test_counts_items_per_day(self, make_state):
        now = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
        items = [
            dataclasses.replace(make_state(item_id=str(days)), due=now + timedelta(days=days))
            for days in (-1, 0, 1, 3, 30)
        ]

        forecast = forecast_due_counts(items, now, days=4)

        assert forecast.tolist() == [2, 1, 0, 1]
        assert forecast.index[0] == pd.Timestamp("2024-03-10", tz="UTC")

    def test_naive_times_are_read_as_utc(self, make_state):
        """Should bucket naive due dates against a naive `now` like UTC ones."""
        now = datetime(2024, 3, 10, 12, 0)
        items = [
            dataclasses.replace(
                make_state(item_id=str(days)),
                due=now + timedelta(days=days),
                last_review=now - timedelta(days=5),
            )
            for days in (-1, 0, 1, 3, 30)
        ]

        forecast = forecast_due_counts(items, now, days=4)

        assert forecast.tolist() == [2, 1, 0, 1]
        assert forecast.index[0] == pd.Timestamp("2024-03-10", tz="UTC")

    def test_empty_deck_forecast(self, t0):
        forecast = forecast_due_counts([], t0, days=3)
        assert forecast.tolist() == [0, 0, 0]

    def test_days_must_be_positive(self, t0):
        with pytest.raises(ValueError):
            forecast_due_counts([], t0, days=0)


class TestDeckDashboard:
    def test_builds_all_metrics(self, review_logs, make_state, t0):
        items = [new_memory_state(t0, item_id="new"), make_state(elapsed=5, scheduled_days=3)]

        dashboard = build_deck_dashboard(items, review_logs, t0, days_ahead=5)

        assert dashboard.stats.total == 2
        assert dashboard.stats.due_count == 2
        assert dashboard.retention_rate == pytest.approx(2 / 3)
        assert dashboard.average_retrievability is not None
        assert dashboard.daily_reviews.sum() == 4
        assert len(dashboard.due_forecast) == 5
        assert dashboard.due_forecast.iloc[0] == 2

    def test_dashboard_from_naive_review(self, scheduler):
        """Should accept the naive timestamps the scheduler itself accepts."""
        now = datetime(2024, 3, 1, 9, 0)
        after, log = scheduler.review(new_memory_state(now, item_id="naive"), Rating.GOOD, now)

        dashboard = build_deck_dashboard([after], [log], now)

        assert dashboard.stats.total == 1
        assert dashboard.daily_reviews.tolist() == [1]
        assert dashboard.due_forecast.tolist() == [0, 1, 0, 0, 0, 0, 0]
