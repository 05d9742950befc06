"""
Service layer to assemble a deck dashboard.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from srs_engine.fsrs import MemoryState, ReviewLog
from srs_engine.analytics.metrics import (
    build_day_index,
    compute_average_retrievability,
    compute_daily_review_counts,
    compute_retention_rate,
    forecast_due_counts,
    review_logs_df,
)
from srs_engine.analytics.queries import deck_stats
from srs_engine.analytics.types import DeckDashboardData


def build_deck_dashboard(
    items: Sequence[MemoryState],
    logs: Iterable[ReviewLog],
    now: datetime,
    days_ahead: int = 7
) -> DeckDashboardData:
    """
    Build all KPI values and series needed to show a deck's health.
    """
    logs_df = review_logs_df(logs)
    day_index = build_day_index(logs_df)

    return DeckDashboardData(
        stats=deck_stats(items, now),
        retention_rate=compute_retention_rate(logs_df),
        average_retrievability=compute_average_retrievability(logs_df),
        daily_reviews=compute_daily_review_counts(logs_df, day_index),
        due_forecast=forecast_due_counts(items, now, days=days_ahead),
    )
