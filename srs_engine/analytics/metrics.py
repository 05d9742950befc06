"""
Metric computations over review logs and deck snapshots.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

from srs_engine.fsrs import LifecycleState, MemoryState, Rating, ReviewLog


LOG_COLUMNS = [
    "item_id",
    "rating",
    "reviewed_at",
    "day_utc",
    "state_before",
    "state_after",
    "elapsed_days",
    "retrievability",
    "scheduled_days",
]


def review_logs_df(logs: Iterable[ReviewLog]) -> pd.DataFrame:
    """
    Flatten review logs into a dataframe sorted by review time.
    """
    rows = [
        {
            "item_id": log.item_id,
            "rating": int(log.rating),
            "reviewed_at": log.reviewed_at,
            "state_before": log.state_before.lifecycle_state.name,
            "state_after": log.state_after.lifecycle_state.name,
            "elapsed_days": log.elapsed_days,
            "retrievability": log.retrievability,
            "scheduled_days": log.scheduled_days,
        }
        for log in logs
    ]
    if not rows:
        return pd.DataFrame(columns=LOG_COLUMNS)

    df = pd.DataFrame(rows)
    df["reviewed_at"] = pd.to_datetime(df["reviewed_at"], utc=True)
    df["day_utc"] = df["reviewed_at"].dt.floor("D")
    df = df.sort_values("reviewed_at").reset_index(drop=True)
    return df[LOG_COLUMNS]


def build_day_index(logs_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the review range.
    """
    if logs_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    start = logs_df["day_utc"].min()
    end = logs_df["day_utc"].max()
    return pd.date_range(start=start, end=end, freq="D", tz="UTC")


def compute_daily_review_counts(
    logs_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Number of reviews per UTC day, zero-filled across the index.
    """
    if logs_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")

    daily = logs_df.groupby("day_utc").size()
    return daily.reindex(day_index, fill_value=0).astype("int64")


def compute_retention_rate(logs_df: pd.DataFrame) -> Optional[float]:
    """
    Share of reviews of graduated (Review-state) items that were recalled.

    Returns None when there are no such reviews.
    """
    if logs_df.empty:
        return None

    scoped = logs_df[logs_df["state_before"] == LifecycleState.REVIEW.name]
    if scoped.empty:
        return None
    return float((scoped["rating"] != int(Rating.AGAIN)).mean())


def compute_average_retrievability(logs_df: pd.DataFrame) -> Optional[float]:
    """
    Mean predicted recall probability at review time, excluding first reviews.
    """
    if logs_df.empty:
        return None

    scoped = logs_df[logs_df["state_before"] != LifecycleState.NEW.name]
    if scoped.empty:
        return None
    return float(scoped["retrievability"].mean())


def forecast_due_counts(
    items: Iterable[MemoryState],
    now: datetime,
    days: int = 7
) -> pd.Series:
    """
    Items coming due on each of the next `days` UTC days.

    Overdue items are counted on the first day. Naive datetimes are
    treated as UTC.
    """
    if days < 1:
        raise ValueError(f"days must be at least 1, got {days}")

    start = pd.to_datetime(now, utc=True).floor("D")
    day_index = pd.date_range(start=start, periods=days, freq="D")

    items = list(items)
    if not items:
        return pd.Series(0, index=day_index, dtype="int64")

    due = pd.to_datetime([item.due for item in items], utc=True)
    offsets = pd.Series((due.floor("D") - start).days).clip(lower=0)
    counts = offsets[offsets < days].value_counts()
    return counts.reindex(range(days), fill_value=0).set_axis(day_index).astype("int64")
