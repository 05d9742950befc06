"""
Types for deck queries and dashboards.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class DeckStats:
    """
    Item counts for a deck at one moment.

    learning_count includes Relearning items; overdue_count only counts
    Review items (a late New/Learning item is not "overdue").
    """
    total: int
    new_count: int
    learning_count: int
    review_count: int
    due_count: int
    overdue_count: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class DeckDashboardData:
    """
    Precomputed metrics and series for one deck.
    """
    stats: DeckStats
    retention_rate: Optional[float]
    average_retrievability: Optional[float]
    daily_reviews: pd.Series
    due_forecast: pd.Series
