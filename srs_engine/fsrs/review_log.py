"""
Review Log

One immutable record per review, capturing the state before and after.
The engine only returns it; the caller's persistence layer owns it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from srs_engine.fsrs.constants import LifecycleState, Rating
from srs_engine.fsrs.memory_state import MemoryState


@dataclass(frozen=True)
class ReviewLog:
    """
    Audit entry for a single review of an item.
    """
    item_id: Optional[str]
    rating: Rating
    state_before: MemoryState
    state_after: MemoryState
    reviewed_at: datetime
    elapsed_days: int

    # Recall probability at the moment of review (1.0 for new items)
    retrievability: float
    parameters_version: str

    @property
    def scheduled_days(self) -> int:
        return self.state_after.scheduled_days

    @property
    def is_lapse(self) -> bool:
        return (
            self.rating == Rating.AGAIN
            and self.state_before.lifecycle_state in (
                LifecycleState.REVIEW,
                LifecycleState.RELEARNING,
            )
        )
