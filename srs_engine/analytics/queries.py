"""
Read-only deck queries over MemoryState collections (no DB calls).
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from srs_engine.fsrs import LifecycleState, MemoryState
from srs_engine.analytics.types import DeckStats


def due_items(
    items: Iterable[MemoryState],
    now: datetime,
    limit: Optional[int] = None
) -> list[MemoryState]:
    """
    Items due at `now`, oldest-due first.

    Ordering is part of the contract: the longest-waiting item is always
    served first. Items with equal due times keep their input order.

    Args:
        items: Item states to scan
        now: Reference time
        limit: Maximum number of items to return (None for all)

    Returns:
        Due items sorted ascending by due
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit cannot be negative, got {limit}")

    due = [item for item in items if item.due <= now]
    due.sort(key=lambda item: item.due)
    return due if limit is None else due[:limit]


def deck_stats(items: Sequence[MemoryState], now: datetime) -> DeckStats:
    """
    Aggregate item counts by lifecycle state and due status.
    """
    new_count = learning_count = review_count = 0
    due_count = overdue_count = 0

    for item in items:
        state = item.lifecycle_state
        if state == LifecycleState.NEW:
            new_count += 1
        elif state in (LifecycleState.LEARNING, LifecycleState.RELEARNING):
            learning_count += 1
        elif state == LifecycleState.REVIEW:
            review_count += 1

        if item.due <= now:
            due_count += 1
        if item.due < now and state == LifecycleState.REVIEW:
            overdue_count += 1

    return DeckStats(
        total=len(items),
        new_count=new_count,
        learning_count=learning_count,
        review_count=review_count,
        due_count=due_count,
        overdue_count=overdue_count,
    )
