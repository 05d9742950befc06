"""
Memory State - FSRS item state

Defines the immutable per-item memory record and its invariants.

Key concepts:
- Stability (S): days until recall probability decays to 90%
- Difficulty (D): how hard the item is to learn (1-10 scale)
- Lifecycle: New -> Learning -> Review <-> Relearning

A MemoryState is never changed in place. The Scheduler returns a new value
for every review; callers persist it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from srs_engine.fsrs.clock import is_aware
from srs_engine.fsrs.constants import D_MAX, D_MIN, LifecycleState, Rating
from srs_engine.fsrs.errors import InvalidState
from srs_engine.fsrs.parameters import DEFAULT_WEIGHTS, Weights
from srs_engine.fsrs.retention import initial_difficulty


@dataclass(frozen=True)
class MemoryState:
    """
    Memory state for a single learning item.
    """
    due: datetime
    stability: float  # S, in days
    difficulty: float  # D, range 1-10

    elapsed_days: int = 0  # Days between the previous two reviews
    scheduled_days: int = 0  # Interval chosen at the previous review
    reps: int = 0
    lapses: int = 0
    lifecycle_state: LifecycleState = LifecycleState.NEW
    last_review: Optional[datetime] = None

    # Position in the learning/relearning step table
    learning_step: int = 0

    item_id: Optional[str] = None

    @property
    def is_new(self) -> bool:
        return self.lifecycle_state == LifecycleState.NEW


def new_memory_state(
    now: datetime,
    item_id: Optional[str] = None,
    weights: Weights = DEFAULT_WEIGHTS
) -> MemoryState:
    """
    Initialize state for an item that has never been reviewed.

    Stability and difficulty start at the model's "Good" initial values so
    the state is valid before the first review; the first review replaces
    them with the initial values for the rating actually given.

    Args:
        now: Creation time; the item is due immediately
        item_id: Optional item reference carried into review logs
        weights: Weight table supplying the initial values

    Returns:
        New MemoryState in the NEW lifecycle state
    """
    return MemoryState(
        due=now,
        stability=weights.initial_stability_good,
        difficulty=initial_difficulty(Rating.GOOD, weights=weights),
        lifecycle_state=LifecycleState.NEW,
        last_review=None,
        item_id=item_id,
    )


def validate_memory_state(state: MemoryState) -> None:
    """
    Check every MemoryState invariant.

    Raises:
        InvalidState: describing the first violated invariant
    """
    if not isinstance(state, MemoryState):
        raise InvalidState(f"Expected MemoryState, got {type(state).__name__}")

    if not isinstance(state.lifecycle_state, LifecycleState):
        raise InvalidState(f"Unknown lifecycle state: {state.lifecycle_state!r}")

    if not _is_finite_number(state.stability) or state.stability <= 0:
        raise InvalidState(f"Stability must be positive, got {state.stability!r}")

    if not _is_finite_number(state.difficulty) or not D_MIN <= state.difficulty <= D_MAX:
        raise InvalidState(
            f"Difficulty must be within [{D_MIN}, {D_MAX}], got {state.difficulty!r}"
        )

    for name in ("elapsed_days", "scheduled_days", "reps", "lapses", "learning_step"):
        value = getattr(state, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidState(f"{name} must be a non-negative integer, got {value!r}")

    if state.lifecycle_state == LifecycleState.NEW:
        if state.reps != 0:
            raise InvalidState("A NEW item cannot have reviews")
        if state.last_review is not None:
            raise InvalidState("A NEW item cannot have a last review")
    elif state.last_review is None:
        raise InvalidState(
            f"{state.lifecycle_state.name} item is missing its last review timestamp"
        )

    if not isinstance(state.due, datetime):
        raise InvalidState(f"due must be a datetime, got {state.due!r}")
    if state.last_review is not None:
        if not isinstance(state.last_review, datetime):
            raise InvalidState(f"last_review must be a datetime, got {state.last_review!r}")
        if is_aware(state.due) != is_aware(state.last_review):
            raise InvalidState("due and last_review mix naive and timezone-aware datetimes")

    if state.last_review is not None and state.due < state.last_review:
        raise InvalidState("Item is due before the review that scheduled it")


def _is_finite_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )
