"""
Pydantic records for MemoryState and ReviewLog.

These define the document shape callers store (any JSON/document store)
and validate data coming back from storage before it reaches the engine.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from srs_engine.fsrs.constants import D_MAX, D_MIN, LifecycleState, Rating
from srs_engine.fsrs.errors import InvalidState
from srs_engine.fsrs.memory_state import MemoryState, validate_memory_state
from srs_engine.fsrs.review_log import ReviewLog


class CardStateName(str, Enum):
    """Lifecycle state as stored."""
    NEW = "NEW"
    LEARNING = "LEARNING"
    REVIEW = "REVIEW"
    RELEARNING = "RELEARNING"


class MemoryStateRecord(BaseModel):
    """Stored form of a MemoryState."""
    item_id: Optional[str] = None
    due: datetime
    stability: float = Field(..., gt=0)
    difficulty: float = Field(..., ge=D_MIN, le=D_MAX)
    elapsed_days: int = Field(0, ge=0)
    scheduled_days: int = Field(0, ge=0)
    reps: int = Field(0, ge=0)
    lapses: int = Field(0, ge=0)
    state: CardStateName = CardStateName.NEW
    last_review: Optional[datetime] = None
    learning_step: int = Field(0, ge=0)

    @classmethod
    def from_state(cls, state: MemoryState) -> "MemoryStateRecord":
        return cls(
            item_id=state.item_id,
            due=state.due,
            stability=state.stability,
            difficulty=state.difficulty,
            elapsed_days=state.elapsed_days,
            scheduled_days=state.scheduled_days,
            reps=state.reps,
            lapses=state.lapses,
            state=CardStateName(state.lifecycle_state.name),
            last_review=state.last_review,
            learning_step=state.learning_step,
        )

    def to_state(self) -> MemoryState:
        """Convert back, enforcing the cross-field invariants too."""
        state = MemoryState(
            due=self.due,
            stability=self.stability,
            difficulty=self.difficulty,
            elapsed_days=self.elapsed_days,
            scheduled_days=self.scheduled_days,
            reps=self.reps,
            lapses=self.lapses,
            lifecycle_state=LifecycleState[self.state.value],
            last_review=self.last_review,
            learning_step=self.learning_step,
            item_id=self.item_id,
        )
        validate_memory_state(state)
        return state


class ReviewLogRecord(BaseModel):
    """Stored form of a ReviewLog."""
    item_id: Optional[str] = None
    rating: int = Field(..., ge=int(Rating.AGAIN), le=int(Rating.EASY))
    state_before: MemoryStateRecord
    state_after: MemoryStateRecord
    reviewed_at: datetime
    elapsed_days: int = Field(..., ge=0)
    retrievability: float = Field(..., ge=0.0, le=1.0)
    parameters_version: str

    @classmethod
    def from_log(cls, log: ReviewLog) -> "ReviewLogRecord":
        return cls(
            item_id=log.item_id,
            rating=int(log.rating),
            state_before=MemoryStateRecord.from_state(log.state_before),
            state_after=MemoryStateRecord.from_state(log.state_after),
            reviewed_at=log.reviewed_at,
            elapsed_days=log.elapsed_days,
            retrievability=log.retrievability,
            parameters_version=log.parameters_version,
        )

    def to_log(self) -> ReviewLog:
        return ReviewLog(
            item_id=self.item_id,
            rating=Rating(self.rating),
            state_before=self.state_before.to_state(),
            state_after=self.state_after.to_state(),
            reviewed_at=self.reviewed_at,
            elapsed_days=self.elapsed_days,
            retrievability=self.retrievability,
            parameters_version=self.parameters_version,
        )


def parse_memory_state(data: dict[str, Any]) -> MemoryState:
    """
    Validate a stored document and return the MemoryState it describes.

    Raises:
        InvalidState: if the document is malformed or breaks an invariant
    """
    try:
        record = MemoryStateRecord.model_validate(data)
    except ValidationError as exc:
        raise InvalidState(f"Corrupted memory state: {exc}") from exc
    return record.to_state()


def dump_memory_state(state: MemoryState) -> dict[str, Any]:
    """JSON-compatible document for a MemoryState."""
    return MemoryStateRecord.from_state(state).model_dump(mode="json")


def parse_review_log(data: dict[str, Any]) -> ReviewLog:
    """
    Validate a stored review-log document.

    Raises:
        InvalidState: if the document is malformed
    """
    try:
        record = ReviewLogRecord.model_validate(data)
    except ValidationError as exc:
        raise InvalidState(f"Corrupted review log: {exc}") from exc
    return record.to_log()


def dump_review_log(log: ReviewLog) -> dict[str, Any]:
    """JSON-compatible document for a ReviewLog."""
    return ReviewLogRecord.from_log(log).model_dump(mode="json")
