"""
SQLAlchemy ORM Models for FSRS storage

Relational mapping for callers that keep one row per item and an
append-only review log. The engine never opens a session; these helpers
only convert between rows and engine values.

`CardRow.version` is SQLAlchemy's version counter: an UPDATE only matches
the version that was read, so the second of two racing reviews of the
same item fails with StaleDataError instead of overwriting the first.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

from srs_engine.fsrs.constants import LifecycleState
from srs_engine.fsrs.errors import InvalidState
from srs_engine.fsrs.memory_state import MemoryState, validate_memory_state
from srs_engine.fsrs.review_log import ReviewLog

Base = declarative_base()


class CardRow(Base):
    """
    Persistent memory state for a single item.
    """
    __tablename__ = 'memory_state'

    item_id = Column(String(255), primary_key=True, nullable=False)

    due = Column(DateTime(timezone=True), nullable=False)
    stability = Column(Float, nullable=False)
    difficulty = Column(Float, nullable=False)
    elapsed_days = Column(Integer, nullable=False, default=0)
    scheduled_days = Column(Integer, nullable=False, default=0)
    reps = Column(Integer, nullable=False, default=0)
    lapses = Column(Integer, nullable=False, default=0)
    state = Column(String(20), nullable=False, default=LifecycleState.NEW.name)
    last_review = Column(DateTime(timezone=True), nullable=True)
    learning_step = Column(Integer, nullable=False, default=0)

    # Optimistic concurrency counter
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<CardRow({self.item_id}, {self.state}, v{self.version})>"


class ReviewLogRow(Base):
    """
    Log entry for a single review of an item.
    """
    __tablename__ = 'review_logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(String(255), nullable=True, index=True)

    reviewed_at = Column(DateTime(timezone=True), nullable=False)
    rating = Column(Integer, nullable=False)  # 1=AGAIN, 2=HARD, 3=GOOD, 4=EASY
    elapsed_days = Column(Integer, nullable=False)
    retrievability = Column(Float, nullable=False)

    # State before review
    state_before = Column(String(20), nullable=False)
    stability_before = Column(Float, nullable=False)
    difficulty_before = Column(Float, nullable=False)
    due_before = Column(DateTime(timezone=True), nullable=False)

    # State after review
    state_after = Column(String(20), nullable=False)
    stability_after = Column(Float, nullable=False)
    difficulty_after = Column(Float, nullable=False)
    scheduled_days = Column(Integer, nullable=False)

    parameters_version = Column(String(64), nullable=False)

    def __repr__(self):
        return f"<ReviewLogRow(id={self.id}, {self.item_id}, rating={self.rating})>"


def card_row_from_state(state: MemoryState) -> CardRow:
    """
    New row for an item's first stored state.

    Raises:
        InvalidState: if the state has no item_id to key the row on
    """
    if not state.item_id:
        raise InvalidState("Cannot store a memory state without an item_id")
    row = CardRow(item_id=state.item_id)
    apply_state(row, state)
    return row


def apply_state(row: CardRow, state: MemoryState) -> None:
    """
    Copy a new MemoryState onto an existing row (modifies the row in place).
    """
    if row.item_id != state.item_id:
        raise InvalidState(
            f"State for item {state.item_id!r} applied to row {row.item_id!r}"
        )
    row.due = state.due
    row.stability = state.stability
    row.difficulty = state.difficulty
    row.elapsed_days = state.elapsed_days
    row.scheduled_days = state.scheduled_days
    row.reps = state.reps
    row.lapses = state.lapses
    row.state = state.lifecycle_state.name
    row.last_review = state.last_review
    row.learning_step = state.learning_step


def state_from_row(row: CardRow) -> MemoryState:
    """
    Engine value for a stored row.

    Raises:
        InvalidState: if the stored data breaks a MemoryState invariant
    """
    try:
        lifecycle_state = LifecycleState[row.state]
    except KeyError:
        raise InvalidState(f"Unknown stored lifecycle state: {row.state!r}") from None

    state = MemoryState(
        due=_as_utc(row.due),
        stability=row.stability,
        difficulty=row.difficulty,
        elapsed_days=row.elapsed_days,
        scheduled_days=row.scheduled_days,
        reps=row.reps,
        lapses=row.lapses,
        lifecycle_state=lifecycle_state,
        last_review=_as_utc(row.last_review),
        learning_step=row.learning_step,
        item_id=row.item_id,
    )
    validate_memory_state(state)
    return state


def review_log_row(log: ReviewLog) -> ReviewLogRow:
    """Row for a ReviewLog returned by Scheduler.review."""
    before = log.state_before
    after = log.state_after
    return ReviewLogRow(
        item_id=log.item_id,
        reviewed_at=log.reviewed_at,
        rating=int(log.rating),
        elapsed_days=log.elapsed_days,
        retrievability=log.retrievability,
        state_before=before.lifecycle_state.name,
        stability_before=before.stability,
        difficulty_before=before.difficulty,
        due_before=before.due,
        state_after=after.lifecycle_state.name,
        stability_after=after.stability,
        difficulty_after=after.difficulty,
        scheduled_days=after.scheduled_days,
        parameters_version=log.parameters_version,
    )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
