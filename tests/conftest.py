"""Shared fixtures for scheduling-engine tests."""

from datetime import datetime, timedelta, timezone

import pytest

from srs_engine.fsrs import (
    FixedClock,
    LifecycleState,
    MemoryState,
    Parameters,
    Scheduler,
    new_memory_state,
)


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def scheduler(clock):
    """Scheduler with default parameters and a fixed clock"""
    return Scheduler(Parameters(), clock=clock)


@pytest.fixture
def new_state():
    return new_memory_state(T0, item_id="card-1")


@pytest.fixture
def make_state():
    """Factory for graduated (or learning) states reviewed `elapsed` days before T0."""

    def _make(
        stability=10.0,
        difficulty=5.0,
        lifecycle_state=LifecycleState.REVIEW,
        elapsed=10,
        scheduled_days=None,
        reps=4,
        lapses=0,
        learning_step=0,
        item_id="card-1",
    ):
        last_review = T0 - timedelta(days=elapsed)
        if scheduled_days is None:
            scheduled_days = elapsed
        return MemoryState(
            due=last_review + timedelta(days=scheduled_days),
            stability=stability,
            difficulty=difficulty,
            elapsed_days=0,
            scheduled_days=scheduled_days,
            reps=reps,
            lapses=lapses,
            lifecycle_state=lifecycle_state,
            last_review=last_review,
            learning_step=learning_step,
            item_id=item_id,
        )

    return _make
