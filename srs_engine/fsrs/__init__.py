"""
FSRS - Free Spaced Repetition Scheduler

Main API for the scheduling engine.

This package implements a pure spaced-repetition engine with:
- Power-law forgetting curve: R = (1 + F * t / S) ^ (-decay)
- Interpretable memory state (Stability, Difficulty, Retrievability)
- A New -> Learning -> Review <-> Relearning lifecycle
- Bounded, deterministically fuzzed review intervals

Quick start:
    from srs_engine import fsrs

    scheduler = fsrs.Scheduler()
    state = fsrs.new_memory_state(now, item_id="card-1")

    # Show the options, then commit one (algorithm only, no DB calls)
    options = scheduler.preview_all_outcomes(state, now)
    state, log = scheduler.review(state, fsrs.Rating.GOOD, now)
"""

# Core scheduler API (algorithm logic)
from srs_engine.fsrs.scheduler import (
    Scheduler,
    StepAction,
    TRANSITIONS,
    coerce_rating,
)

# Constants and parameters
from srs_engine.fsrs.constants import (
    Rating,
    LifecycleState,
    S_MIN,
    S_MAX,
    D_MIN,
    D_MAX,
)
from srs_engine.fsrs.parameters import (
    DEFAULT_WEIGHTS,
    Parameters,
    Weights,
)
from srs_engine.fsrs.config import load_parameters

# Errors
from srs_engine.fsrs.errors import (
    SchedulerError,
    InvalidState,
    InvalidRating,
    ConfigError,
)

# Memory state and review log
from srs_engine.fsrs.memory_state import (
    MemoryState,
    new_memory_state,
    validate_memory_state,
)
from srs_engine.fsrs.review_log import ReviewLog

# Retention model
from srs_engine.fsrs.retention import (
    retrievability,
    interval_for_retention,
    current_retrievability,
    next_stability,
    next_difficulty,
)

# Interval policy
from srs_engine.fsrs.intervals import (
    IntervalPolicy,
    bounded_interval,
    fuzzed_interval,
    fuzz_range,
    review_seed,
)

# Clock
from srs_engine.fsrs.clock import FixedClock, days_between, utc_now


__all__ = [
    # Core algorithm
    "Scheduler",
    "StepAction",
    "TRANSITIONS",
    "coerce_rating",

    # Enums
    "Rating",
    "LifecycleState",

    # Parameters
    "DEFAULT_WEIGHTS",
    "Parameters",
    "Weights",
    "load_parameters",
    "S_MIN",
    "S_MAX",
    "D_MIN",
    "D_MAX",

    # Errors
    "SchedulerError",
    "InvalidState",
    "InvalidRating",
    "ConfigError",

    # Memory state
    "MemoryState",
    "new_memory_state",
    "validate_memory_state",
    "ReviewLog",

    # Retention model
    "retrievability",
    "interval_for_retention",
    "current_retrievability",
    "next_stability",
    "next_difficulty",

    # Interval policy
    "IntervalPolicy",
    "bounded_interval",
    "fuzzed_interval",
    "fuzz_range",
    "review_seed",

    # Clock
    "FixedClock",
    "days_between",
    "utc_now",
]
