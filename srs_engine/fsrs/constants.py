"""
FSRS Constants and Parameters

Enumerations and fixed bounds for the scheduling engine in one place.
Tunable values (weights, retention target, interval bounds) live on
the Parameters table in parameters.py.
"""

from __future__ import annotations

import math
from enum import IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """User feedback on a retrieval attempt."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently


# ---- Lifecycle ----

class LifecycleState(IntEnum):
    """Where an item sits in its learning lifecycle."""
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


# ---- Model bounds ----

S_MIN = 0.001     # Minimum stability (days)
S_MAX = 36500.0   # Maximum stability (days)
D_MIN = 1.0       # Minimum difficulty
D_MAX = 10.0      # Maximum difficulty


# ---- Scheduling defaults ----

DEFAULT_REQUEST_RETENTION = 0.9
DEFAULT_MINIMUM_INTERVAL = 1       # days
DEFAULT_MAXIMUM_INTERVAL = 36500   # ~100 years
DEFAULT_LEARNING_STEPS = (1, 3)    # days
DEFAULT_RELEARNING_STEPS = (1,)    # days
DEFAULT_GRADUATION_STABILITY = 5.0  # days
DEFAULT_PARAMETERS_VERSION = "fsrs-6-language-v1"


# ---- Language-learning tuned weights (w0..w20) ----

DEFAULT_WEIGHT_VALUES = (
    0.212, 1.2931, 2.3065, 8.2956, 6.4133, 0.8334, 3.0194, 0.001, 1.8722,
    0.1666, 0.796, 1.4835, 0.0614, 0.2629, 1.6483, 0.6014, 1.8729, 0.5425,
    0.0912, 0.0658, 0.1542,
)


# ---- Interval fuzzing ----
# (start_days, end_days, factor): the fuzz window grows by `factor` for
# every day of the interval that falls inside [start, end).

FUZZ_THRESHOLD_DAYS = 2.5
FUZZ_RANGES = (
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.10),
    (20.0, math.inf, 0.05),
)
