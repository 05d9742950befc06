"""
Parameters - Versioned FSRS configuration

The weight table and scheduling knobs are supplied once when a Scheduler
is built and never change afterwards. A different table is a different
scheduler version, recorded on every ReviewLog via `Parameters.version`.

Weight index to field mapping (FSRS-6 ordering):

    w0..w3   initial_stability_{again,hard,good,easy}
    w4, w5   initial_difficulty, initial_difficulty_slope
    w6       difficulty_step
    w7       mean_reversion
    w8..w10  recall_growth, recall_stability_decay, recall_retrievability_gain
    w11..w14 forget_scale, forget_difficulty_exponent,
             forget_stability_exponent, forget_retrievability_gain
    w15      hard_penalty
    w16      easy_bonus
    w17..w19 short_term_rate, short_term_offset, short_term_stability_decay
    w20      decay
"""

from __future__ import annotations

import math
from dataclasses import astuple, dataclass, field, fields
from typing import Iterable

from srs_engine.fsrs.constants import (
    DEFAULT_GRADUATION_STABILITY,
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_MINIMUM_INTERVAL,
    DEFAULT_PARAMETERS_VERSION,
    DEFAULT_RELEARNING_STEPS,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHT_VALUES,
)
from srs_engine.fsrs.errors import ConfigError


@dataclass(frozen=True)
class Weights:
    """
    Named FSRS-6 weights.

    Use `Weights.from_sequence` to load a published 21-value vector and
    `as_tuple` to compare against one.
    """
    initial_stability_again: float
    initial_stability_hard: float
    initial_stability_good: float
    initial_stability_easy: float
    initial_difficulty: float
    initial_difficulty_slope: float
    difficulty_step: float
    mean_reversion: float
    recall_growth: float
    recall_stability_decay: float
    recall_retrievability_gain: float
    forget_scale: float
    forget_difficulty_exponent: float
    forget_stability_exponent: float
    forget_retrievability_gain: float
    hard_penalty: float
    easy_bonus: float
    short_term_rate: float
    short_term_offset: float
    short_term_stability_decay: float
    decay: float

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"Weight {f.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigError(f"Weight {f.name} must be finite, got {value!r}")

        initial = (
            self.initial_stability_again,
            self.initial_stability_hard,
            self.initial_stability_good,
            self.initial_stability_easy,
        )
        if any(s <= 0 for s in initial):
            raise ConfigError("Initial stabilities must be positive")
        if self.decay <= 0:
            raise ConfigError("Decay must be positive")
        if not 0.0 <= self.mean_reversion <= 1.0:
            raise ConfigError("Mean reversion weight must be within [0, 1]")
        if self.hard_penalty <= 0 or self.easy_bonus <= 0:
            raise ConfigError("Hard penalty and easy bonus must be positive")

    @classmethod
    def from_sequence(cls, values: Iterable[float]) -> "Weights":
        """Build from an index-ordered weight vector (w0..w20)."""
        values = tuple(values)
        expected = len(fields(cls))
        if len(values) != expected:
            raise ConfigError(f"Expected {expected} weights, got {len(values)}")
        return cls(*values)

    def as_tuple(self) -> tuple[float, ...]:
        return astuple(self)


DEFAULT_WEIGHTS = Weights.from_sequence(DEFAULT_WEIGHT_VALUES)


@dataclass(frozen=True)
class Parameters:
    """
    Immutable scheduler configuration.

    Step tables are in days. Learning/relearning steps are bounded by the
    interval limits but never fuzzed.
    """
    weights: Weights = DEFAULT_WEIGHTS
    request_retention: float = DEFAULT_REQUEST_RETENTION
    minimum_interval: int = DEFAULT_MINIMUM_INTERVAL
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    enable_fuzz: bool = True
    enable_short_term: bool = True
    learning_steps: tuple[int, ...] = DEFAULT_LEARNING_STEPS
    relearning_steps: tuple[int, ...] = DEFAULT_RELEARNING_STEPS
    graduation_stability: float = DEFAULT_GRADUATION_STABILITY
    version: str = field(default=DEFAULT_PARAMETERS_VERSION)

    def __post_init__(self):
        if not isinstance(self.weights, Weights):
            raise ConfigError("weights must be a Weights instance")
        if not 0.0 < self.request_retention < 1.0:
            raise ConfigError(
                f"request_retention must be within (0, 1), got {self.request_retention}"
            )
        _check_positive_int("minimum_interval", self.minimum_interval)
        _check_positive_int("maximum_interval", self.maximum_interval)
        if self.minimum_interval > self.maximum_interval:
            raise ConfigError(
                f"minimum_interval ({self.minimum_interval}) exceeds "
                f"maximum_interval ({self.maximum_interval})"
            )
        # Accept lists from callers but store tuples so the table stays hashable.
        object.__setattr__(self, "learning_steps", tuple(self.learning_steps))
        object.__setattr__(self, "relearning_steps", tuple(self.relearning_steps))
        for step in self.learning_steps:
            _check_positive_int("learning step", step)
        for step in self.relearning_steps:
            _check_positive_int("relearning step", step)
        if not self.graduation_stability > 0:
            raise ConfigError("graduation_stability must be positive")
        if not self.version:
            raise ConfigError("Parameters must carry a version label")


def _check_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
