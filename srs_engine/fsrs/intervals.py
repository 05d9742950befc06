"""
Interval Policy

Turns a raw "days until target retention" value into a whole-day interval
that is safe to schedule: rounded, clamped to the configured bounds, and
optionally fuzzed so that items learned together do not all come due on
the same day.

Fuzzing is deterministic for a given seed. In production the seed comes
from `review_seed` (item id + review time + rep count), so schedules do
not repeat a visible pattern.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from srs_engine.fsrs.constants import (
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_MINIMUM_INTERVAL,
    FUZZ_RANGES,
    FUZZ_THRESHOLD_DAYS,
)
from srs_engine.fsrs.errors import ConfigError, InvalidState
from srs_engine.fsrs.parameters import Parameters


Seed = Union[int, str, bytes]


def bounded_interval(
    raw_days: float,
    minimum_interval: int = DEFAULT_MINIMUM_INTERVAL,
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
) -> int:
    """
    Round a raw interval (half-up) and clamp it to [minimum, maximum].

    Raises:
        ConfigError: if minimum_interval > maximum_interval
        InvalidState: if raw_days is not a finite number
    """
    if minimum_interval > maximum_interval:
        raise ConfigError(
            f"minimum_interval ({minimum_interval}) exceeds "
            f"maximum_interval ({maximum_interval})"
        )
    if not math.isfinite(raw_days):
        raise InvalidState(f"Interval must be finite, got {raw_days!r}")

    rounded = math.floor(raw_days + 0.5)
    return int(min(max(rounded, minimum_interval), maximum_interval))


def fuzz_range(
    interval: float,
    elapsed_days: int = 0,
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
) -> tuple[int, int]:
    """
    Inclusive (low, high) window an interval may be fuzzed into.

    The window is one day wide on each side plus a share of the interval
    per FUZZ_RANGES band, so longer intervals get proportionally more jitter.
    The low edge never drops below 2 days, nor to or below the days already
    elapsed when the interval is longer than that.
    """
    delta = 1.0
    for start, end, factor in FUZZ_RANGES:
        delta += factor * max(min(interval, end) - start, 0.0)

    interval = min(interval, maximum_interval)
    low = max(2, math.floor(interval - delta + 0.5))
    high = min(math.floor(interval + delta + 0.5), maximum_interval)
    if interval > elapsed_days:
        low = max(low, elapsed_days + 1)
    low = min(low, high)
    return low, high


def fuzzed_interval(
    interval: int,
    seed: Seed,
    elapsed_days: int = 0,
    minimum_interval: int = DEFAULT_MINIMUM_INTERVAL,
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
) -> int:
    """
    Apply deterministic jitter to a bounded interval.

    Args:
        interval: Interval in days (already bounded)
        seed: Any str/int/bytes seed; equal seeds give equal results
        elapsed_days: Days since the previous review
        minimum_interval: Lower bound re-applied after fuzzing
        maximum_interval: Upper bound re-applied after fuzzing

    Returns:
        Fuzzed interval; unchanged below FUZZ_THRESHOLD_DAYS
    """
    if interval < FUZZ_THRESHOLD_DAYS:
        return interval

    low, high = fuzz_range(interval, elapsed_days, maximum_interval)
    generator = random.Random(seed)
    fuzzed = low + math.floor(generator.random() * (high - low + 1))
    return bounded_interval(fuzzed, minimum_interval, maximum_interval)


def review_seed(item_id: Optional[str], reviewed_at: datetime, reps: int) -> str:
    """
    Production fuzz seed derived from review identity.
    """
    return f"{item_id or ''}:{reviewed_at.isoformat()}:{reps}"


@dataclass(frozen=True)
class IntervalPolicy:
    """
    Interval bounds and fuzzing switch taken from a Parameters table.
    """
    minimum_interval: int = DEFAULT_MINIMUM_INTERVAL
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    enable_fuzz: bool = True

    def __post_init__(self):
        if self.minimum_interval > self.maximum_interval:
            raise ConfigError(
                f"minimum_interval ({self.minimum_interval}) exceeds "
                f"maximum_interval ({self.maximum_interval})"
            )

    @classmethod
    def from_parameters(cls, parameters: Parameters) -> "IntervalPolicy":
        return cls(
            minimum_interval=parameters.minimum_interval,
            maximum_interval=parameters.maximum_interval,
            enable_fuzz=parameters.enable_fuzz,
        )

    def bounded(self, raw_days: float) -> int:
        return bounded_interval(raw_days, self.minimum_interval, self.maximum_interval)

    def fuzzed(self, interval: int, seed: Seed, elapsed_days: int = 0) -> int:
        if not self.enable_fuzz:
            return interval
        return fuzzed_interval(
            interval,
            seed,
            elapsed_days=elapsed_days,
            minimum_interval=self.minimum_interval,
            maximum_interval=self.maximum_interval,
        )

    def schedule(self, raw_days: float, seed: Seed, elapsed_days: int = 0) -> int:
        """Bound then fuzz a raw review interval."""
        return self.fuzzed(self.bounded(raw_days), seed, elapsed_days)
