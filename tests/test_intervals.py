"""Tests for interval rounding, bounds and fuzzing."""

import math
from datetime import timedelta

import pytest

from srs_engine.fsrs import (
    ConfigError,
    IntervalPolicy,
    InvalidState,
    Parameters,
    bounded_interval,
    fuzz_range,
    fuzzed_interval,
    review_seed,
)


class TestBoundedInterval:
    def test_rounds_half_up(self):
        assert bounded_interval(12.5) == 13
        assert bounded_interval(12.49) == 12
        assert bounded_interval(2.5) == 3

    def test_clamps_to_default_bounds(self):
        """Should never schedule below one day or beyond the 100-year cap."""
        assert bounded_interval(0.2) == 1
        assert bounded_interval(50000.0) == 36500

    def test_clamps_to_custom_bounds(self):
        assert bounded_interval(1.0, minimum_interval=3, maximum_interval=10) == 3
        assert bounded_interval(99.0, minimum_interval=3, maximum_interval=10) == 10

    def test_rejects_inverted_bounds(self):
        with pytest.raises(ConfigError):
            bounded_interval(5.0, minimum_interval=10, maximum_interval=3)

    def test_rejects_non_finite_interval(self):
        """Should raise InvalidState instead of scheduling NaN/inf days."""
        with pytest.raises(InvalidState):
            bounded_interval(math.inf)
        with pytest.raises(InvalidState):
            bounded_interval(math.nan)


class TestFuzzRange:
    def test_window_for_long_interval(self):
        assert fuzz_range(100) == (93, 107)

    def test_window_respects_maximum(self):
        low, high = fuzz_range(100, maximum_interval=100)
        assert high == 100
        assert low < high

    def test_low_edge_after_elapsed_days(self):
        """Should not fuzz an interval down to the days already elapsed."""
        low, high = fuzz_range(10, elapsed_days=9)
        assert low == 10
        assert high == 12

    def test_window_widens_with_interval(self):
        widths = [high - low for low, high in (fuzz_range(d) for d in (10, 100, 1000))]
        assert widths[0] < widths[1] < widths[2]


class TestFuzzedInterval:
    def test_short_intervals_are_not_fuzzed(self):
        """Should leave intervals under 2.5 days unchanged."""
        for seed in range(20):
            assert fuzzed_interval(1, seed) == 1
            assert fuzzed_interval(2, seed) == 2

    def test_same_seed_same_result(self):
        assert fuzzed_interval(40, "card-7") == fuzzed_interval(40, "card-7")

    def test_stays_within_window(self):
        low, high = fuzz_range(60)
        for seed in range(200):
            assert low <= fuzzed_interval(60, seed) <= high

    def test_spreads_items_across_days(self):
        """Should give different intervals for different seeds."""
        results = {fuzzed_interval(60, seed) for seed in range(100)}
        assert len(results) > 1

    def test_respects_bounds_after_fuzzing(self):
        for seed in range(50):
            assert fuzzed_interval(100, seed, maximum_interval=100) <= 100
            assert fuzzed_interval(5, seed, minimum_interval=5) >= 5


class TestReviewSeed:
    def test_seed_identifies_the_review(self, t0):
        seed = review_seed("card-1", t0, 3)
        assert seed == f"card-1:{t0.isoformat()}:3"
        assert seed != review_seed("card-2", t0, 3)
        assert seed != review_seed("card-1", t0 + timedelta(seconds=1), 3)
        assert seed != review_seed("card-1", t0, 4)

    def test_seed_without_item_id(self, t0):
        assert review_seed(None, t0, 0).startswith(":")


class TestIntervalPolicy:
    def test_copies_bounds_from_parameters(self):
        policy = IntervalPolicy.from_parameters(
            Parameters(minimum_interval=2, maximum_interval=30, enable_fuzz=False)
        )
        assert policy == IntervalPolicy(minimum_interval=2, maximum_interval=30, enable_fuzz=False)

    def test_disabled_fuzz_returns_bounded_value(self):
        policy = IntervalPolicy(enable_fuzz=False)
        assert policy.schedule(12.4, "seed") == 12
        assert policy.schedule(0.3, "seed") == 1

    def test_enabled_fuzz_stays_in_window(self):
        policy = IntervalPolicy()
        low, high = fuzz_range(20)
        for seed in range(50):
            assert low <= policy.schedule(20.2, seed) <= high

    def test_rejects_inverted_bounds(self):
        with pytest.raises(ConfigError):
            IntervalPolicy(minimum_interval=10, maximum_interval=3)
