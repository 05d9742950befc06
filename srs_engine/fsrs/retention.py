"""
Retention Model

Pure memory-model functions: the forgetting curve and the stability and
difficulty updates applied at each review.

Forgetting curve (FSRS-6 power law):
    R(t, S) = (1 + F * t / S) ^ (-decay),   F = 0.9 ^ (-1 / decay) - 1

F is chosen so that R(S, S) = 0.9: stability is the number of days until
recall probability falls to 90%.

Key principles:
- Successful recall grows stability most when it was unlikely (low R)
- Failure resets stability through a separate lapse formula
- Difficulty drifts with the rating and slowly reverts toward "easy"
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import TYPE_CHECKING

from srs_engine.fsrs.clock import days_between
from srs_engine.fsrs.constants import (
    D_MAX,
    D_MIN,
    DEFAULT_REQUEST_RETENTION,
    S_MAX,
    S_MIN,
    LifecycleState,
    Rating,
)
from srs_engine.fsrs.errors import InvalidState
from srs_engine.fsrs.parameters import DEFAULT_WEIGHTS, Weights

if TYPE_CHECKING:
    from srs_engine.fsrs.memory_state import MemoryState


def decay_factor(decay: float) -> float:
    """Curve factor F for a given decay so that R(S, S) == 0.9."""
    return 0.9 ** (1.0 / -decay) - 1.0


def retrievability(
    elapsed_days: float,
    stability: float,
    decay: float = DEFAULT_WEIGHTS.decay
) -> float:
    """
    Probability of successful recall after `elapsed_days`.

    Interpretation:
    - Immediately after review: R = 1.0
    - At t = S: R = 0.9
    - Monotonically non-increasing in t, non-decreasing in S

    Args:
        elapsed_days: Time since the last review, in days
        stability: Current stability in days
        decay: Curve decay weight (w20)

    Returns:
        Retrievability between 0 and 1

    Raises:
        InvalidState: if stability <= 0 or elapsed_days < 0
    """
    if not stability > 0:
        raise InvalidState(f"Stability must be positive, got {stability!r}")
    if not elapsed_days >= 0:
        raise InvalidState(f"Elapsed days cannot be negative, got {elapsed_days!r}")

    factor = decay_factor(decay)
    return (1.0 + factor * elapsed_days / stability) ** -decay


def interval_for_retention(
    stability: float,
    request_retention: float = DEFAULT_REQUEST_RETENTION,
    decay: float = DEFAULT_WEIGHTS.decay
) -> float:
    """
    Raw number of days until retrievability drops to `request_retention`.

    This inverts the forgetting curve; at 90% retention it returns S.
    """
    if not stability > 0:
        raise InvalidState(f"Stability must be positive, got {stability!r}")

    factor = decay_factor(decay)
    return stability / factor * (request_retention ** (1.0 / -decay) - 1.0)


def current_retrievability(
    state: MemoryState,
    now: datetime,
    weights: Weights = DEFAULT_WEIGHTS
) -> float:
    """
    Retrievability of an item at `now` (0.0 for never-reviewed items).
    """
    if state.lifecycle_state == LifecycleState.NEW or state.last_review is None:
        return 0.0
    elapsed = max(0, days_between(state.last_review, now))
    return retrievability(elapsed, state.stability, weights.decay)


# ---- Initial values ----

def initial_stability(rating: Rating, weights: Weights = DEFAULT_WEIGHTS) -> float:
    """Stability after the very first review: w0..w3 by rating."""
    return {
        Rating.AGAIN: weights.initial_stability_again,
        Rating.HARD: weights.initial_stability_hard,
        Rating.GOOD: weights.initial_stability_good,
        Rating.EASY: weights.initial_stability_easy,
    }[rating]


def initial_difficulty(
    rating: Rating,
    weights: Weights = DEFAULT_WEIGHTS,
    clamp: bool = True
) -> float:
    """
    Difficulty after the very first review.

    Formula:
        D0(G) = w4 - exp(w5 * (G - 1)) + 1

    The unclamped Easy value is the mean-reversion target used by
    next_difficulty.
    """
    value = (
        weights.initial_difficulty
        - math.exp(weights.initial_difficulty_slope * (int(rating) - 1))
        + 1.0
    )
    return _clamp_difficulty(value) if clamp else value


# ---- Stability ----

def recall_stability(
    stability: float,
    difficulty: float,
    retrievability_at_review: float,
    rating: Rating,
    weights: Weights = DEFAULT_WEIGHTS
) -> float:
    """
    Stability after a successful recall (Hard/Good/Easy).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^(-w9) * (e^((1 - R) * w10) - 1)
                 * hard_penalty * easy_bonus)

    The (e^((1 - R) * w10) - 1) term rewards well-spaced, risky success.
    """
    hard_penalty = weights.hard_penalty if rating == Rating.HARD else 1.0
    easy_bonus = weights.easy_bonus if rating == Rating.EASY else 1.0

    growth = (
        math.exp(weights.recall_growth)
        * (11.0 - difficulty)
        * stability ** -weights.recall_stability_decay
        * (math.exp((1.0 - retrievability_at_review) * weights.recall_retrievability_gain) - 1.0)
        * hard_penalty
        * easy_bonus
    )
    return stability * (1.0 + growth)


def forget_stability(
    stability: float,
    difficulty: float,
    retrievability_at_review: float,
    weights: Weights = DEFAULT_WEIGHTS
) -> float:
    """
    Stability after a lapse (Again).

    Formula:
        S_long  = w11 * D^(-w12) * ((S + 1)^w13 - 1) * e^((1 - R) * w14)
        S_short = S / e^(w17 * w18)
        S'      = min(S_long, S_short)

    The short-term cap guarantees a lapse never raises stability.
    """
    long_term = (
        weights.forget_scale
        * difficulty ** -weights.forget_difficulty_exponent
        * ((stability + 1.0) ** weights.forget_stability_exponent - 1.0)
        * math.exp((1.0 - retrievability_at_review) * weights.forget_retrievability_gain)
    )
    short_term_cap = stability / math.exp(weights.short_term_rate * weights.short_term_offset)
    return min(long_term, short_term_cap)


def short_term_stability(
    stability: float,
    rating: Rating,
    weights: Weights = DEFAULT_WEIGHTS
) -> float:
    """
    Stability after a same-day review.

    Formula:
        S' = S * e^(w17 * (G - 3 + w18)) * S^(-w19)

    Good and Easy never decrease stability on the same day.
    """
    increase = (
        math.exp(weights.short_term_rate * (int(rating) - 3 + weights.short_term_offset))
        * stability ** -weights.short_term_stability_decay
    )
    if rating >= Rating.GOOD:
        increase = max(increase, 1.0)
    return stability * increase


def next_stability(
    state: MemoryState,
    rating: Rating,
    retrievability_at_review: float,
    weights: Weights = DEFAULT_WEIGHTS,
    same_day: bool = False
) -> float:
    """
    Updated stability for a review of `state` with `rating`.

    Args:
        state: Item state before the review
        rating: Rating given
        retrievability_at_review: R at the moment of review
        weights: Weight table
        same_day: True for a short-term (same-day) review

    Returns:
        New stability, clamped to [S_MIN, S_MAX]
    """
    if not state.stability > 0:
        raise InvalidState(f"Stability must be positive, got {state.stability!r}")

    if state.lifecycle_state == LifecycleState.NEW:
        new_stability = initial_stability(rating, weights)
    elif same_day:
        new_stability = short_term_stability(state.stability, rating, weights)
    elif rating == Rating.AGAIN:
        new_stability = forget_stability(
            state.stability, state.difficulty, retrievability_at_review, weights
        )
    else:
        new_stability = recall_stability(
            state.stability, state.difficulty, retrievability_at_review, rating, weights
        )

    return min(S_MAX, max(S_MIN, new_stability))


# ---- Difficulty ----

def next_difficulty(
    state: MemoryState,
    rating: Rating,
    weights: Weights = DEFAULT_WEIGHTS
) -> float:
    """
    Updated difficulty for a review of `state` with `rating`.

    Formula:
        delta = -w6 * (G - 3)
        D'    = D + delta * (10 - D) / 9           (linear damping)
        D''   = w7 * D0(Easy) + (1 - w7) * D'      (mean reversion)

    Conceptually:
    - Again/Hard make the item harder, Easy makes it easier
    - Changes shrink as D approaches the top of the scale
    - Repeated ratings slowly pull D back toward the easy baseline

    Returns:
        New difficulty (clipped to [1, 10])
    """
    if state.lifecycle_state == LifecycleState.NEW:
        return initial_difficulty(rating, weights)

    delta = -weights.difficulty_step * (int(rating) - 3)
    damped = state.difficulty + delta * (10.0 - state.difficulty) / 9.0
    target = initial_difficulty(Rating.EASY, weights, clamp=False)
    reverted = weights.mean_reversion * target + (1.0 - weights.mean_reversion) * damped
    return _clamp_difficulty(reverted)


def _clamp_difficulty(value: float) -> float:
    return max(D_MIN, min(D_MAX, value))
