"""
Scheduler - FSRS Algorithm Logic

Pure scheduling and state transitions (no database calls).

Main workflow:
1. Validate the incoming state (caller loads it)
2. Calculate elapsed days and retrievability
3. Update stability and difficulty
4. Look up the lifecycle transition for (state, rating)
5. Compute the bounded/fuzzed interval
6. Return the new state + a ReviewLog (caller persists both)

`preview_all_outcomes` runs the same computation for every rating, and
`review` picks one of its results, so the two always agree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from srs_engine.fsrs.clock import Clock, days_between, is_aware, utc_now
from srs_engine.fsrs.constants import LifecycleState, Rating
from srs_engine.fsrs.errors import ConfigError, InvalidRating, InvalidState
from srs_engine.fsrs.intervals import IntervalPolicy, Seed, review_seed
from srs_engine.fsrs.memory_state import MemoryState, validate_memory_state
from srs_engine.fsrs.parameters import Parameters
from srs_engine.fsrs.retention import (
    current_retrievability,
    interval_for_retention,
    next_difficulty,
    next_stability,
    retrievability,
)
from srs_engine.fsrs.review_log import ReviewLog

logger = logging.getLogger(__name__)


# ---- Transition table ----

class StepAction(Enum):
    """What a (lifecycle state, rating) pair does to the item."""
    RESET = "reset"        # Back to the first learning step
    LAPSE = "lapse"        # Forgotten after graduating: first relearning step, lapses += 1
    HOLD = "hold"          # Repeat the current step (or graduate on stability)
    ADVANCE = "advance"    # Next step, graduating when the steps run out
    GRADUATE = "graduate"  # Straight to Review
    RECALL = "recall"      # Stay in Review with a new interval


TRANSITIONS: dict[tuple[LifecycleState, Rating], StepAction] = {
    (LifecycleState.NEW, Rating.AGAIN): StepAction.RESET,
    (LifecycleState.NEW, Rating.HARD): StepAction.HOLD,
    (LifecycleState.NEW, Rating.GOOD): StepAction.ADVANCE,
    (LifecycleState.NEW, Rating.EASY): StepAction.GRADUATE,

    (LifecycleState.LEARNING, Rating.AGAIN): StepAction.RESET,
    (LifecycleState.LEARNING, Rating.HARD): StepAction.HOLD,
    (LifecycleState.LEARNING, Rating.GOOD): StepAction.ADVANCE,
    (LifecycleState.LEARNING, Rating.EASY): StepAction.GRADUATE,

    (LifecycleState.REVIEW, Rating.AGAIN): StepAction.LAPSE,
    (LifecycleState.REVIEW, Rating.HARD): StepAction.RECALL,
    (LifecycleState.REVIEW, Rating.GOOD): StepAction.RECALL,
    (LifecycleState.REVIEW, Rating.EASY): StepAction.RECALL,

    (LifecycleState.RELEARNING, Rating.AGAIN): StepAction.LAPSE,
    (LifecycleState.RELEARNING, Rating.HARD): StepAction.HOLD,
    (LifecycleState.RELEARNING, Rating.GOOD): StepAction.ADVANCE,
    (LifecycleState.RELEARNING, Rating.EASY): StepAction.GRADUATE,
}


def _check_transition_table() -> None:
    missing = [
        (state.name, rating.name)
        for state in LifecycleState
        for rating in Rating
        if (state, rating) not in TRANSITIONS
    ]
    if missing:
        raise RuntimeError(f"Transition table has no entry for {missing}")


_check_transition_table()


def coerce_rating(value) -> Rating:
    """
    Convert a caller-supplied rating (Rating or 1-4) to a Rating.

    Raises:
        InvalidRating: for anything outside Again/Hard/Good/Easy
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRating(f"Invalid rating: {value!r}")
    try:
        return Rating(value)
    except (ValueError, TypeError):
        raise InvalidRating(f"Invalid rating: {value!r}") from None


@dataclass(frozen=True)
class _Plan:
    lifecycle_state: LifecycleState
    learning_step: int
    stability: float
    difficulty: float
    lapsed: bool


class Scheduler:
    """
    FSRS scheduler bound to one immutable Parameters table.

    Args:
        parameters: Weight table and scheduling knobs (defaults if omitted)
        clock: Time source used when a call omits `now`
    """

    def __init__(self, parameters: Optional[Parameters] = None, clock: Clock = utc_now):
        if parameters is None:
            parameters = Parameters()
        if not isinstance(parameters, Parameters):
            raise ConfigError(f"Expected Parameters, got {type(parameters).__name__}")
        self.parameters = parameters
        self.intervals = IntervalPolicy.from_parameters(parameters)
        self.clock = clock

    # ---- Public API ----

    def review(
        self,
        state: MemoryState,
        rating: Rating,
        now: Optional[datetime] = None,
        seed: Optional[Seed] = None
    ) -> tuple[MemoryState, ReviewLog]:
        """
        Apply a review and return the new state plus its log entry.

        The input state is never modified.

        Args:
            state: Current item state
            rating: Rating given (Rating or 1-4)
            now: Review time (defaults to the scheduler clock)
            seed: Fuzz seed (defaults to one derived from item id, time and reps)

        Returns:
            Tuple of (new_state, review_log)

        Raises:
            InvalidRating: rating outside the four values
            InvalidState: state breaks an invariant, or now < last_review
        """
        rating = coerce_rating(rating)
        now = self._resolve_now(now)

        outcomes, elapsed_days, recall_probability = self._evaluate(state, now, seed)
        new_state = outcomes[rating]

        log = ReviewLog(
            item_id=state.item_id,
            rating=rating,
            state_before=state,
            state_after=new_state,
            reviewed_at=now,
            elapsed_days=elapsed_days,
            retrievability=recall_probability,
            parameters_version=self.parameters.version,
        )

        logger.debug(
            "Reviewed item %s with %s: %s -> %s, next review in %d days",
            state.item_id,
            rating.name,
            state.lifecycle_state.name,
            new_state.lifecycle_state.name,
            new_state.scheduled_days,
        )
        return new_state, log

    def preview_all_outcomes(
        self,
        state: MemoryState,
        now: Optional[datetime] = None,
        seed: Optional[Seed] = None
    ) -> dict[Rating, MemoryState]:
        """
        Next state for every rating, without committing to any.

        Used to show "if you press Easy, next review is in 9 days".
        """
        outcomes, _, _ = self._evaluate(state, self._resolve_now(now), seed)
        return outcomes

    def rollback(self, state: MemoryState, log: ReviewLog) -> MemoryState:
        """
        Undo a review: return the state that existed before `log`.

        Raises:
            InvalidState: if `state` is not the result recorded in `log`
        """
        if state != log.state_after:
            raise InvalidState("Only the latest review of an item can be undone")

        logger.debug(
            "Rolled back %s review of item %s made at %s",
            log.rating.name,
            log.item_id,
            log.reviewed_at.isoformat(),
        )
        return log.state_before

    def retrievability(self, state: MemoryState, now: Optional[datetime] = None) -> float:
        """Current recall probability of an item (0.0 for new items)."""
        return current_retrievability(state, self._resolve_now(now), self.parameters.weights)

    # ---- Internals ----

    def _resolve_now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self.clock()

    def _evaluate(
        self,
        state: MemoryState,
        now: datetime,
        seed: Optional[Seed]
    ) -> tuple[dict[Rating, MemoryState], int, float]:
        validate_memory_state(state)
        if not isinstance(now, datetime):
            raise InvalidState(f"Review time must be a datetime, got {now!r}")
        if state.last_review is not None and is_aware(now) != is_aware(state.last_review):
            raise InvalidState("Review time and last review mix naive and timezone-aware datetimes")
        if state.last_review is not None and now < state.last_review:
            raise InvalidState("Review time precedes the item's last review")

        params = self.parameters
        weights = params.weights

        elapsed_days = days_between(state.last_review or now, now)
        if state.is_new:
            recall_probability = 1.0
        else:
            recall_probability = retrievability(elapsed_days, state.stability, weights.decay)
        same_day = params.enable_short_term and not state.is_new and elapsed_days == 0

        if seed is None:
            seed = review_seed(state.item_id, now, state.reps)

        plans: dict[Rating, _Plan] = {}
        intervals: dict[Rating, int] = {}
        for rating in Rating:
            stability = next_stability(
                state, rating, recall_probability, weights, same_day=same_day
            )
            difficulty = next_difficulty(state, rating, weights)
            lifecycle_state, step = self._next_position(state, rating, stability)

            if lifecycle_state == LifecycleState.REVIEW:
                raw_days = interval_for_retention(
                    stability, params.request_retention, weights.decay
                )
                intervals[rating] = self.intervals.schedule(raw_days, seed, elapsed_days)
            else:
                intervals[rating] = self._step_interval(lifecycle_state, step)

            plans[rating] = _Plan(
                lifecycle_state=lifecycle_state,
                learning_step=step,
                stability=stability,
                difficulty=difficulty,
                lapsed=TRANSITIONS[(state.lifecycle_state, rating)] is StepAction.LAPSE,
            )

        if state.lifecycle_state == LifecycleState.REVIEW:
            intervals = self._order_review_intervals(intervals)

        outcomes = {
            rating: self._build_state(state, plans[rating], intervals[rating], now, elapsed_days)
            for rating in Rating
        }
        return outcomes, elapsed_days, recall_probability

    def _next_position(
        self,
        state: MemoryState,
        rating: Rating,
        new_stability: float
    ) -> tuple[LifecycleState, int]:
        """
        Lifecycle state and step index after rating `state`.
        """
        action = TRANSITIONS[(state.lifecycle_state, rating)]

        if action is StepAction.RESET:
            return LifecycleState.LEARNING, 0
        if action is StepAction.LAPSE:
            return LifecycleState.RELEARNING, 0
        if action in (StepAction.GRADUATE, StepAction.RECALL):
            return LifecycleState.REVIEW, 0

        # HOLD / ADVANCE on a step table
        params = self.parameters
        if not params.enable_short_term or new_stability >= params.graduation_stability:
            return LifecycleState.REVIEW, 0

        if state.lifecycle_state == LifecycleState.RELEARNING:
            track = LifecycleState.RELEARNING
        else:
            track = LifecycleState.LEARNING

        if state.is_new:
            step = 0
        elif action is StepAction.HOLD:
            step = state.learning_step
        else:
            step = state.learning_step + 1

        if step >= len(self._steps(track)):
            return LifecycleState.REVIEW, 0
        return track, step

    def _steps(self, track: LifecycleState) -> tuple[int, ...]:
        if track == LifecycleState.RELEARNING:
            return self.parameters.relearning_steps
        return self.parameters.learning_steps

    def _step_interval(self, track: LifecycleState, step: int) -> int:
        steps = self._steps(track)
        # An empty step table still needs a first interval after a failure.
        raw_days = steps[step] if step < len(steps) else self.parameters.minimum_interval
        return self.intervals.bounded(raw_days)

    def _order_review_intervals(self, intervals: dict[Rating, int]) -> dict[Rating, int]:
        """
        Keep Review intervals ordered hard <= good < easy.
        """
        cap = self.parameters.maximum_interval
        hard = min(intervals[Rating.HARD], intervals[Rating.GOOD])
        good = max(intervals[Rating.GOOD], hard + 1)
        easy = max(intervals[Rating.EASY], good + 1)

        ordered = dict(intervals)
        ordered[Rating.HARD] = min(hard, cap)
        ordered[Rating.GOOD] = min(good, cap)
        ordered[Rating.EASY] = min(easy, cap)
        return ordered

    def _build_state(
        self,
        state: MemoryState,
        plan: _Plan,
        interval: int,
        now: datetime,
        elapsed_days: int
    ) -> MemoryState:
        return MemoryState(
            due=now + timedelta(days=interval),
            stability=plan.stability,
            difficulty=plan.difficulty,
            elapsed_days=elapsed_days,
            scheduled_days=interval,
            reps=state.reps + 1,
            lapses=state.lapses + 1 if plan.lapsed else state.lapses,
            lifecycle_state=plan.lifecycle_state,
            last_review=now,
            learning_step=plan.learning_step,
            item_id=state.item_id,
        )
