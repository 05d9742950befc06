"""Tests for due-item selection and deck counts."""

from datetime import timedelta

import pytest

from srs_engine.analytics import deck_stats, due_items
from srs_engine.fsrs import LifecycleState, new_memory_state


@pytest.fixture
def at(make_state, t0):
    """Build a Review item due `offset` days from T0."""

    def _at(offset, item_id=None, lifecycle_state=LifecycleState.REVIEW):
        state = make_state(
            lifecycle_state=lifecycle_state,
            elapsed=10,
            scheduled_days=10 + offset,
            item_id=item_id or f"due{offset:+d}",
        )
        assert state.due == t0 + timedelta(days=offset)
        return state

    return _at


class TestDueItems:
    def test_returns_due_items_oldest_first(self, at, t0):
        items = [at(-1), at(5), at(-2)]
        result = due_items(items, t0)
        assert [item.item_id for item in result] == ["due-2", "due-1"]

    def test_item_due_exactly_now_is_included(self, at, t0):
        assert [item.item_id for item in due_items([at(0)], t0)] == ["due+0"]

    def test_limit_truncates_after_sorting(self, at, t0):
        items = [at(-1), at(-3), at(-2)]
        assert [item.item_id for item in due_items(items, t0, limit=2)] == ["due-3", "due-2"]

    def test_limit_zero_returns_nothing(self, at, t0):
        assert due_items([at(-1)], t0, limit=0) == []

    def test_negative_limit_is_rejected(self, at, t0):
        with pytest.raises(ValueError):
            due_items([at(-1)], t0, limit=-1)

    def test_ties_keep_input_order(self, at, t0):
        items = [at(-1, item_id="b"), at(-1, item_id="a"), at(-1, item_id="c")]
        assert [item.item_id for item in due_items(items, t0)] == ["b", "a", "c"]

    def test_nothing_due(self, at, t0):
        assert due_items([at(1), at(30)], t0) == []
        assert due_items([], t0) == []


class TestDeckStats:
    def test_counts_by_state_and_due(self, at, t0):
        items = [
            new_memory_state(t0, item_id="new"),
            at(-1, item_id="learning", lifecycle_state=LifecycleState.LEARNING),
            at(2, item_id="relearning", lifecycle_state=LifecycleState.RELEARNING),
            at(-3, item_id="overdue"),
            at(0, item_id="due-now"),
            at(4, item_id="later"),
        ]

        stats = deck_stats(items, t0)

        assert stats.total == 6
        assert stats.new_count == 1
        assert stats.learning_count == 2
        assert stats.review_count == 3
        assert stats.due_count == 4
        assert stats.overdue_count == 1

    def test_empty_deck(self, t0):
        assert deck_stats([], t0).as_dict() == {
            "total": 0,
            "new_count": 0,
            "learning_count": 0,
            "review_count": 0,
            "due_count": 0,
            "overdue_count": 0,
        }
