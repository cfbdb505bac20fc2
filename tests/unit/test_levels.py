"""Unit tests for the level organizer."""

from collections.abc import Callable

import pytest

from actionflow.core.exceptions import (
    CycleError,
    DuplicateActionIdError,
    ReferentialIntegrityError,
)
from actionflow.graph.levels import (
    compute_levels,
    critical_path,
    current_level_index,
    level_index,
)


class TestComputeLevels:
    """Tests for compute_levels."""

    def test_diamond(self, diamond_actions: list) -> None:
        """Test the canonical diamond layering."""
        levels = compute_levels(diamond_actions)

        assert [level.action_ids for level in levels] == [["A"], ["B", "C"], ["D"]]
        assert [level.index for level in levels] == [0, 1, 2]

    def test_ties_keep_input_order(self, make_action: Callable) -> None:
        """Test that actions within a level keep their input order."""
        actions = [make_action("z"), make_action("m"), make_action("a")]

        assert compute_levels(actions)[0].action_ids == ["z", "m", "a"]

    def test_dependency_listed_later(self, make_action: Callable) -> None:
        """Test that input order does not affect level placement."""
        actions = [make_action("D", ["B"]), make_action("B", ["A"]), make_action("A")]

        assert [lv.action_ids for lv in compute_levels(actions)] == [["A"], ["B"], ["D"]]

    def test_greedy_placement(self, make_action: Callable) -> None:
        """Test that each action sits at the earliest possible level."""
        actions = [
            make_action("a"),
            make_action("b", ["a"]),
            make_action("c", ["b"]),
            make_action("x"),
            make_action("y", ["a", "x"]),
        ]

        levels = compute_levels(actions)

        assert [lv.action_ids for lv in levels] == [["a", "x"], ["b", "y"], ["c"]]

    def test_dependencies_in_earlier_levels(self, diamond_actions: list) -> None:
        """Test level monotonicity."""
        levels = compute_levels(diamond_actions)
        where = {aid: lv.index for lv in levels for aid in lv.action_ids}

        for action in diamond_actions:
            for dep in action.depends_on:
                assert where[dep] < where[action.id]

    def test_deterministic(self, diamond_actions: list) -> None:
        """Test that re-running gives the same levels."""
        assert compute_levels(diamond_actions) == compute_levels(diamond_actions)

    def test_empty(self) -> None:
        """Test an empty collection has no levels."""
        assert compute_levels([]) == []

    def test_cycle_fails(self, make_action: Callable) -> None:
        """Test that cyclic actions are not silently dropped."""
        actions = [make_action("ok"), make_action("a", ["b"]), make_action("b", ["a"])]

        with pytest.raises(CycleError):
            compute_levels(actions)

    def test_dangling_reference_fails(self, make_action: Callable) -> None:
        """Test that an unknown dependency is reported."""
        with pytest.raises(ReferentialIntegrityError):
            compute_levels([make_action("a", ["ghost"])])

    def test_duplicate_ids_fail(self, make_action: Callable) -> None:
        """Test that duplicate IDs are reported."""
        with pytest.raises(DuplicateActionIdError):
            compute_levels([make_action("a"), make_action("a")])


class TestLevelHelpers:
    """Tests for level lookups and the critical path."""

    def test_level_index(self, diamond_actions: list) -> None:
        """Test finding the level of an action."""
        levels = compute_levels(diamond_actions)

        assert level_index(levels, "C") == 1
        assert level_index(levels, "Z") is None

    def test_current_level_index(self, diamond_actions: list) -> None:
        """Test progress through levels."""
        assert current_level_index(compute_levels(diamond_actions)) == 0

        done = [a.model_copy(update={"completed": True}) for a in diamond_actions[:2]]
        partial = compute_levels([*done, *diamond_actions[2:]])
        assert current_level_index(partial) == 1

        finished = [a.model_copy(update={"completed": True}) for a in diamond_actions]
        assert current_level_index(compute_levels(finished)) == 3

    def test_critical_path(self, make_action: Callable) -> None:
        """Test that the longest dependency chain is returned."""
        actions = [
            make_action("a"),
            make_action("b", ["a"]),
            make_action("c", ["b"]),
            make_action("x"),
            make_action("y", ["x"]),
        ]

        assert critical_path(actions) == ["a", "b", "c"]

    def test_critical_path_empty(self) -> None:
        """Test the critical path of nothing."""
        assert critical_path([]) == []
