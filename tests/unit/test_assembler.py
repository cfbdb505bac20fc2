"""Unit tests for the steps assembler and templates."""

from collections.abc import Callable

import pytest

from actionflow.core.exceptions import (
    ActionNotFoundError,
    CycleError,
    DuplicateActionIdError,
)
from actionflow.graph.assembler import (
    attach_workflow,
    clone_template,
    from_steps,
    template_actions,
    to_steps,
)
from actionflow.graph.levels import compute_levels
from actionflow.graph.models import ActionTemplate, Step, Workflow


class TestToSteps:
    """Tests for to_steps."""

    def test_one_step_per_level(self, diamond_actions: list) -> None:
        """Test steps mirror levels."""
        steps = to_steps(diamond_actions)

        assert [s.step_id for s in steps] == ["step-1", "step-2", "step-3"]
        assert [s.action_ids for s in steps] == [["A"], ["B", "C"], ["D"]]
        assert steps[0].depends_on == []
        assert steps[2].depends_on == ["step-2"]

    def test_precomputed_levels(self, diamond_actions: list) -> None:
        """Test that supplied levels are used as-is."""
        levels = compute_levels(diamond_actions)

        assert to_steps(diamond_actions, levels) == to_steps(diamond_actions)

    def test_step_prefix_setting(
        self, diamond_actions: list, mock_settings: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the step ID prefix comes from settings."""
        from actionflow.core.config import clear_settings_cache

        monkeypatch.setenv("ACTIONFLOW_STEP_ID_PREFIX", "stage-")
        clear_settings_cache()

        assert to_steps(diamond_actions)[0].step_id == "stage-1"


class TestFromSteps:
    """Tests for from_steps."""

    def test_round_trip(self, diamond_actions: list) -> None:
        """Test flattening preserves IDs, dependencies and completion."""
        actions = [diamond_actions[0].model_copy(update={"completed": True}), *diamond_actions[1:]]
        by_id = {a.id: a for a in actions}

        restored = from_steps(to_steps(actions), by_id)

        assert [(a.id, a.depends_on, a.completed) for a in restored] == [
            (a.id, a.depends_on, a.completed) for a in actions
        ]

    def test_does_not_infer_dependencies(self, make_action: Callable) -> None:
        """Test step adjacency never becomes a dependency edge."""
        actions = [make_action("a"), make_action("b")]
        steps = [
            Step(step_id="s1", action_ids=["a"]),
            Step(step_id="s2", action_ids=["b"], depends_on=["s1"]),
        ]

        restored = from_steps(steps, {a.id: a for a in actions})

        assert [a.depends_on for a in restored] == [[], []]

    def test_unknown_action(self, diamond_actions: list) -> None:
        """Test a step listing an action that does not exist."""
        steps = [Step(step_id="s1", action_ids=["Z"])]

        with pytest.raises(ActionNotFoundError):
            from_steps(steps, {a.id: a for a in diamond_actions})

    def test_listed_twice(self, diamond_actions: list) -> None:
        """Test an action listed in two steps."""
        steps = [Step(step_id="s1", action_ids=["A"]), Step(step_id="s2", action_ids=["A"])]

        with pytest.raises(DuplicateActionIdError):
            from_steps(steps, {a.id: a for a in diamond_actions})

    def test_unlisted_actions_kept(self, diamond_actions: list) -> None:
        """Test actions left out of every step are appended, not dropped."""
        steps = [Step(step_id="s1", action_ids=["A", "B"])]

        restored = from_steps(steps, {a.id: a for a in diamond_actions})

        assert [a.id for a in restored] == ["A", "B", "C", "D"]

    def test_cyclic_result_rejected(self, make_action: Callable) -> None:
        """Test the flattened collection is validated."""
        actions = [make_action("a", ["b"]), make_action("b", ["a"])]
        steps = [Step(step_id="s1", action_ids=["a", "b"])]

        with pytest.raises(CycleError):
            from_steps(steps, {a.id: a for a in actions})


class TestTemplates:
    """Tests for template workflow helpers."""

    def test_attach_workflow(self, diamond_actions: list) -> None:
        """Test the derived workflow of a template."""
        template = attach_workflow(ActionTemplate(title="Review", elements=diamond_actions))

        assert template.workflow is not None
        assert [s.action_ids for s in template.workflow.steps] == [["A"], ["B", "C"], ["D"]]

    def test_template_actions_follow_workflow(self, diamond_actions: list) -> None:
        """Test flattening uses the stored step order."""
        workflow = Workflow(
            steps=[
                Step(step_id="s1", action_ids=["A", "C"]),
                Step(step_id="s2", action_ids=["B", "D"]),
            ]
        )
        template = ActionTemplate(title="Review", elements=diamond_actions, workflow=workflow)

        assert [a.id for a in template_actions(template)] == ["A", "C", "B", "D"]

    def test_template_actions_without_workflow(self, diamond_actions: list) -> None:
        """Test a template with no workflow returns its elements."""
        template = ActionTemplate(title="Review", elements=diamond_actions)

        assert [a.id for a in template_actions(template)] == ["A", "B", "C", "D"]

    def test_clone_template(self, diamond_actions: list) -> None:
        """Test cloning renames, re-keys and re-derives the workflow."""
        template = ActionTemplate(id="tpl-1", title="Review", elements=diamond_actions, tags=["video"])
        ids = iter(["n1", "n2", "n3", "n4"])

        clone = clone_template(template, id_factory=lambda: next(ids))

        assert clone.id is None
        assert clone.title == "Review (Copy)"
        assert clone.tags == ["video"]
        assert [a.id for a in clone.elements] == ["n1", "n2", "n3", "n4"]
        assert clone.elements[3].depends_on == ["n2", "n3"]
        assert clone.workflow is not None
        assert clone.workflow.steps[1].action_ids == ["n2", "n3"]

    def test_clone_template_title(self, diamond_actions: list) -> None:
        """Test an explicit clone title."""
        template = ActionTemplate(title="Review", elements=diamond_actions)

        assert clone_template(template, title="Review v2").title == "Review v2"
