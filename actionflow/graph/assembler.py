"""Template/task assembler - steps view over a flat action collection.

Authoring tools group actions into ordered steps. Steps are derived from
execution levels and never feed back into ``depends_on``: the dependency
edges stored on each action stay the single source of truth.
"""

from collections.abc import Callable, Mapping, Sequence

from loguru import logger

from actionflow.core.config import get_settings
from actionflow.core.exceptions import ActionNotFoundError, DuplicateActionIdError
from actionflow.graph.dependency_graph import clone_actions, validate_graph
from actionflow.graph.levels import compute_levels
from actionflow.graph.models import Action, ActionTemplate, Level, Step, Workflow


def to_steps(
    actions: Sequence[Action],
    levels: Sequence[Level] | None = None,
) -> list[Step]:
    """
    Build one step per level, each listing its action IDs in input order.

    Args:
        actions: The action collection.
        levels: Precomputed levels for ``actions``; computed when omitted.

    Returns:
        Steps ``<prefix>1..<prefix>n``; every step after the first depends
        on the step before it.

    Raises:
        GraphError: If levels have to be computed and the collection is invalid.
    """
    if levels is None:
        levels = compute_levels(actions)

    prefix = get_settings().actionflow_step_id_prefix
    steps: list[Step] = []
    for level in levels:
        step_id = f"{prefix}{level.index + 1}"
        depends_on = [steps[-1].step_id] if steps else []
        steps.append(Step(step_id=step_id, action_ids=level.action_ids, depends_on=depends_on))

    return steps


def from_steps(steps: Sequence[Step], actions_by_id: Mapping[str, Action]) -> list[Action]:
    """
    Flatten steps back into a single action collection.

    Actions keep their own ``depends_on``; step adjacency is ignored.
    Actions present in ``actions_by_id`` but listed in no step are appended
    after the stepped ones so that nothing is dropped.

    Args:
        steps: Ordered steps.
        actions_by_id: Every action of the collection keyed by ID.

    Returns:
        The validated action collection.

    Raises:
        ActionNotFoundError: If a step lists an unknown action.
        DuplicateActionIdError: If an action is listed in more than one place.
        GraphError: If the resulting collection is invalid.
    """
    flattened: list[Action] = []
    seen: set[str] = set()

    for step in steps:
        for action_id in step.action_ids:
            if action_id in seen:
                raise DuplicateActionIdError(action_id)
            action = actions_by_id.get(action_id)
            if action is None:
                raise ActionNotFoundError(action_id)
            seen.add(action_id)
            flattened.append(action)

    unlisted = [action for aid, action in actions_by_id.items() if aid not in seen]
    if unlisted:
        logger.warning(f"Actions missing from steps appended: {[a.id for a in unlisted]}")
        flattened.extend(unlisted)

    validate_graph(flattened)
    return flattened


# =============================================================================
# TEMPLATES
# =============================================================================


def attach_workflow(template: ActionTemplate) -> ActionTemplate:
    """
    Validate a template's elements and derive its workflow steps.

    Raises:
        GraphError: If the elements do not form a valid graph.
    """
    steps = to_steps(template.elements)
    logger.info(f"Template {template.title!r}: {len(steps)} steps")
    return template.model_copy(update={"workflow": Workflow(steps=steps)})


def template_actions(template: ActionTemplate) -> list[Action]:
    """
    Flat action collection of a template.

    Uses the stored workflow order when present, otherwise the elements
    as they are.

    Raises:
        GraphError: If the template is invalid.
    """
    if template.workflow is None or not template.workflow.steps:
        validate_graph(template.elements)
        return list(template.elements)

    by_id = {action.id: action for action in template.elements}
    if len(by_id) != len(template.elements):
        validate_graph(template.elements)
    return from_steps(template.workflow.steps, by_id)


def clone_template(
    template: ActionTemplate,
    title: str | None = None,
    id_factory: Callable[[], str] | None = None,
) -> ActionTemplate:
    """
    Copy a template with fresh action IDs.

    The copy has no template ID (the store assigns one), is titled
    ``"<title> (Copy)"`` unless ``title`` is given, and carries a workflow
    derived from the cloned elements.

    Raises:
        GraphError: If the template is invalid.
    """
    elements = clone_actions(template_actions(template), id_factory)
    clone = template.model_copy(
        update={
            "id": None,
            "title": title or f"{template.title} (Copy)",
            "elements": elements,
        }
    )
    return attach_workflow(clone)
