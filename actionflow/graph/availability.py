"""Availability evaluator - classifies actions against completion state.

Pure functions of the snapshot they receive. A dependency that is not
present in the collection counts as incomplete, so a malformed snapshot
never unlocks work.
"""

from collections.abc import Sequence

from actionflow.graph.levels import compute_levels, current_level_index
from actionflow.graph.models import Action, ActionState, Availability, WorkflowStats


def _completed_ids(actions: Sequence[Action]) -> set[str]:
    return {action.id for action in actions if action.completed}


def _state(action: Action, completed_ids: set[str]) -> ActionState:
    if action.completed:
        return ActionState.COMPLETED
    if action.is_ready(completed_ids):
        return ActionState.AVAILABLE
    return ActionState.BLOCKED


def classify_actions(actions: Sequence[Action]) -> dict[str, ActionState]:
    """Map every action ID to exactly one ``ActionState``."""
    completed_ids = _completed_ids(actions)
    return {action.id: _state(action, completed_ids) for action in actions}


def available_actions(actions: Sequence[Action]) -> list[Action]:
    """Incomplete actions whose dependencies are all completed."""
    completed_ids = _completed_ids(actions)
    return [a for a in actions if _state(a, completed_ids) is ActionState.AVAILABLE]


def blocked_actions(actions: Sequence[Action]) -> list[Action]:
    """Incomplete actions with at least one incomplete dependency."""
    completed_ids = _completed_ids(actions)
    return [a for a in actions if _state(a, completed_ids) is ActionState.BLOCKED]


def compute_availability(actions: Sequence[Action]) -> Availability:
    """
    Partition a collection by availability, preserving input order.

    Example:
        >>> result = compute_availability(actions)
        >>> [a.id for a in result.available]
        ['B', 'C']
    """
    completed_ids = _completed_ids(actions)
    buckets: dict[ActionState, list[Action]] = {state: [] for state in ActionState}
    for action in actions:
        buckets[_state(action, completed_ids)].append(action)

    return Availability(
        completed=buckets[ActionState.COMPLETED],
        available=buckets[ActionState.AVAILABLE],
        blocked=buckets[ActionState.BLOCKED],
    )


def all_completed(actions: Sequence[Action]) -> bool:
    """True when the collection is non-empty and every action is completed."""
    return bool(actions) and all(action.completed for action in actions)


def workflow_stats(actions: Sequence[Action]) -> WorkflowStats:
    """
    Summarize workflow progress for display.

    Progress is the completed percentage rounded half up. Level figures
    come from ``compute_levels`` and therefore require a valid graph.

    Raises:
        GraphError: If the collection is invalid.
    """
    levels = compute_levels(actions)
    availability = compute_availability(actions)
    total = len(actions)
    completed = len(availability.completed)
    progress = (completed * 100 * 2 + total) // (2 * total) if total else 0

    return WorkflowStats(
        total_actions=total,
        completed_actions=completed,
        progress=progress,
        next_actions=availability.available,
        blocked_actions=availability.blocked,
        current_level_index=current_level_index(levels),
        total_levels=len(levels),
    )
