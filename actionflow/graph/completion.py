"""Completion state machine - completed/uncompleted transitions per action.

An action may only become completed once its dependencies are completed,
and may only be reverted while no completed action depends on it. These
two rules keep the collection free of completed actions with incomplete
prerequisites.
"""

from collections.abc import Sequence
from typing import Any

from loguru import logger

from actionflow.core.exceptions import (
    DependentsAlreadyCompletedError,
    UnsatisfiedDependencyError,
)
from actionflow.graph.availability import all_completed, available_actions
from actionflow.graph.dependency_graph import ActionGraph
from actionflow.graph.models import (
    Action,
    ActionType,
    CompletionMeta,
    CompletionResult,
    TaskStatus,
)


def _unsatisfied_dependencies(graph: ActionGraph, action: Action) -> list[str]:
    missing = []
    for dep_id in action.depends_on:
        dep = graph.get(dep_id)
        if dep is None or not dep.completed:
            missing.append(dep_id)
    return missing


def _completed_dependents(graph: ActionGraph, action_id: str) -> list[str]:
    return [
        dep_id for dep_id in graph.dependents_of(action_id)
        if graph.require(dep_id).completed
    ]


def can_complete(actions: Sequence[Action], action_id: str) -> bool:
    """Check if ``action_id`` may transition to completed now."""
    graph = ActionGraph(actions)
    action = graph.require(action_id)
    return not _unsatisfied_dependencies(graph, action)


def can_uncomplete(actions: Sequence[Action], action_id: str) -> bool:
    """Check if ``action_id`` may be reverted now."""
    graph = ActionGraph(actions)
    graph.require(action_id)
    return not _completed_dependents(graph, action_id)


def complete_action(
    actions: Sequence[Action],
    action_id: str,
    meta: CompletionMeta,
) -> CompletionResult:
    """
    Mark an action as completed.

    Completing an already completed action leaves the collection as it is,
    including the original completion stamp.

    Args:
        actions: The action collection.
        action_id: ID of the action to complete.
        meta: Acting user and timestamp, plus any uploaded attachments.

    Returns:
        CompletionResult with the updated collection and the actions that
        this completion unlocked.

    Raises:
        ActionNotFoundError: If ``action_id`` is not in the collection.
        UnsatisfiedDependencyError: If a dependency is not completed.
    """
    graph = ActionGraph(actions)
    action = graph.require(action_id)

    if action.completed:
        logger.debug(f"Action {action_id} is already completed")
        return CompletionResult(actions=list(actions), all_completed=all_completed(actions))

    missing = _unsatisfied_dependencies(graph, action)
    if missing:
        raise UnsatisfiedDependencyError(action_id, missing)

    before = {a.id for a in available_actions(actions)}

    update: dict[str, Any] = {
        "completed": True,
        "completed_at": meta.completed_at,
        "completed_by": meta.completed_by,
    }
    if action.type == ActionType.INFO and action.has_attachments and meta.attachments:
        update["data"] = {**(action.data or {}), "fileURLs": list(meta.attachments)}

    updated = [a.model_copy(update=update) if a.id == action_id else a for a in actions]
    newly_available = [a for a in available_actions(updated) if a.id not in before]
    done = all_completed(updated)

    logger.info(
        f"Completed action {action_id} by {meta.completed_by}; "
        f"{len(newly_available)} newly available"
    )
    if done:
        logger.info("All actions completed")

    return CompletionResult(
        actions=updated,
        newly_available=newly_available,
        all_completed=done,
    )


def uncomplete_action(actions: Sequence[Action], action_id: str) -> list[Action]:
    """
    Revert an action to incomplete.

    Clears the completion stamp and, for info actions that carry
    attachments, the attachment list and the file URLs stored by the
    completion.

    Args:
        actions: The action collection.
        action_id: ID of the action to revert.

    Returns:
        The updated collection.

    Raises:
        ActionNotFoundError: If ``action_id`` is not in the collection.
        DependentsAlreadyCompletedError: If a completed action depends on it.
    """
    graph = ActionGraph(actions)
    action = graph.require(action_id)

    dependents = _completed_dependents(graph, action_id)
    if dependents:
        raise DependentsAlreadyCompletedError(action_id, dependents)

    update: dict[str, Any] = {
        "completed": False,
        "completed_at": None,
        "completed_by": None,
    }
    if action.type == ActionType.INFO and action.has_attachments:
        update["attachments"] = []
        data = {k: v for k, v in (action.data or {}).items() if k != "fileURLs"}
        update["data"] = data or None

    logger.info(f"Uncompleted action {action_id}")
    return [a.model_copy(update=update) if a.id == action_id else a for a in actions]


def next_task_status(current: TaskStatus, actions: Sequence[Action]) -> TaskStatus:
    """
    Derive the owning task's status after a completion change.

    An in-progress task whose actions are all completed moves to
    waiting_approval; a waiting task with a reverted action moves back to
    in_progress. Any other status is owned by the task itself.
    """
    done = all_completed(actions)
    if current == TaskStatus.IN_PROGRESS and done:
        return TaskStatus.WAITING_APPROVAL
    if current == TaskStatus.WAITING_APPROVAL and not done:
        return TaskStatus.IN_PROGRESS
    return current
