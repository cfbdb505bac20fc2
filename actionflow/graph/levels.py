"""Level organizer - partitions an action collection into execution levels.

Level 0 holds the actions without dependencies; level k+1 holds every
remaining action whose dependencies are all placed in levels 0..k. The
level sequence is the workflow stage numbering shown to users.
"""

from collections.abc import Sequence

from loguru import logger

from actionflow.core.exceptions import CycleError
from actionflow.graph.dependency_graph import ActionGraph
from actionflow.graph.models import Action, Level


def compute_levels(actions: Sequence[Action]) -> list[Level]:
    """
    Organize actions into levels using Kahn-style layering.

    Ties within a level keep the input order, so the result is
    deterministic for a given collection.

    Args:
        actions: The action collection.

    Returns:
        Ordered list of levels covering every action exactly once.

    Raises:
        ReferentialIntegrityError: If a dependency is unknown.
        DuplicateActionIdError: If two actions share an ID.
        CycleError: If the dependency relation has a cycle.

    Example:
        >>> [level.action_ids for level in compute_levels(actions)]
        [['A'], ['B', 'C'], ['D']]
    """
    levels: list[Level] = []
    placed: set[str] = set()
    remaining = list(actions)

    while remaining:
        wave = [action for action in remaining if all(dep in placed for dep in action.depends_on)]

        if not wave:
            # Stalled: the unplaced actions have a cycle or a dangling reference
            logger.error(f"Cannot place remaining actions: {[a.id for a in remaining]}")
            ActionGraph.build(actions).validate()
            raise CycleError([a.id for a in remaining])

        levels.append(Level(index=len(levels), actions=wave))
        placed.update(action.id for action in wave)
        remaining = [action for action in remaining if action.id not in placed]

    if len(placed) != len(actions):
        # Same ID placed twice
        ActionGraph.build(actions)

    for level in levels:
        logger.debug(f"Level {level.index}: {len(level)} actions")

    return levels


def level_index(levels: Sequence[Level], action_id: str) -> int | None:
    """Index of the level containing ``action_id``, or None."""
    for level in levels:
        if action_id in level.action_ids:
            return level.index
    return None


def current_level_index(levels: Sequence[Level]) -> int:
    """
    Index of the first level that still has an incomplete action.

    Returns ``len(levels)`` once every action is completed, so
    ``current_level_index(levels) / len(levels)`` reads as progress.
    """
    for level in levels:
        if not level.is_complete:
            return level.index
    return len(levels)


def critical_path(actions: Sequence[Action]) -> list[str]:
    """
    Find the longest chain of dependencies.

    The critical path determines the minimum number of sequential stages
    needed to finish the collection.

    Args:
        actions: The action collection.

    Returns:
        Action IDs along the critical path, dependencies first.

    Raises:
        GraphError: If the collection is invalid.
    """
    graph = ActionGraph.build(actions)
    depths: dict[str, int] = {}

    for action_id in graph.topological_order():
        deps = graph.dependencies_of(action_id)
        depths[action_id] = 1 + max((depths[d] for d in deps), default=-1)

    if not depths:
        return []

    # First maximum in input order
    current = max(graph.edges, key=lambda aid: depths[aid])
    path = [current]

    while graph.dependencies_of(current):
        deps = graph.dependencies_of(current)
        current = max(deps, key=lambda d: depths[d])
        path.append(current)

    return list(reversed(path))
