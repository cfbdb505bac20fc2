"""Dependency graph - validates and edits the dependency relation.

This is the single place where the ``depends_on`` relation of an action
collection is checked: referential integrity, unique IDs and acyclicity.
Every structural edit (add, remove, change dependencies) builds the
hypothetical next collection, validates it, and only then returns it.
"""

from collections import deque
from collections.abc import Callable, Iterable, Iterator, Sequence
from uuid import uuid4

from loguru import logger

from actionflow.core.exceptions import (
    ActionNotFoundError,
    CycleError,
    DependentActionsExistError,
    DuplicateActionIdError,
    ReferentialIntegrityError,
)
from actionflow.graph.models import Action


class ActionGraph:
    """
    Adjacency view over one action collection.

    Edges point from an action to the actions it depends on. The graph
    keeps the input order of the collection, which every derived view
    (levels, availability, steps) relies on for deterministic output.

    Example:
        >>> graph = ActionGraph.build(actions)
        >>> graph.dependents_of("A")
        ['B', 'C']
        >>> graph.validate()
    """

    def __init__(self, actions: Sequence[Action]) -> None:
        """
        Initialize the graph without validation.

        Use ``ActionGraph.build`` unless the collection is already known
        to be well formed.

        Args:
            actions: The action collection.
        """
        self._actions: dict[str, Action] = {}
        self._edges: dict[str, list[str]] = {}
        self._dependents: dict[str, list[str]] = {}

        for action in actions:
            self._actions[action.id] = action
            self._edges[action.id] = list(action.depends_on)
            self._dependents.setdefault(action.id, [])

        for action_id, deps in self._edges.items():
            for dep in deps:
                self._dependents.setdefault(dep, []).append(action_id)

    @classmethod
    def build(cls, actions: Sequence[Action]) -> "ActionGraph":
        """
        Build a graph and check referential integrity.

        Args:
            actions: The action collection.

        Returns:
            ActionGraph over ``actions``.

        Raises:
            DuplicateActionIdError: If two actions share an ID.
            ReferentialIntegrityError: If a dependency references an
                ID that is not in ``actions``.
        """
        seen: set[str] = set()
        for action in actions:
            if action.id in seen:
                raise DuplicateActionIdError(action.id)
            seen.add(action.id)

        for action in actions:
            missing = [dep for dep in action.depends_on if dep not in seen]
            if missing:
                logger.warning(f"Action {action.id} has invalid dependencies: {missing}")
                raise ReferentialIntegrityError(action.id, missing)

        return cls(actions)

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def actions(self) -> list[Action]:
        """Actions in input order."""
        return list(self._actions.values())

    @property
    def edges(self) -> dict[str, list[str]]:
        """Action ID -> dependency IDs."""
        return {k: list(v) for k, v in self._edges.items()}

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._actions

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions.values())

    def get(self, action_id: str) -> Action | None:
        return self._actions.get(action_id)

    def require(self, action_id: str) -> Action:
        """
        Get an action by ID.

        Raises:
            ActionNotFoundError: If the ID is not in the graph.
        """
        action = self._actions.get(action_id)
        if action is None:
            raise ActionNotFoundError(action_id)
        return action

    def dependencies_of(self, action_id: str) -> list[str]:
        self.require(action_id)
        return list(self._edges[action_id])

    def dependents_of(self, action_id: str) -> list[str]:
        """IDs of actions that directly depend on ``action_id``, in input order."""
        self.require(action_id)
        return list(self._dependents.get(action_id, []))

    def transitive_dependents(self, action_id: str) -> list[str]:
        """IDs of every action that directly or indirectly depends on ``action_id``."""
        self.require(action_id)
        found: set[str] = set()
        queue: deque[str] = deque(self._dependents.get(action_id, []))
        while queue:
            node = queue.popleft()
            if node in found:
                continue
            found.add(node)
            queue.extend(self._dependents.get(node, []))
        return [aid for aid in self._actions if aid in found]

    # =========================================================================
    # CYCLE DETECTION
    # =========================================================================

    def find_cycle(self) -> tuple[list[str], tuple[str, str]] | None:
        """
        Find a dependency cycle using three-color DFS.

        Every unvisited node is used as a DFS root, so a cycle is found no
        matter where it sits relative to the first action in the
        collection.

        Returns:
            ``(path, back_edge)`` where ``path`` lists the IDs along the
            cycle and ``back_edge`` is the (action, dependency) pair that
            closed it, or None if the graph is acyclic.

        Example:
            >>> ActionGraph([a_dep_b, b_dep_a]).find_cycle()
            (['a', 'b', 'a'], ('b', 'a'))
        """
        WHITE, GRAY, BLACK = 0, 1, 2
        colors: dict[str, int] = {node: WHITE for node in self._edges}
        found: list[tuple[list[str], tuple[str, str]]] = []

        def dfs(node: str, path: list[str]) -> bool:
            colors[node] = GRAY
            path.append(node)

            for neighbor in self._edges.get(node, []):
                if neighbor not in colors:
                    continue  # dangling; reported by build()
                if colors[neighbor] == GRAY:
                    cycle_start = path.index(neighbor)
                    found.append((path[cycle_start:] + [neighbor], (node, neighbor)))
                    return True
                if colors[neighbor] == WHITE and dfs(neighbor, path):
                    return True

            path.pop()
            colors[node] = BLACK
            return False

        for node in self._edges:
            if colors[node] == WHITE and dfs(node, []):
                return found[0]

        return None

    def validate(self) -> None:
        """
        Validate that the dependency relation is acyclic.

        Raises:
            CycleError: If any cycle exists.
        """
        cycle = self.find_cycle()
        if cycle is not None:
            path, edge = cycle
            logger.error(f"Circular dependency detected: {' -> '.join(path)}")
            raise CycleError(path, edge)

    def topological_order(self) -> list[str]:
        """
        Action IDs ordered so every dependency precedes its dependents.

        Raises:
            CycleError: If the graph is cyclic.
        """
        self.validate()

        in_degree = {aid: len(deps) for aid, deps in self._edges.items()}
        queue: deque[str] = deque(aid for aid, degree in in_degree.items() if degree == 0)
        ordered: list[str] = []

        while queue:
            node = queue.popleft()
            ordered.append(node)
            for dependent in self._dependents.get(node, []):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        return ordered


# =============================================================================
# STRUCTURAL OPERATIONS
# =============================================================================


def validate_graph(actions: Sequence[Action]) -> None:
    """
    Validate an action collection.

    Args:
        actions: The action collection.

    Raises:
        DuplicateActionIdError: If two actions share an ID.
        ReferentialIntegrityError: If a dependency is unknown.
        CycleError: If the dependency relation has a cycle.
    """
    ActionGraph.build(actions).validate()
    logger.debug(f"Validated dependency graph of {len(actions)} actions")


def add_action(actions: Sequence[Action], action: Action) -> list[Action]:
    """
    Append a new action, validating the resulting collection.

    Raises:
        GraphError: If the new collection would be invalid.
    """
    updated = [*actions, action]
    validate_graph(updated)
    logger.info(f"Added action {action.id}")
    return updated


def remove_action(actions: Sequence[Action], action_id: str) -> list[Action]:
    """
    Remove an action that nothing depends on.

    Args:
        actions: The action collection.
        action_id: ID of the action to remove.

    Returns:
        New collection without the action.

    Raises:
        ActionNotFoundError: If ``action_id`` is not in the collection.
        DependentActionsExistError: If other actions still depend on it.
    """
    graph = ActionGraph(actions)
    dependents = graph.dependents_of(action_id)
    if dependents:
        raise DependentActionsExistError(action_id, dependents)

    logger.info(f"Removed action {action_id}")
    return [action for action in actions if action.id != action_id]


def set_dependencies(
    actions: Sequence[Action],
    action_id: str,
    depends_on: Iterable[str],
) -> list[Action]:
    """
    Replace an action's dependencies.

    The whole collection is re-validated with the new edge set before
    anything is returned.

    Args:
        actions: The action collection.
        action_id: ID of the action to edit.
        depends_on: New dependency IDs.

    Returns:
        New collection with the edited action.

    Raises:
        ActionNotFoundError: If ``action_id`` is not in the collection.
        ReferentialIntegrityError: If a new dependency is unknown.
        CycleError: If the new edges would create a cycle.
        TypeError: If ``depends_on`` is a bare string.
    """
    if isinstance(depends_on, str):
        raise TypeError("depends_on must be a collection of action IDs, not a string")

    ActionGraph(actions).require(action_id)
    new_deps = list(dict.fromkeys(depends_on))

    updated = [
        action.model_copy(update={"depends_on": new_deps}) if action.id == action_id else action
        for action in actions
    ]
    validate_graph(updated)

    logger.info(f"Set dependencies of {action_id} to {new_deps}")
    return updated


def dependency_candidates(actions: Sequence[Action], action_id: str) -> list[Action]:
    """
    Actions that can become dependencies of ``action_id`` without a cycle.

    That is every action except ``action_id`` itself and the actions that
    already depend on it, directly or transitively.

    Raises:
        ActionNotFoundError: If ``action_id`` is not in the collection.
    """
    graph = ActionGraph(actions)
    excluded = {action_id, *graph.transitive_dependents(action_id)}
    return [action for action in actions if action.id not in excluded]


def clone_actions(
    actions: Sequence[Action],
    id_factory: Callable[[], str] | None = None,
) -> list[Action]:
    """
    Copy a collection under fresh IDs with completion state reset.

    Every ``depends_on`` entry is remapped to the new IDs, so the clone
    has the same shape as the source.

    Args:
        actions: A valid action collection.
        id_factory: Produces new IDs. Defaults to random UUIDs.

    Returns:
        The cloned collection.

    Raises:
        GraphError: If the source collection is invalid.
    """
    validate_graph(actions)
    make_id = id_factory or (lambda: str(uuid4()))
    id_map = {action.id: make_id() for action in actions}

    cloned = [
        action.model_copy(
            update={
                "id": id_map[action.id],
                "depends_on": [id_map[dep] for dep in action.depends_on],
                "completed": False,
                "completed_at": None,
                "completed_by": None,
            }
        )
        for action in actions
    ]
    validate_graph(cloned)

    logger.debug(f"Cloned {len(cloned)} actions")
    return cloned
