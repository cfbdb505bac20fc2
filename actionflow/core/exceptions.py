"""Error taxonomy for the action dependency graph engine.

Every error here is a recoverable validation failure raised against the
snapshot a caller handed in. The engine never partially applies a
mutation, so callers can keep using their original collection.
"""

from collections.abc import Iterable


class GraphError(Exception):
    """Base exception for action graph errors."""

    pass


class ActionNotFoundError(GraphError):
    """Referenced action ID is absent from the collection."""

    def __init__(self, action_id: str) -> None:
        self.action_id = action_id
        super().__init__(f"Action not found: {action_id}")


class DuplicateActionIdError(GraphError):
    """The same action ID appears more than once in a collection."""

    def __init__(self, action_id: str) -> None:
        self.action_id = action_id
        super().__init__(f"Duplicate action ID: {action_id}")


class ReferentialIntegrityError(GraphError):
    """A dependency references an action that does not exist."""

    def __init__(self, action_id: str, missing_ids: Iterable[str]) -> None:
        self.action_id = action_id
        self.missing_ids = list(missing_ids)
        super().__init__(
            f"Action {action_id} depends on unknown actions: "
            f"{', '.join(self.missing_ids)}"
        )


class CycleError(GraphError):
    """The dependency relation contains a cycle.

    Attributes:
        involved_ids: Action IDs along the detected cycle, in traversal order.
        edge: The (action, dependency) back-edge that closed the cycle.
    """

    def __init__(
        self,
        involved_ids: Iterable[str],
        edge: tuple[str, str] | None = None,
    ) -> None:
        self.involved_ids = list(involved_ids)
        self.edge = edge
        message = f"Dependency cycle detected: {' -> '.join(self.involved_ids)}"
        if edge is not None:
            message += f" (back-edge {edge[0]} -> {edge[1]})"
        super().__init__(message)


class DependentActionsExistError(GraphError):
    """Attempted removal of an action that others still depend on."""

    def __init__(self, action_id: str, dependent_ids: Iterable[str]) -> None:
        self.action_id = action_id
        self.dependent_ids = list(dependent_ids)
        super().__init__(
            f"Cannot remove action {action_id}: required by "
            f"{', '.join(self.dependent_ids)}"
        )


class UnsatisfiedDependencyError(GraphError):
    """Attempted completion before every dependency is completed."""

    def __init__(self, action_id: str, missing_ids: Iterable[str]) -> None:
        self.action_id = action_id
        self.missing_ids = list(missing_ids)
        super().__init__(
            f"Cannot complete action {action_id} until dependencies are "
            f"completed: {', '.join(self.missing_ids)}"
        )


class DependentsAlreadyCompletedError(GraphError):
    """Attempted reversion while completed actions still depend on it."""

    def __init__(self, action_id: str, dependent_ids: Iterable[str]) -> None:
        self.action_id = action_id
        self.dependent_ids = list(dependent_ids)
        super().__init__(
            f"Cannot uncomplete action {action_id}: completed actions depend "
            f"on it: {', '.join(self.dependent_ids)}"
        )
