"""
Actionflow - dependency graph engine for project task actions.

Validates action dependency graphs, organizes actions into execution
levels, and drives completion state for task workflows.
"""

__version__ = "0.1.0"

from actionflow.core.exceptions import (
    ActionNotFoundError,
    CycleError,
    DependentActionsExistError,
    DependentsAlreadyCompletedError,
    DuplicateActionIdError,
    GraphError,
    ReferentialIntegrityError,
    UnsatisfiedDependencyError,
)
from actionflow.graph import (
    Action,
    ActionTemplate,
    ActionType,
    CompletionMeta,
    Level,
    Step,
    TaskStatus,
    complete_action,
    compute_availability,
    compute_levels,
    from_steps,
    remove_action,
    set_dependencies,
    to_steps,
    uncomplete_action,
    validate_graph,
)

__all__ = [
    "__version__",
    "Action",
    "ActionTemplate",
    "ActionType",
    "CompletionMeta",
    "Level",
    "Step",
    "TaskStatus",
    "validate_graph",
    "compute_levels",
    "compute_availability",
    "complete_action",
    "uncomplete_action",
    "set_dependencies",
    "remove_action",
    "to_steps",
    "from_steps",
    "GraphError",
    "ActionNotFoundError",
    "DuplicateActionIdError",
    "ReferentialIntegrityError",
    "CycleError",
    "DependentActionsExistError",
    "UnsatisfiedDependencyError",
    "DependentsAlreadyCompletedError",
]
