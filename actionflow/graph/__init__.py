"""Action dependency graph engine.

This module provides the complete engine over one action collection:
- Dependency graph (integrity, cycle detection, structural edits)
- Level organization (actions -> execution levels)
- Availability (completion snapshot -> available / blocked actions)
- Completion state machine (complete / uncomplete transitions)
- Assembler (levels <-> authoring steps, templates)
"""

from actionflow.graph.assembler import (
    attach_workflow,
    clone_template,
    from_steps,
    template_actions,
    to_steps,
)
from actionflow.graph.availability import (
    all_completed,
    available_actions,
    blocked_actions,
    classify_actions,
    compute_availability,
    workflow_stats,
)
from actionflow.graph.completion import (
    can_complete,
    can_uncomplete,
    complete_action,
    next_task_status,
    uncomplete_action,
)
from actionflow.graph.dependency_graph import (
    ActionGraph,
    add_action,
    clone_actions,
    dependency_candidates,
    remove_action,
    set_dependencies,
    validate_graph,
)
from actionflow.graph.levels import (
    compute_levels,
    critical_path,
    current_level_index,
    level_index,
)
from actionflow.graph.models import (
    Action,
    ActionState,
    ActionTemplate,
    ActionType,
    Availability,
    CompletionMeta,
    CompletionResult,
    Level,
    Step,
    TaskStatus,
    TemplateType,
    Workflow,
    WorkflowStats,
)

__all__ = [
    # Models
    "Action",
    "ActionState",
    "ActionTemplate",
    "ActionType",
    "Availability",
    "CompletionMeta",
    "CompletionResult",
    "Level",
    "Step",
    "TaskStatus",
    "TemplateType",
    "Workflow",
    "WorkflowStats",
    # Dependency graph
    "ActionGraph",
    "validate_graph",
    "add_action",
    "remove_action",
    "set_dependencies",
    "dependency_candidates",
    "clone_actions",
    # Levels
    "compute_levels",
    "level_index",
    "current_level_index",
    "critical_path",
    # Availability
    "classify_actions",
    "available_actions",
    "blocked_actions",
    "compute_availability",
    "all_completed",
    "workflow_stats",
    # Completion
    "complete_action",
    "uncomplete_action",
    "can_complete",
    "can_uncomplete",
    "next_task_status",
    # Assembler
    "to_steps",
    "from_steps",
    "attach_workflow",
    "template_actions",
    "clone_template",
]
