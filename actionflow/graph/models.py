"""Pydantic models for the action dependency graph.

This module defines the data structures shared by every part of the
engine: actions and their completion metadata, execution levels,
availability snapshots, authoring steps and action templates.

Field names are snake_case in Python and camelCase on the wire, so the
task and template documents stored by the surrounding application
validate directly with ``Action.model_validate(doc)``.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================


class ActionType(str, Enum):
    """Kind of work an action represents. Opaque to the graph algorithms."""

    TEXT = "text"
    LONG_TEXT = "long_text"
    FILE_UPLOAD = "file_upload"
    APPROVAL = "approval"
    DATE = "date"
    DOCUMENT = "document"
    INFO = "info"
    VIDEO_UPLOAD = "video_upload"
    VIDEO_DECOUPAGE = "video_decoupage"
    VIDEO_EDITING = "video_editing"
    AUDIO_PROCESSING = "audio_processing"


class ActionState(str, Enum):
    """Classification of an action against the current completion snapshot."""

    COMPLETED = "completed"
    AVAILABLE = "available"
    BLOCKED = "blocked"


class TaskStatus(str, Enum):
    """Status of the task that owns an action collection."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    WAITING_APPROVAL = "waiting_approval"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class TemplateType(str, Enum):
    """Workflow family of an action template."""

    CUSTOM = "custom"
    VIDEO_PRODUCTION = "video_production"
    CONTENT_CREATION = "content_creation"
    DESIGN = "design"
    DEVELOPMENT = "development"


# =============================================================================
# ACTIONS
# =============================================================================


class Action(BaseModel):
    """A single node of the dependency graph.

    Actions are immutable; engine operations return updated copies. Any
    payload key the engine does not know about (media specs, approval
    status, time markers, ...) is kept as-is.

    Example:
        >>> action = Action(id="review", title="Review cut", depends_on=["edit"])
        >>> action.model_dump(by_alias=True)["dependsOn"]
        ['edit']
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(..., min_length=1, description="Unique action identifier")
    title: str = Field(default="", description="Action title")
    type: ActionType = Field(default=ActionType.TEXT, description="Action type")
    description: str | None = Field(default=None)

    completed: bool = Field(default=False)
    completed_at: datetime | None = Field(default=None)
    completed_by: str | None = Field(default=None)

    depends_on: list[str] = Field(
        default_factory=list,
        description="IDs of actions that must be completed first",
    )
    is_blocking: bool | None = Field(
        default=None,
        description="Advisory hint; does not change graph algorithms",
    )

    has_attachments: bool = Field(default=False)
    attachments: list[dict[str, Any]] | None = Field(default=None)
    data: dict[str, Any] | None = Field(default=None)

    @field_validator("depends_on", mode="before")
    @classmethod
    def normalize_depends_on(cls, v: Any) -> Any:
        """Accept null and drop repeated IDs, keeping first occurrences."""
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return list(dict.fromkeys(v))
        return v

    def is_ready(self, completed_ids: set[str]) -> bool:
        """Check if all dependencies are in ``completed_ids``."""
        return all(dep in completed_ids for dep in self.depends_on)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible document."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class CompletionMeta(BaseModel):
    """Who completed an action, and when. Supplied by the caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    completed_by: str = Field(..., min_length=1)
    completed_at: datetime
    attachments: list[str] = Field(
        default_factory=list,
        description="File URLs uploaded together with the completion",
    )


# =============================================================================
# DERIVED VIEWS
# =============================================================================


class Level(BaseModel):
    """One execution wave: actions whose dependencies all sit in earlier levels."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    actions: list[Action] = Field(default_factory=list)

    @property
    def action_ids(self) -> list[str]:
        return [action.id for action in self.actions]

    @property
    def is_complete(self) -> bool:
        return all(action.completed for action in self.actions)

    def __len__(self) -> int:
        return len(self.actions)


class Availability(BaseModel):
    """Partition of a collection into completed, available and blocked actions."""

    model_config = ConfigDict(frozen=True)

    completed: list[Action] = Field(default_factory=list)
    available: list[Action] = Field(default_factory=list)
    blocked: list[Action] = Field(default_factory=list)


class CompletionResult(BaseModel):
    """Outcome of completing an action."""

    model_config = ConfigDict(frozen=True)

    actions: list[Action]
    newly_available: list[Action] = Field(
        default_factory=list,
        description="Actions unlocked by this completion",
    )
    all_completed: bool = Field(
        default=False,
        description="Every action in the collection is now completed",
    )


class WorkflowStats(BaseModel):
    """Progress summary of a task workflow."""

    model_config = ConfigDict(frozen=True)

    total_actions: int = 0
    completed_actions: int = 0
    progress: int = Field(default=0, ge=0, le=100, description="Percent complete")
    next_actions: list[Action] = Field(default_factory=list)
    blocked_actions: list[Action] = Field(default_factory=list)
    current_level_index: int = 0
    total_levels: int = 0


# =============================================================================
# AUTHORING
# =============================================================================


class Step(BaseModel):
    """An authoring stage holding an ordered list of action IDs."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    step_id: str = Field(..., min_length=1)
    action_ids: list[str] = Field(default_factory=list, alias="actions")
    depends_on: list[str] = Field(
        default_factory=list,
        description="IDs of steps that must be finished first",
    )


class Workflow(BaseModel):
    """Step view stored alongside a template's elements."""

    model_config = ConfigDict(frozen=True)

    steps: list[Step] = Field(default_factory=list)


class ActionTemplate(BaseModel):
    """Reusable action collection from which task actions are instantiated."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str | None = Field(default=None)
    title: str = Field(..., min_length=1, max_length=255)
    type: TemplateType = Field(default=TemplateType.CUSTOM)
    elements: list[Action] = Field(default_factory=list)
    workflow: Workflow | None = Field(default=None)
    order: int = Field(default=0)
    category: str | None = Field(default=None)
    tags: list[str] = Field(default_factory=list)
    created_by: str | None = Field(default=None)
    created_at: datetime | None = Field(default=None)
    updated_at: datetime | None = Field(default=None)
