"""Core module - configuration, logging and error taxonomy."""

from actionflow.core.config import Settings, clear_settings_cache, get_settings
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
from actionflow.core.logging import configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
    "GraphError",
    "ActionNotFoundError",
    "DuplicateActionIdError",
    "ReferentialIntegrityError",
    "CycleError",
    "DependentActionsExistError",
    "UnsatisfiedDependencyError",
    "DependentsAlreadyCompletedError",
]
