"""Pytest configuration and shared fixtures."""

import os
import sys
from collections.abc import Callable, Generator
from datetime import datetime, timezone

import pytest
from loguru import logger

# Keep successful operations quiet; CLI tests parse stdout
os.environ.setdefault("ACTIONFLOW_LOG_LEVEL", "WARNING")
os.environ.setdefault("ACTIONFLOW_DEBUG", "false")


@pytest.fixture
def mock_settings() -> Generator:
    """Reset cached settings around a test."""
    from actionflow.core.config import clear_settings_cache

    clear_settings_cache()

    yield

    clear_settings_cache()


@pytest.fixture
def restore_logging() -> Generator:
    """Put loguru back on the real stderr after a test reconfigures it."""
    yield

    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def make_action() -> Callable:
    """Provide a factory for actions with terse keyword arguments."""
    from actionflow.graph.models import Action

    def _make(action_id: str, deps: list[str] | None = None, **kwargs) -> "Action":
        return Action(
            id=action_id,
            title=kwargs.pop("title", f"Action {action_id}"),
            depends_on=deps or [],
            **kwargs,
        )

    return _make


@pytest.fixture
def diamond_actions(make_action: Callable) -> list:
    """A, then B and C in parallel, then D joining both."""
    return [
        make_action("A"),
        make_action("B", ["A"]),
        make_action("C", ["A"]),
        make_action("D", ["B", "C"]),
    ]


@pytest.fixture
def completion_meta() -> "CompletionMeta":
    """Provide completion metadata for a fixed user and time."""
    from actionflow.graph.models import CompletionMeta

    return CompletionMeta(
        completed_by="user-1",
        completed_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def video_task_document() -> dict:
    """Provide a stored task document in its camelCase wire format."""
    return {
        "id": "task-1",
        "projectId": "project-1",
        "title": "Promo video",
        "status": "in_progress",
        "actions": [
            {"id": "brief", "title": "Brief", "type": "long_text", "completed": False},
            {
                "id": "footage",
                "title": "Upload footage",
                "type": "video_upload",
                "completed": False,
                "dependsOn": ["brief"],
                "mediaSpecs": {"resolution": "1920x1080", "format": "mp4"},
            },
            {
                "id": "decoupage",
                "title": "Decoupage",
                "type": "video_decoupage",
                "completed": False,
                "dependsOn": ["footage"],
            },
            {
                "id": "approval",
                "title": "Client approval",
                "type": "approval",
                "completed": False,
                "dependsOn": ["decoupage"],
                "isBlocking": True,
            },
        ],
    }


# Markers
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
