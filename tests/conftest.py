"""Pytest fixtures and helpers for capability-map tests."""
from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from capability_map.domain import CapabilityNode, Task

# Repo root (parent of tests/)
REPO_ROOT = Path(__file__).resolve().parent.parent


def make_node(
    node_id: str,
    tasks,
    *,
    name: str | None = None,
    type: str = "concept",
    confidence: float = 0.7,
    keywords=(),
) -> CapabilityNode:
    """Build a CapabilityNode with sensible defaults for relationship/limiter tests."""
    return CapabilityNode(
        id=node_id,
        name=name or node_id,
        type=type,
        description="",
        confidence=confidence,
        tasks=tuple(tasks),
        keywords=tuple(keywords),
    )


@pytest.fixture(autouse=True)
def _reset_config_cache():
    """Clear the load_config LRU cache and reset _env before (and after) every test.

    This ensures each test gets a fresh config load, so monkeypatching
    CAPMAP_CONFIG_PATH works without tests bleeding into each other.
    """
    from capability_map.config import loader as config_loader
    config_loader.load_config.cache_clear()
    config_loader._env = None
    yield
    config_loader.load_config.cache_clear()
    config_loader._env = None


@pytest.fixture
def scenario_tasks() -> List[Task]:
    """Two auth tasks, two ui tasks and one untagged docs task."""
    return [
        Task(id="t1", title="Implement login", tags=("auth",)),
        Task(id="t2", title="Add password reset", tags=("auth",)),
        Task(id="t3", title="Design profile page", tags=("ui",)),
        Task(id="t4", title="Build settings panel", tags=("ui",)),
        Task(id="t5", title="Write onboarding docs"),
    ]


@pytest.fixture
def sample_tasks() -> List[Task]:
    """A small tracker export with tags, statuses and a parent task with three children."""
    return [
        Task(
            id="1", title="User authentication system",
            description="Build the login and session handling for the web app",
            tags=("auth", "security"), status="in-progress",
        ),
        Task(
            id="1.1", title="Login form validation",
            description="Validate the login form fields on the client",
            tags=("auth", "frontend"), status="done", parent_id="1",
        ),
        Task(
            id="1.2", title="Session token storage",
            description="Store session tokens securely in the database",
            tags=("auth", "backend"), status="in-progress", parent_id="1",
        ),
        Task(
            id="1.3", title="Password reset email",
            description="Send password reset links by email",
            tags=("auth", "email"), status="todo", parent_id="1",
        ),
        Task(
            id="2", title="Dashboard charts",
            description="Render progress charts on the analytics dashboard",
            tags=("analytics", "visualization"), status="todo",
        ),
        Task(
            id="3", title="Export dashboard report",
            description="Export the analytics report as CSV",
            tags=("analytics", "export"), status="todo",
        ),
        Task(
            id="4", title="Command line search",
            description="Search tasks from the terminal command line",
            tags=("cli", "search"), status="done",
        ),
        Task(
            id="5", title="Search result ranking",
            description="Rank search results by relevance",
            tags=("search",), status="done",
        ),
    ]
