"""Shared pytest fixtures for the smart-workflow test suite.

Design philosophy
-----------------
- Services are exercised against ``InMemoryRecordStore`` so the suite runs
  without any external service; storage-specific behaviour is covered again
  against SQLite in-memory.
- The generative model is replaced by :class:`ScriptedGenerator`, which
  returns canned text and records every prompt.
- Scope is kept at "function" by default to guarantee full isolation.
"""
from __future__ import annotations

from collections.abc import Iterable

import httpx
import pytest

from smart_workflow.ai.base import TextGenerator
from smart_workflow.api.app import create_app
from smart_workflow.core.config import WorkflowConfig
from smart_workflow.core.exceptions import SuggestionGenerationError
from smart_workflow.core.types import Project, Task, TaskStatus, User, UserRole
from smart_workflow.manager import WorkflowManager
from smart_workflow.storage.memory import InMemoryRecordStore

# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


class ScriptedGenerator(TextGenerator):
    """Returns queued responses in order; raises when given an exception."""

    def __init__(self, responses: Iterable[str | Exception] = ()) -> None:
        self.responses: list[str | Exception] = list(responses)
        self.prompts: list[str] = []
        self.closed = False

    def queue(self, response: str | Exception) -> None:
        self.responses.append(response)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise SuggestionGenerationError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


class RecordingChannel:
    """Live-update channel that keeps every frame it was sent."""

    def __init__(self) -> None:
        self.frames: list[str] = []

    async def send_text(self, data: str) -> None:
        self.frames.append(data)


class BrokenChannel:
    """Live-update channel whose socket is already gone."""

    async def send_text(self, data: str) -> None:
        raise RuntimeError("socket closed")


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------


def make_user(suffix: str = "01", role: UserRole = UserRole.USER) -> User:
    prefix = "adm" if role == UserRole.ADMIN else "usr"
    return User(
        id=f"{prefix}_{suffix}",
        name=f"User {suffix}",
        email=f"user{suffix}@example.com",
        role=role,
    )


def make_project(suffix: str = "01", members: list[str] | None = None) -> Project:
    return Project(
        id=f"prj_{suffix}",
        name=f"Project {suffix}",
        description="Test project",
        members=members or [],
    )


def make_task(
    suffix: str = "01",
    project_id: str = "prj_01",
    assignee_id: str = "usr_01",
    status: TaskStatus = TaskStatus.TODO,
) -> Task:
    return Task(
        id=f"tsk_{suffix}",
        title=f"Task {suffix}",
        description="Test task",
        project_id=project_id,
        assignee_id=assignee_id,
        status=status,
    )


# ---------------------------------------------------------------------------
# Config / storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> WorkflowConfig:
    """Memory-backed config that ignores any local .env file."""
    return WorkflowConfig(
        _env_file=None,
        store_backend="memory",
        database_url="sqlite+aiosqlite:///:memory:",
        gemini_api_key=None,
        log_level="DEBUG",
    )


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
async def sqlite_store():
    """SQLite-backed record store for integration tests."""
    from smart_workflow.storage.sql import SQLAlchemyRecordStore

    store = SQLAlchemyRecordStore(
        database_url="sqlite+aiosqlite:///:memory:",
        pool_size=1,
    )
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


# ---------------------------------------------------------------------------
# Manager / app fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def manager(config, memory_store, generator):
    m = WorkflowManager(config, store=memory_store, generator=generator)
    await m.initialize()
    yield m
    await m.shutdown()


@pytest.fixture
def app(manager):
    return create_app(manager=manager)


@pytest.fixture
async def client(app):
    """httpx client bound to the ASGI app (lifespan is driven by ``manager``)."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def channel(manager) -> RecordingChannel:
    """A live client connected to the manager's registry."""
    ch = RecordingChannel()
    manager.registry.add(ch)
    return ch
