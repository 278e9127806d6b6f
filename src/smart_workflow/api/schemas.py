"""Request bodies.

Every field is optional at the schema level: required-field rules live in
the services so that a missing field yields the service's own ``400``
message instead of a generic validation error. Bodies are camelCase on the
wire and unknown keys are ignored.
"""
from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from smart_workflow.core.types import Subtask, TaskPriority, TaskStatus


class RequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")


class EmailBody(RequestBody):
    email: str | None = None


class RegisterBody(RequestBody):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    role: str | None = None
    password: str | None = None


class AdminCredentialsBody(RequestBody):
    email: str | None = None
    password: str | None = None


class ProjectBody(RequestBody):
    """Create/update body. ``status`` and ``progress`` are accepted and ignored."""

    name: str | None = None
    description: str | None = None
    members: list[str] | None = None
    status: Any = None
    progress: Any = None


class TaskCreateBody(RequestBody):
    title: str | None = None
    description: str | None = None
    project_id: str | None = None
    assignee_id: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    subtasks: list[Subtask] | None = None


class TaskUpdateBody(TaskCreateBody):
    """Partial update. ``id`` and ``createdAt`` are declared only to be rejected."""

    id: Any = None
    created_at: Any = None


class SuggestionBody(RequestBody):
    project_goal: str | None = None
    user_role: str | None = None


__all__ = [
    "AdminCredentialsBody",
    "EmailBody",
    "ProjectBody",
    "RegisterBody",
    "RequestBody",
    "SuggestionBody",
    "TaskCreateBody",
    "TaskUpdateBody",
]
