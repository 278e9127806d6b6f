"""Core types and data models for Smart Workflow.

Every record is an immutable pydantic model. Attribute names are snake_case;
the wire format (JSON bodies, live-update frames) uses the camelCase aliases
produced by the shared ``alias_generator`` so ``project_id`` travels as
``projectId``. Use ``model_copy(update={...})`` or the repository's
``update_fields`` to derive modified versions.
"""
from __future__ import annotations

from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from smart_workflow.utils.ids import generate_id


class UserRole(StrEnum):
    """Account role. Role checks are a single string comparison."""
    USER = "user"
    ADMIN = "admin"


class ProjectStatus(StrEnum):
    """Derived project status."""
    ACTIVE = "active"
    COMPLETED = "completed"


class TaskStatus(StrEnum):
    """Task lifecycle status."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(StrEnum):
    """Task priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationType(StrEnum):
    """Reason a notification was emitted."""
    WELCOME = "welcome"
    TASK_ASSIGNED = "task_assigned"
    PROJECT_ASSIGNED = "project_assigned"


class LiveEventType(StrEnum):
    """Event types pushed over the live-update channel.

    Only user and project lifecycle events exist; task mutations are not
    broadcast.
    """
    USER_CREATED = "userCreated"
    PROJECT_CREATED = "projectCreated"
    PROJECT_UPDATED = "projectUpdated"
    PROJECT_DELETED = "projectDeleted"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Record(BaseModel):
    """Base class for every persisted record.

    ``collection`` names the store collection and ``id_prefix`` the prefix
    passed to :func:`~smart_workflow.utils.ids.generate_id`.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
    )

    collection: ClassVar[str] = ""
    id_prefix: ClassVar[str] = ""
    wire_exclude: ClassVar[frozenset[str]] = frozenset()

    id: str = Field(..., min_length=1, max_length=255)

    def to_wire(self) -> dict[str, Any]:
        """Dump as a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude=set(self.wire_exclude))


class User(Record):
    """Registered account.

    Only the admin carries a credential, and it is stored as a bcrypt hash
    (``password_hash``), never in clear text. The hash never leaves the
    process: :meth:`to_wire` drops it.
    """

    collection: ClassVar[str] = "users"
    wire_exclude: ClassVar[frozenset[str]] = frozenset({"password_hash"})

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320)
    role: UserRole = Field(default=UserRole.USER)
    password_hash: str | None = Field(default=None)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Project(Record):
    """A group of members and tasks.

    ``progress`` and ``status`` are derived from the project's task set by
    :class:`~smart_workflow.services.progress.ProgressAggregator`; nothing
    else writes them after creation.
    """

    collection: ClassVar[str] = "projects"
    id_prefix: ClassVar[str] = "prj"

    name: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=10_000)
    members: list[str] = Field(default_factory=list)
    status: ProjectStatus = Field(default=ProjectStatus.ACTIVE)
    progress: int = Field(default=0, ge=0, le=100)
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("members")
    @classmethod
    def dedupe_members(cls, v: list[str]) -> list[str]:
        # set semantics, first occurrence wins
        return list(dict.fromkeys(v))


class Subtask(BaseModel):
    """Checklist item inside a task."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = Field(default_factory=lambda: generate_id("sub"))
    title: str = Field(..., min_length=1, max_length=500)
    completed: bool = False


class Task(Record):
    """Unit of work assigned to one user inside one project."""

    collection: ClassVar[str] = "tasks"
    id_prefix: ClassVar[str] = "tsk"

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=10_000)
    project_id: str = Field(..., min_length=1)
    assignee_id: str = Field(..., min_length=1)
    status: TaskStatus = Field(default=TaskStatus.TODO)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: date | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    subtasks: list[Subtask] | None = None


class Notification(Record):
    """Message addressed to a single user."""

    collection: ClassVar[str] = "notifications"
    id_prefix: ClassVar[str] = "not"

    user_id: str = Field(..., min_length=1)
    message: str
    type: NotificationType
    created_at: datetime = Field(default_factory=_utcnow)
    read: bool = False


class Suggestion(Record):
    """Task proposal produced by the generative-language model."""

    collection: ClassVar[str] = "ai_suggestions"
    id_prefix: ClassVar[str] = "ai"

    title: str
    description: str
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    estimated_hours: float = Field(default=5, gt=0)
    suggested_role: str | None = None
    original_prompt: str
    generated_for_role: UserRole
    created_at: datetime = Field(default_factory=_utcnow)
    status: str = "suggestion"


class ProjectProgress(BaseModel):
    """Result of one progress recomputation."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    progress: int = Field(..., ge=0, le=100)
    status: ProjectStatus
    total: int = Field(default=0, ge=0)
    done: int = Field(default=0, ge=0)
    in_progress: int = Field(default=0, ge=0)


class LiveEvent(BaseModel):
    """Frame pushed to live-update clients as ``{"type": ..., "data": ...}``."""

    model_config = ConfigDict(frozen=True)

    type: LiveEventType
    data: dict[str, Any] = Field(default_factory=dict)


class IdentityRecord(BaseModel):
    """What the identity provider knows about an email."""

    model_config = ConfigDict(frozen=True)

    email: str
    role: UserRole | None = None


__all__ = [
    "IdentityRecord",
    "LiveEvent",
    "LiveEventType",
    "Notification",
    "NotificationType",
    "Project",
    "ProjectProgress",
    "ProjectStatus",
    "Record",
    "Subtask",
    "Suggestion",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
    "UserRole",
]
