"""Projects: create, list, update, delete.

Clients author a project's name, description and members only. ``progress``
and ``status`` start at ``0``/``active`` and are re-derived from the task set
on every update, whatever the request body says.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from smart_workflow.core.exceptions import (
    RecordNotFoundError,
    SideEffectError,
    ValidationFailedError,
)
from smart_workflow.core.types import LiveEvent, LiveEventType, NotificationType, Project
from smart_workflow.utils.ids import generate_id

if TYPE_CHECKING:
    from collections.abc import Sequence

    from smart_workflow.live.broadcaster import LiveUpdateBroadcaster
    from smart_workflow.services.notifications import NotificationEmitter
    from smart_workflow.services.progress import ProgressAggregator
    from smart_workflow.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "Name, description and members are required"


def membership_message(project_name: str) -> str:
    return f'You have been added to a new project: "{project_name}".'


def _require(name: str | None, description: str | None, members: Sequence[str] | None) -> None:
    if not name or not description or members is None:
        raise ValidationFailedError(REQUIRED_MESSAGE)


class ProjectService:
    """Project lifecycle and its live-update events."""

    def __init__(
        self,
        store: RecordStore,
        aggregator: ProgressAggregator,
        notifications: NotificationEmitter,
        broadcaster: LiveUpdateBroadcaster,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.notifications = notifications
        self.broadcaster = broadcaster

    async def create_project(
        self,
        name: str | None,
        description: str | None,
        members: Sequence[str] | None,
    ) -> Project:
        """Store a new project and tell its members.

        Raises:
            ValidationFailedError: A required field is missing
            SideEffectError: The project was stored but notifying a member failed
        """
        _require(name, description, members)
        project = Project(
            id=generate_id(Project.id_prefix),
            name=name,
            description=description,
            members=list(members or []),
        )
        await self.store.projects.insert(project)
        logger.info("Created project %s with %d member(s)", project.id, len(project.members))

        self.broadcaster.broadcast(
            LiveEvent(type=LiveEventType.PROJECT_CREATED, data=project.to_wire())
        )
        try:
            for member_id in project.members:
                await self.notifications.notify(
                    member_id,
                    membership_message(project.name),
                    NotificationType.PROJECT_ASSIGNED,
                )
        except Exception as exc:
            logger.error("Project %s stored but member notification failed: %s", project.id, exc)
            raise SideEffectError(
                "create_project", project.id, "member notification", str(exc)
            ) from exc
        return project

    async def list_projects(
        self, *, user_id: str | None = None, is_admin: bool = False
    ) -> list[Project]:
        """All projects for the admin, otherwise the projects *user_id* belongs to."""
        if is_admin:
            return await self.store.projects.find(order_by="created_at")
        if not user_id:
            raise ValidationFailedError("User ID is required for non-admin requests")
        return await self.store.projects.find({"members": user_id}, order_by="created_at")

    async def get_project(self, project_id: str) -> Project:
        project = await self.store.projects.find_by_id(project_id)
        if project is None:
            raise RecordNotFoundError(Project.collection, project_id, message="Project not found")
        return project

    async def update_project(
        self,
        project_id: str,
        name: str | None,
        description: str | None,
        members: Sequence[str] | None,
    ) -> Project:
        """Replace the authored fields and re-derive progress/status.

        Raises:
            ValidationFailedError: A required field is missing
            RecordNotFoundError: Unknown *project_id*
        """
        _require(name, description, members)
        updated = await self.store.projects.update_fields(
            project_id,
            {"name": name, "description": description, "members": list(members or [])},
        )
        if updated is None:
            raise RecordNotFoundError(Project.collection, project_id, message="Project not found")

        await self.aggregator.recompute_project_progress(project_id)
        project = await self.get_project(project_id)
        logger.info("Updated project %s", project_id)

        self.broadcaster.broadcast(
            LiveEvent(type=LiveEventType.PROJECT_UPDATED, data=project.to_wire())
        )
        return project

    async def delete_project(self, project_id: str) -> int:
        """Delete a project and every task in it.

        Returns:
            Number of tasks deleted with the project
        """
        if not await self.store.projects.delete(project_id):
            raise RecordNotFoundError(Project.collection, project_id, message="Project not found")
        removed = await self.store.tasks.delete_many({"project_id": project_id})
        logger.info("Deleted project %s and %d task(s)", project_id, removed)

        self.broadcaster.broadcast(
            LiveEvent(type=LiveEventType.PROJECT_DELETED, data={"id": project_id})
        )
        return removed


__all__ = ["ProjectService", "membership_message"]
