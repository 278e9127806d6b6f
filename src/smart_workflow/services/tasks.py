"""Task mutations and their side-effect chain.

Creating a task runs, after the task is stored:

1. look up the task's project;
2. add the assignee to the project's members when missing (set union);
3. notify the assignee;
4. recompute the project's progress.

The steps are independent store operations with no transaction around them.
A failure after the insert does not remove the task: the chain stops and a
:class:`~smart_workflow.core.exceptions.SideEffectError` reports which step
failed and that the task itself was committed.

Updates and deletes recompute progress for every project they touch. A
delete captures the task's project before the record disappears.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from smart_workflow.core.exceptions import (
    ImmutableFieldError,
    RecordNotFoundError,
    SideEffectError,
    ValidationFailedError,
)
from smart_workflow.core.types import NotificationType, Task
from smart_workflow.utils.ids import generate_id

if TYPE_CHECKING:
    from smart_workflow.services.notifications import NotificationEmitter
    from smart_workflow.services.progress import ProgressAggregator
    from smart_workflow.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "created_at")


def assignment_message(title: str, project_label: str) -> str:
    return f'You have been assigned a new task: "{title}" in project "{project_label}".'


def _validation_error(exc: ValidationError) -> ValidationFailedError:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return ValidationFailedError("Invalid task data", {"errors": errors})


class TaskService:
    """Create, update, delete and list tasks."""

    def __init__(
        self,
        store: RecordStore,
        aggregator: ProgressAggregator,
        notifications: NotificationEmitter,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.notifications = notifications

    async def create_task(self, fields: Mapping[str, Any]) -> Task:
        """Store a new task and run the assignment chain.

        Args:
            fields: Task attributes by attribute name; ``title``,
                ``project_id`` and ``assignee_id`` are required. ``id`` and
                ``created_at`` are always generated.

        Raises:
            ValidationFailedError: Missing or invalid fields (nothing stored)
            SideEffectError: The task was stored but a later step failed
        """
        if not (fields.get("title") and fields.get("project_id") and fields.get("assignee_id")):
            raise ValidationFailedError("Title, projectId and assigneeId are required")

        data = {k: v for k, v in fields.items() if k not in IMMUTABLE_FIELDS and v is not None}
        try:
            task = Task(id=generate_id(Task.id_prefix), **data)
        except ValidationError as exc:
            raise _validation_error(exc) from exc

        await self.store.tasks.insert(task)
        logger.info(
            "Created task %s in project %s for %s", task.id, task.project_id, task.assignee_id
        )

        step = "project lookup"
        try:
            project = await self.store.projects.find_by_id(task.project_id)

            step = "membership update"
            if project is not None and task.assignee_id not in project.members:
                await self.store.projects.add_to_set(project.id, "members", task.assignee_id)
                logger.info("User %s added to project %s members", task.assignee_id, project.id)

            step = "assignment notification"
            label = project.name if project is not None else task.project_id
            await self.notifications.notify(
                task.assignee_id,
                assignment_message(task.title, label),
                NotificationType.TASK_ASSIGNED,
            )

            step = "progress recomputation"
            await self.aggregator.recompute_project_progress(task.project_id)
        except Exception as exc:
            logger.error("Task %s stored but %s failed: %s", task.id, step, exc, exc_info=True)
            raise SideEffectError("create_task", task.id, step, str(exc)) from exc

        return task

    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        """Overwrite fields of a task and recompute affected projects.

        Raises:
            ImmutableFieldError: *updates* names ``id`` or ``created_at``
            RecordNotFoundError: No task has *task_id*
            ValidationFailedError: The merged task is invalid (nothing stored)
            SideEffectError: The update was stored but recomputation failed
        """
        frozen = [name for name in IMMUTABLE_FIELDS if name in updates]
        if frozen:
            raise ImmutableFieldError(frozen, message="Cannot modify task ID or creation date")

        current = await self.store.tasks.find_by_id(task_id)
        if current is None:
            raise RecordNotFoundError(Task.collection, task_id, message="Task not found")
        if not updates:
            return current

        try:
            updated = await self.store.tasks.update_fields(task_id, dict(updates))
        except ValidationError as exc:
            raise _validation_error(exc) from exc
        if updated is None:
            raise RecordNotFoundError(Task.collection, task_id, message="Task not found")

        try:
            stored = await self.store.tasks.find_by_id(task_id) or updated
            touched = [current.project_id]
            if stored.project_id and stored.project_id != current.project_id:
                touched.append(stored.project_id)
            for project_id in touched:
                await self.aggregator.recompute_project_progress(project_id)
        except Exception as exc:
            logger.error("Task %s updated but progress recomputation failed: %s", task_id, exc)
            raise SideEffectError(
                "update_task", task_id, "progress recomputation", str(exc)
            ) from exc

        logger.info("Updated task %s fields=%s", task_id, sorted(updates))
        return stored

    async def delete_task(self, task_id: str) -> Task:
        """Delete a task and recompute its project's progress.

        Returns:
            The task as it was before deletion

        Raises:
            RecordNotFoundError: No task has *task_id*
            SideEffectError: The task was deleted but recomputation failed
        """
        task = await self.store.tasks.find_by_id(task_id)
        if task is None or not await self.store.tasks.delete(task_id):
            raise RecordNotFoundError(Task.collection, task_id, message="Task not found")
        logger.info("Deleted task %s from project %s", task_id, task.project_id)

        try:
            await self.aggregator.recompute_project_progress(task.project_id)
        except Exception as exc:
            logger.error("Task %s deleted but progress recomputation failed: %s", task_id, exc)
            raise SideEffectError(
                "delete_task", task_id, "progress recomputation", str(exc)
            ) from exc
        return task

    async def list_tasks(
        self,
        *,
        project_id: str | None = None,
        user_id: str | None = None,
        assignee_id: str | None = None,
        is_admin: bool = False,
    ) -> list[Task]:
        """List tasks visible to the caller.

        Admins see every task, optionally narrowed by assignee and project.
        Everyone else must narrow by project and/or user (or assignee).

        Raises:
            ValidationFailedError: A non-admin request names no filter
        """
        filters: dict[str, Any] = {}
        if is_admin:
            if assignee_id:
                filters["assignee_id"] = assignee_id
            if project_id:
                filters["project_id"] = project_id
        elif project_id and user_id:
            filters = {"project_id": project_id, "assignee_id": user_id}
        elif project_id:
            filters = {"project_id": project_id}
        elif user_id:
            filters = {"assignee_id": user_id}
        elif assignee_id:
            filters = {"assignee_id": assignee_id}
        else:
            raise ValidationFailedError(
                "At least projectId, userId, assigneeId, or isAdmin flag must be provided"
            )
        return await self.store.tasks.find(filters, order_by="created_at")


__all__ = ["IMMUTABLE_FIELDS", "TaskService", "assignment_message"]
