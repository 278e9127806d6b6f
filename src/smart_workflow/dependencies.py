"""FastAPI dependency-injection helpers.

Every helper resolves the :class:`~smart_workflow.manager.WorkflowManager`
stored on ``app.state`` by :func:`~smart_workflow.api.app.create_app`, so
route handlers never touch module-level state.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from smart_workflow.manager import WorkflowManager
from smart_workflow.services.notifications import NotificationEmitter
from smart_workflow.services.projects import ProjectService
from smart_workflow.services.suggestions import SuggestionService
from smart_workflow.services.tasks import TaskService
from smart_workflow.services.users import UserService


def get_manager(connection: HTTPConnection) -> WorkflowManager:
    """Return the manager of the running app (works for HTTP and WebSocket).

    Example
    -------
    .. code-block:: python

        @app.get("/stats")
        async def stats(manager: WorkflowManager = Depends(get_manager)):
            return await manager.get_metrics()
    """
    manager = getattr(connection.app.state, "workflow_manager", None)
    if manager is None:
        raise RuntimeError(
            "workflow_manager not found on app.state. "
            "Did you forget to build the app with create_app()?"
        )
    return manager


def get_task_service(manager: Annotated[WorkflowManager, Depends(get_manager)]) -> TaskService:
    return manager.tasks


def get_project_service(
    manager: Annotated[WorkflowManager, Depends(get_manager)],
) -> ProjectService:
    return manager.projects


def get_user_service(manager: Annotated[WorkflowManager, Depends(get_manager)]) -> UserService:
    return manager.users


def get_notification_emitter(
    manager: Annotated[WorkflowManager, Depends(get_manager)],
) -> NotificationEmitter:
    return manager.notifications


def get_suggestion_service(
    manager: Annotated[WorkflowManager, Depends(get_manager)],
) -> SuggestionService:
    return manager.suggestions


__all__ = [
    "get_manager",
    "get_notification_emitter",
    "get_project_service",
    "get_suggestion_service",
    "get_task_service",
    "get_user_service",
]
