"""HTTP routes.

Handlers are thin: parse the body, call one service, shape the response.
Errors raised by services are converted by :mod:`smart_workflow.api.errors`.
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse

from smart_workflow.api.schemas import (
    AdminCredentialsBody,
    EmailBody,
    ProjectBody,
    RegisterBody,
    SuggestionBody,
    TaskCreateBody,
    TaskUpdateBody,
)
from smart_workflow.core.exceptions import RecordNotFoundError, ValidationFailedError
from smart_workflow.dependencies import (
    get_manager,
    get_notification_emitter,
    get_project_service,
    get_suggestion_service,
    get_task_service,
    get_user_service,
)
from smart_workflow.manager import WorkflowManager
from smart_workflow.services.notifications import NotificationEmitter
from smart_workflow.services.projects import ProjectService
from smart_workflow.services.suggestions import SuggestionService
from smart_workflow.services.tasks import TaskService
from smart_workflow.services.users import UserService

router = APIRouter()

Users = Annotated[UserService, Depends(get_user_service)]
Projects = Annotated[ProjectService, Depends(get_project_service)]
Tasks = Annotated[TaskService, Depends(get_task_service)]
Notifications = Annotated[NotificationEmitter, Depends(get_notification_emitter)]
Suggestions = Annotated[SuggestionService, Depends(get_suggestion_service)]


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Smart WorkFlow is working"


@router.get("/health")
async def health(manager: Annotated[WorkflowManager, Depends(get_manager)]) -> JSONResponse:
    report = await manager.health_check()
    healthy = report["status"] == "healthy"
    code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=report)


# ── Users ─────────────────────────────────────────────────────────────────────

@router.post("/check-email")
async def check_email(body: EmailBody, users: Users) -> dict[str, Any]:
    return await users.check_email(body.email)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterBody, users: Users) -> dict[str, Any]:
    user = await users.register(body.model_dump(exclude_none=True))
    return user.to_wire()


@router.get("/get-role")
async def get_role(users: Users, email: str | None = None) -> dict[str, Any]:
    return {"role": (await users.get_role(email)).value}


@router.get("/users")
async def list_users(users: Users) -> list[dict[str, Any]]:
    return [user.to_wire() for user in await users.list_users()]


@router.get("/loggedinuser", response_model=None)
async def logged_in_user(
    users: Users, email: str | None = None
) -> list[dict[str, Any]] | JSONResponse:
    try:
        user = await users.get_by_email(email)
    except (ValidationFailedError, RecordNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=[])
    return [user.to_wire()]


@router.get("/admin-email")
async def admin_email(users: Users) -> dict[str, Any]:
    return {"adminEmail": await users.admin_email()}


@router.post("/admin/verify-credentials")
async def verify_admin_credentials(body: AdminCredentialsBody, users: Users) -> dict[str, Any]:
    return {"valid": await users.verify_admin_credentials(body.email, body.password)}


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, users: Users) -> dict[str, Any]:
    await users.delete_user(user_id)
    return {"message": "User deleted successfully"}


# ── Projects ──────────────────────────────────────────────────────────────────

@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectBody, projects: Projects) -> dict[str, Any]:
    project = await projects.create_project(body.name, body.description, body.members)
    return project.to_wire()


@router.get("/projects")
async def list_projects(
    projects: Projects,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    is_admin: Annotated[bool, Query(alias="isAdmin")] = False,
) -> list[dict[str, Any]]:
    found = await projects.list_projects(user_id=user_id, is_admin=is_admin)
    return [project.to_wire() for project in found]


@router.put("/projects/{project_id}")
async def update_project(project_id: str, body: ProjectBody, projects: Projects) -> dict[str, Any]:
    project = await projects.update_project(
        project_id, body.name, body.description, body.members
    )
    return {"message": "Project updated successfully", "updatedProject": project.to_wire()}


@router.delete("/projects/{project_id}")
async def delete_project(project_id: str, projects: Projects) -> dict[str, Any]:
    await projects.delete_project(project_id)
    return {"message": "Project and associated tasks deleted successfully"}


# ── Tasks ─────────────────────────────────────────────────────────────────────

@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreateBody, tasks: Tasks) -> dict[str, Any]:
    task = await tasks.create_task(body.model_dump(exclude_none=True))
    return task.to_wire()


@router.get("/tasks")
async def list_tasks(
    tasks: Tasks,
    project_id: Annotated[str | None, Query(alias="projectId")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    assignee_id: Annotated[str | None, Query(alias="assigneeId")] = None,
    is_admin: Annotated[bool, Query(alias="isAdmin")] = False,
) -> list[dict[str, Any]]:
    found = await tasks.list_tasks(
        project_id=project_id,
        user_id=user_id,
        assignee_id=assignee_id,
        is_admin=is_admin,
    )
    return [task.to_wire() for task in found]


@router.put("/tasks/{task_id}")
async def update_task(task_id: str, body: TaskUpdateBody, tasks: Tasks) -> dict[str, Any]:
    task = await tasks.update_task(task_id, body.model_dump(exclude_unset=True))
    return {"message": "Task updated successfully", "task": task.to_wire()}


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, tasks: Tasks) -> dict[str, Any]:
    await tasks.delete_task(task_id)
    return {"message": "Task deleted successfully"}


# ── Notifications ─────────────────────────────────────────────────────────────

@router.get("/notifications")
async def list_notifications(
    notifications: Notifications,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> list[dict[str, Any]]:
    return [n.to_wire() for n in await notifications.list_for_user(user_id)]


@router.put("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str, notifications: Notifications
) -> dict[str, Any]:
    await notifications.mark_read(notification_id)
    return {"message": "Notification marked as read"}


# ── AI suggestions ────────────────────────────────────────────────────────────

@router.post("/generate-ai-suggestions")
async def generate_ai_suggestions(
    body: SuggestionBody, suggestions: Suggestions
) -> list[dict[str, Any]]:
    created = await suggestions.generate_suggestions(body.project_goal, body.user_role)
    return [s.to_wire() for s in created]


__all__ = ["router"]
