"""User accounts.

Sign-in lives with the external identity provider; this service keeps the
application-side user record (id, name, email, role). At most one admin
exists. The admin's credential is stored as a bcrypt hash and can only be
*verified*, never read back.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from smart_workflow.core.exceptions import (
    AdminAlreadyExistsError,
    ConflictError,
    DuplicateEmailError,
    ForbiddenOperationError,
    RecordNotFoundError,
    SideEffectError,
    ValidationFailedError,
)
from smart_workflow.core.types import (
    LiveEvent,
    LiveEventType,
    NotificationType,
    User,
    UserRole,
)
from smart_workflow.utils.ids import generate_id
from smart_workflow.utils.security import hash_password, mask_sensitive_data, verify_password

if TYPE_CHECKING:
    from smart_workflow.identity.base import IdentityProvider
    from smart_workflow.live.broadcaster import LiveUpdateBroadcaster
    from smart_workflow.services.notifications import NotificationEmitter
    from smart_workflow.services.progress import ProgressAggregator
    from smart_workflow.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

ADMIN_RESET_REASON = "Admins cannot reset password here"


def welcome_message(name: str) -> str:
    return f"Welcome, {name}! Your account has been successfully created."


def _normalise_email(email: str | None) -> str:
    return (email or "").strip().lower()


class UserService:
    """Register, look up and delete users."""

    def __init__(
        self,
        store: RecordStore,
        notifications: NotificationEmitter,
        broadcaster: LiveUpdateBroadcaster,
        identity: IdentityProvider,
        aggregator: ProgressAggregator,
    ) -> None:
        self.store = store
        self.notifications = notifications
        self.broadcaster = broadcaster
        self.identity = identity
        self.aggregator = aggregator

    async def register(self, fields: Mapping[str, Any]) -> User:
        """Create the application record for a newly signed-up account.

        Args:
            fields: ``name``, ``email``, ``role`` (default ``user``), ``password``
                (admin only) and an optional caller-chosen ``id``

        Raises:
            ValidationFailedError: Missing name/email, unknown role, or an admin
                without a password
            DuplicateEmailError: The email already belongs to a user
            AdminAlreadyExistsError: An admin already exists (nothing stored)
            SideEffectError: The user was stored but the welcome step failed
        """
        logger.debug("Register request %s", mask_sensitive_data(dict(fields)))
        name = (fields.get("name") or "").strip()
        email = _normalise_email(fields.get("email"))
        if not name or not email:
            raise ValidationFailedError("Name and email are required")
        try:
            role = UserRole(fields.get("role") or UserRole.USER)
        except ValueError as exc:
            raise ValidationFailedError(f"Unknown role: {fields.get('role')!r}") from exc

        if await self.store.users.find_one({"email": email}) is not None:
            raise DuplicateEmailError(email)

        password_hash = None
        if role == UserRole.ADMIN:
            if await self.store.users.find_one({"role": UserRole.ADMIN}) is not None:
                logger.warning("Rejected second admin registration for %s", email)
                raise AdminAlreadyExistsError()
            password = fields.get("password")
            if not password:
                raise ValidationFailedError("Password is required for admin accounts")
            password_hash = await asyncio.to_thread(hash_password, password)

        user_id = fields.get("id") or generate_id("adm" if role == UserRole.ADMIN else "usr")
        try:
            user = User(
                id=user_id,
                name=name,
                email=email,
                role=role,
                password_hash=password_hash,
            )
        except ValidationError as exc:
            errors = exc.errors(include_url=False, include_context=False)
            raise ValidationFailedError("Invalid user data", {"errors": errors}) from exc

        try:
            await self.store.users.insert(user)
        except ValueError as exc:
            raise ConflictError("User with this id already exists", {"id": user_id}) from exc
        logger.info("Registered %s %s (%s)", role.value, user.id, email)

        self.broadcaster.broadcast(LiveEvent(type=LiveEventType.USER_CREATED, data=user.to_wire()))
        try:
            await self.notifications.notify(
                user.id, welcome_message(user.name), NotificationType.WELCOME
            )
        except Exception as exc:
            logger.error("User %s stored but welcome notification failed: %s", user.id, exc)
            raise SideEffectError(
                "register", user.id, "welcome notification", str(exc)
            ) from exc
        return user

    async def get_by_email(self, email: str | None) -> User:
        """Raises ValidationFailedError without email, RecordNotFoundError if unknown."""
        normalised = _normalise_email(email)
        if not normalised:
            raise ValidationFailedError("Email is required")
        user = await self.store.users.find_one({"email": normalised})
        if user is None:
            raise RecordNotFoundError(User.collection, message="User not found")
        return user

    async def get_role(self, email: str | None) -> UserRole:
        return (await self.get_by_email(email)).role

    async def list_users(self) -> list[User]:
        """Every registered user except the admin."""
        return await self.store.users.find(exclude={"role": UserRole.ADMIN})

    async def admin_email(self) -> str | None:
        admin = await self.store.users.find_one({"role": UserRole.ADMIN})
        return admin.email if admin is not None else None

    async def verify_admin_credentials(self, email: str | None, password: str | None) -> bool:
        """True when *email*/*password* match the stored admin credential."""
        if not email or not password:
            raise ValidationFailedError("Email and password are required")
        admin = await self.store.users.find_one({"role": UserRole.ADMIN})
        if admin is None:
            raise RecordNotFoundError(User.collection, message="No admin found")
        if admin.email != _normalise_email(email) or not admin.password_hash:
            return False
        return await asyncio.to_thread(verify_password, password, admin.password_hash)

    async def check_email(self, email: str | None) -> dict[str, Any]:
        """Tell a password-reset form whether *email* can be used.

        An admin found in the store short-circuits with ``isAdmin``; any other
        email is checked against the identity provider.
        """
        normalised = _normalise_email(email)
        if not normalised:
            raise ValidationFailedError("Email is required")
        user = await self.store.users.find_one({"email": normalised})
        if user is not None and user.is_admin():
            return {"registered": True, "isAdmin": True, "reason": ADMIN_RESET_REASON}
        identity = await self.identity.lookup(normalised)
        if identity is None:
            return {"registered": False}
        return {"registered": True, "isAdmin": False}

    async def delete_user(self, user_id: str) -> User:
        """Delete a non-admin user, their tasks and their memberships.

        Projects that lost tasks get their progress recomputed.

        Raises:
            RecordNotFoundError: Unknown *user_id*
            ForbiddenOperationError: *user_id* is the admin
        """
        user = await self.store.users.find_by_id(user_id)
        if user is None:
            raise RecordNotFoundError(User.collection, user_id, message="User not found")
        if user.is_admin():
            raise ForbiddenOperationError("Cannot delete admin user", {"id": user_id})
        if not await self.store.users.delete(user_id):
            raise RecordNotFoundError(User.collection, user_id, message="User not found")

        tasks = await self.store.tasks.find({"assignee_id": user_id})
        removed = await self.store.tasks.delete_many({"assignee_id": user_id})
        pulled = await self.store.projects.pull_from_all("members", user_id)
        logger.info(
            "Deleted user %s: %d task(s) removed, left %d project(s)", user_id, removed, pulled
        )
        for project_id in dict.fromkeys(task.project_id for task in tasks):
            await self.aggregator.recompute_project_progress(project_id)
        return user


__all__ = ["ADMIN_RESET_REASON", "UserService", "welcome_message"]
