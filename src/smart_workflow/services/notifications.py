"""Notification emitter.

A notification is a message addressed to one user. Emitting one is a pure
construction followed by a single insert: no lookup of earlier
notifications, so repeated triggers produce repeated notifications.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from smart_workflow.core.exceptions import RecordNotFoundError, ValidationFailedError
from smart_workflow.core.types import Notification, NotificationType
from smart_workflow.utils.ids import generate_id

if TYPE_CHECKING:
    from smart_workflow.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


class NotificationEmitter:
    """Create, list and acknowledge notifications.

    Example:
        ```python
        emitter = NotificationEmitter(store)
        await emitter.notify(user.id, "Welcome!", NotificationType.WELCOME)
        latest = await emitter.list_for_user(user.id)
        await emitter.mark_read(latest[0].id)
        ```
    """

    def __init__(self, store: RecordStore, page_size: int = 10) -> None:
        self.store = store
        self.page_size = page_size

    async def notify(self, user_id: str, message: str, type: NotificationType) -> Notification:
        """Persist a new unread notification for *user_id* and return it."""
        notification = Notification(
            id=generate_id(Notification.id_prefix),
            user_id=user_id,
            message=message,
            type=type,
        )
        await self.store.notifications.insert(notification)
        logger.debug("Notified user=%s type=%s", user_id, notification.type.value)
        return notification

    async def list_for_user(
        self, user_id: str | None, limit: int | None = None
    ) -> list[Notification]:
        """Return the newest notifications of *user_id*, newest first.

        Raises:
            ValidationFailedError: If *user_id* is empty
        """
        if not user_id:
            raise ValidationFailedError("userId is required")
        return await self.store.notifications.find(
            {"user_id": user_id},
            order_by="created_at",
            descending=True,
            limit=limit or self.page_size,
        )

    async def mark_read(self, notification_id: str) -> Notification:
        """Set the read flag on one notification.

        Raises:
            RecordNotFoundError: If no notification has *notification_id*
        """
        updated = await self.store.notifications.update_fields(notification_id, {"read": True})
        if updated is None:
            raise RecordNotFoundError(
                Notification.collection, notification_id, message="Notification not found"
            )
        return updated


__all__ = ["NotificationEmitter"]
