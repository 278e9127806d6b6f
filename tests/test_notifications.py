"""Tests for the notification emitter."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from smart_workflow.core.exceptions import RecordNotFoundError, ValidationFailedError
from smart_workflow.core.types import Notification, NotificationType
from smart_workflow.services.notifications import NotificationEmitter


@pytest.fixture
def emitter(memory_store) -> NotificationEmitter:
    return NotificationEmitter(memory_store, page_size=10)


class TestNotify:

    @pytest.mark.asyncio
    async def test_creates_unread(self, emitter, memory_store) -> None:
        note = await emitter.notify("usr_1", "hello", NotificationType.WELCOME)
        assert note.id.startswith("not_")
        assert note.read is False
        assert await memory_store.notifications.get_by_id(note.id) == note

    @pytest.mark.asyncio
    async def test_repeats_are_not_deduplicated(self, emitter, memory_store) -> None:
        await emitter.notify("usr_1", "same", NotificationType.TASK_ASSIGNED)
        await emitter.notify("usr_1", "same", NotificationType.TASK_ASSIGNED)
        assert await memory_store.notifications.count({"user_id": "usr_1"}) == 2


class TestListForUser:

    @pytest.mark.asyncio
    async def test_newest_first_and_capped(self, emitter, memory_store) -> None:
        base = datetime(2026, 3, 1, tzinfo=UTC)
        for i in range(12):
            await memory_store.notifications.insert(
                Notification(
                    id=f"not_{i:02d}",
                    user_id="usr_1",
                    message=str(i),
                    type=NotificationType.TASK_ASSIGNED,
                    created_at=base + timedelta(hours=i),
                )
            )

        found = await emitter.list_for_user("usr_1")

        assert len(found) == 10
        assert found[0].id == "not_11"
        assert found[-1].id == "not_02"

    @pytest.mark.asyncio
    async def test_explicit_limit(self, emitter) -> None:
        for _ in range(3):
            await emitter.notify("usr_1", "m", NotificationType.WELCOME)
        assert len(await emitter.list_for_user("usr_1", limit=2)) == 2

    @pytest.mark.asyncio
    async def test_only_own(self, emitter) -> None:
        await emitter.notify("usr_1", "mine", NotificationType.WELCOME)
        await emitter.notify("usr_2", "theirs", NotificationType.WELCOME)
        assert [n.message for n in await emitter.list_for_user("usr_1")] == ["mine"]

    @pytest.mark.asyncio
    async def test_user_required(self, emitter) -> None:
        with pytest.raises(ValidationFailedError, match="userId is required"):
            await emitter.list_for_user("")


class TestMarkRead:

    @pytest.mark.asyncio
    async def test_mark_read(self, emitter, memory_store) -> None:
        note = await emitter.notify("usr_1", "hello", NotificationType.WELCOME)
        updated = await emitter.mark_read(note.id)
        assert updated.read is True
        assert (await memory_store.notifications.get_by_id(note.id)).read is True

    @pytest.mark.asyncio
    async def test_mark_read_twice(self, emitter) -> None:
        note = await emitter.notify("usr_1", "hello", NotificationType.WELCOME)
        await emitter.mark_read(note.id)
        assert (await emitter.mark_read(note.id)).read is True

    @pytest.mark.asyncio
    async def test_missing(self, emitter) -> None:
        with pytest.raises(RecordNotFoundError, match="Notification not found"):
            await emitter.mark_read("not_ghost")
