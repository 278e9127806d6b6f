"""Tests for user registration, lookup and deletion."""
from __future__ import annotations

import json

import pytest

from conftest import make_project, make_task, make_user
from smart_workflow.core.exceptions import (
    AdminAlreadyExistsError,
    DuplicateEmailError,
    ForbiddenOperationError,
    RecordNotFoundError,
    SideEffectError,
    ValidationFailedError,
)
from smart_workflow.core.types import NotificationType, ProjectStatus, TaskStatus, UserRole
from smart_workflow.identity.providers import InMemoryIdentityProvider
from smart_workflow.manager import WorkflowManager
from smart_workflow.services.users import ADMIN_RESET_REASON


async def register_admin(manager, email="boss@example.com", password="s3cret-pass"):
    return await manager.users.register(
        {"name": "Boss", "email": email, "role": "admin", "password": password}
    )


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_user(self, manager) -> None:
        user = await manager.users.register({"name": "Ada", "email": "Ada@Example.com"})
        assert user.id.startswith("usr_")
        assert user.email == "ada@example.com"
        assert user.role == UserRole.USER
        assert await manager.store.users.exists(user.id)

    @pytest.mark.asyncio
    async def test_caller_chosen_id(self, manager) -> None:
        user = await manager.users.register({"id": "uid-123", "name": "Ada", "email": "a@x.io"})
        assert user.id == "uid-123"

    @pytest.mark.asyncio
    async def test_welcome_notification(self, manager) -> None:
        user = await manager.users.register({"name": "Ada", "email": "ada@example.com"})
        notes = await manager.notifications.list_for_user(user.id)
        assert len(notes) == 1
        assert notes[0].type == NotificationType.WELCOME
        assert notes[0].message == "Welcome, Ada! Your account has been successfully created."

    @pytest.mark.asyncio
    async def test_user_created_broadcast(self, manager, channel) -> None:
        user = await manager.users.register({"name": "Ada", "email": "ada@example.com"})
        await manager.broadcaster.drain()

        assert len(channel.frames) == 1
        frame = json.loads(channel.frames[0])
        assert frame["type"] == "userCreated"
        assert frame["data"]["id"] == user.id
        assert frame["data"]["email"] == "ada@example.com"
        assert "passwordHash" not in frame["data"]

    @pytest.mark.parametrize("fields", [{"name": "Ada"}, {"email": "a@x.io"}, {"name": " "}])
    @pytest.mark.asyncio
    async def test_required_fields(self, manager, fields) -> None:
        with pytest.raises(ValidationFailedError, match="Name and email are required"):
            await manager.users.register(fields)

    @pytest.mark.asyncio
    async def test_unknown_role(self, manager) -> None:
        with pytest.raises(ValidationFailedError, match="Unknown role"):
            await manager.users.register({"name": "A", "email": "a@x.io", "role": "root"})

    @pytest.mark.asyncio
    async def test_duplicate_email(self, manager) -> None:
        await manager.users.register({"name": "Ada", "email": "ada@example.com"})
        with pytest.raises(DuplicateEmailError):
            await manager.users.register({"name": "Other", "email": "ADA@example.com"})
        assert await manager.store.users.count() == 1

    @pytest.mark.asyncio
    async def test_admin_password_hashed(self, manager) -> None:
        admin = await register_admin(manager)
        assert admin.id.startswith("adm_")
        assert admin.password_hash
        assert "s3cret-pass" not in admin.password_hash
        assert admin.password_hash.startswith("$2b$10$")
        assert "passwordHash" not in admin.to_wire()

    @pytest.mark.asyncio
    async def test_admin_requires_password(self, manager) -> None:
        with pytest.raises(ValidationFailedError, match="Password is required"):
            await manager.users.register({"name": "B", "email": "b@x.io", "role": "admin"})

    @pytest.mark.asyncio
    async def test_second_admin_rejected_without_side_effects(self, manager, channel) -> None:
        await register_admin(manager)
        await manager.broadcaster.drain()
        frames_before = len(channel.frames)
        notes_before = await manager.store.notifications.count()

        with pytest.raises(AdminAlreadyExistsError, match="Admin already exists"):
            await register_admin(manager, email="second@example.com")

        await manager.broadcaster.drain()
        assert await manager.store.users.count() == 1
        assert await manager.store.notifications.count() == notes_before
        assert len(channel.frames) == frames_before

    @pytest.mark.asyncio
    async def test_welcome_failure_keeps_user(self, manager, monkeypatch) -> None:
        async def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(manager.notifications, "notify", broken)
        with pytest.raises(SideEffectError) as exc_info:
            await manager.users.register({"name": "Ada", "email": "ada@example.com"})
        assert exc_info.value.step == "welcome notification"
        assert await manager.store.users.exists(exc_info.value.record_id)


class TestLookup:

    @pytest.mark.asyncio
    async def test_get_by_email(self, manager) -> None:
        await manager.store.users.insert(make_user("01"))
        user = await manager.users.get_by_email(" USER01@example.com ")
        assert user.id == "usr_01"

    @pytest.mark.asyncio
    async def test_get_by_email_missing(self, manager) -> None:
        with pytest.raises(RecordNotFoundError, match="User not found"):
            await manager.users.get_by_email("ghost@example.com")

    @pytest.mark.asyncio
    async def test_get_by_email_required(self, manager) -> None:
        with pytest.raises(ValidationFailedError, match="Email is required"):
            await manager.users.get_by_email(None)

    @pytest.mark.asyncio
    async def test_get_role(self, manager) -> None:
        await register_admin(manager)
        assert await manager.users.get_role("boss@example.com") == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_list_excludes_admin(self, manager) -> None:
        await register_admin(manager)
        await manager.store.users.insert(make_user("01"))
        assert [u.id for u in await manager.users.list_users()] == ["usr_01"]

    @pytest.mark.asyncio
    async def test_admin_email(self, manager) -> None:
        assert await manager.users.admin_email() is None
        await register_admin(manager)
        assert await manager.users.admin_email() == "boss@example.com"


class TestAdminCredentials:

    @pytest.mark.asyncio
    async def test_valid(self, manager) -> None:
        await register_admin(manager)
        assert await manager.users.verify_admin_credentials("boss@example.com", "s3cret-pass")

    @pytest.mark.asyncio
    async def test_wrong_password(self, manager) -> None:
        await register_admin(manager)
        assert not await manager.users.verify_admin_credentials("boss@example.com", "nope")

    @pytest.mark.asyncio
    async def test_wrong_email(self, manager) -> None:
        await register_admin(manager)
        assert not await manager.users.verify_admin_credentials("x@example.com", "s3cret-pass")

    @pytest.mark.asyncio
    async def test_no_admin(self, manager) -> None:
        with pytest.raises(RecordNotFoundError, match="No admin found"):
            await manager.users.verify_admin_credentials("boss@example.com", "pw")

    @pytest.mark.asyncio
    async def test_missing_input(self, manager) -> None:
        with pytest.raises(ValidationFailedError):
            await manager.users.verify_admin_credentials("boss@example.com", "")


class TestCheckEmail:

    @pytest.mark.asyncio
    async def test_admin_short_circuits(self, manager) -> None:
        await register_admin(manager)
        result = await manager.users.check_email("boss@example.com")
        assert result == {"registered": True, "isAdmin": True, "reason": ADMIN_RESET_REASON}

    @pytest.mark.asyncio
    async def test_registered_user(self, manager) -> None:
        await manager.store.users.insert(make_user("01"))
        assert await manager.users.check_email("user01@example.com") == {
            "registered": True,
            "isAdmin": False,
        }

    @pytest.mark.asyncio
    async def test_unknown_email(self, manager) -> None:
        assert await manager.users.check_email("ghost@example.com") == {"registered": False}

    @pytest.mark.asyncio
    async def test_external_identity_provider(self, config, memory_store, generator) -> None:
        identity = InMemoryIdentityProvider(["known@example.com"])
        async with WorkflowManager(
            config, store=memory_store, identity=identity, generator=generator
        ) as m:
            assert (await m.users.check_email("known@example.com"))["registered"] is True
            assert (await m.users.check_email("other@example.com"))["registered"] is False


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_cascade(self, manager) -> None:
        store = manager.store
        await store.users.insert(make_user("01"))
        await store.users.insert(make_user("02"))
        await store.projects.insert(make_project("01", members=["usr_01", "usr_02"]))
        await store.projects.insert(make_project("02", members=["usr_01"]))
        await store.tasks.insert(make_task("a", assignee_id="usr_01"))
        await store.tasks.insert(make_task("b", assignee_id="usr_02", status=TaskStatus.DONE))
        await manager.aggregator.recompute_project_progress("prj_01")
        assert (await store.projects.get_by_id("prj_01")).progress == 50

        deleted = await manager.users.delete_user("usr_01")

        assert deleted.id == "usr_01"
        assert not await store.users.exists("usr_01")
        assert [t.id for t in await store.tasks.find()] == ["tsk_b"]
        assert (await store.projects.get_by_id("prj_01")).members == ["usr_02"]
        assert (await store.projects.get_by_id("prj_02")).members == []
        project = await store.projects.get_by_id("prj_01")
        assert (project.progress, project.status) == (100, ProjectStatus.COMPLETED)

    @pytest.mark.asyncio
    async def test_admin_protected(self, manager) -> None:
        admin = await register_admin(manager)
        with pytest.raises(ForbiddenOperationError, match="Cannot delete admin user"):
            await manager.users.delete_user(admin.id)
        assert await manager.store.users.exists(admin.id)

    @pytest.mark.asyncio
    async def test_missing(self, manager) -> None:
        with pytest.raises(RecordNotFoundError, match="User not found"):
            await manager.users.delete_user("usr_ghost")
