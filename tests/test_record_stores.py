"""Behaviour shared by every RecordStore backend (memory and SQLite)."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from conftest import make_project, make_task, make_user
from smart_workflow.core.exceptions import RecordNotFoundError
from smart_workflow.core.types import (
    Notification,
    NotificationType,
    ProjectStatus,
    Subtask,
    TaskStatus,
    UserRole,
)
from smart_workflow.storage.memory import InMemoryRecordStore
from smart_workflow.storage.sql import SQLAlchemyRecordStore


@pytest.fixture(params=["memory", "sqlite"])
async def store(request):
    if request.param == "memory":
        yield InMemoryRecordStore()
        return
    s = SQLAlchemyRecordStore(database_url="sqlite+aiosqlite:///:memory:", pool_size=1)
    await s.initialize()
    yield s
    await s.close()


class TestInsertAndLookup:

    @pytest.mark.asyncio
    async def test_insert_and_find_by_id(self, store) -> None:
        project = make_project()
        await store.projects.insert(project)
        fetched = await store.projects.find_by_id(project.id)
        assert fetched is not None
        assert fetched.name == project.name
        assert fetched.status == ProjectStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, store) -> None:
        assert await store.tasks.find_by_id("tsk_ghost") is None

    @pytest.mark.asyncio
    async def test_get_by_id_missing_raises(self, store) -> None:
        with pytest.raises(RecordNotFoundError):
            await store.tasks.get_by_id("tsk_ghost")

    @pytest.mark.asyncio
    async def test_duplicate_id_raises(self, store) -> None:
        await store.tasks.insert(make_task())
        with pytest.raises(ValueError):
            await store.tasks.insert(make_task())

    @pytest.mark.asyncio
    async def test_exists(self, store) -> None:
        await store.users.insert(make_user())
        assert await store.users.exists("usr_01")
        assert not await store.users.exists("usr_02")

    @pytest.mark.asyncio
    async def test_insert_many(self, store) -> None:
        inserted = await store.tasks.insert_many([make_task("a"), make_task("b")])
        assert len(inserted) == 2
        assert await store.tasks.count() == 2

    @pytest.mark.asyncio
    async def test_insert_many_empty(self, store) -> None:
        assert await store.tasks.insert_many([]) == []


class TestFind:

    @pytest.mark.asyncio
    async def test_scalar_filter(self, store) -> None:
        await store.tasks.insert(make_task("a", project_id="prj_1"))
        await store.tasks.insert(make_task("b", project_id="prj_2"))
        found = await store.tasks.find({"project_id": "prj_1"})
        assert [t.id for t in found] == ["tsk_a"]

    @pytest.mark.asyncio
    async def test_enum_filter(self, store) -> None:
        await store.tasks.insert(make_task("a", status=TaskStatus.DONE))
        await store.tasks.insert(make_task("b"))
        found = await store.tasks.find({"status": TaskStatus.DONE})
        assert [t.id for t in found] == ["tsk_a"]

    @pytest.mark.asyncio
    async def test_list_field_filter_means_contains(self, store) -> None:
        await store.projects.insert(make_project("1", members=["usr_a", "usr_b"]))
        await store.projects.insert(make_project("2", members=["usr_b"]))
        await store.projects.insert(make_project("3"))
        found = await store.projects.find({"members": "usr_b"}, order_by="id")
        assert [p.id for p in found] == ["prj_1", "prj_2"]

    @pytest.mark.asyncio
    async def test_exclude(self, store) -> None:
        await store.users.insert(make_user("1"))
        await store.users.insert(make_user("2", role=UserRole.ADMIN))
        found = await store.users.find(exclude={"role": UserRole.ADMIN})
        assert [u.id for u in found] == ["usr_1"]

    @pytest.mark.asyncio
    async def test_order_and_limit(self, store) -> None:
        base = datetime(2026, 1, 1, tzinfo=UTC)
        for i in range(5):
            await store.notifications.insert(
                Notification(
                    id=f"not_{i}",
                    user_id="usr_1",
                    message=f"m{i}",
                    type=NotificationType.WELCOME,
                    created_at=base + timedelta(minutes=i),
                )
            )
        newest = await store.notifications.find(
            {"user_id": "usr_1"}, order_by="created_at", descending=True, limit=3
        )
        assert [n.id for n in newest] == ["not_4", "not_3", "not_2"]

    @pytest.mark.asyncio
    async def test_find_one(self, store) -> None:
        await store.users.insert(make_user("1"))
        assert (await store.users.find_one({"email": "user1@example.com"})).id == "usr_1"
        assert await store.users.find_one({"email": "nobody@example.com"}) is None

    @pytest.mark.asyncio
    async def test_count_with_filter(self, store) -> None:
        await store.tasks.insert(make_task("a", project_id="prj_1"))
        await store.tasks.insert(make_task("b", project_id="prj_1"))
        await store.tasks.insert(make_task("c", project_id="prj_2"))
        assert await store.tasks.count({"project_id": "prj_1"}) == 2
        assert await store.tasks.count() == 3


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_fields(self, store) -> None:
        await store.projects.insert(make_project())
        updated = await store.projects.update_fields(
            "prj_01", {"progress": 63, "status": ProjectStatus.COMPLETED}
        )
        assert updated.progress == 63
        fetched = await store.projects.get_by_id("prj_01")
        assert fetched.progress == 63
        assert fetched.status == ProjectStatus.COMPLETED
        assert fetched.name == "Project 01"

    @pytest.mark.asyncio
    async def test_update_missing_is_none(self, store) -> None:
        assert await store.projects.update_fields("prj_ghost", {"progress": 10}) is None

    @pytest.mark.asyncio
    async def test_update_subtasks(self, store) -> None:
        await store.tasks.insert(make_task())
        await store.tasks.update_fields(
            "tsk_01", {"subtasks": [Subtask(id="sub_1", title="write tests").model_dump()]}
        )
        fetched = await store.tasks.get_by_id("tsk_01")
        assert fetched.subtasks[0].id == "sub_1"
        assert fetched.subtasks[0].completed is False

    @pytest.mark.asyncio
    async def test_add_to_set_is_idempotent(self, store) -> None:
        await store.projects.insert(make_project(members=["usr_a"]))
        assert await store.projects.add_to_set("prj_01", "members", "usr_b")
        assert await store.projects.add_to_set("prj_01", "members", "usr_b")
        assert (await store.projects.get_by_id("prj_01")).members == ["usr_a", "usr_b"]

    @pytest.mark.asyncio
    async def test_add_to_set_missing_record(self, store) -> None:
        assert not await store.projects.add_to_set("prj_ghost", "members", "usr_b")

    @pytest.mark.asyncio
    async def test_pull_from_all(self, store) -> None:
        await store.projects.insert(make_project("1", members=["usr_a", "usr_b"]))
        await store.projects.insert(make_project("2", members=["usr_b"]))
        await store.projects.insert(make_project("3", members=["usr_c"]))
        assert await store.projects.pull_from_all("members", "usr_b") == 2
        assert (await store.projects.get_by_id("prj_1")).members == ["usr_a"]
        assert (await store.projects.get_by_id("prj_2")).members == []
        assert (await store.projects.get_by_id("prj_3")).members == ["usr_c"]


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete(self, store) -> None:
        await store.tasks.insert(make_task())
        assert await store.tasks.delete("tsk_01")
        assert await store.tasks.find_by_id("tsk_01") is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, store) -> None:
        assert not await store.tasks.delete("tsk_ghost")

    @pytest.mark.asyncio
    async def test_delete_many(self, store) -> None:
        await store.tasks.insert(make_task("a", assignee_id="usr_1"))
        await store.tasks.insert(make_task("b", assignee_id="usr_1"))
        await store.tasks.insert(make_task("c", assignee_id="usr_2"))
        assert await store.tasks.delete_many({"assignee_id": "usr_1"}) == 2
        assert [t.id for t in await store.tasks.find()] == ["tsk_c"]

    @pytest.mark.asyncio
    async def test_ping(self, store) -> None:
        await store.ping()
