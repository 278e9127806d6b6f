"""In-memory record storage implementation for testing and development.

WARNING: This implementation stores data in memory only. All data is lost
when the process restarts. Use ONLY for testing and development.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from smart_workflow.core.types import Notification, Project, Suggestion, Task, User
from smart_workflow.storage.record_store import (
    Filters,
    RecordStore,
    RecordT,
    Repository,
    record_matches,
)

logger = logging.getLogger(__name__)


def _sort_key(field: str):
    def key(record: Any) -> tuple[bool, Any]:
        value = getattr(record, field, None)
        return (value is None, value)
    return key


class InMemoryRepository(Repository[RecordT]):
    """Dictionary-backed collection.

    Records are immutable pydantic models, so handing out the stored object
    is safe; updates replace the dictionary entry with a validated copy.

    Attributes:
        _records: Dictionary mapping record id to record, in insertion order
    """

    def __init__(self, model: type[RecordT]) -> None:
        super().__init__(model)
        self._records: dict[str, RecordT] = {}

    async def find_by_id(self, record_id: str) -> RecordT | None:
        record = self._records.get(record_id)
        logger.debug("Lookup %s id=%s hit=%s", self.collection, record_id, record is not None)
        return record

    async def find(
        self,
        filters: Filters | None = None,
        *,
        exclude: Filters | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[RecordT]:
        result = [r for r in self._records.values() if record_matches(r, filters, exclude)]
        if order_by:
            result.sort(key=_sort_key(order_by), reverse=descending)
        if limit is not None:
            result = result[:limit]
        logger.debug("Listed %d %s (filters=%s)", len(result), self.collection, filters)
        return result

    async def insert(self, record: RecordT) -> RecordT:
        if record.id in self._records:
            raise ValueError(f"{self.collection} record with id {record.id} already exists")
        self._records[record.id] = record
        logger.debug("Inserted %s id=%s", self.collection, record.id)
        return record

    async def update_fields(self, record_id: str, fields: Mapping[str, Any]) -> RecordT | None:
        current = self._records.get(record_id)
        if current is None:
            logger.debug("Update on missing %s id=%s ignored", self.collection, record_id)
            return None
        updated = self.model.model_validate({**current.model_dump(), **fields})
        self._records[record_id] = updated
        logger.debug("Updated %s id=%s fields=%s", self.collection, record_id, sorted(fields))
        return updated

    async def add_to_set(self, record_id: str, field: str, value: Any) -> bool:
        current = self._records.get(record_id)
        if current is None:
            return False
        values = list(getattr(current, field) or [])
        if value not in values:
            values.append(value)
            await self.update_fields(record_id, {field: values})
        return True

    async def pull_from_all(self, field: str, value: Any) -> int:
        modified = 0
        for record_id, record in list(self._records.items()):
            values = getattr(record, field, None) or []
            if value in values:
                await self.update_fields(record_id, {field: [v for v in values if v != value]})
                modified += 1
        return modified

    async def delete(self, record_id: str) -> bool:
        existed = self._records.pop(record_id, None) is not None
        if existed:
            logger.debug("Deleted %s id=%s", self.collection, record_id)
        return existed

    async def delete_many(self, filters: Filters) -> int:
        doomed = [r.id for r in self._records.values() if record_matches(r, filters)]
        for record_id in doomed:
            del self._records[record_id]
        logger.debug("Deleted %d %s (filters=%s)", len(doomed), self.collection, filters)
        return len(doomed)

    async def count(self, filters: Filters | None = None) -> int:
        return sum(1 for r in self._records.values() if record_matches(r, filters))

    def clear(self) -> None:
        """Remove every record (for testing)."""
        self._records.clear()


class InMemoryRecordStore(RecordStore):
    """In-memory record store for testing and development.

    DO NOT USE IN PRODUCTION - all data is lost on restart!

    Example:
        ```python
        store = InMemoryRecordStore()
        await store.projects.insert(project)
        project = await store.projects.get_by_id(project.id)
        store.clear()
        ```
    """

    def __init__(self) -> None:
        self.users = InMemoryRepository(User)
        self.projects = InMemoryRepository(Project)
        self.tasks = InMemoryRepository(Task)
        self.notifications = InMemoryRepository(Notification)
        self.suggestions = InMemoryRepository(Suggestion)
        logger.info("Initialized in-memory record store")

    async def ping(self) -> None:
        return None

    def clear(self) -> None:
        """Clear all collections (for testing)."""
        for repo in (self.users, self.projects, self.tasks, self.notifications, self.suggestions):
            repo.clear()
        logger.info("Cleared all records from memory")

    def get_statistics(self) -> dict[str, int]:
        """Record count per collection (for monitoring)."""
        repos = (self.users, self.projects, self.tasks, self.notifications, self.suggestions)
        return {repo.collection: len(repo._records) for repo in repos}


__all__ = ["InMemoryRecordStore", "InMemoryRepository"]
