"""Abstract record storage interface and repository pattern implementation.

The record store holds five flat collections (users, projects, tasks,
notifications, ai_suggestions). Each collection is exposed as a
:class:`Repository` with the same small API: point lookup by application id,
filter-and-list, insert, field-level update, delete.

There are no transactions: every call is an independent store operation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from smart_workflow.core.exceptions import RecordNotFoundError
from smart_workflow.core.types import Record

if TYPE_CHECKING:
    from smart_workflow.core.types import Notification, Project, Suggestion, Task, User

RecordT = TypeVar("RecordT", bound=Record)

Filters = Mapping[str, Any]


def field_matches(actual: Any, expected: Any) -> bool:
    """Return True if one stored field satisfies one filter value.

    List-valued fields (``Project.members``) match when they *contain* the
    expected value; everything else matches on equality.
    """
    if isinstance(actual, list):
        return expected in actual
    return actual == expected


def record_matches(
    record: Record,
    filters: Filters | None = None,
    exclude: Filters | None = None,
) -> bool:
    """Return True if *record* satisfies every filter and no exclusion."""
    for field, expected in (filters or {}).items():
        if not field_matches(getattr(record, field, None), expected):
            return False
    for field, rejected in (exclude or {}).items():
        if field_matches(getattr(record, field, None), rejected):
            return False
    return True


class Repository(ABC, Generic[RecordT]):
    """Repository interface for one collection.

    Filters are keyed by **attribute name** (``project_id``, not
    ``projectId``). A filter on a list field means "contains".

    Example:
        ```python
        tasks = store.tasks
        await tasks.insert(task)
        done = await tasks.find({"project_id": "prj_1", "status": "done"})
        await tasks.update_fields(task.id, {"status": TaskStatus.DONE})
        await tasks.delete(task.id)
        ```
    """

    def __init__(self, model: type[RecordT]) -> None:
        self.model = model
        self.collection = model.collection

    @abstractmethod
    async def find_by_id(self, record_id: str) -> RecordT | None:
        """Return the record with *record_id*, or ``None``."""

    @abstractmethod
    async def find(
        self,
        filters: Filters | None = None,
        *,
        exclude: Filters | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[RecordT]:
        """List records matching *filters* and not matching *exclude*.

        Args:
            filters: Equality (or list-contains) conditions, all must hold
            exclude: Conditions that must all fail
            order_by: Attribute to sort on
            descending: Sort direction
            limit: Maximum number of records to return

        Returns:
            Matching records
        """

    @abstractmethod
    async def insert(self, record: RecordT) -> RecordT:
        """Insert a new record.

        Raises:
            ValueError: If a record with the same id already exists
        """

    @abstractmethod
    async def update_fields(self, record_id: str, fields: Mapping[str, Any]) -> RecordT | None:
        """Overwrite *fields* on one record.

        Returns:
            The updated record, or ``None`` when no record matched. Updating a
            missing id is not an error.
        """

    @abstractmethod
    async def add_to_set(self, record_id: str, field: str, value: Any) -> bool:
        """Append *value* to a list field unless already present.

        Returns:
            True if a record matched *record_id*
        """

    @abstractmethod
    async def pull_from_all(self, field: str, value: Any) -> int:
        """Remove *value* from the list field *field* of every record.

        Returns:
            Number of records modified
        """

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        """Delete one record. Returns True if it existed."""

    @abstractmethod
    async def delete_many(self, filters: Filters) -> int:
        """Delete every record matching *filters*. Returns the count deleted."""

    @abstractmethod
    async def count(self, filters: Filters | None = None) -> int:
        """Count records matching *filters*."""

    async def get_by_id(self, record_id: str) -> RecordT:
        """Like :meth:`find_by_id` but raises when the id is unknown.

        Raises:
            RecordNotFoundError: If the record does not exist
        """
        record = await self.find_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(self.collection, record_id)
        return record

    async def find_one(
        self,
        filters: Filters | None = None,
        *,
        exclude: Filters | None = None,
    ) -> RecordT | None:
        """Return the first record matching *filters*, or ``None``."""
        found = await self.find(filters, exclude=exclude, limit=1)
        return found[0] if found else None

    async def exists(self, record_id: str) -> bool:
        return await self.find_by_id(record_id) is not None

    async def insert_many(self, records: Iterable[RecordT]) -> list[RecordT]:
        """Insert several records (batch operation).

        Default implementation inserts one at a time.
        Implementations should override for better performance.
        """
        return [await self.insert(record) for record in records]


class RecordStore(ABC):
    """The five collections of the application, plus lifecycle hooks.

    Implementations:
    - SQLAlchemyRecordStore: persistent storage (SQLite, PostgreSQL, MySQL)
    - InMemoryRecordStore: testing and development
    """

    users: Repository[User]
    projects: Repository[Project]
    tasks: Repository[Task]
    notifications: Repository[Notification]
    suggestions: Repository[Suggestion]

    async def initialize(self) -> None:  # noqa: B027
        """Prepare the backend (create tables...). Idempotent."""

    async def close(self) -> None:  # noqa: B027
        """Release backend resources."""

    @abstractmethod
    async def ping(self) -> None:
        """Round-trip to the backend; raises if it is unreachable."""


__all__ = [
    "Filters",
    "RecordStore",
    "Repository",
    "field_matches",
    "record_matches",
]
