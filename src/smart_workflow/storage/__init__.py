"""Storage implementations for workflow records.

This module provides two record store backends:
- SQLAlchemy: persistent storage (SQLite, PostgreSQL, MySQL)
- In-Memory: testing and development

Example:
    ```python
    # Production: PostgreSQL
    from smart_workflow.storage.sql import SQLAlchemyRecordStore

    store = SQLAlchemyRecordStore(
        database_url="postgresql+asyncpg://localhost/workflow"
    )
    await store.initialize()
    project = await store.projects.get_by_id("prj_lx2k9c1q4h7d0a9z")

    # Development: In-Memory
    from smart_workflow.storage.memory import InMemoryRecordStore

    store = InMemoryRecordStore()
    await store.tasks.insert(Task(...))
    ```
"""

from smart_workflow.storage.memory import InMemoryRecordStore, InMemoryRepository
from smart_workflow.storage.record_store import Filters, RecordStore, Repository
from smart_workflow.storage.sql import SQLAlchemyRecordStore, SQLAlchemyRepository

__all__ = [
    "Filters",
    "InMemoryRecordStore",
    "InMemoryRepository",
    "RecordStore",
    "Repository",
    "SQLAlchemyRecordStore",
    "SQLAlchemyRepository",
]
