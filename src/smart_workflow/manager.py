"""Central workflow manager: lifecycle and component orchestration.

The manager owns every long-lived object of the service: the record store,
the identity collaborator, the generative-model client, the live-update
connection registry and the domain services wired on top of them.

Lifecycle
---------
1. **Construct**: validates config, builds components. No I/O.
2. **initialize()**: creates store tables. All I/O happens here.
3. **shutdown()**: waits for in-flight live updates, closes the model client
   and disposes the store.

The recommended integration is :func:`smart_workflow.api.app.create_app`,
which uses :meth:`WorkflowManager.create_lifespan` internally::

    app = FastAPI(lifespan=WorkflowManager.create_lifespan(manager))
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from smart_workflow.ai.gemini import GeminiClient
from smart_workflow.identity.providers import UserDirectoryIdentityProvider
from smart_workflow.live.broadcaster import ConnectionRegistry, LiveUpdateBroadcaster
from smart_workflow.services.notifications import NotificationEmitter
from smart_workflow.services.progress import ProgressAggregator
from smart_workflow.services.projects import ProjectService
from smart_workflow.services.suggestions import SuggestionService
from smart_workflow.services.tasks import TaskService
from smart_workflow.services.users import UserService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI
    from starlette.types import Lifespan

    from smart_workflow.ai.base import TextGenerator
    from smart_workflow.core.config import WorkflowConfig
    from smart_workflow.identity.base import IdentityProvider
    from smart_workflow.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


class WorkflowManager:
    """Orchestrator for all workflow components.

    Parameters
    ----------
    config:
        Validated :class:`~smart_workflow.core.config.WorkflowConfig`.
    store:
        Override the store built from ``config.store_backend``. Useful for
        testing with :class:`~smart_workflow.storage.memory.InMemoryRecordStore`.
    identity:
        Override the identity collaborator (defaults to the users collection).
    generator:
        Override the generative-model client (defaults to :class:`GeminiClient`).
    """

    def __init__(
        self,
        config: WorkflowConfig,
        *,
        store: RecordStore | None = None,
        identity: IdentityProvider | None = None,
        generator: TextGenerator | None = None,
    ) -> None:
        self.config = config
        self._initialized = False

        self.store: RecordStore = store if store is not None else self._build_store()
        self.identity: IdentityProvider = (
            identity if identity is not None else UserDirectoryIdentityProvider(self.store.users)
        )
        self.generator: TextGenerator = (
            generator
            if generator is not None
            else GeminiClient(
                api_key=config.gemini_api_key,
                model=config.gemini_model,
                base_url=config.gemini_base_url,
                timeout=config.ai_timeout_seconds,
            )
        )

        self.registry = ConnectionRegistry()
        self.broadcaster = LiveUpdateBroadcaster(self.registry)
        self.notifications = NotificationEmitter(
            self.store, page_size=config.notification_page_size
        )
        self.aggregator = ProgressAggregator(
            self.store, serialize=config.serialize_project_updates
        )
        self.tasks = TaskService(self.store, self.aggregator, self.notifications)
        self.projects = ProjectService(
            self.store, self.aggregator, self.notifications, self.broadcaster
        )
        self.users = UserService(
            self.store, self.notifications, self.broadcaster, self.identity, self.aggregator
        )
        self.suggestions = SuggestionService(
            self.store,
            self.generator,
            default_hours=config.default_estimated_hours,
            default_role=config.default_suggested_role,
        )

        logger.info(
            "WorkflowManager created store=%s ai_enabled=%s",
            type(self.store).__name__,
            config.ai_enabled,
        )

    def _build_store(self) -> RecordStore:
        if self.config.store_backend == "memory":
            from smart_workflow.storage.memory import InMemoryRecordStore
            return InMemoryRecordStore()

        from smart_workflow.storage.sql import SQLAlchemyRecordStore
        return SQLAlchemyRecordStore(
            database_url=self.config.database_url,
            pool_size=self.config.database_pool_size,
            max_overflow=self.config.database_max_overflow,
            echo=self.config.database_echo,
        )

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Prepare the store. Safe to call multiple times."""
        if self._initialized:
            return

        logger.info("WorkflowManager initialising …")
        await self.store.initialize()
        self._initialized = True
        logger.info("WorkflowManager initialised")

    async def shutdown(self) -> None:
        """Release all resources (pending sends, HTTP client, connection pool)."""
        if not self._initialized:
            return

        logger.info("WorkflowManager shutting down …")
        await self.broadcaster.drain()
        await self.generator.close()
        await self.store.close()
        self._initialized = False
        logger.info("WorkflowManager shutdown complete")

    async def __aenter__(self) -> WorkflowManager:
        """Support ``async with WorkflowManager(config) as m:`` in tests."""
        await self.initialize()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.shutdown()

    @staticmethod
    def create_lifespan(manager: WorkflowManager) -> Lifespan[FastAPI]:
        """Build a FastAPI ``lifespan`` that initialises and shuts down *manager*."""

        @asynccontextmanager
        async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
            app.state.workflow_manager = manager
            app.state.workflow_config = manager.config
            await manager.initialize()
            try:
                yield
            finally:
                await manager.shutdown()

        return _lifespan

    async def health_check(self) -> dict[str, Any]:
        """Return health information for all managed components."""
        health: dict[str, Any] = {"status": "healthy", "components": {}}
        try:
            await self.store.ping()
            health["components"]["record_store"] = {"status": "healthy"}
        except Exception as exc:
            health["status"] = "unhealthy"
            health["components"]["record_store"] = {
                "status": "unhealthy",
                "error": str(exc),
            }
        health["components"]["live_updates"] = {
            "status": "healthy",
            "connections": len(self.registry),
        }
        health["components"]["ai"] = {
            "status": "healthy" if self.config.ai_enabled else "disabled",
        }
        return health

    async def get_metrics(self) -> dict[str, Any]:
        """Return record counts per collection."""
        return {
            "users": await self.store.users.count(),
            "projects": await self.store.projects.count(),
            "tasks": await self.store.tasks.count(),
            "notifications": await self.store.notifications.count(),
            "suggestions": await self.store.suggestions.count(),
            "live_connections": len(self.registry),
            "initialized": self._initialized,
        }


__all__ = ["WorkflowManager"]
