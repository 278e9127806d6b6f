"""Application factory.

.. code-block:: python

    from smart_workflow.api.app import create_app

    app = create_app()          # WorkflowConfig() read from WORKFLOW_* env vars
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smart_workflow import __version__
from smart_workflow.api.errors import register_exception_handlers
from smart_workflow.api.live import router as live_router
from smart_workflow.api.routes import router
from smart_workflow.core.config import WorkflowConfig
from smart_workflow.manager import WorkflowManager
from smart_workflow.middleware.request_logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the root logger (once) and set package level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("smart_workflow").setLevel(level)


def create_app(
    config: WorkflowConfig | None = None,
    *,
    manager: WorkflowManager | None = None,
) -> FastAPI:
    """Build the FastAPI application around a :class:`WorkflowManager`.

    The manager is attached to ``app.state`` immediately, so the app also
    works under transports that skip the lifespan (``httpx.ASGITransport``)
    once ``manager.initialize()`` has been awaited.
    """
    if config is None:
        config = manager.config if manager is not None else WorkflowConfig()
    configure_logging(config.log_level)
    if manager is None:
        manager = WorkflowManager(config)

    app = FastAPI(
        title="Smart Workflow",
        version=__version__,
        lifespan=WorkflowManager.create_lifespan(manager),
    )
    app.state.workflow_manager = manager
    app.state.workflow_config = config

    app.add_middleware(RequestLoggingMiddleware, timing_header=config.debug_errors)
    wildcard = "*" in config.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=not wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, debug=config.debug_errors)
    app.include_router(router)
    app.include_router(live_router)

    logger.info("Smart Workflow app created (version %s)", __version__)
    return app


__all__ = ["configure_logging", "create_app"]
