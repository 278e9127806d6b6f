"""HTTP and WebSocket surface."""

from smart_workflow.api.app import configure_logging, create_app

__all__ = ["configure_logging", "create_app"]
