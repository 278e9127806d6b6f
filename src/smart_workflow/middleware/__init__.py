"""HTTP middleware."""

from smart_workflow.middleware.request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
