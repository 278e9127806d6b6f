"""Exception handlers: domain errors to ``{"error": ...}`` JSON responses."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from smart_workflow.core.exceptions import (
    AdminAlreadyExistsError,
    CollaboratorError,
    ConflictError,
    ForbiddenOperationError,
    RecordNotFoundError,
    SideEffectError,
    SuggestionGenerationError,
    ValidationFailedError,
    WorkflowError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

# first match wins, so subclasses precede their parents
_STATUS_CODES: list[tuple[type[WorkflowError], int]] = [
    (ValidationFailedError, status.HTTP_400_BAD_REQUEST),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (AdminAlreadyExistsError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (ForbiddenOperationError, status.HTTP_403_FORBIDDEN),
    (CollaboratorError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


GENERIC_ERROR = "Internal server error"


def status_for(exc: WorkflowError) -> int:
    for exc_type, code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(exc: WorkflowError, status_code: int, debug: bool = False) -> dict[str, Any]:
    """Build the JSON body for *exc*.

    Outside debug mode a 5xx body never carries collaborator text (SQL,
    bound parameters, upstream messages). A :class:`SideEffectError` keeps
    its structured fields so clients can still see the write was committed.
    """
    if isinstance(exc, SuggestionGenerationError):
        return {"error": exc.message, "details": exc.reason}

    if status_code < 500:
        body: dict[str, Any] = {"error": exc.message}
        if exc.details:
            body["details"] = exc.details
        return body

    if debug:
        return {"error": exc.message, "details": exc.details or str(exc)}

    if isinstance(exc, SideEffectError):
        return {
            "error": f"{exc.operation} for {exc.record_id!r} was saved but {exc.step} failed",
            "details": exc.details,
        }
    return {"error": GENERIC_ERROR}


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Install the handlers on *app*. *debug* exposes 5xx details."""

    async def handle_workflow_error(request: Request, exc: WorkflowError) -> JSONResponse:
        code = status_for(exc)
        if code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.info(
                "%s %s rejected [%d]: %s", request.method, request.url.path, code, exc.message
            )
        body = jsonable_encoder(error_body(exc, code, debug))
        return JSONResponse(status_code=code, content=body)

    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("%s %s invalid body: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unexpected error on %s %s: %s", request.method, request.url.path, exc, exc_info=True
        )
        content: dict[str, Any] = {"error": GENERIC_ERROR}
        if debug:
            content["details"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    app.add_exception_handler(WorkflowError, handle_workflow_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)


__all__ = ["GENERIC_ERROR", "error_body", "register_exception_handlers", "status_for"]
