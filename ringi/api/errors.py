"""Translate exceptions into ``{success: false, error, code}`` responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ringi.api.schemas import ErrorEnvelope
from ringi.core.errors import StoreUnavailable, WorkflowError
from ringi.observability.tracing import log_event


def _error_response(status_code: int, message: str, code: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(error=message, code=code).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WorkflowError)
    async def _workflow_error(request: Request, exc: WorkflowError) -> JSONResponse:
        if isinstance(exc, StoreUnavailable):
            log_event("store.unavailable", level=logging.ERROR, path=request.url.path, error=str(exc))
        headers = {"Retry-After": "1"} if exc.retryable else None
        return _error_response(exc.status_code, str(exc), exc.code, headers)

    @app.exception_handler(BodyValidationError)
    async def _body_error(request: Request, exc: BodyValidationError) -> JSONResponse:
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return _error_response(422, f"Invalid request: {'; '.join(parts)}", "validation_error")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail), "http_error", getattr(exc, "headers", None))
