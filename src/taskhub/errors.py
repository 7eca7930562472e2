"""Boundary error handling: Failure → HTTP status, uniform error envelope.

Every error response has the same shape:

    {"status": 404, "code": "not_found", "message": "Project not found",
     "timestamp": "...", "path": "/api/v1/projects/..."}

Three handlers are registered on the app:
- HTTPException (including ApiError raised from a Failure) → its status
- RequestValidationError → 400 with a per-field `errors` map
- Exception (catch-all) → 500, logged, never leaks internal details

The catch-all runs in Starlette's ServerErrorMiddleware, outside every
middleware added with add_middleware, so a 500 carries the envelope but
no X-Request-ID and no security headers.
"""

from datetime import datetime, timezone
from typing import NoReturn, Optional, TypeVar

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskhub.outcome import Failure, FailureKind, Outcome

logger = structlog.get_logger()

T = TypeVar("T")

FAILURE_STATUS: dict[FailureKind, int] = {
    FailureKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    FailureKind.TOKEN_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    FailureKind.TOKEN_INVALID: status.HTTP_401_UNAUTHORIZED,
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    FailureKind.CONFLICT: status.HTTP_409_CONFLICT,
}

_AUTH_KINDS = {
    FailureKind.UNAUTHORIZED,
    FailureKind.TOKEN_EXPIRED,
    FailureKind.TOKEN_INVALID,
}


class ApiError(HTTPException):
    """HTTPException carrying the machine-readable failure code."""

    def __init__(
        self,
        status_code: int,
        message: str,
        code: str,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code


def raise_for_failure(failure: Failure) -> NoReturn:
    """Translate a core Failure into the matching HTTP error."""
    headers = None
    if failure.kind in _AUTH_KINDS:
        headers = {"WWW-Authenticate": "Bearer"}
    raise ApiError(
        status_code=FAILURE_STATUS[failure.kind],
        message=failure.message,
        code=failure.kind.value,
        headers=headers,
    )


def unwrap(outcome: Outcome[T]) -> T:
    """Return the Ok value, or raise the HTTP error for a Failure."""
    if isinstance(outcome, Failure):
        raise_for_failure(outcome)
    return outcome.value


# ─── Handlers ────────────────────────────────────────────


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = getattr(exc, "code", None) or _default_code(exc.status_code)
        logger.info(
            "http.error",
            status=exc.status_code,
            code=code,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(request, exc.status_code, code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ):
        errors = {}
        for error in exc.errors():
            # loc is ("body", "title") / ("query", "page"); keep the field part
            field = ".".join(str(part) for part in error["loc"][1:]) or "request"
            errors.setdefault(field, error["msg"])
        logger.info("http.validation_failed", path=request.url.path, fields=list(errors))
        content = _envelope(
            request,
            status.HTTP_400_BAD_REQUEST,
            FailureKind.VALIDATION.value,
            "Validation failed",
        )
        content["errors"] = errors
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("http.unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "internal_error",
                "An unexpected error occurred",
            ),
        )


def _envelope(request: Request, status_code: int, code: str, message: str) -> dict:
    return {
        "status": status_code,
        "code": code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
    }


def _default_code(status_code: int) -> str:
    return {
        status.HTTP_401_UNAUTHORIZED: FailureKind.UNAUTHORIZED.value,
        status.HTTP_404_NOT_FOUND: FailureKind.NOT_FOUND.value,
        status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
        status.HTTP_409_CONFLICT: FailureKind.CONFLICT.value,
    }.get(status_code, "http_error")
