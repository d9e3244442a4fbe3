import time
from typing import Any

from fastapi import Request, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from clinidash.middleware.tracing import TRACE_ID_CTX_VAR


class RecordNotFound(LookupError):
    """A patient (or one of its child records) does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.record_id = record_id


class NoLabResults(ValueError):
    """Raised when an export is requested for a patient without lab results."""


class GeminiError(RuntimeError):
    """The generative-language API call failed or returned an unusable payload."""


class GeminiNotConfigured(GeminiError):
    pass


class InvalidDocument(GeminiError):
    pass


def status_to_code(status_code: int) -> str:
    mapping = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        413: "PAYLOAD_TOO_LARGE",
        415: "UNSUPPORTED_MEDIA_TYPE",
        422: "UNPROCESSABLE_ENTITY",
        429: "TOO_MANY_REQUESTS",
        500: "INTERNAL_SERVER_ERROR",
        502: "BAD_GATEWAY",
    }
    return mapping.get(status_code, f"HTTP_{status_code}")


def _envelope(status_code: int, message: str, details: Any = None, headers: dict | None = None) -> JSONResponse:
    body = {"code": status_to_code(status_code), "message": message, "trace_id": TRACE_ID_CTX_VAR.get()}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def handle_http_exception(request: Request, exc: HTTPException):
    detail: Any = exc.detail
    message = detail if isinstance(detail, str) else "HTTP error"
    return _envelope(exc.status_code, message, detail, headers=getattr(exc, "headers", None))


async def handle_validation_exception(request: Request, exc: RequestValidationError):
    return _envelope(status.HTTP_422_UNPROCESSABLE_ENTITY, "Request validation failed", exc.errors())


async def handle_record_not_found(request: Request, exc: RecordNotFound):
    return _envelope(status.HTTP_404_NOT_FOUND, str(exc), {"kind": exc.kind, "id": exc.record_id})


async def handle_gemini_exception(request: Request, exc: GeminiError):
    if isinstance(exc, (GeminiNotConfigured, InvalidDocument)):
        return _envelope(status.HTTP_400_BAD_REQUEST, str(exc))
    return _envelope(status.HTTP_502_BAD_GATEWAY, "AI service unavailable", str(exc))


async def handle_rate_limit_exceeded(request: Request, exc: RateLimitExceeded):
    try:
        retry_after = max(1, int(getattr(exc, "reset_time", time.time()) - time.time()))
    except (TypeError, ValueError):
        retry_after = 60
    return _envelope(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests. Please wait a bit and try again.",
        headers={"Retry-After": str(retry_after)},
    )


async def handle_unhandled_exception(request: Request, exc: Exception):
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        str(exc),
    )
