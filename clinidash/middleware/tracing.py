import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

TRACE_ID_CTX_VAR: ContextVar[str] = ContextVar("trace_id", default="")

TRACE_HEADER = "x-trace-id"


class TracingMiddleware(BaseHTTPMiddleware):
    """
    Assign a trace_id to every request and echo it on the response.
    An incoming x-trace-id is reused so calls can be correlated across services.
    The trace_id is also stored in a context variable for logging and error envelopes.
    """
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        TRACE_ID_CTX_VAR.set(trace_id)
        request.state.trace_id = trace_id

        response = await call_next(request)

        response.headers[TRACE_HEADER] = trace_id
        return response
