"""API middleware: API-key authorization and correlation IDs."""

from __future__ import annotations

import logging
import secrets
import uuid
from contextvars import ContextVar

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

# Correlation id of the request being served; "-" outside a request.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


class CorrelationIdFilter(logging.Filter):
    """Stamp each log record with the current request's correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Reject requests under the protected prefix that lack the configured API key.

    The key is read from X-API-Key or an "Authorization: Bearer" header.
    An empty api_key disables the check (development mode).
    """

    def __init__(
        self,
        app: ASGIApp,
        api_key: str = "",
        protected_prefix: str = "/v1/api",
        exempt_paths: frozenset[str] = frozenset(),
    ) -> None:
        super().__init__(app)
        self.api_key = api_key
        self.protected_prefix = protected_prefix
        self.exempt_paths = exempt_paths

    def _presented_key(self, request: Request) -> str:
        key = request.headers.get("x-api-key", "")
        if key:
            return key
        auth = request.headers.get("authorization", "")
        scheme, _, token = auth.partition(" ")
        if scheme.lower() == "bearer":
            return token.strip()
        return ""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if (
            self.api_key
            and request.method != "OPTIONS"
            and path.startswith(self.protected_prefix)
            and path not in self.exempt_paths
        ):
            presented = self._presented_key(request).encode()
            if not presented or not secrets.compare_digest(presented, self.api_key.encode()):
                logger.warning("Rejected %s %s: missing or invalid API key", request.method, path)
                return JSONResponse(status_code=401, content={"error": "missing or invalid API key"})
        return await call_next(request)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Echo or mint an X-Correlation-Id and expose it to log records.

    The id is held in a context variable, which asyncio.to_thread copies into
    the worker thread, so handler log lines carry it too.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get("x-correlation-id") or uuid.uuid4().hex
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)
        response.headers["X-Correlation-Id"] = correlation_id
        return response
