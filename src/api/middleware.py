"""
Request tracing middleware

Records an API_REQUEST event for mutating calls on the traced route prefixes,
and an ERROR event for any traced call that fails.
"""

import time
from typing import Callable, Sequence

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.utils.jwt import actor_from_authorization
from src.api.utils.request_info import request_provenance
from src.domain.entities import LogLevel

CAPTURED_HEADERS = ("content-type", "content-length", "accept", "origin")


def should_trace_request(
    path: str,
    method: str,
    status_code: int,
    logged_prefixes: Sequence[str],
    ignored_prefixes: Sequence[str],
    logged_methods: Sequence[str],
) -> bool:
    """
    Decide whether a finished request is worth an audit event.

    Business Rules:
    - Ignored prefixes win over logged prefixes
    - Only paths under a logged prefix are traced
    - Traced when the method mutates state or the response failed
    """
    if any(path.startswith(prefix) for prefix in ignored_prefixes):
        return False
    if not any(path.startswith(prefix) for prefix in logged_prefixes):
        return False
    return method.upper() in logged_methods or status_code >= 400


class RequestTracingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, config) -> None:
        super().__init__(app)
        self.logged_prefixes = tuple(config.LOGGED_ROUTE_PREFIXES)
        self.ignored_prefixes = tuple(config.IGNORED_ROUTE_PREFIXES)
        self.logged_methods = tuple(method.upper() for method in config.LOGGED_METHODS)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            self._trace(request, 500, self._elapsed_ms(started), cause=exc)
            raise

        duration_ms = self._elapsed_ms(started)
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        self._trace(request, response.status_code, duration_ms)
        return response

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)

    def _trace(self, request: Request, status_code: int, duration_ms: int, cause=None) -> None:
        path = request.url.path
        method = request.method
        if not should_trace_request(
            path,
            method,
            status_code,
            self.logged_prefixes,
            self.ignored_prefixes,
            self.logged_methods,
        ):
            return

        log_writer = request.app.state.log_writer
        actor = actor_from_authorization(request.headers.get("authorization"))
        ip, user_agent = request_provenance(request)
        headers = {
            name: request.headers[name] for name in CAPTURED_HEADERS if name in request.headers
        }

        log_writer.record_api_request(
            endpoint=path,
            method=method,
            actor=actor,
            ip=ip,
            user_agent=user_agent,
            headers=headers,
            duration_ms=duration_ms,
            query_params=dict(request.query_params) or None,
        )

        if status_code >= 400:
            log_writer.record_error(
                f"HTTP {status_code}: {method} {path}",
                cause=cause,
                level=LogLevel.ERROR if status_code >= 500 else LogLevel.WARN,
                endpoint=path,
                method=method,
                actor=actor,
                ip=ip,
                user_agent=user_agent,
                operation="HTTP_ERROR",
            )
