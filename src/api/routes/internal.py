"""
Internal Log Ingestion Routes

Trusted service-to-service endpoints forwarding events to the log writer.
Callers are not re-authorized here.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from pydantic import Field

from src.api.error import raise_for_error
from src.api.schemas import CamelModel
from src.app.services.log_writer import LogWriter
from src.depends import get_log_writer
from src.domain.entities import LogLevel

router = APIRouter(prefix="/internal", tags=["Internal"])


class MiddlewareLogRequest(CamelModel):
    """POST /internal/middleware-log request payload"""

    endpoint: str = Field(min_length=1)
    method: str = Field(min_length=1, max_length=10)
    actor: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    headers: Optional[Dict[str, Any]] = None
    duration_ms: Optional[int] = Field(default=None, ge=0)
    status_code: int = Field(ge=100, le=599)


@router.post("/audit-log", status_code=status.HTTP_202_ACCEPTED)
async def ingest_audit_log(
    payload: Dict[str, Any] = Body(...),
    log_writer: LogWriter = Depends(get_log_writer),
):
    result = log_writer.record(payload)
    if result.is_err():
        raise_for_error(result.error)
    return {"success": True}


@router.post("/middleware-log", status_code=status.HTTP_202_ACCEPTED)
async def ingest_middleware_log(
    payload: MiddlewareLogRequest,
    log_writer: LogWriter = Depends(get_log_writer),
):
    """Record a request traced by an edge middleware, plus an error event for 4xx/5xx"""
    method = payload.method.upper()
    result = log_writer.record_api_request(
        endpoint=payload.endpoint,
        method=method,
        actor=payload.actor,
        ip=payload.ip,
        user_agent=payload.user_agent,
        headers=payload.headers,
        duration_ms=payload.duration_ms,
    )
    if result.is_err():
        raise_for_error(result.error)

    if payload.status_code >= 400:
        log_writer.record_error(
            f"HTTP {payload.status_code}: {method} {payload.endpoint}",
            level=LogLevel.ERROR if payload.status_code >= 500 else LogLevel.WARN,
            endpoint=payload.endpoint,
            method=method,
            actor=payload.actor,
            ip=payload.ip,
            user_agent=payload.user_agent,
            operation="HTTP_ERROR",
        )

    return {"success": True}
