"""
Log Administration API Routes

Retention cleanups, log statistics and CSV export.
"""

from typing import Dict, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic import Field

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, raise_for_error
from src.api.schemas import CamelModel, UtcDatetime
from src.api.utils.admin_auth import require_log_admin
from src.api.utils.request_info import request_provenance
from src.app.services.log_writer import LogWriter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.logs import ExportEventRecordsUseCase
from src.app.use_cases.retention import (
    CleanupKeepingMostRecentUseCase,
    CleanupOlderThanUseCase,
    GetLogStatsUseCase,
    LogStats,
)
from src.depends import get_log_writer, get_unit_of_work
from src.domain.retention import recommend

router = APIRouter(prefix="/admin/logs", tags=["Admin Logs"])

CLEANUP_BY_DAYS = "by-days"
CLEANUP_BY_COUNT = "by-count"


class CleanupRequest(CamelModel):
    """POST /admin/logs/cleanup request payload"""

    type: str
    days: Optional[int] = None
    max_logs: Optional[int] = None


class AdminCleanupResponse(CamelModel):
    success: bool
    message: str
    removed_count: int


class CleanupStatsResponse(CamelModel):
    """GET /admin/logs/cleanup-stats response payload"""

    total_logs: int
    counts_by_level: Dict[str, int]
    counts_by_type: Dict[str, int]
    oldest_timestamp: Optional[UtcDatetime] = None
    newest_timestamp: Optional[UtcDatetime] = None
    logs_last_24h: int = Field(alias="logsLast24h")
    logs_last_7_days: int
    recommendation: Literal["count-based", "age-based", "none"]
    recommendation_message: str


@router.post(
    "/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=AdminCleanupResponse,
)
async def cleanup_logs(
    request: Request,
    payload: CleanupRequest,
    admin: dict = Depends(require_log_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    log_writer: LogWriter = Depends(get_log_writer),
):
    """
    Run a retention cleanup.

    - by-days: remove logs older than `days` (default DEFAULT_CLEANUP_DAYS)
    - by-count: keep the `maxLogs` most recent (default DEFAULT_CLEANUP_MAX_LOGS)

    Raises:
        - 400 Bad Request: Unknown cleanup type or invalid days/maxLogs
        - 401 Unauthorized / 403 Forbidden
    """
    if payload.type == CLEANUP_BY_DAYS:
        amount = payload.days if payload.days is not None else ApplicationConfig.DEFAULT_CLEANUP_DAYS
        result = await CleanupOlderThanUseCase(uow).execute(amount)
    elif payload.type == CLEANUP_BY_COUNT:
        amount = (
            payload.max_logs
            if payload.max_logs is not None
            else ApplicationConfig.DEFAULT_CLEANUP_MAX_LOGS
        )
        result = await CleanupKeepingMostRecentUseCase(uow).execute(amount)
    else:
        raise ClientError(
            Error(
                "VALIDATION_ERROR",
                f'Invalid cleanup type. Use "{CLEANUP_BY_DAYS}" or "{CLEANUP_BY_COUNT}"',
            ),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if result.is_err():
        raise_for_error(result.error)

    removed = result.value
    ip, user_agent = request_provenance(request)
    log_writer.record_mutation(
        entity="LOGS",
        entity_id=None,
        operation="CLEANUP",
        actor=admin["user_id"],
        after={"removed_count": removed, "strategy": payload.type, "amount": amount},
        ip=ip,
        user_agent=user_agent,
    )

    return AdminCleanupResponse(
        success=True,
        message=f"Cleanup finished. {removed} logs removed.",
        removed_count=removed,
    )


@router.get(
    "/cleanup-stats",
    status_code=status.HTTP_200_OK,
    response_model=CleanupStatsResponse,
)
async def cleanup_stats(
    admin: dict = Depends(require_log_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = GetLogStatsUseCase(uow)
    result = await use_case.execute(timeout=ApplicationConfig.QUERY_TIMEOUT_SECONDS)

    if result.is_err():
        raise_for_error(result.error)

    stats: LogStats = result.value
    recommendation = recommend(
        stats,
        count_threshold=ApplicationConfig.COUNT_CLEANUP_THRESHOLD,
        age_threshold=ApplicationConfig.AGE_CLEANUP_THRESHOLD,
    )
    return CleanupStatsResponse(
        **stats.model_dump(),
        recommendation=recommendation.value,
        recommendation_message=recommendation.message,
    )


@router.get("/export", status_code=status.HTTP_200_OK)
async def export_logs(
    request: Request,
    admin: dict = Depends(require_log_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    log_writer: LogWriter = Depends(get_log_writer),
    operation: Optional[str] = Query(None, alias="acao"),
    entity: Optional[str] = Query(None, alias="entidade"),
    level: Optional[str] = Query(None, alias="nivel"),
    log_type: Optional[str] = Query(None, alias="tipo"),
    actor: Optional[str] = Query(None, alias="usuarioId"),
    date_from: Optional[str] = Query(None, alias="dataInicio"),
    date_to: Optional[str] = Query(None, alias="dataFim"),
    free_text: Optional[str] = Query(None, alias="busca"),
    limit: int = Query(ApplicationConfig.EXPORT_MAX_ROWS, ge=1),
):
    """
    Export the most recent matching logs as CSV.

    Accepts the same filters as GET /logs. `limit` is capped at EXPORT_MAX_ROWS.
    """
    filters = {
        "operation": operation,
        "entity": entity,
        "level": level,
        "type": log_type,
        "actor": actor,
        "date_from": date_from,
        "date_to": date_to,
        "free_text": free_text,
    }
    use_case = ExportEventRecordsUseCase(uow)
    result = await use_case.execute(
        filters=filters, limit=min(limit, ApplicationConfig.EXPORT_MAX_ROWS)
    )

    if result.is_err():
        raise_for_error(result.error)

    ip, user_agent = request_provenance(request)
    log_writer.record_auth(
        actor=admin["user_id"],
        success=True,
        ip=ip,
        user_agent=user_agent,
        operation="EXPORT_LOGS",
    )

    return Response(
        content=result.value,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="logs.csv"'},
    )
