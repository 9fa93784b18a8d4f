"""
Log Query API Routes

Paginated, filtered reads of the event log plus the age-based purge.
Query parameter names follow the public contract of the admin screens.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import Field

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.api.schemas import CamelModel, CleanupResponse, EventRecordPageResponse, EventRecordResponse
from src.api.utils.admin_auth import require_log_admin
from src.api.utils.request_info import request_provenance
from src.app.services.log_writer import LogWriter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.logs import GetEventRecordUseCase, ListEventRecordsUseCase
from src.app.use_cases.retention import CleanupOlderThanUseCase
from src.depends import get_log_writer, get_unit_of_work

router = APIRouter(prefix="/logs", tags=["Logs"])


class PurgeLogsRequest(CamelModel):
    """POST /logs/limpar request payload"""

    days: int = Field(default=ApplicationConfig.DEFAULT_RETENTION_DAYS, alias="dias")


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=EventRecordPageResponse,
)
async def list_logs(
    admin: dict = Depends(require_log_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    page: int = Query(1, alias="pagina"),
    page_size: int = Query(ApplicationConfig.DEFAULT_PAGE_SIZE, alias="limite"),
    operation: Optional[str] = Query(None, alias="acao"),
    entity: Optional[str] = Query(None, alias="entidade"),
    level: Optional[str] = Query(None, alias="nivel"),
    log_type: Optional[str] = Query(None, alias="tipo"),
    actor: Optional[str] = Query(None, alias="usuarioId"),
    date_from: Optional[str] = Query(None, alias="dataInicio"),
    date_to: Optional[str] = Query(None, alias="dataFim"),
    free_text: Optional[str] = Query(None, alias="busca"),
):
    """
    List Event Records

    Newest first. `nivel` and `tipo` accept "_all" as "no filter".

    Raises:
        - 400 Bad Request: Invalid page, page size or filter value
        - 401 Unauthorized: Missing or invalid JWT
        - 403 Forbidden: Insufficient role
        - 504 Gateway Timeout: Query exceeded QUERY_TIMEOUT_SECONDS
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

    use_case = ListEventRecordsUseCase(uow)
    result = await use_case.execute(
        page=page,
        page_size=page_size,
        filters=filters,
        timeout=ApplicationConfig.QUERY_TIMEOUT_SECONDS,
    )

    if result.is_err():
        raise_for_error(result.error)

    record_page = result.value
    return EventRecordPageResponse(
        items=[EventRecordResponse.model_validate(record) for record in record_page.items],
        total=record_page.total,
        page=record_page.page,
        page_size=record_page.page_size,
        total_pages=record_page.total_pages,
    )


@router.get(
    "/{record_id}",
    status_code=status.HTTP_200_OK,
    response_model=EventRecordResponse,
)
async def get_log(
    record_id: int,
    admin: dict = Depends(require_log_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = GetEventRecordUseCase(uow)
    result = await use_case.execute(record_id)

    if result.is_err():
        raise_for_error(result.error)

    return EventRecordResponse.model_validate(result.value)


@router.post(
    "/limpar",
    status_code=status.HTTP_200_OK,
    response_model=CleanupResponse,
)
async def purge_logs(
    request: Request,
    payload: Optional[PurgeLogsRequest] = None,
    admin: dict = Depends(require_log_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    log_writer: LogWriter = Depends(get_log_writer),
):
    """
    Remove logs older than `dias` days (default 90).

    The purge itself is recorded as a CLEANUP event on the LOGS entity.
    """
    days = payload.days if payload is not None else ApplicationConfig.DEFAULT_RETENTION_DAYS

    use_case = CleanupOlderThanUseCase(uow)
    result = await use_case.execute(days)

    if result.is_err():
        raise_for_error(result.error)

    removed = result.value
    ip, user_agent = request_provenance(request)
    log_writer.record_mutation(
        entity="LOGS",
        entity_id=None,
        operation="CLEANUP",
        actor=admin["user_id"],
        after={"removed_count": removed, "days": days},
        ip=ip,
        user_agent=user_agent,
    )

    return CleanupResponse(
        message=f"{removed} logs older than {days} days removed", removed_count=removed
    )
