"""
Shared API models

Request and response bodies use camelCase on the wire.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from src.domain.entities import LogLevel, LogType


def _utc_iso(value: datetime) -> str:
    # Stored timestamps are naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


UtcDatetime = Annotated[datetime, PlainSerializer(_utc_iso, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class EventRecordResponse(CamelModel):
    """Single stored event record"""

    id: int
    type: LogType
    level: LogLevel
    operation: str
    entity: Optional[str] = None
    entity_id: Optional[str] = None
    before_state: Optional[Any] = None
    after_state: Optional[Any] = None
    actor: Optional[str] = None
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None
    error_message: Optional[str] = None
    stack_trace: Optional[str] = None
    duration_ms: Optional[int] = None
    endpoint: Optional[str] = None
    method: Optional[str] = None
    request_headers: Optional[Dict[str, Any]] = None
    query_params: Optional[Any] = None
    created_at: UtcDatetime


class EventRecordPageResponse(CamelModel):
    """GET /logs response payload"""

    items: List[EventRecordResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class CleanupResponse(CamelModel):
    message: str
    removed_count: int
