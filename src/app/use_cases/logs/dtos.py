"""
Event Log Use Case DTOs (Data Transfer Objects)

Commands and responses for the audit log domain.
"""

import json
from datetime import datetime
from math import ceil
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.domain.entities import LogLevel, LogType


# ============================================================================
# Command DTOs
# ============================================================================


class EventRecordInput(BaseModel):
    """Structured event accepted by the log writer"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    type: LogType
    level: LogLevel
    operation: str = Field(min_length=1, max_length=100)

    entity: Optional[str] = Field(default=None, max_length=100)
    entity_id: Optional[str] = Field(default=None, max_length=100)
    before_state: Optional[Any] = None
    after_state: Optional[Any] = None

    actor: Optional[str] = Field(default=None, max_length=100)
    client_ip: Optional[str] = Field(default=None, max_length=100)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    error_message: Optional[str] = None
    stack_trace: Optional[str] = None

    duration_ms: Optional[int] = Field(default=None, ge=0)
    endpoint: Optional[str] = Field(default=None, max_length=500)
    method: Optional[str] = Field(default=None, max_length=10)
    request_headers: Optional[Dict[str, Any]] = None
    query_params: Optional[Any] = None

    @field_validator("actor", "entity_id", mode="before")
    @classmethod
    def coerce_identifier(cls, value: Any) -> Optional[str]:
        # Unauthenticated and system events carry no actor
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("user_agent", "endpoint", mode="before")
    @classmethod
    def clip_provenance(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value[:500]
        return value

    @field_validator("before_state", "after_state", "request_headers", "query_params")
    @classmethod
    def check_json_serializable(cls, value: Any) -> Any:
        if value is None:
            return value
        try:
            json.dumps(value, default=str)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"must be JSON serializable: {exc}")
        return value

    @model_validator(mode="after")
    def check_field_presence(self) -> "EventRecordInput":
        has_error_details = self.error_message is not None or self.stack_trace is not None
        if has_error_details and not (self.level.is_error or self.type == LogType.ERROR):
            raise ValueError(
                "error_message/stack_trace require an ERROR type or an ERROR/CRITICAL level"
            )
        has_snapshots = self.before_state is not None or self.after_state is not None
        if has_snapshots and self.type != LogType.DATA_MUTATION:
            raise ValueError("before_state/after_state are only allowed on DATA_MUTATION events")
        return self


# ============================================================================
# Response DTOs
# ============================================================================


class EventRecordView(BaseModel):
    """Read-only copy of a stored event record, detached from the session"""

    model_config = ConfigDict(from_attributes=True, frozen=True)

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
    created_at: datetime


class EventRecordPage(BaseModel):
    """One page of event records, newest first"""

    items: List[EventRecordView]
    total: int
    page: int
    page_size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.page_size) if self.page_size else 0
