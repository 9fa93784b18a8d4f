"""
EventRecord Entity

Immutable audit entry: authentication attempts, API request traces,
errors and data mutations.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Text
from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utc_now

from .enums import LogLevel, LogType


class EventRecord(SQLModel, table=True):
    """
    EventRecord entity - one audit log entry.

    Business Rules:
    - Write-once: never updated, only removed by bulk retention sweeps
    - id is assigned by the store and never reused
    - created_at is assigned at write time by the repository
    - before_state/after_state are opaque JSON snapshots (mutations only)
    - error_message/stack_trace only for ERROR/CRITICAL levels or ERROR type
    """

    __tablename__ = "event_records"

    id: Optional[int] = Field(default=None, primary_key=True)

    type: LogType = Field(index=True)
    level: LogLevel
    operation: str = Field(max_length=100)

    entity: Optional[str] = Field(default=None, max_length=100)
    entity_id: Optional[str] = Field(default=None, max_length=100)
    before_state: Optional[Any] = Field(default=None, sa_column=Column(JSON))
    after_state: Optional[Any] = Field(default=None, sa_column=Column(JSON))

    # Request provenance
    actor: Optional[str] = Field(default=None, max_length=100)
    client_ip: Optional[str] = Field(default=None, max_length=100)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    # Errors
    error_message: Optional[str] = Field(default=None, sa_column=Column(Text))
    stack_trace: Optional[str] = Field(default=None, sa_column=Column(Text))

    # Request tracing
    duration_ms: Optional[int] = None
    endpoint: Optional[str] = Field(default=None, max_length=500)
    method: Optional[str] = Field(default=None, max_length=10)
    request_headers: Optional[Any] = Field(default=None, sa_column=Column(JSON))
    query_params: Optional[Any] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime, nullable=False)
    )

    __table_args__ = (
        Index("idx_event_created_at", "created_at", "id"),
        Index("idx_event_level_created_at", "level", "created_at"),
        Index("idx_event_actor", "actor"),
        Index("idx_event_entity_operation", "entity", "operation"),
        {"sqlite_autoincrement": True},
    )
