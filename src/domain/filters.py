"""
Event record filters

Conjunctive query filters shared by the query use cases and repositories.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from src.domain.base import to_naive_utc
from src.domain.entities import LogLevel, LogType

# Sentinel accepted by the level/type filters meaning "do not filter"
ALL = "_all"


class EventRecordFilters(BaseModel):
    """Conjunctive filters for event record listing (unknown keys are ignored)"""

    model_config = ConfigDict(extra="ignore")

    operation: Optional[str] = None
    entity: Optional[str] = None
    level: Optional[LogLevel] = None
    type: Optional[LogType] = None
    actor: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    free_text: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("level", "type", mode="before")
    @classmethod
    def all_to_none(cls, value: Any) -> Any:
        if value == ALL:
            return None
        if isinstance(value, str):
            value = value.strip().upper()
            return "WARN" if value == "WARNING" else value
        return value

    @field_validator("date_from", "date_to")
    @classmethod
    def normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None
