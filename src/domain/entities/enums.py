"""
Audit Log Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class LogType(str, Enum):
    """Category of an audit event"""

    AUTH = "AUTH"
    API_REQUEST = "API_REQUEST"
    DATA_MUTATION = "DATA_MUTATION"
    ERROR = "ERROR"
    SYSTEM = "SYSTEM"


class LogLevel(str, Enum):
    """Severity of an audit event"""

    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def is_error(self) -> bool:
        return self in (LogLevel.ERROR, LogLevel.CRITICAL)
