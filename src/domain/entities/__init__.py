"""
Audit Log Domain Entities

All domain entities organized by model.
"""

# Export all enums
from .enums import LogLevel, LogType

# Export all entities
from .event_record import EventRecord

__all__ = [
    # Enums
    "LogLevel",
    "LogType",
    # Entities
    "EventRecord",
]
