"""
Event Log Use Cases

Recording and retrieval of audit events.
"""

from .dtos import EventRecordInput, EventRecordPage, EventRecordView
from .export_event_records_use_case import ExportEventRecordsUseCase
from .get_event_record_use_case import GetEventRecordUseCase
from .list_event_records_use_case import ListEventRecordsUseCase
from .record_event_use_case import RecordEventUseCase

__all__ = [
    "EventRecordInput",
    "EventRecordPage",
    "EventRecordView",
    "ExportEventRecordsUseCase",
    "GetEventRecordUseCase",
    "ListEventRecordsUseCase",
    "RecordEventUseCase",
]
