"""
Export Event Records Use Case

Renders the newest matching event records as CSV.
"""

import csv
import io
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import EventRecordView
from .list_event_records_use_case import parse_filters

CSV_HEADERS = [
    "id",
    "created_at",
    "type",
    "level",
    "operation",
    "entity",
    "entity_id",
    "actor",
    "client_ip",
    "endpoint",
    "method",
    "duration_ms",
    "error_message",
]


class ExportEventRecordsUseCase:
    """
    Use case for exporting event records to CSV.

    Business Rules:
    - Same filters as the listing
    - At most `limit` records, newest first
    - Snapshots, headers and stack traces are not exported
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = ApplicationConfig.EXPORT_MAX_ROWS,
    ) -> Result[str]:
        if limit < 1:
            return Return.err(Error("VALIDATION_ERROR", "limit must be a positive integer"))

        parsed = parse_filters(filters)
        if parsed.is_err():
            return parsed

        async with self.uow:
            try:
                records, _ = await self.uow.event_records.list_paginated(
                    parsed.value, offset=0, limit=limit
                )
                records = [EventRecordView.model_validate(record) for record in records]
            except SQLAlchemyError as exc:
                return Return.err(
                    Error("STORAGE_ERROR", "Failed to export event records", reason=str(exc))
                )

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_HEADERS)
        for record in records:
            writer.writerow(
                [
                    record.id,
                    record.created_at.isoformat(),
                    record.type.value,
                    record.level.value,
                    record.operation,
                    record.entity or "",
                    record.entity_id or "",
                    record.actor or "",
                    record.client_ip or "",
                    record.endpoint or "",
                    record.method or "",
                    "" if record.duration_ms is None else record.duration_ms,
                    record.error_message or "",
                ]
            )
        return Return.ok(buffer.getvalue())
