"""
Record Event Use Case

Persists one validated audit event.
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import EventRecord

from .dtos import EventRecordInput

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... [truncated]"


def cap_snapshot(value: Any, max_bytes: int) -> Any:
    """
    Normalize an opaque snapshot to JSON-safe data, replacing it with a
    marker when its serialized size exceeds max_bytes.
    """
    if value is None:
        return None
    serialized = json.dumps(value, default=str)
    if len(serialized.encode("utf-8")) > max_bytes:
        return {"_truncated": True, "size": len(serialized.encode("utf-8"))}
    return json.loads(serialized)


def truncate_stack_trace(stack_trace: Optional[str], max_length: int) -> Optional[str]:
    if stack_trace is None or len(stack_trace) <= max_length:
        return stack_trace
    return stack_trace[: max(max_length - len(TRUNCATION_MARKER), 0)] + TRUNCATION_MARKER


class RecordEventUseCase:
    """
    Use case for appending an event record to the audit log.

    Business Rules:
    - Input is already validated (EventRecordInput)
    - created_at and id are assigned by the store at write time
    - Snapshots and diagnostic payloads are capped to MAX_SNAPSHOT_BYTES
    - Stack traces are capped to MAX_STACK_TRACE_LENGTH
    - Storage failures are returned as STORAGE_ERROR, never raised
    """

    def __init__(
        self,
        uow: UnitOfWork,
        max_snapshot_bytes: int = ApplicationConfig.MAX_SNAPSHOT_BYTES,
        max_stack_trace_length: int = ApplicationConfig.MAX_STACK_TRACE_LENGTH,
    ):
        self.uow = uow
        self.max_snapshot_bytes = max_snapshot_bytes
        self.max_stack_trace_length = max_stack_trace_length

    async def execute(self, event: EventRecordInput) -> Result[int]:
        """
        Execute record event use case.

        Args:
            event: Validated event payload

        Returns:
            Result with the id assigned to the new record, or Error
        """
        record = EventRecord(
            type=event.type,
            level=event.level,
            operation=event.operation,
            entity=event.entity,
            entity_id=event.entity_id,
            before_state=cap_snapshot(event.before_state, self.max_snapshot_bytes),
            after_state=cap_snapshot(event.after_state, self.max_snapshot_bytes),
            actor=event.actor,
            client_ip=event.client_ip,
            user_agent=event.user_agent,
            error_message=event.error_message,
            stack_trace=truncate_stack_trace(event.stack_trace, self.max_stack_trace_length),
            duration_ms=event.duration_ms,
            endpoint=event.endpoint,
            method=event.method,
            request_headers=cap_snapshot(event.request_headers, self.max_snapshot_bytes),
            query_params=cap_snapshot(event.query_params, self.max_snapshot_bytes),
        )

        async with self.uow:
            try:
                record = await self.uow.event_records.create(record)
                record_id = record.id
                await self.uow.commit()
            except SQLAlchemyError as exc:
                logger.error(f"Failed to persist event record {event.operation}: {exc}")
                return Return.err(
                    Error("STORAGE_ERROR", "Failed to persist event record", reason=str(exc))
                )

        return Return.ok(record_id)
