"""
Get Event Record Use Case
"""

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import EventRecordView


class GetEventRecordUseCase:
    """Use case for fetching a single event record by id"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, record_id: int) -> Result[EventRecordView]:
        async with self.uow:
            try:
                record = await self.uow.event_records.get_by_id(record_id)
                view = None if record is None else EventRecordView.model_validate(record)
            except SQLAlchemyError as exc:
                return Return.err(
                    Error("STORAGE_ERROR", "Failed to load event record", reason=str(exc))
                )

        if view is None:
            return Return.err(
                Error("EVENT_RECORD_NOT_FOUND", f"Event record {record_id} not found")
            )
        return Return.ok(view)
