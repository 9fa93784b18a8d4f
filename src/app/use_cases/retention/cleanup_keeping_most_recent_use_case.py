"""
Cleanup Keeping Most Recent Use Case

Count-based retention sweep.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CleanupKeepingMostRecentUseCase:
    """
    Use case for keeping only the most recent event records.

    Business Rules:
    - max_count must be a positive integer
    - Order is created_at DESC, id DESC; the first max_count records survive
    - The pivot (record at rank max_count) is fixed before the delete runs;
      records written afterwards rank ahead of it and are never removed
    - The delete is a single statement committed as one unit
    - total <= max_count removes 0
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, max_count: int) -> Result[int]:
        """
        Execute count-based cleanup.

        Args:
            max_count: Number of most recent records to keep

        Returns:
            Result with the number of removed records, or Error
        """
        if isinstance(max_count, bool) or not isinstance(max_count, int) or max_count < 1:
            return Return.err(
                Error("VALIDATION_ERROR", "max_count must be a positive integer")
            )

        async with self.uow:
            try:
                pivot = await self.uow.event_records.find_nth_most_recent(max_count)
                if pivot is None:
                    return Return.ok(0)

                removed = await self.uow.event_records.delete_ranked_after(pivot)
                await self.uow.commit()
            except SQLAlchemyError as exc:
                logger.error(f"Count-based log cleanup failed: {exc}")
                return Return.err(
                    Error("STORAGE_ERROR", "Failed to clean up event records", reason=str(exc))
                )

        logger.info(f"Removed {removed} event records beyond the {max_count} most recent")
        return Return.ok(removed)
