"""
Cleanup Older Than Use Case

Age-based retention sweep.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now

logger = logging.getLogger(__name__)


class CleanupOlderThanUseCase:
    """
    Use case for deleting every event record older than a number of days.

    Business Rules:
    - days must be a positive integer
    - The cutoff (now - days) is fixed once, before the delete runs, so a
      record written while the sweep is in flight is never removed
    - The delete is a single statement committed as one unit
    - Idempotent: a second run with no new writes removes 0
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, days: int, now: Optional[datetime] = None) -> Result[int]:
        """
        Execute age-based cleanup.

        Args:
            days: Records with created_at older than now - days are removed
            now: Reference time (defaults to the current UTC time)

        Returns:
            Result with the number of removed records, or Error
        """
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            return Return.err(Error("VALIDATION_ERROR", "days must be a positive integer"))

        cutoff = (now or utc_now()) - timedelta(days=days)

        async with self.uow:
            try:
                removed = await self.uow.event_records.delete_older_than(cutoff)
                await self.uow.commit()
            except SQLAlchemyError as exc:
                logger.error(f"Age-based log cleanup failed: {exc}")
                return Return.err(
                    Error("STORAGE_ERROR", "Failed to clean up event records", reason=str(exc))
                )

        logger.info(f"Removed {removed} event records older than {cutoff.isoformat()}")
        return Return.ok(removed)
