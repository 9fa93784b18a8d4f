"""
Get Log Stats Use Case

Read-only aggregate scan over the audit log.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import LogLevel, LogType

from .dtos import LogStats


class GetLogStatsUseCase:
    """
    Use case for computing log volume statistics.

    Business Rules:
    - Every level and type appears in the counts (zero-filled)
    - Timestamps are None when the log is empty
    - A timed-out scan yields QUERY_TIMEOUT, never partial stats
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, now: Optional[datetime] = None, timeout: Optional[float] = None
    ) -> Result[LogStats]:
        now = now or utc_now()

        async with self.uow:
            try:
                stats = await asyncio.wait_for(self._collect(now), timeout=timeout)
            except asyncio.TimeoutError:
                return Return.err(Error("QUERY_TIMEOUT", "Log statistics timed out"))
            except SQLAlchemyError as exc:
                return Return.err(
                    Error("STORAGE_ERROR", "Failed to compute log statistics", reason=str(exc))
                )

        return Return.ok(stats)

    async def _collect(self, now: datetime) -> LogStats:
        repo = self.uow.event_records

        total_logs = await repo.count()
        by_level = await repo.count_by_level()
        by_type = await repo.count_by_type()
        oldest, newest = await repo.get_time_bounds()
        last_24h = await repo.count(since=now - timedelta(hours=24))
        last_7_days = await repo.count(since=now - timedelta(days=7))

        return LogStats(
            total_logs=total_logs,
            counts_by_level={level.value: by_level.get(level.value, 0) for level in LogLevel},
            counts_by_type={log_type.value: by_type.get(log_type.value, 0) for log_type in LogType},
            oldest_timestamp=oldest,
            newest_timestamp=newest,
            logs_last_24h=last_24h,
            logs_last_7_days=last_7_days,
        )
