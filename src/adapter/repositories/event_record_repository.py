from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, delete, func, or_
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.event_record_repository import IEventRecordRepository
from src.domain.filters import EventRecordFilters
from src.domain.base import utc_now
from src.domain.entities import EventRecord


def _contains_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class EventRecordRepository(IEventRecordRepository):
    """EventRecord repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event_record: EventRecord) -> EventRecord:
        """Append a new event record (immutable)"""
        event_record.created_at = utc_now()
        self.session.add(event_record)
        await self.session.flush()
        await self.session.refresh(event_record)
        return event_record

    async def get_by_id(self, record_id: int) -> Optional[EventRecord]:
        return await self.session.get(EventRecord, record_id)

    async def list_paginated(
        self, filters: EventRecordFilters, offset: int, limit: int
    ) -> Tuple[List[EventRecord], int]:
        """Offset pagination ordered by created_at DESC, id DESC"""
        conditions = self._build_conditions(filters)

        count_stmt = select(func.count()).select_from(EventRecord)
        stmt = select(EventRecord)
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            stmt = stmt.where(*conditions)

        stmt = (
            stmt.order_by(col(EventRecord.created_at).desc(), col(EventRecord.id).desc())
            .offset(offset)
            .limit(limit)
        )

        total = (await self.session.exec(count_stmt)).one()
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def delete_older_than(self, cutoff: datetime) -> int:
        stmt = delete(EventRecord).where(col(EventRecord.created_at) < cutoff)
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def find_nth_most_recent(self, n: int) -> Optional[EventRecord]:
        stmt = (
            select(EventRecord)
            .order_by(col(EventRecord.created_at).desc(), col(EventRecord.id).desc())
            .offset(n - 1)
            .limit(1)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def delete_ranked_after(self, pivot: EventRecord) -> int:
        # Strictly after the pivot in (created_at DESC, id DESC) order
        stmt = delete(EventRecord).where(
            or_(
                col(EventRecord.created_at) < pivot.created_at,
                and_(
                    col(EventRecord.created_at) == pivot.created_at,
                    col(EventRecord.id) < pivot.id,
                ),
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def count(self, since: Optional[datetime] = None) -> int:
        stmt = select(func.count()).select_from(EventRecord)
        if since is not None:
            stmt = stmt.where(col(EventRecord.created_at) >= since)
        return (await self.session.exec(stmt)).one()

    async def count_by_level(self) -> Dict[str, int]:
        stmt = select(EventRecord.level, func.count()).group_by(EventRecord.level)
        result = await self.session.exec(stmt)
        return {level.value: total for level, total in result.all()}

    async def count_by_type(self) -> Dict[str, int]:
        stmt = select(EventRecord.type, func.count()).group_by(EventRecord.type)
        result = await self.session.exec(stmt)
        return {log_type.value: total for log_type, total in result.all()}

    async def get_time_bounds(self) -> Tuple[Optional[datetime], Optional[datetime]]:
        stmt = select(func.min(EventRecord.created_at), func.max(EventRecord.created_at))
        oldest, newest = (await self.session.exec(stmt)).one()
        return oldest, newest

    @staticmethod
    def _build_conditions(filters: EventRecordFilters) -> list:
        conditions = []
        if filters.operation:
            conditions.append(col(EventRecord.operation) == filters.operation)
        if filters.entity:
            conditions.append(col(EventRecord.entity) == filters.entity)
        if filters.level is not None:
            conditions.append(col(EventRecord.level) == filters.level)
        if filters.type is not None:
            conditions.append(col(EventRecord.type) == filters.type)
        if filters.actor:
            conditions.append(col(EventRecord.actor) == filters.actor)
        if filters.date_from is not None:
            conditions.append(col(EventRecord.created_at) >= filters.date_from)
        if filters.date_to is not None:
            conditions.append(col(EventRecord.created_at) <= filters.date_to)
        if filters.free_text:
            pattern = _contains_pattern(filters.free_text)
            conditions.append(
                or_(
                    col(EventRecord.operation).ilike(pattern, escape="\\"),
                    col(EventRecord.entity).ilike(pattern, escape="\\"),
                    col(EventRecord.error_message).ilike(pattern, escape="\\"),
                )
            )
        return conditions
