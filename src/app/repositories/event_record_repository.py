from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from src.domain.filters import EventRecordFilters
from src.domain.entities import EventRecord


class IEventRecordRepository(ABC):
    """EventRecord repository interface - application layer"""

    @abstractmethod
    async def create(self, event_record: EventRecord) -> EventRecord:
        """Append a new event record (immutable), stamping created_at"""
        pass

    @abstractmethod
    async def get_by_id(self, record_id: int) -> Optional[EventRecord]:
        pass

    @abstractmethod
    async def list_paginated(
        self, filters: EventRecordFilters, offset: int, limit: int
    ) -> Tuple[List[EventRecord], int]:
        """
        Get event records matching the filters with offset pagination.

        Returns:
            Tuple of (records, total)
            - records: ordered by created_at DESC, id DESC
            - total: number of records matching the filters
        """
        pass

    @abstractmethod
    async def delete_older_than(self, cutoff: datetime) -> int:
        """Bulk delete every record with created_at < cutoff, returning the count"""
        pass

    @abstractmethod
    async def find_nth_most_recent(self, n: int) -> Optional[EventRecord]:
        """Record at 1-based rank n in (created_at DESC, id DESC) order, if any"""
        pass

    @abstractmethod
    async def delete_ranked_after(self, pivot: EventRecord) -> int:
        """Bulk delete every record ordered strictly after the pivot, returning the count"""
        pass

    @abstractmethod
    async def count(self, since: Optional[datetime] = None) -> int:
        pass

    @abstractmethod
    async def count_by_level(self) -> Dict[str, int]:
        pass

    @abstractmethod
    async def count_by_type(self) -> Dict[str, int]:
        pass

    @abstractmethod
    async def get_time_bounds(self) -> Tuple[Optional[datetime], Optional[datetime]]:
        """(oldest created_at, newest created_at), both None when empty"""
        pass
