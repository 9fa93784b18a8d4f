"""
List Event Records Use Case

Paginated, filtered retrieval over the audit log.
"""

import asyncio
from typing import Any, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from src.domain.filters import EventRecordFilters

from .dtos import EventRecordPage, EventRecordView


def parse_filters(filters: Optional[Mapping[str, Any]]) -> Result[EventRecordFilters]:
    """Validate a raw filter mapping; unknown keys are ignored"""
    try:
        return Return.ok(EventRecordFilters.model_validate(dict(filters or {})))
    except ValidationError as exc:
        return Return.err(
            Error("VALIDATION_ERROR", "Invalid log filters", reason=str(exc))
        )


class ListEventRecordsUseCase:
    """
    Use case for listing event records.

    Business Rules:
    - page >= 1 and 1 <= page_size <= MAX_PAGE_SIZE
    - Filters are conjunctive; level/type accept "_all" as "no filter"
    - Results ordered by created_at DESC, id DESC
    - Offset pagination, consistent only against a static snapshot
    - A timed-out query yields QUERY_TIMEOUT, never a partial page
    """

    def __init__(self, uow: UnitOfWork, max_page_size: int = ApplicationConfig.MAX_PAGE_SIZE):
        self.uow = uow
        self.max_page_size = max_page_size

    async def execute(
        self,
        page: int = 1,
        page_size: int = ApplicationConfig.DEFAULT_PAGE_SIZE,
        filters: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Result[EventRecordPage]:
        """
        Execute list event records use case.

        Args:
            page: 1-based page number
            page_size: Records per page (1..MAX_PAGE_SIZE)
            filters: Optional filter mapping (operation, entity, level, type,
                actor, date_from, date_to, free_text)
            timeout: Optional time box in seconds

        Returns:
            Result with EventRecordPage, or Error
        """
        if not isinstance(page, int) or page < 1:
            return Return.err(Error("VALIDATION_ERROR", "page must be a positive integer"))
        if not isinstance(page_size, int) or not 1 <= page_size <= self.max_page_size:
            return Return.err(
                Error(
                    "VALIDATION_ERROR",
                    f"page_size must be between 1 and {self.max_page_size}",
                )
            )

        parsed = parse_filters(filters)
        if parsed.is_err():
            return parsed

        async with self.uow:
            try:
                items, total = await asyncio.wait_for(
                    self.uow.event_records.list_paginated(
                        parsed.value, offset=(page - 1) * page_size, limit=page_size
                    ),
                    timeout=timeout,
                )
                views = [EventRecordView.model_validate(item) for item in items]
            except asyncio.TimeoutError:
                return Return.err(Error("QUERY_TIMEOUT", "Log query timed out"))
            except SQLAlchemyError as exc:
                return Return.err(
                    Error("STORAGE_ERROR", "Failed to query event records", reason=str(exc))
                )

        return Return.ok(
            EventRecordPage(items=views, total=total, page=page, page_size=page_size)
        )
