import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from src.app.use_cases.logs import ListEventRecordsUseCase
from src.domain.entities import EventRecord, LogLevel, LogType


def _record(record_id: int) -> EventRecord:
    return EventRecord(
        id=record_id,
        type=LogType.SYSTEM,
        level=LogLevel.INFO,
        operation="SEED",
        created_at=datetime(2024, 1, 1, 12, 0, record_id),
    )


@pytest.mark.asyncio
async def test_list_computes_offset_and_total_pages(mock_uow):
    mock_uow.event_records.list_paginated.return_value = (
        [_record(i) for i in range(10)],
        25,
    )

    result = await ListEventRecordsUseCase(mock_uow).execute(page=2, page_size=10)

    assert result.is_ok()
    page = result.value
    assert page.total == 25
    assert page.total_pages == 3
    assert len(page.items) == 10
    kwargs = mock_uow.event_records.list_paginated.await_args.kwargs
    assert kwargs["offset"] == 10
    assert kwargs["limit"] == 10


@pytest.mark.asyncio
async def test_list_all_sentinel_means_no_filter(mock_uow):
    await ListEventRecordsUseCase(mock_uow).execute(filters={"level": "_all", "type": "_all"})

    filters = mock_uow.event_records.list_paginated.await_args.args[0]
    assert filters.level is None
    assert filters.type is None


@pytest.mark.asyncio
async def test_list_normalizes_filters(mock_uow):
    await ListEventRecordsUseCase(mock_uow).execute(
        filters={
            "level": "warning",
            "operation": "  ",
            "date_from": datetime(2024, 1, 1, 3, 0, tzinfo=timezone.utc),
        }
    )

    filters = mock_uow.event_records.list_paginated.await_args.args[0]
    assert filters.level == LogLevel.WARN
    assert filters.operation is None
    assert filters.date_from == datetime(2024, 1, 1, 3, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "page, page_size",
    [(0, 10), (-1, 10), (1, 0), (1, 101)],
)
async def test_list_rejects_invalid_paging(mock_uow, page, page_size):
    result = await ListEventRecordsUseCase(mock_uow).execute(page=page, page_size=page_size)

    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.event_records.list_paginated.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_rejects_unknown_level(mock_uow):
    result = await ListEventRecordsUseCase(mock_uow).execute(filters={"level": "LOUD"})

    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_list_times_out_without_partial_page(mock_uow):
    async def slow_query(*args, **kwargs):
        await asyncio.sleep(1)
        return [], 0

    mock_uow.event_records.list_paginated.side_effect = slow_query

    result = await ListEventRecordsUseCase(mock_uow).execute(timeout=0.01)

    assert result.is_err()
    assert result.error.code == "QUERY_TIMEOUT"


@pytest.mark.asyncio
async def test_list_storage_failure(mock_uow):
    mock_uow.event_records.list_paginated.side_effect = OperationalError(
        "SELECT", {}, Exception("locked")
    )

    result = await ListEventRecordsUseCase(mock_uow).execute()

    assert result.is_err()
    assert result.error.code == "STORAGE_ERROR"
