from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from src.app.use_cases.retention import CleanupOlderThanUseCase


@pytest.mark.asyncio
async def test_cleanup_uses_cutoff_fixed_from_now(mock_uow):
    mock_uow.event_records.delete_older_than.return_value = 12
    now = datetime(2024, 3, 31, 12, 0)

    result = await CleanupOlderThanUseCase(mock_uow).execute(30, now=now)

    assert result.is_ok()
    assert result.value == 12
    mock_uow.event_records.delete_older_than.assert_awaited_once_with(datetime(2024, 3, 1, 12, 0))
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [0, -5, True, "30"])
async def test_cleanup_rejects_invalid_days(mock_uow, days):
    result = await CleanupOlderThanUseCase(mock_uow).execute(days)

    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.event_records.delete_older_than.assert_not_awaited()


@pytest.mark.asyncio
async def test_cleanup_storage_failure_does_not_commit(mock_uow):
    mock_uow.event_records.delete_older_than.side_effect = OperationalError(
        "DELETE", {}, Exception("locked")
    )

    result = await CleanupOlderThanUseCase(mock_uow).execute(30)

    assert result.is_err()
    assert result.error.code == "STORAGE_ERROR"
    mock_uow.commit.assert_not_awaited()
