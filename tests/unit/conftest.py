import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.event_records = MagicMock()
    uow.event_records.create = AsyncMock()
    uow.event_records.get_by_id = AsyncMock()
    uow.event_records.list_paginated = AsyncMock(return_value=([], 0))
    uow.event_records.delete_older_than = AsyncMock(return_value=0)
    uow.event_records.find_nth_most_recent = AsyncMock(return_value=None)
    uow.event_records.delete_ranked_after = AsyncMock(return_value=0)
    uow.event_records.count = AsyncMock(return_value=0)
    uow.event_records.count_by_level = AsyncMock(return_value={})
    uow.event_records.count_by_type = AsyncMock(return_value={})
    uow.event_records.get_time_bounds = AsyncMock(return_value=(None, None))
    return uow
