from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from src.domain.entities import LogLevel, LogType
from src.domain.filters import ALL, EventRecordFilters


def test_all_sentinel_clears_level_and_type():
    filters = EventRecordFilters(level=ALL, type=ALL)

    assert filters.level is None
    assert filters.type is None


def test_case_insensitive_enums_and_warning_alias():
    filters = EventRecordFilters(level="warning", type="data_mutation")

    assert filters.level == LogLevel.WARN
    assert filters.type == LogType.DATA_MUTATION


def test_dates_are_normalized_to_naive_utc():
    filters = EventRecordFilters(
        date_from=datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-3)))
    )

    assert filters.date_from == datetime(2024, 1, 1, 15, 0)


def test_blank_strings_and_unknown_keys_are_ignored():
    filters = EventRecordFilters.model_validate({"operation": "", "busca": "x", "free_text": "  "})

    assert filters.operation is None
    assert filters.free_text is None


def test_unknown_level_is_rejected():
    with pytest.raises(ValidationError):
        EventRecordFilters(level="VERBOSE")
