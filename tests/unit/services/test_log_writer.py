import asyncio
from contextlib import asynccontextmanager

import pytest
from sqlalchemy.exc import OperationalError

from src.app.services.critical_alert_notifier import ICriticalAlertNotifier
from src.app.services.log_writer import LogWriter, infer_error_level
from src.domain.entities import LogLevel, LogType


class InMemoryEventRecords:
    def __init__(self, failures: int = 0, delay: float = 0):
        self.records = []
        self.failures = failures
        self.delay = delay

    async def create(self, record):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            self.failures -= 1
            raise OperationalError("INSERT", {}, Exception("database is locked"))
        record.id = len(self.records) + 1
        self.records.append(record)
        return record


class InMemoryUnitOfWork:
    def __init__(self, event_records):
        self.event_records = event_records

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def commit(self):
        pass

    async def rollback(self):
        pass


class RecordingNotifier(ICriticalAlertNotifier):
    def __init__(self, error: Exception = None):
        self.alerts = []
        self.error = error

    async def notify(self, record_id, event):
        if self.error:
            raise self.error
        self.alerts.append((record_id, event))


def make_writer(event_records, **kwargs) -> LogWriter:
    @asynccontextmanager
    async def factory():
        yield InMemoryUnitOfWork(event_records)

    return LogWriter(factory, **kwargs)


@pytest.mark.asyncio
async def test_record_is_persisted_by_workers():
    store = InMemoryEventRecords()
    writer = make_writer(store)

    result = writer.record({"type": "AUTH", "level": "INFO", "operation": "LOGIN", "actor": 9})
    await writer.flush()

    assert result.is_ok()
    assert writer.written_count == 1
    assert store.records[0].actor == "9"
    assert store.records[0].type == LogType.AUTH
    await writer.stop()


@pytest.mark.asyncio
async def test_storage_outage_does_not_reach_the_caller():
    store = InMemoryEventRecords(failures=100)
    writer = make_writer(store)

    result = writer.record_mutation("USUARIO", "1", "DELETE", actor="dev-1", before={"id": 1})
    await writer.flush()

    assert result.is_ok()
    assert store.records == []
    # The failed event and its failed self-report; nothing further
    assert writer.dropped_count == 2
    await writer.stop()


@pytest.mark.asyncio
async def test_failed_write_is_self_reported():
    store = InMemoryEventRecords(failures=1)
    writer = make_writer(store, workers=1)

    writer.record_api_request("/cadastro", "POST", actor="user-1")
    await writer.flush()

    assert writer.dropped_count == 1
    assert len(store.records) == 1
    report = store.records[0]
    assert report.type == LogType.ERROR
    assert report.operation == "LOG_WRITE_FAILED"
    assert report.entity == "LOGS"
    assert "API_REQUEST" in report.error_message
    await writer.stop()


@pytest.mark.asyncio
async def test_invalid_event_is_rejected_without_queueing():
    writer = make_writer(InMemoryEventRecords())

    missing_operation = writer.record({"type": "AUTH", "level": "INFO"})
    unknown_level = writer.record({"type": "AUTH", "level": "LOUD", "operation": "LOGIN"})
    snapshot_on_auth = writer.record(
        {"type": "AUTH", "level": "INFO", "operation": "LOGIN", "afterState": {"a": 1}}
    )
    error_on_info = writer.record(
        {"type": "SYSTEM", "level": "INFO", "operation": "BOOT", "errorMessage": "boom"}
    )

    for result in (missing_operation, unknown_level, snapshot_on_auth, error_on_info):
        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
    assert writer.pending_count == 0


@pytest.mark.asyncio
async def test_full_queue_drops_instead_of_blocking():
    store = InMemoryEventRecords()
    writer = make_writer(store, queue_size=1)

    first = writer.record_auth("dev-1", success=True)
    second = writer.record_auth("dev-1", success=False)

    assert first.is_ok()
    assert second.is_err()
    assert second.error.code == "LOG_DROPPED"
    assert writer.dropped_count == 1

    await writer.flush()
    assert len(store.records) == 1
    await writer.stop()


@pytest.mark.asyncio
async def test_record_strict_returns_id_or_error():
    store = InMemoryEventRecords()
    writer = make_writer(store)

    ok = await writer.record_strict({"type": "SYSTEM", "level": "INFO", "operation": "BOOT"})
    store.failures = 1
    failed = await writer.record_strict({"type": "SYSTEM", "level": "INFO", "operation": "BOOT"})

    assert ok.is_ok()
    assert ok.value == 1
    assert failed.is_err()
    assert failed.error.code == "STORAGE_ERROR"


@pytest.mark.asyncio
async def test_record_strict_times_out():
    writer = make_writer(InMemoryEventRecords(delay=1), write_timeout=0.01)

    result = await writer.record_strict({"type": "SYSTEM", "level": "INFO", "operation": "BOOT"})

    assert result.is_err()
    assert result.error.code == "STORAGE_TIMEOUT"


@pytest.mark.asyncio
async def test_record_error_captures_cause_and_infers_level():
    store = InMemoryEventRecords()
    writer = make_writer(store, max_stack_trace_length=4000)

    try:
        raise ValueError("bad input")
    except ValueError as exc:
        writer.record_error("FATAL: import aborted", cause=exc, endpoint="/duvida", ip="10.0.0.1")
    await writer.flush()

    record = store.records[0]
    assert record.level == LogLevel.CRITICAL
    assert record.client_ip == "10.0.0.1"
    assert "ValueError: bad input" in record.stack_trace
    await writer.stop()


@pytest.mark.asyncio
async def test_record_access_denied():
    store = InMemoryEventRecords()
    writer = make_writer(store)

    writer.record_access("/logs", actor="user-1", granted=False)
    await writer.flush()

    record = store.records[0]
    assert record.operation == "ACCESS_DENIED"
    assert record.level == LogLevel.WARN
    assert record.entity_id == "/logs"
    await writer.stop()


def test_record_outside_event_loop_is_queued_for_later():
    writer = make_writer(InMemoryEventRecords())

    result = writer.record_auth("dev-1", success=True)

    assert result.is_ok()
    assert writer.pending_count == 1


@pytest.mark.parametrize(
    "message, expected",
    [
        ("FATAL: out of memory", LogLevel.CRITICAL),
        ("CRITICAL: disk full", LogLevel.CRITICAL),
        ("critical section failed", LogLevel.ERROR),
        ("WARNING: slow query", LogLevel.WARN),
        ("Warning: slow query", LogLevel.ERROR),
        ("connection reset", LogLevel.ERROR),
        ("", LogLevel.ERROR),
    ],
)
def test_infer_error_level(message, expected):
    assert infer_error_level(message) == expected


@pytest.mark.asyncio
async def test_unserializable_snapshot_is_rejected_at_call_time():
    store = InMemoryEventRecords()
    writer = make_writer(store)
    event = {
        "type": "DATA_MUTATION",
        "level": "INFO",
        "operation": "UPDATE",
        "entity": "USUARIO",
        "afterState": {(1, 2): "x"},
    }

    queued = writer.record(event)
    strict = await writer.record_strict(event)

    assert queued.is_err()
    assert queued.error.code == "VALIDATION_ERROR"
    assert strict.is_err()
    assert strict.error.code == "VALIDATION_ERROR"
    assert writer.pending_count == 0
    assert store.records == []


@pytest.mark.asyncio
async def test_critical_event_triggers_alert_after_write():
    store = InMemoryEventRecords()
    notifier = RecordingNotifier()
    writer = make_writer(store, workers=1, alert_notifier=notifier)

    writer.record_error("FATAL: payment gateway unreachable")
    writer.record_error("connection reset")
    await writer.flush()

    assert writer.written_count == 2
    assert writer.alerted_count == 1
    record_id, event = notifier.alerts[0]
    assert record_id == store.records[0].id
    assert event.level == LogLevel.CRITICAL
    await writer.stop()


@pytest.mark.asyncio
async def test_alert_not_raised_when_write_fails():
    notifier = RecordingNotifier()
    writer = make_writer(InMemoryEventRecords(failures=1), alert_notifier=notifier)

    result = await writer.record_strict(
        {"type": "ERROR", "level": "CRITICAL", "operation": "ERROR", "errorMessage": "boom"}
    )

    assert result.is_err()
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_failing_alert_does_not_affect_the_write():
    store = InMemoryEventRecords()
    writer = make_writer(store, alert_notifier=RecordingNotifier(error=RuntimeError("smtp down")))

    strict = await writer.record_strict(
        {"type": "ERROR", "level": "CRITICAL", "operation": "ERROR", "errorMessage": "boom"}
    )
    writer.record_error("CRITICAL: queue stalled")
    await writer.flush()

    assert strict.is_ok()
    assert len(store.records) == 2
    assert writer.written_count == 1
    assert writer.dropped_count == 0
    assert writer.alerted_count == 0
    await writer.stop()
