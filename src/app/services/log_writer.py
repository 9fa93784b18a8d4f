"""
Log Writer

Accepts structured audit events from any call site and persists them through
a bounded queue drained by background workers. Producers never wait on the
store and never see a storage failure: audit logging is best-effort.
"""

import asyncio
import logging
import traceback
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.critical_alert_notifier import ICriticalAlertNotifier
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.logs.dtos import EventRecordInput
from src.app.use_cases.logs.record_event_use_case import RecordEventUseCase, truncate_stack_trace
from src.domain.entities import LogLevel, LogType

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
EventPayload = Union[EventRecordInput, Mapping[str, Any]]


def infer_error_level(
    message: str,
    default: Union[LogLevel, str] = ApplicationConfig.DEFAULT_ERROR_LEVEL,
    critical_keywords: Sequence[str] = tuple(ApplicationConfig.CRITICAL_ERROR_KEYWORDS),
    warn_keywords: Sequence[str] = tuple(ApplicationConfig.WARN_ERROR_KEYWORDS),
) -> LogLevel:
    """Severity heuristic for error messages that carry no explicit level"""
    # Keywords match case-sensitively: "critical section" is not CRITICAL
    text = message or ""
    if any(keyword in text for keyword in critical_keywords):
        return LogLevel.CRITICAL
    if any(keyword in text for keyword in warn_keywords):
        return LogLevel.WARN
    return LogLevel(default)


def format_cause(cause: Union[BaseException, str, None]) -> Optional[str]:
    if cause is None:
        return None
    if isinstance(cause, BaseException):
        return "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
    return str(cause)


@dataclass
class _QueuedEvent:
    event: EventRecordInput
    # Set on events reporting a failed write, so they are never re-reported
    self_report: bool = False


class LogWriter:
    """
    Fire-and-forget audit event writer.

    Business Rules:
    - Invalid input fails with VALIDATION_ERROR, returned not raised
    - A full queue drops the event (LOG_DROPPED) instead of blocking
    - Each write runs in its own unit of work, bounded by write_timeout
    - Failed writes are logged, counted and self-recorded as ERROR events;
      a failed self-report is only logged
    - record_strict() persists inline and returns the id or the storage error
    - A stored CRITICAL event is handed to the alert notifier; alert failures
      are logged and never affect the write
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        queue_size: int = ApplicationConfig.LOG_WRITER_QUEUE_SIZE,
        workers: int = ApplicationConfig.LOG_WRITER_WORKERS,
        write_timeout: float = ApplicationConfig.LOG_WRITE_TIMEOUT_SECONDS,
        max_stack_trace_length: int = ApplicationConfig.MAX_STACK_TRACE_LENGTH,
        alert_notifier: Optional[ICriticalAlertNotifier] = None,
    ):
        self.uow_factory = uow_factory
        self.workers = max(1, workers)
        self.write_timeout = write_timeout
        self.max_stack_trace_length = max_stack_trace_length
        self.alert_notifier = alert_notifier
        self._queue: asyncio.Queue[_QueuedEvent] = asyncio.Queue(maxsize=queue_size)
        self._worker_tasks: List[asyncio.Task] = []
        self._dropped = 0
        self._written = 0
        self._alerted = 0

    @property
    def dropped_count(self) -> int:
        return self._dropped

    @property
    def written_count(self) -> int:
        return self._written

    @property
    def alerted_count(self) -> int:
        return self._alerted

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the worker pool if it is not running"""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop; queued events wait for the next start/flush
            return
        self._worker_tasks = [task for task in self._worker_tasks if not task.done()]
        for _ in range(self.workers - len(self._worker_tasks)):
            self._worker_tasks.append(asyncio.create_task(self._worker()))

    async def flush(self) -> None:
        """Wait until every queued event has been written or dropped"""
        if not self._queue.empty():
            self.start()
        await self._queue.join()

    async def stop(self) -> None:
        """Drain the queue, then stop the workers"""
        await self.flush()
        for task in self._worker_tasks:
            task.cancel()
        await asyncio.gather(*self._worker_tasks, return_exceptions=True)
        self._worker_tasks = []

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def record(self, event: EventPayload) -> Result[None]:
        """
        Validate and enqueue an event without waiting for persistence.

        Args:
            event: EventRecordInput or a raw mapping (snake_case or camelCase keys)

        Returns:
            Ok(None) when queued; VALIDATION_ERROR or LOG_DROPPED otherwise
        """
        validated = self._validate(event)
        if validated.is_err():
            logger.warning(f"Rejected audit event: {validated.error.reason}")
            return validated
        return self._enqueue(_QueuedEvent(validated.value))

    async def record_strict(self, event: EventPayload) -> Result[int]:
        """
        Validate and persist an event inline, propagating any failure.

        Returns:
            Result with the assigned record id, or VALIDATION_ERROR,
            STORAGE_ERROR, STORAGE_TIMEOUT
        """
        validated = self._validate(event)
        if validated.is_err():
            return validated
        return await self._persist(validated.value)

    def record_auth(
        self,
        actor: Optional[str],
        success: bool,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        operation: str = "LOGIN",
    ) -> Result[None]:
        return self.record(
            dict(
                type=LogType.AUTH,
                level=LogLevel.INFO if success else LogLevel.WARN,
                operation=operation if success else f"{operation}_FAILED",
                entity="USER",
                entity_id=actor or None,
                actor=actor or None,
                client_ip=ip,
                user_agent=user_agent,
            )
        )

    def record_api_request(
        self,
        endpoint: str,
        method: str,
        actor: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[int] = None,
        query_params: Optional[Any] = None,
        operation: str = "API_REQUEST",
        level: LogLevel = LogLevel.INFO,
    ) -> Result[None]:
        return self.record(
            dict(
                type=LogType.API_REQUEST,
                level=level,
                operation=operation,
                endpoint=endpoint,
                method=method,
                actor=actor,
                client_ip=ip,
                user_agent=user_agent,
                request_headers=headers,
                duration_ms=duration_ms,
                query_params=query_params,
            )
        )

    def record_error(
        self,
        message: str,
        cause: Union[BaseException, str, None] = None,
        level: Optional[LogLevel] = None,
        endpoint: Optional[str] = None,
        method: Optional[str] = None,
        actor: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        operation: str = "ERROR",
        entity: Optional[str] = None,
    ) -> Result[None]:
        return self.record(
            self._error_event(
                message,
                cause=cause,
                level=level,
                endpoint=endpoint,
                method=method,
                actor=actor,
                client_ip=ip,
                user_agent=user_agent,
                operation=operation,
                entity=entity,
            )
        )

    def record_mutation(
        self,
        entity: str,
        entity_id: Optional[str],
        operation: str,
        actor: Optional[str] = None,
        before: Optional[Any] = None,
        after: Optional[Any] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[None]:
        return self.record(
            dict(
                type=LogType.DATA_MUTATION,
                level=LogLevel.WARN if operation.upper() == "DELETE" else LogLevel.INFO,
                operation=operation,
                entity=entity,
                entity_id=entity_id,
                actor=actor,
                before_state=before,
                after_state=after,
                client_ip=ip,
                user_agent=user_agent,
            )
        )

    def record_access(
        self,
        feature: str,
        actor: Optional[str],
        granted: bool,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[None]:
        return self.record(
            dict(
                type=LogType.AUTH,
                level=LogLevel.INFO if granted else LogLevel.WARN,
                operation="ACCESS_GRANTED" if granted else "ACCESS_DENIED",
                entity="FEATURE",
                entity_id=feature,
                actor=actor,
                client_ip=ip,
                user_agent=user_agent,
            )
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _error_event(
        self,
        message: str,
        cause: Union[BaseException, str, None] = None,
        level: Optional[LogLevel] = None,
        **context: Any,
    ) -> Dict[str, Any]:
        return dict(
            type=LogType.ERROR,
            level=level or infer_error_level(message),
            error_message=message,
            stack_trace=truncate_stack_trace(format_cause(cause), self.max_stack_trace_length),
            **context,
        )

    @staticmethod
    def _validate(event: EventPayload) -> Result[EventRecordInput]:
        if isinstance(event, EventRecordInput):
            return Return.ok(event)
        try:
            return Return.ok(EventRecordInput.model_validate(event))
        except ValidationError as exc:
            return Return.err(
                Error("VALIDATION_ERROR", "Invalid audit event", reason=str(exc))
            )

    def _enqueue(self, item: _QueuedEvent) -> Result[None]:
        self.start()
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning(
                f"Audit queue full, dropped {item.event.type.value} event {item.event.operation}"
            )
            return Return.err(Error("LOG_DROPPED", "Audit log queue is full"))
        return Return.ok(None)

    async def _persist(self, event: EventRecordInput) -> Result[int]:
        try:
            result = await asyncio.wait_for(self._write(event), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            return Return.err(
                Error(
                    "STORAGE_TIMEOUT",
                    f"Audit write did not complete within {self.write_timeout}s",
                )
            )
        if result.is_ok() and event.level == LogLevel.CRITICAL:
            await self._alert_critical(result.value, event)
        return result

    async def _alert_critical(self, record_id: int, event: EventRecordInput) -> None:
        if self.alert_notifier is None:
            return
        try:
            await asyncio.wait_for(
                self.alert_notifier.notify(record_id, event), timeout=self.write_timeout
            )
            self._alerted += 1
        except Exception as exc:
            logger.error(f"Critical alert for audit event #{record_id} failed: {exc!r}")

    async def _write(self, event: EventRecordInput) -> Result[int]:
        async with self.uow_factory() as uow:
            return await RecordEventUseCase(uow).execute(event)

    async def _worker(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                result = await self._persist(item.event)
                if result.is_ok():
                    self._written += 1
                else:
                    self._on_write_failure(item, result.error)
            except Exception as exc:
                self._on_write_failure(
                    item, Error("STORAGE_ERROR", "Unexpected audit write failure", reason=repr(exc))
                )
            finally:
                self._queue.task_done()

    def _on_write_failure(self, item: _QueuedEvent, error: Error) -> None:
        self._dropped += 1
        logger.error(
            f"Dropped audit event {item.event.type.value}/{item.event.operation}: "
            f"{error.code} {error.reason or error.message}"
        )
        if item.self_report:
            return

        report = self._error_event(
            f"Audit write failed for {item.event.operation}: {error.message}",
            cause=error.reason,
            level=LogLevel.ERROR,
            operation="LOG_WRITE_FAILED",
            entity="LOGS",
        )
        validated = self._validate(report)
        if validated.is_ok():
            self._enqueue(_QueuedEvent(validated.value, self_report=True))
