from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
from .middleware import RequestTracingMiddleware
from .utils.request_info import request_provenance
from src.adapter.services.critical_alert_notifier import (
    LoggingCriticalAlertNotifier,
    WebhookCriticalAlertNotifier,
)
from src.app.services.log_writer import LogWriter
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code} {exc.base_error.reason or ''}")
    _record_failure(
        request,
        f"{exc.base_error.code}: {exc.base_error.message}",
        cause=exc.base_error.reason,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    error_dict = {"code": "VALIDATION_ERROR", "message": "Invalid request parameters"}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": {**error_dict, "details": jsonable_encoder(exc.errors())}},
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    _record_failure(request, f"Unhandled {type(exc).__name__}: {exc}", cause=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


def _record_failure(request: Request, message: str, cause=None) -> None:
    ip, user_agent = request_provenance(request)
    request.app.state.log_writer.record_error(
        message,
        cause=cause,
        endpoint=request.url.path,
        method=request.method,
        ip=ip,
        user_agent=user_agent,
    )


def _build_alert_notifier(ApplicationConfig):
    if ApplicationConfig.CRITICAL_ALERT_WEBHOOK_URL:
        return WebhookCriticalAlertNotifier(
            ApplicationConfig.CRITICAL_ALERT_WEBHOOK_URL,
            timeout=ApplicationConfig.CRITICAL_ALERT_TIMEOUT_SECONDS,
            recipient=ApplicationConfig.CRITICAL_ALERT_RECIPIENT,
        )
    return LoggingCriticalAlertNotifier()


def create_app(ApplicationConfig, uow_factory=None, alert_notifier=None) -> FastAPI:
    if uow_factory is None:
        from src.depends import unit_of_work_scope as uow_factory
    if alert_notifier is None:
        alert_notifier = _build_alert_notifier(ApplicationConfig)

    log_writer = LogWriter(
        uow_factory,
        queue_size=ApplicationConfig.LOG_WRITER_QUEUE_SIZE,
        workers=ApplicationConfig.LOG_WRITER_WORKERS,
        write_timeout=ApplicationConfig.LOG_WRITE_TIMEOUT_SECONDS,
        max_stack_trace_length=ApplicationConfig.MAX_STACK_TRACE_LENGTH,
        alert_notifier=alert_notifier,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_writer.start()
        yield
        await log_writer.stop()
        if isinstance(alert_notifier, WebhookCriticalAlertNotifier):
            await alert_notifier.close()

    app = FastAPI(title="Audit Log API", version="0.1.0", lifespan=lifespan)
    app.state.log_writer = log_writer

    if ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestTracingMiddleware, config=ApplicationConfig)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin_logs, health_check, internal, logs

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(logs.router, tags=["Logs"])
    app.include_router(admin_logs.router, tags=["Admin Logs"])
    app.include_router(internal.router, tags=["Internal"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app
