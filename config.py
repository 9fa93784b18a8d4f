import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./audit.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")

    # Identity: user id -> role, and the roles allowed to administer logs
    USER_ROLES = data.get("USER_ROLES", {})
    LOG_ADMIN_ROLES = data.get("LOG_ADMIN_ROLES", ["DEV"])

    # Query engine
    DEFAULT_PAGE_SIZE = int(data.get("DEFAULT_PAGE_SIZE", 20))
    MAX_PAGE_SIZE = int(data.get("MAX_PAGE_SIZE", 100))
    QUERY_TIMEOUT_SECONDS = float(data.get("QUERY_TIMEOUT_SECONDS", 10.0))
    EXPORT_MAX_ROWS = int(data.get("EXPORT_MAX_ROWS", 1000))

    # Log writer
    LOG_WRITER_QUEUE_SIZE = int(data.get("LOG_WRITER_QUEUE_SIZE", 1000))
    LOG_WRITER_WORKERS = int(data.get("LOG_WRITER_WORKERS", 2))
    LOG_WRITE_TIMEOUT_SECONDS = float(data.get("LOG_WRITE_TIMEOUT_SECONDS", 5.0))
    MAX_STACK_TRACE_LENGTH = int(data.get("MAX_STACK_TRACE_LENGTH", 4000))
    MAX_SNAPSHOT_BYTES = int(data.get("MAX_SNAPSHOT_BYTES", 65536))
    DEFAULT_ERROR_LEVEL = data.get("DEFAULT_ERROR_LEVEL", "ERROR")
    CRITICAL_ERROR_KEYWORDS = data.get("CRITICAL_ERROR_KEYWORDS", ["CRITICAL", "FATAL"])
    WARN_ERROR_KEYWORDS = data.get("WARN_ERROR_KEYWORDS", ["WARNING", "WARN"])

    # Critical alerts; without a webhook URL they only go to the application log
    CRITICAL_ALERT_WEBHOOK_URL = data.get("CRITICAL_ALERT_WEBHOOK_URL")
    CRITICAL_ALERT_TIMEOUT_SECONDS = float(data.get("CRITICAL_ALERT_TIMEOUT_SECONDS", 5.0))
    CRITICAL_ALERT_RECIPIENT = data.get("MAIL_ADMIN")

    # Retention
    COUNT_CLEANUP_THRESHOLD = int(data.get("COUNT_CLEANUP_THRESHOLD", 50000))
    AGE_CLEANUP_THRESHOLD = int(data.get("AGE_CLEANUP_THRESHOLD", 10000))
    DEFAULT_RETENTION_DAYS = int(data.get("DEFAULT_RETENTION_DAYS", 90))
    DEFAULT_CLEANUP_DAYS = int(data.get("DEFAULT_CLEANUP_DAYS", 30))
    DEFAULT_CLEANUP_MAX_LOGS = int(data.get("DEFAULT_CLEANUP_MAX_LOGS", 10000))

    # Request tracing middleware
    LOGGED_ROUTE_PREFIXES = data.get(
        "LOGGED_ROUTE_PREFIXES",
        ["/cadastro", "/usuario", "/duvida", "/logs", "/permissao", "/admin/logs"],
    )
    IGNORED_ROUTE_PREFIXES = data.get(
        "IGNORED_ROUTE_PREFIXES", ["/auth", "/internal", "/health"]
    )
    LOGGED_METHODS = data.get("LOGGED_METHODS", ["POST", "PUT", "PATCH", "DELETE"])
