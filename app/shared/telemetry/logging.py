"""Process logging: stdout, one format, request and tenant ids on every line."""

import logging
import sys

from app.core.config import get_settings
from app.core.tenant_context import current_tenant_id
from app.shared.context import get_correlation_id, get_request_id

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "[request_id=%(request_id)s correlation_id=%(correlation_id)s tenant=%(tenant_id)s] "
    "%(message)s"
)


class RequestContextFilter(logging.Filter):
    """Stamps request, correlation and tenant ids ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        record.correlation_id = get_correlation_id() or "-"
        record.tenant_id = current_tenant_id() or "-"
        return True


def setup_logging() -> None:
    """Install the stdout handler; DEBUG when settings.debug, SQL echo when database_echo."""
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[handler],
    )
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
