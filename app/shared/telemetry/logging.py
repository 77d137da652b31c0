"""Logging configuration for the application.

Every record carries the current request id (set by RequestIDMiddleware)
so log lines from one upload or delete sequence can be grouped.
"""

import logging
import sys
from contextvars import ContextVar

from app.core.config import get_settings

# Third-party loggers that are chatty at DEBUG (request signing, connection pool).
_NOISY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "aiosqlite")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Attach request_id from the current context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout. AWS SDK loggers stay at WARNING so credentials
    and signing details never reach application logs.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=[handler])
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
