"""Logging setup shared by the API and the Celery worker."""

import logging

from src.config import get_settings


class SecretsFilter(logging.Filter):
    """Redact credential fields passed through ``extra=``."""

    BLOCKED_KEYS = {"password", "token", "authorization"}

    def filter(self, record: logging.LogRecord) -> bool:
        for key in self.BLOCKED_KEYS:
            if hasattr(record, key):
                setattr(record, key, "[REDACTED]")
        return True


def configure_logging() -> None:
    """Configure root logging once per process."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    root = logging.getLogger()
    if not any(isinstance(f, SecretsFilter) for f in root.filters):
        root.addFilter(SecretsFilter())
