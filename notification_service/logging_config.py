"""Logging setup shared by the API and the broker consumer."""

from __future__ import annotations

import logging

from notification_service.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Third party loggers that flood the output at INFO level.
_NOISY_LOGGERS = ("aio_pika", "aiormq", "python_http_client")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger using ``level`` or the configured log level."""

    resolved = (level or get_settings().log_level or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, force=True)
    if resolved == "DEBUG":
        return
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging", "LOG_FORMAT"]
