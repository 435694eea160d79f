"""Logging setup shared by the HTTP entrypoint."""

from __future__ import annotations

import logging

from encora_provider.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from the LOG_LEVEL setting unless given explicitly."""

    resolved = (level or get_settings().log_level or "INFO").upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=_FORMAT)
    # httpx logs every request line at INFO, including URLs with show/actor ids.
    logging.getLogger("httpx").setLevel(logging.WARNING)
