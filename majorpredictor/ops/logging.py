"""Logging setup."""

import logging
import os
from typing import Optional

# Chatty at INFO during page fetches and provider calls
_QUIET_LOGGERS = ("urllib3", "asyncio", "aiohttp.access")


def configure_logging(session_id: Optional[str] = None) -> None:
    """Configure logging for a page session."""
    level_name = os.environ.get("MAJORPREDICTOR_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    session_prefix = f"[session={session_id}] " if session_id else ""
    fmt = "%(asctime)s %(levelname)s " + session_prefix + "%(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt, datefmt="%H:%M:%S", force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
