"""
Logging for the storefront core.

    from storefront.logging import get_logger
    logger = get_logger(__name__)

Level comes from LOG_LEVEL; STOREFRONT_ENV=production drops the timestamp.
Ids and free text from users go through the sanitizers before being logged.
"""

import logging
import os
import sys
from functools import cache

_QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def _setup() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    fmt = "%(levelname)s - %(name)s - %(message)s"
    if os.environ.get("STOREFRONT_ENV") != "production":
        fmt = "%(asctime)s - " + fmt

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_setup()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _clean(value: object, limit: int, suffix: str) -> str:
    # Control characters would let a value forge extra log lines
    text = str(value).replace("\x00", "")
    text = text.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return text if len(text) <= limit else text[:limit] + suffix


def sanitize_id_for_logging(id_value: str | None) -> str:
    """First 8 characters of an identity id, or "N/A"."""
    return _clean(id_value, 8, "") if id_value else "N/A"


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """Escaped free text (search terms, emails) cut to ``max_length``, or "N/A"."""
    return _clean(value, max_length, "...") if value else "N/A"
