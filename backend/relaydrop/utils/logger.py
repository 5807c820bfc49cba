# relaydrop/utils/logger.py

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logger(level_name: str | None = None):
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if getattr(setup_logger, "_configured", False):
        root.setLevel(level)
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.handlers[:] = [handler]
    root.setLevel(level)
    setup_logger._configured = True


def redact(identifier: str | None) -> str:
    """Shorten a token or short code for log lines ("a1b2…")."""
    if not identifier:
        return "<none>"
    return identifier[:4] + "…"
