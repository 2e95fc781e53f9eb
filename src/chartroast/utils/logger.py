# -*- coding: utf-8 -*-
"""Logger factory and per-session file logging setup."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def get_logger(name: str, log_file: str | Path | None = None) -> logging.Logger:
    """Return a logger with its own console handler and an optional log file.

    The console shows warnings and above; the file records everything.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=DATE_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.WARNING)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def _env_level(name: str, default: int = logging.DEBUG) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def setup_session_logging(base_dir: str | Path, app_name: str) -> Path | None:
    """Configure root logging with a console handler and a session log file.

    The level defaults to DEBUG and can be lowered with ``CHARTROAST_LOG_LEVEL``.
    Calling this twice returns the first session's log path.
    """
    root = logging.getLogger()
    if getattr(root, "_chartroast_logging_configured", False):
        return getattr(root, "_chartroast_session_log", None)

    level = _env_level("CHARTROAST_LOG_LEVEL")
    root.setLevel(level)
    formatter = logging.Formatter(
        "%(asctime)s [%(threadName)s] %(name)s - %(levelname)s - %(message)s",
        datefmt=DATE_FORMAT,
    )

    if not any(isinstance(handler, logging.StreamHandler) for handler in root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    logs_dir = Path(base_dir) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    safe_app_name = app_name.lower().replace(" ", "-")
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    session_log_path: Path | None = logs_dir / f"{safe_app_name}-{timestamp}.log"
    try:
        file_handler = logging.FileHandler(session_log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        root.info("Session log file established: %s", session_log_path)
    except OSError as e:
        root.error("Failed to establish session log file: %s", e)
        session_log_path = None

    root._chartroast_logging_configured = True  # type: ignore[attr-defined]
    root._chartroast_session_log = session_log_path  # type: ignore[attr-defined]
    return session_log_path
