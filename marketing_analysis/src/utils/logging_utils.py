"""Logging configuration for the analysis CLIs.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the entry point that owns the run.

Design goals
------------
- No duplicate handlers when a CLI ``main`` is called repeatedly (e.g. from
  ``run_all_analyses.py`` or a notebook).
- Optional file logging so a run leaves an audit trail next to its tables.
- No implicit file creation unless ``log_file`` is provided.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"

# Package whose module loggers should share the CLI handlers.
PACKAGE_LOGGER = "marketing_analysis"


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    logger_name: Optional[str] = None,
    *,
    force: bool = True,
    capture_warnings: bool = True,
) -> logging.Logger:
    """Configure and return a logger.

    Parameters
    ----------
    level:
        Log level (default: INFO).
    log_file:
        Optional path to a log file. If a directory is provided, the file name
        defaults to ``<logger_name or root>.log``.
    logger_name:
        Name of the logger to configure. ``None`` configures the root logger.
        When a name is given, the ``marketing_analysis`` package logger gets
        the same handlers so that stage-level messages are not lost.
    force:
        If True (default), remove existing handlers to prevent duplicate logs.
    capture_warnings:
        If True (default), route Python warnings through logging.
    """
    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(stream=sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file is not None:
        log_path = Path(log_file)

        if (log_path.exists() and log_path.is_dir()) or str(log_path).endswith(("/", "\\")):
            name = (logger_name or "root").replace("/", "_")
            log_path = log_path / f"{name}.log"

        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    targets = [logging.getLogger(logger_name)]
    if logger_name is not None and logger_name != PACKAGE_LOGGER:
        targets.append(logging.getLogger(PACKAGE_LOGGER))

    for target in targets:
        target.setLevel(level)
        if force:
            for handler in list(target.handlers):
                target.removeHandler(handler)
        for handler in handlers:
            target.addHandler(handler)
        # Avoid propagating to the root logger to prevent duplicates.
        target.propagate = logger_name is None

    if capture_warnings:
        logging.captureWarnings(True)

    return targets[0]


__all__ = ["configure_logging", "DEFAULT_LOG_FORMAT", "PACKAGE_LOGGER"]
