"""Project-wide utilities (logging, seeds).

This directory is deliberately lightweight.
"""

from __future__ import annotations

from .logging_utils import DEFAULT_LOG_FORMAT, configure_logging
from .seed_utils import derive_seed

__all__ = [
    "configure_logging",
    "DEFAULT_LOG_FORMAT",
    "derive_seed",
]
