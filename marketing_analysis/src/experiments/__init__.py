"""Experiment entrypoints for the project.

Each module contains a CLI-friendly ``main`` function. This package re-exports
those entrypoints so they can be called programmatically, e.g. from
``marketing_analysis/run_all_analyses.py``.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .run_association import main as run_association
from .run_classification import main as run_classification
from .run_segmentation import main as run_segmentation

__all__ = [
    "run_segmentation",
    "run_classification",
    "run_association",
    "run_all",
]


def run_all(argv: Optional[Sequence[str]] = None) -> None:
    """Run the three analyses in order, passing ``argv`` to each one.

    ``argv`` may only contain the options every CLI shares
    (``--config``, ``--data-dir``, ``--random-state``).
    """
    args = list(argv or [])
    run_segmentation(args)
    run_classification(args)
    run_association(args)
