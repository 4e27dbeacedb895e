"""Error types raised by the analysis pipeline.

Plain ``KeyError``/``ValueError`` are still used for programming mistakes such
as a missing column. The classes below mark *data* and *model* problems that a
caller may want to tell apart from those.
"""

from __future__ import annotations

from typing import Iterable


class AnalysisError(Exception):
    """Base class for pipeline failures."""


class DuplicateIdentifierError(AnalysisError, ValueError):
    """Raised when the customer identifier is not unique."""

    def __init__(self, column: str, duplicated: Iterable[object]):
        self.column = column
        self.duplicated = sorted(set(duplicated), key=str)
        preview = ", ".join(str(v) for v in self.duplicated[:10])
        more = "" if len(self.duplicated) <= 10 else f" (+{len(self.duplicated) - 10} more)"
        super().__init__(
            f"Column '{column}' contains {len(self.duplicated)} duplicated identifier(s): "
            f"{preview}{more}"
        )


class UnmappedCategoryError(AnalysisError, KeyError):
    """Raised when a categorical value has no entry in the mapping table."""

    def __init__(self, column: str, values: Iterable[object]):
        self.column = column
        self.values = sorted({str(v) for v in values})
        super().__init__(f"Unmapped value(s) in column '{column}': {self.values}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0])


class ModelFitError(AnalysisError, RuntimeError):
    """Raised when a model cannot be fitted on the given data."""


__all__ = [
    "AnalysisError",
    "DuplicateIdentifierError",
    "UnmappedCategoryError",
    "ModelFitError",
]
