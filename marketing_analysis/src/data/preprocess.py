"""Row-level cleaning of the raw marketing records.

:func:`clean_data` removes three kinds of rows and reports how many of each
were removed:

1) rows with any missing field (dropped, count logged);
2) rows sharing a customer identifier (never dropped silently: a
   :class:`~marketing_analysis.src.exceptions.DuplicateIdentifierError` is
   raised, because later joins key off the identifier);
3) rows whose age or income lies outside the plausible range.

The output keeps every raw attribute except the identifier and the two
constant ``Z_*`` columns. Running the cleaner on its own output removes
nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from ..exceptions import DuplicateIdentifierError

logger = logging.getLogger(__name__)

# Age is measured against a fixed year so that reruns give identical results.
DEFAULT_REFERENCE_YEAR = 2021
DEFAULT_MAX_AGE = 80
DEFAULT_MAX_INCOME = 100_000

ID_COLUMN = "ID"
CONSTANT_COLUMNS = ("Z_CostContact", "Z_Revenue")


@dataclass(frozen=True)
class CleaningReport:
    """Cleaned records plus the audit counts of removed rows."""

    data: pd.DataFrame
    n_input: int
    n_missing: int
    n_outliers: int

    @property
    def n_output(self) -> int:
        return int(self.data.shape[0])

    @property
    def n_removed(self) -> int:
        return self.n_missing + self.n_outliers

    def summary(self) -> pd.DataFrame:
        """One-row table for reports."""
        return pd.DataFrame(
            [
                {
                    "n_input": self.n_input,
                    "n_missing": self.n_missing,
                    "n_outliers": self.n_outliers,
                    "n_output": self.n_output,
                }
            ]
        )


def _compute_age(df: pd.DataFrame, reference_year: int) -> pd.Series:
    if "Year_Birth" in df.columns:
        return int(reference_year) - df["Year_Birth"]
    if "Age" in df.columns:
        return df["Age"]
    raise KeyError("Need 'Year_Birth' or 'Age' to apply the age threshold.")


def check_unique_identifier(df: pd.DataFrame, id_col: str = ID_COLUMN) -> None:
    """Raise if ``id_col`` holds duplicated values."""
    dup_mask = df[id_col].duplicated(keep=False)
    if dup_mask.any():
        raise DuplicateIdentifierError(id_col, df.loc[dup_mask, id_col].tolist())


def clean_data(
    df: pd.DataFrame,
    reference_year: int = DEFAULT_REFERENCE_YEAR,
    max_age: float = DEFAULT_MAX_AGE,
    max_income: float = DEFAULT_MAX_INCOME,
    id_col: str = ID_COLUMN,
) -> CleaningReport:
    """Drop incomplete, duplicated and out-of-range rows.

    Parameters
    ----------
    df:
        Raw records as returned by :func:`~marketing_analysis.src.data.load.load_raw_data`.
    reference_year:
        Year against which ``Age = reference_year - Year_Birth`` is computed.
    max_age, max_income:
        Exclusive upper bounds; surviving rows satisfy ``Age < max_age`` and
        ``Income < max_income``.
    id_col:
        Customer identifier. Checked for uniqueness, then dropped. If the
        column is absent (already-cleaned input) the check is skipped.

    Returns
    -------
    CleaningReport
        The cleaned frame (fresh index) and per-reason removal counts.

    Raises
    ------
    DuplicateIdentifierError
        If ``id_col`` is present and not unique.
    """
    n_input = int(df.shape[0])

    out = df.drop(columns=[c for c in CONSTANT_COLUMNS if c in df.columns])

    # 1) Missing values
    complete = out.dropna(how="any")
    n_missing = n_input - int(complete.shape[0])
    if n_missing:
        logger.info("Dropped %d row(s) with missing values.", n_missing)

    # 2) Identifier uniqueness
    if id_col in complete.columns:
        check_unique_identifier(complete, id_col)
        complete = complete.drop(columns=[id_col])

    # 3) Plausible ranges
    age = _compute_age(complete, reference_year)
    in_range = (age < max_age) & (complete["Income"] < max_income)
    n_outliers = int((~in_range).sum())
    if n_outliers:
        logger.info(
            "Dropped %d outlier row(s) (age >= %s or income >= %s).",
            n_outliers,
            max_age,
            max_income,
        )

    cleaned = complete.loc[in_range].reset_index(drop=True)
    return CleaningReport(
        data=cleaned,
        n_input=n_input,
        n_missing=n_missing,
        n_outliers=n_outliers,
    )


__all__ = [
    "CleaningReport",
    "clean_data",
    "check_unique_identifier",
    "DEFAULT_REFERENCE_YEAR",
    "DEFAULT_MAX_AGE",
    "DEFAULT_MAX_INCOME",
    "ID_COLUMN",
]
