"""Deterministic per-row feature engineering.

Every derived column is a pure function of a single row (plus the fixed
reference year), so the transforms can be applied to any subset of customers
without cross-row state.

Derived columns
---------------
- ``Age``, ``Age_Category``
- ``Children`` = ``Kidhome`` + ``Teenhome``
- ``Spending`` = sum of the six ``Mnt*`` category spends
- ``log_*`` = ``ln(1 + x)`` for the long-tailed amounts
- ``Relationship`` ("Partnered" / "Not Partnered")
- ``Education`` recoded to four levels
- ``Years_Joined`` = reference year - enrollment year
- ``Total_Accepted`` = accepted campaigns 1-5 + last response
"""

from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np
import pandas as pd

from ..exceptions import UnmappedCategoryError
from .preprocess import DEFAULT_REFERENCE_YEAR

logger = logging.getLogger(__name__)

# Kaggle dataset stores enrollment dates as dd-mm-YYYY.
DEFAULT_DATE_FORMAT = "%d-%m-%Y"

# -----------------------------------------------------------------------------
# Column groups (used by external modules)
# -----------------------------------------------------------------------------

SPEND_COLUMNS: List[str] = [
    "MntWines",
    "MntFruits",
    "MntMeatProducts",
    "MntFishProducts",
    "MntSweetProducts",
    "MntGoldProds",
]

# Raw amount column -> log-transformed column name.
LOG_COLUMNS: Dict[str, str] = {
    "MntWines": "log_Wines",
    "MntFruits": "log_Fruits",
    "MntMeatProducts": "log_Meat",
    "MntFishProducts": "log_Fish",
    "MntSweetProducts": "log_Sweets",
    "MntGoldProds": "log_Gold",
    "Spending": "log_Spending",
    "Income": "log_Income",
}

CAMPAIGN_HISTORY_COLUMNS: List[str] = [
    "AcceptedCmp1",
    "AcceptedCmp2",
    "AcceptedCmp3",
    "AcceptedCmp4",
    "AcceptedCmp5",
]

RESPONSE_COLUMN = "Response"

CHANNEL_COLUMNS: Dict[str, str] = {
    "web": "NumWebPurchases",
    "catalog": "NumCatalogPurchases",
    "store": "NumStorePurchases",
}

# Right-closed bins: (0, 40], (40, 56], (56, inf). The upper age bound is
# enforced by the cleaner, so every surviving age above 56 is "Senior".
AGE_BIN_EDGES: List[float] = [0, 40, 56, np.inf]
AGE_BIN_LABELS: List[str] = ["Adult", "Middle Aged", "Senior"]

PARTNERED_STATUSES = frozenset({"Married", "Together"})
PARTNERED = "Partnered"
NOT_PARTNERED = "Not Partnered"

EDUCATION_RECODE: Dict[str, str] = {
    "Basic": "Bachelors",
    "2n Cycle": "Masters",
    "Graduation": "Graduate",
    "Master": "Masters",
    "PhD": "PhD",
}

# Raw columns consumed by the transforms and not carried further.
CONSUMED_RAW_COLUMNS: List[str] = ["Year_Birth", "Dt_Customer", "Marital_Status"]


# -----------------------------------------------------------------------------
# Single transforms
# -----------------------------------------------------------------------------


def _require(df: pd.DataFrame, cols: List[str], purpose: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"Missing columns required for {purpose}: {missing}")


def log1p_amount(series: pd.Series) -> pd.Series:
    """``ln(1 + x)`` for non-negative long-tailed amounts.

    Negative amounts are invalid in this dataset; they raise instead of being
    clipped so that the inverse ``exp(y) - 1`` always recovers the input.
    """
    values = pd.to_numeric(series, errors="raise").astype(float)
    if (values < 0).any():
        raise ValueError(f"Column '{series.name}' contains negative amounts; cannot log-transform.")
    return np.log1p(values)


def bucket_age(age: pd.Series) -> pd.Series:
    """Map ages onto the fixed ``AGE_BIN_EDGES`` buckets."""
    cats = pd.cut(age, bins=AGE_BIN_EDGES, labels=AGE_BIN_LABELS, right=True)
    unmapped = age[cats.isna()]
    if not unmapped.empty:
        raise UnmappedCategoryError("Age", unmapped.tolist())
    return cats.astype(str)


def recode_education(education: pd.Series) -> pd.Series:
    """Collapse the five raw education labels into four levels."""
    unknown = set(education.unique()) - set(EDUCATION_RECODE)
    if unknown:
        raise UnmappedCategoryError("Education", unknown)
    return education.map(EDUCATION_RECODE)


def relationship_status(marital_status: pd.Series) -> pd.Series:
    """Collapse marital status into "Partnered" / "Not Partnered"."""
    partnered = marital_status.isin(PARTNERED_STATUSES)
    return pd.Series(
        np.where(partnered, PARTNERED, NOT_PARTNERED),
        index=marital_status.index,
        name="Relationship",
    )


def enrollment_year(dt_customer: pd.Series, date_format: str = DEFAULT_DATE_FORMAT) -> pd.Series:
    """Parse ``Dt_Customer`` with an explicit format and return the year.

    Unparseable dates raise ``ValueError`` instead of becoming NaT.
    """
    if pd.api.types.is_datetime64_any_dtype(dt_customer):
        parsed = dt_customer
    else:
        parsed = pd.to_datetime(dt_customer, format=date_format, errors="raise")
    return parsed.dt.year


# -----------------------------------------------------------------------------
# Public entry point
# -----------------------------------------------------------------------------


def engineer_features(
    df: pd.DataFrame,
    reference_year: int = DEFAULT_REFERENCE_YEAR,
    date_format: str = DEFAULT_DATE_FORMAT,
    drop_consumed: bool = True,
) -> pd.DataFrame:
    """Return a new frame with every engineered column added.

    Parameters
    ----------
    df:
        Cleaned records (see :func:`~marketing_analysis.src.data.preprocess.clean_data`).
    reference_year:
        Year used for ``Age`` and ``Years_Joined``.
    date_format:
        Format of ``Dt_Customer``.
    drop_consumed:
        Drop ``Year_Birth``, ``Dt_Customer`` and ``Marital_Status`` after use.

    Raises
    ------
    KeyError
        If a required raw column is missing.
    UnmappedCategoryError
        For an education label outside ``EDUCATION_RECODE`` or an age outside
        ``AGE_BIN_EDGES``.
    """
    _require(df, ["Year_Birth", "Kidhome", "Teenhome", "Marital_Status", "Education"], "demographics")
    _require(df, SPEND_COLUMNS, "Spending")
    _require(df, CAMPAIGN_HISTORY_COLUMNS + [RESPONSE_COLUMN], "Total_Accepted")
    _require(df, ["Dt_Customer", "Income"], "tenure and income features")

    out = df.copy()

    out["Age"] = int(reference_year) - out["Year_Birth"]
    out["Age_Category"] = bucket_age(out["Age"])

    out["Children"] = out["Kidhome"] + out["Teenhome"]
    out["Spending"] = out[SPEND_COLUMNS].sum(axis=1)

    for raw, log_name in LOG_COLUMNS.items():
        out[log_name] = log1p_amount(out[raw])

    out["Relationship"] = relationship_status(out["Marital_Status"])
    out["Education"] = recode_education(out["Education"])

    out["Years_Joined"] = int(reference_year) - enrollment_year(out["Dt_Customer"], date_format)

    out["Total_Accepted"] = out[CAMPAIGN_HISTORY_COLUMNS + [RESPONSE_COLUMN]].sum(axis=1).astype(int)

    if drop_consumed:
        out = out.drop(columns=[c for c in CONSUMED_RAW_COLUMNS if c in out.columns])

    logger.info("Engineered features for %d rows (%d columns).", out.shape[0], out.shape[1])
    return out


__all__ = [
    "engineer_features",
    "log1p_amount",
    "bucket_age",
    "recode_education",
    "relationship_status",
    "enrollment_year",
    "SPEND_COLUMNS",
    "LOG_COLUMNS",
    "CAMPAIGN_HISTORY_COLUMNS",
    "RESPONSE_COLUMN",
    "CHANNEL_COLUMNS",
    "AGE_BIN_EDGES",
    "AGE_BIN_LABELS",
    "EDUCATION_RECODE",
    "PARTNERED",
    "NOT_PARTNERED",
    "DEFAULT_DATE_FORMAT",
]
