"""Categorical-to-integer encoding and the numeric model matrix.

Codes come from an explicit, versioned mapping table rather than from
whatever order a factor/category dtype happens to have. Within a column,
codes are assigned alphabetically by label starting at 0. For the three
engineered categoricals the alphabetical order is also their natural order.

Bump ``ENCODING_VERSION`` whenever a label is added, removed or renamed so
that stored matrices can be told apart.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

import pandas as pd

from ..exceptions import UnmappedCategoryError
from .features import (
    AGE_BIN_LABELS,
    CAMPAIGN_HISTORY_COLUMNS,
    EDUCATION_RECODE,
    LOG_COLUMNS,
    NOT_PARTNERED,
    PARTNERED,
    RESPONSE_COLUMN,
    SPEND_COLUMNS,
)

ENCODING_VERSION = 1


def _alphabetical_codes(labels) -> Dict[str, int]:
    return {label: code for code, label in enumerate(sorted(set(labels)))}


CATEGORY_MAPPING: Dict[str, Dict[str, int]] = {
    "Education": _alphabetical_codes(EDUCATION_RECODE.values()),
    "Age_Category": _alphabetical_codes(AGE_BIN_LABELS),
    "Relationship": _alphabetical_codes([NOT_PARTNERED, PARTNERED]),
}

# Reserved for post-hoc interpretation; never an input to PCA or the
# cluster-membership trees.
TARGET_ADJACENT_COLUMNS: List[str] = (
    SPEND_COLUMNS
    + [LOG_COLUMNS[c] for c in SPEND_COLUMNS]
    + CAMPAIGN_HISTORY_COLUMNS
    + [RESPONSE_COLUMN, "Total_Accepted"]
)

MODEL_FEATURES: List[str] = [
    # Demographics
    "Education",
    "Income",
    "Kidhome",
    "Teenhome",
    "Age",
    "Age_Category",
    "Children",
    "Relationship",
    # Behaviour
    "Recency",
    "NumDealsPurchases",
    "NumWebPurchases",
    "NumCatalogPurchases",
    "NumStorePurchases",
    "NumWebVisitsMonth",
    "Complain",
    # Engineered
    "Spending",
    "Years_Joined",
]


def encode_categoricals(
    df: pd.DataFrame,
    mapping: Optional[Mapping[str, Mapping[str, int]]] = None,
) -> pd.DataFrame:
    """Replace every mapped categorical column by its integer code.

    Columns listed in ``mapping`` but absent from ``df`` are skipped.

    Raises
    ------
    UnmappedCategoryError
        If a column holds a label that has no code in ``mapping``.
    """
    if mapping is None:
        mapping = CATEGORY_MAPPING

    out = df.copy()
    for col, codes in mapping.items():
        if col not in out.columns:
            continue
        labels = out[col].astype(str)
        unknown = set(labels.unique()) - set(codes)
        if unknown:
            raise UnmappedCategoryError(col, unknown)
        out[col] = labels.map(codes).astype(int)
    return out


def decode_categoricals(
    df: pd.DataFrame,
    mapping: Optional[Mapping[str, Mapping[str, int]]] = None,
) -> pd.DataFrame:
    """Inverse of :func:`encode_categoricals` (for readable reports)."""
    if mapping is None:
        mapping = CATEGORY_MAPPING

    out = df.copy()
    for col, codes in mapping.items():
        if col not in out.columns:
            continue
        inverse = {code: label for label, code in codes.items()}
        unknown = set(out[col].unique()) - set(inverse)
        if unknown:
            raise UnmappedCategoryError(col, unknown)
        out[col] = out[col].map(inverse)
    return out


def mapping_table(mapping: Optional[Mapping[str, Mapping[str, int]]] = None) -> pd.DataFrame:
    """Long-format view of the mapping (column, label, code, version)."""
    if mapping is None:
        mapping = CATEGORY_MAPPING
    rows = [
        {"column": col, "label": label, "code": code, "version": ENCODING_VERSION}
        for col, codes in mapping.items()
        for label, code in sorted(codes.items(), key=lambda kv: kv[1])
    ]
    return pd.DataFrame(rows, columns=["column", "label", "code", "version"])


def build_model_matrix(
    df: pd.DataFrame,
    features: Optional[List[str]] = None,
    mapping: Optional[Mapping[str, Mapping[str, int]]] = None,
) -> pd.DataFrame:
    """Build the fully numeric matrix used by PCA and the classifiers.

    Parameters
    ----------
    df:
        Engineered records.
    features:
        Columns to keep. Defaults to the ``MODEL_FEATURES`` present in ``df``
        (``Complain`` is optional in some copies of the dataset).

    Raises
    ------
    ValueError
        If a requested feature is target-adjacent.
    KeyError
        If an explicitly requested feature is missing.
    TypeError
        If a kept column is still non-numeric after encoding.
    """
    if features is None:
        features = [c for c in MODEL_FEATURES if c in df.columns]
    else:
        missing = [c for c in features if c not in df.columns]
        if missing:
            raise KeyError(f"Requested model features not found: {missing}")

    leaked = [c for c in features if c in TARGET_ADJACENT_COLUMNS]
    if leaked:
        raise ValueError(f"Target-adjacent columns cannot be model features: {leaked}")

    matrix = encode_categoricals(df[features], mapping)

    non_numeric = [c for c in matrix.columns if not pd.api.types.is_numeric_dtype(matrix[c])]
    if non_numeric:
        raise TypeError(f"Model matrix has non-numeric columns after encoding: {non_numeric}")

    return matrix.astype(float)


__all__ = [
    "ENCODING_VERSION",
    "CATEGORY_MAPPING",
    "TARGET_ADJACENT_COLUMNS",
    "MODEL_FEATURES",
    "encode_categoricals",
    "decode_categoricals",
    "mapping_table",
    "build_model_matrix",
]
