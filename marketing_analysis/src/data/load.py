"""Data loading helpers for the marketing campaign dataset.

Despite its ``.csv`` suffix, the Kaggle *Customer Personality Analysis* file is
tab-separated. The loader:

1) reads it with the declared separator (tab by default);
2) falls back to delimiter auto-detection if parsing looks suspicious
   (copies re-saved by spreadsheet tools are often comma/semicolon separated).

Important
---------
``Dt_Customer`` holds strings such as "04-09-2012" that are ambiguous between
day-first and month-first. It is left as text here and parsed with the fixed
``%d-%m-%Y`` format in :mod:`marketing_analysis.src.data.features`.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
from pandas.errors import ParserError

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("marketing_analysis/data/raw")
DEFAULT_FILENAME = "marketing_campaign.csv"
DEFAULT_SEPARATOR = "\t"

REQUIRED_COLUMNS = [
    "ID",
    "Year_Birth",
    "Education",
    "Marital_Status",
    "Income",
    "Kidhome",
    "Teenhome",
    "Dt_Customer",
    "Recency",
    "MntWines",
    "MntFruits",
    "MntMeatProducts",
    "MntFishProducts",
    "MntSweetProducts",
    "MntGoldProds",
    "NumWebPurchases",
    "NumCatalogPurchases",
    "NumStorePurchases",
    "AcceptedCmp1",
    "AcceptedCmp2",
    "AcceptedCmp3",
    "AcceptedCmp4",
    "AcceptedCmp5",
    "Response",
]


def load_raw_data(
    data_dir: Path = DEFAULT_DATA_DIR,
    filename: str = DEFAULT_FILENAME,
    sep: str = DEFAULT_SEPARATOR,
    min_expected_columns: int = 10,
) -> pd.DataFrame:
    """Load the marketing campaign file with robust delimiter handling.

    Parameters
    ----------
    data_dir:
        Directory containing ``marketing_campaign.csv``.
    filename:
        File name inside ``data_dir``.
    sep:
        Expected field separator (tab for the original Kaggle file).
    min_expected_columns:
        Sanity threshold: if fewer columns are parsed, we assume the separator
        was wrong and fall back to auto-detection.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be parsed into a plausible table.
    KeyError
        If columns the pipeline depends on are absent.
    """
    csv_path = Path(data_dir) / filename
    if not csv_path.is_file():
        raise FileNotFoundError(
            f"Expected dataset at {csv_path}. Please place the Kaggle file in this location."
        )

    try:
        df = pd.read_csv(csv_path, sep=sep)
    except ParserError:
        df = None

    if df is None or df.shape[1] < min_expected_columns:
        logger.info("Separator %r produced too few columns; auto-detecting delimiter.", sep)
        try:
            df = pd.read_csv(csv_path, sep=None, engine="python")
        except ParserError as exc:
            raise ValueError(
                f"Failed to parse dataset at {csv_path} with automatic delimiter detection."
            ) from exc

    if df.shape[1] < min_expected_columns:
        raise ValueError(
            f"Parsed dataset from {csv_path} appears to have only {df.shape[1]} columns; "
            "please verify that the file is the marketing_campaign dataset."
        )

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Dataset at {csv_path} is missing required columns: {missing}")

    logger.info("Loaded %d rows x %d columns from %s", df.shape[0], df.shape[1], csv_path)
    return df


__all__ = ["load_raw_data", "DEFAULT_DATA_DIR", "DEFAULT_FILENAME", "REQUIRED_COLUMNS"]
