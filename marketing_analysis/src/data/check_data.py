"""CLI utility to verify dataset availability and basic schema.

Run from the project root:

.. code-block:: bash

    python -m marketing_analysis.src.data.check_data

The check reads the file but never modifies it. Besides the shape it reports
the missing-value count, the enrollment date range and how many rows the
default cleaning thresholds would remove.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Tuple

import pandas as pd

from ..exceptions import AnalysisError
from .features import DEFAULT_DATE_FORMAT
from .load import DEFAULT_DATA_DIR, DEFAULT_FILENAME, load_raw_data
from .preprocess import clean_data


def dataset_status(
    data_dir: Path = DEFAULT_DATA_DIR,
    filename: str = DEFAULT_FILENAME,
) -> Tuple[bool, Path]:
    """Return whether the marketing campaign CSV file exists."""
    csv_path = Path(data_dir) / filename
    return csv_path.is_file(), csv_path


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check dataset placement and schema.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory containing the CSV (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--filename",
        type=str,
        default=DEFAULT_FILENAME,
        help=f"CSV filename (default: {DEFAULT_FILENAME})",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    # Create the directory so users immediately see where to put the file.
    args.data_dir.mkdir(parents=True, exist_ok=True)

    exists, csv_path = dataset_status(args.data_dir, args.filename)
    if not exists:
        print(
            "Dataset is missing.\n"
            "   Expected Kaggle 'Customer Personality Analysis' file at:\n"
            f"   {csv_path}\n"
        )
        return

    print(f"Found dataset at: {csv_path}")

    try:
        df = load_raw_data(data_dir=args.data_dir, filename=args.filename)
    except (ValueError, KeyError) as exc:
        print(f"Failed to load dataset: {exc}")
        return

    print(f"Rows: {df.shape[0]} | Columns: {df.shape[1]}")
    print("Columns:")
    print(", ".join(df.columns.tolist()))
    print(f"Rows with missing values: {int(df.isna().any(axis=1).sum())}")

    if "Dt_Customer" in df.columns:
        s = pd.to_datetime(df["Dt_Customer"], format=DEFAULT_DATE_FORMAT, errors="coerce")
        if s.notna().any():
            print(f"Dt_Customer range (parsed with {DEFAULT_DATE_FORMAT}): {s.min().date()} -> {s.max().date()}")
        if s.isna().any():
            print(f"Warning: {int(s.isna().sum())} Dt_Customer value(s) do not match {DEFAULT_DATE_FORMAT}.")

    try:
        report = clean_data(df)
    except AnalysisError as exc:
        print(f"Cleaning check failed: {exc}")
        return
    print(
        f"Default cleaning keeps {report.n_output} of {report.n_input} rows "
        f"(missing={report.n_missing}, outliers={report.n_outliers})."
    )


if __name__ == "__main__":
    main()
