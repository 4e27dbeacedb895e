import numpy as np
import pandas as pd
import pytest

from conftest import make_raw_customers
from marketing_analysis.src.data.preprocess import clean_data
from marketing_analysis.src.exceptions import AnalysisError, DuplicateIdentifierError


def test_null_income_rows_are_dropped_and_counted():
    raw = make_raw_customers(100, seed=1, n_missing_income=5)

    report = clean_data(raw)

    assert report.n_input == 100
    assert report.n_missing == 5
    assert report.n_outliers == 0
    assert report.n_output == 95
    assert report.n_removed == 5
    assert report.data.notna().all().all()


def test_cleaning_is_idempotent(raw_customers):
    first = clean_data(raw_customers).data
    second = clean_data(first)

    assert second.n_removed == 0
    pd.testing.assert_frame_equal(first, second.data)


def test_outlier_thresholds_are_exclusive(raw_customers):
    raw = raw_customers.copy()
    raw.loc[0, "Year_Birth"] = 1900  # age 121
    raw.loc[1, "Year_Birth"] = 1941  # age 80, on the bound
    raw.loc[2, "Income"] = 150_000.0
    raw.loc[3, "Income"] = 100_000.0  # on the bound

    report = clean_data(raw)

    assert report.n_outliers == 4
    age = 2021 - report.data["Year_Birth"]
    assert (age < 80).all()
    assert (report.data["Income"] < 100_000).all()


def test_thresholds_are_parameters(raw_customers):
    report = clean_data(raw_customers, max_income=50_000, max_age=60)

    assert (report.data["Income"] < 50_000).all()
    assert ((2021 - report.data["Year_Birth"]) < 60).all()
    assert report.n_outliers > 0


def test_identifier_and_constant_columns_are_dropped(raw_customers):
    cleaned = clean_data(raw_customers).data

    for col in ("ID", "Z_CostContact", "Z_Revenue"):
        assert col not in cleaned.columns
    assert isinstance(cleaned.index, pd.RangeIndex)


def test_duplicate_identifier_fails_loudly(raw_customers):
    raw = raw_customers.copy()
    raw.loc[5, "ID"] = raw.loc[4, "ID"]

    with pytest.raises(DuplicateIdentifierError) as info:
        clean_data(raw)

    assert info.value.column == "ID"
    assert info.value.duplicated == [raw.loc[4, "ID"]]
    assert isinstance(info.value, ValueError)
    assert isinstance(info.value, AnalysisError)


def test_input_is_not_mutated(raw_customers):
    before = raw_customers.copy()
    clean_data(raw_customers)
    pd.testing.assert_frame_equal(before, raw_customers)


def test_summary_is_one_row(raw_customers):
    summary = clean_data(raw_customers).summary()

    assert summary.shape == (1, 4)
    assert list(summary.columns) == ["n_input", "n_missing", "n_outliers", "n_output"]
    assert int(summary.loc[0, "n_output"]) == len(raw_customers)


def test_age_column_is_used_without_birth_year():
    df = pd.DataFrame({"Age": [30, 85, 50], "Income": [1.0, 2.0, np.nan]})

    report = clean_data(df)

    assert report.n_missing == 1
    assert report.n_outliers == 1
    assert report.data["Age"].tolist() == [30]
