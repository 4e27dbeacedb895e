import numpy as np
import pandas as pd
import pytest
from scipy import stats

from marketing_analysis.src.evaluation.interpretation import (
    cluster_means,
    cluster_proportions,
    cluster_sizes,
    income_confidence_intervals,
    interpret_clusters,
    mean_confidence_interval,
)


@pytest.fixture
def labels(engineered):
    # Three groups by income tertile.
    return pd.qcut(engineered["Income"], 3, labels=[1, 2, 3]).astype(int)


def test_confidence_interval_matches_scipy():
    values = pd.Series([52_000.0, 61_500.0, 48_250.0, 70_100.0, 55_000.0, 66_300.0])

    ci = mean_confidence_interval(values, confidence=0.95)
    lower, upper = stats.t.interval(0.95, df=len(values) - 1, loc=values.mean(), scale=stats.sem(values))

    assert ci["n"] == 6
    assert ci["mean"] == pytest.approx(values.mean())
    assert ci["lower"] == pytest.approx(lower)
    assert ci["upper"] == pytest.approx(upper)


def test_confidence_interval_needs_two_values():
    ci = mean_confidence_interval(pd.Series([10.0]))

    assert ci["mean"] == 10.0
    assert np.isnan(ci["margin"])

    with pytest.raises(ValueError):
        mean_confidence_interval(pd.Series([1.0, 2.0]), confidence=1.0)


def test_sizes_and_shares(labels):
    sizes = cluster_sizes(labels)

    assert list(sizes.index) == [1, 2, 3]
    assert int(sizes["size"].sum()) == len(labels)
    assert sizes["share"].sum() == pytest.approx(1.0)


def test_means_follow_the_grouping(engineered, labels):
    means = cluster_means(engineered, labels, columns=["Income", "Spending"])

    assert list(means.columns) == ["Income", "Spending"]
    assert means["Income"].is_monotonic_increasing


def test_proportions_sum_to_one_per_cluster(engineered, labels):
    table = cluster_proportions(engineered, labels, "Education")

    np.testing.assert_allclose(table.sum(axis=1), 1.0)
    assert set(table.columns) <= {"Bachelors", "Graduate", "Masters", "PhD"}


def test_income_intervals_cover_cluster_means(engineered, labels):
    table = income_confidence_intervals(engineered, labels)

    assert list(table.index) == [1, 2, 3]
    assert (table["lower"] < table["mean"]).all()
    assert (table["mean"] < table["upper"]).all()
    assert int(table["n"].sum()) == len(engineered)


def test_report_bundles_every_table(engineered, labels):
    report = interpret_clusters(engineered, labels)

    assert set(report.proportions) == {"Education", "Age_Category", "Relationship", "Children"}
    assert report.sizes.shape[0] == report.means.shape[0] == report.income_ci.shape[0] == 3


def test_series_labels_must_cover_every_row(engineered, labels):
    with pytest.raises(ValueError):
        cluster_means(engineered, labels.iloc[:-1])
    with pytest.raises(ValueError):
        cluster_means(engineered, labels.to_numpy()[:-1])
