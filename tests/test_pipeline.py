import numpy as np
import pandas as pd
import pytest

from conftest import make_raw_customers
from marketing_analysis.src.config import PipelineConfig
from marketing_analysis.src.models.trees import TreeConfig
from marketing_analysis.src.pipeline import (
    HIERARCHICAL_COLUMN,
    KMEANS_COLUMN,
    attach_cluster_labels,
    prepare_data,
    run_pipeline,
    run_segmentation,
)


@pytest.fixture
def config():
    return PipelineConfig(chosen_method="kmeans", trees=TreeConfig(cv_folds=5))


def test_prepare_data_chains_clean_engineer_encode(raw_customers):
    prepared = prepare_data(raw_customers)

    assert prepared.cleaning.n_output == len(prepared.records) == len(prepared.matrix)
    assert prepared.matrix.index.equals(prepared.records.index)
    assert "MntWines" not in prepared.matrix.columns


def test_segmentation_labels_and_tables(raw_customers, config):
    prepared = prepare_data(raw_customers, config)

    seg = run_segmentation(prepared, config)

    assert set(seg.records[KMEANS_COLUMN]) == {1, 2, 3}
    assert set(seg.records[HIERARCHICAL_COLUMN]) <= {1, 2, 3}
    assert seg.chosen_labels.name == KMEANS_COLUMN
    assert list(seg.pca.scores.columns) == ["PC1", "PC2", "PC3"]
    assert seg.scores["method"].tolist() == ["hierarchical", "kmeans"]
    assert int(seg.interpretation.sizes["size"].sum()) == len(prepared.records)
    assert int(seg.agreement.contingency.to_numpy().sum()) == len(prepared.records)
    assert HIERARCHICAL_COLUMN not in prepared.records.columns


def test_segmentation_is_reproducible(raw_customers, config):
    prepared = prepare_data(raw_customers, config)

    a = run_segmentation(prepared, config)
    b = run_segmentation(prepared, config)

    pd.testing.assert_frame_equal(a.records, b.records)


def test_seed_reaches_kmeans(raw_customers, config):
    prepared = prepare_data(raw_customers, config)

    seg = run_segmentation(prepared, config.with_random_state(99))

    assert seg.kmeans_model.config.random_state == 99


def test_full_pipeline(config):
    raw = make_raw_customers(300, seed=4, n_missing_income=6)
    before = raw.copy()

    result = run_pipeline(raw, config)

    pd.testing.assert_frame_equal(raw, before)
    assert result.prepared.cleaning.n_missing == 6
    assert set(result.trees) == set(result.segmentation.chosen_labels)
    for tree in result.trees.values():
        assert tree.n_leaves >= 1
    assert result.response.confusion.shape == (2, 2)
    if not result.rules.empty:
        assert result.rules["consequents"].apply(len).eq(1).all()
        assert set(result.rules["channel"]) <= {"web", "catalog", "store"}


def test_attach_cluster_labels_returns_a_copy(engineered):
    h = pd.Series(np.ones(len(engineered), dtype=int), index=engineered.index)
    k = pd.Series(np.full(len(engineered), 2), index=engineered.index)

    out = attach_cluster_labels(engineered, h, k)

    assert (out[HIERARCHICAL_COLUMN] == 1).all()
    assert (out[KMEANS_COLUMN] == 2).all()
    assert HIERARCHICAL_COLUMN not in engineered.columns
