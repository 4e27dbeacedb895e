import numpy as np
import pandas as pd
import pytest

from marketing_analysis.src.evaluation.clustering import (
    cluster_agreement,
    compute_scores,
    elbow_table,
    within_cluster_ss,
)
from marketing_analysis.src.exceptions import ModelFitError
from marketing_analysis.src.models.hierarchical import HierarchicalConfig, run_hierarchical
from marketing_analysis.src.models.kmeans import KMeansClusterer, KMeansConfig, run_kmeans


def _pure(labels, groups) -> bool:
    """Every true group maps onto exactly one label and vice versa."""
    table = pd.crosstab(np.asarray(groups), np.asarray(labels))
    return bool(((table > 0).sum(axis=1) == 1).all() and ((table > 0).sum(axis=0) == 1).all())


def test_hierarchical_labels_are_one_based(blobs, blob_groups):
    labels, Z = run_hierarchical(blobs, HierarchicalConfig(n_clusters=3))

    assert set(labels) == {1, 2, 3}
    assert labels.name == "Cluster_Hierarchical"
    assert labels.index.equals(blobs.index)
    assert Z.shape == (len(blobs) - 1, 4)
    assert _pure(labels, blob_groups)


def test_hierarchical_cluster_count_is_a_parameter(blobs):
    labels, _ = run_hierarchical(blobs, HierarchicalConfig(n_clusters=5))
    assert set(labels) == {1, 2, 3, 4, 5}

    with pytest.raises(ModelFitError):
        run_hierarchical(blobs, HierarchicalConfig(n_clusters=0))


def test_hierarchical_cut_with_tied_heights_fails():
    points = pd.DataFrame({"PC1": [0.0, 0.0, 0.0, 0.0, 5.0, 5.0], "PC2": [0.0] * 6})

    with pytest.raises(ModelFitError, match="instead of 3"):
        run_hierarchical(points, HierarchicalConfig(n_clusters=3))

    labels, _ = run_hierarchical(points, HierarchicalConfig(n_clusters=2))
    assert sorted(labels.value_counts().tolist()) == [2, 4]


def test_kmeans_is_deterministic_for_a_seed(blobs, blob_groups):
    cfg = KMeansConfig(n_clusters=3, random_state=11)

    _, first = run_kmeans(blobs, cfg)
    _, second = run_kmeans(blobs, cfg)

    pd.testing.assert_series_equal(first, second)
    assert set(first) == {1, 2, 3}
    assert first.name == "Cluster_KMeans"
    assert _pure(first, blob_groups)


def test_kmeans_inertia_matches_within_ss(blobs):
    model, labels = run_kmeans(blobs, KMeansConfig(n_clusters=3))

    assert model.inertia() == pytest.approx(within_cluster_ss(blobs, labels), rel=1e-6)
    assert list(model.centers().index) == [1, 2, 3]


def test_kmeans_labels_are_the_kept_restart_assignments(blobs):
    model, labels = run_kmeans(blobs, KMeansConfig(n_clusters=3, n_init=5, max_iter=1, random_state=3))

    np.testing.assert_array_equal(labels.to_numpy(), model.model.labels_ + 1)
    assert labels.index.equals(blobs.index)

    with pytest.raises(ValueError, match="fitted on"):
        model.fitted_labels(blobs.index[:5])


def test_kmeans_guards():
    with pytest.raises(ValueError):
        KMeansClusterer().predict(pd.DataFrame({"a": [1.0]}))
    with pytest.raises(ModelFitError):
        KMeansClusterer(KMeansConfig(n_clusters=3)).fit(pd.DataFrame({"a": [1.0, 2.0]}))


def test_agreement_of_matching_partitions(blobs):
    h_labels, _ = run_hierarchical(blobs)
    _, km_labels = run_kmeans(blobs)

    agreement = cluster_agreement(h_labels, km_labels)

    assert agreement.adjusted_rand == pytest.approx(1.0)
    assert agreement.contingency.shape == (3, 3)
    assert int(agreement.contingency.to_numpy().sum()) == len(blobs)
    assert ((agreement.contingency > 0).sum(axis=1) == 1).all()


def test_agreement_requires_equal_lengths():
    with pytest.raises(ValueError):
        cluster_agreement(pd.Series([1, 2]), pd.Series([1, 2, 3]))


def test_scores_are_none_for_a_single_cluster(blobs):
    scores = compute_scores(blobs, np.ones(len(blobs), dtype=int))

    assert scores["n_clusters"] == 1
    assert scores["silhouette"] is None
    assert scores["davies_bouldin"] is None


def test_scores_for_separated_groups(blobs, blob_groups):
    scores = compute_scores(blobs, blob_groups)

    assert scores["n_samples"] == len(blobs)
    assert scores["silhouette"] > 0.8
    assert scores["within_ss"] == pytest.approx(within_cluster_ss(blobs, blob_groups))


def test_elbow_table_scores_both_methods(blobs):
    table = elbow_table(blobs, range(2, 6))

    assert list(table.columns) == ["method", "k", "within_ss", "silhouette"]
    assert len(table) == 2 * 4
    hier = table[table["method"] == "hierarchical"].sort_values("k")
    assert hier["within_ss"].is_monotonic_decreasing
    best = table.loc[table["silhouette"].astype(float).idxmax()]
    assert best["k"] == 3
