import numpy as np
import pandas as pd
import pytest

from marketing_analysis.src.exceptions import ModelFitError
from marketing_analysis.src.models.trees import (
    TreeConfig,
    fit_cluster_tree,
    fit_cluster_trees,
    select_ccp_alpha,
    tree_summary,
)


@pytest.fixture
def labelled(blobs, blob_groups):
    rng = np.random.default_rng(3)
    X = blobs.assign(Noise=rng.normal(size=len(blobs)))
    labels = pd.Series(blob_groups + 1, index=X.index)
    return X, labels


def test_one_tree_per_cluster(labelled):
    X, labels = labelled

    results = fit_cluster_trees(X, labels, TreeConfig(cv_folds=5))

    assert set(results) == {1, 2, 3}
    for cluster, res in results.items():
        assert res.cluster == cluster
        assert res.n_leaves >= 2
        assert res.cv_error <= 0.05
        assert res.feature_importances.index[0] in {"PC1", "PC2"}
        assert "PC" in res.rules_text()


def test_alpha_is_minimum_cv_error_with_ties_to_larger_alpha(labelled):
    X, labels = labelled

    res = fit_cluster_tree(X, labels, cluster=2, config=TreeConfig(cv_folds=5))

    path = res.pruning_path
    best = path["cv_error"].min()
    assert res.ccp_alpha == path.loc[np.isclose(path["cv_error"], best), "ccp_alpha"].max()
    assert res.cv_error == pytest.approx(best)


def test_pruning_path_is_sorted(labelled):
    X, labels = labelled
    y = (labels == 1).astype(int)

    path = select_ccp_alpha(X, y, TreeConfig(cv_folds=5))

    assert list(path.columns) == ["ccp_alpha", "cv_error", "cv_error_std", "n_leaves"]
    assert path["ccp_alpha"].is_monotonic_increasing
    assert path["n_leaves"].iloc[0] >= path["n_leaves"].iloc[-1]


def test_fixed_alpha_skips_the_search(labelled):
    X, labels = labelled

    res = fit_cluster_tree(X, labels, cluster=1, config=TreeConfig(ccp_alpha=0.0))

    assert res.ccp_alpha == 0.0
    assert res.pruning_path.empty
    assert np.isnan(res.cv_error)
    assert res.train_error == 0.0


def test_single_class_target_is_rejected(labelled):
    X, _ = labelled
    labels = pd.Series(1, index=X.index)

    with pytest.raises(ModelFitError, match="single class"):
        fit_cluster_tree(X, labels, cluster=1)


def test_summary_has_one_row_per_cluster(labelled):
    X, labels = labelled

    summary = tree_summary(fit_cluster_trees(X, labels, TreeConfig(cv_folds=3)))

    assert summary["cluster"].tolist() == [1, 2, 3]
    for col in ("ccp_alpha", "n_leaves", "depth", "cv_error", "train_error"):
        assert col in summary.columns
