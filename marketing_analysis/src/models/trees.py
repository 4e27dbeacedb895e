"""One-vs-rest decision trees explaining cluster membership.

For every cluster id a binary tree predicts "is this row in cluster i" from the
model matrix. Trees are grown fully and then pruned by cost-complexity
pruning: each candidate ``ccp_alpha`` on the pruning path is scored by
stratified k-fold misclassification rate and the alpha with the lowest error
is kept. Ties go to the larger alpha, i.e. the smaller tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold, cross_val_score
from sklearn.tree import DecisionTreeClassifier, export_text

from ..exceptions import ModelFitError

logger = logging.getLogger(__name__)


@dataclass
class TreeConfig:
    """Configuration for the per-cluster trees.

    Parameters
    ----------
    cv_folds :
        Folds used to score each pruning level. Lowered to the minority class
        count when a cluster is small.
    random_state :
        Seed for the fold shuffling and the tree's tie-breaking.
    ccp_alpha :
        Fixed pruning strength. ``None`` (default) selects it by
        cross-validation.
    criterion :
        Split criterion for :class:`~sklearn.tree.DecisionTreeClassifier`.
    """

    cv_folds: int = 10
    random_state: int = 42
    ccp_alpha: Optional[float] = None
    criterion: str = "gini"


@dataclass
class TreeResult:
    """Pruned tree for one cluster plus its selection diagnostics."""

    cluster: int
    ccp_alpha: float
    n_leaves: int
    depth: int
    cv_error: float
    train_error: float
    model: DecisionTreeClassifier
    feature_importances: pd.Series
    pruning_path: pd.DataFrame = field(repr=False)

    def rules_text(self) -> str:
        """Readable if/else rendering of the pruned tree."""
        return export_text(self.model, feature_names=list(self.model.feature_names_in_))


def _check_target(y: pd.Series, cluster: int) -> int:
    counts = y.value_counts()
    if counts.shape[0] < 2:
        raise ModelFitError(
            f"Cluster {cluster}: membership target has a single class; cannot fit a tree."
        )
    return int(counts.min())


def _pruning_candidates(X: pd.DataFrame, y: pd.Series, cfg: TreeConfig) -> np.ndarray:
    base = DecisionTreeClassifier(criterion=cfg.criterion, random_state=cfg.random_state)
    path = base.cost_complexity_pruning_path(X, y)
    # Negative values show up as float noise at the root of the path.
    return np.unique(np.clip(path.ccp_alphas, 0.0, None))


def select_ccp_alpha(
    X: pd.DataFrame,
    y: pd.Series,
    config: Optional[TreeConfig] = None,
    cluster: int = 0,
) -> pd.DataFrame:
    """Score every pruning level by cross-validated misclassification rate.

    Returns a table with columns ``ccp_alpha``, ``cv_error``, ``cv_error_std``
    and ``n_leaves`` (leaves of the tree refit on all rows), sorted by alpha.
    """
    cfg = config or TreeConfig()
    minority = _check_target(y, cluster)
    n_splits = min(int(cfg.cv_folds), minority)
    if n_splits < 2:
        raise ModelFitError(
            f"Cluster {cluster}: only {minority} member(s) in the minority class; "
            "cross-validation needs at least 2."
        )

    cv = StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=cfg.random_state)

    rows = []
    for alpha in _pruning_candidates(X, y, cfg):
        tree = DecisionTreeClassifier(
            criterion=cfg.criterion,
            ccp_alpha=float(alpha),
            random_state=cfg.random_state,
        )
        accuracy = cross_val_score(tree, X, y, cv=cv, scoring="accuracy")
        n_leaves = tree.fit(X, y).get_n_leaves()
        rows.append(
            {
                "ccp_alpha": float(alpha),
                "cv_error": float(1.0 - accuracy.mean()),
                "cv_error_std": float(accuracy.std()),
                "n_leaves": int(n_leaves),
            }
        )
    return pd.DataFrame(rows).sort_values("ccp_alpha").reset_index(drop=True)


def _best_alpha(path: pd.DataFrame) -> float:
    best_error = path["cv_error"].min()
    tied = path[np.isclose(path["cv_error"], best_error)]
    return float(tied["ccp_alpha"].max())


def fit_cluster_tree(
    X: pd.DataFrame,
    labels: pd.Series,
    cluster: int,
    config: Optional[TreeConfig] = None,
) -> TreeResult:
    """Fit the pruned membership tree for a single cluster id."""
    cfg = config or TreeConfig()
    y = (labels.reindex(X.index) == cluster).astype(int)

    if cfg.ccp_alpha is None:
        path = select_ccp_alpha(X, y, cfg, cluster=cluster)
        alpha = _best_alpha(path)
    else:
        _check_target(y, cluster)
        path = pd.DataFrame(columns=["ccp_alpha", "cv_error", "cv_error_std", "n_leaves"])
        alpha = float(cfg.ccp_alpha)

    tree = DecisionTreeClassifier(
        criterion=cfg.criterion,
        ccp_alpha=alpha,
        random_state=cfg.random_state,
    ).fit(X, y)

    if path.empty:
        cv_error = float("nan")
    else:
        cv_error = float(path.loc[path["ccp_alpha"] == alpha, "cv_error"].iloc[0])

    train_error = float(1.0 - tree.score(X, y))
    importances = pd.Series(tree.feature_importances_, index=X.columns, name="importance")

    logger.info(
        "Cluster %d tree: alpha=%.5f leaves=%d depth=%d cv_error=%.4f",
        cluster,
        alpha,
        tree.get_n_leaves(),
        tree.get_depth(),
        cv_error,
    )

    return TreeResult(
        cluster=int(cluster),
        ccp_alpha=alpha,
        n_leaves=int(tree.get_n_leaves()),
        depth=int(tree.get_depth()),
        cv_error=cv_error,
        train_error=train_error,
        model=tree,
        feature_importances=importances.sort_values(ascending=False),
        pruning_path=path,
    )


def fit_cluster_trees(
    X: pd.DataFrame,
    labels: pd.Series,
    config: Optional[TreeConfig] = None,
) -> Dict[int, TreeResult]:
    """Fit one pruned tree per cluster id found in ``labels``."""
    cfg = config or TreeConfig()
    results: Dict[int, TreeResult] = {}
    for cluster in sorted(pd.unique(labels)):
        results[int(cluster)] = fit_cluster_tree(X, labels, int(cluster), cfg)
    return results


def tree_summary(results: Dict[int, TreeResult], top_features: int = 3) -> pd.DataFrame:
    """Tabulate chosen tree sizes and errors, one row per cluster."""
    rows: List[dict] = []
    for cluster, res in sorted(results.items()):
        top = [f for f, v in res.feature_importances.items() if v > 0][:top_features]
        rows.append(
            {
                "cluster": cluster,
                "ccp_alpha": res.ccp_alpha,
                "n_leaves": res.n_leaves,
                "depth": res.depth,
                "cv_error": res.cv_error,
                "train_error": res.train_error,
                "top_features": ", ".join(top),
            }
        )
    return pd.DataFrame(rows)


__all__ = [
    "TreeConfig",
    "TreeResult",
    "select_ccp_alpha",
    "fit_cluster_tree",
    "fit_cluster_trees",
    "tree_summary",
]
