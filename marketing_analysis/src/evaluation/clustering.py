"""Clustering diagnostics.

- :func:`compute_scores`: Silhouette (higher is better), Calinski–Harabasz
  (higher is better) and Davies–Bouldin (lower is better) for one labeling.
- :func:`elbow_table`: within-cluster sum of squares and silhouette over a
  range of K for both clustering methods, used to pick the cluster count.
- :func:`cluster_agreement`: contingency table between the hierarchical and
  k-means labelings plus the adjusted Rand index. No reconciliation is done;
  the analyst chooses which labeling to carry forward.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import fcluster
from sklearn import metrics

from ..models.hierarchical import HierarchicalConfig, build_linkage
from ..models.kmeans import KMeansConfig, run_kmeans


def _to_2d_float_array(x: Any) -> np.ndarray:
    """Convert input feature matrix into a 2D float NumPy array."""
    if isinstance(x, pd.DataFrame):
        arr = x.to_numpy(dtype=float)
    elif isinstance(x, pd.Series):
        arr = x.to_numpy(dtype=float).reshape(-1, 1)
    else:
        arr = np.asarray(x, dtype=float)

    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    return arr


def _to_1d_labels(x: Any) -> np.ndarray:
    """Convert labels/cluster assignments to a 1D NumPy array."""
    if isinstance(x, (pd.Series, pd.Index)):
        arr = x.to_numpy()
    else:
        arr = np.asarray(x)
    return np.asarray(arr).reshape(-1)


def within_cluster_ss(features: pd.DataFrame | np.ndarray, labels: pd.Series | np.ndarray) -> float:
    """Total within-cluster sum of squared distances to the cluster means."""
    X = _to_2d_float_array(features)
    y = _to_1d_labels(labels)
    total = 0.0
    for label in np.unique(y):
        members = X[y == label]
        total += float(((members - members.mean(axis=0)) ** 2).sum())
    return total


def compute_scores(
    features: pd.DataFrame | np.ndarray,
    labels: pd.Series | np.ndarray,
) -> Dict[str, Optional[float]]:
    """Compute standard clustering quality indices.

    Returns
    -------
    dict
        Keys ``n_samples``, ``n_clusters``, ``within_ss``, ``silhouette``,
        ``calinski_harabasz``, ``davies_bouldin``. Indices that are undefined
        for the partition (a single cluster, or as many clusters as rows) are
        None.
    """
    X = _to_2d_float_array(features)
    y = _to_1d_labels(labels)
    if X.shape[0] != y.shape[0]:
        raise ValueError(f"features and labels length mismatch: {X.shape[0]} vs {y.shape[0]}")

    n_samples = int(X.shape[0])
    n_clusters = int(len(np.unique(y)))

    results: Dict[str, Optional[float]] = {
        "n_samples": float(n_samples),
        "n_clusters": float(n_clusters),
        "within_ss": within_cluster_ss(X, y),
        "silhouette": None,
        "calinski_harabasz": None,
        "davies_bouldin": None,
    }

    if n_clusters <= 1 or n_samples <= n_clusters:
        return results

    results["silhouette"] = float(metrics.silhouette_score(X, y))
    results["calinski_harabasz"] = float(metrics.calinski_harabasz_score(X, y))
    results["davies_bouldin"] = float(metrics.davies_bouldin_score(X, y))
    return results


def elbow_table(
    features: pd.DataFrame,
    k_values: Iterable[int] = range(2, 9),
    *,
    hierarchical: Optional[HierarchicalConfig] = None,
    kmeans: Optional[KMeansConfig] = None,
) -> pd.DataFrame:
    """Score both clustering methods for each candidate K.

    The hierarchical tree is built once and re-cut for every K. K-Means is
    refit per K with the configured restarts and seed.

    Returns a long table with columns ``method``, ``k``, ``within_ss``,
    ``silhouette``.
    """
    h_cfg = hierarchical or HierarchicalConfig()
    km_cfg = kmeans or KMeansConfig()

    Z = build_linkage(features, h_cfg)
    rows = []
    for k in k_values:
        k = int(k)
        h_labels = fcluster(Z, t=k, criterion="maxclust")
        h_scores = compute_scores(features, h_labels)
        rows.append(
            {"method": "hierarchical", "k": k, "within_ss": h_scores["within_ss"], "silhouette": h_scores["silhouette"]}
        )

        cfg_k = KMeansConfig(
            n_clusters=k,
            init=km_cfg.init,
            n_init=km_cfg.n_init,
            max_iter=km_cfg.max_iter,
            random_state=km_cfg.random_state,
        )
        model, km_labels = run_kmeans(features, cfg_k)
        km_scores = compute_scores(features, km_labels)
        rows.append(
            {"method": "kmeans", "k": k, "within_ss": model.inertia(), "silhouette": km_scores["silhouette"]}
        )

    return pd.DataFrame(rows, columns=["method", "k", "within_ss", "silhouette"])


@dataclass(frozen=True)
class ClusterAgreement:
    """Cross-tabulation of two labelings of the same rows."""

    contingency: pd.DataFrame
    adjusted_rand: float


def cluster_agreement(
    hierarchical_labels: pd.Series,
    kmeans_labels: pd.Series,
) -> ClusterAgreement:
    """Contingency table (hierarchical rows x k-means columns) and ARI."""
    h = pd.Series(_to_1d_labels(hierarchical_labels), name="hierarchical")
    k = pd.Series(_to_1d_labels(kmeans_labels), name="kmeans")
    if h.shape[0] != k.shape[0]:
        raise ValueError(f"Labelings differ in length: {h.shape[0]} vs {k.shape[0]}")

    table = pd.crosstab(h, k)
    ari = float(metrics.adjusted_rand_score(h, k))
    return ClusterAgreement(contingency=table, adjusted_rand=ari)


__all__ = [
    "compute_scores",
    "within_cluster_ss",
    "elbow_table",
    "ClusterAgreement",
    "cluster_agreement",
]
