"""Agglomerative (hierarchical) clustering of the component scores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import fcluster, linkage
from scipy.spatial.distance import pdist

from ..exceptions import ModelFitError

logger = logging.getLogger(__name__)


@dataclass
class HierarchicalConfig:
    """Configuration for the hierarchical clustering run.

    Parameters
    ----------
    n_clusters :
        Number of groups obtained by cutting the tree.
    method :
        Linkage criterion passed to :func:`scipy.cluster.hierarchy.linkage`.
    metric :
        Pairwise distance passed to :func:`scipy.spatial.distance.pdist`.
    """

    n_clusters: int = 3
    method: str = "complete"
    metric: str = "euclidean"


def build_linkage(features: pd.DataFrame, config: Optional[HierarchicalConfig] = None) -> np.ndarray:
    """Return the SciPy linkage matrix for ``features``."""
    cfg = config or HierarchicalConfig()
    values = np.asarray(features, dtype=float)
    if values.shape[0] < 2:
        raise ModelFitError("Hierarchical clustering needs at least two rows.")
    if not np.all(np.isfinite(values)):
        raise ModelFitError("Hierarchical clustering input contains NaN or infinite values.")
    distances = pdist(values, metric=cfg.metric)
    return linkage(distances, method=cfg.method)


def run_hierarchical(
    features: pd.DataFrame,
    config: Optional[HierarchicalConfig] = None,
) -> Tuple[pd.Series, np.ndarray]:
    """Cluster rows and cut the tree into ``n_clusters`` groups.

    Returns
    -------
    labels :
        Integer labels in ``{1, ..., n_clusters}``, indexed like ``features``.
    linkage_matrix :
        The full merge tree (for dendrograms and re-cuts).

    Raises
    ------
    ModelFitError
        If tied merge heights keep the cut from producing exactly
        ``n_clusters`` groups.
    """
    cfg = config or HierarchicalConfig()
    if not (1 <= int(cfg.n_clusters) <= len(features)):
        raise ModelFitError(
            f"n_clusters must be in [1, {len(features)}], got {cfg.n_clusters}."
        )

    Z = build_linkage(features, cfg)
    labels = fcluster(Z, t=int(cfg.n_clusters), criterion="maxclust")

    n_found = len(np.unique(labels))
    if n_found != cfg.n_clusters:
        # Ties in merge heights can make maxclust return fewer groups.
        raise ModelFitError(
            f"Tree cut produced {n_found} cluster(s) instead of {cfg.n_clusters}; "
            "merge heights are tied at the requested cut."
        )
    logger.info("Hierarchical cut: %d clusters (%s linkage).", n_found, cfg.method)

    return pd.Series(labels.astype(int), index=features.index, name="Cluster_Hierarchical"), Z


__all__ = ["HierarchicalConfig", "build_linkage", "run_hierarchical"]
