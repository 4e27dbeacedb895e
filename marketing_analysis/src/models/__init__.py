"""marketing_analysis.src.models

Model implementations used by the analysis:

- **Dimensionality reduction**:
    - :func:`~marketing_analysis.src.models.pca.fit_pca` (standardize, then PCA)

- **Segmentation** on the retained component scores:
    - :func:`~marketing_analysis.src.models.hierarchical.run_hierarchical`
      (complete linkage, Euclidean)
    - :class:`~marketing_analysis.src.models.kmeans.KMeansClusterer`
      (random starts, best of ``n_init``)

- **Classification**:
    - per-cluster one-vs-rest decision trees pruned by cross-validated
      cost-complexity (:mod:`~marketing_analysis.src.models.trees`)
    - backward-elimination logistic regression on ``Response``
      (:mod:`~marketing_analysis.src.models.logistic`)

- **Association rules** for high web / catalog / store purchase levels
  (:mod:`~marketing_analysis.src.models.association`).

Every randomized model takes an explicit ``random_state``.
"""

from __future__ import annotations

from .pca import PCAConfig, PCAResult, fit_pca
from .hierarchical import HierarchicalConfig, build_linkage, run_hierarchical
from .kmeans import KMeansClusterer, KMeansConfig, run_kmeans
from .trees import TreeConfig, TreeResult, fit_cluster_trees, tree_summary
from .logistic import LogisticConfig, LogisticResult, run_response_model
from .association import AssociationConfig, mine_all_channels, mine_channel_rules

__all__ = [
    "PCAConfig",
    "PCAResult",
    "fit_pca",
    "HierarchicalConfig",
    "build_linkage",
    "run_hierarchical",
    "KMeansConfig",
    "KMeansClusterer",
    "run_kmeans",
    "TreeConfig",
    "TreeResult",
    "fit_cluster_trees",
    "tree_summary",
    "LogisticConfig",
    "LogisticResult",
    "run_response_model",
    "AssociationConfig",
    "mine_channel_rules",
    "mine_all_channels",
]
