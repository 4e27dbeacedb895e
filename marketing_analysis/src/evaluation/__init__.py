"""Evaluation utilities.

Experiment runners call functions in this package to compute:

- clustering quality (within-cluster SS, Silhouette, Calinski-Harabasz,
  Davies-Bouldin), elbow tables and agreement between two labelings;
- cluster interpretation tables (sizes, means, proportions, income CIs);
- response prediction metrics and the confusion matrix.
"""

from __future__ import annotations

from .prediction import compute_classification_metrics, confusion_table
from .clustering import (
    ClusterAgreement,
    cluster_agreement,
    compute_scores,
    elbow_table,
    within_cluster_ss,
)
from .interpretation import (
    InterpretationReport,
    cluster_means,
    cluster_proportions,
    cluster_sizes,
    income_confidence_intervals,
    interpret_clusters,
    mean_confidence_interval,
)

__all__ = [
    "compute_classification_metrics",
    "confusion_table",
    "compute_scores",
    "within_cluster_ss",
    "elbow_table",
    "ClusterAgreement",
    "cluster_agreement",
    "InterpretationReport",
    "cluster_sizes",
    "cluster_means",
    "cluster_proportions",
    "mean_confidence_interval",
    "income_confidence_intervals",
    "interpret_clusters",
]
