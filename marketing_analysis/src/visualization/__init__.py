"""Diagnostic plotting for the reduction and clustering choices.

Matplotlib-only; the figures consume the tables produced by the pipeline and
never feed back into it.
"""

from __future__ import annotations

from .plots import (
    plot_cluster_sizes,
    plot_dendrogram,
    plot_elbow_curve,
    plot_explained_variance,
    plot_pca_scatter,
)

__all__ = [
    "plot_explained_variance",
    "plot_elbow_curve",
    "plot_dendrogram",
    "plot_pca_scatter",
    "plot_cluster_sizes",
]
