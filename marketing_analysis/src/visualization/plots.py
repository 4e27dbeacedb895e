"""Diagnostic figures for the reduction and clustering choices.

These plots back the two judgement calls of the segmentation: how many
principal components to keep (scree / cumulative variance) and how many
clusters to cut (elbow, silhouette, dendrogram).

Notes
-----
- Uses matplotlib only; callers running headless should select the ``Agg``
  backend before importing pyplot.
- Every function returns the figure and optionally saves it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import dendrogram


def _maybe_save(fig: plt.Figure, save_path: str | Path | None) -> None:
    if save_path is None:
        return
    path = Path(save_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight", dpi=200)


def plot_explained_variance(
    variance_table: pd.DataFrame,
    n_selected: Optional[int] = None,
    title: str = "Explained variance by component",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Scree bars plus the cumulative explained-variance curve."""
    x = np.arange(1, len(variance_table) + 1)

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.bar(x, variance_table["explained_variance_ratio"], alpha=0.7, label="Per component")
    ax.plot(x, variance_table["cumulative_ratio"], marker="o", color="black", label="Cumulative")
    if n_selected is not None:
        ax.axvline(n_selected, linestyle="--", color="grey", label=f"k = {n_selected}")
    ax.set_xticks(x)
    ax.set_xlabel("Principal component")
    ax.set_ylabel("Explained variance ratio")
    ax.set_ylim(0, 1.05)
    ax.set_title(title)
    ax.legend(fontsize=9)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_elbow_curve(
    elbow: pd.DataFrame,
    title: str = "Elbow / silhouette by K",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Within-cluster SS (left) and silhouette (right) per method and K.

    ``elbow`` is the long table returned by
    :func:`~marketing_analysis.src.evaluation.clustering.elbow_table`.
    """
    fig, (ax_ss, ax_sil) = plt.subplots(1, 2, figsize=(10, 4))

    for method, group in elbow.groupby("method"):
        group = group.sort_values("k")
        ax_ss.plot(group["k"], group["within_ss"], marker="o", label=str(method))
        ax_sil.plot(group["k"], group["silhouette"].astype(float), marker="o", label=str(method))

    ax_ss.set_xlabel("Number of clusters (K)")
    ax_ss.set_ylabel("Within-cluster sum of squares")
    ax_sil.set_xlabel("Number of clusters (K)")
    ax_sil.set_ylabel("Silhouette")
    ax_ss.legend(fontsize=9)
    fig.suptitle(title)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_dendrogram(
    linkage_matrix: np.ndarray,
    n_clusters: Optional[int] = None,
    title: str = "Complete-linkage dendrogram",
    *,
    truncate_level: int = 30,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Truncated dendrogram with an optional cut line for ``n_clusters``."""
    fig, ax = plt.subplots(figsize=(9, 4))
    dendrogram(linkage_matrix, ax=ax, truncate_mode="lastp", p=truncate_level, no_labels=True)

    if n_clusters is not None and 1 < n_clusters <= linkage_matrix.shape[0]:
        # Cut between the merges that leave n_clusters and n_clusters - 1 groups.
        heights = np.sort(linkage_matrix[:, 2])
        cut = 0.5 * (heights[-n_clusters] + heights[-n_clusters + 1])
        ax.axhline(cut, linestyle="--", color="grey")

    ax.set_ylabel("Merge distance")
    ax.set_title(title)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_pca_scatter(
    scores: pd.DataFrame,
    labels: pd.Series | np.ndarray,
    title: str = "Clusters on the first two components",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Scatter of PC1 vs PC2 coloured by cluster label."""
    if scores.shape[1] < 2:
        raise ValueError("PCA scatter requires at least 2 component columns.")

    y = np.asarray(labels).reshape(-1)
    fig, ax = plt.subplots(figsize=(6, 4))
    for cid in sorted(pd.unique(y)):
        mask = y == cid
        ax.scatter(scores.iloc[mask, 0], scores.iloc[mask, 1], s=12, alpha=0.7, label=str(cid))

    ax.set_xlabel(str(scores.columns[0]))
    ax.set_ylabel(str(scores.columns[1]))
    ax.set_title(title)
    ax.legend(title="Cluster", fontsize=9)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_cluster_sizes(
    sizes: pd.DataFrame,
    title: str = "Cluster sizes",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Bar chart of the ``size`` column of a cluster size table."""
    fig, ax = plt.subplots(figsize=(5, 3.5))
    x = np.arange(len(sizes))
    ax.bar(x, sizes["size"], tick_label=[str(c) for c in sizes.index])
    for pos, n in zip(x, sizes["size"]):
        ax.text(pos, n, str(int(n)), ha="center", va="bottom", fontsize=8)
    ax.set_xlabel("Cluster")
    ax.set_ylabel("Customers")
    ax.set_title(title)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


__all__ = [
    "plot_explained_variance",
    "plot_elbow_curve",
    "plot_dendrogram",
    "plot_pca_scatter",
    "plot_cluster_sizes",
]
