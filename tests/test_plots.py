import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from marketing_analysis.src.evaluation.clustering import elbow_table
from marketing_analysis.src.evaluation.interpretation import cluster_sizes
from marketing_analysis.src.models.hierarchical import run_hierarchical
from marketing_analysis.src.models.pca import fit_pca
from marketing_analysis.src.visualization import (
    plot_cluster_sizes,
    plot_dendrogram,
    plot_elbow_curve,
    plot_explained_variance,
    plot_pca_scatter,
)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


def test_figures_are_saved(tmp_path, blobs):
    pca = fit_pca(blobs.assign(PC3=blobs["PC1"] - 0.5 * blobs["PC2"] ** 2))
    labels, Z = run_hierarchical(blobs)

    plot_explained_variance(pca.variance_table, n_selected=2, save_path=tmp_path / "variance.png")
    plot_elbow_curve(elbow_table(blobs, range(2, 5)), save_path=tmp_path / "elbow.png")
    plot_dendrogram(Z, n_clusters=3, save_path=tmp_path / "nested" / "dendrogram.png")
    plot_pca_scatter(pca.scores, labels, save_path=tmp_path / "scatter.png")
    plot_cluster_sizes(cluster_sizes(labels), save_path=tmp_path / "sizes.png")

    for name in ("variance.png", "elbow.png", "nested/dendrogram.png", "scatter.png", "sizes.png"):
        assert (tmp_path / name).stat().st_size > 0


def test_scatter_needs_two_components(blobs):
    with pytest.raises(ValueError):
        plot_pca_scatter(blobs[["PC1"]], [1] * len(blobs))
