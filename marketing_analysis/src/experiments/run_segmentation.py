"""Clean, reduce and segment the customers, then interpret the segments.

Steps
-----
1. Clean the raw records and engineer features.
2. Encode the categoricals and build the numeric model matrix.
3. Standardize and project onto the first principal components.
4. Cluster the component scores with complete-linkage hierarchical
   clustering and with K-Means; compare the two labelings.
5. Interpret the chosen labeling (sizes, means, category mixes, income CIs).

Outputs
-------
Tables under ``marketing_analysis/outputs/tables``:

- ``cleaning_report.csv``, ``encoding_mapping.csv``
- ``pca_variance.csv``, ``pca_loadings.csv``, ``pca_scores.csv``
- ``cluster_assignments.csv``, ``cluster_agreement.csv``, ``cluster_scores.csv``
- ``elbow_table.csv``
- ``cluster_sizes.csv``, ``cluster_means.csv``, ``cluster_income_ci.csv``,
  ``cluster_proportions_<column>.csv``

Figures under ``marketing_analysis/outputs/figures/segmentation`` unless
``--skip-plots`` is given.
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import pandas as pd

from marketing_analysis.src.data.encoding import mapping_table
from marketing_analysis.src.evaluation.clustering import elbow_table
from marketing_analysis.src.experiments.common import (
    FIG_DIR,
    add_common_args,
    ensure_output_dirs,
    load_raw_or_exit,
    resolve_config,
    save_table,
)
from marketing_analysis.src.pipeline import (
    HIERARCHICAL_COLUMN,
    KMEANS_COLUMN,
    SegmentationResult,
    prepare_data,
    run_segmentation,
)
from marketing_analysis.src.utils.logging_utils import configure_logging


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run PCA + hierarchical / K-Means segmentation and interpret the clusters.",
    )
    add_common_args(parser)
    parser.add_argument(
        "--max-k",
        type=int,
        default=8,
        help="Largest K scored in the elbow table (default: 8).",
    )
    parser.add_argument(
        "--skip-plots",
        action="store_true",
        help="Do not write diagnostic figures.",
    )
    return parser.parse_args(argv)


def _save_figures(segmentation: SegmentationResult, elbow: pd.DataFrame, n_clusters: int) -> None:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from marketing_analysis.src.visualization import (
        plot_cluster_sizes,
        plot_dendrogram,
        plot_elbow_curve,
        plot_explained_variance,
        plot_pca_scatter,
    )

    fig_dir = FIG_DIR / "segmentation"
    pca = segmentation.pca

    plot_explained_variance(
        pca.variance_table,
        n_selected=pca.n_components,
        save_path=fig_dir / "pca_explained_variance.png",
    )
    plot_elbow_curve(elbow, save_path=fig_dir / "elbow.png")
    plot_dendrogram(segmentation.linkage, n_clusters=n_clusters, save_path=fig_dir / "dendrogram.png")
    if pca.n_components >= 2:
        plot_pca_scatter(
            pca.scores,
            segmentation.chosen_labels,
            title=f"{segmentation.chosen_method} clusters on PC1 / PC2",
            save_path=fig_dir / "pca_clusters.png",
        )
    plot_cluster_sizes(segmentation.interpretation.sizes, save_path=fig_dir / "cluster_sizes.png")
    plt.close("all")


def main(argv: Optional[Sequence[str]] = None) -> None:
    logger = configure_logging()
    ensure_output_dirs()
    args = _parse_args(argv)
    config = resolve_config(args)

    raw = load_raw_or_exit(args.data_dir, logger)
    prepared = prepare_data(raw, config)
    logger.info("Model matrix: %d rows x %d features", *prepared.matrix.shape)

    segmentation = run_segmentation(prepared, config)
    pca = segmentation.pca

    save_table(prepared.cleaning.summary(), "cleaning_report.csv", logger, index=False)
    save_table(mapping_table(), "encoding_mapping.csv", logger, index=False)
    save_table(pca.variance_table, "pca_variance.csv", logger, index=False)
    save_table(pca.loadings, "pca_loadings.csv", logger)
    save_table(pca.scores, "pca_scores.csv", logger)
    save_table(
        segmentation.records[[HIERARCHICAL_COLUMN, KMEANS_COLUMN]],
        "cluster_assignments.csv",
        logger,
    )
    save_table(segmentation.agreement.contingency, "cluster_agreement.csv", logger)
    save_table(segmentation.scores, "cluster_scores.csv", logger, index=False)

    elbow = elbow_table(
        pca.scores,
        range(2, max(args.max_k, 2) + 1),
        hierarchical=config.hierarchical,
        kmeans=config.kmeans,
    )
    save_table(elbow, "elbow_table.csv", logger, index=False)

    report = segmentation.interpretation
    save_table(report.sizes, "cluster_sizes.csv", logger)
    save_table(report.means, "cluster_means.csv", logger)
    save_table(report.income_ci, "cluster_income_ci.csv", logger)
    for column, table in report.proportions.items():
        save_table(table, f"cluster_proportions_{column}.csv", logger)

    logger.info(
        "Chosen labeling: %s (%d clusters); adjusted Rand vs the other method = %.3f",
        segmentation.chosen_method,
        int(report.sizes.shape[0]),
        segmentation.agreement.adjusted_rand,
    )

    if not args.skip_plots:
        _save_figures(segmentation, elbow, config.hierarchical.n_clusters)
        logger.info("Saved figures under %s", FIG_DIR / "segmentation")


if __name__ == "__main__":
    main()
