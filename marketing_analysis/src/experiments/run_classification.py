"""Explain the segments with pruned trees and model campaign response.

1. Re-run the segmentation (deterministic for a fixed config) to obtain the
   chosen labeling.
2. For every cluster, fit a one-vs-rest decision tree on the model matrix and
   prune it by cross-validated cost-complexity.
3. Fit the backward-elimination logistic regression on ``Response`` and
   evaluate it on the stratified hold-out split.

Outputs
-------
Writes to ``marketing_analysis/outputs/tables``:

- ``tree_summary.csv`` and ``tree_pruning_path_<cluster>.csv``
- ``logit_elimination_path.csv``, ``logit_coefficients.csv``
- ``logit_confusion_matrix.csv``, ``logit_metrics.csv``
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import pandas as pd

from marketing_analysis.src.experiments.common import (
    add_common_args,
    ensure_output_dirs,
    load_raw_or_exit,
    resolve_config,
    save_table,
)
from marketing_analysis.src.models.logistic import run_response_model
from marketing_analysis.src.models.trees import fit_cluster_trees, tree_summary
from marketing_analysis.src.pipeline import prepare_data, run_segmentation
from marketing_analysis.src.utils.logging_utils import configure_logging


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fit per-cluster pruned trees and the stepwise response model.",
    )
    add_common_args(parser)
    parser.add_argument(
        "--sampling",
        choices=["balanced", "full"],
        default=None,
        help="Override the response-model sampling policy from the config.",
    )
    parser.add_argument(
        "--skip-trees",
        action="store_true",
        help="Skip the per-cluster trees (no segmentation run needed).",
    )
    parser.add_argument(
        "--print-rules",
        action="store_true",
        help="Log the text rendering of every pruned tree.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    logger = configure_logging()
    ensure_output_dirs()
    args = _parse_args(argv)
    config = resolve_config(args)
    if args.sampling is not None:
        config.logistic.sampling = args.sampling

    raw = load_raw_or_exit(args.data_dir, logger)
    prepared = prepare_data(raw, config)

    if not args.skip_trees:
        segmentation = run_segmentation(prepared, config)
        trees = fit_cluster_trees(prepared.matrix, segmentation.chosen_labels, config.trees)
        save_table(tree_summary(trees), "tree_summary.csv", logger, index=False)
        for cluster, res in sorted(trees.items()):
            save_table(res.pruning_path, f"tree_pruning_path_{cluster}.csv", logger, index=False)
            if args.print_rules:
                logger.info("Cluster %d tree:\n%s", cluster, res.rules_text())

    response = run_response_model(prepared.records, config.logistic)
    save_table(response.elimination_path, "logit_elimination_path.csv", logger, index=False)
    save_table(response.coefficients, "logit_coefficients.csv", logger)
    save_table(response.confusion, "logit_confusion_matrix.csv", logger)

    metrics = dict(response.metrics)
    metrics.update(
        {
            "sampling": config.logistic.sampling,
            "n_train": response.n_train,
            "n_test": response.n_test,
            "n_features": len(response.features),
            "features": ",".join(response.features),
        }
    )
    save_table(pd.DataFrame([metrics]), "logit_metrics.csv", logger, index=False)
    logger.info("Response model accuracy on hold-out: %.4f", response.accuracy)


if __name__ == "__main__":
    main()
