"""Run the full marketing campaign analysis.

This launcher orchestrates:
1) Segmentation (cleaning, PCA, hierarchical + K-Means, interpretation)
2) Classification (per-cluster pruned trees, stepwise response model)
3) Association rules for high web / catalog / store purchasing
4) Diagnostic figures (written by the segmentation step)

Design goals
------------
- Robust to current working directory: you can run from repo root or from inside
  ``marketing_analysis``.
- Reproducible: one seed threaded into every randomized stage and a single
  consolidated log file.

Usage
-----
From the repository root:

    python marketing_analysis/run_all_analyses.py

Or from inside the folder:

    cd marketing_analysis
    python run_all_analyses.py

The outputs are written to:
- ``marketing_analysis/outputs/tables``
- ``marketing_analysis/outputs/figures``
- ``marketing_analysis/outputs/logs/run_all.log``
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Make imports & paths robust to the current working directory.
# ---------------------------------------------------------------------------

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence

PROJECT_ROOT = Path(__file__).resolve().parent
REPO_ROOT = PROJECT_ROOT.parent

# Ensure repo root is importable (needed when running from inside marketing_analysis/)
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# ---------------------------------------------------------------------------
# Standard imports
# ---------------------------------------------------------------------------

import argparse
import logging

import matplotlib

matplotlib.use("Agg")  # headless-safe

from marketing_analysis.src.data.check_data import dataset_status
from marketing_analysis.src.experiments import (
    run_association,
    run_classification,
    run_segmentation,
)
from marketing_analysis.src.utils import configure_logging

# ---------------------------------------------------------------------------
# Output paths
# ---------------------------------------------------------------------------

OUTPUT_DIR = PROJECT_ROOT / "outputs"
FIG_DIR = OUTPUT_DIR / "figures"
TABLE_DIR = OUTPUT_DIR / "tables"
LOG_DIR = OUTPUT_DIR / "logs"

DEFAULT_CONFIG = PROJECT_ROOT / "configs" / "pipeline.yaml"


def _ensure_dirs() -> None:
    for d in [OUTPUT_DIR, FIG_DIR, TABLE_DIR, LOG_DIR]:
        d.mkdir(parents=True, exist_ok=True)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run all analyses (segmentation + classification + association).")

    parser.add_argument(
        "--data-dir",
        type=Path,
        default=PROJECT_ROOT / "data" / "raw",
        help="Directory containing marketing_campaign.csv (default: marketing_analysis/data/raw)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="YAML pipeline config (default: marketing_analysis/configs/pipeline.yaml)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Override the config seed for every step")

    parser.add_argument("--skip-segmentation", action="store_true", help="Skip the segmentation step")
    parser.add_argument("--skip-classification", action="store_true", help="Skip trees and the response model")
    parser.add_argument("--skip-association", action="store_true", help="Skip association rule mining")
    parser.add_argument("--skip-plots", action="store_true", help="Skip figure generation")

    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue even if a step fails (default: stop on first failure)",
    )

    return parser.parse_args(argv)


def _check_dataset(logger: logging.Logger, data_dir: Path) -> bool:
    exists, csv_path = dataset_status(data_dir=data_dir)
    if not exists:
        logger.error("Dataset not found at %s", csv_path)
        logger.error(
            "Please place marketing_campaign.csv under marketing_analysis/data/raw/ (recommended) "
            "or pass --data-dir to point to the folder containing it."
        )
        return False
    logger.info("Found dataset at %s", csv_path)
    return True


def _run_step(
    logger: logging.Logger,
    name: str,
    fn: Callable[[List[str]], None],
    step_args: List[str],
    *,
    keep_going: bool,
) -> bool:
    logger.info("\n===== Running: %s =====", name)
    try:
        fn(step_args)
        logger.info("Completed: %s", name)
        return True
    except SystemExit as exc:
        logger.error("%s exited with code %s", name, getattr(exc, "code", exc))
    except Exception as exc:  # pragma: no cover
        logger.exception("%s failed: %s", name, exc)

    if keep_going:
        logger.warning("Continuing because --keep-going is set.")
        return False

    raise RuntimeError(f"Step '{name}' failed")


def main(argv: Optional[Sequence[str]] = None) -> None:
    _ensure_dirs()

    # Relative output paths in the experiment scripts resolve from the repo root.
    os.chdir(REPO_ROOT)

    log_file = LOG_DIR / "run_all.log"
    logger = configure_logging(log_file=log_file, logger_name="run_all")

    args = _parse_args(argv)

    if not _check_dataset(logger, data_dir=args.data_dir):
        sys.exit(1)

    common = ["--config", str(args.config), "--data-dir", str(args.data_dir)]
    if args.seed is not None:
        common += ["--random-state", str(args.seed)]

    failed: List[str] = []

    if not args.skip_segmentation:
        seg_args = common + (["--skip-plots"] if args.skip_plots else [])
        if not _run_step(logger, "Segmentation", run_segmentation, seg_args, keep_going=args.keep_going):
            failed.append("Segmentation")

    if not args.skip_classification:
        if not _run_step(logger, "Classification", run_classification, common, keep_going=args.keep_going):
            failed.append("Classification")

    if not args.skip_association:
        if not _run_step(logger, "Association rules", run_association, common, keep_going=args.keep_going):
            failed.append("Association rules")

    if failed:
        logger.warning("Finished with failed step(s): %s", ", ".join(failed))
    else:
        logger.info("\nAll done. Tables under %s, figures under %s", TABLE_DIR, FIG_DIR)


if __name__ == "__main__":
    main()
