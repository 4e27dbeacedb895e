"""Shared plumbing for the experiment CLIs: paths, arguments, config and data."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from marketing_analysis.src.config import DEFAULT_CONFIG_PATH, PipelineConfig, load_config
from marketing_analysis.src.data.load import DEFAULT_DATA_DIR, load_raw_data

OUTPUT_DIR = Path("marketing_analysis/outputs")
TABLE_DIR = OUTPUT_DIR / "tables"
FIG_DIR = OUTPUT_DIR / "figures"


def ensure_output_dirs() -> None:
    TABLE_DIR.mkdir(parents=True, exist_ok=True)
    FIG_DIR.mkdir(parents=True, exist_ok=True)


def add_common_args(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"YAML pipeline config (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory containing marketing_campaign.csv (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--random-state",
        type=int,
        default=None,
        help="Override the seed of every randomized stage.",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> PipelineConfig:
    config = load_config(args.config)
    if args.random_state is not None:
        config = config.with_random_state(args.random_state)
    return config


def load_raw_or_exit(data_dir: Path, logger: logging.Logger) -> pd.DataFrame:
    """Load the raw file; log and exit with status 1 when it is missing."""
    try:
        return load_raw_data(data_dir=data_dir)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        logger.error(
            "Run `python -m marketing_analysis.src.data.check_data` "
            "to verify dataset placement.",
        )
        sys.exit(1)


def save_table(df: pd.DataFrame, name: str, logger: logging.Logger, *, index: bool = True) -> Path:
    path = TABLE_DIR / name
    df.to_csv(path, index=index)
    logger.info("Saved %s", path)
    return path


__all__ = [
    "OUTPUT_DIR",
    "TABLE_DIR",
    "FIG_DIR",
    "ensure_output_dirs",
    "add_common_args",
    "resolve_config",
    "load_raw_or_exit",
    "save_table",
]
