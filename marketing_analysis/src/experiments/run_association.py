"""Mine association rules that lead to high web, catalog or store purchasing.

Each purchase channel is binned into Low / Medium / High by tertiles, the
customer context (age bucket, education, relationship, children, recency,
enrollment year) is turned into items, and rules whose only
consequent is ``<Channel>=High`` are kept above the channel's confidence
threshold.

Outputs
-------
Writes ``marketing_analysis/outputs/tables/association_rules.csv`` plus one
``association_rules_<channel>.csv`` per channel.
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from marketing_analysis.src.experiments.common import (
    add_common_args,
    ensure_output_dirs,
    load_raw_or_exit,
    resolve_config,
    save_table,
)
from marketing_analysis.src.models.association import mine_all_channels, rules_for_export
from marketing_analysis.src.pipeline import prepare_data
from marketing_analysis.src.utils.logging_utils import configure_logging


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mine high-channel association rules.")
    add_common_args(parser)
    parser.add_argument(
        "--channels",
        nargs="+",
        choices=["web", "catalog", "store"],
        default=None,
        help="Restrict mining to these channels (default: all three).",
    )
    parser.add_argument(
        "--min-support",
        type=float,
        default=None,
        help="Override the minimum itemset support from the config.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    logger = configure_logging()
    ensure_output_dirs()
    args = _parse_args(argv)
    config = resolve_config(args)
    if args.min_support is not None:
        config.association.min_support = float(args.min_support)

    raw = load_raw_or_exit(args.data_dir, logger)
    prepared = prepare_data(raw, config)

    rules = rules_for_export(mine_all_channels(prepared.records, config.association, channels=args.channels))
    save_table(rules, "association_rules.csv", logger, index=False)
    for channel, group in rules.groupby("channel"):
        save_table(group, f"association_rules_{channel}.csv", logger, index=False)

    logger.info("Mined %d rule(s) across %d channel(s)", len(rules), rules["channel"].nunique())


if __name__ == "__main__":
    main()
