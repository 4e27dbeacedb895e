"""Association rules explaining high purchase counts per channel.

For each purchase channel independently the channel count is cut into
Low/Medium/High at its 33rd/66th percentiles, contextual features are cut into
fixed coarse levels, and every customer becomes a transaction of
``Feature=Level`` items. Frequent itemsets (apriori) are mined and only the
rules whose consequent is exactly ``{<Channel>=High}`` are kept, ranked by
confidence then lift.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from mlxtend.frequent_patterns import apriori, association_rules

from ..data.features import CHANNEL_COLUMNS
from ..exceptions import ModelFitError

logger = logging.getLogger(__name__)

CHANNEL_LEVELS = ["Low", "Medium", "High"]
CHANNEL_QUANTILES = (0.33, 0.66)

# Fixed bins for the contextual features (right-closed, lowest included).
RECENCY_EDGES = [-np.inf, 30, 60, np.inf]
RECENCY_LEVELS = ["Recent", "Moderate", "Lapsed"]
CHILDREN_EDGES = [-np.inf, 0, 1, np.inf]
CHILDREN_LEVELS = ["0", "1", "2+"]

CONTEXT_COLUMNS = ["Age_Category", "Recency", "Years_Joined", "Children", "Relationship", "Education"]

RULE_COLUMNS = ["channel", "rule", "antecedents", "consequents", "support", "confidence", "lift"]


def _default_confidence() -> Dict[str, float]:
    return {"web": 0.3, "catalog": 0.6, "store": 0.4}


@dataclass
class AssociationConfig:
    """Thresholds for rule mining.

    Parameters
    ----------
    min_support :
        Minimum itemset support, shared by all channels.
    min_confidence :
        Minimum rule confidence per channel.
    max_len :
        Optional cap on itemset length passed to apriori.
    """

    min_support: float = 0.05
    min_confidence: Dict[str, float] = field(default_factory=_default_confidence)
    max_len: Optional[int] = None


def _channel_item(channel: str) -> str:
    return channel.capitalize()


def discretize_channel(counts: pd.Series) -> pd.Series:
    """Cut purchase counts into Low/Medium/High at the 33rd/66th percentiles.

    Raises
    ------
    ModelFitError
        If the percentiles coincide with each other or with the extremes, so
        that three non-empty-width bins cannot be formed.
    """
    values = pd.to_numeric(counts, errors="raise")
    q_low, q_high = np.quantile(values, CHANNEL_QUANTILES)
    edges = [float(values.min()), float(q_low), float(q_high), float(values.max())]
    if not all(a < b for a, b in zip(edges, edges[1:])):
        raise ModelFitError(
            f"Cannot form 3 quantile bins for '{counts.name}': cut points {edges} are not increasing."
        )
    binned = pd.cut(values, bins=edges, labels=CHANNEL_LEVELS, right=True, include_lowest=True)
    return binned.astype(str)


def context_levels(df: pd.DataFrame) -> pd.DataFrame:
    """Coarse categorical levels of the contextual features."""
    missing = [c for c in CONTEXT_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Missing context columns for rule mining: {missing}")

    return pd.DataFrame(
        {
            "Age_Category": df["Age_Category"].astype(str),
            "Recency": pd.cut(df["Recency"], bins=RECENCY_EDGES, labels=RECENCY_LEVELS).astype(str),
            "Years_Joined": df["Years_Joined"].astype(int).astype(str),
            "Children": pd.cut(df["Children"], bins=CHILDREN_EDGES, labels=CHILDREN_LEVELS).astype(str),
            "Relationship": df["Relationship"].astype(str),
            "Education": df["Education"].astype(str),
        },
        index=df.index,
    )


def build_transactions(df: pd.DataFrame, channel: str) -> pd.DataFrame:
    """One-hot boolean item matrix for one channel (columns ``Feature=Level``)."""
    if channel not in CHANNEL_COLUMNS:
        raise KeyError(f"Unknown channel '{channel}'. Expected one of {sorted(CHANNEL_COLUMNS)}.")

    levels = context_levels(df)
    levels.insert(0, _channel_item(channel), discretize_channel(df[CHANNEL_COLUMNS[channel]]))
    items = pd.get_dummies(levels, prefix_sep="=", dtype=bool)
    return items


def _format_items(items: frozenset) -> str:
    return ", ".join(sorted(items))


def mine_channel_rules(
    df: pd.DataFrame,
    channel: str,
    config: Optional[AssociationConfig] = None,
) -> pd.DataFrame:
    """Rules ``{context items} -> {<Channel>=High}`` for one channel."""
    cfg = config or AssociationConfig()
    if channel not in cfg.min_confidence:
        raise KeyError(f"No minimum confidence configured for channel '{channel}'.")

    transactions = build_transactions(df, channel)
    target = f"{_channel_item(channel)}=High"
    channel_prefix = f"{_channel_item(channel)}="

    itemsets = apriori(
        transactions,
        min_support=cfg.min_support,
        use_colnames=True,
        max_len=cfg.max_len,
    )
    if itemsets.empty:
        logger.info("No frequent itemsets for channel %s at support %.3f.", channel, cfg.min_support)
        return pd.DataFrame(columns=RULE_COLUMNS)

    rules = association_rules(
        itemsets,
        num_itemsets=len(transactions),
        metric="confidence",
        min_threshold=cfg.min_confidence[channel],
    )

    is_target = rules["consequents"].apply(lambda c: c == frozenset({target}))
    clean_lhs = rules["antecedents"].apply(lambda a: not any(i.startswith(channel_prefix) for i in a))
    rules = rules.loc[is_target & clean_lhs, ["antecedents", "consequents", "support", "confidence", "lift"]].copy()

    rules.insert(0, "channel", channel)
    rules.insert(
        1,
        "rule",
        rules["antecedents"].apply(_format_items) + " -> " + rules["consequents"].apply(_format_items),
    )
    rules = rules.sort_values(["confidence", "lift"], ascending=False).reset_index(drop=True)

    logger.info("Channel %s: %d rule(s) with consequent %s.", channel, len(rules), target)
    return rules[RULE_COLUMNS]


def mine_all_channels(
    df: pd.DataFrame,
    config: Optional[AssociationConfig] = None,
    channels: Optional[List[str]] = None,
) -> pd.DataFrame:
    """Mine each channel independently and stack the ranked rule lists."""
    cfg = config or AssociationConfig()
    frames = [mine_channel_rules(df, ch, cfg) for ch in (channels or list(CHANNEL_COLUMNS))]
    non_empty = [f for f in frames if not f.empty]
    if not non_empty:
        return pd.DataFrame(columns=RULE_COLUMNS)
    return pd.concat(non_empty, ignore_index=True)


def rules_for_export(rules: pd.DataFrame) -> pd.DataFrame:
    """Replace frozenset columns by sorted, comma-joined strings."""
    out = rules.copy()
    for col in ("antecedents", "consequents"):
        out[col] = out[col].apply(lambda s: _format_items(s) if isinstance(s, frozenset) else s)
    return out


__all__ = [
    "AssociationConfig",
    "CHANNEL_LEVELS",
    "discretize_channel",
    "context_levels",
    "build_transactions",
    "mine_channel_rules",
    "mine_all_channels",
    "rules_for_export",
]
