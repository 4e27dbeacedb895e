import numpy as np
import pandas as pd
import pytest

from marketing_analysis.src.exceptions import ModelFitError
from marketing_analysis.src.models.association import (
    AssociationConfig,
    build_transactions,
    context_levels,
    discretize_channel,
    mine_all_channels,
    mine_channel_rules,
    rules_for_export,
)

LOOSE = AssociationConfig(min_support=0.05, min_confidence={"web": 0.1, "catalog": 0.1, "store": 0.1})


def test_channel_tertiles():
    counts = pd.Series(np.arange(30), name="NumWebPurchases")

    levels = discretize_channel(counts)

    assert set(levels) == {"Low", "Medium", "High"}
    assert levels.iloc[0] == "Low" and levels.iloc[-1] == "High"
    assert levels.value_counts().max() - levels.value_counts().min() <= 2


def test_degenerate_channel_cannot_be_binned():
    with pytest.raises(ModelFitError):
        discretize_channel(pd.Series([2, 2, 2, 2, 3], name="NumStorePurchases"))


def test_context_levels(engineered):
    levels = context_levels(engineered)

    assert set(levels["Recency"]) <= {"Recent", "Moderate", "Lapsed"}
    assert set(levels["Children"]) <= {"0", "1", "2+"}
    assert set(levels["Relationship"]) == {"Partnered", "Not Partnered"}


def test_transactions_hold_one_item_per_feature(engineered):
    items = build_transactions(engineered, "web")

    assert "Web=High" in items.columns
    assert all(dtype == bool for dtype in items.dtypes)
    web_items = [c for c in items.columns if c.startswith("Web=")]
    assert (items[web_items].sum(axis=1) == 1).all()
    assert (items.sum(axis=1) == 7).all()


def test_rules_only_predict_high_channel_use(engineered):
    rules = mine_channel_rules(engineered, "web", LOOSE)

    assert not rules.empty
    assert (rules["channel"] == "web").all()
    assert rules["consequents"].apply(lambda c: c == frozenset({"Web=High"})).all()
    assert not rules["antecedents"].apply(lambda a: any(i.startswith("Web=") for i in a)).any()
    assert (rules["confidence"] >= 0.1).all()
    assert (rules["support"] >= 0.05).all()
    assert rules["confidence"].is_monotonic_decreasing


def test_thresholds_are_per_channel(engineered):
    strict = AssociationConfig(min_support=0.05, min_confidence={"web": 0.1, "catalog": 0.99, "store": 0.1})

    rules = mine_all_channels(engineered, strict)

    assert (rules.loc[rules["channel"] == "catalog", "confidence"] >= 0.99).all()
    assert (rules["confidence"] >= 0.1).all()
    assert "web" in set(rules["channel"])


def test_unknown_channel_is_rejected(engineered):
    with pytest.raises(KeyError):
        mine_channel_rules(engineered, "phone", LOOSE)


def test_rules_for_export_uses_plain_strings(engineered):
    exported = rules_for_export(mine_all_channels(engineered, LOOSE, channels=["store"]))

    assert exported["consequents"].eq("Store=High").all()
    assert exported["antecedents"].map(type).eq(str).all()
