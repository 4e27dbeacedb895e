"""Per-cluster summary tables used to interpret a segmentation.

All functions are pure aggregations: they align the labels with the records
by index, group, and return new tables. The records are never modified.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy import stats

ArrayLike = Union[pd.Series, Sequence[int], np.ndarray]

DEFAULT_PROPORTION_COLUMNS = ("Education", "Age_Category", "Relationship", "Children")


def _aligned_labels(df: pd.DataFrame, labels: ArrayLike) -> pd.Series:
    """Return labels as a Series on ``df.index``.

    A Series is aligned by index; any other array must match ``df`` in length.
    """
    if isinstance(labels, pd.Series):
        aligned = labels.reindex(df.index)
        if aligned.isna().any():
            raise ValueError("Cluster labels do not cover every row of the records.")
        return aligned.rename("cluster")

    arr = np.asarray(labels).reshape(-1)
    if len(arr) != len(df):
        raise ValueError(f"labels length must match df rows: {len(arr)} vs {len(df)}.")
    return pd.Series(arr, index=df.index, name="cluster")


def cluster_sizes(labels: ArrayLike) -> pd.DataFrame:
    """Count and share of rows per cluster."""
    s = pd.Series(np.asarray(labels).reshape(-1), name="cluster")
    counts = s.value_counts().sort_index()
    out = pd.DataFrame({"size": counts.astype(int), "share": counts / counts.sum()})
    out.index.name = "cluster"
    return out


def cluster_means(
    df: pd.DataFrame,
    labels: ArrayLike,
    columns: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Mean of every numeric column per cluster (clusters as rows)."""
    clusters = _aligned_labels(df, labels)
    if columns is None:
        numeric = df.select_dtypes(include="number")
    else:
        numeric = df[list(columns)]
    means = numeric.groupby(clusters).mean()
    means.index.name = "cluster"
    return means.sort_index()


def cluster_proportions(df: pd.DataFrame, labels: ArrayLike, column: str) -> pd.DataFrame:
    """Row-normalised category mix of ``column`` within each cluster."""
    if column not in df.columns:
        raise KeyError(f"Column '{column}' not found.")
    clusters = _aligned_labels(df, labels)
    table = pd.crosstab(clusters, df[column], normalize="index")
    table.index.name = "cluster"
    return table.sort_index()


def mean_confidence_interval(values: pd.Series, confidence: float = 0.95) -> Dict[str, float]:
    """t-based confidence interval for a sample mean.

    ``margin = t(1 - alpha/2, n - 1) * s / sqrt(n)`` with the sample standard
    deviation ``s``. With fewer than two observations the margin is NaN.
    """
    if not (0.0 < confidence < 1.0):
        raise ValueError("confidence must be in (0, 1).")

    x = pd.to_numeric(values, errors="raise").dropna().to_numpy(dtype=float)
    n = int(x.size)
    mean = float(x.mean()) if n else float("nan")
    if n < 2:
        return {"n": float(n), "mean": mean, "std": float("nan"), "margin": float("nan"),
                "lower": float("nan"), "upper": float("nan")}

    std = float(x.std(ddof=1))
    t_crit = float(stats.t.ppf(1.0 - (1.0 - confidence) / 2.0, df=n - 1))
    margin = t_crit * std / np.sqrt(n)
    return {
        "n": float(n),
        "mean": mean,
        "std": std,
        "margin": float(margin),
        "lower": float(mean - margin),
        "upper": float(mean + margin),
    }


def income_confidence_intervals(
    df: pd.DataFrame,
    labels: ArrayLike,
    column: str = "Income",
    confidence: float = 0.95,
) -> pd.DataFrame:
    """Per-cluster mean of ``column`` with its t-based confidence interval."""
    if column not in df.columns:
        raise KeyError(f"Column '{column}' not found.")
    clusters = _aligned_labels(df, labels)
    rows = {
        cluster: mean_confidence_interval(group, confidence)
        for cluster, group in df[column].groupby(clusters)
    }
    out = pd.DataFrame.from_dict(rows, orient="index")
    out.index.name = "cluster"
    out["n"] = out["n"].astype(int)
    return out.sort_index()


@dataclass(frozen=True)
class InterpretationReport:
    sizes: pd.DataFrame
    means: pd.DataFrame
    proportions: Dict[str, pd.DataFrame]
    income_ci: pd.DataFrame


def interpret_clusters(
    df: pd.DataFrame,
    labels: ArrayLike,
    proportion_columns: Iterable[str] = DEFAULT_PROPORTION_COLUMNS,
    confidence: float = 0.95,
) -> InterpretationReport:
    """Bundle the per-cluster tables for one labeling."""
    clusters = _aligned_labels(df, labels)
    return InterpretationReport(
        sizes=cluster_sizes(clusters),
        means=cluster_means(df, clusters),
        proportions={
            col: cluster_proportions(df, clusters, col)
            for col in proportion_columns
            if col in df.columns
        },
        income_ci=income_confidence_intervals(df, clusters, confidence=confidence),
    )


__all__ = [
    "cluster_sizes",
    "cluster_means",
    "cluster_proportions",
    "mean_confidence_interval",
    "income_confidence_intervals",
    "InterpretationReport",
    "interpret_clusters",
]
