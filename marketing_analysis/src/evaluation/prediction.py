"""Hold-out metrics for the campaign-response classifier.

Key APIs
--------
- :func:`compute_classification_metrics`: accuracy, precision, recall,
  specificity, F1, confusion counts and (when probabilities are given) AUC.
- :func:`confusion_table`: labelled 2x2 confusion matrix.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn import metrics


def _to_1d_labels(x: Any) -> np.ndarray:
    """Convert labels to a 1D NumPy array."""
    if isinstance(x, (pd.Series, pd.Index)):
        arr = x.to_numpy()
    elif isinstance(x, pd.DataFrame):
        if x.shape[1] != 1:
            raise ValueError(
                f"Expected a single-column DataFrame for labels, got shape={x.shape}."
            )
        arr = x.iloc[:, 0].to_numpy()
    else:
        arr = np.asarray(x)
    return np.asarray(arr).reshape(-1)


def confusion_table(
    y_true: pd.Series | np.ndarray,
    y_pred: pd.Series | np.ndarray,
) -> pd.DataFrame:
    """2x2 confusion matrix with ``actual`` rows and ``predicted`` columns."""
    cm = metrics.confusion_matrix(
        _to_1d_labels(y_true).astype(int),
        _to_1d_labels(y_pred).astype(int),
        labels=[0, 1],
    )
    return pd.DataFrame(
        cm,
        index=pd.Index([0, 1], name="actual"),
        columns=pd.Index([0, 1], name="predicted"),
    )


def compute_classification_metrics(
    y_true: pd.Series | np.ndarray,
    y_pred: pd.Series | np.ndarray,
    y_prob: Optional[pd.Series | np.ndarray] = None,
) -> Dict[str, Optional[float]]:
    """Compute common binary classification metrics.

    Parameters
    ----------
    y_true:
        Ground-truth binary labels.
    y_pred:
        Predicted binary labels (after thresholding).
    y_prob:
        Optional predicted probabilities for the positive class.

    Returns
    -------
    dict
        Keys: accuracy, precision, recall, specificity, f1, balanced_accuracy,
        auc, tn, fp, fn, tp. ``auc`` is None without probabilities or when
        only one class is present.
    """
    y_true_arr = _to_1d_labels(y_true).astype(int)
    y_pred_arr = _to_1d_labels(y_pred).astype(int)

    if y_true_arr.shape[0] != y_pred_arr.shape[0]:
        raise ValueError(
            f"y_true and y_pred have different lengths: {y_true_arr.shape[0]} vs {y_pred_arr.shape[0]}"
        )

    accuracy = float(metrics.accuracy_score(y_true_arr, y_pred_arr))
    precision = float(metrics.precision_score(y_true_arr, y_pred_arr, zero_division=0))
    recall = float(metrics.recall_score(y_true_arr, y_pred_arr, zero_division=0))
    f1 = float(metrics.f1_score(y_true_arr, y_pred_arr, zero_division=0))

    cm = metrics.confusion_matrix(y_true_arr, y_pred_arr, labels=[0, 1])
    tn, fp, fn, tp = cm.ravel()
    specificity = float(tn / (tn + fp)) if (tn + fp) > 0 else 0.0
    balanced_accuracy = float(0.5 * (recall + specificity))

    auc: Optional[float] = None
    if y_prob is not None:
        y_prob_arr = np.asarray(y_prob, dtype=float).reshape(-1)
        if y_prob_arr.shape[0] != y_true_arr.shape[0]:
            raise ValueError(
                f"y_true and y_prob have different lengths: {y_true_arr.shape[0]} vs {y_prob_arr.shape[0]}"
            )
        try:
            auc = float(metrics.roc_auc_score(y_true_arr, y_prob_arr))
        except ValueError:
            auc = None

    return {
        "accuracy": accuracy,
        "precision": precision,
        "recall": recall,
        "specificity": specificity,
        "f1": f1,
        "balanced_accuracy": balanced_accuracy,
        "auc": auc,
        "tn": float(tn),
        "fp": float(fp),
        "fn": float(fn),
        "tp": float(tp),
    }


__all__ = ["compute_classification_metrics", "confusion_table"]
