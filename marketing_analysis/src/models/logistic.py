"""Campaign-response logistic regression with backward elimination.

Protocol
--------
1) Build a class-balanced sample (policy ``"balanced"``: the majority class
   is down-sampled to the minority count) or keep the full, imbalanced
   population (policy ``"full"``).
2) Stratified 75/25 train/test split of that sample.
3) Fit a binomial GLM on the training rows and repeatedly drop the predictor
   with the largest Wald p-value until every remaining p-value is at most
   ``alpha``.
4) Classify the test rows with a fixed 0.5 probability cutoff and report the
   confusion matrix and accuracy.

Both random draws are derived from one ``random_state``, so the same seed
reproduces the same split and the same model.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.model_selection import train_test_split
from statsmodels.tools.sm_exceptions import PerfectSeparationError, PerfectSeparationWarning

from ..data.encoding import build_model_matrix
from ..data.features import RESPONSE_COLUMN
from ..evaluation.prediction import compute_classification_metrics, confusion_table
from ..exceptions import ModelFitError
from ..utils.seed_utils import derive_seed

logger = logging.getLogger(__name__)

SamplingPolicy = Literal["balanced", "full"]

# Model matrix columns without exact linear dependencies
# (Children = Kidhome + Teenhome; Age_Category is a function of Age).
CANDIDATE_FEATURES: List[str] = [
    "Education",
    "Income",
    "Kidhome",
    "Teenhome",
    "Age",
    "Relationship",
    "Recency",
    "NumDealsPurchases",
    "NumWebPurchases",
    "NumCatalogPurchases",
    "NumStorePurchases",
    "NumWebVisitsMonth",
    "Spending",
    "Years_Joined",
]


@dataclass
class LogisticConfig:
    """Configuration for the response model.

    Parameters
    ----------
    alpha :
        Significance level; elimination stops once every p-value is <= alpha.
    test_size :
        Held-out fraction of the (balanced) sample.
    sampling :
        ``"balanced"`` (default) or ``"full"``; see module docstring.
    threshold :
        Probability cutoff; a row is predicted positive when p > threshold.
    random_state :
        Seed for sampling and splitting.
    candidate_features :
        Starting predictor set. ``None`` uses ``CANDIDATE_FEATURES``.
    """

    alpha: float = 0.05
    test_size: float = 0.25
    sampling: SamplingPolicy = "balanced"
    threshold: float = 0.5
    random_state: int = 42
    candidate_features: Optional[List[str]] = None


@dataclass
class LogisticResult:
    """Final reduced model with its elimination path and hold-out evaluation."""

    features: List[str]
    model: Any
    coefficients: pd.DataFrame
    elimination_path: pd.DataFrame
    confusion: pd.DataFrame
    metrics: Dict[str, Optional[float]]
    n_train: int
    n_test: int

    @property
    def accuracy(self) -> float:
        return float(self.metrics["accuracy"])


# ---------------------------------------------------------------------------
# Sampling / splitting
# ---------------------------------------------------------------------------


def balanced_sample(
    df: pd.DataFrame,
    target: str = RESPONSE_COLUMN,
    policy: SamplingPolicy = "balanced",
    random_state: int = 42,
) -> pd.DataFrame:
    """Apply the sampling policy to ``df``.

    Raises
    ------
    ModelFitError
        If ``target`` does not contain both classes.
    ValueError
        For an unknown policy.
    """
    counts = df[target].value_counts()
    if counts.shape[0] < 2:
        raise ModelFitError(f"Target '{target}' has a single class; cannot fit a classifier.")

    if policy == "full":
        return df.copy()
    if policy != "balanced":
        raise ValueError(f"Unknown sampling policy: {policy}. Expected 'balanced' or 'full'.")

    n_minority = int(counts.min())
    sampled = df.groupby(target, group_keys=False).sample(n=n_minority, random_state=random_state)
    return sampled.sort_index()


def split_train_test(
    X: pd.DataFrame,
    y: pd.Series,
    test_size: float = 0.25,
    random_state: int = 42,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """Stratified train/test split."""
    if not (0.0 < test_size < 1.0):
        raise ValueError("test_size must be in (0, 1).")
    try:
        return train_test_split(X, y, test_size=test_size, stratify=y, random_state=random_state)
    except ValueError as exc:
        raise ModelFitError(f"Cannot build a stratified split: {exc}") from exc


# ---------------------------------------------------------------------------
# Model fitting
# ---------------------------------------------------------------------------


def fit_logit(X: pd.DataFrame, y: pd.Series):
    """Fit a binomial GLM with intercept.

    Raises
    ------
    ModelFitError
        For a rank-deficient design, perfect separation or non-finite
        standard errors.
    """
    design = sm.add_constant(X, has_constant="add")
    rank = np.linalg.matrix_rank(design.to_numpy(dtype=float))
    if rank < design.shape[1]:
        raise ModelFitError(
            f"Design matrix is singular (rank {rank} < {design.shape[1]} columns): {list(X.columns)}"
        )

    with warnings.catch_warnings():
        warnings.simplefilter("error", PerfectSeparationWarning)
        try:
            result = sm.GLM(y, design, family=sm.families.Binomial()).fit()
        except (PerfectSeparationError, PerfectSeparationWarning) as exc:
            raise ModelFitError(f"Perfect separation in logistic regression: {exc}") from exc
        except np.linalg.LinAlgError as exc:
            raise ModelFitError(f"Logistic regression failed: {exc}") from exc

    if not np.all(np.isfinite(result.bse)):
        raise ModelFitError("Logistic regression produced non-finite standard errors.")
    return result


def backward_eliminate(
    X: pd.DataFrame,
    y: pd.Series,
    alpha: float = 0.05,
) -> Tuple[Any, List[str], pd.DataFrame]:
    """Drop the least significant predictor one at a time, refitting each step.

    Stops when the largest p-value is <= ``alpha`` or a single predictor is
    left.

    Returns
    -------
    model :
        statsmodels results of the final fit.
    features :
        Remaining predictors.
    path :
        One row per fit: ``step``, ``n_features``, ``dropped`` (the feature
        removed after this fit, empty for the final one), ``max_p_value``,
        ``aic``.
    """
    features = list(X.columns)
    if not features:
        raise ValueError("backward_eliminate needs at least one predictor.")

    rows: List[dict] = []
    step = 0
    while True:
        result = fit_logit(X[features], y)
        pvalues = result.pvalues.drop("const")
        worst = str(pvalues.idxmax())
        worst_p = float(pvalues.max())

        done = worst_p <= alpha or len(features) == 1
        rows.append(
            {
                "step": step,
                "n_features": len(features),
                "dropped": "" if done else worst,
                "max_p_value": worst_p,
                "aic": float(result.aic),
            }
        )
        if done:
            break

        logger.info("Elimination step %d: dropping %s (p=%.4f)", step, worst, worst_p)
        features.remove(worst)
        step += 1

    if worst_p > alpha:
        logger.warning("Stopped with a single predictor whose p-value %.4f exceeds %.3f.", worst_p, alpha)

    return result, features, pd.DataFrame(rows)


def coefficient_table(result) -> pd.DataFrame:
    """Coefficients, Wald statistics and odds ratios of a fitted GLM."""
    return pd.DataFrame(
        {
            "coef": result.params,
            "std_err": result.bse,
            "z": result.tvalues,
            "p_value": result.pvalues,
            "odds_ratio": np.exp(result.params),
        }
    )


def predict_response(result, X: pd.DataFrame, threshold: float = 0.5) -> Tuple[pd.Series, pd.Series]:
    """Predicted probabilities and 0/1 classes (p > threshold)."""
    design = sm.add_constant(X, has_constant="add")
    proba = pd.Series(np.asarray(result.predict(design)), index=X.index, name="probability")
    return proba, (proba > threshold).astype(int).rename("predicted")


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------


def run_response_model(
    df: pd.DataFrame,
    config: Optional[LogisticConfig] = None,
    target: str = RESPONSE_COLUMN,
) -> LogisticResult:
    """Sample, split, eliminate and evaluate the campaign-response model.

    ``df`` holds engineered records; predictors are encoded with the shared
    mapping table.
    """
    cfg = config or LogisticConfig()
    candidates = cfg.candidate_features or [c for c in CANDIDATE_FEATURES if c in df.columns]

    sample = balanced_sample(
        df,
        target=target,
        policy=cfg.sampling,
        random_state=derive_seed(cfg.random_state, 0),
    )
    X = build_model_matrix(sample, features=candidates)
    y = sample[target].astype(int)

    X_train, X_test, y_train, y_test = split_train_test(
        X,
        y,
        test_size=cfg.test_size,
        random_state=derive_seed(cfg.random_state, 1),
    )
    logger.info(
        "Response model (%s sampling): train=%d test=%d positives_train=%d",
        cfg.sampling,
        len(X_train),
        len(X_test),
        int(y_train.sum()),
    )

    result, features, path = backward_eliminate(X_train, y_train, alpha=cfg.alpha)
    proba, predicted = predict_response(result, X_test[features], threshold=cfg.threshold)

    confusion = confusion_table(y_test, predicted)
    metrics = compute_classification_metrics(y_test, predicted, proba)
    logger.info("Response model kept %d feature(s); test accuracy=%.4f", len(features), metrics["accuracy"])

    return LogisticResult(
        features=features,
        model=result,
        coefficients=coefficient_table(result),
        elimination_path=path,
        confusion=confusion,
        metrics=metrics,
        n_train=int(len(X_train)),
        n_test=int(len(X_test)),
    )


__all__ = [
    "CANDIDATE_FEATURES",
    "LogisticConfig",
    "LogisticResult",
    "balanced_sample",
    "split_train_test",
    "fit_logit",
    "backward_eliminate",
    "coefficient_table",
    "predict_response",
    "run_response_model",
]
