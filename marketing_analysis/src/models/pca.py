"""Standardised principal component analysis of the model matrix."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from ..exceptions import ModelFitError


@dataclass
class PCAConfig:
    """Configuration for the reduction step.

    Parameters
    ----------
    n_components :
        Number of leading components kept as scores. Three components sit at
        the elbow of the cumulative variance curve on the full dataset.
    """

    n_components: int = 3


@dataclass(frozen=True)
class PCAResult:
    """Scores for the kept components plus everything needed for diagnostics."""

    scores: pd.DataFrame
    variance_table: pd.DataFrame
    loadings: pd.DataFrame
    standardized: pd.DataFrame
    scaler: StandardScaler
    pca: PCA

    @property
    def n_components(self) -> int:
        return int(self.scores.shape[1])

    def project(self, n_components: Optional[int] = None) -> np.ndarray:
        """Project the standardized matrix onto the first ``n_components`` (all by default)."""
        k = self.pca.n_components_ if n_components is None else int(n_components)
        centered = self.standardized.to_numpy() - self.pca.mean_
        return centered @ self.pca.components_[:k].T

    def reconstruct(self, n_components: Optional[int] = None) -> pd.DataFrame:
        """Map component scores back to the standardized feature space.

        With all components the result equals :attr:`standardized` up to
        floating-point error.
        """
        k = self.pca.n_components_ if n_components is None else int(n_components)
        scores = self.project(k)
        back = scores @ self.pca.components_[:k] + self.pca.mean_
        return pd.DataFrame(back, index=self.standardized.index, columns=self.standardized.columns)


def _component_names(k: int) -> list[str]:
    return [f"PC{i}" for i in range(1, k + 1)]


def fit_pca(matrix: pd.DataFrame, config: Optional[PCAConfig] = None) -> PCAResult:
    """Standardize every column, fit a full PCA and keep the leading scores.

    Raises
    ------
    ModelFitError
        For non-finite inputs, constant columns (whose standardization is
        undefined), fewer than two rows, or an out-of-range component count.
    """
    cfg = config or PCAConfig()

    values = matrix.to_numpy(dtype=float)
    n_rows, n_cols = values.shape
    if n_rows < 2:
        raise ModelFitError(f"PCA needs at least two rows, got {n_rows}.")
    if not np.all(np.isfinite(values)):
        raise ModelFitError("PCA input contains NaN or infinite values.")

    constant = [c for c, sd in zip(matrix.columns, values.std(axis=0)) if sd == 0.0]
    if constant:
        raise ModelFitError(f"Cannot standardize constant column(s): {constant}")

    max_k = min(n_rows, n_cols)
    if not (1 <= int(cfg.n_components) <= max_k):
        raise ModelFitError(f"n_components must be in [1, {max_k}], got {cfg.n_components}.")

    scaler = StandardScaler()
    standardized = pd.DataFrame(
        scaler.fit_transform(values), index=matrix.index, columns=matrix.columns
    )

    pca = PCA(n_components=None, svd_solver="full")
    all_scores = pca.fit_transform(standardized.to_numpy())

    names = _component_names(pca.n_components_)
    ratio = pca.explained_variance_ratio_
    variance_table = pd.DataFrame(
        {
            "component": names,
            "explained_variance": pca.explained_variance_,
            "explained_variance_ratio": ratio,
            "cumulative_ratio": np.cumsum(ratio),
        }
    )
    loadings = pd.DataFrame(pca.components_.T, index=matrix.columns, columns=names)

    k = int(cfg.n_components)
    scores = pd.DataFrame(all_scores[:, :k], index=matrix.index, columns=names[:k])

    return PCAResult(
        scores=scores,
        variance_table=variance_table,
        loadings=loadings,
        standardized=standardized,
        scaler=scaler,
        pca=pca,
    )


__all__ = ["PCAConfig", "PCAResult", "fit_pca"]
