"""K-Means clustering of the component scores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans

from ..exceptions import ModelFitError


@dataclass
class KMeansConfig:
    """Configuration for K-Means clustering runs.

    Parameters
    ----------
    n_clusters :
        Number of clusters K.
    init :
        Initialization method for centroids, passed to :class:`~sklearn.cluster.KMeans`.
        ``"random"`` draws K rows as starting centres for every restart.
    n_init :
        Number of restarts; the run with the lowest within-cluster sum of
        squares is kept.
    max_iter :
        Maximum Lloyd iterations per restart.
    random_state :
        Seed for the restarts. The same seed yields identical labels.
    """

    n_clusters: int = 3
    init: str = "random"
    n_init: int = 20
    max_iter: int = 300
    random_state: int = 42


class KMeansClusterer:
    """Wrapper around scikit-learn KMeans that reports 1-based labels."""

    def __init__(self, config: Optional[KMeansConfig] = None):
        self.config = config or KMeansConfig()
        self.model: Optional[KMeans] = None

    def fit(self, features: pd.DataFrame) -> "KMeansClusterer":
        """Fit the K-Means model on the given feature matrix."""
        values = np.asarray(features, dtype=float)
        if not np.all(np.isfinite(values)):
            raise ModelFitError("K-Means input contains NaN or infinite values.")
        if values.shape[0] < self.config.n_clusters:
            raise ModelFitError(
                f"K-Means needs at least {self.config.n_clusters} rows, got {values.shape[0]}."
            )
        self.model = KMeans(
            n_clusters=self.config.n_clusters,
            init=self.config.init,
            n_init=self.config.n_init,
            max_iter=self.config.max_iter,
            random_state=self.config.random_state,
        )
        self.model.fit(values)
        return self

    def predict(self, features: pd.DataFrame) -> pd.Series:
        """Assign each sample to the nearest centre; labels start at 1."""
        if self.model is None:
            raise ValueError("Model has not been fitted yet.")
        labels = self.model.predict(np.asarray(features, dtype=float)) + 1
        return pd.Series(labels.astype(int), index=features.index, name="Cluster_KMeans")

    def fitted_labels(self, index: pd.Index) -> pd.Series:
        """Assignments of the kept restart for the rows it was fitted on; labels start at 1."""
        if self.model is None:
            raise ValueError("Model has not been fitted yet.")
        labels = self.model.labels_ + 1
        if len(index) != len(labels):
            raise ValueError(f"Index has {len(index)} entries but the model was fitted on {len(labels)} rows.")
        return pd.Series(labels.astype(int), index=index, name="Cluster_KMeans")

    def inertia(self) -> float:
        """Total within-cluster sum of squares of the kept restart."""
        if self.model is None:
            raise ValueError("Model has not been fitted yet.")
        return float(self.model.inertia_)

    def centers(self) -> pd.DataFrame:
        """Cluster centres indexed by 1-based label."""
        if self.model is None:
            raise ValueError("Model has not been fitted yet.")
        k = self.model.cluster_centers_.shape[0]
        return pd.DataFrame(self.model.cluster_centers_, index=pd.RangeIndex(1, k + 1, name="cluster"))


def run_kmeans(
    features: pd.DataFrame,
    config: Optional[KMeansConfig] = None,
) -> Tuple[KMeansClusterer, pd.Series]:
    """Fit K-Means and return the model plus the assignments of the kept restart."""
    clusterer = KMeansClusterer(config).fit(features)
    return clusterer, clusterer.fitted_labels(features.index)


__all__ = ["KMeansConfig", "KMeansClusterer", "run_kmeans"]
