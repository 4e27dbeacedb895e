"""Stage composition: raw records -> cleaned -> engineered -> reduced -> clustered
-> interpreted -> classified / mined.

Each stage is a function that takes the previous stage's output and returns a
new, frozen result object; no stage mutates its input. The experiment CLIs
call these functions and write the tables; notebooks can call them directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pandas as pd

from .config import PipelineConfig
from .data.encoding import build_model_matrix
from .data.features import engineer_features
from .data.preprocess import CleaningReport, clean_data
from .evaluation.clustering import ClusterAgreement, cluster_agreement, compute_scores
from .evaluation.interpretation import InterpretationReport, interpret_clusters
from .models.association import mine_all_channels
from .models.hierarchical import run_hierarchical
from .models.kmeans import KMeansClusterer, run_kmeans
from .models.logistic import LogisticResult, run_response_model
from .models.pca import PCAResult, fit_pca
from .models.trees import TreeResult, fit_cluster_trees

logger = logging.getLogger(__name__)

HIERARCHICAL_COLUMN = "Cluster_Hierarchical"
KMEANS_COLUMN = "Cluster_KMeans"


@dataclass(frozen=True)
class PreparedData:
    cleaning: CleaningReport
    records: pd.DataFrame
    matrix: pd.DataFrame


@dataclass(frozen=True)
class SegmentationResult:
    """Reduced space, both labelings and the interpretation of the chosen one."""

    records: pd.DataFrame
    pca: PCAResult
    hierarchical_labels: pd.Series
    kmeans_labels: pd.Series
    linkage: np.ndarray
    kmeans_model: KMeansClusterer
    agreement: ClusterAgreement
    chosen_method: str
    scores: pd.DataFrame
    interpretation: InterpretationReport

    @property
    def chosen_labels(self) -> pd.Series:
        column = HIERARCHICAL_COLUMN if self.chosen_method == "hierarchical" else KMEANS_COLUMN
        return self.records[column]


@dataclass(frozen=True)
class PipelineResult:
    prepared: PreparedData
    segmentation: SegmentationResult
    trees: Dict[int, TreeResult]
    response: LogisticResult
    rules: pd.DataFrame


def prepare_data(raw: pd.DataFrame, config: Optional[PipelineConfig] = None) -> PreparedData:
    """Clean, engineer and encode the raw records."""
    cfg = config or PipelineConfig()
    report = clean_data(
        raw,
        reference_year=cfg.cleaning.reference_year,
        max_age=cfg.cleaning.max_age,
        max_income=cfg.cleaning.max_income,
    )
    logger.info(
        "Cleaning: %d -> %d rows (missing=%d, outliers=%d)",
        report.n_input,
        report.n_output,
        report.n_missing,
        report.n_outliers,
    )
    records = engineer_features(report.data, reference_year=cfg.cleaning.reference_year)
    matrix = build_model_matrix(records)
    return PreparedData(cleaning=report, records=records, matrix=matrix)


def attach_cluster_labels(
    records: pd.DataFrame,
    hierarchical: pd.Series,
    kmeans: pd.Series,
) -> pd.DataFrame:
    """Return a copy of ``records`` with both label columns appended."""
    out = records.copy()
    out[HIERARCHICAL_COLUMN] = hierarchical.reindex(records.index).astype(int)
    out[KMEANS_COLUMN] = kmeans.reindex(records.index).astype(int)
    return out


def run_segmentation(prepared: PreparedData, config: Optional[PipelineConfig] = None) -> SegmentationResult:
    """Reduce the model matrix, cluster it twice and interpret the chosen labeling."""
    cfg = config or PipelineConfig()

    pca = fit_pca(prepared.matrix, cfg.pca)
    logger.info(
        "PCA: kept %d component(s) explaining %.1f%% of variance",
        pca.n_components,
        100.0 * float(pca.variance_table["cumulative_ratio"].iloc[pca.n_components - 1]),
    )

    h_labels, Z = run_hierarchical(pca.scores, cfg.hierarchical)
    km_model, km_labels = run_kmeans(pca.scores, cfg.kmeans)
    agreement = cluster_agreement(h_labels, km_labels)
    logger.info("Hierarchical vs k-means adjusted Rand index: %.3f", agreement.adjusted_rand)

    scores = pd.DataFrame(
        [
            {"method": "hierarchical", **compute_scores(pca.scores, h_labels)},
            {"method": "kmeans", **compute_scores(pca.scores, km_labels)},
        ]
    )

    chosen = h_labels if cfg.chosen_method == "hierarchical" else km_labels
    interpretation = interpret_clusters(prepared.records, chosen)

    return SegmentationResult(
        records=attach_cluster_labels(prepared.records, h_labels, km_labels),
        pca=pca,
        hierarchical_labels=h_labels,
        kmeans_labels=km_labels,
        linkage=Z,
        kmeans_model=km_model,
        agreement=agreement,
        chosen_method=cfg.chosen_method,
        scores=scores,
        interpretation=interpretation,
    )


def run_pipeline(raw: pd.DataFrame, config: Optional[PipelineConfig] = None) -> PipelineResult:
    """Run every stage in order; any stage failure propagates to the caller."""
    cfg = config or PipelineConfig()

    prepared = prepare_data(raw, cfg)
    segmentation = run_segmentation(prepared, cfg)
    trees = fit_cluster_trees(prepared.matrix, segmentation.chosen_labels, cfg.trees)
    response = run_response_model(prepared.records, cfg.logistic)
    rules = mine_all_channels(prepared.records, cfg.association)

    return PipelineResult(
        prepared=prepared,
        segmentation=segmentation,
        trees=trees,
        response=response,
        rules=rules,
    )


__all__ = [
    "HIERARCHICAL_COLUMN",
    "KMEANS_COLUMN",
    "PreparedData",
    "SegmentationResult",
    "PipelineResult",
    "prepare_data",
    "attach_cluster_labels",
    "run_segmentation",
    "run_pipeline",
]
