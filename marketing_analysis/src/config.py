"""YAML configuration for the analysis pipeline.

The YAML file has one block per stage; each block maps onto the stage's
config dataclass. Unknown keys are ignored with a warning, and a missing file
falls back to the dataclass defaults, so older config files keep working.

.. code-block:: yaml

    random_state: 42
    cleaning:
      reference_year: 2021
      max_age: 80
      max_income: 100000
    pca:
      n_components: 3
    hierarchical:
      n_clusters: 3
    kmeans:
      n_clusters: 3
      n_init: 20
    chosen_method: hierarchical
    trees:
      cv_folds: 10
    logistic:
      alpha: 0.05
      sampling: balanced
    association:
      min_support: 0.05
      min_confidence: {web: 0.3, catalog: 0.6, store: 0.4}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Type, TypeVar

import yaml

from .data.preprocess import DEFAULT_MAX_AGE, DEFAULT_MAX_INCOME, DEFAULT_REFERENCE_YEAR
from .models.association import AssociationConfig
from .models.hierarchical import HierarchicalConfig
from .models.kmeans import KMeansConfig
from .models.logistic import LogisticConfig
from .models.pca import PCAConfig
from .models.trees import TreeConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("marketing_analysis/configs/pipeline.yaml")

ClusterMethod = Literal["hierarchical", "kmeans"]

T = TypeVar("T")


@dataclass
class CleaningConfig:
    """Thresholds for :func:`~marketing_analysis.src.data.preprocess.clean_data`."""

    reference_year: int = DEFAULT_REFERENCE_YEAR
    max_age: float = DEFAULT_MAX_AGE
    max_income: float = DEFAULT_MAX_INCOME


@dataclass
class PipelineConfig:
    """All stage configurations for one run."""

    random_state: int = 42
    chosen_method: ClusterMethod = "hierarchical"
    cleaning: CleaningConfig = field(default_factory=CleaningConfig)
    pca: PCAConfig = field(default_factory=PCAConfig)
    hierarchical: HierarchicalConfig = field(default_factory=HierarchicalConfig)
    kmeans: KMeansConfig = field(default_factory=KMeansConfig)
    trees: TreeConfig = field(default_factory=TreeConfig)
    logistic: LogisticConfig = field(default_factory=LogisticConfig)
    association: AssociationConfig = field(default_factory=AssociationConfig)

    def __post_init__(self) -> None:
        if self.chosen_method not in ("hierarchical", "kmeans"):
            raise ValueError(
                f"chosen_method must be 'hierarchical' or 'kmeans', got {self.chosen_method!r}."
            )

    def with_random_state(self, random_state: int) -> "PipelineConfig":
        """Copy of this config with one seed threaded into every randomized stage."""
        seed = int(random_state)
        return replace(
            self,
            random_state=seed,
            kmeans=replace(self.kmeans, random_state=seed),
            trees=replace(self.trees, random_state=seed),
            logistic=replace(self.logistic, random_state=seed),
        )


def _build(cls: Type[T], block: Optional[Dict[str, Any]], section: str) -> T:
    """Instantiate ``cls`` from a YAML block, ignoring unknown keys."""
    block = block or {}
    valid = {f.name for f in fields(cls)}
    unknown = sorted(set(block) - valid)
    if unknown:
        logger.warning("Ignoring unknown keys in config section '%s': %s", section, unknown)
    return cls(**{k: v for k, v in block.items() if k in valid})


def config_from_dict(raw: Optional[Dict[str, Any]]) -> PipelineConfig:
    """Build a :class:`PipelineConfig` from a parsed YAML mapping.

    A top-level ``random_state`` is threaded into every randomized stage that
    does not set its own.
    """
    raw = dict(raw or {})
    sections = {
        "cleaning": CleaningConfig,
        "pca": PCAConfig,
        "hierarchical": HierarchicalConfig,
        "kmeans": KMeansConfig,
        "trees": TreeConfig,
        "logistic": LogisticConfig,
        "association": AssociationConfig,
    }
    unknown = sorted(set(raw) - set(sections) - {"random_state", "chosen_method"})
    if unknown:
        logger.warning("Ignoring unknown top-level config keys: %s", unknown)

    seed = raw.get("random_state")
    built: Dict[str, Any] = {}
    for name, cls in sections.items():
        block = raw.get(name) or {}
        if not isinstance(block, dict):
            raise ValueError(f"Config section '{name}' must be a mapping, got {type(block).__name__}.")
        block = dict(block)
        if seed is not None and "random_state" in {f.name for f in fields(cls)}:
            block.setdefault("random_state", int(seed))
        built[name] = _build(cls, block, name)

    if "association" in raw and "min_confidence" in (raw["association"] or {}):
        merged = AssociationConfig().min_confidence
        merged.update({str(k): float(v) for k, v in raw["association"]["min_confidence"].items()})
        built["association"].min_confidence = merged

    return PipelineConfig(
        random_state=int(seed) if seed is not None else 42,
        chosen_method=raw.get("chosen_method", "hierarchical"),
        **built,
    )


def load_config(path: Optional[Path] = None) -> PipelineConfig:
    """Load the pipeline config from YAML; defaults when the file is absent."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.is_file():
        logger.warning("Config file not found at %s; using defaults.", config_path)
        return PipelineConfig()

    raw = yaml.safe_load(config_path.read_text()) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping at the top level.")
    return config_from_dict(raw)


__all__ = [
    "CleaningConfig",
    "PipelineConfig",
    "DEFAULT_CONFIG_PATH",
    "config_from_dict",
    "load_config",
]
