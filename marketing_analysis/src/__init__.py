"""Source package for the marketing campaign customer analysis.

Package layout
--------------
- data: loading, cleaning, feature engineering and categorical encoding
- models: PCA, hierarchical / k-means clustering, pruned trees, stepwise
  logistic regression and channel association rules
- evaluation: clustering diagnostics, cluster interpretation, prediction metrics
- visualization: diagnostic figures
- experiments: runnable scripts for segmentation / classification / association
- utils: logging and seeds

The top-level ``config`` and ``pipeline`` modules compose the stages.

We keep this ``__init__`` lightweight to avoid importing scikit-learn,
statsmodels or mlxtend at import time.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "data",
    "models",
    "evaluation",
    "visualization",
    "experiments",
    "utils",
]
