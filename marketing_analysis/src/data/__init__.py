"""Data loading, deterministic cleaning, feature engineering and encoding.

The data workflow runs in three deterministic steps:

1) **Row cleaning** (:func:`clean_data`)
   - drops constant columns and rows with missing values
   - checks identifier uniqueness, derives Age, removes age / income outliers

2) **Feature engineering** (:func:`engineer_features`)
   - Spending, Children, log amounts, age buckets, Relationship,
     recoded Education, Years_Joined and Total_Accepted

3) **Encoding** (:func:`encode_categoricals`, :func:`build_model_matrix`)
   - fixed, versioned label -> code mapping
   - numeric model matrix without response-adjacent columns

None of these steps fit statistics that would leak between rows, so they are
safe to run on the full table before any modelling.
"""

from __future__ import annotations

from .load import DEFAULT_DATA_DIR, DEFAULT_FILENAME, REQUIRED_COLUMNS, load_raw_data
from .preprocess import (
    DEFAULT_MAX_AGE,
    DEFAULT_MAX_INCOME,
    DEFAULT_REFERENCE_YEAR,
    CleaningReport,
    check_unique_identifier,
    clean_data,
)
from .features import (
    CHANNEL_COLUMNS,
    DEFAULT_DATE_FORMAT,
    LOG_COLUMNS,
    RESPONSE_COLUMN,
    SPEND_COLUMNS,
    engineer_features,
)
from .encoding import (
    CATEGORY_MAPPING,
    ENCODING_VERSION,
    MODEL_FEATURES,
    build_model_matrix,
    decode_categoricals,
    encode_categoricals,
    mapping_table,
)

__all__ = [
    # loading
    "load_raw_data",
    "DEFAULT_DATA_DIR",
    "DEFAULT_FILENAME",
    "REQUIRED_COLUMNS",
    # cleaning
    "CleaningReport",
    "clean_data",
    "check_unique_identifier",
    "DEFAULT_REFERENCE_YEAR",
    "DEFAULT_MAX_AGE",
    "DEFAULT_MAX_INCOME",
    # feature engineering
    "engineer_features",
    "SPEND_COLUMNS",
    "LOG_COLUMNS",
    "CHANNEL_COLUMNS",
    "RESPONSE_COLUMN",
    "DEFAULT_DATE_FORMAT",
    # encoding
    "ENCODING_VERSION",
    "CATEGORY_MAPPING",
    "MODEL_FEATURES",
    "encode_categoricals",
    "decode_categoricals",
    "mapping_table",
    "build_model_matrix",
]
