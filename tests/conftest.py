"""Synthetic stand-in for the Kaggle marketing campaign file.

Customers are drawn from three loose archetypes (budget families, middle
income, affluent) so that PCA, clustering and the response model all have
structure to find. Ages stay within 25..75 and incomes below 100000, so the
default cleaning thresholds remove nothing.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from marketing_analysis.src.data.features import engineer_features
from marketing_analysis.src.data.preprocess import clean_data

EDUCATION_LEVELS = ["Basic", "2n Cycle", "Graduation", "Master", "PhD"]
MARITAL_STATUSES = ["Married", "Together", "Single", "Divorced", "Widow"]
SPEND_SHARES = {
    "MntWines": 0.40,
    "MntFruits": 0.05,
    "MntMeatProducts": 0.30,
    "MntFishProducts": 0.08,
    "MntSweetProducts": 0.05,
    "MntGoldProds": 0.12,
}


def make_raw_customers(n: int = 400, seed: int = 0, n_missing_income: int = 0) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    segment = rng.choice(3, size=n, p=[0.4, 0.35, 0.25])

    income = np.array([30_000.0, 55_000.0, 82_000.0])[segment] + rng.normal(0, 6_000, n)
    income = np.clip(income, 5_000, 98_000).round()

    age = np.clip(np.array([35, 48, 58])[segment] + rng.integers(-10, 11, n), 25, 75)
    enrolled = pd.Timestamp("2012-07-30") + pd.to_timedelta(rng.integers(0, 700, n), unit="D")

    spend_scale = np.array([60.0, 400.0, 1_200.0])[segment]
    spends = {
        col: rng.gamma(2.0, spend_scale * share / 2.0).round().astype(int)
        for col, share in SPEND_SHARES.items()
    }

    recency = rng.integers(0, 100, n)
    z = -1.5 + 1.0 * (segment == 2) - 0.025 * (recency - 50)
    response = rng.binomial(1, 1.0 / (1.0 + np.exp(-z)))
    campaign_p = np.array([0.03, 0.06, 0.15])[segment]

    df = pd.DataFrame(
        {
            "ID": np.arange(1_000, 1_000 + n),
            "Year_Birth": 2021 - age,
            "Education": rng.choice(EDUCATION_LEVELS, size=n, p=[0.05, 0.1, 0.5, 0.15, 0.2]),
            "Marital_Status": rng.choice(MARITAL_STATUSES, size=n, p=[0.4, 0.25, 0.2, 0.1, 0.05]),
            "Income": income,
            "Kidhome": np.where(segment == 0, rng.integers(1, 3, n), np.where(segment == 1, rng.integers(0, 2, n), 0)),
            "Teenhome": rng.integers(0, 2, n),
            "Dt_Customer": enrolled.strftime("%d-%m-%Y"),
            "Recency": recency,
            **spends,
            "NumDealsPurchases": rng.poisson(np.array([2.0, 3.0, 1.0])[segment]),
            "NumWebPurchases": rng.poisson(np.array([2.0, 5.0, 6.0])[segment]),
            "NumCatalogPurchases": rng.poisson(np.array([0.5, 2.5, 6.0])[segment]),
            "NumStorePurchases": rng.poisson(np.array([3.0, 7.0, 9.0])[segment]),
            "NumWebVisitsMonth": rng.poisson(np.array([7.0, 5.0, 3.0])[segment]),
            "AcceptedCmp3": rng.binomial(1, campaign_p),
            "AcceptedCmp4": rng.binomial(1, campaign_p),
            "AcceptedCmp5": rng.binomial(1, campaign_p),
            "AcceptedCmp1": rng.binomial(1, campaign_p),
            "AcceptedCmp2": rng.binomial(1, campaign_p),
            "Complain": (np.arange(n) % 37 == 5).astype(int),
            "Z_CostContact": 3,
            "Z_Revenue": 11,
            "Response": response,
        }
    )
    if n_missing_income:
        df.loc[df.index[:n_missing_income], "Income"] = np.nan
    return df


@pytest.fixture
def raw_customers() -> pd.DataFrame:
    return make_raw_customers()


@pytest.fixture
def engineered(raw_customers: pd.DataFrame) -> pd.DataFrame:
    return engineer_features(clean_data(raw_customers).data)


@pytest.fixture
def blobs() -> pd.DataFrame:
    """Three well-separated 2-D groups of 30 points, in group order."""
    rng = np.random.default_rng(7)
    centres = np.array([[0.0, 0.0], [10.0, 0.0], [0.0, 10.0]])
    points = np.vstack([c + rng.normal(0, 0.5, size=(30, 2)) for c in centres])
    return pd.DataFrame(points, columns=["PC1", "PC2"])


@pytest.fixture
def blob_groups() -> np.ndarray:
    return np.repeat([0, 1, 2], 30)
