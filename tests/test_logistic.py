import numpy as np
import pandas as pd
import pytest

from marketing_analysis.src.evaluation.prediction import compute_classification_metrics, confusion_table
from marketing_analysis.src.exceptions import ModelFitError
from marketing_analysis.src.models.logistic import (
    CANDIDATE_FEATURES,
    LogisticConfig,
    backward_eliminate,
    balanced_sample,
    fit_logit,
    predict_response,
    run_response_model,
    split_train_test,
)


@pytest.fixture
def signal_data():
    rng = np.random.default_rng(5)
    n = 500
    X = pd.DataFrame(
        {
            "signal": rng.normal(size=n),
            "noise_a": rng.normal(size=n),
            "noise_b": rng.normal(size=n),
        }
    )
    p = 1.0 / (1.0 + np.exp(-(0.3 + 1.8 * X["signal"])))
    y = pd.Series(rng.binomial(1, p), name="Response")
    return X, y


def test_balanced_sample_equalizes_classes(engineered):
    sample = balanced_sample(engineered, "Response", "balanced", random_state=1)

    counts = sample["Response"].value_counts()
    assert counts[0] == counts[1] == engineered["Response"].value_counts().min()
    assert sample.index.is_monotonic_increasing


def test_sampling_is_deterministic_for_a_seed(engineered):
    a = balanced_sample(engineered, random_state=9)
    b = balanced_sample(engineered, random_state=9)

    pd.testing.assert_frame_equal(a, b)


def test_full_policy_keeps_every_row(engineered):
    assert len(balanced_sample(engineered, policy="full")) == len(engineered)
    with pytest.raises(ValueError):
        balanced_sample(engineered, policy="oversample")


def test_single_class_target_is_rejected(engineered):
    with pytest.raises(ModelFitError):
        balanced_sample(engineered.assign(Response=0))


def test_split_is_stratified_and_deterministic(signal_data):
    X, y = signal_data

    X_tr, X_te, y_tr, y_te = split_train_test(X, y, test_size=0.25, random_state=3)
    again = split_train_test(X, y, test_size=0.25, random_state=3)

    assert len(X_te) == 125
    assert X_te.index.equals(again[1].index)
    assert abs(y_tr.mean() - y_te.mean()) < 0.02
    with pytest.raises(ValueError):
        split_train_test(X, y, test_size=1.5)


def test_backward_elimination_keeps_the_signal(signal_data):
    X, y = signal_data

    result, features, path = backward_eliminate(X, y, alpha=0.05)

    assert "signal" in features
    assert (result.pvalues.drop("const") <= 0.05).all()
    assert list(result.params.index) == ["const"] + features
    assert path["n_features"].tolist() == list(range(3, 3 - len(path), -1))
    assert path["dropped"].iloc[-1] == ""
    assert set(path["dropped"].iloc[:-1]) == set(X.columns) - set(features)


def test_singular_design_is_rejected(signal_data):
    X, y = signal_data
    with pytest.raises(ModelFitError, match="singular"):
        fit_logit(X.assign(copy=X["signal"] * 2.0), y)


def test_prediction_threshold_is_strict(signal_data):
    X, y = signal_data
    result = fit_logit(X, y)

    proba, predicted = predict_response(result, X, threshold=0.5)

    assert proba.between(0, 1).all()
    assert (predicted == (proba > 0.5).astype(int)).all()


def test_confusion_table_and_metrics():
    y_true = [1, 1, 0, 0, 1, 0]
    y_pred = [1, 0, 0, 1, 1, 0]

    table = confusion_table(y_true, y_pred)
    metrics = compute_classification_metrics(y_true, y_pred)

    assert table.loc[1, 1] == 2 and table.loc[0, 0] == 2
    assert table.loc[0, 1] == 1 and table.loc[1, 0] == 1
    assert metrics["accuracy"] == pytest.approx(4 / 6)
    assert metrics["specificity"] == pytest.approx(2 / 3)
    assert metrics["auc"] is None


def test_response_model_end_to_end(engineered):
    result = run_response_model(engineered, LogisticConfig(random_state=4))

    assert set(result.features) <= set(CANDIDATE_FEATURES)
    assert result.confusion.shape == (2, 2)
    assert int(result.confusion.to_numpy().sum()) == result.n_test
    assert 0.0 <= result.accuracy <= 1.0
    assert result.metrics["auc"] is not None
    assert list(result.coefficients.columns) == ["coef", "std_err", "z", "p_value", "odds_ratio"]


def test_response_model_is_deterministic(engineered):
    cfg = LogisticConfig(random_state=4)

    a = run_response_model(engineered, cfg)
    b = run_response_model(engineered, cfg)

    assert a.features == b.features
    pd.testing.assert_frame_equal(a.confusion, b.confusion)


def test_full_sampling_uses_every_row(engineered):
    result = run_response_model(engineered, LogisticConfig(sampling="full"))
    assert result.n_train + result.n_test == len(engineered)
