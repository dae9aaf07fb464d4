import math

import numpy as np
import pytest
from sklearn.dummy import DummyClassifier
from sklearn.linear_model import LogisticRegression

from src.income.metrics import (
    best_f1_threshold,
    binary_log_loss,
    classification_metrics,
    confusion_counts,
    cross_validated_auc,
    evaluate_predictions,
    safe_auc,
    threshold_sweep,
)

Y_TRUE = np.array([1, 1, 0, 0, 1, 0])
Y_PROB = np.array([0.9, 0.4, 0.6, 0.1, 0.8, 0.3])


def test_confusion_counts():
    y_pred = (Y_PROB >= 0.5).astype(int)
    assert confusion_counts(Y_TRUE, y_pred) == (2, 1, 2, 1)


def test_classification_metrics_at_half():
    m = classification_metrics(Y_TRUE, Y_PROB, 0.5)
    assert m["precision"] == pytest.approx(2 / 3)
    assert m["sensitivity"] == pytest.approx(2 / 3)
    assert m["specificity"] == pytest.approx(2 / 3)
    assert m["accuracy"] == pytest.approx(4 / 6)
    assert m["f1"] == pytest.approx(2 / 3)


def test_no_positive_predictions_gives_nan_precision_and_f1():
    m = classification_metrics(Y_TRUE, Y_PROB, 0.95)
    assert math.isnan(m["precision"])
    assert math.isnan(m["f1"])
    assert m["sensitivity"] == 0.0
    assert m["specificity"] == 1.0


def test_specificity_nan_without_negatives():
    m = classification_metrics([1, 1], [0.9, 0.2], 0.5)
    assert math.isnan(m["specificity"])
    assert m["sensitivity"] == pytest.approx(0.5)


def test_threshold_sweep_has_one_row_per_threshold():
    sweep = threshold_sweep(Y_TRUE, Y_PROB, [0.2, 0.5, 0.7])
    assert list(sweep["threshold"]) == [0.2, 0.5, 0.7]
    assert {"f1", "precision", "sensitivity", "specificity", "accuracy"} <= set(sweep.columns)


def test_best_f1_threshold_picks_maximum():
    threshold, sweep = best_f1_threshold(Y_TRUE, Y_PROB, [0.2, 0.35, 0.5, 0.7, 0.95])
    assert threshold == pytest.approx(0.35)
    assert sweep["f1"].max() == pytest.approx(6 / 7)


def test_best_f1_threshold_ties_resolve_to_lowest():
    threshold, _ = best_f1_threshold([0, 1], [0.2, 0.8], [0.7, 0.3, 0.5])
    assert threshold == pytest.approx(0.3)


def test_best_f1_threshold_falls_back_when_undefined():
    threshold, sweep = best_f1_threshold([0, 1, 0], [0.1, 0.1, 0.1], [0.5, 0.9])
    assert threshold == 0.5
    assert sweep["f1"].isna().all()


def test_binary_log_loss_matches_closed_form():
    assert binary_log_loss([1, 0], [0.8, 0.2]) == pytest.approx(-math.log(0.8))


def test_binary_log_loss_stays_finite_on_hard_zero():
    loss = binary_log_loss([1, 0], [0.0, 0.0])
    assert np.isfinite(loss)
    assert loss > 10


def test_safe_auc_single_class_is_nan():
    assert math.isnan(safe_auc([1, 1, 1], [0.2, 0.5, 0.9]))
    assert safe_auc([0, 1], [0.2, 0.9]) == 1.0


def test_evaluate_predictions_includes_every_reported_metric():
    row = evaluate_predictions(Y_TRUE, Y_PROB, 0.5)
    for key in ("auc", "f1", "accuracy", "sensitivity", "specificity", "precision", "log_loss"):
        assert key in row
    assert row["auc"] == pytest.approx(8 / 9)


def test_cross_validated_auc_returns_oof_probabilities():
    rng = np.random.RandomState(1)
    X = rng.normal(size=(120, 3))
    y = (X[:, 0] + 0.5 * rng.normal(size=120) > 0).astype(int)

    oof, mean_auc, std_auc = cross_validated_auc(LogisticRegression(), X, y, cv=4, random_state=0)
    assert oof.shape == (120,)
    assert ((oof >= 0) & (oof <= 1)).all()
    assert 0.7 < mean_auc <= 1.0
    assert std_auc >= 0.0


def test_cross_validated_auc_scores_the_folds_it_predicted_on():
    # A prior-only model is constant within each fold, so each fold AUC is exactly 0.5
    rng = np.random.RandomState(3)
    X = rng.normal(size=(203, 2))
    y = (rng.rand(203) < 0.3).astype(int)

    _, mean_auc, std_auc = cross_validated_auc(DummyClassifier(strategy="prior"), X, y, cv=5, random_state=None)
    assert mean_auc == pytest.approx(0.5)
    assert std_auc == pytest.approx(0.0)
