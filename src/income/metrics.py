# -*- coding: utf-8 -*-
"""
Classification metrics for the income models.

Threshold-dependent metrics (accuracy, precision, sensitivity, specificity,
F1) come from confusion-matrix counts. A ratio whose denominator is zero is
reported as NaN rather than 0, so a model that never predicts the positive
class shows an undefined precision instead of a perfect-looking zero.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.metrics import log_loss, roc_auc_score
from sklearn.model_selection import StratifiedKFold, cross_val_predict

logger = logging.getLogger(__name__)

METRIC_COLUMNS = ['auc', 'f1', 'accuracy', 'sensitivity', 'specificity', 'precision', 'log_loss']
DEFAULT_THRESHOLD = 0.5


def _ratio(num: float, denom: float) -> float:
    return num / denom if denom > 0 else float('nan')


def confusion_counts(y_true, y_pred) -> Tuple[int, int, int, int]:
    """Return (tp, fp, tn, fn) for 0/1 labels."""
    y_true = np.asarray(y_true).astype(int)
    y_pred = np.asarray(y_pred).astype(int)
    tp = int(((y_true == 1) & (y_pred == 1)).sum())
    fp = int(((y_true == 0) & (y_pred == 1)).sum())
    tn = int(((y_true == 0) & (y_pred == 0)).sum())
    fn = int(((y_true == 1) & (y_pred == 0)).sum())
    return tp, fp, tn, fn


def classification_metrics(y_true, y_prob, threshold: float = DEFAULT_THRESHOLD) -> Dict[str, float]:
    """Confusion-derived metrics when predicting positive for ``y_prob >= threshold``."""
    y_pred = (np.asarray(y_prob) >= threshold).astype(int)
    tp, fp, tn, fn = confusion_counts(y_true, y_pred)

    precision = _ratio(tp, tp + fp)
    sensitivity = _ratio(tp, tp + fn)
    specificity = _ratio(tn, tn + fp)
    accuracy = _ratio(tp + tn, tp + fp + tn + fn)
    if np.isnan(precision) or np.isnan(sensitivity) or precision + sensitivity == 0:
        f1 = float('nan')
    else:
        f1 = 2 * precision * sensitivity / (precision + sensitivity)

    return {
        'threshold': float(threshold),
        'tp': tp,
        'fp': fp,
        'tn': tn,
        'fn': fn,
        'accuracy': accuracy,
        'precision': precision,
        'sensitivity': sensitivity,
        'specificity': specificity,
        'f1': f1,
    }


def binary_log_loss(y_true, y_prob, eps: float = 1e-15) -> float:
    # Scores from regression-based models can sit exactly on 0 or 1
    y_prob = np.clip(np.asarray(y_prob, dtype=float), eps, 1.0 - eps)
    return float(log_loss(np.asarray(y_true).astype(int), y_prob, labels=[0, 1]))


def safe_auc(y_true, y_prob) -> float:
    """ROC AUC, or NaN when only one class is present."""
    y_true = np.asarray(y_true)
    if len(np.unique(y_true)) < 2:
        logger.warning("AUC undefined for a single-class sample of %d rows", len(y_true))
        return float('nan')
    return float(roc_auc_score(y_true, y_prob))


def threshold_sweep(y_true, y_prob, thresholds: Iterable[float]) -> pd.DataFrame:
    """One row of confusion-derived metrics per candidate threshold."""
    rows = [classification_metrics(y_true, y_prob, thr) for thr in thresholds]
    return pd.DataFrame(rows)


def best_f1_threshold(y_true, y_prob, thresholds: Iterable[float]) -> Tuple[float, pd.DataFrame]:
    """
    Pick the threshold with the highest F1.

    Ties resolve to the lowest threshold. If F1 is undefined everywhere the
    conventional 0.5 cut-off is returned.
    """
    sweep = threshold_sweep(y_true, y_prob, sorted(thresholds))
    if sweep['f1'].isna().all():
        logger.warning("F1 undefined at every threshold; falling back to %.2f", DEFAULT_THRESHOLD)
        return DEFAULT_THRESHOLD, sweep
    best = int(np.nanargmax(sweep['f1'].to_numpy()))
    return float(sweep.loc[best, 'threshold']), sweep


def cross_validated_auc(model, X, y, cv: int = 5, random_state: Optional[int] = 42):
    """
    Stratified K-fold AUC for ``model`` on (X, y).

    Returns
    -------
    oof_proba : np.ndarray
        Out-of-fold positive-class probability for every row.
    mean_auc, std_auc : float
        Mean and standard deviation of the per-fold AUCs.
    """
    y = np.asarray(y)
    splitter = StratifiedKFold(n_splits=cv, shuffle=True, random_state=random_state)
    # Materialized once so the fold AUCs use the same folds when random_state is None
    folds = list(splitter.split(X, y))
    oof_proba = cross_val_predict(clone(model), X, y, cv=folds, method='predict_proba')[:, 1]

    fold_aucs = [safe_auc(y[test_idx], oof_proba[test_idx]) for _, test_idx in folds]
    return oof_proba, float(np.nanmean(fold_aucs)), float(np.nanstd(fold_aucs))


def evaluate_predictions(y_true, y_prob, threshold: float) -> Dict[str, float]:
    """The full reported metric set for one set of predictions."""
    row = classification_metrics(y_true, y_prob, threshold)
    row['auc'] = safe_auc(y_true, y_prob)
    row['log_loss'] = binary_log_loss(y_true, y_prob)
    return row
