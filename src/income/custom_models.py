# -*- coding: utf-8 -*-
"""
Custom Model Wrappers for Income Classification

This module provides sklearn-compatible classifier wrappers for models that
scikit-learn only ships as regressors, so every model in the pipeline exposes
the same interface (fit, predict, predict_proba) and works with clone(),
cross-validation and imbalanced-learn pipelines.

Classes:
    ElasticNetClassifier: Penalized linear regression on the 0/1 income label,
                          with the penalty strength chosen by cross-validation.
"""

import warnings

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import ElasticNetCV
from sklearn.utils.validation import check_is_fitted


class ElasticNetClassifier(ClassifierMixin, BaseEstimator):
    """
    Elastic-net regression wrapper for binary classification.

    Fits a linear model to the 0/1 label under a combined L1/L2 penalty
    (``l1_ratio`` weights the L1 part; 1.0 is the lasso, 0.0 ridge). The
    overall penalty strength ``alpha`` is selected by ``ElasticNetCV`` using
    ``cv`` internal folds.

    The continuous predictions, clipped to [0, 1], serve as pseudo-probabilities;
    the class prediction thresholds them at 0.5. Threshold tuning for F1
    happens downstream on these scores, like for any other model.

    Parameters:
        l1_ratio (float): Mix between L1 and L2 penalties, in [0, 1].
        cv (int): Folds used to choose alpha.
        max_iter (int): Coordinate-descent iteration cap.
        random_state (int): Seed for the coordinate-descent fold shuffling.

    Attributes:
        model_ (ElasticNetCV): The fitted regressor.
        alpha_ (float): Selected penalty strength.
        coef_ (np.ndarray): Fitted coefficients, one per feature.
        classes_ (np.ndarray): Class labels [0, 1].

    Example:
        >>> clf = ElasticNetClassifier(l1_ratio=0.5)
        >>> clf.fit(X_train, y_train)
        >>> probabilities = clf.predict_proba(X_test)[:, 1]
    """

    def __init__(self, l1_ratio=0.5, cv=5, max_iter=5000, random_state=42):
        self.l1_ratio = l1_ratio
        self.cv = cv
        self.max_iter = max_iter
        self.random_state = random_state

    def fit(self, X, y):
        """
        Fit the penalized regression on the 0/1 target.

        Raises:
            ValueError: If ``y`` does not hold exactly two classes.
        """
        y = np.asarray(y)
        self.classes_ = np.unique(y)
        if len(self.classes_) != 2:
            raise ValueError(
                f"ElasticNetClassifier needs a binary target, got classes {self.classes_.tolist()}"
            )
        y_binary = (y == self.classes_[1]).astype(float)

        self.model_ = ElasticNetCV(
            l1_ratio=self.l1_ratio,
            cv=self.cv,
            max_iter=self.max_iter,
            random_state=self.random_state
        )
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', ConvergenceWarning)
            self.model_.fit(X, y_binary)

        self.alpha_ = self.model_.alpha_
        self.coef_ = self.model_.coef_
        self.n_features_in_ = self.model_.n_features_in_
        return self

    def decision_function(self, X):
        """Raw (unclipped) regression scores."""
        check_is_fitted(self, 'model_')
        return self.model_.predict(X)

    def predict_proba(self, X):
        """
        Returns:
            np.ndarray: Shape (n_samples, 2); column 1 is the clipped score,
                        column 0 its complement.
        """
        y_pred = np.clip(self.decision_function(X), 0.0, 1.0)
        return np.column_stack([1.0 - y_pred, y_pred])

    def predict(self, X):
        proba = self.predict_proba(X)[:, 1]
        return np.where(proba >= 0.5, self.classes_[1], self.classes_[0])
