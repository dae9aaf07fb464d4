# -*- coding: utf-8 -*-
"""
Model Trainer Module for Income Classification

This module provides the IncomeModelTrainer class that handles:
- Interactive and non-interactive model selection
- Cross-validated AUC and out-of-fold threshold tuning on the training split
- Test-split evaluation (AUC, F1, accuracy, sensitivity, specificity,
  precision, log loss)
- Saving trained models and the results table

The trainer supports 6 models:
- Linear: Logistic Regression, Elastic Net (penalized linear regression)
- Tree-based: Random Forest, Gradient Boosting, LightGBM
- Neural: small multi-layer perceptron
"""

import logging
import warnings
from typing import Dict, Optional

import joblib
import pandas as pd
from imblearn.over_sampling import SMOTE
from imblearn.pipeline import Pipeline as ImbPipeline
from lightgbm import LGBMClassifier
from sklearn.base import clone
from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import roc_curve
from sklearn.neural_network import MLPClassifier

from .custom_models import ElasticNetClassifier
from .metrics import best_f1_threshold, cross_validated_auc, evaluate_predictions
from src.utils.config import PipelineConfig
from src.utils.paths import artifact_path, model_path

logger = logging.getLogger(__name__)

QUICK_MODELS = ['Logistic_Regression', 'Random_Forest', 'Elastic_Net']

RESULT_COLUMNS = [
    'model_name', 'auc', 'cv_auc', 'cv_auc_std', 'f1', 'accuracy', 'sensitivity',
    'specificity', 'precision', 'log_loss', 'threshold', 'n_features'
]


class IncomeModelTrainer:
    """
    Sequential trainer for the income classifiers.

    For every selected model the trainer:
        1. runs stratified K-fold cross-validation on the training split,
           giving the CV AUC and an out-of-fold probability for each row
        2. sweeps the decision threshold over those out-of-fold probabilities
           and keeps the one with the best F1
        3. refits on the whole training split and scores the test split at
           the tuned threshold

    Tuning the threshold on out-of-fold predictions keeps the test split
    untouched until the final evaluation.

    Attributes:
        config (PipelineConfig): Run configuration.
        results (list): One dict per successfully trained model; each holds the
                        metric row plus the fitted estimator and curve data.
        all_models (dict): Model name -> unfitted estimator.

    Example:
        >>> trainer = IncomeModelTrainer()
        >>> selected = trainer.select_models('99')
        >>> for name, model in selected.items():
        ...     trainer.train_single_model(name, model, dataset)
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.results = []
        self.all_models = self.get_all_models(self.config.random_state)

    @staticmethod
    def get_all_models(random_state: int = 42) -> Dict[str, object]:
        """
        Define all available models for income classification.

        Returns:
            dict: Model name -> instantiated (unfitted) estimator.
        """
        models = {
            # ============================================================
            # LINEAR MODELS
            # ============================================================
            'Logistic_Regression': LogisticRegression(
                max_iter=1000,
                random_state=random_state
            ),

            # ============================================================
            # TREE-BASED MODELS
            # ============================================================
            'Random_Forest': RandomForestClassifier(
                n_estimators=300,
                min_samples_leaf=2,
                random_state=random_state,
                n_jobs=-1
            ),
            'Gradient_Boosting': GradientBoostingClassifier(
                n_estimators=200,
                learning_rate=0.1,
                max_depth=3,
                random_state=random_state
            ),

            # ============================================================
            # NEURAL NETWORK
            # One small hidden layer; early stopping on a 10% holdout
            # ============================================================
            'Neural_Network': MLPClassifier(
                hidden_layer_sizes=(16,),
                alpha=1e-3,
                max_iter=500,
                early_stopping=True,
                random_state=random_state
            ),

            # ============================================================
            # PENALIZED REGRESSION
            # ============================================================
            'Elastic_Net': ElasticNetClassifier(
                l1_ratio=0.5,
                cv=5,
                random_state=random_state
            ),

            # ============================================================
            # ADDITIONAL BASELINE
            # ============================================================
            'LightGBM': LGBMClassifier(
                n_estimators=200,
                learning_rate=0.05,
                random_state=random_state,
                verbose=-1
            ),
        }
        return models

    def select_models(self, selection: Optional[str] = None):
        """
        Interactive or non-interactive model selection.

        Parameters:
            selection (str, optional): Pre-set selection string. Options:
                - '0': All 6 models
                - '99': Quick mode (Logistic_Regression, Random_Forest, Elastic_Net)
                - '1,3,5': Comma-separated model numbers
                - None: use config.model_selection, then prompt

        Returns:
            dict: Selected model names -> estimator instances.
        """
        print("\n" + "="*60)
        print("MODEL SELECTION")
        print("="*60)

        if selection is None:
            selection = self.config.model_selection

        model_list = list(self.all_models.keys())

        print(f"\nAvailable models ({len(model_list)} total):")
        print("  1. Logistic_Regression  - Standard logistic regression")
        print("  2. Random_Forest        - Ensemble of 300 decision trees")
        print("  3. Gradient_Boosting    - Sequential boosting with 200 estimators")
        print("  4. Neural_Network       - Single hidden layer perceptron (16 units)")
        print("  5. Elastic_Net          - L1/L2 penalized regression, CV-chosen penalty")
        print("  6. LightGBM             - Histogram gradient boosting baseline")
        print("\n[MENU] QUICK OPTIONS:")
        print(f"  0  - All models ({len(model_list)})")
        print(f"  99 - Quick mode ({', '.join(QUICK_MODELS)})")

        if selection is None:
            selection = input("\n[>>] Enter model numbers (e.g., 1,3,5) or quick option: ").strip()
        else:
            print(f"\nUsing non-interactive selection: {selection}")

        if selection == '0':
            selected_models = model_list
        elif selection == '99':
            selected_models = QUICK_MODELS
        else:
            try:
                indices = [int(x.strip()) - 1 for x in selection.split(',')]
                selected_models = [model_list[i] for i in indices if 0 <= i < len(model_list)]
            except ValueError:
                selected_models = []
            if not selected_models:
                print("[WARN] Invalid selection. Using quick mode...")
                selected_models = QUICK_MODELS
            # Keep the first occurrence of repeated numbers
            selected_models = list(dict.fromkeys(selected_models))

        print(f"\n[OK] Selected {len(selected_models)} models: {', '.join(selected_models)}")

        return {name: self.all_models[name] for name in selected_models}

    def build_estimator(self, model):
        """Fresh copy of ``model``, behind SMOTE oversampling when enabled."""
        estimator = clone(model)
        if self.config.use_smote:
            estimator = ImbPipeline([
                ('smote', SMOTE(sampling_strategy=self.config.smote_ratio,
                                random_state=self.config.random_state)),
                ('model', estimator)
            ])
        return estimator

    def train_single_model(self, model_name, model, dataset):
        """
        Cross-validate, tune, refit and evaluate one model.

        Returns:
            dict or None: The result (metric row plus ``model``, ``roc`` and
                          ``sweep`` entries), or None if training failed.
        """
        print(f"\n{'='*50}")
        print(f"Training: {model_name}")
        print('='*50)
        config = self.config
        X_train, y_train = dataset['X_train'], dataset['y_train']
        X_test, y_test = dataset['X_test'], dataset['y_test']
        print(f"  Training shape: {X_train.shape}")

        try:
            estimator = self.build_estimator(model)

            with warnings.catch_warnings():
                warnings.simplefilter('ignore', ConvergenceWarning)
                oof_proba, cv_auc, cv_auc_std = cross_validated_auc(
                    estimator, X_train, y_train, cv=config.cv_folds, random_state=config.random_state
                )
                threshold, sweep = best_f1_threshold(y_train, oof_proba, config.threshold_grid)

                estimator.fit(X_train, y_train)
            y_proba = estimator.predict_proba(X_test)[:, 1]
            metrics = evaluate_predictions(y_test, y_proba, threshold)

        except Exception as e:
            print(f"  [ERROR] Error: {str(e)}")
            logger.exception("Training %s failed", model_name)
            return None

        print(f"  [OK] CV AUC: {cv_auc:.4f} (+/- {cv_auc_std:.4f})")
        print(f"  [OK] Test AUC: {metrics['auc']:.4f} | Log loss: {metrics['log_loss']:.4f}")
        print(f"  [OK] F1 @ {threshold:.2f}: {metrics['f1']:.4f}")
        print(f"    (Sensitivity: {metrics['sensitivity']:.3f}, Specificity: {metrics['specificity']:.3f}, "
              f"Precision: {metrics['precision']:.3f}, Accuracy: {metrics['accuracy']:.3f})")

        fpr, tpr, _ = roc_curve(y_test, y_proba)
        result = {
            'model_name': model_name,
            'auc': metrics['auc'],
            'cv_auc': cv_auc,
            'cv_auc_std': cv_auc_std,
            'f1': metrics['f1'],
            'accuracy': metrics['accuracy'],
            'sensitivity': metrics['sensitivity'],
            'specificity': metrics['specificity'],
            'precision': metrics['precision'],
            'log_loss': metrics['log_loss'],
            'threshold': threshold,
            'n_features': X_train.shape[1],
            'model': estimator,
            'roc': {'fpr': fpr, 'tpr': tpr},
            'sweep': sweep[['threshold', 'f1', 'precision', 'sensitivity']]
        }
        self.results.append(result)

        joblib.dump(estimator, model_path(f"{model_name}_model.pkl"))

        return result

    def results_frame(self) -> pd.DataFrame:
        """Results table: one row per trained model, metric columns only."""
        if not self.results:
            return pd.DataFrame(columns=RESULT_COLUMNS)
        return pd.DataFrame([{col: r[col] for col in RESULT_COLUMNS} for r in self.results])

    def save_results(self):
        """Save the results table to CSV"""
        df_results = self.results_frame()
        df_results.to_csv(artifact_path('model_results.csv'), index=False)
        print(f"\n[SAVED] Results saved to 'model_results.csv'")
        return df_results
