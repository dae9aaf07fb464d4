# -*- coding: utf-8 -*-
"""
Census Income Classification Package

This package compares binary classifiers that predict whether an individual's
income exceeds $50K from the Adult census data, including:
- Data loading, cleaning and feature preparation
- Model training with cross-validated AUC and F1 threshold tuning
- Test-split evaluation and per-group breakdown
- Visualization of comparative performance

Main Components:
    IncomeClassificationPipeline: Main orchestrator for the entire pipeline
    DataPreprocessor: Handles data loading, cleaning, and feature engineering
    IncomeModelTrainer: Trains and evaluates multiple ML models
    ElasticNetClassifier: Penalized linear regression used as a classifier

Analysis & Visualization:
    summarize_results: Ranks models and picks the best per metric
    evaluate_by_group: Per-group metrics for every trained model
    create_metric_heatmap: Models x metrics heat-map
    create_roc_plot: ROC curves on the test split
    create_threshold_plot: F1 threshold sweep curves
    create_comparison_plots: Bar/scatter comparison of metrics
    create_group_plots: Per-group AUC and F1 bars
"""

from .income_pipeline import IncomeClassificationPipeline
from .data_preprocessor import DataPreprocessor
from .trainer import IncomeModelTrainer
from .custom_models import ElasticNetClassifier
from .analysis import summarize_results, evaluate_by_group
from .visualize import (
    create_metric_heatmap, create_roc_plot, create_threshold_plot,
    create_comparison_plots, create_group_plots
)

__all__ = [
    'IncomeClassificationPipeline',
    'DataPreprocessor',
    'IncomeModelTrainer',
    'ElasticNetClassifier',
    'summarize_results',
    'evaluate_by_group',
    'create_metric_heatmap',
    'create_roc_plot',
    'create_threshold_plot',
    'create_comparison_plots',
    'create_group_plots'
]
