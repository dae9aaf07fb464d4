# -*- coding: utf-8 -*-
"""
Run configuration for the income classification pipeline.

All knobs live on a single dataclass. ``PipelineConfig.from_env()`` maps the
environment variables accepted by ``run.py`` onto it so the pipeline can run
non-interactively (CI, scheduled jobs) with the same code path as an
interactive session.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np

from .paths import data_path

_TRUE = {'1', 'true', 'yes', 'y', 'on'}
_FALSE = {'0', 'false', 'no', 'n', 'off', ''}


def default_threshold_grid() -> np.ndarray:
    return np.round(np.arange(0.01, 1.0, 0.01), 2)


@dataclass
class PipelineConfig:
    data_file: Path = field(default_factory=lambda: data_path('adult.csv'))
    target_column: str = 'income'
    positive_label: str = '>50K'
    test_size: float = 0.2
    random_state: int = 42
    cv_folds: int = 5
    top_n_categories: int = 10
    skew_threshold: float = 0.75
    use_smote: bool = False
    smote_ratio: float = 0.5
    threshold_grid: np.ndarray = field(default_factory=default_threshold_grid)
    group_column: Optional[str] = 'sex'
    model_selection: Optional[str] = None
    reprocess: Optional[str] = None
    show_plots: bool = False

    def __post_init__(self):
        self.data_file = Path(self.data_file)
        if not 0.0 < self.test_size < 1.0:
            raise ValueError(f"test_size must be in (0, 1), got {self.test_size}")
        if self.cv_folds < 2:
            raise ValueError(f"cv_folds must be at least 2, got {self.cv_folds}")
        if self.top_n_categories < 1:
            raise ValueError(f"top_n_categories must be positive, got {self.top_n_categories}")
        if not 0.0 < self.smote_ratio <= 1.0:
            raise ValueError(f"smote_ratio must be in (0, 1], got {self.smote_ratio}")
        grid = np.asarray(self.threshold_grid, dtype=float)
        if grid.size == 0 or grid.min() <= 0.0 or grid.max() >= 1.0:
            raise ValueError("threshold_grid must be non-empty and strictly inside (0, 1)")
        self.threshold_grid = np.unique(grid)

    @classmethod
    def from_env(cls, **overrides) -> 'PipelineConfig':
        """Build a config from environment variables; keyword overrides win."""
        values = {}
        if os.getenv('INCOME_DATA'):
            values['data_file'] = Path(os.environ['INCOME_DATA'])
        if os.getenv('MODEL_SELECTION'):
            values['model_selection'] = os.environ['MODEL_SELECTION'].strip()
        if os.getenv('REPROCESS'):
            values['reprocess'] = os.environ['REPROCESS'].strip().lower()
        if os.getenv('CV_FOLDS'):
            values['cv_folds'] = _parse_int('CV_FOLDS')
        if os.getenv('RANDOM_STATE'):
            values['random_state'] = _parse_int('RANDOM_STATE')
        if os.getenv('TEST_SIZE'):
            values['test_size'] = _parse_float('TEST_SIZE')
        if os.getenv('USE_SMOTE') is not None:
            values['use_smote'] = _parse_bool('USE_SMOTE')
        if os.getenv('SHOW_PLOTS') is not None:
            values['show_plots'] = _parse_bool('SHOW_PLOTS')
        if os.getenv('GROUP_COLUMN') is not None:
            # An empty value turns the subgroup breakdown off
            values['group_column'] = os.environ['GROUP_COLUMN'].strip() or None
        values.update(overrides)
        return cls(**values)


def _parse_int(name):
    raw = os.environ[name]
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(name):
    raw = os.environ[name]
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _parse_bool(name):
    raw = os.environ[name].strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")
