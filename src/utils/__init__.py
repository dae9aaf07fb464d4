# -*- coding: utf-8 -*-
"""Utility modules"""
from .paths import (
    ROOT_DIR, DATA_DIR, ARTIFACT_DIR,
    data_path, artifact_path, model_path, figure_path, fig_path,
    report_path, timestamped_path, ensure_dirs
)
from .config import PipelineConfig
