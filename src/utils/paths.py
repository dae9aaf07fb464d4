# -*- coding: utf-8 -*-
"""
Filesystem layout for the income classification pipeline.

Input CSVs live under ``data/``. Every generated file (cached datasets, result
tables, figures, fitted models) lands under the artifact root, which defaults
to ``artifact/`` in the repository and can be redirected with the
``INCOME_OUTPUT_DIR`` environment variable.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

ROOT_DIR = Path(__file__).resolve().parents[2]
DATA_DIR = ROOT_DIR / 'data'
ARTIFACT_DIR = ROOT_DIR / 'artifact'


def artifact_root() -> Path:
    """Resolve the artifact root at call time so the env override always applies."""
    override = os.getenv('INCOME_OUTPUT_DIR')
    return Path(override) if override else ARTIFACT_DIR


def _under(directory: Path, name: Union[str, Path]) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def data_path(name: Union[str, Path]) -> Path:
    return DATA_DIR / name


def artifact_path(name: Union[str, Path]) -> Path:
    return _under(artifact_root(), name)


def model_path(name: Union[str, Path]) -> Path:
    return _under(artifact_root() / 'models', name)


def fig_path(name: Union[str, Path]) -> Path:
    return _under(artifact_root() / 'figures', name)


# Long-form alias
figure_path = fig_path


def report_path(name: Union[str, Path]) -> Path:
    return _under(artifact_root() / 'reports', name)


def timestamped_path(stem: str, suffix: str, directory: Optional[Path] = None) -> Path:
    """Build ``<directory>/<stem>_YYYYmmdd_HHMMSS<suffix>``."""
    directory = directory if directory is not None else artifact_root()
    stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    if suffix and not suffix.startswith('.'):
        suffix = '.' + suffix
    return _under(Path(directory), f"{stem}_{stamp}{suffix}")


def ensure_dirs():
    """Create the artifact tree up front."""
    root = artifact_root()
    for directory in (root, root / 'models', root / 'figures', root / 'reports'):
        directory.mkdir(parents=True, exist_ok=True)
    return root
