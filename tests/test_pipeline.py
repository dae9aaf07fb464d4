import math
from dataclasses import replace

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LogisticRegression

import run
from src.income.analysis import evaluate_by_group, summarize_results
from src.income.income_pipeline import IncomeClassificationPipeline
from src.income.trainer import IncomeModelTrainer
from src.income.visualize import create_metric_heatmap

FIGURES = ("metric_heatmap.png", "roc_curves.png", "threshold_sweep.png",
           "model_comparison.png", "group_analysis.png")


def _results_table():
    return pd.DataFrame({
        "model_name": ["A", "B", "C"],
        "auc": [0.80, 0.90, 0.85],
        "cv_auc": [0.79, 0.88, 0.86],
        "cv_auc_std": [0.01, 0.02, 0.01],
        "f1": [0.60, 0.65, 0.70],
        "accuracy": [0.81, 0.84, 0.83],
        "sensitivity": [0.55, 0.62, 0.75],
        "specificity": [0.90, 0.91, 0.85],
        "precision": [0.66, 0.69, 0.66],
        "log_loss": [0.40, 0.33, 0.35],
        "threshold": [0.30, 0.35, 0.25],
        "n_features": [30, 30, 30],
    })


def test_summarize_results_ranks_by_auc_and_picks_best_per_metric():
    df, best = summarize_results(_results_table())
    assert list(df["model_name"]) == ["B", "C", "A"]
    assert best["auc"][0] == "B"
    assert best["f1"][0] == "C"
    assert best["log_loss"] == ("B", pytest.approx(0.33))
    assert best["sensitivity"][0] == "C"


def test_summarize_results_skips_all_nan_metric():
    table = _results_table()
    table["precision"] = float("nan")
    _, best = summarize_results(table)
    assert "precision" not in best


def test_metric_heatmap_written(_artifact_dir):
    path = create_metric_heatmap(_results_table())
    assert path == _artifact_dir / "figures" / "metric_heatmap.png"
    assert path.exists()


def test_evaluate_by_group(config, dataset, _artifact_dir):
    trainer = IncomeModelTrainer(config)
    trainer.train_single_model("Logistic_Regression", trainer.all_models["Logistic_Regression"], dataset)

    df_groups = evaluate_by_group(trainer.results, dataset, "sex")
    assert set(df_groups["group"]) == {"Female", "Male"}
    assert df_groups["n"].sum() == len(dataset["y_test"])
    assert (_artifact_dir / "group_metrics.csv").exists()


def test_evaluate_by_group_without_groups(config, dataset):
    dataset = dict(dataset, groups_test=None)
    assert evaluate_by_group([], dataset).empty


def test_pipeline_run_end_to_end(config, _artifact_dir):
    df_results = IncomeClassificationPipeline(config).run()

    assert df_results["auc"].is_monotonic_decreasing
    assert set(df_results["model_name"]) == {"Logistic_Regression", "Random_Forest", "Elastic_Net"}
    for metric in ("auc", "f1", "accuracy", "sensitivity", "specificity", "precision", "log_loss"):
        assert df_results[metric].notna().all()

    saved = pd.read_csv(_artifact_dir / "model_results.csv")
    assert len(saved) == 3
    for name in FIGURES:
        assert (_artifact_dir / "figures" / name).exists()


def test_preprocess_reuses_cache(config):
    pipeline = IncomeClassificationPipeline(config)
    first = pipeline.preprocess()
    second = pipeline.preprocess(reprocess_choice="n")
    assert first["features"] == second["features"]
    assert (first["X_train"] == second["X_train"]).all()


def test_pipeline_trains_neural_network_and_boosting(config):
    pipeline = IncomeClassificationPipeline(config)
    dataset = pipeline.preprocess()
    trainer, selected = pipeline.select_models("3,4,6")
    results = pipeline.train_models(trainer, selected, dataset)

    assert [r["model_name"] for r in results] == ["Gradient_Boosting", "Neural_Network", "LightGBM"]
    assert all(math.isfinite(r["log_loss"]) for r in results)


def test_run_main_succeeds(monkeypatch, capsys, adult_csv, _artifact_dir):
    monkeypatch.setenv("INCOME_DATA", str(adult_csv))
    monkeypatch.setenv("MODEL_SELECTION", "1")
    monkeypatch.setenv("REPROCESS", "y")
    monkeypatch.setenv("CV_FOLDS", "3")

    assert run.main() == 0
    assert (_artifact_dir / "model_results.csv").exists()
    out = capsys.readouterr().out
    assert str(_artifact_dir / "model_results.csv") in out
    assert str(_artifact_dir / "figures" / "roc_curves.png") in out


def test_run_main_reports_failure(monkeypatch, tmp_path):
    monkeypatch.setenv("INCOME_DATA", str(tmp_path / "missing.csv"))
    monkeypatch.setenv("MODEL_SELECTION", "1")

    assert run.main() == 1


def test_evaluate_by_group_single_class_level(config, dataset, _artifact_dir):
    y_test = dataset["y_test"]
    groups = np.full(len(y_test), "Mixed", dtype=object)
    groups[np.flatnonzero(y_test == 0)[:15]] = "AllLow"
    dataset = dict(dataset, groups_test=groups)

    model = LogisticRegression(max_iter=1000).fit(dataset["X_train"], dataset["y_train"])
    results = [{"model_name": "Logistic_Regression", "model": model, "threshold": 0.5}]

    df_groups = evaluate_by_group(results, dataset, "sex").set_index("group")
    assert math.isnan(df_groups.loc["AllLow", "auc"])
    assert df_groups.loc["AllLow", "n"] == 15
    assert df_groups.loc["AllLow", "positive_rate"] == 0.0
    assert not math.isnan(df_groups.loc["AllLow", "specificity"])
    assert math.isnan(df_groups.loc["AllLow", "sensitivity"])
    assert not math.isnan(df_groups.loc["Mixed", "auc"])
    saved = pd.read_csv(_artifact_dir / "group_metrics.csv")
    assert set(saved["group"]) == {"AllLow", "Mixed"}


def test_preprocess_cache_rebuilt_for_new_group_column(config):
    IncomeClassificationPipeline(config).preprocess()

    by_race = IncomeClassificationPipeline(replace(config, group_column="race"))
    dataset = by_race.preprocess(reprocess_choice="n")
    assert dataset["group_column"] == "race"
    assert set(dataset["groups_test"]) <= {"White", "Black", "Asian-Pac-Islander"}


def test_metric_heatmap_shown_when_requested(monkeypatch, _artifact_dir):
    shown = []
    monkeypatch.setattr(plt, "show", lambda: shown.append(True))

    path = create_metric_heatmap(_results_table(), show=True)
    assert shown == [True]
    assert path.exists()
