from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from src.utils.config import PipelineConfig

HYPHEN_COLUMNS = [
    "age", "workclass", "fnlwgt", "education", "education-num",
    "marital-status", "occupation", "relationship", "race", "sex",
    "capital-gain", "capital-loss", "hours-per-week", "native-country",
    "income",
]

EDUCATION = {
    "HS-grad": 9, "Some-college": 10, "Bachelors": 13, "Masters": 14,
    "11th": 7, "Assoc-voc": 11, "Doctorate": 16,
}


def make_adult_frame(n=400, seed=0):
    """Adult-like records whose label depends on education, hours, age and capital gain."""
    rng = np.random.RandomState(seed)
    education = rng.choice(list(EDUCATION), size=n)
    education_num = np.array([EDUCATION[e] for e in education])
    age = rng.randint(18, 70, size=n)
    hours = np.clip(rng.normal(40, 10, size=n).round(), 5, 99).astype(int)
    capital_gain = np.where(rng.rand(n) < 0.1, rng.randint(1000, 20000, size=n), 0)
    capital_loss = np.where(rng.rand(n) < 0.05, rng.randint(100, 2500, size=n), 0)
    marital = rng.choice(["Married-civ-spouse", "Never-married", "Divorced", "Widowed"], size=n)
    sex = rng.choice(["Male", "Female"], size=n)

    score = (
        0.45 * (education_num - 10)
        + 0.05 * (hours - 40)
        + 0.04 * (age - 40)
        + 1.2 * (marital == "Married-civ-spouse")
        + 2.0 * (capital_gain > 0)
        - 3.0
    )
    prob = 1 / (1 + np.exp(-score))
    income = np.where(rng.rand(n) < prob, ">50K", "<=50K")

    workclass = rng.choice(["Private", "Self-emp-not-inc", "Local-gov", "?"], size=n, p=[0.7, 0.1, 0.15, 0.05])
    occupation = rng.choice(["Prof-specialty", "Craft-repair", "Sales", "Exec-managerial", "?"], size=n,
                            p=[0.25, 0.25, 0.2, 0.25, 0.05])
    country = rng.choice(["United-States", "Mexico", "India", "?"], size=n, p=[0.85, 0.07, 0.05, 0.03])

    return pd.DataFrame({
        "age": age,
        "workclass": workclass,
        "fnlwgt": rng.randint(20000, 500000, size=n),
        "education": education,
        "education-num": education_num,
        "marital-status": marital,
        "occupation": occupation,
        "relationship": rng.choice(["Husband", "Not-in-family", "Own-child", "Wife"], size=n),
        "race": rng.choice(["White", "Black", "Asian-Pac-Islander"], size=n, p=[0.8, 0.12, 0.08]),
        "sex": sex,
        "capital-gain": capital_gain,
        "capital-loss": capital_loss,
        "hours-per-week": hours,
        "native-country": country,
        "income": income,
    }, columns=HYPHEN_COLUMNS)


@pytest.fixture(autouse=True)
def _artifact_dir(tmp_path, monkeypatch):
    # Keep every artifact a test writes out of the repository
    out = tmp_path / "artifact"
    monkeypatch.setenv("INCOME_OUTPUT_DIR", str(out))
    for name in ("MODEL_SELECTION", "REPROCESS", "INCOME_DATA", "CV_FOLDS", "TEST_SIZE",
                 "RANDOM_STATE", "USE_SMOTE", "GROUP_COLUMN", "SHOW_PLOTS"):
        monkeypatch.delenv(name, raising=False)
    return out


@pytest.fixture()
def adult_frame():
    return make_adult_frame()


@pytest.fixture()
def adult_csv(tmp_path, adult_frame) -> Path:
    path = tmp_path / "adult.csv"
    adult_frame.to_csv(path, index=False)
    return path


@pytest.fixture()
def config(adult_csv) -> PipelineConfig:
    return PipelineConfig(data_file=adult_csv, cv_folds=3, model_selection="99", reprocess="n")


@pytest.fixture()
def dataset(config):
    from src.income.data_preprocessor import DataPreprocessor

    return DataPreprocessor(config).preprocess_and_save()
