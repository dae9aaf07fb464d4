# -*- coding: utf-8 -*-
"""
Data Preprocessor Module for Census Income Classification
=========================================================

This module handles all data preparation for the income classification
pipeline. It performs the following key operations:

1. Data Loading: Reads the Adult census CSV in any of its common layouts
2. Cleaning: Drops duplicates and unlabeled rows
3. Train/Test Split: Stratified split on the binary income label, then
   imputation of missing values ('?' in the raw file) from the training rows
4. Feature Engineering: Drops redundant columns, collapses rare countries,
   derives net capital
5. Windowizing: Yeo-Johnson power transformation of skewed numeric features
6. Categorical Encoding: Binary LabelEncoding or Top-N One-Hot encoding
7. StandardScaler: Normalizes features to zero mean, unit variance

Data Flow:
----------
    Raw CSV -> Clean -> Split -> Impute -> Engineer -> Windowize -> Encode -> Scale

Output:
-------
    - preprocessed_data.pkl: The train/test dataset dictionary
    - preprocessor.pkl: Fitted preprocessor object for scoring new records
"""

# =============================================================================
# IMPORTS
# =============================================================================
import logging
import pickle
import re
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import LabelEncoder, PowerTransformer, StandardScaler

from src.utils.config import PipelineConfig
from src.utils.paths import artifact_path

logger = logging.getLogger(__name__)

# Column order of the headerless UCI files (adult.data / adult.test)
UCI_COLUMNS = [
    'age', 'workclass', 'fnlwgt', 'education', 'education_num',
    'marital_status', 'occupation', 'relationship', 'race', 'sex',
    'capital_gain', 'capital_loss', 'hours_per_week', 'native_country',
    'income'
]

# Survey sampling weight and the text twin of education_num
REDUNDANT_COLUMNS = ['fnlwgt', 'education']


def normalize_column_name(name: str) -> str:
    """'marital-status', 'marital.status' and 'Marital Status' all become 'marital_status'."""
    return re.sub(r'[^0-9a-z]+', '_', str(name).strip().lower()).strip('_')


def text_columns(df: pd.DataFrame) -> List[str]:
    """Non-numeric columns, whether stored as object, string or category."""
    return [c for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]


# =============================================================================
# DATA PREPROCESSOR CLASS
# =============================================================================
class DataPreprocessor:
    """
    Handles loading, cleaning, feature engineering, transformation and encoding
    of the Adult census income data.

    Every transformer is fitted on the training split only and kept on the
    instance, so ``transform()`` can score new records exactly the way the
    test split was prepared.

    Attributes
    ----------
    config : PipelineConfig
        Run configuration (target column, positive label, split, encoding).

    fill_values : dict
        Column -> imputation value (mode for categoricals, median for numerics).

    power_transformers : dict
        Column -> fitted Yeo-Johnson PowerTransformer for skewed numerics.

    label_encoders : dict
        Column -> fitted LabelEncoder for binary categoricals.

    onehot_categories : dict
        Column -> list of the top-N training categories that got indicator columns.

    scaler : StandardScaler
        Scaler fitted on the encoded training matrix.

    feature_names : list
        Column names of the final feature matrix, in order.

    Example Usage
    -------------
    >>> from src.income.data_preprocessor import DataPreprocessor
    >>> from src.utils.paths import data_path
    >>>
    >>> preprocessor = DataPreprocessor()
    >>> dataset = preprocessor.preprocess_and_save(data_path('adult.csv'))
    >>> X_train, y_train = dataset['X_train'], dataset['y_train']
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

        # Fitted state
        self.fill_values = {}
        self.power_transformers = {}
        self.label_encoders = {}
        self.onehot_categories = {}
        self.scaler = StandardScaler()
        self.feature_names = []


    def load_data(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Load the census CSV and normalize it to canonical column names.

        Three layouts are recognized:
            - UCI adult.data / adult.test: no header row, comma + space separated,
              adult.test starts with a '|1x3 Cross validator' line and its labels
              carry a trailing '.'
            - Hyphenated header: 'marital-status', 'hours-per-week', ...
            - Kaggle header: 'marital.status', 'hours.per.week', ...

        Missing values are encoded as '?' in every layout and become NaN.

        Raises
        ------
        ValueError
            If the target column cannot be found.
        """
        print(f"Loading dataset from {path}...")
        target = self.config.target_column

        df = pd.read_csv(path, skipinitialspace=True, comment='|')
        df.columns = [normalize_column_name(c) for c in df.columns]

        if target not in df.columns and len(df.columns) == len(UCI_COLUMNS):
            # First data row was consumed as a header
            df = pd.read_csv(path, header=None, names=UCI_COLUMNS,
                             skipinitialspace=True, comment='|')

        if target not in df.columns:
            raise ValueError(
                f"Target column '{target}' not found; columns are {list(df.columns)}"
            )

        for col in text_columns(df):
            df[col] = df[col].str.strip()
        df = df.replace('?', np.nan)
        if not pd.api.types.is_numeric_dtype(df[target]):
            df[target] = df[target].str.rstrip('.')

        print(f"  Dataset shape: {df.shape}")
        return df


    def encode_target(self, labels: pd.Series) -> np.ndarray:
        """
        Map the income label to 1 (above the threshold) / 0 (otherwise).

        Raises
        ------
        ValueError
            If only one class remains after encoding.
        """
        positive = self.config.positive_label
        y = (labels.astype(str).str.strip().str.rstrip('.') == positive).astype(int).to_numpy()
        if len(np.unique(y)) < 2:
            raise ValueError(
                f"Target '{self.config.target_column}' has a single class "
                f"(positive label '{positive}'); binary classification needs both"
            )
        return y


    def clean_data(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop rows without a label and duplicate records."""
        target = self.config.target_column
        n_before = len(df)
        if target in df.columns:
            df = df.dropna(subset=[target])
        df = df.drop_duplicates().reset_index(drop=True)
        print(f"  Removed {n_before - len(df):,} duplicate/unlabeled rows")
        return df


    def impute_missing(self, train: pd.DataFrame,
                       test: Optional[pd.DataFrame] = None) -> Tuple[pd.DataFrame, Optional[pd.DataFrame]]:
        """
        Fill missing feature values: column mode for categoricals, median for
        numerics.

        Fill values come from the training rows only and are remembered for
        ``transform()``. Categorical gaps in the raw file sit in workclass,
        occupation and native_country.
        """
        features = [c for c in train.columns if c != self.config.target_column]
        missing = train[features].isnull().sum()
        missing = missing[missing > 0]
        if not missing.empty:
            print(f"  Imputing missing values in: {', '.join(missing.index)}")

        train = train.copy()
        test = test.copy() if test is not None else None
        for col in features:
            if pd.api.types.is_numeric_dtype(train[col]):
                self.fill_values[col] = train[col].median()
            else:
                mode = train[col].mode()
                self.fill_values[col] = mode.iloc[0] if not mode.empty else 'Missing'
            train[col] = train[col].fillna(self.fill_values[col])
            if test is not None and col in test.columns:
                test[col] = test[col].fillna(self.fill_values[col])

        return train, test


    def engineer_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Minor feature preparation.

        Engineered Features
        -------------------
            - fnlwgt, education: dropped (sampling weight / duplicate of education_num)
            - native_country: collapsed to 'United-States' vs 'Other'
              (~90% of records are US; the remaining 40 countries are sparse)
            - capital_net: capital_gain - capital_loss
        """
        df = df.drop(columns=[c for c in REDUNDANT_COLUMNS if c in df.columns])

        if 'native_country' in df.columns:
            df['native_country'] = np.where(
                df['native_country'] == 'United-States', 'United-States', 'Other'
            )

        if 'capital_gain' in df.columns and 'capital_loss' in df.columns:
            df['capital_net'] = df['capital_gain'] - df['capital_loss']

        return df


    def apply_windowizing(self, train: pd.DataFrame,
                          test: Optional[pd.DataFrame] = None) -> Tuple[pd.DataFrame, Optional[pd.DataFrame]]:
        """
        Apply Yeo-Johnson power transformation to skewed numerical features.

        Skewness is measured on the training split; columns with
        |skewness| > ``config.skew_threshold`` are transformed. In the Adult
        data this catches capital_gain, capital_loss and capital_net, which
        are zero for most records with a long right tail.

        Yeo-Johnson is used rather than Box-Cox because capital_net can be
        negative.
        """
        print("  Applying windowizing (Yeo-Johnson transformation) to skewed features...")
        numeric_cols = train.select_dtypes(include=[np.number]).columns.tolist()

        transformed_cols = []
        for col in numeric_cols:
            if train[col].nunique() < 2:
                continue
            skewness = train[col].skew()
            if abs(skewness) <= self.config.skew_threshold:
                continue

            pt = PowerTransformer(method='yeo-johnson', standardize=False)
            try:
                with warnings.catch_warnings():
                    warnings.simplefilter('ignore', RuntimeWarning)
                    train[col] = pt.fit_transform(train[[col]].astype(float)).ravel()
            except ValueError as e:
                logger.warning("Skipping power transform of %s: %s", col, e)
                continue
            if test is not None:
                test[col] = pt.transform(test[[col]].astype(float)).ravel()
            self.power_transformers[col] = pt
            transformed_cols.append(col)

        print(f"    Transformed {len(transformed_cols)} skewed features")
        if transformed_cols:
            print(f"    Features: {', '.join(transformed_cols)}")

        return train, test


    def encode_categorical(self, train: pd.DataFrame,
                           test: Optional[pd.DataFrame] = None) -> Tuple[pd.DataFrame, Optional[pd.DataFrame]]:
        """
        Encode categorical variables using appropriate strategies.

        Strategy:
        - Binary columns (2 unique training values): LabelEncoder (0/1)
        - Multi-category columns: Top-N One-Hot Encoding, N = config.top_n_categories

        Categories are learned from the training split. A test value unseen
        in a binary column maps to the first training class; an unseen value
        in a one-hot column gets all-zero indicators.
        """
        categorical_cols = text_columns(train)
        print(f"  Encoding {len(categorical_cols)} categorical columns...")

        for col in categorical_cols:
            if train[col].nunique() <= 2:
                le = LabelEncoder()
                train[col] = le.fit_transform(train[col].astype(str))
                self.label_encoders[col] = le
                if test is not None:
                    test[col] = self._label_encode(le, test[col])
            else:
                top_cats = train[col].value_counts().head(self.config.top_n_categories).index.tolist()
                self.onehot_categories[col] = top_cats
                train = self._one_hot(train, col, top_cats)
                if test is not None:
                    test = self._one_hot(test, col, top_cats)

        return train, test


    @staticmethod
    def _label_encode(le: LabelEncoder, values: pd.Series) -> np.ndarray:
        values = values.astype(str)
        unseen = ~values.isin(le.classes_)
        if unseen.any():
            logger.warning("%d unseen values in %s mapped to '%s'",
                           int(unseen.sum()), values.name, le.classes_[0])
            values = values.where(~unseen, le.classes_[0])
        return le.transform(values)


    @staticmethod
    def _one_hot(df: pd.DataFrame, col: str, categories: List[str]) -> pd.DataFrame:
        indicators = pd.DataFrame(
            {f"{col}_{cat}": (df[col] == cat).astype(int) for cat in categories},
            index=df.index
        )
        return pd.concat([df.drop(columns=col), indicators], axis=1)


    def transform(self, df: pd.DataFrame) -> np.ndarray:
        """
        Prepare new raw records with the transformers fitted during
        ``preprocess_and_save()``. The target column is ignored if present.
        """
        if not self.feature_names:
            raise ValueError("DataPreprocessor has not been fitted; run preprocess_and_save() first")

        X = df.drop(columns=[self.config.target_column], errors='ignore').copy()
        X.columns = [normalize_column_name(c) for c in X.columns]
        for col in text_columns(X):
            X[col] = X[col].str.strip()
        for col, value in self.fill_values.items():
            if col in X.columns:
                X[col] = X[col].replace('?', np.nan).fillna(value)
        X = self.engineer_features(X)

        for col, pt in self.power_transformers.items():
            X[col] = pt.transform(X[[col]].astype(float)).ravel()
        for col, le in self.label_encoders.items():
            X[col] = self._label_encode(le, X[col])
        for col, categories in self.onehot_categories.items():
            X = self._one_hot(X, col, categories)

        missing = [c for c in self.feature_names if c not in X.columns]
        if missing:
            raise ValueError(f"Input is missing columns required by the model: {missing}")
        return self.scaler.transform(X[self.feature_names].astype(float))


    def preprocess_and_save(self, path: Optional[Union[str, Path]] = None) -> Dict:
        """
        Main preprocessing function that executes the complete stage.

        Parameters
        ----------
        path : str or Path, optional
            CSV to load. Defaults to ``config.data_file``.

        Returns
        -------
        dict
            - X_train: Scaled training features (numpy array)
            - X_test: Scaled test features (numpy array)
            - y_train: Training labels (numpy array of 0/1)
            - y_test: Test labels (numpy array of 0/1)
            - features: List of feature names
            - scaler: Fitted StandardScaler
            - groups_test: Raw ``config.group_column`` values of the test rows,
              or None when the column is absent
            - group_column: The column ``groups_test`` was taken from

        Output Files
        ------------
        - preprocessed_data.pkl: the returned dictionary
        - preprocessor.pkl: this fitted preprocessor
        """
        print("\n" + "="*60)
        print("STEP 1: DATA PREPROCESSING")
        print("="*60)
        config = self.config
        path = path if path is not None else config.data_file

        print("\n1.1 Loading data...")
        df = self.load_data(path)

        print("1.2 Cleaning data...")
        df = self.clean_data(df)
        y = self.encode_target(df[config.target_column])
        print(f"  Positive rate ({config.positive_label}): {y.mean():.2%}")

        print("1.3 Splitting train/test...")
        X_train, X_test, y_train, y_test = train_test_split(
            df.drop(columns=[config.target_column]), y,
            test_size=config.test_size, random_state=config.random_state, stratify=y
        )

        print("1.4 Imputing missing values...")
        X_train, X_test = self.impute_missing(X_train, X_test)
        X_train = self.engineer_features(X_train)
        X_test = self.engineer_features(X_test)

        groups_test = None
        if config.group_column:
            if config.group_column in X_test.columns:
                groups_test = X_test[config.group_column].astype(str).to_numpy()
            else:
                logger.warning("Group column '%s' not in data; subgroup analysis disabled",
                               config.group_column)

        print("1.5 WINDOWIZING - Power transformation for skewed features...")
        X_train, X_test = self.apply_windowizing(X_train, X_test)

        print("1.6 Encoding categorical features...")
        X_train, X_test = self.encode_categorical(X_train, X_test)
        X_test = X_test[X_train.columns]
        self.feature_names = X_train.columns.tolist()

        print("1.7 Scaling features...")
        X_train_scaled = self.scaler.fit_transform(X_train.astype(float))
        X_test_scaled = self.scaler.transform(X_test.astype(float))

        dataset = {
            'X_train': X_train_scaled,
            'X_test': X_test_scaled,
            'y_train': y_train,
            'y_test': y_test,
            'features': self.feature_names,
            'scaler': self.scaler,
            'groups_test': groups_test,
            'group_column': config.group_column
        }

        print("\n1.8 Saving preprocessed data...")
        with open(artifact_path('preprocessed_data.pkl'), 'wb') as f:
            pickle.dump(dataset, f)
        with open(artifact_path('preprocessor.pkl'), 'wb') as f:
            pickle.dump(self, f)

        print("[OK] Preprocessing complete! Saved to 'preprocessed_data.pkl'")
        print(f"   Train {X_train_scaled.shape}, Test {X_test_scaled.shape}, "
              f"{len(self.feature_names)} features")

        return dataset
