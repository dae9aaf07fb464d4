# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
from .metrics import METRIC_COLUMNS, evaluate_predictions
from .trainer import RESULT_COLUMNS
from src.utils.paths import artifact_path

# Metrics where smaller is better
LOWER_IS_BETTER = {'log_loss'}


def summarize_results(results):
    """Rank models by test AUC and report the best model for each metric"""
    if isinstance(results, pd.DataFrame):
        df_results = results
    else:
        df_results = pd.DataFrame([{col: r[col] for col in RESULT_COLUMNS} for r in results])
    if df_results.empty:
        return df_results, {}

    df_results = df_results.sort_values('auc', ascending=False).reset_index(drop=True)

    best = {}
    for metric in METRIC_COLUMNS:
        scores = df_results[metric]
        if scores.isna().all():
            continue
        idx = scores.idxmin() if metric in LOWER_IS_BETTER else scores.idxmax()
        best[metric] = (df_results.loc[idx, 'model_name'], float(scores[idx]))

    print("\n[INFO] Best model per metric:")
    for metric, (model_name, score) in best.items():
        print(f"  {metric:12} -> {model_name} ({score:.4f})")

    return df_results, best


def evaluate_by_group(results, dataset, group_column='sex'):
    """Score every trained model separately within each level of ``group_column``"""
    groups = dataset.get('groups_test')
    if groups is None:
        print("\n[WARN] No group labels for the test split; skipping subgroup analysis")
        return pd.DataFrame()

    X_test = dataset['X_test']
    y_test = np.asarray(dataset['y_test'])
    groups = np.asarray(groups)

    print(f"\n[INFO] Performance by {group_column}:")
    print("-" * 50)
    for level in np.unique(groups):
        mask = groups == level
        print(f"  {level}: {mask.sum():,} rows, positive rate {y_test[mask].mean():.2%}")

    group_rows = []
    for result in results:
        model = result['model']
        model_name = result['model_name']
        y_proba = model.predict_proba(X_test)[:, 1]

        print(f"\n  {model_name} (threshold {result['threshold']:.2f}):")
        for level in np.unique(groups):
            mask = groups == level
            metrics = evaluate_predictions(y_test[mask], y_proba[mask], result['threshold'])
            print(f"    {level:12} AUC: {metrics['auc']:.4f} | F1: {metrics['f1']:.4f} | "
                  f"Sensitivity: {metrics['sensitivity']:.3f} | Specificity: {metrics['specificity']:.3f}")

            group_rows.append({
                'model_name': model_name,
                'group_column': group_column,
                'group': level,
                'n': int(mask.sum()),
                'positive_rate': float(y_test[mask].mean()),
                **{metric: metrics[metric] for metric in METRIC_COLUMNS}
            })

    df_groups = pd.DataFrame(group_rows)
    if not df_groups.empty:
        df_groups.to_csv(artifact_path('group_metrics.csv'), index=False)
        print(f"\n[SAVED] Subgroup metrics saved to 'group_metrics.csv'")

        # Largest AUC spread between groups, per model
        gaps = df_groups.groupby('model_name')['auc'].agg(lambda s: s.max() - s.min())
        print(f"\n[INFO] AUC gap across {group_column} levels:")
        for model_name, gap in gaps.items():
            print(f"  {model_name}: {gap:.4f}")

    return df_groups
