# -*- coding: utf-8 -*-
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from .metrics import METRIC_COLUMNS
from src.utils.paths import fig_path


def _finish(fig, filename, show):
    path = fig_path(filename)
    fig.tight_layout()
    fig.savefig(path, dpi=100, bbox_inches='tight')
    if show:
        plt.show()
    plt.close(fig)
    print(f"\n[INFO] Visualization saved to '{filename}'")
    return path


def create_metric_heatmap(df_results, show=False):
    """Heat-map of every metric (columns) for every model (rows)"""
    table = df_results.set_index('model_name')[METRIC_COLUMNS]

    fig, ax = plt.subplots(figsize=(10, 0.6 * len(table) + 2))
    sns.heatmap(table.astype(float), annot=True, fmt='.3f', cmap='viridis',
                cbar_kws={'label': 'Score'}, ax=ax)
    ax.set_title('Model Performance by Metric (log loss: lower is better)')
    ax.set_xlabel('Metric')
    ax.set_ylabel('Model')
    plt.setp(ax.get_xticklabels(), rotation=30, ha='right')
    return _finish(fig, 'metric_heatmap.png', show)


def create_roc_plot(results, show=False):
    """ROC curve of every model on the test split"""
    fig, ax = plt.subplots(figsize=(7, 6))
    for result in results:
        roc = result['roc']
        ax.plot(roc['fpr'], roc['tpr'], label=f"{result['model_name']} (AUC = {result['auc']:.4f})")
    ax.plot([0, 1], [0, 1], 'k--', label='Chance')
    ax.set_xlabel('False Positive Rate')
    ax.set_ylabel('True Positive Rate')
    ax.set_title('ROC Curves (test split)')
    ax.legend(loc='lower right')
    ax.grid(alpha=0.3)
    return _finish(fig, 'roc_curves.png', show)


def create_threshold_plot(results, show=False):
    """Out-of-fold F1 against decision threshold, chosen threshold marked"""
    fig, ax = plt.subplots(figsize=(8, 5))
    for result in results:
        sweep = result['sweep']
        line, = ax.plot(sweep['threshold'], sweep['f1'], label=result['model_name'])
        ax.axvline(result['threshold'], color=line.get_color(), linestyle=':', alpha=0.7)
    ax.set_xlabel('Decision Threshold')
    ax.set_ylabel('F1 Score (out-of-fold)')
    ax.set_title('Threshold Sweep')
    ax.set_xlim(0, 1)
    ax.legend()
    ax.grid(alpha=0.3)
    return _finish(fig, 'threshold_sweep.png', show)


def create_comparison_plots(df_results, show=False):
    """Create comparison visualizations"""
    fig, axes = plt.subplots(2, 2, figsize=(14, 10))

    # Plot 1: Test AUC vs CV AUC
    ax1 = axes[0, 0]
    x = np.arange(len(df_results))
    width = 0.35
    ax1.bar(x - width/2, df_results['auc'], width, label='Test AUC')
    ax1.bar(x + width/2, df_results['cv_auc'], width, yerr=df_results['cv_auc_std'],
            capsize=3, label='CV AUC')
    ax1.set_title('AUC: Test vs Cross-Validated')
    ax1.set_ylabel('AUC Score')
    ax1.set_xticks(x)
    ax1.set_xticklabels(df_results['model_name'], rotation=45, ha='right')
    ax1.legend()
    ax1.grid(axis='y', alpha=0.3)

    # Plot 2: Threshold metrics
    ax2 = axes[0, 1]
    df_results.set_index('model_name')[['f1', 'accuracy', 'precision']].plot(kind='bar', ax=ax2)
    ax2.set_title('F1, Accuracy and Precision at Tuned Threshold')
    ax2.set_ylabel('Score')
    ax2.set_xlabel('Model')
    ax2.grid(axis='y', alpha=0.3)
    plt.setp(ax2.xaxis.get_majorticklabels(), rotation=45, ha='right')

    # Plot 3: Sensitivity / specificity trade-off
    ax3 = axes[1, 0]
    ax3.scatter(1 - df_results['specificity'], df_results['sensitivity'], s=60)
    for _, row in df_results.iterrows():
        ax3.annotate(row['model_name'], (1 - row['specificity'], row['sensitivity']),
                     textcoords='offset points', xytext=(5, 5), fontsize=8)
    ax3.set_xlabel('1 - Specificity')
    ax3.set_ylabel('Sensitivity')
    ax3.set_title('Operating Points at Tuned Threshold')
    ax3.grid(alpha=0.3)

    # Plot 4: Log loss (lower is better)
    ax4 = axes[1, 1]
    ordered = df_results.sort_values('log_loss')
    y_pos = np.arange(len(ordered))
    ax4.barh(y_pos, ordered['log_loss'].values, color='orange')
    ax4.set_yticks(y_pos)
    ax4.set_yticklabels(ordered['model_name'])
    ax4.invert_yaxis()
    ax4.set_xlabel('Log Loss')
    ax4.set_title('Log Loss (lower is better)')
    ax4.grid(axis='x', alpha=0.3)

    return _finish(fig, 'model_comparison.png', show)


def create_group_plots(df_groups, show=False):
    """AUC and F1 for each model within each group level"""
    df = pd.DataFrame(df_groups)
    group_column = df['group_column'].iloc[0]

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    for ax, metric in zip(axes, ['auc', 'f1']):
        pivot = df.pivot_table(index='model_name', columns='group', values=metric, aggfunc='mean')
        pivot.plot(kind='bar', ax=ax)
        ax.set_xlabel('Model')
        ax.set_ylabel(metric.upper())
        ax.set_title(f'{metric.upper()} by {group_column}')
        ax.legend(title=group_column)
        ax.grid(axis='y', alpha=0.3)
        plt.setp(ax.xaxis.get_majorticklabels(), rotation=45, ha='right')

    return _finish(fig, 'group_analysis.png', show)
