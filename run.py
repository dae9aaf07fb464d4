# -*- coding: utf-8 -*-
"""
Census Income Classification - Main Entry Point

This script runs the complete income classification pipeline:
1. Load and prepare the Adult census data (data/adult.csv)
2. Train up to 6 models with cross-validated AUC and F1 threshold tuning
3. Evaluate every model on the held-out test split, overall and by group
4. Generate comparison visualizations

Usage:
    python run.py                    # Interactive mode

    # Non-interactive mode with environment variables:
    export MODEL_SELECTION=0         # 0=all, 99=quick mode, or e.g. 1,3,5
    export REPROCESS=n               # y=reprocess, n=use cache
    export INCOME_DATA=path/to.csv   # defaults to data/adult.csv
    export INCOME_OUTPUT_DIR=out     # defaults to artifact/
    python run.py

    Also read: CV_FOLDS, TEST_SIZE, RANDOM_STATE, USE_SMOTE, GROUP_COLUMN, SHOW_PLOTS

Models (6 total):
    - Linear: Logistic Regression, Elastic Net
    - Tree-based: Random Forest, Gradient Boosting, LightGBM
    - Neural: single hidden layer perceptron
"""

import logging
import sys
from src.income.income_pipeline import IncomeClassificationPipeline
from src.utils.config import PipelineConfig
from src.utils.paths import artifact_root


def main():
    """Run the income classification pipeline."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    print("=" * 80)
    print("CENSUS INCOME CLASSIFICATION")
    print("=" * 80)
    print("\nPredicts whether an individual's income exceeds $50K.")
    print("Metrics: AUC, F1, accuracy, sensitivity, specificity, precision, log loss\n")

    try:
        config = PipelineConfig.from_env()
        pipeline = IncomeClassificationPipeline(config)
        pipeline.run()

        print("\n" + "=" * 80)
        print("[OK] PIPELINE COMPLETED SUCCESSFULLY!")
        print("=" * 80)
        root = artifact_root()
        print("\nGenerated files:")
        print(f"  - {root / 'model_results.csv'}: Model performance metrics")
        print(f"  - {root / 'group_metrics.csv'}: Metrics by group")
        print(f"  - {root / 'figures' / 'metric_heatmap.png'}: Models x metrics heat-map")
        print(f"  - {root / 'figures' / 'roc_curves.png'}: ROC curves")
        print(f"  - {root / 'figures' / 'threshold_sweep.png'}: F1 vs threshold")
        print(f"  - {root / 'figures' / 'model_comparison.png'}: Metric comparison grid")
        print(f"  - {root / 'figures' / 'group_analysis.png'}: Metrics by group")
        print(f"  - {root / 'models'}/*.pkl: Saved model files")
        print(f"  - {root / 'preprocessor.pkl'}: Preprocessor object")

    except Exception as e:
        print(f"\n[ERROR] Pipeline failed: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
