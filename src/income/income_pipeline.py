# -*- coding: utf-8 -*-
import gc, os, pickle
from typing import Optional
from .data_preprocessor import DataPreprocessor
from .trainer import IncomeModelTrainer
from .analysis import summarize_results, evaluate_by_group
from .visualize import (
    create_metric_heatmap, create_roc_plot, create_threshold_plot,
    create_comparison_plots, create_group_plots
)
from src.utils.config import PipelineConfig
from src.utils.paths import artifact_path

class IncomeClassificationPipeline:
    """
    Encapsulated income classification pipeline: preprocessing, model selection,
    training, evaluation, subgroup analysis and visualization.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def preprocess(self, reprocess_choice: Optional[str] = None):
        """Run preprocessing; reuse cache if available and the user declines reprocess."""
        print("\n" + "="*60)
        print("STEP 1: DATA PREPROCESSING")
        print("="*60)
        cache = artifact_path('preprocessed_data.pkl')
        if not os.path.exists(cache):
            return DataPreprocessor(self.config).preprocess_and_save()

        print("\n[FILE] Loading existing preprocessed data...")
        with open(cache, 'rb') as f:
            dataset = pickle.load(f)
        print("[OK] Data loaded successfully")

        # Group labels are cut from the raw column at preprocessing time
        if dataset.get('group_column') != self.config.group_column:
            print(f"[WARN] Cached groups are by '{dataset.get('group_column')}', not "
                  f"'{self.config.group_column}'; reprocessing")
            return DataPreprocessor(self.config).preprocess_and_save()

        if reprocess_choice is None:
            reprocess_choice = self.config.reprocess
        if reprocess_choice is None:
            reprocess_choice = input("\nDo you want to reprocess the data? (y/n): ").strip().lower()
        else:
            print(f"\nUsing non-interactive reprocess choice: {reprocess_choice}")
        if reprocess_choice == 'y':
            dataset = DataPreprocessor(self.config).preprocess_and_save()
        return dataset

    def select_models(self, selection: Optional[str] = None):
        """Return the trainer and its selected model instances."""
        trainer = IncomeModelTrainer(self.config)
        selected = trainer.select_models(selection)
        return trainer, selected

    def train_models(self, trainer, selected_models, dataset):
        """Train selected models and persist intermediate results."""
        print("\n" + "="*60)
        print(f"TRAINING {len(selected_models)} SELECTED MODELS")
        print("="*60)
        for idx, (model_name, model) in enumerate(selected_models.items(), 1):
            print(f"\n[MODEL] MODEL {idx}/{len(selected_models)}: {model_name}")
            if trainer.train_single_model(model_name, model, dataset) is None:
                print(f"\n[WARN] {model_name} skipped")
                continue
            trainer.save_results()
            print(f"\n[OK] {model_name} complete!")
            gc.collect()
        return trainer.results

    def analyze_groups(self, all_results, dataset):
        """Break model performance down by the configured group column."""
        print("\n" + "="*60)
        print(f"SUBGROUP ANALYSIS ({self.config.group_column})")
        print("="*60)
        return evaluate_by_group(all_results, dataset, self.config.group_column)

    def create_plots(self, all_results, df_results, df_groups=None):
        """Create and save every figure."""
        show = self.config.show_plots
        create_metric_heatmap(df_results, show=show)
        create_roc_plot(all_results, show=show)
        create_threshold_plot(all_results, show=show)
        create_comparison_plots(df_results, show=show)
        if df_groups is not None and not df_groups.empty:
            create_group_plots(df_groups, show=show)

    def run(self, selection: Optional[str] = None, reprocess_choice: Optional[str] = None):
        """
        Execute the complete sequential pipeline and return the results DataFrame.

        Args:
            selection: Non-interactive model selection string (e.g., '99')
            reprocess_choice: 'y'/'n' to control reprocessing without prompt
        """
        print("\n" + "="*80)
        print("CENSUS INCOME CLASSIFICATION PIPELINE")
        print("="*80)

        dataset = self.preprocess(reprocess_choice=reprocess_choice)
        trainer, selected_models = self.select_models(selection=selection)
        all_results = self.train_models(trainer, selected_models, dataset)

        if not all_results:
            raise RuntimeError("No model trained successfully; see errors above")

        df_groups = None
        if self.config.group_column:
            df_groups = self.analyze_groups(all_results, dataset)

        print("\n" + "="*80)
        print("FINAL RESULTS")
        print("="*80)
        df_results, _ = summarize_results(trainer.results_frame())

        print("\n[BEST] Model Performances (sorted by test AUC):")
        print(df_results[['model_name', 'auc', 'cv_auc', 'f1', 'accuracy',
                          'sensitivity', 'specificity', 'precision', 'log_loss',
                          'threshold']].to_string(float_format=lambda v: f"{v:.4f}"))

        best_overall = df_results.iloc[0]
        print(f"\n[STAR] BEST MODEL OVERALL: {best_overall['model_name']}")
        print(f"   AUC Score: {best_overall['auc']:.4f} (CV {best_overall['cv_auc']:.4f})")
        print(f"   F1 @ {best_overall['threshold']:.2f}: {best_overall['f1']:.4f}")

        self.create_plots(all_results, df_results, df_groups)

        return df_results
