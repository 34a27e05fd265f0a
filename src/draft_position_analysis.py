"""
NBA Draft Position Model
========================

Can career biometrics and box-score averages explain where a player was
drafted?

Pipeline (runs once, top to bottom):
1. Load season rows, drop undrafted players, keep 1996+ draft classes
2. Average each player's seasons into one career row
3. Model selection: best subsets (Cp) vs stepwise AIC / BIC, nested F-tests
4. Residual diagnostics, Box-Cox transform of draft_number, retest normality
5. Pairwise interactions, rejected when they blow up VIF
6. Drop the single most influential player (Cook's distance) and refit
7. Coefficient report + interpretation

Usage (from the repo root):
    python src/draft_position_analysis.py
"""

import os
import warnings
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from career_data import aggregate_careers, filter_drafted, load_seasons
from coefficient_report import format_report
from diagnostic_plots import (
    plot_boxcox_profile,
    plot_cooks_distance,
    plot_cp_by_size,
    plot_normal_qq,
    plot_residuals_vs_fitted,
)
from draft_config import (
    ALPHA,
    DATA_PATH,
    FIRST_DRAFT_YEAR,
    INTERACTION_PREDICTORS,
    LAST_DRAFT_YEAR,
    MAX_SUBSET_SIZE,
    OUTPUT_DIR,
    PREDICTORS,
    RESPONSE,
    VIF_THRESHOLD,
)
from influence_pruning import PruneOutcome, prune_most_influential
from interaction_check import InteractionOutcome, check_interactions
from model_fitting import FittedModel
from model_selection import SelectionOutcome, select_model
from residual_diagnostics import TransformOutcome, transform_response


@dataclass(frozen=True, eq=False)
class AnalysisResult:
    seasons: pd.DataFrame = field(repr=False)
    drafted: pd.DataFrame = field(repr=False)
    careers: pd.DataFrame = field(repr=False)
    selection: SelectionOutcome = field(repr=False)
    transform: TransformOutcome = field(repr=False)
    interactions: InteractionOutcome = field(repr=False)
    prune: PruneOutcome = field(repr=False)
    plots: List[str] = field(default_factory=list)

    @property
    def final_model(self) -> FittedModel:
        return self.prune.model


def run_analysis(data_path=DATA_PATH, output_dir=None, first_year=FIRST_DRAFT_YEAR,
                 last_year=LAST_DRAFT_YEAR, predictors=PREDICTORS, max_size=MAX_SUBSET_SIZE,
                 interaction_predictors=INTERACTION_PREDICTORS, alpha=ALPHA,
                 vif_threshold=VIF_THRESHOLD):
    """
    Run every stage once and return all intermediate results.

    Plots are only rendered when output_dir is given.
    """
    seasons = load_seasons(data_path)
    drafted = filter_drafted(seasons, first_year=first_year, last_year=last_year)
    careers = aggregate_careers(drafted)

    selection = select_model(careers, response=RESPONSE, predictors=predictors,
                             max_size=max_size, alpha=alpha)
    transform = transform_response(selection.finalist, alpha=alpha)
    interactions = check_interactions(transform.model, predictors=interaction_predictors,
                                      alpha=alpha, vif_threshold=vif_threshold)
    prune = prune_most_influential(interactions.model)

    plots = []
    if output_dir is not None:
        plots = [
            plot_cp_by_size(selection.subsets, output_dir),
            plot_residuals_vs_fitted(selection.finalist, output_dir, 'residuals_vs_fitted_raw.png'),
            plot_normal_qq(selection.finalist, output_dir, 'normal_qq_raw.png'),
            plot_boxcox_profile(transform.boxcox, output_dir),
            plot_residuals_vs_fitted(transform.model, output_dir, 'residuals_vs_fitted_transformed.png'),
            plot_normal_qq(transform.model, output_dir, 'normal_qq_transformed.png'),
            plot_cooks_distance(prune, output_dir),
        ]

    return AnalysisResult(
        seasons=seasons,
        drafted=drafted,
        careers=careers,
        selection=selection,
        transform=transform,
        interactions=interactions,
        prune=prune,
        plots=plots,
    )


if __name__ == "__main__":
    warnings.filterwarnings('ignore')

    print("=" * 80)
    print("NBA DRAFT POSITION MODEL")
    print("=" * 80)
    print(f"\nLoading data from: {DATA_PATH}")
    print(f"Writing plots to: {OUTPUT_DIR}/\n")

    result = run_analysis(DATA_PATH, output_dir=OUTPUT_DIR)
    report = format_report(result)
    print(report)

    report_path = os.path.join(OUTPUT_DIR, 'model_report.txt')
    with open(report_path, 'w') as f:
        f.write(report)
    print(f"Saved: {report_path}")
