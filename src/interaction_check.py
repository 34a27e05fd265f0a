"""
Interaction terms and multicollinearity.

Each pairwise interaction among the curated predictors is added to the
current model on its own and F-tested. Significant terms are then added
one at a time (lowest p first); a term is reverted if any VIF in the
enlarged model goes above the threshold.

p-values are not corrected for the number of pairs tested.
"""

from dataclasses import dataclass, field
from itertools import combinations

import numpy as np
import pandas as pd
from statsmodels.stats.outliers_influence import variance_inflation_factor

from draft_config import ALPHA, INTERACTION_PREDICTORS, VIF_THRESHOLD
from model_fitting import FittedModel, design_matrix, fit_candidate


@dataclass(frozen=True, eq=False)
class InteractionOutcome:
    tests: pd.DataFrame = field(repr=False)
    model: FittedModel = field(repr=False)

    @property
    def kept(self):
        return [tuple(term.split(':')) for term in self.tests.loc[self.tests['kept'], 'term']]


def variance_inflation(fitted):
    """VIF of every non-intercept term in the model's design."""
    X = design_matrix(fitted.candidate, fitted.data)
    values = X.to_numpy()
    vif = {col: variance_inflation_factor(values, i)
           for i, col in enumerate(X.columns) if col != 'const'}
    return pd.Series(vif, name='vif')


def candidate_pairs(fitted, predictors=INTERACTION_PREDICTORS):
    """Pairs from the curated list that are both main effects of the model."""
    present = [p for p in predictors if p in fitted.candidate.predictors]
    existing = {tuple(sorted(pair)) for pair in fitted.candidate.interactions}
    return [pair for pair in combinations(present, 2) if tuple(sorted(pair)) not in existing]


def check_interactions(fitted, predictors=INTERACTION_PREDICTORS, alpha=ALPHA,
                       vif_threshold=VIF_THRESHOLD):
    """
    F-test each candidate interaction against the model, then keep the
    significant ones that don't push any VIF over vif_threshold.

    Every pair is tested on its own against the incoming model. Significant
    pairs are then added cumulatively in order of p-value; a pair whose
    enlarged model has a VIF above the threshold is left out (its max_vif is
    still recorded). Returns the test table and the model with the kept
    interactions.
    """
    rows = []
    for pair in candidate_pairs(fitted, predictors):
        trial = fit_candidate(fitted.candidate.with_interaction(pair), fitted.data)
        f_stat, p_value, _ = trial.results.compare_f_test(fitted.results)
        rows.append({
            'term': f"{pair[0]}:{pair[1]}",
            'f_stat': float(f_stat),
            'p_value': float(p_value),
            'significant': bool(p_value < alpha),
            'max_vif': np.nan,
            'kept': False,
        })

    tests = pd.DataFrame(rows, columns=['term', 'f_stat', 'p_value', 'significant', 'max_vif', 'kept'])
    tests = tests.astype({'f_stat': float, 'p_value': float, 'significant': bool,
                          'max_vif': float, 'kept': bool})
    current = fitted

    significant = tests[tests['significant']].sort_values('p_value')
    for idx, row in significant.iterrows():
        pair = tuple(row['term'].split(':'))
        trial = fit_candidate(current.candidate.with_interaction(pair), current.data)
        max_vif = float(variance_inflation(trial).max())
        tests.loc[idx, 'max_vif'] = max_vif
        if max_vif <= vif_threshold:
            tests.loc[idx, 'kept'] = True
            current = trial

    return InteractionOutcome(tests=tests, model=current)
