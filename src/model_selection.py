"""
Model Selection - Best subsets (Mallow's Cp) and stepwise AIC / BIC
===================================================================

Three routes to a candidate model for draft_number:
1. Best subsets: exhaustive search, smallest subset with Cp close to p
2. Stepwise AIC: bidirectional search from the intercept-only model
3. Stepwise BIC: same search with a ln(n) penalty

Candidates are then compared with nested-model F-tests and the smallest
model that is not significantly beaten becomes the finalist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression
from sklearn.model_selection import KFold, cross_val_score

from draft_config import (
    ALPHA,
    CP_TOLERANCE,
    CV_FOLDS,
    CV_SEED,
    MAX_SUBSET_SIZE,
    PREDICTORS,
    RESPONSE,
)
from model_fitting import (
    CandidateModel,
    FittedModel,
    design_matrix,
    fit_candidate,
    least_squares_rss,
    response_vector,
)


@dataclass(frozen=True, eq=False)
class StepwiseResult:
    candidate: CandidateModel
    criterion: float
    path: pd.DataFrame = field(repr=False)


@dataclass(frozen=True)
class ModelComparison:
    smaller: str
    larger: str
    nested: bool
    f_stat: float
    p_value: float
    df_diff: float
    preferred: str


@dataclass(frozen=True, eq=False)
class SelectionOutcome:
    subsets: pd.DataFrame = field(repr=False)
    cp_choice: pd.Series = field(repr=False)
    stepwise_aic: StepwiseResult
    stepwise_bic: StepwiseResult
    candidates: Dict[str, FittedModel] = field(repr=False)
    cv_r2: Dict[str, float]
    comparisons: List[ModelComparison]
    finalist_label: str
    finalist: FittedModel


# ============================================================================
# BEST SUBSETS
# ============================================================================

def best_subsets(data, response=RESPONSE, predictors=PREDICTORS, max_size=MAX_SUBSET_SIZE):
    """
    Exhaustive best-subsets search.

    For each size 1..max_size keeps the predictor subset with the lowest RSS
    and reports R², adjusted R², Mallow's Cp and BIC for it. Cp uses the
    error variance of the full model:

        Cp = RSS / sigma2_full - n + 2p     (p counts the intercept)
    """
    predictors = list(predictors)
    y = response_vector(CandidateModel(predictors=(), response=response), data).to_numpy()
    X_all = design_matrix(CandidateModel(predictors=tuple(predictors), response=response), data)
    X_all = X_all[predictors].to_numpy()

    n = len(y)
    p_full = len(predictors) + 1
    if n <= p_full:
        raise ValueError(f"Need more than {p_full} rows for best subsets, got {n}")

    ones = np.ones((n, 1))
    sigma2 = least_squares_rss(np.column_stack([ones, X_all]), y) / (n - p_full)
    tss = float(((y - y.mean()) ** 2).sum())

    rows = []
    for size in range(1, min(max_size, len(predictors)) + 1):
        best_cols, best_rss = None, np.inf
        for cols in combinations(range(len(predictors)), size):
            rss = least_squares_rss(np.column_stack([ones, X_all[:, cols]]), y)
            if rss < best_rss:
                best_cols, best_rss = cols, rss

        p = size + 1
        rows.append({
            'size': size,
            'predictors': tuple(predictors[i] for i in best_cols),
            'rss': best_rss,
            'r2': 1 - best_rss / tss,
            'adj_r2': 1 - (best_rss / (n - p)) / (tss / (n - 1)),
            'cp': best_rss / sigma2 - n + 2 * p,
            'bic': n * np.log(best_rss / n) + p * np.log(n),
        })
    return pd.DataFrame(rows)


def choose_by_cp(subsets, tolerance=CP_TOLERANCE):
    """Smallest subset whose Cp is within tolerance of p; else the lowest Cp."""
    gap = subsets['cp'] - (subsets['size'] + 1)
    close = subsets[gap <= tolerance]
    if len(close) > 0:
        return close.sort_values('size').iloc[0]
    return subsets.loc[subsets['cp'].idxmin()]


# ============================================================================
# STEPWISE
# ============================================================================

def stepwise_select(data, response=RESPONSE, predictors=PREDICTORS, penalty=2.0):
    """
    Bidirectional stepwise search (like R's step()).

    Starts from the intercept-only model; every step tries each single
    addition from `predictors` and each single removal, and takes the move
    with the lowest -2*logLik + penalty*k. Stops when no move improves.
    penalty=2 gives AIC, penalty=log(n) gives BIC.
    """
    def score(selected):
        fitted = fit_candidate(CandidateModel(predictors=tuple(selected), response=response), data)
        k = fitted.results.df_model + 1
        return -2 * fitted.results.llf + penalty * k

    current = []
    current_score = score(current)
    path = [{'step': 0, 'action': 'start', 'term': None, 'criterion': current_score}]

    while True:
        moves = [('+', term, current + [term]) for term in predictors if term not in current]
        moves += [('-', term, [t for t in current if t != term]) for term in current]
        if not moves:
            break

        scored = [(score(selected), action, term, selected) for action, term, selected in moves]
        best_score, action, term, selected = min(scored, key=lambda m: m[0])
        if best_score >= current_score:
            break

        current, current_score = selected, best_score
        path.append({'step': len(path), 'action': action, 'term': term, 'criterion': best_score})

    return StepwiseResult(
        candidate=CandidateModel(predictors=tuple(current), response=response),
        criterion=current_score,
        path=pd.DataFrame(path),
    )


# ============================================================================
# NESTED F-TESTS
# ============================================================================

def compare_nested(smaller, larger, alpha=ALPHA, labels=('smaller', 'larger')):
    """
    RSS F-test of a smaller model against a larger one that contains it.

    The larger model is preferred only when p < alpha.
    """
    if not smaller.candidate.is_nested_in(larger.candidate):
        raise ValueError(f"{smaller.candidate.formula} is not nested in {larger.candidate.formula}")
    if set(smaller.candidate.terms) == set(larger.candidate.terms):
        raise ValueError("Cannot F-test a model against itself")
    if not smaller.data.index.equals(larger.data.index):
        raise ValueError("Nested comparison needs both models fitted on the same rows")

    f_stat, p_value, df_diff = larger.results.compare_f_test(smaller.results)
    return ModelComparison(
        smaller=labels[0],
        larger=labels[1],
        nested=True,
        f_stat=float(f_stat),
        p_value=float(p_value),
        df_diff=float(df_diff),
        preferred=labels[1] if p_value < alpha else labels[0],
    )


def choose_finalist(fitted_models, alpha=ALPHA):
    """
    Pick one model out of {label: FittedModel}.

    Models with the same predictor set are merged ("Cp/BIC"). Every pair
    where one model contains the other is F-tested; a model is beaten when
    some larger model containing it is significantly better (p < alpha).
    Among the models nobody beats, one that contains another survivor is
    dropped in favour of the smaller one. If more than one survivor is left
    they are not nested in each other, and the lowest AIC wins.

    Non-nested pairs are recorded too (no F-test, preferred = lower AIC).
    Returns (label, FittedModel, comparisons).
    """
    unique = {}
    for label, fitted in fitted_models.items():
        key = frozenset(fitted.candidate.terms)
        if key in unique:
            prev_label, prev = unique[key]
            unique[key] = (f"{prev_label}/{label}", prev)
        else:
            unique[key] = (label, fitted)

    ordered = sorted(unique.values(), key=lambda item: len(item[1].candidate.terms))
    comparisons = []
    beaten = set()

    for (small_label, small), (large_label, large) in combinations(ordered, 2):
        if small.candidate.is_nested_in(large.candidate):
            comparison = compare_nested(small, large, alpha=alpha, labels=(small_label, large_label))
            if comparison.preferred == large_label:
                beaten.add(small_label)
        else:
            comparison = ModelComparison(
                smaller=small_label, larger=large_label, nested=False,
                f_stat=np.nan, p_value=np.nan, df_diff=np.nan,
                preferred=small_label if small.aic <= large.aic else large_label,
            )
        comparisons.append(comparison)

    survivors = [(label, fitted) for label, fitted in ordered if label not in beaten]
    minimal = [
        (label, fitted) for label, fitted in survivors
        if not any(other is not fitted and other.candidate.is_nested_in(fitted.candidate)
                   for _, other in survivors)
    ]
    best_label, best = min(minimal, key=lambda item: item[1].aic)
    return best_label, best, comparisons


# ============================================================================
# CROSS-VALIDATION
# ============================================================================

def cross_validated_r2(candidate, data, folds=CV_FOLDS, seed=CV_SEED):
    """Mean k-fold R² of the candidate (on its transformed response scale)."""
    X = design_matrix(candidate, data).drop(columns='const')
    y = response_vector(candidate, data)
    if X.shape[1] == 0:
        return np.nan
    cv = KFold(n_splits=folds, shuffle=True, random_state=seed)
    scores = cross_val_score(LinearRegression(), X, y, cv=cv, scoring='r2')
    return float(scores.mean())


# ============================================================================
# FULL STAGE
# ============================================================================

def select_model(careers, response=RESPONSE, predictors=PREDICTORS, max_size=MAX_SUBSET_SIZE,
                 alpha=ALPHA, cp_tolerance=CP_TOLERANCE, folds=CV_FOLDS,
                 seed=CV_SEED) -> SelectionOutcome:
    """Run best subsets + stepwise AIC/BIC and settle on one finalist."""
    subsets = best_subsets(careers, response=response, predictors=predictors, max_size=max_size)
    cp_choice = choose_by_cp(subsets, tolerance=cp_tolerance)

    aic = stepwise_select(careers, response=response, predictors=predictors, penalty=2.0)
    bic = stepwise_select(careers, response=response, predictors=predictors,
                          penalty=np.log(len(careers)))

    candidates = {
        'Cp': fit_candidate(CandidateModel(predictors=cp_choice['predictors'], response=response), careers),
        'AIC': fit_candidate(aic.candidate, careers),
        'BIC': fit_candidate(bic.candidate, careers),
    }
    cv_r2 = {label: cross_validated_r2(f.candidate, careers, folds=folds, seed=seed)
             for label, f in candidates.items()}

    finalist_label, finalist, comparisons = choose_finalist(candidates, alpha=alpha)

    return SelectionOutcome(
        subsets=subsets,
        cp_choice=cp_choice,
        stepwise_aic=aic,
        stepwise_bic=bic,
        candidates=candidates,
        cv_r2=cv_r2,
        comparisons=comparisons,
        finalist_label=finalist_label,
        finalist=finalist,
    )


def candidate_summary(outcome: SelectionOutcome, labels: Optional[List[str]] = None):
    """One row per candidate: size, fit statistics and CV R²."""
    rows = []
    for label in labels or list(outcome.candidates):
        fitted = outcome.candidates[label]
        rows.append({
            'model': label,
            'n_predictors': len(fitted.candidate.terms),
            'adj_r2': fitted.results.rsquared_adj,
            'aic': fitted.aic,
            'bic': fitted.bic,
            'cv_r2': outcome.cv_r2[label],
            'predictors': ', '.join(fitted.candidate.terms),
        })
    return pd.DataFrame(rows)
