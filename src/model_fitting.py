"""
Model records and OLS fitting.

A CandidateModel is an immutable description of a linear model (response,
response transform, predictors, interaction pairs). Fitting one returns a
FittedModel that carries the statsmodels results and the rows it was
trained on. Every stage of the analysis produces new records instead of
mutating a "current model".
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm

from draft_config import RESPONSE


# Box-Cox ladder: power -> transform name
POWER_LADDER = {
    -1.0: 'inverse',
    -0.5: 'inverse_sqrt',
    0.0: 'log',
    0.5: 'sqrt',
    1.0: 'identity',
    2.0: 'square',
}

RESPONSE_TRANSFORMS = {
    'identity': lambda y: y,
    'sqrt': np.sqrt,
    'log': np.log,
    'inverse': lambda y: 1.0 / y,
    'inverse_sqrt': lambda y: 1.0 / np.sqrt(y),
    'square': np.square,
}

# Transforms that reverse the ordering of the response
DECREASING_TRANSFORMS = {'inverse', 'inverse_sqrt'}


@dataclass(frozen=True)
class CandidateModel:
    predictors: Tuple[str, ...]
    response: str = RESPONSE
    transform: str = 'identity'
    interactions: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        if self.transform not in RESPONSE_TRANSFORMS:
            raise ValueError(f"Unknown response transform: {self.transform}")
        object.__setattr__(self, 'predictors', tuple(self.predictors))
        object.__setattr__(self, 'interactions', tuple(tuple(p) for p in self.interactions))

    @property
    def terms(self) -> Tuple[str, ...]:
        """Design columns in order: predictors, then a:b products."""
        return self.predictors + tuple(f"{a}:{b}" for a, b in self.interactions)

    @property
    def response_label(self) -> str:
        if self.transform == 'identity':
            return self.response
        return f"{self.transform}({self.response})"

    @property
    def formula(self) -> str:
        rhs = ' + '.join(self.terms) if self.terms else '1'
        return f"{self.response_label} ~ {rhs}"

    def is_nested_in(self, other: 'CandidateModel') -> bool:
        """True when every term of self appears in other (same response scale)."""
        return (
            self.response == other.response
            and self.transform == other.transform
            and set(self.terms) <= set(other.terms)
        )

    def with_transform(self, transform: str) -> 'CandidateModel':
        return replace(self, transform=transform)

    def with_interaction(self, pair: Tuple[str, str]) -> 'CandidateModel':
        return replace(self, interactions=self.interactions + (tuple(pair),))


@dataclass(frozen=True, eq=False)
class FittedModel:
    candidate: CandidateModel
    results: object = field(repr=False)
    data: pd.DataFrame = field(repr=False)

    @property
    def nobs(self) -> int:
        return int(self.results.nobs)

    @property
    def rss(self) -> float:
        return float(self.results.ssr)

    @property
    def aic(self) -> float:
        return float(self.results.aic)

    @property
    def bic(self) -> float:
        return float(self.results.bic)

    @property
    def resid(self) -> pd.Series:
        return self.results.resid

    @property
    def fittedvalues(self) -> pd.Series:
        return self.results.fittedvalues


def response_vector(candidate, data):
    """Response column after the candidate's transform."""
    if candidate.response not in data.columns:
        raise ValueError(f"Response column '{candidate.response}' not in data")
    y = data[candidate.response].astype(float)
    if y.isna().any():
        raise ValueError(f"Response column '{candidate.response}' has missing values")
    return RESPONSE_TRANSFORMS[candidate.transform](y).rename(candidate.response_label)


def design_matrix(candidate, data):
    """Predictors, interaction products and an intercept column."""
    needed = set(candidate.predictors)
    for a, b in candidate.interactions:
        needed.update((a, b))
    missing = sorted(col for col in needed if col not in data.columns)
    if missing:
        raise ValueError(f"Columns not in data: {missing}")

    X = data[list(candidate.predictors)].astype(float).copy()
    for a, b in candidate.interactions:
        X[f"{a}:{b}"] = data[a].astype(float) * data[b].astype(float)

    has_nan = X.columns[X.isna().any()].tolist()
    if has_nan:
        raise ValueError(f"Missing values in predictors: {has_nan}")
    if X.shape[1] == 0:
        # intercept-only model
        return pd.DataFrame({'const': 1.0}, index=data.index)
    return sm.add_constant(X, has_constant='add')


def least_squares_rss(X, y):
    """
    Residual sum of squares of the least-squares fit of y on X.

    Raw-array counterpart of fit_candidate(...).rss for the inner loops
    (best subsets, the Box-Cox grid) that refit thousands of times and
    only need the RSS. X must already carry the intercept column.
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    coef = np.linalg.lstsq(X, y, rcond=None)[0]
    resid = y - X @ coef
    return float(resid @ resid)


def fit_candidate(candidate, data):
    """Fit OLS for a candidate on the given rows."""
    y = response_vector(candidate, data)
    X = design_matrix(candidate, data)
    results = sm.OLS(y, X).fit()
    return FittedModel(candidate=candidate, results=results, data=data)
