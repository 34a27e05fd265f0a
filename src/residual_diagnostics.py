"""
Residual diagnostics and the Box-Cox response transform.

The finalist from model selection is checked for non-normal residuals
(Shapiro-Wilk). The Box-Cox profile likelihood picks a power for
draft_number, which is rounded to the usual ladder (0.5 -> square root),
the model is refit on the transformed response, and normality is tested
again.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from scipy import stats

from draft_config import ALPHA, BOXCOX_LAMBDAS
from model_fitting import POWER_LADDER, FittedModel, design_matrix, fit_candidate, least_squares_rss


@dataclass(frozen=True)
class NormalityResult:
    statistic: float
    p_value: float
    normal: bool


@dataclass(frozen=True, eq=False)
class BoxCoxResult:
    lambdas: np.ndarray = field(repr=False)
    loglik: np.ndarray = field(repr=False)
    best_lambda: float
    ci_low: float
    ci_high: float


@dataclass(frozen=True, eq=False)
class TransformOutcome:
    before: NormalityResult
    boxcox: BoxCoxResult
    power: float
    transform: str
    after: NormalityResult
    model: FittedModel = field(repr=False)
    # (transform name, NormalityResult) for every power tried, in order
    attempts: Tuple[Tuple[str, NormalityResult], ...] = ()

    @property
    def passed(self):
        return self.after.normal


def normality_test(fitted, alpha=ALPHA):
    """Shapiro-Wilk on the residuals; normal means we fail to reject at alpha."""
    statistic, p_value = stats.shapiro(np.asarray(fitted.resid))
    return NormalityResult(statistic=float(statistic), p_value=float(p_value),
                           normal=bool(p_value > alpha))


def boxcox_profile(fitted, lambdas=BOXCOX_LAMBDAS, level=0.95):
    """
    Profile log-likelihood of the Box-Cox family for a fitted regression.

    For each lambda the response is replaced by the geometric-mean scaled
    power transform and the same design is refit:

        z = (y^lam - 1) / (lam * gm^(lam - 1))      lam != 0
        z = gm * log(y)                              lam == 0
        loglik(lam) = -n/2 * log(RSS(z) / n)

    The interval holds every lambda within chi2(1, level)/2 of the maximum.
    """
    candidate = fitted.candidate
    if candidate.transform != 'identity':
        raise ValueError(f"Box-Cox needs the untransformed response, got {candidate.response_label}")

    y = fitted.data[candidate.response].astype(float).to_numpy()
    if (y <= 0).any():
        raise ValueError(f"Box-Cox needs a positive response; {candidate.response} has values <= 0")

    X = design_matrix(candidate, fitted.data).to_numpy()
    n = len(y)
    gm = np.exp(np.log(y).mean())

    lambdas = np.asarray(lambdas, dtype=float)
    loglik = np.empty(len(lambdas))
    for i, lam in enumerate(lambdas):
        if abs(lam) < 1e-12:
            z = gm * np.log(y)
        else:
            z = (y ** lam - 1) / (lam * gm ** (lam - 1))
        loglik[i] = -n / 2 * np.log(least_squares_rss(X, z) / n)

    best = int(np.argmax(loglik))
    cutoff = loglik[best] - stats.chi2.ppf(level, 1) / 2
    inside = lambdas[loglik >= cutoff]
    return BoxCoxResult(
        lambdas=lambdas,
        loglik=loglik,
        best_lambda=float(lambdas[best]),
        ci_low=float(inside.min()),
        ci_high=float(inside.max()),
    )


def ladder_by_distance(lmbda):
    """Ladder powers ordered by distance from lambda (ties to the lower power)."""
    return sorted(POWER_LADDER, key=lambda p: (abs(p - lmbda), p))


def power_transform_for(lmbda):
    """Round lambda to the nearest ladder power. Returns (power, transform name)."""
    power = ladder_by_distance(lmbda)[0]
    return power, POWER_LADDER[power]


def transform_response(fitted, lambdas=BOXCOX_LAMBDAS, alpha=ALPHA, max_attempts=2):
    """
    Box-Cox -> transform -> refit -> retest.

    The nearest ladder power to the Box-Cox lambda is tried first (power 1
    keeps the model as is). When its residuals still fail Shapiro-Wilk the
    next-nearest powers are tried, up to max_attempts in total, and the first
    one that passes is used. If none passes the nearest power is kept and
    the outcome comes back with passed == False; the pipeline carries on with
    that model and the report flags it.
    """
    before = normality_test(fitted, alpha=alpha)
    boxcox = boxcox_profile(fitted, lambdas=lambdas)

    attempts = []
    for power in ladder_by_distance(boxcox.best_lambda)[:max_attempts]:
        transform = POWER_LADDER[power]
        if transform == 'identity':
            model, after = fitted, before
        else:
            model = fit_candidate(fitted.candidate.with_transform(transform), fitted.data)
            after = normality_test(model, alpha=alpha)
        attempts.append((power, transform, after, model))
        if after.normal:
            break

    power, transform, after, model = attempts[-1] if attempts[-1][2].normal else attempts[0]
    return TransformOutcome(before=before, boxcox=boxcox, power=power, transform=transform,
                            after=after, model=model,
                            attempts=tuple((t, result) for _, t, result, _ in attempts))
