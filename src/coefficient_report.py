"""
Coefficient report for the final draft position model.

Read-only: builds the coefficient table, the plain-English interpretation
of each significant predictor, and the text report for a whole analysis run.
"""

import numpy as np
import pandas as pd

from draft_config import ALPHA
from model_fitting import DECREASING_TRANSFORMS
from model_selection import candidate_summary

WIDTH = 80


def significance_stars(p):
    return "***" if p < 0.001 else "**" if p < 0.01 else "*" if p < 0.05 else ""


def coefficient_table(fitted):
    """Estimate, std error, t, p, sign and stars per term."""
    res = fitted.results
    table = pd.DataFrame({
        'term': ['Intercept' if t == 'const' else t for t in res.params.index],
        'estimate': res.params.to_numpy(),
        'std_error': res.bse.to_numpy(),
        't_value': res.tvalues.to_numpy(),
        'p_value': res.pvalues.to_numpy(),
    })
    table['sign'] = np.where(table['estimate'] >= 0, '+', '-')
    table['stars'] = table['p_value'].apply(significance_stars)
    return table


def interpret_coefficients(fitted, alpha=ALPHA):
    """
    One sentence per predictor, on the draft pick scale.

    A lower draft_number is an earlier pick, so a negative effect on
    draft_number means the player tends to go earlier. Decreasing response
    transforms (1/y, 1/sqrt(y)) flip the sign before reading it that way.
    """
    candidate = fitted.candidate
    flip = -1 if candidate.transform in DECREASING_TRANSFORMS else 1
    lines = []

    for _, row in coefficient_table(fitted).iterrows():
        if row['term'] == 'Intercept':
            continue
        if row['p_value'] >= alpha:
            lines.append(f"{row['term']}: no significant association with draft position "
                         f"(p = {row['p_value']:.4f}).")
            continue

        direction = 'later' if flip * row['estimate'] > 0 else 'earlier'
        if ':' in row['term']:
            a, b = row['term'].split(':')
            lines.append(f"{a} x {b}: the effect of {a} grows toward {direction} picks as {b} "
                         f"increases (coef {row['estimate']:+.4f}, p = {row['p_value']:.4f}).")
        else:
            lines.append(f"{row['term']}: higher values go with {direction} picks, other "
                         f"predictors held fixed (coef {row['estimate']:+.4f} on "
                         f"{candidate.response_label}, p = {row['p_value']:.4f}).")
    return lines


# ============================================================================
# TEXT REPORT
# ============================================================================

def _banner(title):
    return ["", "=" * WIDTH, title, "=" * WIDTH]


def format_report(result):
    """Plain-text report of an AnalysisResult."""
    selection = result.selection
    transform = result.transform
    interactions = result.interactions
    prune = result.prune
    final = result.final_model

    out = _banner("NBA DRAFT POSITION MODEL")
    out.append(f"Season rows loaded:     {len(result.seasons)}")
    out.append(f"Drafted season rows:    {len(result.drafted)}")
    out.append(f"Players (career rows):  {len(result.careers)}")

    out += _banner("STEP 1: BEST SUBSETS (MALLOW'S CP)")
    out.append(f"{'Size':>4} {'Cp':>10} {'Adj R²':>8} {'BIC':>10}  Predictors")
    out.append("-" * WIDTH)
    for _, row in selection.subsets.iterrows():
        out.append(f"{row['size']:>4} {row['cp']:>10.2f} {row['adj_r2']:>8.3f} {row['bic']:>10.1f}  "
                   f"{', '.join(row['predictors'])}")
    out.append(f"\nCp choice: {int(selection.cp_choice['size'])} predictors "
               f"(Cp = {selection.cp_choice['cp']:.2f})")

    out += _banner("STEP 2: CANDIDATE COMPARISON")
    summary = candidate_summary(selection)
    out.append(f"{'Model':<6} {'k':>3} {'Adj R²':>8} {'CV R²':>8} {'AIC':>10} {'BIC':>10}")
    out.append("-" * WIDTH)
    for _, row in summary.iterrows():
        out.append(f"{row['model']:<6} {row['n_predictors']:>3} {row['adj_r2']:>8.3f} "
                   f"{row['cv_r2']:>8.3f} {row['aic']:>10.1f} {row['bic']:>10.1f}")
        out.append(f"       {row['predictors']}")
    out.append("")
    for comp in selection.comparisons:
        if comp.nested:
            out.append(f"F-test {comp.smaller} vs {comp.larger}: F = {comp.f_stat:.3f}, "
                       f"df = {comp.df_diff:.0f}, p = {comp.p_value:.4f} -> keep {comp.preferred}")
        else:
            out.append(f"{comp.smaller} vs {comp.larger}: not nested, lower AIC {comp.preferred}")
    out.append(f"\nFinalist: {selection.finalist_label}  {selection.finalist.candidate.formula}")

    out += _banner("STEP 3: RESIDUAL DIAGNOSTICS + BOX-COX")
    out.append(f"Shapiro-Wilk before: W = {transform.before.statistic:.4f}, "
               f"p = {transform.before.p_value:.3g}")
    out.append(f"Box-Cox lambda = {transform.boxcox.best_lambda:.2f} "
               f"(95% CI {transform.boxcox.ci_low:.2f} to {transform.boxcox.ci_high:.2f}) "
               f"-> power {transform.power:g} ({transform.transform})")
    out.append(f"Shapiro-Wilk after:  W = {transform.after.statistic:.4f}, "
               f"p = {transform.after.p_value:.3g}")
    if len(transform.attempts) > 1:
        tried = ", ".join(f"{name} (p = {result.p_value:.3g})" for name, result in transform.attempts)
        out.append(f"Powers tried: {tried}")
    if not transform.passed:
        out.append("WARNING: residuals still reject normality after the transform")

    out += _banner("STEP 4: INTERACTIONS + VIF")
    if len(interactions.tests) == 0:
        out.append("No candidate interaction pairs in the model")
    else:
        out.append(f"{'Term':<28} {'F':>8} {'p-value':>10} {'Max VIF':>10} {'Kept':>6}")
        out.append("-" * WIDTH)
        for _, row in interactions.tests.iterrows():
            vif = f"{row['max_vif']:.1f}" if pd.notna(row['max_vif']) else "-"
            out.append(f"{row['term']:<28} {row['f_stat']:>8.3f} {row['p_value']:>10.4f} "
                       f"{vif:>10} {'yes' if row['kept'] else 'no':>6} "
                       f"{significance_stars(row['p_value'])}")

    out += _banner("STEP 5: INFLUENCE PRUNING")
    out.append(f"Removed {prune.removed_player} (Cook's D = {prune.cooks_distance:.4f}); "
               f"n {prune.before.nobs} -> {prune.model.nobs}")

    out += _banner("FINAL MODEL")
    out.append(final.candidate.formula)
    out.append(f"n = {final.nobs}, R² = {final.results.rsquared:.3f}, "
               f"Adj R² = {final.results.rsquared_adj:.3f}")
    out.append("")
    out.append(f"{'Term':<28} {'Coef':>10} {'Std Err':>10} {'t':>8} {'P>|t|':>10}")
    out.append("-" * WIDTH)
    for _, row in coefficient_table(final).iterrows():
        out.append(f"{row['term']:<28} {row['estimate']:>10.4f} {row['std_error']:>10.4f} "
                   f"{row['t_value']:>8.2f} {row['p_value']:>10.4f} {row['stars']}")

    out.append("\nInterpretation:")
    out += [f"  - {line}" for line in interpret_coefficients(final)]
    return "\n".join(out) + "\n"
