"""
Diagnostic plots for the draft position model.

All figures go to the output directory as PNGs and are closed after saving.
"""

import os

import matplotlib.pyplot as plt
import numpy as np
from scipy import stats


def _save(fig, output_dir, filename):
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"  Saved: {path}")
    return path


def plot_residuals_vs_fitted(fitted, output_dir, filename='residuals_vs_fitted.png'):
    fig, ax = plt.subplots(figsize=(10, 7))
    ax.scatter(fitted.fittedvalues, fitted.resid, c='#457B9D', s=30, alpha=0.6,
               edgecolors='white', linewidth=0.5)
    ax.axhline(0, color='#E63946', linestyle='--', linewidth=2)
    ax.set_xlabel('Fitted values', fontsize=12, fontweight='bold')
    ax.set_ylabel('Residuals', fontsize=12, fontweight='bold')
    ax.set_title(f"Residuals vs Fitted\n{fitted.candidate.formula}", fontsize=13, fontweight='bold')
    ax.grid(True, alpha=0.3)
    return _save(fig, output_dir, filename)


def plot_normal_qq(fitted, output_dir, filename='normal_qq.png'):
    fig, ax = plt.subplots(figsize=(8, 8))
    stats.probplot(np.asarray(fitted.resid), dist='norm', plot=ax)
    ax.set_title(f"Normal Q-Q\n{fitted.candidate.response_label}", fontsize=13, fontweight='bold')
    ax.grid(True, alpha=0.3)
    return _save(fig, output_dir, filename)


def plot_boxcox_profile(boxcox, output_dir, filename='boxcox_profile.png'):
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(boxcox.lambdas, boxcox.loglik, 'k-', linewidth=2)
    ax.axvline(boxcox.best_lambda, color='#E63946', linestyle='--',
               label=f"lambda = {boxcox.best_lambda:.2f}")
    ax.axvspan(boxcox.ci_low, boxcox.ci_high, color='#457B9D', alpha=0.15, label='95% CI')
    ax.set_xlabel('lambda', fontsize=12, fontweight='bold')
    ax.set_ylabel('Profile log-likelihood', fontsize=12, fontweight='bold')
    ax.set_title('Box-Cox Profile', fontsize=13, fontweight='bold')
    ax.legend(loc='lower right')
    ax.grid(True, alpha=0.3)
    return _save(fig, output_dir, filename)


def plot_cooks_distance(prune, output_dir, filename='cooks_distance.png'):
    distances = prune.distances
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.vlines(np.arange(len(distances)), 0, distances.to_numpy(), color='#457B9D', linewidth=1)
    top = int(np.argmax(distances.to_numpy()))
    ax.annotate(prune.removed_player, xy=(top, distances.iloc[top]),
                xytext=(10, -5), textcoords='offset points',
                fontsize=9, color='#E63946', fontweight='bold')
    ax.set_xlabel('Observation', fontsize=12, fontweight='bold')
    ax.set_ylabel("Cook's distance", fontsize=12, fontweight='bold')
    ax.set_title("Cook's Distance", fontsize=13, fontweight='bold')
    ax.grid(True, alpha=0.3)
    return _save(fig, output_dir, filename)


def plot_cp_by_size(subsets, output_dir, filename='cp_by_size.png'):
    fig, ax = plt.subplots(figsize=(10, 6))
    p = subsets['size'] + 1
    ax.plot(subsets['size'], subsets['cp'], 'o-', color='#457B9D', label="Mallow's Cp")
    ax.plot(subsets['size'], p, 'k--', alpha=0.5, label='Cp = p')
    ax.set_xlabel('Number of predictors', fontsize=12, fontweight='bold')
    ax.set_ylabel('Cp', fontsize=12, fontweight='bold')
    ax.set_title("Best Subsets: Mallow's Cp", fontsize=13, fontweight='bold')
    ax.legend(loc='upper right')
    ax.grid(True, alpha=0.3)
    return _save(fig, output_dir, filename)
