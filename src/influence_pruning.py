"""
Influence pruning - drop the single most influential player.

Cook's distance is computed for every training row; the row with the
largest value is removed and the same model is refit. This happens once:
no second pass, no threshold loop.
"""

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from model_fitting import FittedModel, fit_candidate


@dataclass(frozen=True, eq=False)
class PruneOutcome:
    removed_label: object
    removed_player: str
    cooks_distance: float
    distances: pd.Series = field(repr=False)
    before: FittedModel = field(repr=False)
    model: FittedModel = field(repr=False)


def cooks_distances(fitted):
    """Cook's distance per training row, indexed like the training frame."""
    distances = fitted.results.get_influence().cooks_distance[0]
    return pd.Series(np.asarray(distances), index=fitted.data.index, name='cooks_distance')


def prune_most_influential(fitted):
    """
    Remove the row with the largest Cook's distance and refit the same
    candidate on what is left.

    Ties go to the first row in training order (idxmax). The player name is
    taken from the player_name column when the frame has one.
    """
    distances = cooks_distances(fitted)
    label = distances.idxmax()
    reduced = fitted.data.drop(index=label)
    model = fit_candidate(fitted.candidate, reduced)

    player = fitted.data.loc[label, 'player_name'] if 'player_name' in fitted.data.columns else str(label)
    return PruneOutcome(
        removed_label=label,
        removed_player=str(player),
        cooks_distance=float(distances[label]),
        distances=distances,
        before=fitted,
        model=model,
    )
