import numpy as np
import pandas as pd
import pytest
from scipy import stats

TRUE_PREDICTORS = ('pts', 'reb', 'gp', 'player_height')


def make_careers(n=200, seed=7, interaction=0.0):
    """
    Synthetic career table where sqrt(draft_number) is linear in
    pts, reb, gp and player_height.

    Errors are exact normal quantiles in shuffled order, so residual
    normality tests behave the same on every run.
    """
    rng = np.random.RandomState(seed)
    height = 200 + 9 * rng.normal(size=n)
    weight = 100 + 12 * rng.normal(size=n)
    gp = 55 + 15 * rng.normal(size=n)
    pts = 9 + 5 * rng.normal(size=n)
    reb = 4 + 2 * rng.normal(size=n)
    ast = 2 + 1.5 * rng.normal(size=n)

    errors = stats.norm.ppf((np.arange(1, n + 1) - 0.5) / n)
    errors = rng.permutation(errors) * 0.4

    h_z, w_z = (height - 200) / 9, (weight - 100) / 12
    root = (7
            - 1.0 * (pts - 9) / 5
            - 0.6 * (reb - 4) / 2
            - 0.5 * (gp - 55) / 15
            + 0.5 * h_z
            + interaction * h_z * w_z
            + errors)

    return pd.DataFrame({
        'player_name': [f"Player {i:03d}" for i in range(n)],
        'player_height': height,
        'player_weight': weight,
        'draft_number': root ** 2,
        'gp': gp,
        'pts': pts,
        'reb': reb,
        'ast': ast,
        'net_rating': -2 + 5 * rng.normal(size=n),
        'oreb_pct': 0.05 + 0.02 * rng.normal(size=n),
        'dreb_pct': 0.14 + 0.04 * rng.normal(size=n),
        'usg_pct': 0.18 + 0.04 * rng.normal(size=n),
        'ts_pct': 0.52 + 0.04 * rng.normal(size=n),
        'ast_pct': 0.12 + 0.06 * rng.normal(size=n),
    })


@pytest.fixture
def careers():
    return make_careers()


@pytest.fixture
def career_factory():
    return make_careers


@pytest.fixture
def true_predictors():
    return TRUE_PREDICTORS


@pytest.fixture
def season_rows():
    """Small raw season table with undrafted and pre-1996 players mixed in."""
    return pd.DataFrame({
        'Unnamed: 0': [0, 1, 2, 3, 4, 5, 6],
        'player_name': ['Alpha', 'Alpha', 'Bravo', 'Charlie', 'Delta', 'Echo', 'Echo'],
        'team_abbreviation': ['BOS', 'BOS', 'LAL', 'NYK', 'CHI', 'MIA', 'MIA'],
        'age': [21.0, 22.0, 25.0, 30.0, 23.0, 19.0, 20.0],
        'player_height': [200.0, 202.0, 190.0, 210.0, 195.0, 205.0, 205.0],
        'player_weight': [95.0, 97.0, 88.0, 110.0, 90.0, 100.0, 104.0],
        'draft_year': ['1998', '1998', 'Undrafted', '1990', '2001', '2010', '2010'],
        'draft_round': ['1', '1', 'Undrafted', '2', 'Undrafted', '1', '1'],
        'draft_number': ['5', '5', 'Undrafted', '40', 'Undrafted', '12', '12'],
        'gp': [80, 40, 20, 70, 60, 30, 50],
        'pts': [10.0, 20.0, 3.0, 8.0, 6.0, 12.0, 14.0],
        'reb': [4.0, 6.0, 1.0, 7.0, 3.0, 5.0, 7.0],
        'ast': [2.0, 4.0, 1.0, 1.0, 2.0, 3.0, 1.0],
        'net_rating': [1.0, -1.0, -5.0, 2.0, 0.0, 3.0, 5.0],
        'oreb_pct': [0.05, 0.07, 0.02, 0.09, 0.03, 0.06, 0.08],
        'dreb_pct': [0.10, 0.14, 0.08, 0.20, 0.11, 0.15, 0.17],
        'usg_pct': [0.20, 0.24, 0.12, 0.15, 0.16, 0.22, 0.24],
        'ts_pct': [0.50, 0.56, 0.44, 0.53, 0.49, 0.55, 0.57],
        'ast_pct': [0.10, 0.14, 0.06, 0.05, 0.09, 0.12, 0.08],
        'season': ['1998-99', '1999-00', '2001-02', '1996-97', '2002-03', '2010-11', '2011-12'],
    })
