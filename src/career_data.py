"""
Career Data - Load, filter and aggregate NBA season rows
========================================================

Raw input is one row per player per season (biometrics + box-score rates).
The model works on one row per player, so seasons are collapsed into career
averages here.

Steps:
1. load_seasons     - read the CSV, check the required columns are there
2. filter_drafted   - drop "Undrafted" players, keep draft classes >= 1996
3. aggregate_careers - unweighted career mean of every numeric column
"""

import pandas as pd

from draft_config import (
    FIRST_DRAFT_YEAR,
    LAST_DRAFT_YEAR,
    NON_PLAYING_COLUMNS,
    REQUIRED_COLUMNS,
    UNDRAFTED,
)


# ============================================================================
# LOAD
# ============================================================================

def load_seasons(path):
    """Read the per-season CSV. Raises ValueError when required columns are missing."""
    seasons = pd.read_csv(path)

    missing = [col for col in REQUIRED_COLUMNS if col not in seasons.columns]
    if missing:
        raise ValueError(f"{path}: missing required columns {missing}")
    return seasons


# ============================================================================
# FILTER
# ============================================================================

def _coerce_draft_column(seasons, col):
    """to_numeric on one draft column; any value that doesn't parse is fatal."""
    values = pd.to_numeric(seasons[col], errors='coerce')
    bad = values.isna()
    if bad.any():
        players = sorted(seasons.loc[bad, 'player_name'].astype(str).unique())
        raise ValueError(
            f"Non-numeric {col} for {bad.sum()} rows "
            f"(players: {', '.join(players[:10])}{' ...' if len(players) > 10 else ''})"
        )
    return values


def filter_drafted(seasons, first_year=FIRST_DRAFT_YEAR, last_year=LAST_DRAFT_YEAR,
                   sentinel=UNDRAFTED):
    """
    Keep drafted players from the configured draft classes.

    Rows where draft_number or draft_year equals the sentinel are dropped
    first. The remaining draft columns must all be numeric, otherwise the
    run is aborted with a ValueError.
    """
    drafted = seasons[
        (seasons['draft_number'].astype(str).str.strip() != sentinel) &
        (seasons['draft_year'].astype(str).str.strip() != sentinel)
    ].copy()

    drafted['draft_year'] = _coerce_draft_column(drafted, 'draft_year')
    keep = drafted['draft_year'] >= first_year
    if last_year is not None:
        keep &= drafted['draft_year'] <= last_year
    drafted = drafted[keep].copy()

    drafted['draft_number'] = _coerce_draft_column(drafted, 'draft_number')
    return drafted


# ============================================================================
# AGGREGATE
# ============================================================================

def aggregate_careers(seasons):
    """
    Collapse season rows into one career row per player.

    Every numeric column is averaged over the player's seasons (not weighted
    by games played). draft_number is constant per player so its mean is the
    pick itself; if a player's draft fields disagree across seasons the
    average silently hides it. Identifier, age and draft_year are dropped
    afterwards since they are not predictors.
    """
    numeric_cols = seasons.select_dtypes('number').columns.tolist()
    careers = (
        seasons.groupby('player_name', sort=True)[numeric_cols]
        .mean()
        .reset_index()
    )
    drop = [col for col in NON_PLAYING_COLUMNS if col in careers.columns]
    return careers.drop(columns=drop)
