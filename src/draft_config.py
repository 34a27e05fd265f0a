# draft_config.py - Constants for the NBA draft position model
# Every analysis module should import from here so thresholds stay consistent.

import numpy as np

DATA_PATH = 'data/all_seasons.csv'
OUTPUT_DIR = 'output'

# Raw season table
UNDRAFTED = 'Undrafted'
FIRST_DRAFT_YEAR = 1996
LAST_DRAFT_YEAR = None  # no upper bound
ID_COLUMN = 'Unnamed: 0'  # pandas name for the CSV's unlabeled row index
NON_PLAYING_COLUMNS = [ID_COLUMN, 'age', 'draft_year']

RESPONSE = 'draft_number'
PREDICTORS = [
    'player_height', 'player_weight',
    'gp', 'pts', 'reb', 'ast',
    'net_rating', 'oreb_pct', 'dreb_pct',
    'usg_pct', 'ts_pct', 'ast_pct',
]
REQUIRED_COLUMNS = ['player_name', 'draft_number', 'draft_year', 'age'] + PREDICTORS

# Model selection
MAX_SUBSET_SIZE = 12
CP_TOLERANCE = 1.0  # accept a subset once Cp - p drops below this
ALPHA = 0.05
CV_FOLDS = 5
CV_SEED = 42

# Box-Cox
BOXCOX_LAMBDAS = np.round(np.arange(-2.0, 2.0001, 0.1), 1)

# Interactions
INTERACTION_PREDICTORS = ['player_height', 'pts', 'reb', 'ast', 'usg_pct']
VIF_THRESHOLD = 10.0
