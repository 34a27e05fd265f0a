import numpy as np
import pytest
import statsmodels.api as sm
from statsmodels.stats.outliers_influence import OLSInfluence

from influence_pruning import cooks_distances, prune_most_influential
from model_fitting import CandidateModel, fit_candidate


@pytest.fixture
def fitted(careers, true_predictors):
    return fit_candidate(CandidateModel(predictors=true_predictors, transform='sqrt'), careers)


def test_cooks_distances_match_statsmodels(fitted, careers, true_predictors):
    X = sm.add_constant(careers[list(true_predictors)])
    reference = OLSInfluence(sm.OLS(np.sqrt(careers['draft_number']), X).fit()).cooks_distance[0]

    distances = cooks_distances(fitted)
    assert distances.index.equals(careers.index)
    np.testing.assert_allclose(distances.to_numpy(), np.asarray(reference))


def test_prune_removes_exactly_the_max_cooks_row(fitted):
    distances = cooks_distances(fitted)
    outcome = prune_most_influential(fitted)

    assert outcome.removed_label == distances.idxmax()
    assert outcome.cooks_distance == pytest.approx(distances.max())
    assert outcome.model.nobs == fitted.nobs - 1
    assert outcome.removed_label not in outcome.model.data.index
    assert outcome.model.candidate == fitted.candidate
    assert outcome.before is fitted


def test_prune_finds_planted_outlier(careers, true_predictors):
    careers.loc[17, 'draft_number'] = careers.loc[17, 'draft_number'] + 500
    fitted = fit_candidate(CandidateModel(predictors=true_predictors), careers)

    outcome = prune_most_influential(fitted)
    assert outcome.removed_player == 'Player 017'
    assert outcome.model.nobs == len(careers) - 1


def test_prune_is_one_shot(fitted):
    once = prune_most_influential(fitted)
    twice = prune_most_influential(once.model)
    assert once.model.nobs - twice.model.nobs == 1
    assert twice.removed_label != once.removed_label
