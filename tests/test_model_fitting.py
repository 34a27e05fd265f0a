import numpy as np
import pytest

from model_fitting import (
    CandidateModel,
    design_matrix,
    fit_candidate,
    least_squares_rss,
    response_vector,
)


def test_candidate_is_hashable_value_record():
    a = CandidateModel(predictors=['pts', 'reb'])
    b = CandidateModel(predictors=('pts', 'reb'))
    assert a == b
    assert {a: 'x'}[b] == 'x'
    assert a.predictors == ('pts', 'reb')


def test_candidate_terms_and_formula():
    candidate = CandidateModel(predictors=('pts', 'reb')).with_transform('sqrt').with_interaction(('pts', 'reb'))
    assert candidate.terms == ('pts', 'reb', 'pts:reb')
    assert candidate.formula == 'sqrt(draft_number) ~ pts + reb + pts:reb'
    assert CandidateModel(predictors=()).formula == 'draft_number ~ 1'


def test_with_transform_returns_new_record():
    base = CandidateModel(predictors=('pts',))
    transformed = base.with_transform('log')
    assert base.transform == 'identity'
    assert transformed.transform == 'log'


def test_unknown_transform_rejected():
    with pytest.raises(ValueError, match="Unknown response transform"):
        CandidateModel(predictors=('pts',), transform='cube')


def test_is_nested_in():
    small = CandidateModel(predictors=('pts',))
    large = CandidateModel(predictors=('reb', 'pts'))
    assert small.is_nested_in(large)
    assert not large.is_nested_in(small)
    assert not small.is_nested_in(large.with_transform('sqrt'))


def test_design_matrix_builds_interactions(careers):
    candidate = CandidateModel(predictors=('pts', 'reb'), interactions=(('pts', 'reb'),))
    X = design_matrix(candidate, careers)
    assert list(X.columns) == ['const', 'pts', 'reb', 'pts:reb']
    np.testing.assert_allclose(X['pts:reb'], careers['pts'] * careers['reb'])


def test_design_matrix_missing_values(careers):
    careers.loc[3, 'reb'] = np.nan
    with pytest.raises(ValueError, match="Missing values in predictors"):
        design_matrix(CandidateModel(predictors=('pts', 'reb')), careers)


def test_design_matrix_unknown_column(careers):
    with pytest.raises(ValueError, match="not in data"):
        design_matrix(CandidateModel(predictors=('steals',)), careers)


def test_response_vector_applies_transform(careers):
    y = response_vector(CandidateModel(predictors=(), transform='sqrt'), careers)
    np.testing.assert_allclose(y, np.sqrt(careers['draft_number']))
    assert y.name == 'sqrt(draft_number)'


def test_fit_candidate_intercept_only(careers):
    fitted = fit_candidate(CandidateModel(predictors=()), careers)
    assert fitted.nobs == len(careers)
    assert fitted.results.params['const'] == pytest.approx(careers['draft_number'].mean())


def test_fit_candidate_keeps_training_rows(careers, true_predictors):
    subset = careers.iloc[10:]
    fitted = fit_candidate(CandidateModel(predictors=true_predictors), subset)
    assert fitted.nobs == len(subset)
    assert fitted.resid.index.equals(subset.index)
    assert fitted.rss == pytest.approx(float((fitted.resid ** 2).sum()))


def test_least_squares_rss_matches_fitted_model(careers, true_predictors):
    candidate = CandidateModel(predictors=true_predictors)
    X = design_matrix(candidate, careers)
    y = careers['draft_number']
    assert least_squares_rss(X, y) == pytest.approx(fit_candidate(candidate, careers).rss, rel=1e-10)
