import pytest
import numpy as np
import pandas as pd
from sportstat.models.regression import coefficient_table, fit_linear, fit_logistic, fit_poisson


@pytest.fixture(scope='module')
def games():
    rng = np.random.default_rng(0)
    n = 2000
    rating_diff = rng.normal(scale=100.0, size=n)
    home = rng.integers(0, 2, size=n)
    margin = 0.03 * rating_diff + 2.5 * home + rng.normal(scale=10.0, size=n)
    win = (rng.uniform(size=n) < 1.0 / (1.0 + np.exp(-(0.01 * rating_diff + 0.3 * home)))).astype(int)
    minutes = rng.uniform(10.0, 40.0, size=n)
    points = rng.poisson(0.5 * minutes * np.exp(0.002 * rating_diff))
    return pd.DataFrame(
        {
            'rating_diff': rating_diff,
            'home': home,
            'margin': margin,
            'win': win,
            'minutes': minutes,
            'points': points,
            'team': rng.choice(['A', 'B', 'C'], size=n),
        }
    )


def test_linear(games):
    result = fit_linear('margin ~ rating_diff + home', games)
    assert result.params['rating_diff'] == pytest.approx(0.03, abs=0.008)
    assert result.params['home'] == pytest.approx(2.5, abs=1.5)


def test_weighted_linear(games):
    result = fit_linear('margin ~ rating_diff', games, weights='minutes')
    assert result.params['rating_diff'] == pytest.approx(0.03, abs=0.008)


def test_logistic(games):
    result = fit_logistic('win ~ rating_diff + home', games)
    assert result.params['rating_diff'] == pytest.approx(0.01, abs=0.003)


def test_poisson_with_exposure(games):
    result = fit_poisson('points ~ rating_diff', games, offset_col='minutes')
    assert np.exp(result.params['Intercept']) == pytest.approx(0.5, rel=0.05)
    assert result.params['rating_diff'] == pytest.approx(0.002, abs=0.0005)


def test_coefficient_table(games):
    result = fit_linear('margin ~ rating_diff + C(team) + np.log(minutes)', games)
    table = coefficient_table(result)
    assert list(table.columns) == ['estimate', 'std_error', 'statistic', 'p_value', 'ci_lower', 'ci_upper']
    assert table.loc['rating_diff', 'p_value'] < 1e-6
    assert (table['ci_lower'] < table['estimate']).all()
    assert (table['estimate'] < table['ci_upper']).all()


def test_missing_column_named_in_error(games):
    with pytest.raises(ValueError, match='possessions'):
        fit_linear('margin ~ rating_diff + possessions', games)
    with pytest.raises(ValueError, match='rebounds'):
        fit_logistic('win ~ rebounds', games)


def test_contrast_arguments_are_not_columns(games):
    result = fit_linear("margin ~ C(team, Treatment(reference='B'))", games)
    assert len(result.params) == 3


def test_nonpositive_offset(games):
    bad = games.copy()
    bad.loc[0, 'minutes'] = 0.0
    with pytest.raises(ValueError):
        fit_poisson('points ~ rating_diff', bad, offset_col='minutes')


def test_scientific_notation_is_not_a_column(games):
    result = fit_linear('margin ~ I(rating_diff * 1e3)', games)
    assert result.params.iloc[1] == pytest.approx(3e-5, abs=1e-5)
