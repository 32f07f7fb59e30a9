import pytest
import pandas as pd

pm = pytest.importorskip('pymc')

from sportstat.datasets import generate_binomial_groups  # noqa: E402
from sportstat.models.hierarchical import HierarchicalBinomial  # noqa: E402


@pytest.fixture(scope='module')
def fitted():
    df = generate_binomial_groups(num_groups=8, min_attempts=5, max_attempts=300, seed=0)
    model = HierarchicalBinomial(draws=300, tune=300, chains=2, seed=0)
    return df, model.fit(df, group_col='group', successes_col='successes', attempts_col='attempts')


def test_group_rates(fitted):
    df, model = fitted
    rates = model.group_rates(hdi_prob=0.9)
    assert list(rates.index) == list(df['group'])
    assert list(rates.columns) == ['attempts', 'raw_rate', 'posterior_mean', 'hdi_lower', 'hdi_upper']
    assert (rates['hdi_lower'] < rates['posterior_mean']).all()
    assert (rates['posterior_mean'] < rates['hdi_upper']).all()
    assert rates['posterior_mean'].between(0.0, 1.0).all()


def test_partial_pooling_narrows_spread(fitted):
    _, model = fitted
    rates = model.group_rates()
    assert rates['posterior_mean'].std() < rates['raw_rate'].std()


def test_summary(fitted):
    _, model = fitted
    summary = model.summary()
    assert list(summary.index) == ['mu', 'sigma']
    assert 'r_hat' in summary.columns


def test_invalid_data():
    df = pd.DataFrame({'group': ['a', 'b'], 'successes': [5, 12], 'attempts': [10, 10]})
    with pytest.raises(ValueError):
        HierarchicalBinomial().fit(df, 'group', 'successes', 'attempts')
    with pytest.raises(ValueError):
        HierarchicalBinomial(draws=0)
    with pytest.raises(ValueError):
        HierarchicalBinomial().group_rates()
