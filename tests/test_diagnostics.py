import pytest
import numpy as np
from sportstat.sampling.diagnostics import autocorrelation, ess, rhat, summarize
from sportstat.sampling.metropolis import MCMCResult, MetropolisHastings


@pytest.fixture(scope='module')
def normal_result():
    def log_target(theta):
        return -0.5 * float(theta[0] ** 2 + ((theta[1] - 2.0) / 0.5) ** 2)

    sampler = MetropolisHastings(log_target, proposal_scale=[1.5, 0.75], param_names=['mu', 'nu'], seed=0)
    return sampler.sample(initial=[0.0, 2.0], n_samples=4000, burn_in=500, n_chains=4)


def test_summarize_columns(normal_result):
    summary = summarize(normal_result)
    assert list(summary.index) == ['mu', 'nu']
    for column in ['mean', 'sd', 'ess_bulk', 'r_hat', 'acceptance_rate']:
        assert column in summary.columns
    assert summary.loc['nu', 'mean'] == pytest.approx(2.0, abs=0.1)
    assert summary.loc['nu', 'sd'] == pytest.approx(0.5, abs=0.05)
    assert summary.loc['mu', 'acceptance_rate'] == pytest.approx(normal_result.acceptance_rates.mean())


def test_rhat_near_one_for_mixed_chains(normal_result):
    values = rhat(normal_result)
    assert set(values) == {'mu', 'nu'}
    assert all(value < 1.05 for value in values.values())


def test_rhat_flags_disagreeing_chains():
    rng = np.random.default_rng(0)
    samples = rng.normal(size=(2, 500, 1))
    samples[1] += 5.0
    result = MCMCResult(samples, np.array([0.5, 0.5]), ['theta'])
    assert rhat(result)['theta'] > 1.5


def test_ess_is_smaller_than_draws(normal_result):
    values = ess(normal_result)
    total_draws = normal_result.n_chains * normal_result.n_draws
    assert all(0.0 < value < total_draws for value in values.values())


def test_autocorrelation():
    rng = np.random.default_rng(0)
    white_noise = rng.normal(size=5000)
    acf = autocorrelation(white_noise, max_lag=10)
    assert acf.shape == (11,)
    assert acf[0] == pytest.approx(1.0)
    assert np.all(np.abs(acf[1:]) < 0.05)

    random_walk = np.cumsum(white_noise)
    assert autocorrelation(random_walk, max_lag=1)[1] > 0.9


def test_invalid_arguments(normal_result):
    with pytest.raises(ValueError):
        summarize(normal_result, hdi_prob=1.5)
    with pytest.raises(ValueError):
        autocorrelation(np.zeros((2, 2)))
