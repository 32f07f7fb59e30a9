"""
Metropolis-Hastings checked against targets with known moments
"""
import logging
import math
import pytest
import numpy as np
from scipy import stats
from sportstat.sampling.metropolis import MetropolisHastings
from sportstat.sampling.posteriors import (
    beta_binomial_log_posterior,
    bradley_terry_log_posterior,
    normal_mean_log_posterior,
)


def standard_normal(theta):
    return -0.5 * float(np.sum(np.square(theta)))


def test_standard_normal_moments():
    sampler = MetropolisHastings(standard_normal, proposal_scale=2.4, seed=0)
    result = sampler.sample(initial=0.0, n_samples=20000, burn_in=1000, n_chains=2)
    draws = result.draws(0)
    assert result.samples.shape == (2, 20000, 1)
    assert draws.mean() == pytest.approx(0.0, abs=0.05)
    assert draws.std() == pytest.approx(1.0, abs=0.05)
    assert np.all((result.acceptance_rates > 0.2) & (result.acceptance_rates < 0.6))


def test_beta_binomial_posterior_mean():
    # 45 made out of 60 attempts with a flat prior -> Beta(46, 16)
    log_posterior = beta_binomial_log_posterior(successes=45, attempts=60)
    sampler = MetropolisHastings(log_posterior, proposal_scale=0.1, param_names=['p'], seed=1)
    result = sampler.sample(initial=0.5, n_samples=20000, burn_in=500)
    draws = result.draws('p')
    assert np.all((draws > 0.0) & (draws < 1.0))
    assert draws.mean() == pytest.approx(46.0 / 62.0, abs=0.01)
    assert draws.std() == pytest.approx(stats.beta(46, 16).std(), abs=0.01)


def test_normal_mean_posterior():
    rng = np.random.default_rng(0)
    data = rng.normal(loc=3.0, scale=2.0, size=50)
    log_posterior = normal_mean_log_posterior(data, sigma=2.0, prior_mean=0.0, prior_sd=10.0)
    posterior_precision = 1.0 / 100.0 + 50.0 / 4.0
    posterior_mean = (data.sum() / 4.0) / posterior_precision
    result = MetropolisHastings(log_posterior, proposal_scale=0.5, seed=2).sample(0.0, n_samples=20000, burn_in=500)
    assert result.draws().mean() == pytest.approx(posterior_mean, abs=0.03)
    assert result.draws().std() == pytest.approx(math.sqrt(1.0 / posterior_precision), abs=0.03)


def test_bradley_terry_ordering():
    matchups = np.array([[0, 1], [1, 2], [0, 2]] * 30)
    outcomes = np.array([1.0, 1.0, 1.0] * 30)
    outcomes[::10] = 0.0
    log_posterior = bradley_terry_log_posterior(matchups, outcomes, num_competitors=3)
    sampler = MetropolisHastings(log_posterior, proposal_scale=0.3, param_names=['a', 'b', 'c'], seed=3)
    result = sampler.sample(np.zeros(3), n_samples=5000, burn_in=1000)
    means = result.samples.mean(axis=(0, 1))
    assert means[0] > means[1] > means[2]


def test_thinning_and_per_chain_initial_points():
    sampler = MetropolisHastings(standard_normal, proposal_scale=1.0, seed=0)
    result = sampler.sample(initial=[[-1.0, 0.0], [1.0, 0.0], [0.0, 2.0]], n_samples=100, thin=5, n_chains=3)
    assert result.samples.shape == (3, 100, 2)
    assert result.param_names == ['theta_0', 'theta_1']
    frame = result.to_frame()
    assert list(frame.columns) == ['chain', 'draw', 'theta_0', 'theta_1']
    assert len(frame) == 300


def test_same_seed_same_chain():
    first = MetropolisHastings(standard_normal, seed=7).sample(0.0, n_samples=200, n_chains=2)
    second = MetropolisHastings(standard_normal, seed=7).sample(0.0, n_samples=200, n_chains=2)
    np.testing.assert_array_equal(first.samples, second.samples)
    # chains are seeded independently
    assert not np.array_equal(first.samples[0], first.samples[1])


def test_rejected_proposals_repeat_state(caplog):
    # support is [0, 1], a huge proposal scale means almost every step is rejected
    def uniform(theta):
        return 0.0 if 0.0 <= theta[0] <= 1.0 else -math.inf

    caplog.set_level(logging.WARNING, logger='sportstat.sampling.metropolis')
    result = MetropolisHastings(uniform, proposal_scale=1000.0, seed=0).sample(0.5, n_samples=500)
    draws = result.draws()
    assert np.all((draws >= 0.0) & (draws <= 1.0))
    assert len(np.unique(draws)) < 50
    assert result.acceptance_rates[0] < 0.05
    assert any('outside [0.1, 0.9]' in record.getMessage() for record in caplog.records)


def test_nan_log_density_is_rejected():
    def nan_outside(theta):
        return -0.5 * theta[0] ** 2 if theta[0] > 0.0 else math.nan

    draws = MetropolisHastings(nan_outside, seed=0).sample(1.0, n_samples=2000).draws()
    assert np.all(draws > 0.0)


@pytest.mark.parametrize(
    'kwargs',
    [
        {'n_samples': 0},
        {'n_samples': 10, 'burn_in': -1},
        {'n_samples': 10, 'thin': 0},
        {'n_samples': 10, 'n_chains': 0},
    ],
)
def test_invalid_sample_arguments(kwargs):
    with pytest.raises(ValueError):
        MetropolisHastings(standard_normal).sample(0.0, **kwargs)


def test_invalid_initial_point():
    sampler = MetropolisHastings(beta_binomial_log_posterior(3, 10))
    with pytest.raises(ValueError):
        sampler.sample(initial=1.5, n_samples=10)
    with pytest.raises(ValueError):
        MetropolisHastings(standard_normal, proposal_scale=[1.0, 1.0, 1.0]).sample([0.0, 0.0], n_samples=10)
    with pytest.raises(ValueError):
        MetropolisHastings(standard_normal).sample([[0.0], [1.0]], n_samples=10, n_chains=3)


def test_invalid_proposal_scale():
    with pytest.raises(ValueError):
        MetropolisHastings(standard_normal, proposal_scale=0.0)


def test_invalid_posterior_arguments():
    with pytest.raises(ValueError):
        beta_binomial_log_posterior(11, 10)
    with pytest.raises(ValueError):
        beta_binomial_log_posterior(1, 10, a=0.0)
    with pytest.raises(ValueError):
        normal_mean_log_posterior([1.0], sigma=0.0)
    with pytest.raises(ValueError):
        bradley_terry_log_posterior(np.array([0, 1]), np.array([1.0]), num_competitors=2)
