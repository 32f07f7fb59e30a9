"""log posterior densities to pair with the Metropolis-Hastings sampler"""
import math
import numpy as np
from scipy import stats
from sportstat.utils.math_utils import log1pexp


def beta_binomial_log_posterior(successes: int, attempts: int, a: float = 1.0, b: float = 1.0):
    """
    Log posterior of a success rate p with a Beta(a, b) prior and a binomial likelihood,
    up to a constant. The exact posterior is Beta(a + successes, b + attempts - successes).
    """
    if successes < 0 or attempts < successes:
        raise ValueError(f'need 0 <= successes <= attempts, got {successes} and {attempts}')
    if a <= 0.0 or b <= 0.0:
        raise ValueError(f'Beta prior parameters must be positive, got a={a}, b={b}')
    failures = attempts - successes

    def log_posterior(theta):
        p = float(np.asarray(theta).reshape(-1)[0])
        if not 0.0 < p < 1.0:
            return -math.inf
        return (successes + a - 1.0) * math.log(p) + (failures + b - 1.0) * math.log1p(-p)

    return log_posterior


def normal_mean_log_posterior(data, sigma: float, prior_mean: float = 0.0, prior_sd: float = 10.0):
    """Log posterior of the mean of normal data with known sigma and a normal prior."""
    data = np.asarray(data, dtype=np.float64)
    if sigma <= 0.0 or prior_sd <= 0.0:
        raise ValueError(f'sigma and prior_sd must be positive, got {sigma} and {prior_sd}')

    def log_posterior(theta):
        mu = float(np.asarray(theta).reshape(-1)[0])
        log_lik = stats.norm.logpdf(data, loc=mu, scale=sigma).sum()
        return log_lik + stats.norm.logpdf(mu, loc=prior_mean, scale=prior_sd)

    return log_posterior


def bradley_terry_log_posterior(matchups: np.ndarray, outcomes: np.ndarray, num_competitors: int, prior_sd: float = 1.0):
    """
    Log posterior of competitor strengths under a Bradley-Terry model,
    p(i beats j) = sigmoid(s_i - s_j), with independent N(0, prior_sd) priors.
    Draws count as half a win for each side.
    """
    matchups = np.asarray(matchups)
    outcomes = np.asarray(outcomes, dtype=np.float64)
    if matchups.ndim != 2 or matchups.shape[1] != 2:
        raise ValueError(f'matchups must have shape (n, 2), got {matchups.shape}')
    if matchups.shape[0] != outcomes.shape[0]:
        raise ValueError('matchups and outcomes must have the same length')

    def log_posterior(strengths):
        strengths = np.asarray(strengths, dtype=np.float64)
        if strengths.shape != (num_competitors,):
            raise ValueError(f'expected {num_competitors} strengths, got shape {strengths.shape}')
        diffs = strengths[matchups[:, 0]] - strengths[matchups[:, 1]]
        # log sigmoid(d) = -log(1 + exp(-d))
        log_lik = -(outcomes * log1pexp(-diffs) + (1.0 - outcomes) * log1pexp(diffs)).sum()
        log_prior = -0.5 * np.square(strengths / prior_sd).sum()
        return log_lik + log_prior

    return log_posterior
