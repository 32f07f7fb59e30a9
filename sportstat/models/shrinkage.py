"""Empirical Bayes shrinkage of success rates with a beta-binomial model"""
import logging
from typing import Optional, Tuple
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def fit_beta_prior(successes, attempts) -> Tuple[float, float]:
    """
    Estimate a Beta(a, b) prior for group success rates by the method of moments.

    The attempt-weighted variance of the observed rates is reduced by the expected binomial
    sampling variance so the prior only describes the spread of the true rates.
    """
    successes = np.asarray(successes, dtype=np.float64)
    attempts = np.asarray(attempts, dtype=np.float64)
    if successes.shape != attempts.shape or successes.ndim != 1:
        raise ValueError('successes and attempts must be 1d arrays of the same length')
    if np.any(attempts <= 0.0) or np.any(successes < 0.0) or np.any(successes > attempts):
        raise ValueError('need 0 <= successes <= attempts and attempts > 0 for every group')
    if successes.shape[0] < 2:
        raise ValueError('need at least 2 groups to estimate a prior')

    rates = successes / attempts
    mean = successes.sum() / attempts.sum()
    observed_var = np.average(np.square(rates - mean), weights=attempts)
    # expected binomial noise in the attempt-weighted variance
    sampling_var = mean * (1.0 - mean) / attempts.mean()
    true_var = observed_var - sampling_var
    if true_var <= 0.0 or mean in (0.0, 1.0):
        raise ValueError('observed rates show no variation beyond binomial noise, cannot fit a beta prior')
    concentration = mean * (1.0 - mean) / true_var - 1.0
    if concentration <= 0.0:
        raise ValueError('between group variance is too large for a beta prior')
    a, b = mean * concentration, (1.0 - mean) * concentration
    logger.info('fit beta prior a=%.3f b=%.3f (mean %.4f, prior attempts %.1f)', a, b, mean, concentration)
    return float(a), float(b)


def shrink_rates(
    df: pd.DataFrame,
    successes_col: str,
    attempts_col: str,
    prior: Optional[Tuple[float, float]] = None,
) -> pd.DataFrame:
    """add raw and shrunk rates, the shrunk rate is the posterior mean (s + a) / (n + a + b)"""
    if prior is None:
        prior = fit_beta_prior(df[successes_col], df[attempts_col])
    a, b = prior
    if a <= 0.0 or b <= 0.0:
        raise ValueError(f'Beta prior parameters must be positive, got {prior}')
    shrunk = df.copy()
    successes = shrunk[successes_col].astype(np.float64)
    attempts = shrunk[attempts_col].astype(np.float64)
    shrunk['raw_rate'] = successes / attempts
    shrunk['shrunk_rate'] = (successes + a) / (attempts + a + b)
    return shrunk
