"""convergence diagnostics and summaries for MCMC output"""
from typing import Dict, Optional
import numpy as np
import pandas as pd
import arviz as az
from sportstat.sampling.metropolis import MCMCResult


def summarize(result: MCMCResult, hdi_prob: float = 0.94) -> pd.DataFrame:
    """posterior summary table: mean, sd, hdi, mcse, ess and r_hat for every parameter"""
    if not 0.0 < hdi_prob < 1.0:
        raise ValueError(f'hdi_prob must be in (0, 1), got {hdi_prob}')
    summary = az.summary(result.to_inference_data(), hdi_prob=hdi_prob)
    # proposals are joint so every parameter shares the chain's acceptance rate
    summary['acceptance_rate'] = float(np.mean(result.acceptance_rates))
    return summary


def rhat(result: MCMCResult) -> Dict[str, float]:
    """rank normalized split r-hat per parameter, values near 1 indicate the chains agree"""
    dataset = az.rhat(result.to_inference_data())
    return {name: float(dataset[name].values) for name in result.param_names}


def ess(result: MCMCResult, method: str = 'bulk') -> Dict[str, float]:
    """effective sample size per parameter"""
    dataset = az.ess(result.to_inference_data(), method=method)
    return {name: float(dataset[name].values) for name in result.param_names}


def autocorrelation(draws: np.ndarray, max_lag: Optional[int] = None) -> np.ndarray:
    """autocorrelation of a single chain at lags 0..max_lag"""
    draws = np.asarray(draws, dtype=np.float64)
    if draws.ndim != 1:
        raise ValueError(f'expected a 1d array of draws, got shape {draws.shape}')
    acf = az.autocorr(draws)
    if max_lag is not None:
        acf = acf[: max_lag + 1]
    return acf
