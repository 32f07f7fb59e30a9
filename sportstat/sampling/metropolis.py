"""Random walk Metropolis-Hastings sampler"""
import math
import logging
from typing import Callable, List, Optional, Sequence, Union
import numpy as np
import pandas as pd
import arviz as az
from tqdm import tqdm
from sportstat.utils.constants import ACCEPTANCE_BAND

logger = logging.getLogger(__name__)


class MCMCResult:
    """
    Draws from one or more Markov chains.

    Attributes:
        samples (np.ndarray): array of shape (n_chains, n_draws, dim)
        acceptance_rates (np.ndarray): fraction of accepted proposals in each chain
        param_names (list): one name per dimension
    """

    def __init__(self, samples: np.ndarray, acceptance_rates: np.ndarray, param_names: List[str]):
        self.samples = samples
        self.acceptance_rates = acceptance_rates
        self.param_names = list(param_names)

    @property
    def n_chains(self):
        return self.samples.shape[0]

    @property
    def n_draws(self):
        return self.samples.shape[1]

    @property
    def dim(self):
        return self.samples.shape[2]

    def draws(self, param: Union[str, int] = 0) -> np.ndarray:
        """all draws of one parameter with the chains concatenated"""
        idx = self.param_names.index(param) if isinstance(param, str) else param
        return self.samples[:, :, idx].reshape(-1)

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(self.samples.reshape(-1, self.dim), columns=self.param_names)
        frame.insert(0, 'draw', np.tile(np.arange(self.n_draws), self.n_chains))
        frame.insert(0, 'chain', np.repeat(np.arange(self.n_chains), self.n_draws))
        return frame

    def to_inference_data(self) -> az.InferenceData:
        posterior = {name: self.samples[:, :, idx] for idx, name in enumerate(self.param_names)}
        return az.convert_to_inference_data(posterior)


class MetropolisHastings:
    """
    Random walk Metropolis-Hastings with a symmetric gaussian proposal.

    Each step proposes theta' = theta + scale * z, z ~ N(0, I), and accepts it with probability
    min(1, p(theta') / p(theta)). The proposal is symmetric so the Hastings correction cancels.
    A rejected proposal repeats the current state in the chain.

    Parameters:
        log_target (callable): unnormalized log density of the target, returns -inf outside the support
        proposal_scale (float or sequence): standard deviation of the proposal, scalar or one per dimension
        param_names (list, optional): names of the parameters, defaults to theta_0, theta_1, ...
        seed (int): seed for the chains, each chain gets an independent stream spawned from it
    """

    def __init__(
        self,
        log_target: Callable[[np.ndarray], float],
        proposal_scale: Union[float, Sequence[float]] = 1.0,
        param_names: Optional[List[str]] = None,
        seed: int = 0,
    ):
        self.log_target = log_target
        self.proposal_scale = np.atleast_1d(np.asarray(proposal_scale, dtype=np.float64))
        if np.any(self.proposal_scale <= 0.0):
            raise ValueError(f'proposal_scale must be positive, got {proposal_scale}')
        self.param_names = param_names
        self.seed = seed

    def _log_density(self, theta: np.ndarray) -> float:
        value = float(self.log_target(theta))
        return -math.inf if math.isnan(value) else value

    def _initial_points(self, initial, n_chains: int) -> np.ndarray:
        initial = np.asarray(initial, dtype=np.float64)
        if initial.ndim == 0:
            initial = initial[None]
        if initial.ndim == 1:
            initial = np.tile(initial, (n_chains, 1))
        if initial.ndim != 2 or initial.shape[0] != n_chains:
            raise ValueError(f'initial must be one point or one point per chain, got shape {initial.shape}')
        dim = initial.shape[1]
        if self.proposal_scale.shape[0] not in (1, dim):
            raise ValueError(f'proposal_scale has {self.proposal_scale.shape[0]} entries for {dim} dimensions')
        if self.param_names is not None and len(self.param_names) != dim:
            raise ValueError(f'got {len(self.param_names)} param_names for {dim} dimensions')
        return initial

    def _run_chain(self, rng, initial, n_samples, burn_in, thin, progress, chain_idx):
        dim = initial.shape[0]
        chain = np.empty((n_samples, dim))
        current = initial.copy()
        current_log_p = self._log_density(current)
        if not math.isfinite(current_log_p):
            raise ValueError(f'log_target is not finite at the initial point of chain {chain_idx}: {current}')

        total_steps = burn_in + n_samples * thin
        steps = range(total_steps)
        if progress:
            steps = tqdm(steps, desc=f'chain {chain_idx}')
        accepted = 0
        for step in steps:
            proposal = current + self.proposal_scale * rng.standard_normal(dim)
            proposal_log_p = self._log_density(proposal)
            # 1 - u lies in (0, 1] so the log is always defined
            if math.log1p(-rng.uniform()) < proposal_log_p - current_log_p:
                current = proposal
                current_log_p = proposal_log_p
                accepted += 1
            if step >= burn_in and (step - burn_in) % thin == 0:
                chain[(step - burn_in) // thin] = current
        return chain, accepted / total_steps

    def sample(
        self,
        initial,
        n_samples: int,
        burn_in: int = 0,
        thin: int = 1,
        n_chains: int = 1,
        progress: bool = False,
    ) -> MCMCResult:
        """
        Run the sampler.

        Parameters:
            initial: starting point, either a single point shared by all chains or an array with one row per chain
            n_samples (int): number of draws to keep per chain
            burn_in (int): number of initial steps discarded from each chain
            thin (int): keep every thin-th step after burn in
            n_chains (int): number of independent chains
            progress (bool): show a tqdm progress bar per chain

        Returns:
            MCMCResult holding samples of shape (n_chains, n_samples, dim)
        """
        if n_samples <= 0:
            raise ValueError(f'n_samples must be positive, got {n_samples}')
        if burn_in < 0:
            raise ValueError(f'burn_in must be non-negative, got {burn_in}')
        if thin < 1:
            raise ValueError(f'thin must be at least 1, got {thin}')
        if n_chains < 1:
            raise ValueError(f'n_chains must be at least 1, got {n_chains}')

        initial = self._initial_points(initial, n_chains)
        dim = initial.shape[1]
        param_names = self.param_names or [f'theta_{idx}' for idx in range(dim)]
        rngs = [np.random.default_rng(seed) for seed in np.random.SeedSequence(self.seed).spawn(n_chains)]

        samples = np.empty((n_chains, n_samples, dim))
        acceptance_rates = np.empty(n_chains)
        for chain_idx in range(n_chains):
            samples[chain_idx], acceptance_rates[chain_idx] = self._run_chain(
                rngs[chain_idx], initial[chain_idx], n_samples, burn_in, thin, progress, chain_idx
            )
            rate = acceptance_rates[chain_idx]
            logger.info('chain %d acceptance rate: %.3f', chain_idx, rate)
            if not ACCEPTANCE_BAND[0] <= rate <= ACCEPTANCE_BAND[1]:
                logger.warning(
                    'chain %d acceptance rate %.3f is outside [%.1f, %.1f], consider changing proposal_scale',
                    chain_idx,
                    rate,
                    *ACCEPTANCE_BAND,
                )
        return MCMCResult(samples, acceptance_rates, param_names)
