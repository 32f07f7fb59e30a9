"""Bayesian hierarchical binomial model sampled with PyMC"""
import logging
import numpy as np
import pandas as pd
import arviz as az
import pymc as pm

logger = logging.getLogger(__name__)


class HierarchicalBinomial:
    """
    Partial pooling of group success rates (free throw percentage by player, conversion rate by
    team, ...) on the logit scale with a non-centred parameterization:

        mu ~ Normal(0, 1.5)
        sigma ~ HalfNormal(1)
        z_j ~ Normal(0, 1)
        theta_j = mu + sigma * z_j
        y_j ~ Binomial(n_j, invlogit(theta_j))

    Sampling uses PyMC's NUTS and the posterior is kept as arviz InferenceData.
    """

    def __init__(self, draws: int = 1000, tune: int = 1000, chains: int = 2, seed: int = 0, cores: int = 1):
        if draws <= 0 or tune < 0 or chains < 1:
            raise ValueError(f'invalid sampler settings draws={draws}, tune={tune}, chains={chains}')
        self.draws = draws
        self.tune = tune
        self.chains = chains
        self.seed = seed
        self.cores = cores

    def build_model(self, groups, successes, attempts) -> pm.Model:
        with pm.Model(coords={'group': groups}) as model:
            mu = pm.Normal('mu', mu=0.0, sigma=1.5)
            sigma = pm.HalfNormal('sigma', sigma=1.0)
            z = pm.Normal('z', mu=0.0, sigma=1.0, dims='group')
            theta = pm.Deterministic('theta', mu + sigma * z, dims='group')
            rate = pm.Deterministic('rate', pm.math.invlogit(theta), dims='group')
            pm.Binomial('y', n=attempts, p=rate, observed=successes, dims='group')
        return model

    def fit(self, df: pd.DataFrame, group_col: str, successes_col: str, attempts_col: str):
        successes = df[successes_col].to_numpy(dtype=np.int64)
        attempts = df[attempts_col].to_numpy(dtype=np.int64)
        if np.any(attempts <= 0) or np.any(successes < 0) or np.any(successes > attempts):
            raise ValueError('need 0 <= successes <= attempts and attempts > 0 for every group')
        groups = df[group_col].astype(str).tolist()
        if len(set(groups)) != len(groups):
            raise ValueError(f'group column {group_col!r} must have one row per group')

        self.model_ = self.build_model(groups, successes, attempts)
        with self.model_:
            self.idata_ = pm.sample(
                draws=self.draws,
                tune=self.tune,
                chains=self.chains,
                cores=self.cores,
                random_seed=self.seed,
                progressbar=False,
            )
        self.groups_ = groups
        self.raw_rates_ = successes / attempts
        self.attempts_ = attempts
        divergences = int(self.idata_.sample_stats['diverging'].sum())
        if divergences:
            logger.warning('%d divergent transitions after tuning', divergences)
        logger.info('sampled hierarchical binomial model for %d groups', len(groups))
        return self

    def _check_fitted(self):
        if not hasattr(self, 'idata_'):
            raise ValueError('model is not fitted yet, call fit first')

    def group_rates(self, hdi_prob: float = 0.94) -> pd.DataFrame:
        """raw and posterior rates per group with a highest density interval"""
        self._check_fitted()
        posterior_rate = self.idata_.posterior['rate']
        hdi = az.hdi(self.idata_, var_names=['rate'], hdi_prob=hdi_prob)['rate']
        return pd.DataFrame(
            {
                'attempts': self.attempts_,
                'raw_rate': self.raw_rates_,
                'posterior_mean': posterior_rate.mean(dim=('chain', 'draw')).values,
                'hdi_lower': hdi.sel(hdi='lower').values,
                'hdi_upper': hdi.sel(hdi='higher').values,
            },
            index=pd.Index(self.groups_, name='group'),
        )

    def summary(self, var_names=('mu', 'sigma')) -> pd.DataFrame:
        self._check_fitted()
        return az.summary(self.idata_, var_names=list(var_names))
