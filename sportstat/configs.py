"""default hyperparameters and search grids"""
import itertools
import numpy as np

ELO_DEFAULTS = {
    'initial_rating': 1500.0,
    'k': 32.0,
    'home_advantage': 0.0,
}

# the FiveThirtyEight NFL settings: k=20, 65 points of home field, 1/3 regression between seasons
NFL_ELO = {
    'initial_rating': 1505.0,
    'k': 20.0,
    'home_advantage': 65.0,
    'mov_multiplier': True,
    'reversion': 1.0 / 3.0,
}

ELO_GRID = {
    'k': np.linspace(4, 64, num=16),
    'home_advantage': [0.0, 25.0, 50.0, 75.0, 100.0],
}

RAPM_DEFAULTS = {
    'alphas': tuple(np.logspace(-1, 4, num=26)),
    'per': 100.0,
}

MCMC_DEFAULTS = {
    'n_samples': 5000,
    'burn_in': 1000,
    'thin': 1,
    'n_chains': 4,
}


def expand_grid(grid: dict) -> list:
    """turn {'k': [16, 32], 'home_advantage': [0, 50]} into a list of parameter dicts"""
    keys = list(grid.keys())
    return [dict(zip(keys, values)) for values in itertools.product(*grid.values())]
