"""
Run the package's models end to end on synthetic data with known ground truth.

Usage:
    python -m sportstat.benchmark elo                  # grid search Elo k and home advantage
    python -m sportstat.benchmark rapm --num-stints 50000
    python -m sportstat.benchmark mcmc --seed 3        # Bradley-Terry strengths by Metropolis-Hastings
"""
import argparse
import logging
import numpy as np
from scipy import stats
from sportstat.configs import ELO_GRID, MCMC_DEFAULTS, expand_grid
from sportstat.datasets import generate_matchup_data, generate_stint_data
from sportstat.eval import grid_search
from sportstat.models.elo import Elo
from sportstat.models.rapm import RAPM
from sportstat.sampling.diagnostics import summarize
from sportstat.sampling.metropolis import MetropolisHastings
from sportstat.sampling.posteriors import bradley_terry_log_posterior
from sportstat.utils.data_utils import MatchupDataset
from sportstat.utils.log_utils import setup_logging


def run_elo_benchmark(num_matchups, num_competitors, seed, num_processes=None):
    df = generate_matchup_data(
        num_matchups=num_matchups,
        num_competitors=num_competitors,
        num_rating_periods=20,
        home_advantage=0.3,
        seed=seed,
    )
    dataset = MatchupDataset(
        df,
        competitor_cols=['competitor_1', 'competitor_2'],
        outcome_col='outcome',
        datetime_col='date',
        rating_period='1D',
        margin_col='margin',
    )
    # score only the second half so early games with uninformed ratings do not dominate
    metrics_mask = np.arange(len(dataset)) >= len(dataset) // 2
    best_params, best_metrics = grid_search(
        Elo,
        dataset,
        metrics_mask,
        param_configurations=expand_grid(ELO_GRID),
        num_processes=num_processes,
    )
    print('best params:', {key: float(val) for key, val in best_params.items()})
    for metric, val in best_metrics.items():
        print(f'{"elo":<7}{metric:<24}: {val:.6f}')


def run_rapm_benchmark(num_stints, num_players, seed):
    df, true_effects = generate_stint_data(num_stints=num_stints, num_players=num_players, seed=seed)
    home_cols = [col for col in df.columns if col.startswith('home_')]
    away_cols = [col for col in df.columns if col.startswith('away_')]
    model = RAPM().fit(df, home_cols, away_cols, margin_col='margin', possessions_col='possessions')
    ratings = model.ratings().set_index('player')
    correlation = stats.pearsonr(ratings['rapm'], true_effects[ratings.index]).statistic
    print(ratings.head(10).to_string())
    print(f'alpha: {model.alpha_:.4f}  home advantage: {model.intercept_:.3f}  corr with truth: {correlation:.3f}')


def run_mcmc_benchmark(num_competitors, seed):
    df = generate_matchup_data(num_matchups=2000, num_competitors=num_competitors, num_rating_periods=1, seed=seed)
    dataset = MatchupDataset(
        df,
        competitor_cols=['competitor_1', 'competitor_2'],
        outcome_col='outcome',
        datetime_col='date',
        rating_period='1D',
    )
    log_posterior = bradley_terry_log_posterior(dataset.matchups, dataset.outcomes, dataset.num_competitors)
    sampler = MetropolisHastings(log_posterior, proposal_scale=0.05, param_names=dataset.competitors, seed=seed)
    result = sampler.sample(np.zeros(dataset.num_competitors), **MCMC_DEFAULTS)
    print(summarize(result).sort_values('mean', ascending=False).to_string())


def main():
    parser = argparse.ArgumentParser(description='sportstat synthetic benchmarks')
    parser.add_argument('model', choices=['elo', 'rapm', 'mcmc'])
    parser.add_argument('--seed', type=int, default=0)
    parser.add_argument('--num-matchups', type=int, default=10000)
    parser.add_argument('--num-competitors', type=int, default=50)
    parser.add_argument('--num-stints', type=int, default=20000)
    parser.add_argument('--num-players', type=int, default=50)
    parser.add_argument('--num-processes', type=int, default=None)
    parser.add_argument('--verbose', action='store_true', help='log at DEBUG level')
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    if args.model == 'elo':
        run_elo_benchmark(args.num_matchups, args.num_competitors, args.seed, args.num_processes)
    elif args.model == 'rapm':
        run_rapm_benchmark(args.num_stints, args.num_players, args.seed)
    else:
        run_mcmc_benchmark(min(args.num_competitors, 20), args.seed)


if __name__ == '__main__':
    main()
