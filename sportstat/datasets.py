"""synthetic data generators with known ground truth for every model in the package"""
import math
import time
import numpy as np
import pandas as pd
import polars as pl
from sportstat.utils.math_utils import sigmoid


def generate_matchup_data(
    num_matchups: int = 10000,
    num_competitors: int = 100,
    num_rating_periods: int = 10,
    strength_var: float = 1.0,
    strength_noise_var: float = 0.1,
    home_advantage: float = 0.0,
    draw_prob: float = 0.0,
    margin_scale: float = 10.0,
    seed: int = 0,
) -> pl.DataFrame:
    """
    Simulate head to head games between competitors with latent gaussian strengths.

    The first competitor of each row is the home side. Margins are drawn around the
    strength difference so that their sign agrees with the outcome, draws have margin 0.

    Returns:
        polars DataFrame with columns date, competitor_1, competitor_2, outcome, margin
    """
    if num_competitors < 2:
        raise ValueError(f'need at least 2 competitors, got {num_competitors}')
    if not 0.0 <= draw_prob < 1.0:
        raise ValueError(f'draw_prob must be in [0, 1), got {draw_prob}')
    start_time = int(time.time())
    matchups_per_period = math.ceil(num_matchups / num_rating_periods)
    period_offsets = np.arange(num_rating_periods) * (3600 * 24)
    timestamps = (start_time + period_offsets).repeat(matchups_per_period)[:num_matchups]

    rng = np.random.default_rng(seed=seed)
    strength_means = rng.normal(loc=0.0, scale=math.sqrt(strength_var), size=num_competitors)
    comp_1 = rng.integers(low=0, high=num_competitors, size=(num_matchups, 1))
    offset = rng.integers(low=1, high=num_competitors, size=(num_matchups, 1))
    comp_2 = np.mod(comp_1 + offset, num_competitors)
    matchups = np.hstack([comp_1, comp_2])
    strengths = strength_means[matchups]
    strengths = strengths + rng.normal(loc=0.0, scale=math.sqrt(strength_noise_var), size=strengths.shape)

    diffs = strengths[:, 0] - strengths[:, 1] + home_advantage
    win_probs = sigmoid(diffs)
    outcomes = (rng.uniform(size=num_matchups) < win_probs).astype(np.float64)
    is_draw = rng.uniform(size=num_matchups) < draw_prob
    outcomes[is_draw] = 0.5

    # margins are at least 1 point in the winner's favour
    magnitudes = np.floor(np.abs(rng.normal(loc=diffs * margin_scale, scale=margin_scale))) + 1.0
    margins = np.where(outcomes == 1.0, magnitudes, -magnitudes)
    margins[is_draw] = 0.0

    df = pl.DataFrame(
        {
            'timestamp': timestamps,
            'competitor_1': matchups[:, 0],
            'competitor_2': matchups[:, 1],
            'outcome': outcomes,
            'margin': margins,
        }
    )
    return df.with_columns(
        (pl.col('timestamp') * 1000).cast(pl.Datetime('ms')).alias('date'),
        pl.concat_str([pl.lit('competitor_'), pl.col('competitor_1').cast(pl.Utf8)]).alias('competitor_1'),
        pl.concat_str([pl.lit('competitor_'), pl.col('competitor_2').cast(pl.Utf8)]).alias('competitor_2'),
    ).select(['date', 'competitor_1', 'competitor_2', 'outcome', 'margin'])


def generate_stint_data(
    num_stints: int = 20000,
    num_players: int = 50,
    players_per_side: int = 5,
    effect_sd: float = 3.0,
    home_advantage: float = 2.0,
    noise_sd: float = 40.0,
    seed: int = 0,
):
    """
    Simulate lineup stints with known player impacts in points per 100 possessions.

    Returns:
        (pandas DataFrame with home_1..home_k, away_1..away_k, possessions and margin columns,
         pandas Series of true player effects)
    """
    if num_players < 2 * players_per_side:
        raise ValueError(f'need at least {2 * players_per_side} players, got {num_players}')
    rng = np.random.default_rng(seed=seed)
    effects = rng.normal(loc=0.0, scale=effect_sd, size=num_players)
    lineups = np.argsort(rng.uniform(size=(num_stints, num_players)), axis=1)[:, : 2 * players_per_side]
    home, away = lineups[:, :players_per_side], lineups[:, players_per_side:]
    possessions = rng.integers(low=5, high=30, size=num_stints).astype(np.float64)

    per_100 = home_advantage + effects[home].sum(axis=1) - effects[away].sum(axis=1)
    # noise in points per 100 shrinks with more possessions
    noise = rng.normal(size=num_stints) * noise_sd * np.sqrt(10.0 / possessions)
    margins = np.round((per_100 + noise) * possessions / 100.0)

    players = np.array([f'player_{idx:03d}' for idx in range(num_players)])
    frame = pd.DataFrame(
        {
            **{f'home_{idx + 1}': players[home[:, idx]] for idx in range(players_per_side)},
            **{f'away_{idx + 1}': players[away[:, idx]] for idx in range(players_per_side)},
            'possessions': possessions,
            'margin': margins,
        }
    )
    return frame, pd.Series(effects, index=players, name='effect')


def generate_grouped_data(
    num_groups: int = 30,
    obs_per_group=20,
    intercept: float = 10.0,
    slope: float = 2.0,
    group_sd: float = 2.0,
    noise_sd: float = 3.0,
    seed: int = 0,
) -> pd.DataFrame:
    """
    Simulate y = intercept + group_effect + slope * x + noise for players nested in teams.
    obs_per_group may be a single count or one count per group, unbalanced groups show off shrinkage.
    """
    rng = np.random.default_rng(seed=seed)
    counts = np.broadcast_to(np.asarray(obs_per_group, dtype=np.int64), (num_groups,))
    if np.any(counts < 1):
        raise ValueError('every group needs at least one observation')
    group_effects = rng.normal(loc=0.0, scale=group_sd, size=num_groups)
    groups = np.repeat(np.arange(num_groups), counts)
    x = rng.normal(size=groups.shape[0])
    y = intercept + group_effects[groups] + slope * x + rng.normal(scale=noise_sd, size=groups.shape[0])
    return pd.DataFrame(
        {
            'group': [f'team_{idx:02d}' for idx in groups],
            'x': x,
            'y': y,
            'true_group_effect': group_effects[groups],
        }
    )


def generate_binomial_groups(
    num_groups: int = 20,
    min_attempts: int = 10,
    max_attempts: int = 500,
    mean_rate: float = 0.75,
    logit_sd: float = 0.4,
    seed: int = 0,
) -> pd.DataFrame:
    """simulate per player success counts, e.g. made free throws out of attempts"""
    if not 0.0 < mean_rate < 1.0:
        raise ValueError(f'mean_rate must be in (0, 1), got {mean_rate}')
    rng = np.random.default_rng(seed=seed)
    true_rates = sigmoid(math.log(mean_rate / (1.0 - mean_rate)) + rng.normal(scale=logit_sd, size=num_groups))
    attempts = rng.integers(low=min_attempts, high=max_attempts + 1, size=num_groups)
    successes = rng.binomial(attempts, true_rates)
    return pd.DataFrame(
        {
            'group': [f'player_{idx:02d}' for idx in range(num_groups)],
            'successes': successes,
            'attempts': attempts,
            'true_rate': true_rates,
        }
    )
