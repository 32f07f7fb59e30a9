from datetime import datetime
import pytest
import numpy as np
import polars as pl
from sportstat.datasets import generate_matchup_data
from sportstat.utils.data_utils import MatchupDataset, split_matchup_dataset
from sportstat.utils.date_utils import get_duration


def small_frame():
    return pl.DataFrame(
        {
            'date': [datetime(2024, 9, 1), datetime(2024, 9, 2), datetime(2024, 9, 9), datetime(2024, 9, 20)],
            'home': ['KC', 'BUF', 'KC', 'BAL'],
            'away': ['BAL', 'NYJ', 'BUF', 'NYJ'],
            'result': [1.0, 0.0, 0.5, 1.0],
            'margin': [7, -3, 0, 14],
            'season': [2024, 2024, 2025, 2025],
        }
    )


def test_indexing_and_periods():
    dataset = MatchupDataset(
        small_frame(),
        competitor_cols=['home', 'away'],
        outcome_col='result',
        datetime_col='date',
        rating_period='1W',
        margin_col='margin',
        verbose=False,
    )
    assert dataset.competitors == ['BAL', 'BUF', 'KC', 'NYJ']
    assert dataset.matchups.tolist() == [[2, 0], [1, 3], [2, 1], [0, 3]]
    assert dataset.margins.tolist() == [7.0, -3.0, 0.0, 14.0]
    assert dataset.time_steps.tolist() == [0, 0, 1, 2]
    periods = list(dataset)
    assert len(periods) == 3
    assert periods[0][0].shape == (2, 2)
    assert periods[2][2] == 2


def test_time_step_col():
    dataset = MatchupDataset(
        small_frame(),
        competitor_cols=['home', 'away'],
        outcome_col='result',
        time_step_col='season',
        verbose=False,
    )
    assert [matchups.shape[0] for matchups, _, _ in dataset] == [2, 2]


def test_exactly_one_time_column():
    with pytest.raises(ValueError):
        MatchupDataset(small_frame(), ['home', 'away'], 'result', verbose=False)
    with pytest.raises(ValueError):
        MatchupDataset(
            small_frame(), ['home', 'away'], 'result', datetime_col='date', time_step_col='season', verbose=False
        )


def test_unsorted_times_rejected():
    df = small_frame().reverse()
    with pytest.raises(ValueError):
        MatchupDataset(df, ['home', 'away'], 'result', time_step_col='season', verbose=False)


def test_self_matchup_rejected():
    df = small_frame().with_columns(pl.col('home').alias('away'))
    with pytest.raises(ValueError):
        MatchupDataset(df, ['home', 'away'], 'result', time_step_col='season', verbose=False)


def test_split_keeps_margins():
    df = generate_matchup_data(num_matchups=100, num_competitors=10, num_rating_periods=5)
    dataset = MatchupDataset(
        df, ['competitor_1', 'competitor_2'], 'outcome', datetime_col='date', rating_period='1D',
        margin_col='margin', verbose=False,
    )
    train, test = split_matchup_dataset(dataset, test_fraction=0.2)
    assert len(train) == 80
    assert len(test) == 20
    assert test.margins.shape == (20,)
    assert train.competitors == dataset.competitors
    assert np.all(np.sign(dataset.margins) == np.sign(2.0 * dataset.outcomes - 1.0))


@pytest.mark.parametrize('duration,seconds', [('1W', 604800), ('7D', 604800), ('24h', 86400), ('30S', 30)])
def test_get_duration(duration, seconds):
    assert get_duration(duration) == seconds


@pytest.mark.parametrize('duration', ['W', '1Y', '0D', '1D2H'])
def test_get_duration_invalid(duration):
    with pytest.raises(ValueError):
        get_duration(duration)
