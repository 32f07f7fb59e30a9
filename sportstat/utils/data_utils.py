"""Classes and functions for working with matchup data"""

import math
import logging
from typing import List, Optional
import numpy as np
import polars as pl
from sportstat.utils.date_utils import get_duration

logger = logging.getLogger(__name__)


class MatchupDataset:
    """
    Paired comparison dataset split into rating periods.

    Competitors are indexed by their sorted string ids. The first competitor column is
    treated as the home (or designated) side, outcomes are from its perspective:
    1.0 win, 0.0 loss, 0.5 draw.
    """

    def __init__(
        self,
        df: pl.DataFrame,
        competitor_cols: List[str],
        outcome_col: str,
        datetime_col: Optional[str] = None,
        time_step_col: Optional[str] = None,
        rating_period: str = '1W',
        margin_col: Optional[str] = None,
        verbose: bool = True,
    ):
        if len(competitor_cols) != 2:
            raise ValueError(f'Expected exactly 2 competitor columns, got {competitor_cols}')
        self._init_competitors(df, competitor_cols)
        self._init_matchups(df, competitor_cols)
        self.outcomes = df[outcome_col].cast(pl.Float64).to_numpy()
        self.margins = df[margin_col].cast(pl.Float64).to_numpy() if margin_col else None
        self._init_time_steps(df, datetime_col, time_step_col, rating_period)

        if verbose:
            logger.info(
                'Loaded dataset with %d matchups, %d unique competitors and %d rating periods of length %s',
                len(self),
                self.num_competitors,
                len(self.unique_time_steps),
                rating_period if datetime_col else time_step_col,
            )

    def _init_competitors(self, df: pl.DataFrame, competitor_cols: List[str]):
        """Initialize competitor metadata."""
        competitor_series = pl.concat([df[col].cast(pl.Utf8) for col in competitor_cols])
        self.competitors = sorted(competitor_series.unique().to_list())
        self.num_competitors = len(self.competitors)
        self.competitor_to_idx = dict(zip(self.competitors, range(self.num_competitors)))

    def _init_matchups(self, df: pl.DataFrame, competitor_cols: List[str]):
        """Create numerical matchup indices, row order is preserved."""
        mapping = self.competitor_to_idx
        index_1 = df[competitor_cols[0]].cast(pl.Utf8).replace_strict(mapping, return_dtype=pl.Int32)
        index_2 = df[competitor_cols[1]].cast(pl.Utf8).replace_strict(mapping, return_dtype=pl.Int32)
        self.matchups = np.ascontiguousarray(np.column_stack([index_1.to_numpy(), index_2.to_numpy()]))
        if np.any(self.matchups[:, 0] == self.matchups[:, 1]):
            raise ValueError('A competitor cannot be matched against itself')

    def _init_time_steps(
        self,
        df: pl.DataFrame,
        datetime_col: Optional[str],
        time_step_col: Optional[str],
        rating_period: str,
    ):
        """Initialize temporal components."""
        if sum([bool(datetime_col), bool(time_step_col)]) != 1:
            raise ValueError('Specify exactly one of datetime_col or time_step_col')

        if time_step_col:
            self.time_steps = df[time_step_col].to_numpy().astype(np.int64)
        else:
            self.time_steps = self._convert_datetime(df[datetime_col], rating_period)
        if np.any(np.diff(self.time_steps) < 0):
            raise ValueError('Matchups must be sorted by time')
        self._process_time_steps()

    @staticmethod
    def _convert_datetime(datetime_series: pl.Series, rating_period: str) -> np.ndarray:
        """Convert datetime column to time steps."""
        if datetime_series.dtype == pl.Date:
            datetime_series = datetime_series.cast(pl.Datetime)
        elif datetime_series.dtype == pl.Utf8:
            datetime_series = datetime_series.str.to_datetime()

        seconds_since_epoch = (datetime_series.dt.timestamp('ms') // 1_000).to_numpy()
        period_seconds = get_duration(rating_period)
        return ((seconds_since_epoch - seconds_since_epoch[0]) // period_seconds).astype(np.int64)

    def _process_time_steps(self):
        """Calculate time period boundaries."""
        self.unique_time_steps, time_indices = np.unique(self.time_steps, return_index=True)
        self.time_step_end_idxs = np.roll(time_indices, -1)
        if len(self.time_step_end_idxs):
            self.time_step_end_idxs[-1] = len(self.time_steps)

    def __len__(self):
        return self.matchups.shape[0]

    def __iter__(self):
        """Iterate through rating periods."""
        start_idx = 0
        for time_step, end_idx in zip(self.unique_time_steps, self.time_step_end_idxs):
            yield self.matchups[start_idx:end_idx], self.outcomes[start_idx:end_idx], time_step
            start_idx = end_idx

    def __getitem__(self, key):
        if isinstance(key, slice):
            return self.init_from_arrays(
                time_steps=self.time_steps[key],
                matchups=self.matchups[key],
                outcomes=self.outcomes[key],
                competitors=self.competitors,
                margins=None if self.margins is None else self.margins[key],
            )
        raise ValueError('Only slice indexing supported')

    @classmethod
    def init_from_arrays(
        cls,
        time_steps: np.ndarray,
        matchups: np.ndarray,
        outcomes: np.ndarray,
        competitors: list,
        margins: Optional[np.ndarray] = None,
    ):
        """Factory method for creating datasets from arrays."""
        dataset = cls.__new__(cls)
        dataset.time_steps = np.asarray(time_steps)
        dataset.matchups = np.asarray(matchups)
        dataset.outcomes = np.asarray(outcomes, dtype=np.float64)
        dataset.margins = None if margins is None else np.asarray(margins, dtype=np.float64)
        dataset.competitors = competitors
        dataset.num_competitors = len(competitors)
        dataset.competitor_to_idx = dict(zip(competitors, range(len(competitors))))
        dataset._process_time_steps()
        return dataset


def split_matchup_dataset(dataset: MatchupDataset, test_fraction: float = 0.2):
    if not 0.0 <= test_fraction < 1.0:
        raise ValueError(f'test_fraction must be in [0, 1), got {test_fraction}')
    split_idx = math.ceil(len(dataset) * (1.0 - test_fraction))
    train_dataset = dataset[:split_idx]
    test_dataset = dataset[split_idx:]
    logger.info(
        'Split into train_dataset of length %d and test_dataset of length %d',
        len(train_dataset),
        len(test_dataset),
    )
    return train_dataset, test_dataset
