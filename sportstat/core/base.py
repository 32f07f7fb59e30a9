"""base class for online rating systems"""
from abc import ABC
from typing import Optional
import numpy as np
import pandas as pd
from sportstat.utils.data_utils import MatchupDataset


class OnlineRatingSystem(ABC):
    """
    Base class for online rating systems. This class provides the framework shared by
    rating systems such as Elo: competitors are referred to by integer index, matchups are
    (n, 2) arrays of indices and outcomes are from the perspective of the first column.

    Attributes:
        rating_dim (int): Dimension of competitor ratings, 1 for systems like Elo where
                          each competitor has a single rating value.
        competitors (list): A list of competitors within the rating system.
        num_competitors (int): The number of competitors in the system.
    """

    rating_dim: int

    def __init__(self, competitors):
        """
        Initializes a new instance of an online rating system with a list of competitors.

        Parameters:
            competitors (list): A list of competitors to be included in the rating system.
        """
        self.competitors = competitors
        self.num_competitors = len(competitors)

    def _bind_update_method(self, update_method: str):
        if update_method == 'batched':
            self.update = self.batched_update
        elif update_method == 'iterative':
            self.update = self.iterative_update
        else:
            raise ValueError(f"update_method must be 'iterative' or 'batched', got {update_method!r}")

    def predict(
        self,
        matchups: np.ndarray,
        time_step: int = None,
        set_cache: bool = False,
    ):
        raise NotImplementedError

    def update(
        self,
        matchups: np.ndarray,
        outcomes: np.ndarray,
        time_step: Optional[int],
        use_cache: bool = False,
        margins: Optional[np.ndarray] = None,
    ):
        """
        Updates competitor ratings based on new matchup results.

        Parameters:
            matchups (np.ndarray): Array of matchups, where each matchup is represented by a pair of competitor indices
            outcomes (np.ndarray): Array of outcomes corresponding to each matchup represented as win (1), loss (0), or draw (0.5).
            time_step (int): The current time step or period of the rating update, used to adjust ratings over time.
            use_cache (bool, optional): Whether to use values cached during a prior call to predict(). Defaults to False.
            margins (np.ndarray, optional): Margin of victory of the first competitor in each matchup.
        """
        raise NotImplementedError

    def batched_update(self, matchups: np.ndarray, outcomes: np.ndarray, time_step: int, use_cache=False, **kwargs):
        """
        Performs a batched update of ratings treating all matchups of a time step as simultaneous.
        """
        raise NotImplementedError

    def iterative_update(self, matchups: np.ndarray, outcomes: np.ndarray, time_step: int, use_cache=False, **kwargs):
        """
        Updates ratings for each matchup in order, treating them as sequential events.
        """
        raise NotImplementedError

    def get_pre_match_ratings(self, matchups: np.ndarray, time_step: Optional[int] = None) -> np.ndarray:
        """
        Returns the ratings for competitors at the timestep of the matchups
        Useful when using pre-match ratings as features in downstream models

        Parameters:
            matchups (np.ndarray of shape (n,2)): competitor indices
            time_step (optional int)

        Returns:
            np.ndarray of shape (n,2): ratings for specified competitors
        """
        raise NotImplementedError

    def rating_values(self) -> np.ndarray:
        """the current point estimate of each competitor's rating"""
        raise NotImplementedError

    def leaderboard(self, num_places: Optional[int] = None) -> pd.DataFrame:
        """current ratings sorted from best to worst"""
        ratings = self.rating_values()
        frame = pd.DataFrame({'competitor': self.competitors, 'rating': ratings})
        frame = frame.sort_values('rating', ascending=False, kind='stable').reset_index(drop=True)
        frame.index = frame.index + 1
        frame.index.name = 'rank'
        if num_places is not None:
            frame = frame.head(num_places)
        return frame

    def print_leaderboard(self, num_places=None):
        frame = self.leaderboard(num_places)
        max_len = min(max([len(str(comp)) for comp in frame['competitor']] + [10]), 25)
        print(f'{"competitor": <{max_len}}\t{"rating"}')
        for competitor, rating in zip(frame['competitor'], frame['rating']):
            print(f'{str(competitor): <{max_len}}\t{rating:.6f}')

    def fit_batch(
        self,
        matchups: np.ndarray,
        outcomes: np.ndarray,
        time_step: int = None,
        return_pre_match_probs: bool = False,
        return_pre_match_ratings: bool = False,
        cache: bool = False,
        margins: Optional[np.ndarray] = None,
    ):
        if return_pre_match_probs:
            pre_match_probs = self.predict(matchups=matchups, time_step=time_step, set_cache=cache)
        if return_pre_match_ratings:
            pre_match_ratings = self.get_pre_match_ratings(matchups, time_step=time_step)
        self.update(matchups, outcomes, time_step=time_step, use_cache=cache, margins=margins)
        if return_pre_match_probs and return_pre_match_ratings:
            return pre_match_probs, pre_match_ratings
        elif return_pre_match_probs:
            return pre_match_probs
        elif return_pre_match_ratings:
            return pre_match_ratings
        return None

    def fit_dataset(
        self,
        dataset: MatchupDataset,
        return_pre_match_probs: bool = False,
        return_pre_match_ratings: bool = False,
        cache: bool = False,
    ):
        """run a rating system over a dataset one rating period at a time"""
        n_matchups = len(dataset)
        if return_pre_match_probs:
            pre_match_probs = np.empty(shape=(n_matchups))
        if return_pre_match_ratings:
            pre_match_ratings = np.empty(shape=(n_matchups, 2 * self.rating_dim))

        idx = 0
        for matchups, outcomes, time_step in dataset:
            end_idx = idx + matchups.shape[0]
            margins = None if dataset.margins is None else dataset.margins[idx:end_idx]
            batch_outputs = self.fit_batch(
                matchups=matchups,
                outcomes=outcomes,
                time_step=time_step,
                return_pre_match_probs=return_pre_match_probs,
                return_pre_match_ratings=return_pre_match_ratings,
                cache=cache,
                margins=margins,
            )
            if (batch_outputs is not None) and (not isinstance(batch_outputs, tuple)):
                batch_outputs = (batch_outputs,)
            if return_pre_match_probs:
                pre_match_probs[idx:end_idx] = batch_outputs[0]
            if return_pre_match_ratings:
                pre_match_ratings[idx:end_idx] = np.reshape(batch_outputs[-1], (matchups.shape[0], -1))
            idx = end_idx

        if return_pre_match_probs and return_pre_match_ratings:
            return pre_match_probs, pre_match_ratings
        elif return_pre_match_probs:
            return pre_match_probs
        elif return_pre_match_ratings:
            return pre_match_ratings
        return None
