"""The Elo rating system"""
import math
import logging
from typing import Optional
import numpy as np
import pandas as pd
from tqdm import tqdm
from sportstat.core.base import OnlineRatingSystem
from sportstat.utils.math_utils import sigmoid, sigmoid_scalar
from sportstat.utils.constants import ELO_ALPHA, MOV_NUMERATOR, MOV_ELO_SCALE

logger = logging.getLogger(__name__)


def mov_multiplier(margin: float, winner_elo_diff: float) -> float:
    """
    Margin of victory multiplier in the style popularized by FiveThirtyEight's NFL Elo.

    Blowouts move ratings more than close games, but the log damps the effect and the
    denominator shrinks the reward when a heavy favourite runs up the score.
    """
    if margin == 0.0:
        return 1.0
    return math.log(abs(margin) + 1.0) * MOV_NUMERATOR / (MOV_ELO_SCALE * winner_elo_diff + MOV_NUMERATOR)


class Elo(OnlineRatingSystem):
    """
    Implements the Elo rating system with optional home advantage, margin of victory
    multiplier and reversion to the mean between rating periods.
    """

    rating_dim = 1

    def __init__(
        self,
        competitors: list,
        initial_rating: float = 1500.0,
        k: float = 32.0,
        alpha: float = ELO_ALPHA,
        home_advantage: float = 0.0,
        mov_multiplier: bool = False,
        reversion: float = 0.0,
        update_method: str = 'iterative',
        track_history: bool = False,
        progress: bool = False,
        dtype=np.float64,
    ):
        """
        Initializes the Elo rating system with the given parameters.

        Parameters:
            competitors (list): A list of competitors to be rated within the system.
            initial_rating (float, optional): The initial Elo rating for new competitors. Defaults to 1500.0.
            k (float, optional): The K-factor, which controls the rate at which ratings change. Defaults to 32.0.
            alpha (float, optional): Scaling factor used in the calculation of expected scores. Defaults to log(10) / 400.
            home_advantage (float, optional): Rating points added to the first competitor of every matchup. Defaults to 0.
            mov_multiplier (bool, optional): Scale updates by margin of victory when margins are available. Defaults to False.
            reversion (float, optional): Fraction of the way each rating moves back toward initial_rating when a
                                         new rating period starts, e.g. 1/3 between NFL seasons. Defaults to 0.
            update_method (str, optional): 'iterative' treats matchups in a period as sequential,
                                           'batched' applies one simultaneous update. Defaults to 'iterative'.
            track_history (bool, optional): Record every iterative update for later inspection. Defaults to False.
            progress (bool, optional): Show a tqdm progress bar over matchups in iterative updates. Defaults to False.
            dtype: The data type for internal numpy computations. Defaults to np.float64.
        """
        super().__init__(competitors)
        if k <= 0.0:
            raise ValueError(f'k must be positive, got {k}')
        if not 0.0 <= reversion <= 1.0:
            raise ValueError(f'reversion must be in [0, 1], got {reversion}')
        self.initial_rating = initial_rating
        self.k = k
        self.alpha = alpha
        self.home_advantage = home_advantage
        self.use_mov = mov_multiplier
        self.reversion = reversion
        self.track_history = track_history
        self.progress = progress
        self.ratings = np.zeros(shape=self.num_competitors, dtype=dtype) + initial_rating
        self.prev_time_step = None
        self.history = []
        self.cache = {'probs': None}
        self._bind_update_method(update_method)

    def rating_values(self) -> np.ndarray:
        return self.ratings

    def advance_time(self, time_step: Optional[int]):
        """regress ratings toward the mean once per new rating period"""
        if time_step is None:
            return
        if self.prev_time_step is not None and time_step > self.prev_time_step and self.reversion > 0.0:
            self.ratings += self.reversion * (self.initial_rating - self.ratings)
            logger.debug('reverted ratings by %.3f entering time step %s', self.reversion, time_step)
        if self.prev_time_step is None or time_step > self.prev_time_step:
            self.prev_time_step = time_step

    def predict(self, matchups: np.ndarray, time_step: int = None, set_cache: bool = False):
        """
        Probability that the first competitor in each matchup beats the second.

        The probabilities are the logistic function of the rating difference, plus home
        advantage, scaled by alpha. With the default alpha this is the familiar
        1 / (1 + 10 ** (-diff / 400)).

        Parameters:
            matchups (np.ndarray): (n, 2) array of competitor indices.
            time_step (int, optional): Time step of the matchups, used to apply reversion before predicting.
            set_cache (bool, optional): If True, caches the probabilities for use by batched_update.

        Returns:
            np.ndarray: the predicted probabilities.
        """
        self.advance_time(time_step)
        ratings_1 = self.ratings[matchups[:, 0]]
        ratings_2 = self.ratings[matchups[:, 1]]
        probs = sigmoid(self.alpha * (ratings_1 - ratings_2 + self.home_advantage))
        if set_cache:
            self.cache['probs'] = probs
        return probs

    def get_pre_match_ratings(self, matchups: np.ndarray, time_step: Optional[int] = None, **kwargs):
        self.advance_time(time_step)
        return self.ratings[matchups]

    def _multipliers(self, diffs: np.ndarray, outcomes: np.ndarray, margins: Optional[np.ndarray]) -> np.ndarray:
        if not self.use_mov or margins is None:
            return np.ones_like(diffs)
        winner_diffs = np.where(outcomes >= 0.5, diffs, -diffs)
        return np.array([mov_multiplier(margin, diff) for margin, diff in zip(margins, winner_diffs)])

    def batched_update(self, matchups, outcomes, time_step=None, use_cache=False, margins=None, **kwargs):
        """
        Apply a single update based on all results of the rating period.

        Parameters:
            matchups: Matchup information for the rating period.
            outcomes: Results of the matchups.
            use_cache: Flag to use cached probabilities or calculate anew.
            margins: Optional margins of victory of the first competitor.
        """
        self.advance_time(time_step)
        if use_cache and self.cache['probs'] is not None:
            probs = self.cache['probs']
            # cached probs belong to this period only
            self.cache['probs'] = None
        else:
            probs = self.predict(matchups=matchups, time_step=time_step, set_cache=False)
        diffs = self.ratings[matchups[:, 0]] - self.ratings[matchups[:, 1]] + self.home_advantage
        deltas = self.k * self._multipliers(diffs, outcomes, margins) * (outcomes - probs)
        if self.track_history:
            pre_ratings = self.ratings[matchups]
            for idx in range(matchups.shape[0]):
                comp_1, comp_2 = matchups[idx]
                self.history.append(
                    {
                        'time_step': time_step,
                        'competitor_1': self.competitors[comp_1],
                        'competitor_2': self.competitors[comp_2],
                        'pre_rating_1': pre_ratings[idx, 0],
                        'pre_rating_2': pre_ratings[idx, 1],
                        'expected': probs[idx],
                        'outcome': outcomes[idx],
                        'post_rating_1': pre_ratings[idx, 0] + deltas[idx],
                        'post_rating_2': pre_ratings[idx, 1] - deltas[idx],
                    }
                )
        per_competitor = np.zeros_like(self.ratings)
        np.add.at(per_competitor, matchups[:, 0], deltas)
        np.add.at(per_competitor, matchups[:, 1], -deltas)
        self.ratings += per_competitor

    def iterative_update(self, matchups, outcomes, time_step=None, margins=None, **kwargs):
        """
        Treats the matchups in the rating period as sequential events.

        Parameters:
            matchups: Sequential matchups in the rating period.
            outcomes: Results of each matchup.
            margins: Optional margins of victory of the first competitor.
        """
        self.advance_time(time_step)
        rows = range(matchups.shape[0])
        if self.progress:
            rows = tqdm(rows)
        for idx in rows:
            comp_1, comp_2 = matchups[idx]
            outcome = outcomes[idx]
            diff = self.ratings[comp_1] - self.ratings[comp_2] + self.home_advantage
            prob = sigmoid_scalar(self.alpha * diff)
            multiplier = 1.0
            if self.use_mov and margins is not None:
                multiplier = mov_multiplier(margins[idx], diff if outcome >= 0.5 else -diff)
            update = self.k * multiplier * (outcome - prob)
            if self.track_history:
                self.history.append(
                    {
                        'time_step': time_step,
                        'competitor_1': self.competitors[comp_1],
                        'competitor_2': self.competitors[comp_2],
                        'pre_rating_1': self.ratings[comp_1],
                        'pre_rating_2': self.ratings[comp_2],
                        'expected': prob,
                        'outcome': outcome,
                        'post_rating_1': self.ratings[comp_1] + update,
                        'post_rating_2': self.ratings[comp_2] - update,
                    }
                )
            self.ratings[comp_1] += update
            self.ratings[comp_2] -= update

    def history_frame(self) -> pd.DataFrame:
        if not self.track_history:
            raise ValueError('history is only recorded when track_history=True')
        return pd.DataFrame.from_records(self.history)
