"""Regularized adjusted plus-minus (RAPM)"""
import logging
from typing import List, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.linear_model import LinearRegression, Ridge, RidgeCV
from sportstat.configs import RAPM_DEFAULTS

logger = logging.getLogger(__name__)

DEFAULT_ALPHAS = RAPM_DEFAULTS['alphas']


def build_stint_matrix(df: pd.DataFrame, home_cols: List[str], away_cols: List[str]):
    """
    Build the sparse stint design matrix used by adjusted plus-minus models.

    Each row is a stint (a stretch of play with no substitutions) and each column a player:
    +1 if the player was on the floor for the home side, -1 for the away side, 0 otherwise.

    Returns:
        (scipy.sparse.csr_matrix of shape (n_stints, n_players), list of players in column order)
    """
    if len(home_cols) == 0 or len(away_cols) == 0:
        raise ValueError('need at least one home and one away player column')
    values = df[list(home_cols) + list(away_cols)].to_numpy()
    if pd.isna(values).any():
        raise ValueError('stint table has missing player ids')
    players = sorted(pd.unique(values.ravel()))
    col_idxs = pd.Index(players).get_indexer(values.ravel()).reshape(values.shape)

    sorted_idxs = np.sort(col_idxs, axis=1)
    duplicated = np.any(sorted_idxs[:, 1:] == sorted_idxs[:, :-1], axis=1)
    if duplicated.any():
        bad_row = int(np.flatnonzero(duplicated)[0])
        raise ValueError(f'a player appears more than once in stint {df.index[bad_row]}')

    n_stints = values.shape[0]
    signs = np.hstack([np.ones(len(home_cols)), -np.ones(len(away_cols))])
    data = np.tile(signs, n_stints)
    row_idxs = np.repeat(np.arange(n_stints), values.shape[1])
    matrix = sparse.csr_matrix((data, (row_idxs, col_idxs.ravel())), shape=(n_stints, len(players)))
    return matrix, players


class RAPM:
    """
    Regularized adjusted plus-minus.

    Regresses the stint scoring margin per `per` possessions on the stint design matrix, weighting
    each stint by its possessions. The ridge penalty shrinks players with little playing time toward
    zero, which is what makes the estimates usable when lineups are highly collinear.
    The intercept is the home advantage per `per` possessions.

    Parameters:
        alpha (float, optional): ridge penalty. None selects it from `alphas` by cross validation,
                                 0 fits unregularized adjusted plus-minus.
        alphas (sequence): candidate penalties when alpha is None.
        cv (int, optional): number of folds for choosing alpha, None uses efficient leave-one-out.
        per (float): possessions the ratings are expressed per. Defaults to 100.
    """

    def __init__(
        self,
        alpha: Optional[float] = None,
        alphas: Sequence[float] = DEFAULT_ALPHAS,
        cv: Optional[int] = None,
        per: float = 100.0,
    ):
        if alpha is not None and alpha < 0.0:
            raise ValueError(f'alpha must be non-negative, got {alpha}')
        self.alpha = alpha
        self.alphas = alphas
        self.cv = cv
        self.per = per

    def fit(
        self,
        df: pd.DataFrame,
        home_cols: List[str],
        away_cols: List[str],
        margin_col: str = 'margin',
        possessions_col: str = 'possessions',
    ):
        possessions = df[possessions_col].to_numpy(dtype=np.float64)
        if np.any(possessions <= 0.0):
            raise ValueError('every stint needs a positive number of possessions')
        design, players = build_stint_matrix(df, home_cols, away_cols)
        target = self.per * df[margin_col].to_numpy(dtype=np.float64) / possessions

        if self.alpha is None:
            model = RidgeCV(alphas=self.alphas, cv=self.cv, fit_intercept=True)
        elif self.alpha == 0.0:
            model = LinearRegression(fit_intercept=True)
        else:
            model = Ridge(alpha=self.alpha, fit_intercept=True)
        model.fit(design, target, sample_weight=possessions)

        self.model_ = model
        self.alpha_ = getattr(model, 'alpha_', self.alpha)
        self.coef_ = np.asarray(model.coef_)
        self.intercept_ = float(model.intercept_)
        self.players_ = players
        self.home_cols_ = list(home_cols)
        self.away_cols_ = list(away_cols)
        abs_design = abs(design)
        self.possessions_ = abs_design.T @ possessions
        self.stints_ = np.asarray(abs_design.sum(axis=0)).ravel()
        logger.info(
            'fit RAPM on %d stints and %d players with alpha=%s, home advantage %.3f per %g possessions',
            design.shape[0],
            len(players),
            self.alpha_,
            self.intercept_,
            self.per,
        )
        return self

    def _check_fitted(self):
        if not hasattr(self, 'coef_'):
            raise ValueError('RAPM model is not fitted yet, call fit first')

    def ratings(self) -> pd.DataFrame:
        """one row per player sorted from best to worst"""
        self._check_fitted()
        frame = pd.DataFrame(
            {
                'player': self.players_,
                'rapm': self.coef_,
                'possessions': self.possessions_,
                'stints': self.stints_.astype(np.int64),
            }
        )
        return frame.sort_values('rapm', ascending=False, kind='stable').reset_index(drop=True)

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        """expected home margin per `per` possessions for each stint, unknown players count as 0"""
        self._check_fitted()
        values = df[self.home_cols_ + self.away_cols_].to_numpy()
        col_idxs = pd.Index(self.players_).get_indexer(values.ravel()).reshape(values.shape)
        coefs = np.append(self.coef_, 0.0)
        effects = coefs[np.where(col_idxs < 0, len(self.coef_), col_idxs)]
        n_home = len(self.home_cols_)
        return self.intercept_ + effects[:, :n_home].sum(axis=1) - effects[:, n_home:].sum(axis=1)
