"""Multilevel (mixed-effects) models with statsmodels MixedLM"""
import logging
from typing import Optional
import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from sportstat.models.regression import check_formula

logger = logging.getLogger(__name__)

RANDOM_INTERCEPT_NAMES = {'Group': 'intercept', 'Intercept': 'intercept'}


class MultilevelFit:
    """
    Wraps a fitted statsmodels MixedLMResults with the quantities usually reported for
    a multilevel model: fixed effects, variance components, intraclass correlation and
    the predicted group effects.
    """

    def __init__(self, result, group_col: str):
        self.result = result
        self.group_col = group_col

    @property
    def fixed_effects(self) -> pd.Series:
        return self.result.fe_params

    @property
    def group_variance(self) -> float:
        """variance of the random intercept"""
        return float(np.asarray(self.result.cov_re)[0, 0])

    @property
    def residual_variance(self) -> float:
        return float(self.result.scale)

    @property
    def icc(self) -> float:
        """share of the total variance explained by group membership"""
        total = self.group_variance + self.residual_variance
        return self.group_variance / total if total > 0.0 else 0.0

    def group_effects(self) -> pd.DataFrame:
        """predicted random effects (BLUPs), one row per group"""
        effects = pd.DataFrame.from_dict(self.result.random_effects, orient='index')
        effects = effects.rename(columns=RANDOM_INTERCEPT_NAMES)
        effects.index.name = self.group_col
        return effects.sort_index()


def fit_random_intercepts(
    formula: str,
    data: pd.DataFrame,
    group_col: str,
    re_formula: Optional[str] = None,
    reml: bool = True,
) -> MultilevelFit:
    """
    Fit a linear mixed model with a random intercept for every level of group_col,
    plus random slopes when re_formula names them (e.g. '~minutes').
    """
    check_formula(formula, data)
    if group_col not in data.columns:
        raise ValueError(f'group column {group_col!r} is not in the data')
    num_groups = data[group_col].nunique()
    if num_groups < 2:
        raise ValueError(f'a multilevel model needs at least 2 groups, got {num_groups}')
    model = smf.mixedlm(formula, data=data, groups=data[group_col], re_formula=re_formula)
    result = model.fit(reml=reml)
    fit = MultilevelFit(result, group_col)
    logger.info(
        'fit mixed model %s with %d groups, group variance %.4f, residual variance %.4f',
        formula,
        num_groups,
        fit.group_variance,
        fit.residual_variance,
    )
    return fit


def pooling_comparison(data: pd.DataFrame, response_col: str, group_col: str, fit: MultilevelFit) -> pd.DataFrame:
    """
    Compare no pooling (each group's raw mean), complete pooling (the overall mean) and
    partial pooling (the mixed model's fitted values averaged within each group).
    Small groups are pulled hardest toward the overall mean.
    """
    frame = pd.DataFrame(
        {
            group_col: data[group_col].to_numpy(),
            'response': data[response_col].to_numpy(),
            'fitted': np.asarray(fit.result.fittedvalues),
        }
    )
    grouped = frame.groupby(group_col)
    comparison = pd.DataFrame(
        {
            'count': grouped['response'].size(),
            'no_pooling': grouped['response'].mean(),
            'partial_pooling': grouped['fitted'].mean(),
        }
    )
    comparison['complete_pooling'] = frame['response'].mean()
    return comparison[['count', 'no_pooling', 'complete_pooling', 'partial_pooling']]
