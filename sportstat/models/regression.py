"""Classical regression models fit with statsmodels formulas"""
import logging
import re
from typing import Optional
import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

logger = logging.getLogger(__name__)

IDENTIFIER = re.compile(r'(?<![\w.])([A-Za-z_][\w.]*)\s*(\(|=(?!=))?')
QUOTED = re.compile(r'"[^"]*"|\'[^\']*\'')
BUILTIN_NAMES = {'Treatment', 'Sum', 'Diff', 'Helmert', 'Poly', 'True', 'False', 'None'}


def check_formula(formula: str, data: pd.DataFrame):
    """raise a readable error when the formula references columns the data does not have"""
    # drop string literals, numbers like 1e3, function calls like np.log( and keyword arguments
    names = {
        name
        for name, suffix in IDENTIFIER.findall(QUOTED.sub('', formula))
        if not suffix and '.' not in name and name not in BUILTIN_NAMES
    }
    missing = sorted(name for name in names if name not in data.columns)
    if missing:
        raise ValueError(f'formula {formula!r} references columns missing from the data: {missing}')


def fit_linear(formula: str, data: pd.DataFrame, weights: Optional[str] = None):
    """ordinary least squares, or weighted least squares when a weights column is given"""
    check_formula(formula, data)
    if weights is None:
        result = smf.ols(formula, data=data).fit()
    else:
        result = smf.wls(formula, data=data, weights=data[weights]).fit()
    logger.info('fit linear model %s on %d rows, r2=%.3f', formula, int(result.nobs), result.rsquared)
    return result


def fit_logistic(formula: str, data: pd.DataFrame):
    """binomial GLM with the logit link, the response must be 0/1"""
    check_formula(formula, data)
    result = smf.glm(formula, data=data, family=sm.families.Binomial()).fit()
    logger.info('fit logistic model %s on %d rows, deviance=%.3f', formula, int(result.nobs), result.deviance)
    return result


def fit_poisson(formula: str, data: pd.DataFrame, offset_col: Optional[str] = None):
    """Poisson GLM with the log link, offset_col holds exposure on the count scale (e.g. minutes played)"""
    check_formula(formula, data)
    offset = None
    if offset_col is not None:
        exposure = data[offset_col].to_numpy(dtype=np.float64)
        if np.any(exposure <= 0.0):
            raise ValueError(f'offset column {offset_col!r} must be positive')
        offset = np.log(exposure)
    result = smf.glm(formula, data=data, family=sm.families.Poisson(), offset=offset).fit()
    logger.info('fit poisson model %s on %d rows, deviance=%.3f', formula, int(result.nobs), result.deviance)
    return result


def coefficient_table(result, alpha: float = 0.05) -> pd.DataFrame:
    """estimates, standard errors, test statistics, p-values and confidence intervals in one frame"""
    conf_int = result.conf_int(alpha=alpha)
    return pd.DataFrame(
        {
            'estimate': result.params,
            'std_error': result.bse,
            'statistic': result.tvalues,
            'p_value': result.pvalues,
            'ci_lower': conf_int.iloc[:, 0],
            'ci_upper': conf_int.iloc[:, 1],
        }
    )
