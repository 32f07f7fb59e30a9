"""metrics for scoring rating systems and regression models"""

import numpy as np


def binary_accuracy(probs: np.ndarray, outcomes: np.ndarray) -> float:
    """fraction of rows where the favourite won, a prediction of exactly 0.5 earns half credit"""
    credit = np.where(probs > 0.5, outcomes, 1.0 - outcomes)
    credit = np.where(probs == 0.5, 0.5, credit)
    return float(credit.mean())


def accuracy_without_draws(probs: np.ndarray, outcomes: np.ndarray) -> float:
    """binary accuracy over the decided games only, nan when every game is a draw"""
    decided = outcomes != 0.5
    if not decided.any():
        return np.nan
    return binary_accuracy(probs[decided], outcomes[decided])


def binary_log_loss(probs: np.ndarray, outcomes: np.ndarray, eps: float = 1e-6) -> float:
    """cross entropy of the outcomes (1.0 win, 0.0 loss, 0.5 draw) under the predicted probabilities"""
    clipped = np.clip(probs, eps, 1.0 - eps)
    return float(-np.mean(outcomes * np.log(clipped) + (1.0 - outcomes) * np.log1p(-clipped)))


def brier_score(probs: np.ndarray, outcomes: np.ndarray) -> float:
    """mean squared error of the probabilities"""
    errors = probs - outcomes
    return float(np.dot(errors, errors) / errors.shape[0])


def binary_metrics_suite(probs: np.ndarray, outcomes: np.ndarray):
    metrics = {
        'accuracy': binary_accuracy,
        'accuracy_without_draws': accuracy_without_draws,
        'log_loss': binary_log_loss,
        'brier_score': brier_score,
    }
    return {name: metric(probs, outcomes) for name, metric in metrics.items()}


def rmse(preds: np.ndarray, targets: np.ndarray) -> float:
    return float(np.sqrt(np.square(preds - targets).mean()))


def r_squared(preds: np.ndarray, targets: np.ndarray) -> float:
    """share of the target variance explained by the predictions"""
    total = np.square(targets - targets.mean()).sum()
    if total == 0.0:
        raise ValueError('r_squared is undefined for constant targets')
    return float(1.0 - np.square(targets - preds).sum() / total)
