"""utils for evaluating rating systems"""
import time
import logging
from functools import partial
from copy import deepcopy
from multiprocessing import Pool
import numpy as np
from sportstat.core.base import OnlineRatingSystem
from sportstat.utils.data_utils import MatchupDataset
from sportstat.metrics import binary_metrics_suite

logger = logging.getLogger(__name__)


def evaluate(model: OnlineRatingSystem, dataset: MatchupDataset, metrics_mask: np.ndarray = None):
    """run a rating system over a dataset and score its pre-match predictions"""
    start_time = time.time()
    if metrics_mask is None:
        metrics_mask = np.ones(len(dataset), dtype=np.bool_)
    probs = model.fit_dataset(dataset, return_pre_match_probs=True)[metrics_mask]
    outcomes = dataset.outcomes[metrics_mask]
    duration = time.time() - start_time
    metrics = binary_metrics_suite(probs, outcomes)
    metrics['duration'] = duration
    return metrics


def eval_wrapper(params, rating_system_class, dataset, metrics_mask):
    model = rating_system_class(competitors=dataset.competitors, **params)
    return evaluate(model, dataset, metrics_mask)


def grid_search(
    rating_system_class,
    dataset,
    metrics_mask,
    param_configurations=None,
    metric='log_loss',
    minimize_metric=True,
    num_processes=None,
    return_all_metrics=False,
):
    """Evaluate every parameter configuration and return the best one with its metrics."""
    if not param_configurations:
        raise ValueError('param_configurations must contain at least one configuration')

    func = partial(
        eval_wrapper,
        rating_system_class=rating_system_class,
        dataset=dataset,
        metrics_mask=metrics_mask,
    )
    if num_processes:
        with Pool(num_processes) as pool:
            all_metrics = pool.map(func, param_configurations)
    else:
        all_metrics = list(map(func, param_configurations))

    if metric not in all_metrics[0]:
        raise ValueError(f'unknown metric {metric!r}, expected one of {sorted(all_metrics[0])}')

    best_params = {}
    best_metrics = {}
    metric_multiplier = 1.0 if minimize_metric else -1.0
    best_metric = np.inf
    for current_params, current_metrics in zip(param_configurations, all_metrics):
        current_metric = current_metrics[metric]
        if current_metric * metric_multiplier < best_metric:
            best_metric = current_metric * metric_multiplier
            best_metrics = deepcopy(current_metrics)
            best_params = current_params
    logger.info('best %s=%.6f with %s', metric, best_metrics[metric], best_params)

    if not return_all_metrics:
        return best_params, best_metrics
    return best_params, best_metrics, all_metrics
