"""Construction of evaluation metrics by name."""

from __future__ import annotations

from .binary_metric import AUCMetric, BinaryErrorMetric, BinaryLoglossMetric
from .multiclass_metric import MultiErrorMetric, MultiLoglossMetric
from .rank_metric import NDCGMetric
from .regression_metric import L1Metric, L2Metric, Metric

_METRICS = {
    "l2": L2Metric,
    "l1": L1Metric,
    "binary_logloss": BinaryLoglossMetric,
    "binary_error": BinaryErrorMetric,
    "auc": AUCMetric,
    "ndcg": NDCGMetric,
    "multi_logloss": MultiLoglossMetric,
    "multi_error": MultiErrorMetric,
}


def create_metric(metric_type, config) -> Metric | None:
    """Return the metric named ``metric_type``, or ``None`` if the name is unknown."""
    metric_class = _METRICS.get(metric_type)
    if metric_class is None:
        return None
    return metric_class(config)