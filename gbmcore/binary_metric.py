"""Evaluation metrics for binary classification."""

from __future__ import annotations

import math
from abc import abstractmethod

from .regression_metric import Metric

EPSILON = 1e-15


def _sigmoid(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


class BinaryMetric(Metric):
    """Point-wise loss on sigmoid-transformed scores, averaged over the (weighted) data."""

    def __init__(self, config):
        super().__init__(config)
        self._sigmoid = float(config.sigmoid)
        if self._sigmoid <= 0.0:
            raise ValueError(f"sigmoid parameter {self._sigmoid} should be greater than zero")

    @staticmethod
    @abstractmethod
    def loss_on_point(label, prob) -> float:
        """Loss of one predicted probability."""

    def eval(self, score) -> list[float]:
        self._check_scores(score, self._num_data)
        probs = (_sigmoid(2.0 * self._sigmoid * s) for s in score[: self._num_data])
        losses = (self.loss_on_point(label, p) for label, p in zip(self._label, probs))
        if self._weights is None:
            sum_loss = math.fsum(losses)
        else:
            sum_loss = math.fsum(loss * w for loss, w in zip(losses, self._weights))
        return [sum_loss / self._sum_weights]


class BinaryLoglossMetric(BinaryMetric):
    """Negative log-likelihood of the labels."""

    metric_name = "log loss"

    @staticmethod
    def loss_on_point(label, prob) -> float:
        if label == 0:
            if 1.0 - prob > EPSILON:
                return -math.log(1.0 - prob)
        elif prob > EPSILON:
            return -math.log(prob)
        return -math.log(EPSILON)


class BinaryErrorMetric(BinaryMetric):
    """Fraction of misclassified points at probability threshold 0.5."""

    metric_name = "error rate"

    @staticmethod
    def loss_on_point(label, prob) -> float:
        if prob < 0.5:
            return float(label)
        return 1.0 - label


class AUCMetric(Metric):
    """Area under the ROC curve; tied scores count half."""

    metric_name = "AUC"

    def is_bigger_better(self) -> bool:
        return True

    def eval(self, score) -> list[float]:
        self._check_scores(score, self._num_data)
        if self._num_data <= 0:
            raise ValueError("AUC needs at least one data point")
        order = sorted(range(self._num_data), key=score.__getitem__, reverse=True)
        weights = self._weights
        cur_pos = 0.0
        sum_pos = 0.0
        accum = 0.0
        cur_neg = 0.0
        threshold = score[order[0]]
        for idx in order:
            label = self._label[idx]
            cur_score = score[idx]
            weight = 1.0 if weights is None else weights[idx]
            if cur_score != threshold:
                threshold = cur_score
                accum += cur_neg * (cur_pos * 0.5 + sum_pos)
                sum_pos += cur_pos
                cur_neg = cur_pos = 0.0
            cur_neg += (1.0 - label) * weight
            cur_pos += label * weight
        accum += cur_neg * (cur_pos * 0.5 + sum_pos)
        sum_pos += cur_pos
        auc = 1.0
        if sum_pos > 0.0 and sum_pos != self._sum_weights:
            auc = accum / (sum_pos * (self._sum_weights - sum_pos))
        return [auc]