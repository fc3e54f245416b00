"""Evaluation metrics for multiclass classification."""

from __future__ import annotations

import math
from abc import abstractmethod

from .binary_metric import EPSILON
from .regression_metric import Metric


def _softmax(values: list[float]) -> list[float]:
    peak = max(values)
    exps = [math.exp(v - peak) for v in values]
    total = sum(exps)
    return [e / total for e in exps]


def _class_index(label, num_class: int) -> int:
    k = int(label)
    if k < 0 or k >= num_class:
        raise ValueError(f"label {label} is outside the {num_class} classes")
    return k


class MulticlassMetric(Metric):
    """Point-wise loss over per-class scores, averaged over the (weighted) data.

    Scores are laid out class by class: the score of class ``k`` for row ``i``
    is ``score[k * num_data + i]``.
    """

    def __init__(self, config):
        super().__init__(config)
        self._num_class = int(config.num_class)

    @staticmethod
    @abstractmethod
    def loss_on_point(label, scores) -> float:
        """Loss of one row given the scores of all classes."""

    def eval(self, score) -> list[float]:
        n = self._num_data
        self._check_scores(score, n * self._num_class)
        rows = (
            [float(score[k * n + i]) for k in range(self._num_class)] for i in range(n)
        )
        losses = (self.loss_on_point(label, rec) for label, rec in zip(self._label, rows))
        if self._weights is None:
            sum_loss = math.fsum(losses)
        else:
            sum_loss = math.fsum(loss * w for loss, w in zip(losses, self._weights))
        return [sum_loss / self._sum_weights]


class MultiErrorMetric(MulticlassMetric):
    """Per-row indicator over class scores.

    A row scores 1 when no other class has a strictly higher score than the
    labelled class, and 0 otherwise.
    """

    metric_name = "multi error"

    @staticmethod
    def loss_on_point(label, scores) -> float:
        scores = list(scores)
        k = _class_index(label, len(scores))
        if any(i != k and s > scores[k] for i, s in enumerate(scores)):
            return 0.0
        return 1.0


class MultiLoglossMetric(MulticlassMetric):
    """Negative log of the softmax probability of the labelled class."""

    metric_name = "multi logloss"

    @staticmethod
    def loss_on_point(label, scores) -> float:
        probs = _softmax(list(scores))
        k = _class_index(label, len(probs))
        if probs[k] > EPSILON:
            return -math.log(probs[k])
        return -math.log(EPSILON)