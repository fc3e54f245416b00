"""Evaluation metrics: the common interface and regression losses."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod


class Metric(ABC):
    """Evaluation of model scores against the labels of one data set."""

    metric_name = ""

    def __init__(self, config=None):
        self._name = ""
        self._num_data = 0
        self._label: list[float] = []
        self._weights: list[float] | None = None
        self._sum_weights = 0.0

    def init(self, test_name, metadata, num_data) -> None:
        """Bind the metric to a data set's labels and weights."""
        if metadata.label is None or len(metadata.label) < num_data:
            raise ValueError("metadata holds fewer labels than the data")
        self._name = f"{test_name}'s {self.metric_name}"
        self._num_data = num_data
        self._label = list(metadata.label[:num_data])
        if metadata.weights is None:
            self._weights = None
            self._sum_weights = float(num_data)
        else:
            self._weights = list(metadata.weights[:num_data])
            self._sum_weights = float(sum(self._weights))

    def name(self) -> str:
        return self._name

    def is_bigger_better(self) -> bool:
        return False

    @abstractmethod
    def eval(self, score) -> list[float]:
        """Return the metric values for the given scores."""

    def _check_scores(self, score, count) -> None:
        if len(score) < count:
            raise ValueError(f"expected at least {count} scores, got {len(score)}")


class RegressionMetric(Metric):
    """Point-wise loss averaged over the (weighted) data."""

    @staticmethod
    @abstractmethod
    def loss_on_point(label, score) -> float:
        """Loss of one prediction."""

    @staticmethod
    def average_loss(sum_loss, sum_weights) -> float:
        return sum_loss / sum_weights

    def eval(self, score) -> list[float]:
        self._check_scores(score, self._num_data)
        losses = (self.loss_on_point(label, s) for label, s in zip(self._label, score))
        if self._weights is None:
            sum_loss = math.fsum(losses)
        else:
            sum_loss = math.fsum(loss * w for loss, w in zip(losses, self._weights))
        return [self.average_loss(sum_loss, self._sum_weights)]


class L2Metric(RegressionMetric):
    """Root of the mean squared error."""

    metric_name = "l2 loss"

    @staticmethod
    def loss_on_point(label, score) -> float:
        return (score - label) * (score - label)

    @staticmethod
    def average_loss(sum_loss, sum_weights) -> float:
        return math.sqrt(sum_loss / sum_weights)


class L1Metric(RegressionMetric):
    """Mean absolute error."""

    metric_name = "l1 loss"

    @staticmethod
    def loss_on_point(label, score) -> float:
        return abs(score - label)