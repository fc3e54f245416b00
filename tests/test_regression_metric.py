import random

import pytest

from gbmcore.metadata import Metadata
from gbmcore.regression_metric import L1Metric, L2Metric, Metric


def _metadata(labels, weights=None):
    metadata = Metadata()
    metadata.num_data = len(labels)
    metadata.label = list(labels)
    metadata.weights = None if weights is None else list(weights)
    return metadata


def _evaluate(metric_cls, labels, scores, weights=None):
    metric = metric_cls()
    metric.init("valid", _metadata(labels, weights), len(labels))
    return metric.eval(scores)


def test_names_and_direction():
    metric = L2Metric()
    metric.init("training", _metadata([0.0]), 1)
    assert metric.name() == "training's l2 loss"
    assert metric.is_bigger_better() is False
    l1 = L1Metric()
    l1.init("valid_1", _metadata([0.0]), 1)
    assert l1.name() == "valid_1's l1 loss"
    assert l1.is_bigger_better() is False


@pytest.mark.parametrize("metric_cls", [L1Metric, L2Metric])
def test_perfect_prediction_has_zero_loss(metric_cls):
    labels = [1.0, 2.0, -3.0]
    assert _evaluate(metric_cls, labels, labels) == [0.0]


@pytest.mark.parametrize("metric_cls", [L1Metric, L2Metric])
def test_constant_offset_gives_offset(metric_cls):
    labels = [1.0, 2.0, -3.0, 0.5]
    offset = 2.5
    scores = [label + offset for label in labels]
    (loss,) = _evaluate(metric_cls, labels, scores)
    assert loss == pytest.approx(offset)


@pytest.mark.parametrize("metric_cls", [L1Metric, L2Metric])
def test_zero_weight_excludes_point(metric_cls):
    labels = [0.0, 0.0, 0.0]
    weighted = _evaluate(metric_cls, labels, [1.0, -1.0, 100.0], weights=[1.0, 1.0, 0.0])
    unweighted = _evaluate(metric_cls, labels[:2], [1.0, -1.0])
    assert weighted[0] == pytest.approx(unweighted[0])
    assert weighted[0] == pytest.approx(1.0)


@pytest.mark.parametrize("metric_cls", [L1Metric, L2Metric])
def test_uniform_weights_match_unweighted(metric_cls):
    rng = random.Random(7)
    labels = [rng.uniform(-5, 5) for _ in range(50)]
    scores = [rng.uniform(-5, 5) for _ in range(50)]
    weighted = _evaluate(metric_cls, labels, scores, weights=[3.0] * 50)
    plain = _evaluate(metric_cls, labels, scores)
    assert weighted[0] == pytest.approx(plain[0])


def test_root_mean_square_not_below_mean_absolute():
    rng = random.Random(11)
    labels = [rng.uniform(-10, 10) for _ in range(100)]
    scores = [rng.uniform(-10, 10) for _ in range(100)]
    (l2,) = _evaluate(L2Metric, labels, scores)
    (l1,) = _evaluate(L1Metric, labels, scores)
    assert l2 >= l1 > 0.0


def test_point_losses():
    assert L2Metric.loss_on_point(1.0, 3.0) == 4.0
    assert L1Metric.loss_on_point(1.0, -2.0) == 3.0
    assert L1Metric.loss_on_point(-2.0, 1.0) == L1Metric.loss_on_point(1.0, -2.0)


def test_average_loss_relation():
    sum_loss, sum_weights = 18.0, 2.0
    assert L2Metric.average_loss(sum_loss, sum_weights) ** 2 == pytest.approx(
        L1Metric.average_loss(sum_loss, sum_weights)
    )


def test_too_few_scores_is_an_error():
    metric = L1Metric()
    metric.init("valid", _metadata([0.0, 1.0]), 2)
    with pytest.raises(ValueError):
        metric.eval([0.0])


def test_missing_labels_is_an_error():
    with pytest.raises(ValueError):
        L1Metric().init("valid", Metadata(), 3)


def test_metric_is_abstract():
    with pytest.raises(TypeError):
        Metric()