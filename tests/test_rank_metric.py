import pytest

from gbmcore.config import MetricConfig
from gbmcore.metadata import Metadata
from gbmcore.rank_metric import NDCGMetric


def _metadata(labels, boundaries, query_weights=None):
    md = Metadata()
    md.num_data = len(labels)
    md.label = list(labels)
    md.query_boundaries = None if boundaries is None else list(boundaries)
    md.query_weights = None if query_weights is None else list(query_weights)
    return md


def _metric(labels, boundaries, query_weights=None, eval_at=None):
    config = MetricConfig()
    if eval_at is not None:
        config.eval_at = eval_at
    metric = NDCGMetric(config)
    metric.init("test", _metadata(labels, boundaries, query_weights), len(labels))
    return metric


LABELS = [2.0, 1.0, 0.0, 0.0, 3.0, 1.0]
BOUNDS = [0, 3, 6]


def test_name_lists_positions():
    metric = _metric(LABELS, BOUNDS)
    assert metric.name() == "test's NDCG@1 NDCG@2 NDCG@3 NDCG@4 NDCG@5 "
    assert metric.is_bigger_better() is True


def test_perfect_ranking_is_one_everywhere():
    metric = _metric(LABELS, BOUNDS)
    assert metric.eval(LABELS) == pytest.approx([1.0] * 5)


def test_values_in_unit_interval_and_imperfect_below_one():
    metric = _metric(LABELS, BOUNDS, eval_at=[1, 3])
    values = metric.eval([-x for x in LABELS])
    assert len(values) == 2
    assert all(0.0 <= v <= 1.0 for v in values)
    assert values[0] < 1.0


def test_query_without_relevant_documents_counts_as_one():
    metric = _metric([0.0, 0.0, 0.0], [0, 3], eval_at=[1, 2])
    assert metric.eval([0.3, 0.1, 0.2]) == [1.0, 1.0]


def test_equal_query_weights_match_unweighted():
    scores = [0.1, 0.9, 0.5, 0.2, 0.3, 0.8]
    plain = _metric(LABELS, BOUNDS).eval(scores)
    weighted = _metric(LABELS, BOUNDS, query_weights=[2.0, 2.0]).eval(scores)
    assert weighted == pytest.approx(plain)


def test_weights_favour_the_heavier_query():
    # first query perfectly ranked, second reversed
    scores = [3.0, 2.0, 1.0, 3.0, 1.0, 2.0]
    light = _metric(LABELS, BOUNDS, query_weights=[1.0, 5.0], eval_at=[1]).eval(scores)[0]
    heavy = _metric(LABELS, BOUNDS, query_weights=[5.0, 1.0], eval_at=[1]).eval(scores)[0]
    assert heavy > light


def test_missing_query_information_rejected():
    with pytest.raises(ValueError):
        _metric(LABELS, None)


def test_too_few_scores_rejected():
    metric = _metric(LABELS, BOUNDS)
    with pytest.raises(ValueError):
        metric.eval([0.0, 1.0])