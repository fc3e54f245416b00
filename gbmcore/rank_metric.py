"""NDCG evaluation for ranking tasks."""

from __future__ import annotations

from .dcg_calculator import DCGCalculator
from .regression_metric import Metric


class NDCGMetric(Metric):
    """Normalised DCG at several positions, averaged over (weighted) queries.

    A query whose documents are all irrelevant counts as NDCG 1.
    """

    def __init__(self, config):
        super().__init__(config)
        self._eval_at = [int(k) for k in config.eval_at]
        DCGCalculator.init(config.label_gain)
        self._query_boundaries: list[int] = []
        self._query_weights: list[float] | None = None
        self._sum_query_weights = 0.0
        self._inverse_max_dcgs: list[list[float]] = []

    def init(self, test_name, metadata, num_data) -> None:
        super().init(test_name, metadata, num_data)
        self._name = f"{test_name}'s " + "".join(f"NDCG@{k} " for k in self._eval_at)
        if metadata.query_boundaries is None:
            raise ValueError("NDCG metric needs query information")
        self._query_boundaries = list(metadata.query_boundaries)
        num_queries = len(self._query_boundaries) - 1
        if metadata.query_weights is None:
            self._query_weights = None
            self._sum_query_weights = float(num_queries)
        else:
            self._query_weights = list(metadata.query_weights)
            self._sum_query_weights = float(sum(self._query_weights))
        self._inverse_max_dcgs = []
        for start, end in zip(self._query_boundaries, self._query_boundaries[1:]):
            max_dcgs = DCGCalculator.cal_max_dcg(self._eval_at, self._label[start:end])
            # a non-positive mark flags a query with no relevant documents
            self._inverse_max_dcgs.append([1.0 / v if v > 0.0 else -1.0 for v in max_dcgs])

    def is_bigger_better(self) -> bool:
        return True

    def eval(self, score) -> list[float]:
        self._check_scores(score, self._num_data)
        result = [0.0] * len(self._eval_at)
        bounds = self._query_boundaries
        for qid, (start, end) in enumerate(zip(bounds, bounds[1:])):
            inverse = self._inverse_max_dcgs[qid]
            if inverse[0] <= 0.0:
                result = [r + 1.0 for r in result]
                continue
            dcgs = DCGCalculator.cal_dcg(self._eval_at, self._label[start:end], score[start:end])
            weight = 1.0 if self._query_weights is None else self._query_weights[qid]
            result = [r + d * inv * weight for r, d, inv in zip(result, dcgs, inverse)]
        return [r / self._sum_query_weights for r in result]