"""Discounted cumulative gain for ranking evaluation."""

from __future__ import annotations

import math

MAX_POSITION = 10000


class DCGCalculator:
    """Computes DCG and ideal DCG with shared, once-initialised gain and discount tables."""

    _inited = False
    _label_gain: list[float] = []
    _discount: list[float] = []

    @classmethod
    def init(cls, label_gain) -> None:
        """Set the gain of each label; only the first call has any effect."""
        if cls._inited:
            return
        cls._label_gain = [float(g) for g in label_gain]
        cls._discount = [1.0 / math.log2(2.0 + i) for i in range(MAX_POSITION)]
        cls._inited = True

    @classmethod
    def _require_init(cls) -> None:
        if not cls._inited:
            raise RuntimeError("DCGCalculator.init must be called first")

    @classmethod
    def _label_index(cls, label) -> int:
        idx = int(label)
        if idx < 0 or idx >= len(cls._label_gain):
            raise ValueError(f"label {label} exceeds the label gain table")
        return idx

    @classmethod
    def cal_max_dcg_at_k(cls, k, labels) -> float:
        """Best possible DCG of the top ``k`` positions."""
        return cls.cal_max_dcg([k], labels)[0]

    @classmethod
    def cal_max_dcg(cls, ks, labels) -> list[float]:
        """Best possible DCG at each position in ``ks``, computed in one pass."""
        cls._require_init()
        gain = cls._label_gain
        counts = [0] * len(gain)
        for label in labels:
            counts[cls._label_index(label)] += 1
        num_data = len(labels)
        top = len(gain) - 1
        result = 0.0
        cur_left = 0
        out: list[float] = []
        for k in ks:
            cur_k = min(k, num_data)
            for j in range(cur_left, cur_k):
                while top > 0 and counts[top] <= 0:
                    top -= 1
                result += cls._discount[j] * gain[top]
                counts[top] -= 1
            out.append(result)
            cur_left = cur_k
        return out

    @classmethod
    def cal_dcg_at_k(cls, k, labels, scores) -> float:
        """DCG of the top ``k`` positions when ranked by ``scores``."""
        return cls.cal_dcg([k], labels, scores)[0]

    @classmethod
    def cal_dcg(cls, ks, labels, scores) -> list[float]:
        """DCG at each position in ``ks`` when ranked by ``scores``, in one pass."""
        cls._require_init()
        num_data = len(labels)
        order = sorted(range(num_data), key=scores.__getitem__, reverse=True)
        result = 0.0
        cur_left = 0
        out: list[float] = []
        for k in ks:
            cur_k = min(k, num_data)
            for j in range(cur_left, cur_k):
                idx = order[j]
                result += cls._label_gain[cls._label_index(labels[idx])] * cls._discount[j]
            out.append(result)
            cur_left = cur_k
        return out