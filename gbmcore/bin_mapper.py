"""Discretisation of continuous feature values into histogram bins."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field

_HEADER = struct.Struct("<i?d")
_DOUBLE_SIZE = struct.calcsize("<d")


@dataclass
class HistogramBinEntry:
    """Accumulated statistics of one histogram bin."""

    sum_gradients: float = 0.0
    sum_hessians: float = 0.0
    cnt: int = 0


@dataclass
class BinMapper:
    """Maps feature values to bins through a list of bin upper bounds."""

    bin_upper_bound: list[float] = field(default_factory=list)
    is_trival: bool = True
    sparse_rate: float = 0.0

    @property
    def num_bin(self) -> int:
        return len(self.bin_upper_bound)

    def find_bin(self, values, max_bin: int) -> None:
        """Compute bin boundaries from a sample of feature values."""
        if max_bin <= 0:
            raise ValueError(f"max_bin must be positive, got {max_bin}")
        ordered = sorted(values)
        if not ordered:
            raise ValueError("cannot find bins for an empty sample")
        sample_size = len(ordered)

        distinct: list[float] = []
        counts: list[int] = []
        for value in ordered:
            if distinct and value == distinct[-1]:
                counts[-1] += 1
            else:
                distinct.append(value)
                counts.append(1)

        if len(distinct) <= max_bin:
            bounds = [(a + b) / 2 for a, b in zip(distinct, distinct[1:])]
            bounds.append(math.inf)
            cnt_in_bin0 = counts[0]
        else:
            bounds, cnt_in_bin0 = _greedy_bounds(distinct, counts, sample_size, max_bin)

        self.bin_upper_bound = bounds
        self.is_trival = len(bounds) <= 1
        self.sparse_rate = cnt_in_bin0 / sample_size

    @staticmethod
    def size_for_specific_bin(bin_count: int) -> int:
        """Serialised size in bytes of a mapper holding ``bin_count`` bins."""
        return _HEADER.size + bin_count * _DOUBLE_SIZE

    def to_bytes(self) -> bytes:
        n = self.num_bin
        return _HEADER.pack(n, self.is_trival, self.sparse_rate) + struct.pack(
            f"<{n}d", *self.bin_upper_bound
        )

    @classmethod
    def from_bytes(cls, data) -> "BinMapper":
        """Restore a mapper; trailing bytes after the mapper are ignored."""
        try:
            num_bin, is_trival, sparse_rate = _HEADER.unpack_from(data, 0)
            if num_bin < 0:
                raise ValueError(f"negative bin count {num_bin}")
            bounds = struct.unpack_from(f"<{num_bin}d", data, _HEADER.size)
        except struct.error as exc:
            raise ValueError(f"malformed bin mapper data: {exc}") from exc
        return cls(list(bounds), bool(is_trival), sparse_rate)

    def sizes_in_byte(self) -> int:
        return self.size_for_specific_bin(self.num_bin)

    def copy(self) -> "BinMapper":
        return BinMapper(list(self.bin_upper_bound), self.is_trival, self.sparse_rate)


def _greedy_bounds(distinct, counts, sample_size, max_bin):
    """Greedy binning used when there are more distinct values than bins."""
    num_values = len(distinct)
    mean_bin_size = sample_size / max_bin
    rest_sample_cnt = sample_size
    upper = [math.inf] * max_bin
    lower = [math.inf] * max_bin
    cnt_in_bin0 = 0

    by_count = sorted(zip(counts, distinct), key=lambda p: p[0], reverse=True)
    counts = [c for c, _ in by_count]
    distinct = [v for _, v in by_count]

    # values frequent enough get a bin of their own
    bin_cnt = 0
    while bin_cnt < min(num_values, max_bin) and counts[bin_cnt] > mean_bin_size:
        upper[bin_cnt] = lower[bin_cnt] = distinct[bin_cnt]
        rest_sample_cnt -= counts[bin_cnt]
        bin_cnt += 1

    if bin_cnt < max_bin:
        start = bin_cnt
        tail = sorted(zip(distinct[start:], counts[start:]), key=lambda p: p[0])
        distinct[start:] = [v for v, _ in tail]
        counts[start:] = [c for _, c in tail]
        mean_bin_size = rest_sample_cnt / (max_bin - bin_cnt)
        lower[bin_cnt] = distinct[bin_cnt]
        cur_cnt_inbin = 0
        for value, next_value, count in zip(
            distinct[start:], distinct[start + 1:], counts[start:]
        ):
            rest_sample_cnt -= count
            cur_cnt_inbin += count
            if cur_cnt_inbin >= mean_bin_size:
                upper[bin_cnt] = value
                if bin_cnt == 0:
                    cnt_in_bin0 = cur_cnt_inbin
                bin_cnt += 1
                lower[bin_cnt] = next_value
                if bin_cnt >= max_bin - 1:
                    break
                cur_cnt_inbin = 0
                mean_bin_size = rest_sample_cnt / (max_bin - bin_cnt)

    ranges = sorted(zip(lower, upper), key=lambda p: p[0])
    lower = [lo for lo, _ in ranges]
    upper = [up for _, up in ranges]
    closed = max(bin_cnt - 1, 0)
    bounds = [(up + lo) / 2.0 for up, lo in zip(upper[:closed], lower[1:closed + 1])]
    bounds.append(math.inf)
    return bounds, cnt_in_bin0