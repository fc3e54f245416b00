"""Bin storage that keeps only the non-zero bins of a feature."""

from __future__ import annotations

import logging
import struct
from collections import defaultdict

from .ordered_sparse_bin import OrderedSparseBin

_log = logging.getLogger(__name__)

_TYPECODES = ("B", "H", "I")
NUM_FAST_INDEX = 64
_MAX_DELTA = 255
_COUNT = struct.Struct("<i")


class SparseBin:
    """Stores non-zero bins as delta-encoded row positions plus bin values.

    Row gaps larger than 255 are bridged by filler entries whose bin is 0.
    A coarse index over row positions lets readers start close to any row.
    """

    def __init__(self, num_data: int, default_bin: int = 0, typecode: str = "B"):
        if typecode not in _TYPECODES:
            raise ValueError(f"unsupported typecode {typecode!r}")
        self._typecode = typecode
        self._itemsize = struct.calcsize("<" + typecode)
        self._mask = (1 << (8 * self._itemsize)) - 1
        self._num_data = num_data
        self._default_bin = default_bin & self._mask
        if self._default_bin != 0:
            _log.info(
                "Sparse feature has negative values; they are treated as zero as well"
            )
        self._push_buffers: defaultdict[int, list[tuple[int, int]]] = defaultdict(list)
        self._delta: list[int] = [0]
        self._vals: list[int] = []
        self._num_vals = 0
        self._fast_index: list[tuple[int, int]] = []
        self._fast_index_shift = 0
        self.load_from_pairs([])

    @property
    def num_data(self) -> int:
        return self._num_data

    def push(self, tid: int, idx: int, value: int) -> None:
        """Record the bin of row ``idx``; values not above the default bin are dropped."""
        if value <= self._default_bin:
            return
        self._push_buffers[tid].append((idx, value & self._mask))

    def iterator(self, start_idx: int) -> "SparseBinIterator":
        return SparseBinIterator(self, start_idx)

    def construct_histogram(self, data_indices, ordered_gradients, ordered_hessians, out) -> None:
        """Add gradients and hessians of the given rows into ``out``, indexed by bin.

        Rows without a stored entry fall into bin 0.
        """
        lookup = self._non_zero_rows()
        rows = range(len(ordered_gradients)) if data_indices is None else data_indices
        for row, gradient, hessian in zip(rows, ordered_gradients, ordered_hessians):
            entry = out[lookup.get(row, 0)]
            entry.sum_gradients += gradient
            entry.sum_hessians += hessian
            entry.cnt += 1

    def split(self, threshold: int, data_indices) -> tuple[list[int], list[int]]:
        """Partition ascending rows into those with bin <= threshold and those above."""
        indices = list(data_indices)
        lte: list[int] = []
        gt: list[int] = []
        if not indices:
            return lte, gt
        j, cur_pos = self._fast_pair(indices[0])
        for idx in indices:
            while cur_pos < idx and j < self._num_vals:
                j += 1
                cur_pos += self._delta[j]
            bin_value = self._vals[j] if cur_pos == idx and 0 <= j < self._num_vals else 0
            (gt if bin_value > threshold else lte).append(idx)
        return lte, gt

    def create_ordered_bin(self) -> OrderedSparseBin:
        return OrderedSparseBin(self._delta, self._vals)

    def finish_load(self) -> None:
        """Merge pushed entries of all threads and build the compact representation."""
        pairs = [pair for tid in sorted(self._push_buffers) for pair in self._push_buffers[tid]]
        self._push_buffers.clear()
        pairs.sort(key=lambda pair: pair[0])
        self.load_from_pairs(pairs)

    def load_from_pairs(self, non_zero_pairs) -> None:
        """Build the delta encoding from (row, bin) pairs sorted by row."""
        delta: list[int] = []
        vals: list[int] = []
        last_idx = 0
        for cur_idx, bin_value in non_zero_pairs:
            gap = cur_idx - last_idx
            if gap < 0:
                raise ValueError("sparse bin pairs must be sorted by row index")
            while gap > _MAX_DELTA:
                delta.append(_MAX_DELTA)
                vals.append(0)
                gap -= _MAX_DELTA
            delta.append(gap)
            vals.append(bin_value & self._mask)
            last_idx = cur_idx
        delta.append(0)
        self._delta = delta
        self._vals = vals
        self._num_vals = len(vals)
        self._build_fast_index()

    def to_bytes(self) -> bytes:
        n = self._num_vals
        return (
            _COUNT.pack(n)
            + bytes(self._delta[: n + 1])
            + struct.pack(f"<{n}{self._typecode}", *self._vals)
        )

    def sizes_in_byte(self) -> int:
        return _COUNT.size + (self._num_vals + 1) + self._itemsize * self._num_vals

    def load_from_bytes(self, data, local_used_indices) -> None:
        """Restore from serialised data, keeping only ``local_used_indices`` if given."""
        try:
            (num_vals,) = _COUNT.unpack_from(data, 0)
            if num_vals < 0:
                raise ValueError(f"negative value count {num_vals}")
            offset = _COUNT.size
            tmp_delta = struct.unpack_from(f"<{num_vals + 1}B", data, offset)
            offset += num_vals + 1
            tmp_vals = struct.unpack_from(f"<{num_vals}{self._typecode}", data, offset)
        except struct.error as exc:
            raise ValueError(f"malformed sparse bin data: {exc}") from exc

        if not local_used_indices:
            self._delta = list(tmp_delta[:num_vals]) + [0]
            self._vals = list(tmp_vals)
            self._num_vals = num_vals
            self._build_fast_index()
            return

        pairs: list[tuple[int, int]] = []
        cur_pos = tmp_delta[0]
        j = 0
        for new_idx, idx in enumerate(local_used_indices):
            while cur_pos < idx and j < num_vals:
                j += 1
                cur_pos += tmp_delta[j]
            bin_value = tmp_vals[j] if cur_pos == idx and j < num_vals else 0
            if bin_value > 0:
                pairs.append((new_idx, bin_value))
        self.load_from_pairs(pairs)

    def _build_fast_index(self) -> None:
        mod_size = -(-self._num_data // NUM_FAST_INDEX)
        step = 1
        shift = 0
        while step < mod_size:
            step <<= 1
            shift += 1
        index: list[tuple[int, int]] = []
        next_i = 0
        cur_pos = 0
        for i, delta in enumerate(self._delta[: self._num_vals]):
            cur_pos += delta
            while next_i <= cur_pos:
                index.append((i, cur_pos))
                next_i += step
        while next_i < self._num_data:
            index.append((self._num_vals - 1, cur_pos))
            next_i += step
        self._fast_index = index
        self._fast_index_shift = shift

    def _fast_pair(self, start_idx: int) -> tuple[int, int]:
        return self._fast_index[start_idx >> self._fast_index_shift]

    def _non_zero_rows(self) -> dict[int, int]:
        rows: dict[int, int] = {}
        cur_pos = 0
        for delta, value in zip(self._delta, self._vals):
            cur_pos += delta
            if value > 0:
                rows[cur_pos] = value
        return rows


class SparseBinIterator:
    """Forward reader over a sparse bin; rows must be requested in ascending order."""

    def __init__(self, bin_data: SparseBin, start_idx: int):
        self._bin_data = bin_data
        self._i_delta, self._cur_pos = bin_data._fast_pair(start_idx)

    def get(self, idx: int) -> int:
        data = self._bin_data
        while self._cur_pos < idx and self._i_delta < data._num_vals:
            self._i_delta += 1
            self._cur_pos += data._delta[self._i_delta]
        if idx == self._cur_pos and 0 <= self._i_delta < len(data._vals):
            return data._vals[self._i_delta]
        return 0