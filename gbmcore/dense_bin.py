"""Bin storage holding one bin value per data row."""

from __future__ import annotations

import struct
from array import array

_TYPECODES = ("B", "H", "I")


class DenseBin:
    """Stores the bin of every row in a fixed-width unsigned array."""

    # Rows are already stored in row order, so no ordered view is ever built.
    _ordered_bin = None

    def __init__(self, num_data: int, default_bin: int = 0, typecode: str = "B"):
        if typecode not in _TYPECODES:
            raise ValueError(f"unsupported typecode {typecode!r}")
        self._typecode = typecode
        self._itemsize = struct.calcsize("<" + typecode)
        self._mask = (1 << (8 * self._itemsize)) - 1
        self._num_data = num_data
        self._data = array(typecode, [default_bin & self._mask]) * num_data

    @property
    def num_data(self) -> int:
        return self._num_data

    def push(self, tid: int, idx: int, value: int) -> None:
        self._data[idx] = value & self._mask

    def get(self, idx: int) -> int:
        return self._data[idx]

    def iterator(self, start_idx: int) -> "DenseBinIterator":
        return DenseBinIterator(self)

    def construct_histogram(self, data_indices, ordered_gradients, ordered_hessians, out) -> None:
        """Add gradients and hessians of the given rows into ``out``, indexed by bin."""
        if data_indices is None:
            bins = self._data[: len(ordered_gradients)]
        else:
            bins = (self._data[i] for i in data_indices)
        for bin_value, gradient, hessian in zip(bins, ordered_gradients, ordered_hessians):
            entry = out[bin_value]
            entry.sum_gradients += gradient
            entry.sum_hessians += hessian
            entry.cnt += 1

    def split(self, threshold: int, data_indices) -> tuple[list[int], list[int]]:
        """Partition rows into those with bin <= threshold and those above."""
        lte: list[int] = []
        gt: list[int] = []
        for idx in data_indices:
            (gt if self._data[idx] > threshold else lte).append(idx)
        return lte, gt

    def create_ordered_bin(self):
        """Return the ordered view of this bin; dense bins have none."""
        return self._ordered_bin

    def finish_load(self) -> None:
        """Check that storage holds exactly one bin per row."""
        if len(self._data) != self._num_data:
            raise ValueError(
                f"dense bin holds {len(self._data)} values, expected {self._num_data}"
            )

    def load_from_bytes(self, data, local_used_indices) -> None:
        count = len(data) // self._itemsize
        memory = struct.unpack_from(f"<{count}{self._typecode}", data)
        try:
            if local_used_indices:
                values = [memory[i] for i in local_used_indices[: self._num_data]]
            else:
                values = memory[: self._num_data]
        except IndexError as exc:
            raise ValueError("dense bin data is shorter than required") from exc
        if len(values) < self._num_data:
            raise ValueError("dense bin data is shorter than required")
        self._data = array(self._typecode, values)

    def to_bytes(self) -> bytes:
        return struct.pack(f"<{self._num_data}{self._typecode}", *self._data)

    def sizes_in_byte(self) -> int:
        return self._itemsize * self._num_data


class DenseBinIterator:
    """Random access reader over a dense bin."""

    def __init__(self, bin_data: DenseBin):
        self._bin_data = bin_data

    def get(self, idx: int) -> int:
        return self._bin_data.get(idx)