"""Choice of bin storage for a feature."""

from __future__ import annotations

import struct

from .dense_bin import DenseBin
from .sparse_bin import SparseBin

# single-precision 0.8, as the threshold is compared against a double rate
_SPARSE_THRESHOLD = struct.unpack("<f", struct.pack("<f", 0.8))[0]


def _typecode(num_bin: int) -> str:
    if num_bin <= 256:
        return "B"
    if num_bin <= 65536:
        return "H"
    return "I"


def create_bin(num_data, num_bin, sparse_rate, is_enable_sparse, default_bin=0):
    """Return ``(bin, is_sparse)``, choosing sparse storage for mostly-zero features."""
    if sparse_rate >= _SPARSE_THRESHOLD and is_enable_sparse:
        return create_sparse_bin(num_data, num_bin, default_bin), True
    return create_dense_bin(num_data, num_bin, default_bin), False


def create_dense_bin(num_data, num_bin, default_bin=0) -> DenseBin:
    return DenseBin(num_data, default_bin, _typecode(num_bin))


def create_sparse_bin(num_data, num_bin, default_bin=0) -> SparseBin:
    return SparseBin(num_data, default_bin, _typecode(num_bin))