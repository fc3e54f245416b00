"""Labels, weights, query boundaries and initial scores of a data set."""

from __future__ import annotations

import logging
import math
import struct
from itertools import accumulate, groupby
from pathlib import Path

_log = logging.getLogger(__name__)

_COUNTS = struct.Struct("<iii")
_FLOAT_SIZE = struct.calcsize("<f")
_INT_SIZE = struct.calcsize("<i")


class MetadataError(ValueError):
    """Raised when metadata is inconsistent with the data it describes."""


def _read_lines(filename) -> list[str]:
    """Non-blank lines of a text file; a missing file reads as empty."""
    path = Path(filename)
    if not path.is_file():
        return []
    with path.open(encoding="utf-8") as handle:
        return [stripped for stripped in (line.strip() for line in handle) if stripped]


def _parse(lines, convert, what):
    try:
        return [convert(line) for line in lines]
    except ValueError as exc:
        raise MetadataError(f"malformed {what}: {exc}") from exc


class Metadata:
    """Per-row information that accompanies the feature values of a data set.

    ``query_boundaries`` holds ``num_queries + 1`` row offsets; query ``i``
    covers rows ``query_boundaries[i]`` up to ``query_boundaries[i + 1]``.
    Absent information is ``None``.
    """

    def __init__(self):
        self.data_filename = ""
        self.init_score_filename = ""
        self.num_data = 0
        self.label: list[float] | None = None
        self.weights: list[float] | None = None
        self.query_boundaries: list[int] | None = None
        self.query_weights: list[float] | None = None
        self.init_score: list[float] | None = None
        self.queries: list[int] | None = None

    @property
    def num_weights(self) -> int:
        return len(self.weights) if self.weights is not None else 0

    @property
    def num_queries(self) -> int:
        return len(self.query_boundaries) - 1 if self.query_boundaries is not None else 0

    @property
    def num_init_score(self) -> int:
        return len(self.init_score) if self.init_score is not None else 0

    def init_from_files(self, data_filename, init_score_filename) -> None:
        """Load ``<data>.query``, ``<data>.weight`` and the initial score file."""
        self.data_filename = str(data_filename)
        self.init_score_filename = str(init_score_filename or "")
        self._load_query_boundaries()
        self._load_weights()
        self._load_query_weights()
        self._load_initial_score()

    def init_init_score(self, init_score_filename) -> None:
        """Load only the initial scores."""
        self.init_score_filename = str(init_score_filename or "")
        self._load_initial_score()

    def allocate(self, num_data: int, weight_idx: int, query_idx: int) -> None:
        """Prepare storage for labels and, if taken from data columns, weights and query ids."""
        self.num_data = num_data
        self.label = [0.0] * num_data
        if weight_idx >= 0:
            if self.weights is not None:
                _log.info("Using weight in data file, ignoring additional weight file")
            self.weights = [0.0] * num_data
        if query_idx >= 0:
            if self.query_boundaries is not None:
                _log.info("Using query id in data file, ignoring additional query file")
            self.query_boundaries = None
            self.query_weights = None
            self.queries = [0] * num_data

    def partition_label(self, used_indices) -> None:
        """Keep only the labels of ``used_indices``; nothing happens if it is empty."""
        if not used_indices:
            return
        self.label = [self.label[i] for i in used_indices]
        self.num_data = len(self.label)

    def check_or_partition(self, num_all_data: int, used_data_indices) -> None:
        """Validate sizes against the data, or cut everything down to the used rows."""
        if not used_data_indices:
            self._check_full()
        else:
            self._partition(num_all_data, list(used_data_indices))

    def _check_full(self) -> None:
        if self.queries is not None:
            runs = [len(list(group)) for _, group in groupby(self.queries[: self.num_data])]
            self.query_boundaries = list(accumulate(runs or [0], initial=0))
            self._load_query_weights()
            self.queries = None
        if self.weights is not None and self.num_weights != self.num_data:
            raise MetadataError("initial weight size doesn't equal to data")
        if self.query_boundaries is not None and self.query_boundaries[-1] != self.num_data:
            raise MetadataError("initial query size doesn't equal to data")
        if self.init_score is not None and self.num_init_score != self.num_data:
            raise MetadataError("initial score size doesn't equal to data")

    def _partition(self, num_all_data: int, used: list[int]) -> None:
        if self.weights is not None and self.num_weights != num_all_data:
            raise MetadataError("initial weights size doesn't equal to data")
        if self.query_boundaries is not None and self.query_boundaries[-1] != num_all_data:
            raise MetadataError("initial query size doesn't equal to data")
        if self.init_score is not None and self.num_init_score != num_all_data:
            raise MetadataError("initial score size doesn't equal to data")

        if self.weights is not None:
            self.weights = [self.weights[i] for i in used]

        if self.query_boundaries is not None:
            boundaries = self.query_boundaries
            num_used = len(used)
            lengths: list[int] = []
            data_idx = 0
            for start, end in zip(boundaries, boundaries[1:]):
                if data_idx >= num_used:
                    break
                length = end - start
                if used[data_idx] > start:
                    continue
                if (
                    used[data_idx] == start
                    and num_used >= data_idx + length
                    and used[data_idx + length - 1] == end - 1
                ):
                    lengths.append(length)
                    data_idx += length
                else:
                    raise MetadataError("data partition error, data didn't match queries")
            self.query_boundaries = list(accumulate(lengths, initial=0))

        if self.init_score is not None:
            self.init_score = [self.init_score[i] for i in used]

        self._load_query_weights()

    def set_init_score(self, init_score) -> None:
        scores = [float(value) for value in init_score]
        if len(scores) != self.num_data:
            raise MetadataError("length of initial score is not the same as number of data")
        self.init_score = scores

    def _load_weights(self) -> None:
        lines = _read_lines(self.data_filename + ".weight")
        if not lines:
            return
        _log.info("Start loading weights")
        self.weights = _parse(lines, float, "weight file")

    def _load_initial_score(self) -> None:
        if not self.init_score_filename:
            return
        _log.info("Start loading initial scores")
        self.init_score = _parse(
            _read_lines(self.init_score_filename), float, "initial score file"
        )

    def _load_query_boundaries(self) -> None:
        lines = _read_lines(self.data_filename + ".query")
        if not lines:
            return
        _log.info("Start loading query boundaries")
        counts = _parse(lines, int, "query file")
        self.query_boundaries = list(accumulate(counts, initial=0))

    def _load_query_weights(self) -> None:
        if self.weights is None or self.query_boundaries is None:
            return
        _log.info("Start loading query weights")
        query_weights = []
        for start, end in zip(self.query_boundaries, self.query_boundaries[1:]):
            total = sum(self.weights[start:end])
            query_weights.append(total / (end - start) if end != start else math.nan)
        self.query_weights = query_weights

    def load_from_bytes(self, data) -> None:
        """Restore from the binary layout written by :meth:`to_bytes`."""
        try:
            num_data, num_weights, num_queries = _COUNTS.unpack_from(data, 0)
            if min(num_data, num_weights, num_queries) < 0:
                raise MetadataError("negative count in metadata")
            offset = _COUNTS.size
            label = list(struct.unpack_from(f"<{num_data}f", data, offset))
            offset += _FLOAT_SIZE * num_data
            weights = None
            if num_weights > 0:
                weights = list(struct.unpack_from(f"<{num_weights}f", data, offset))
                offset += _FLOAT_SIZE * num_weights
            boundaries = None
            if num_queries > 0:
                boundaries = list(struct.unpack_from(f"<{num_queries + 1}i", data, offset))
                offset += _INT_SIZE * (num_queries + 1)
            query_weights = None
            if num_weights > 0 and num_queries > 0:
                query_weights = list(struct.unpack_from(f"<{num_queries}f", data, offset))
        except struct.error as exc:
            raise MetadataError(f"malformed metadata: {exc}") from exc
        self.num_data = num_data
        self.label = label
        self.weights = weights
        self.query_boundaries = boundaries
        self.query_weights = query_weights

    def to_bytes(self) -> bytes:
        if self.label is None or len(self.label) < self.num_data:
            raise MetadataError("labels are not loaded")
        parts = [
            _COUNTS.pack(self.num_data, self.num_weights, self.num_queries),
            struct.pack(f"<{self.num_data}f", *self.label[: self.num_data]),
        ]
        if self.weights is not None:
            parts.append(struct.pack(f"<{self.num_weights}f", *self.weights))
        if self.query_boundaries is not None:
            parts.append(struct.pack(f"<{len(self.query_boundaries)}i", *self.query_boundaries))
        if self.query_weights is not None:
            parts.append(struct.pack(f"<{len(self.query_weights)}f", *self.query_weights))
        return b"".join(parts)

    def sizes_in_byte(self) -> int:
        size = _COUNTS.size + _FLOAT_SIZE * self.num_data
        if self.weights is not None:
            size += _FLOAT_SIZE * self.num_weights
        if self.query_boundaries is not None:
            size += _INT_SIZE * len(self.query_boundaries)
        if self.query_weights is not None:
            size += _FLOAT_SIZE * len(self.query_weights)
        return size