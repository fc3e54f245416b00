"""Non-zero bins of a sparse feature, grouped by tree leaf."""

from __future__ import annotations


class OrderedSparseBin:
    """Keeps (row, bin) pairs of non-zero entries partitioned by leaf.

    Grouping by leaf lets histograms of a leaf be built from its own rows only;
    the pairs must be re-partitioned after every split.
    """

    def __init__(self, delta, vals):
        self._delta = delta
        self._vals = vals
        self._pairs: list[tuple[int, int]] = list(self._non_zero_pairs(None))
        self._leaf_start: list[int] = []
        self._leaf_cnt: list[int] = []

    def _non_zero_pairs(self, used_indices):
        pos = 0
        for delta, value in zip(self._delta, self._vals):
            pos += delta
            if value > 0 and (used_indices is None or used_indices[pos]):
                yield pos, value

    def init(self, used_indices, num_leaves: int) -> None:
        """Reset to a single root leaf holding all (or only the used) rows."""
        self._leaf_start = [0] * num_leaves
        self._leaf_cnt = [0] * num_leaves
        count = 0
        for count, pair in enumerate(self._non_zero_pairs(used_indices), start=1):
            self._pairs[count - 1] = pair
        self._leaf_cnt[0] = len(self._pairs) if used_indices is None else count

    def construct_histogram(self, leaf: int, gradients, hessians, out) -> None:
        start = self._leaf_start[leaf]
        end = start + self._leaf_cnt[leaf]
        for row, bin_value in self._pairs[start:end]:
            entry = out[bin_value]
            entry.sum_gradients += gradients[row]
            entry.sum_hessians += hessians[row]
            entry.cnt += 1

    def split(self, leaf: int, right_leaf: int, left_indices) -> None:
        """Move rows marked in ``left_indices`` to the front of ``leaf``; the rest form ``right_leaf``."""
        start = self._leaf_start[leaf]
        end = start + self._leaf_cnt[leaf]
        new_left_end = start
        pairs = self._pairs
        for i in range(start, end):
            if left_indices[pairs[i][0]]:
                pairs[new_left_end], pairs[i] = pairs[i], pairs[new_left_end]
                new_left_end += 1
        self._leaf_start[right_leaf] = new_left_end
        self._leaf_cnt[leaf] = new_left_end - start
        self._leaf_cnt[right_leaf] = end - new_left_end