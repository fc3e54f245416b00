"""Regression tree model built leaf by leaf."""

from __future__ import annotations


def _format(values) -> str:
    return " ".join(repr(v) if isinstance(v, float) else str(v) for v in values)


_REQUIRED_KEYS = (
    "num_leaves",
    "split_feature",
    "split_gain",
    "threshold",
    "left_child",
    "right_child",
    "leaf_parent",
    "leaf_value",
)


class Tree:
    """Binary tree whose internal nodes split on a feature threshold.

    A child reference ``c`` is an internal node when ``c >= 0`` and the leaf
    ``~c`` otherwise.
    """

    def __init__(self, max_leaves: int):
        if max_leaves < 1:
            raise ValueError(f"max_leaves must be positive, got {max_leaves}")
        self.max_leaves = max_leaves
        self.num_leaves = 1
        self.left_child: list[int] = []
        self.right_child: list[int] = []
        self.split_feature: list[int] | None = []
        self.split_feature_real: list[int] = []
        self.threshold_in_bin: list[int] | None = []
        self.threshold: list[float] = []
        self.split_gain: list[float] = []
        self.leaf_parent: list[int] = [-1]
        self.leaf_value: list[float] = [0.0]
        # the root is at depth 1
        self.leaf_depth: list[int] | None = [1]

    def split(self, leaf, feature, threshold_bin, real_feature, threshold,
              left_value, right_value, gain) -> int:
        """Split ``leaf`` in two; the left part keeps its index. Returns the new right leaf."""
        if self.leaf_depth is None or self.split_feature is None or self.threshold_in_bin is None:
            raise ValueError("a tree loaded from text cannot be split")
        if self.num_leaves >= self.max_leaves:
            raise ValueError(f"tree already has the maximum of {self.max_leaves} leaves")
        new_node = self.num_leaves - 1
        new_leaf = self.num_leaves
        parent = self.leaf_parent[leaf]
        if parent >= 0:
            if self.left_child[parent] == ~leaf:
                self.left_child[parent] = new_node
            else:
                self.right_child[parent] = new_node
        self.split_feature.append(feature)
        self.split_feature_real.append(real_feature)
        self.threshold_in_bin.append(threshold_bin)
        self.threshold.append(threshold)
        self.split_gain.append(gain)
        self.left_child.append(~leaf)
        self.right_child.append(~new_leaf)
        self.leaf_parent[leaf] = new_node
        self.leaf_parent.append(new_node)
        self.leaf_value[leaf] = left_value
        self.leaf_value.append(right_value)
        self.leaf_depth.append(self.leaf_depth[leaf] + 1)
        self.leaf_depth[leaf] += 1
        self.num_leaves += 1
        return new_leaf

    def to_string(self) -> str:
        lines = [
            f"num_leaves={self.num_leaves}",
            f"split_feature={_format(self.split_feature_real)}",
            f"split_gain={_format(self.split_gain)}",
            f"threshold={_format(self.threshold)}",
            f"left_child={_format(self.left_child)}",
            f"right_child={_format(self.right_child)}",
            f"leaf_parent={_format(self.leaf_parent)}",
            f"leaf_value={_format(self.leaf_value)}",
        ]
        return "\n".join(lines) + "\n\n"

    @classmethod
    def from_string(cls, text: str) -> "Tree":
        """Rebuild a tree from :meth:`to_string` output; it can predict but not grow."""
        key_vals: dict[str, str] = {}
        for line in text.split("\n"):
            parts = line.split("=")
            if len(parts) == 2:
                key, val = parts[0].strip(), parts[1].strip()
                if key and val:
                    key_vals[key] = val
        missing = [key for key in _REQUIRED_KEYS if key not in key_vals]
        if missing:
            raise ValueError(f"tree model string format error, missing {', '.join(missing)}")
        try:
            num_leaves = int(key_vals["num_leaves"])
        except ValueError as exc:
            raise ValueError(f"tree model string format error: {exc}") from exc
        if num_leaves < 1:
            raise ValueError(f"tree model has invalid num_leaves {num_leaves}")

        def array(key, convert, count):
            tokens = key_vals[key].split()
            if len(tokens) < count:
                raise ValueError(f"tree model field {key} needs {count} values")
            try:
                return [convert(token) for token in tokens[:count]]
            except ValueError as exc:
                raise ValueError(f"tree model field {key}: {exc}") from exc

        tree = cls(num_leaves)
        tree.num_leaves = num_leaves
        tree.split_feature_real = array("split_feature", int, num_leaves - 1)
        tree.split_gain = array("split_gain", float, num_leaves - 1)
        tree.threshold = array("threshold", float, num_leaves - 1)
        tree.left_child = array("left_child", int, num_leaves - 1)
        tree.right_child = array("right_child", int, num_leaves - 1)
        tree.leaf_parent = array("leaf_parent", int, num_leaves)
        tree.leaf_value = array("leaf_value", float, num_leaves)
        tree.split_feature = None
        tree.threshold_in_bin = None
        tree.leaf_depth = None
        return tree