# gbmcore

The parts that a histogram-based gradient boosting learner is built from,
written in plain Python with no runtime dependencies.

## What is in the package

- **Feature binning** (`gbmcore.bin_mapper`): `BinMapper.find_bin` turns a
  sample of feature values into bin upper bounds. If there are no more
  distinct values than `max_bin`, each distinct value gets its own bin.
  Otherwise very frequent values get bins of their own and the remaining
  values go into bins of about equal size. A mapper round-trips through
  `to_bytes` / `BinMapper.from_bytes`. `HistogramBinEntry` holds the summed
  gradients, summed hessians and count of one histogram bucket.
- **Bin storage** (`gbmcore.dense_bin`, `gbmcore.sparse_bin`,
  `gbmcore.ordered_sparse_bin`, `gbmcore.bin_factory`): `DenseBin` keeps one
  bin per row. `SparseBin` keeps only non-zero bins, stored as
  delta-encoded row positions. Both build histograms with
  `construct_histogram`, split a row set at a threshold with `split`, which
  returns `(lte_rows, gt_rows)`, and serialise with `to_bytes` /
  `load_from_bytes`. `SparseBin.create_ordered_bin` returns an
  `OrderedSparseBin`, which keeps non-zero rows grouped by tree leaf.
  `create_bin` returns `(bin, is_sparse)` and picks sparse storage when the
  sparse rate is at least 0.8 and sparse storage is enabled.
- **Parsing** (`gbmcore.parser`): `create_parser` reads the first lines of
  a data file and returns a `CSVParser`, `TSVParser` or `LibSVMParser`.
  `parse_one_line` returns the `(feature_index, value)` pairs of a line and
  its label. Malformed input raises `ParseError`.
- **Metadata** (`gbmcore.metadata`): `Metadata` holds labels, weights, query
  boundaries, query weights and initial scores. It reads the
  `<data>.weight` and `<data>.query` side files and an initial score file.
  It checks sizes, or cuts the data down to the rows in use, with
  `check_or_partition`, and serialises with `to_bytes` / `load_from_bytes`.
  Inconsistent data raises `MetadataError`.
- **Trees** (`gbmcore.tree`): a `Tree` grows by leaf-wise `split` calls and
  round-trips through its text format (`to_string` / `Tree.from_string`).
  A tree read from text cannot be split any further.
- **Configuration** (`gbmcore.config`): `OverallConfig.load_from_string`
  parses whitespace-separated `key=value` pairs into `IOConfig`,
  `NetworkConfig`, `GBDTConfig` (with its `TreeConfig`), `ObjectiveConfig`
  and `MetricConfig`, and checks them for conflicts. Values that are out of
  range or conflicting raise `ConfigError`. The `verbose` setting sets the
  level of the `gbmcore` logger.
- **Metrics** (`gbmcore.regression_metric`, `gbmcore.binary_metric`,
  `gbmcore.rank_metric`, `gbmcore.multiclass_metric`,
  `gbmcore.dcg_calculator`, `gbmcore.metric_factory`): `L2Metric`,
  `L1Metric`, `BinaryLoglossMetric`, `BinaryErrorMetric`, `AUCMetric`,
  `NDCGMetric`, `MultiLoglossMetric` and `MultiErrorMetric`. `create_metric`
  builds a metric from its name (`l2`, `l1`, `binary_logloss`,
  `binary_error`, `auc`, `ndcg`, `multi_logloss`, `multi_error`) and returns
  `None` for an unknown name. `DCGCalculator` computes DCG and ideal DCG.

## Installation

```
pip install .
```

## Example

```python
from gbmcore.bin_mapper import BinMapper
from gbmcore.config import OverallConfig
from gbmcore.metadata import Metadata
from gbmcore.metric_factory import create_metric
from gbmcore.tree import Tree

mapper = BinMapper()
mapper.find_bin([0.0, 0.0, 1.0, 2.0, 2.0, 3.0], max_bin=255)
restored = BinMapper.from_bytes(mapper.to_bytes())

config = OverallConfig()
config.load_from_string("task=train data=train.txt objective=binary metric=auc")

metadata = Metadata()
metadata.allocate(4, -1, -1)
metadata.label[:] = [0.0, 1.0, 1.0, 0.0]

metric = create_metric("auc", config.metric_config)
metric.init("training", metadata, 4)
print(metric.name(), metric.eval([0.1, 0.8, 0.6, 0.3]))

tree = Tree(max_leaves=4)
tree.split(0, 0, 3, 0, 1.5, -0.2, 0.4, 10.0)
same_tree = Tree.from_string(tree.to_string())
```

## What the package does not do

These are building blocks only. The package has no command-line program
and no training loop: it has no boosting driver, no objective functions, no
tree learner that searches for splits, and no distributed training. The
network settings in `NetworkConfig` are read and checked but nothing uses
them. Nothing in the package loads a whole data file into binned features;
parsing, binning and `Metadata` have to be combined by the caller. `Tree`
stores a model and reads and writes its text form, but it has no method to
predict scores.

## Running the tests

```
pip install .[test]
pytest
```