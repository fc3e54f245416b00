"""Building blocks for histogram-based gradient boosted decision trees.

Feature binning, dense and sparse bin storage, data line parsers, metadata,
trees, configuration and evaluation metrics.
"""

__version__ = "0.1.0"