[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gbmcore"
version = "0.1.0"
description = "Building blocks for histogram-based gradient boosted decision trees: feature binning, bin storage, data parsing, metadata, trees, configuration and evaluation metrics."
requires-python = ">=3.10"
dependencies = []
keywords = ["gradient boosting", "decision tree", "histogram", "binning", "ndcg", "auc", "machine learning"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gbmcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
