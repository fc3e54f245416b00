"""Training and prediction configuration read from ``key=value`` parameters."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

_log = logging.getLogger(__name__)
_PACKAGE_LOGGER = logging.getLogger(__name__.rpartition(".")[0] or __name__)

_QUOTES = "\"'"


class ConfigError(ValueError):
    """Raised when a parameter is missing, malformed or out of range."""


class TaskType(enum.Enum):
    TRAIN = "train"
    PREDICT = "predict"


class BoostingType(enum.Enum):
    GBDT = "gbdt"


class TreeLearnerType(enum.Enum):
    SERIAL = "serial"
    FEATURE_PARALLEL = "feature"
    DATA_PARALLEL = "data"


def _split(text: str, delimiter: str) -> list[str]:
    return [token for token in text.split(delimiter) if token]


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _get_int(params, key: str, default: int) -> int:
    value = params.get(key)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"parameter {key} should be an integer, got {value!r}") from exc


def _get_float(params, key: str, default: float) -> float:
    value = params.get(key)
    if value is None:
        return default
    try:
        return float(value.strip())
    except ValueError as exc:
        raise ConfigError(f"parameter {key} should be a number, got {value!r}") from exc


def _get_bool(params, key: str, default: bool) -> bool:
    value = params.get(key)
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in ("false", "-"):
        return False
    if lowered in ("true", "+"):
        return True
    raise ConfigError(f"parameter {key} should be true or false, got {value!r}")


def _get_str(params, key: str, default: str) -> str:
    value = params.get(key)
    return default if value is None else value


def _to_floats(key: str, text: str) -> list[float]:
    try:
        return [float(token) for token in _split(text, ",")]
    except ValueError as exc:
        raise ConfigError(f"parameter {key} should be a list of numbers: {exc}") from exc


def _to_ints(key: str, text: str) -> list[int]:
    try:
        return [int(token) for token in _split(text, ",")]
    except ValueError as exc:
        raise ConfigError(f"parameter {key} should be a list of integers: {exc}") from exc


def _default_label_gain() -> list[float]:
    # gain of label i is 2^i - 1; larger labels would overflow
    return [float((1 << i) - 1) for i in range(31)]


def _default_eval_at() -> list[int]:
    return [1, 2, 3, 4, 5]


@dataclass
class IOConfig:
    max_bin: int = 255
    data_random_seed: int = 1
    data_filename: str = ""
    verbosity: int = 1
    num_model_predict: int = -1
    is_pre_partition: bool = False
    is_enable_sparse: bool = True
    use_two_round_loading: bool = False
    is_save_binary_file: bool = False
    is_sigmoid: bool = True
    output_model: str = "model.txt"
    input_model: str = ""
    output_result: str = "prediction.txt"
    input_init_score: str = ""
    valid_data_filenames: list[str] = field(default_factory=list)
    has_header: bool = False
    label_column: str = ""
    weight_column: str = ""
    group_column: str = ""
    ignore_column: str = ""

    def set(self, params) -> None:
        self.max_bin = _get_int(params, "max_bin", self.max_bin)
        _check(self.max_bin > 0, "max_bin should be greater than 0")
        self.data_random_seed = _get_int(params, "data_random_seed", self.data_random_seed)
        if "data" not in params:
            raise ConfigError("no training/prediction data given")
        self.data_filename = params["data"]
        self.verbosity = _get_int(params, "verbose", self.verbosity)
        self.num_model_predict = _get_int(params, "num_model_predict", self.num_model_predict)
        self.is_pre_partition = _get_bool(params, "is_pre_partition", self.is_pre_partition)
        self.is_enable_sparse = _get_bool(params, "is_enable_sparse", self.is_enable_sparse)
        self.use_two_round_loading = _get_bool(
            params, "use_two_round_loading", self.use_two_round_loading
        )
        self.is_save_binary_file = _get_bool(
            params, "is_save_binary_file", self.is_save_binary_file
        )
        self.is_sigmoid = _get_bool(params, "is_sigmoid", self.is_sigmoid)
        self.output_model = _get_str(params, "output_model", self.output_model)
        self.input_model = _get_str(params, "input_model", self.input_model)
        self.output_result = _get_str(params, "output_result", self.output_result)
        self.input_init_score = _get_str(params, "input_init_score", self.input_init_score)
        if "valid_data" in params:
            self.valid_data_filenames = _split(params["valid_data"], ",")
        self.has_header = _get_bool(params, "has_header", self.has_header)
        self.label_column = _get_str(params, "label_column", self.label_column)
        self.weight_column = _get_str(params, "weight_column", self.weight_column)
        self.group_column = _get_str(params, "group_column", self.group_column)
        self.ignore_column = _get_str(params, "ignore_column", self.ignore_column)


@dataclass
class ObjectiveConfig:
    is_unbalance: bool = False
    sigmoid: float = 1.0
    max_position: int = 20
    num_class: int = 1
    label_gain: list[float] = field(default_factory=_default_label_gain)

    def set(self, params) -> None:
        self.is_unbalance = _get_bool(params, "is_unbalance", self.is_unbalance)
        self.sigmoid = _get_float(params, "sigmoid", self.sigmoid)
        self.max_position = _get_int(params, "max_position", self.max_position)
        _check(self.max_position > 0, "max_position should be greater than 0")
        self.num_class = _get_int(params, "num_class", self.num_class)
        _check(self.num_class >= 1, "num_class should be at least 1")
        if "label_gain" in params:
            self.label_gain = _to_floats("label_gain", params["label_gain"])
        else:
            self.label_gain = _default_label_gain()


@dataclass
class MetricConfig:
    sigmoid: float = 1.0
    num_class: int = 1
    label_gain: list[float] = field(default_factory=_default_label_gain)
    eval_at: list[int] = field(default_factory=_default_eval_at)

    def set(self, params) -> None:
        self.sigmoid = _get_float(params, "sigmoid", self.sigmoid)
        self.num_class = _get_int(params, "num_class", self.num_class)
        _check(self.num_class >= 1, "num_class should be at least 1")
        if "label_gain" in params:
            self.label_gain = _to_floats("label_gain", params["label_gain"])
        else:
            self.label_gain = _default_label_gain()
        if "ndcg_eval_at" in params:
            eval_at = sorted(_to_ints("ndcg_eval_at", params["ndcg_eval_at"]))
            _check(all(k > 0 for k in eval_at), "ndcg_eval_at positions should be positive")
            self.eval_at = eval_at
        else:
            self.eval_at = _default_eval_at()


@dataclass
class TreeConfig:
    min_data_in_leaf: int = 100
    min_sum_hessian_in_leaf: float = 10.0
    num_leaves: int = 127
    feature_fraction_seed: int = 2
    feature_fraction: float = 1.0
    histogram_pool_size: float = -1.0
    max_depth: int = -1

    def set(self, params) -> None:
        self.min_data_in_leaf = _get_int(params, "min_data_in_leaf", self.min_data_in_leaf)
        self.min_sum_hessian_in_leaf = _get_float(
            params, "min_sum_hessian_in_leaf", self.min_sum_hessian_in_leaf
        )
        _check(
            self.min_sum_hessian_in_leaf > 1.0 or self.min_data_in_leaf > 0,
            "either min_sum_hessian_in_leaf > 1 or min_data_in_leaf > 0 is required",
        )
        self.num_leaves = _get_int(params, "num_leaves", self.num_leaves)
        _check(self.num_leaves > 1, "num_leaves should be greater than 1")
        self.feature_fraction_seed = _get_int(
            params, "feature_fraction_seed", self.feature_fraction_seed
        )
        self.feature_fraction = _get_float(params, "feature_fraction", self.feature_fraction)
        _check(
            0.0 < self.feature_fraction <= 1.0, "feature_fraction should be in (0, 1]"
        )
        self.histogram_pool_size = _get_float(
            params, "histogram_pool_size", self.histogram_pool_size
        )
        self.max_depth = _get_int(params, "max_depth", self.max_depth)
        _check(
            self.max_depth > 1 or self.max_depth < 0,
            "max_depth should be greater than 1, or negative for no limit",
        )


@dataclass
class BoostingConfig:
    num_iterations: int = 10
    bagging_seed: int = 3
    bagging_freq: int = 0
    bagging_fraction: float = 1.0
    learning_rate: float = 0.1
    early_stopping_round: int = 0
    output_freq: int = 1
    is_provide_training_metric: bool = False
    num_class: int = 1

    def set(self, params) -> None:
        self.num_iterations = _get_int(params, "num_iterations", self.num_iterations)
        _check(self.num_iterations >= 0, "num_iterations should not be negative")
        self.bagging_seed = _get_int(params, "bagging_seed", self.bagging_seed)
        self.bagging_freq = _get_int(params, "bagging_freq", self.bagging_freq)
        _check(self.bagging_freq >= 0, "bagging_freq should not be negative")
        self.bagging_fraction = _get_float(params, "bagging_fraction", self.bagging_fraction)
        _check(
            0.0 < self.bagging_fraction <= 1.0, "bagging_fraction should be in (0, 1]"
        )
        self.learning_rate = _get_float(params, "learning_rate", self.learning_rate)
        _check(self.learning_rate > 0.0, "learning_rate should be greater than 0")
        self.early_stopping_round = _get_int(
            params, "early_stopping_round", self.early_stopping_round
        )
        _check(self.early_stopping_round >= 0, "early_stopping_round should not be negative")
        self.output_freq = _get_int(params, "metric_freq", self.output_freq)
        _check(self.output_freq >= 0, "metric_freq should not be negative")
        self.is_provide_training_metric = _get_bool(
            params, "is_training_metric", self.is_provide_training_metric
        )
        self.num_class = _get_int(params, "num_class", self.num_class)
        _check(self.num_class >= 1, "num_class should be at least 1")


_TREE_LEARNERS = {
    "serial": TreeLearnerType.SERIAL,
    "feature": TreeLearnerType.FEATURE_PARALLEL,
    "feature_parallel": TreeLearnerType.FEATURE_PARALLEL,
    "data": TreeLearnerType.DATA_PARALLEL,
    "data_parallel": TreeLearnerType.DATA_PARALLEL,
}


@dataclass
class GBDTConfig(BoostingConfig):
    tree_learner_type: TreeLearnerType = TreeLearnerType.SERIAL
    tree_config: TreeConfig = field(default_factory=TreeConfig)

    def set(self, params) -> None:
        super().set(params)
        if "tree_learner" in params:
            value = params["tree_learner"].lower()
            try:
                self.tree_learner_type = _TREE_LEARNERS[value]
            except KeyError:
                raise ConfigError(f"unknown tree learner type {value!r}") from None
        self.tree_config.set(params)


@dataclass
class NetworkConfig:
    num_machines: int = 1
    local_listen_port: int = 12400
    time_out: int = 120
    machine_list_filename: str = ""

    def set(self, params) -> None:
        self.num_machines = _get_int(params, "num_machines", self.num_machines)
        _check(self.num_machines >= 1, "num_machines should be at least 1")
        self.local_listen_port = _get_int(params, "local_listen_port", self.local_listen_port)
        _check(self.local_listen_port > 0, "local_listen_port should be greater than 0")
        self.time_out = _get_int(params, "time_out", self.time_out)
        _check(self.time_out > 0, "time_out should be greater than 0")
        self.machine_list_filename = _get_str(
            params, "machine_list_file", self.machine_list_filename
        )


_TASKS = {
    "train": TaskType.TRAIN,
    "training": TaskType.TRAIN,
    "predict": TaskType.PREDICT,
    "prediction": TaskType.PREDICT,
    "test": TaskType.PREDICT,
}

_MULTICLASS_METRICS = ("multi_logloss", "multi_error")


def _clean(token: str) -> str:
    return token.strip().strip(_QUOTES)


@dataclass
class OverallConfig:
    num_threads: int = 0
    task_type: TaskType = TaskType.TRAIN
    predict_leaf_index: bool = False
    boosting_type: BoostingType = BoostingType.GBDT
    objective_type: str = "regression"
    metric_types: list[str] = field(default_factory=list)
    is_parallel: bool = False
    is_parallel_find_bin: bool = False
    network_config: NetworkConfig = field(default_factory=NetworkConfig)
    io_config: IOConfig = field(default_factory=IOConfig)
    boosting_config: GBDTConfig = field(default_factory=GBDTConfig)
    objective_config: ObjectiveConfig = field(default_factory=ObjectiveConfig)
    metric_config: MetricConfig = field(default_factory=MetricConfig)

    def load_from_string(self, text: str) -> None:
        """Read whitespace separated ``key=value`` pairs and apply them."""
        params: dict[str, str] = {}
        for arg in text.split():
            parts = _split(arg, "=")
            if len(parts) == 2:
                key = _clean(parts[0])
                if not key:
                    continue
                params[key] = _clean(parts[1])
            else:
                _log.warning("Unknown parameter %s", arg)
        self.set(params)

    def set(self, params) -> None:
        self.num_threads = _get_int(params, "num_threads", self.num_threads)
        if "task" in params:
            value = params["task"].lower()
            try:
                self.task_type = _TASKS[value]
            except KeyError:
                raise ConfigError(f"unknown task type {value!r}") from None
        self.predict_leaf_index = _get_bool(params, "predict_leaf_index", self.predict_leaf_index)
        if "boosting_type" in params:
            value = params["boosting_type"].lower()
            if value in ("gbdt", "gbrt"):
                self.boosting_type = BoostingType.GBDT
            else:
                raise ConfigError(f"unknown boosting type {value!r}")
        if "objective" in params:
            self.objective_type = params["objective"].lower()
        if "metric" in params:
            self.metric_types = list(dict.fromkeys(_split(params["metric"].lower(), ",")))

        if self.boosting_type is BoostingType.GBDT:
            self.boosting_config = GBDTConfig()

        self.network_config.set(params)
        self.io_config.set(params)
        self.boosting_config.set(params)
        self.objective_config.set(params)
        self.metric_config.set(params)
        self._check_param_conflict()
        self._reset_log_level()

    def _check_param_conflict(self) -> None:
        gbdt = self.boosting_config
        objective_multiclass = self.objective_type == "multiclass"
        if objective_multiclass:
            if gbdt.num_class <= 1:
                raise ConfigError("number of classes (>=2) is required for multiclass training")
        elif self.task_type is TaskType.TRAIN and gbdt.num_class != 1:
            raise ConfigError("number of classes must be 1 for non-multiclass training")
        for metric_type in self.metric_types:
            if (metric_type in _MULTICLASS_METRICS) != objective_multiclass:
                raise ConfigError("objective and metrics don't match")

        if self.network_config.num_machines > 1:
            self.is_parallel = True
        else:
            self.is_parallel = False
            gbdt.tree_learner_type = TreeLearnerType.SERIAL

        if gbdt.tree_learner_type is TreeLearnerType.SERIAL:
            self.is_parallel = False
            self.network_config.num_machines = 1

        if gbdt.tree_learner_type in (TreeLearnerType.SERIAL, TreeLearnerType.FEATURE_PARALLEL):
            self.is_parallel_find_bin = False
        elif gbdt.tree_learner_type is TreeLearnerType.DATA_PARALLEL:
            self.is_parallel_find_bin = True
            if gbdt.tree_config.histogram_pool_size >= 0:
                _log.warning(
                    "Histogram LRU queue was enabled (histogram_pool_size=%f). "
                    "Disabling it to reduce communication cost.",
                    gbdt.tree_config.histogram_pool_size,
                )
                gbdt.tree_config.histogram_pool_size = -1.0

    def _reset_log_level(self) -> None:
        verbosity = self.io_config.verbosity
        if verbosity == 1:
            level = logging.INFO
        elif verbosity == 0:
            level = logging.WARNING
        elif verbosity >= 2:
            level = logging.DEBUG
        else:
            level = logging.CRITICAL
        _PACKAGE_LOGGER.setLevel(level)