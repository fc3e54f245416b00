"""Line parsers for CSV, TSV and LibSVM training data."""

from __future__ import annotations

import enum
import logging
import math
import re

_log = logging.getLogger(__name__)

_WHITESPACE = " \f\n\r\t\v"
_NUMBER = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_DIGITS = re.compile(r"\d*")
_TOKEN_END = " \t,\n\r:"


class ParseError(ValueError):
    """Raised when data does not follow the expected format."""


class DataType(enum.Enum):
    INVALID = enum.auto()
    CSV = enum.auto()
    TSV = enum.auto()
    LIBSVM = enum.auto()


def _skip(line: str, pos: int, chars: str) -> int:
    while pos < len(line) and line[pos] in chars:
        pos += 1
    return pos


def _read_sign(line: str, pos: int) -> tuple[int, int]:
    if pos < len(line) and line[pos] in "+-":
        return (-1 if line[pos] == "-" else 1), pos + 1
    return 1, pos


def _atof(line: str, pos: int) -> tuple[float, int]:
    """Read a number at ``pos``; an empty field reads as 0."""
    pos = _skip(line, pos, " ")
    sign, pos = _read_sign(line, pos)
    match = _NUMBER.match(line, pos)
    if match:
        value = sign * float(match.group())
        pos = match.end()
    else:
        end = pos
        while end < len(line) and line[end] not in _TOKEN_END:
            end += 1
        token = line[pos:end].lower()
        if not token:
            value = 0.0
        elif token in ("na", "nan"):
            value = math.nan
        elif token in ("inf", "infinity"):
            value = sign * math.inf
        else:
            raise ParseError(f"unknown token {line[pos:end]!r} in data")
        pos = end
    return value, _skip(line, pos, " ")


def _atoi(line: str, pos: int) -> tuple[int, int]:
    pos = _skip(line, pos, " ")
    sign, pos = _read_sign(line, pos)
    match = _DIGITS.match(line, pos)
    digits = match.group()
    value = sign * int(digits) if digits else 0
    return value, _skip(line, match.end(), " ")


def _parse_delimited(line: str, delimiter: str, label_idx: int, format_name: str):
    line = line.rstrip("\r\n")
    features: list[tuple[int, float]] = []
    label = 0.0
    idx = 0
    bias = 0
    pos = 0
    while pos < len(line):
        value, pos = _atof(line, pos)
        if idx == label_idx:
            label = value
            bias = -1
        elif abs(value) > 1e-10:
            features.append((idx + bias, value))
        idx += 1
        if pos < len(line):
            if line[pos] != delimiter:
                raise ParseError(f"input format error, should be {format_name}")
            pos += 1
    return features, label


class CSVParser:
    """Comma separated values; the label column is removed from feature numbering."""

    def __init__(self, label_idx: int = 0):
        self.label_idx = label_idx

    def parse_one_line(self, line: str) -> tuple[list[tuple[int, float]], float]:
        """Return the non-zero ``(feature, value)`` pairs and the label of a line."""
        return _parse_delimited(line, ",", self.label_idx, "CSV")


class TSVParser:
    """Tab separated values; the label column is removed from feature numbering."""

    def __init__(self, label_idx: int = 0):
        self.label_idx = label_idx

    def parse_one_line(self, line: str) -> tuple[list[tuple[int, float]], float]:
        """Return the non-zero ``(feature, value)`` pairs and the label of a line."""
        return _parse_delimited(line, "\t", self.label_idx, "TSV")


class LibSVMParser:
    """``label index:value index:value ...`` lines; the label must come first."""

    def __init__(self, label_idx: int = 0):
        if label_idx > 0:
            raise ParseError("label should be the first column in LibSVM file")
        self.label_idx = label_idx

    def parse_one_line(self, line: str) -> tuple[list[tuple[int, float]], float]:
        """Return the ``(feature, value)`` pairs and the label of a line."""
        line = line.rstrip("\r\n")
        features: list[tuple[int, float]] = []
        label = 0.0
        pos = 0
        if self.label_idx == 0:
            label, pos = _atof(line, pos)
            pos = _skip(line, pos, " \t")
        while pos < len(line):
            idx, pos = _atoi(line, pos)
            pos = _skip(line, pos, " \t")
            if pos >= len(line) or line[pos] != ":":
                raise ParseError("input format error, should be LibSVM")
            value, pos = _atof(line, pos + 1)
            features.append((idx, value))
            pos = _skip(line, pos, " \t")
        return features, label


def _statistics(line: str) -> tuple[int, int, int]:
    return line.count(","), line.count("\t"), line.count(":")


def _split(text: str, delimiter: str) -> list[str]:
    return [token for token in text.split(delimiter) if token]


def _label_idx_for_libsvm(line: str, num_features: int, label_idx: int) -> int:
    if num_features <= 0:
        return label_idx
    text = line.strip(_WHITESPACE)
    pos_space = next((i for i, ch in enumerate(text) if ch in _WHITESPACE), None)
    pos_colon = text.find(":")
    if pos_space is None or pos_colon == -1 or pos_space < pos_colon:
        return label_idx
    return -1


def _label_idx_for_delimited(line: str, delimiter: str, num_features: int, label_idx: int) -> int:
    if num_features <= 0:
        return label_idx
    tokens = _split(line.strip(_WHITESPACE), delimiter)
    return -1 if len(tokens) == num_features else label_idx


def _getline(handle) -> tuple[str, bool]:
    """Read one line; the flag tells whether the end of the file was reached."""
    raw = handle.readline()
    return raw.removesuffix("\n"), not raw.endswith("\n")


def create_parser(filename, has_header, num_features, label_idx):
    """Detect the format of a data file from its first lines and return its parser."""
    line1 = line2 = ""
    at_eof = False
    with open(filename, encoding="utf-8", newline="") as handle:
        if has_header:
            line1, at_eof = _getline(handle)
        if at_eof:
            raise ParseError(f"data file {filename} should have at least one line")
        line1, at_eof = _getline(handle)
        if at_eof:
            _log.warning("Data file %s only has one line", filename)
        else:
            line2, at_eof = _getline(handle)

    comma_cnt, tab_cnt, colon_cnt = _statistics(line1)
    comma_cnt2, tab_cnt2, colon_cnt2 = _statistics(line2)

    data_type = DataType.INVALID
    if not line2:
        if colon_cnt > 0:
            data_type = DataType.LIBSVM
        elif tab_cnt > 0:
            data_type = DataType.TSV
        elif comma_cnt > 0:
            data_type = DataType.CSV
    elif colon_cnt > 0 or colon_cnt2 > 0:
        data_type = DataType.LIBSVM
    elif tab_cnt == tab_cnt2 and tab_cnt > 0:
        data_type = DataType.TSV
    elif comma_cnt == comma_cnt2 and comma_cnt > 0:
        data_type = DataType.CSV

    if data_type is DataType.INVALID:
        raise ParseError(f"unknown format of data file {filename}")

    if data_type is DataType.LIBSVM:
        label_idx = _label_idx_for_libsvm(line1, num_features, label_idx)
        parser = LibSVMParser(label_idx)
    elif data_type is DataType.TSV:
        label_idx = _label_idx_for_delimited(line1, "\t", num_features, label_idx)
        parser = TSVParser(label_idx)
    else:
        label_idx = _label_idx_for_delimited(line1, ",", num_features, label_idx)
        parser = CSVParser(label_idx)

    if label_idx < 0:
        _log.info("Data file %s doesn't contain label column", filename)
    return parser