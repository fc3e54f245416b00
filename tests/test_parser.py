import pytest

from gbmcore.parser import (
    CSVParser,
    LibSVMParser,
    ParseError,
    TSVParser,
    create_parser,
)


def _write(tmp_path, content, name="data.txt"):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_csv_label_first():
    assert CSVParser(0).parse_one_line("1,2,0,3") == ([(0, 2.0), (2, 3.0)], 1.0)


def test_csv_label_in_middle_shifts_later_features():
    assert CSVParser(1).parse_one_line("3,7,0,4") == ([(0, 3.0), (2, 4.0)], 7.0)


def test_csv_without_label():
    assert CSVParser(-1).parse_one_line("1,2") == ([(0, 1.0), (1, 2.0)], 0.0)


def test_csv_allows_spaces_around_values():
    assert CSVParser(0).parse_one_line("1, 2") == ([(0, 2.0)], 1.0)


def test_csv_reads_exponents_and_signs():
    assert CSVParser(0).parse_one_line("2.5e1,-1.5") == ([(0, -1.5)], 25.0)


def test_csv_drops_nan_values():
    assert CSVParser(0).parse_one_line("1,nan,3") == ([(1, 3.0)], 1.0)


def test_csv_rejects_other_separator():
    with pytest.raises(ParseError):
        CSVParser(0).parse_one_line("1;2")


def test_csv_rejects_unknown_token():
    with pytest.raises(ParseError):
        CSVParser(0).parse_one_line("1,abc")


def test_tsv_parses_tabs():
    assert TSVParser(0).parse_one_line("1\t0\t2.5") == ([(1, 2.5)], 1.0)


def test_tsv_rejects_commas():
    with pytest.raises(ParseError):
        TSVParser(0).parse_one_line("1,2")


def test_libsvm_with_label():
    assert LibSVMParser(0).parse_one_line("1 3:0.5 7:2") == ([(3, 0.5), (7, 2.0)], 1.0)


def test_libsvm_with_tabs():
    assert LibSVMParser(0).parse_one_line("0\t2:1.5\t4:3") == ([(2, 1.5), (4, 3.0)], 0.0)


def test_libsvm_without_label():
    assert LibSVMParser(-1).parse_one_line("3:0.5") == ([(3, 0.5)], 0.0)


def test_libsvm_missing_colon_raises():
    with pytest.raises(ParseError):
        LibSVMParser(0).parse_one_line("1 3 0.5")


def test_libsvm_label_must_be_first():
    with pytest.raises(ParseError):
        LibSVMParser(2)


def test_detects_libsvm(tmp_path):
    parser = create_parser(_write(tmp_path, "1 1:0.5 3:2\n0 2:1\n"), False, 0, 0)
    assert isinstance(parser, LibSVMParser)
    assert parser.label_idx == 0


def test_detects_tsv(tmp_path):
    parser = create_parser(_write(tmp_path, "1\t2\t3\n0\t4\t5\n"), False, 0, 0)
    assert isinstance(parser, TSVParser)
    assert parser.label_idx == 0
    assert parser.parse_one_line("1\t0\t2") == ([(1, 2.0)], 1.0)


def test_detects_csv(tmp_path):
    parser = create_parser(_write(tmp_path, "1,2,3\n0,4,5\n"), False, 0, 0)
    assert isinstance(parser, CSVParser)
    assert parser.label_idx == 0
    assert parser.parse_one_line("0,4,5") == ([(0, 4.0), (1, 5.0)], 0.0)


def test_detects_single_line_csv(tmp_path):
    parser = create_parser(_write(tmp_path, "1,2,3"), False, 0, 0)
    assert isinstance(parser, CSVParser)
    assert parser.parse_one_line("1,2,3") == ([(0, 2.0), (1, 3.0)], 1.0)


def test_header_is_skipped(tmp_path):
    parser = create_parser(_write(tmp_path, "x:y\n1,2\n3,4\n"), True, 0, 0)
    assert isinstance(parser, CSVParser)
    assert parser.parse_one_line("1,2") == ([(0, 2.0)], 1.0)


def test_inconsistent_lines_raise(tmp_path):
    with pytest.raises(ParseError):
        create_parser(_write(tmp_path, "1\t2\n1\t2\t3\n"), False, 0, 0)


def test_empty_file_raises(tmp_path):
    with pytest.raises(ParseError):
        create_parser(_write(tmp_path, ""), False, 0, 0)


def test_header_only_raises(tmp_path):
    with pytest.raises(ParseError):
        create_parser(_write(tmp_path, "a,b,c"), True, 0, 0)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        create_parser(str(tmp_path / "absent.txt"), False, 0, 0)


def test_csv_without_label_column_when_feature_count_matches(tmp_path):
    parser = create_parser(_write(tmp_path, "1,2,3\n4,5,6\n"), False, 3, 0)
    assert isinstance(parser, CSVParser)
    assert parser.label_idx == -1


def test_csv_keeps_label_when_feature_count_differs(tmp_path):
    parser = create_parser(_write(tmp_path, "1,2,3\n4,5,6\n"), False, 2, 0)
    assert parser.label_idx == 0


def test_libsvm_without_label_column(tmp_path):
    parser = create_parser(_write(tmp_path, "1:0.5 2:1\n3:1\n"), False, 5, 0)
    assert isinstance(parser, LibSVMParser)
    assert parser.label_idx == -1


def test_libsvm_with_label_column_and_feature_count(tmp_path):
    parser = create_parser(_write(tmp_path, "1 1:0.5\n0 3:1\n"), False, 5, 0)
    assert parser.label_idx == 0