import pytest

from gbmcore.metadata import Metadata, MetadataError


def _write(path, lines):
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")


@pytest.fixture
def data_file(tmp_path):
    data = tmp_path / "train.txt"
    data.write_text("1,2\n", encoding="utf-8")
    return data


def test_init_from_files_loads_queries_and_weights(data_file):
    _write(data_file.with_name("train.txt.query"), ["2", "3"])
    _write(data_file.with_name("train.txt.weight"), ["2.0"] * 5)
    meta = Metadata()
    meta.init_from_files(str(data_file), "")
    assert meta.num_queries == 2
    assert meta.query_boundaries[0] == 0
    assert meta.query_boundaries[-1] == 5
    assert [b - a for a, b in zip(meta.query_boundaries, meta.query_boundaries[1:])] == [2, 3]
    assert meta.weights == [2.0] * 5
    assert meta.query_weights == pytest.approx([2.0, 2.0])


def test_missing_side_files_leave_fields_empty(data_file):
    meta = Metadata()
    meta.init_from_files(str(data_file), "")
    assert meta.weights is None
    assert meta.query_boundaries is None
    assert meta.init_score is None


def test_init_score_loaded(data_file, tmp_path):
    score_file = tmp_path / "scores.txt"
    _write(score_file, ["0.5", "-1.5"])
    meta = Metadata()
    meta.init_init_score(str(score_file))
    assert meta.init_score == [0.5, -1.5]


def test_malformed_weight_file_raises(data_file):
    _write(data_file.with_name("train.txt.weight"), ["abc"])
    with pytest.raises(MetadataError):
        Metadata().init_from_files(str(data_file), "")


def test_query_ids_become_boundaries():
    meta = Metadata()
    meta.allocate(5, -1, 0)
    meta.queries[:] = [7, 7, 3, 3, 3]
    meta.check_or_partition(5, [])
    assert meta.query_boundaries == [0, 2, 5]
    assert meta.queries is None


def test_allocate_weight_column_replaces_file_weights():
    meta = Metadata()
    meta.weights = [1.0, 1.0]
    meta.allocate(4, 1, -1)
    assert meta.weights == [0.0] * 4
    assert meta.label == [0.0] * 4


def test_weight_size_mismatch_raises(data_file):
    _write(data_file.with_name("train.txt.weight"), ["1.0"] * 3)
    meta = Metadata()
    meta.init_from_files(str(data_file), "")
    meta.allocate(4, -1, -1)
    with pytest.raises(MetadataError):
        meta.check_or_partition(4, [])


def test_query_size_mismatch_raises(data_file):
    _write(data_file.with_name("train.txt.query"), ["2"])
    meta = Metadata()
    meta.init_from_files(str(data_file), "")
    meta.allocate(3, -1, -1)
    with pytest.raises(MetadataError):
        meta.check_or_partition(3, [])


def test_init_score_mismatch_raises(tmp_path):
    score_file = tmp_path / "scores.txt"
    _write(score_file, ["0.5"])
    meta = Metadata()
    meta.init_init_score(str(score_file))
    meta.allocate(2, -1, -1)
    with pytest.raises(MetadataError):
        meta.check_or_partition(2, [])


def test_set_init_score():
    meta = Metadata()
    meta.allocate(3, -1, -1)
    meta.set_init_score([1.0, 2.0, 3.0])
    assert meta.init_score == [1.0, 2.0, 3.0]
    with pytest.raises(MetadataError):
        meta.set_init_score([1.0])


def test_partition_label():
    meta = Metadata()
    meta.allocate(4, -1, -1)
    meta.label[:] = [0.0, 1.0, 2.0, 3.0]
    meta.partition_label([1, 3])
    assert meta.label == [1.0, 3.0]
    assert meta.num_data == 2
    meta.partition_label([])
    assert meta.label == [1.0, 3.0]


def test_partition_keeps_whole_queries(data_file, tmp_path):
    _write(data_file.with_name("train.txt.query"), ["2", "3", "2"])
    _write(data_file.with_name("train.txt.weight"), [f"{i}.0" for i in range(1, 8)])
    score_file = tmp_path / "scores.txt"
    _write(score_file, [f"{i}.5" for i in range(7)])
    meta = Metadata()
    meta.init_from_files(str(data_file), str(score_file))
    meta.allocate(3, -1, -1)
    meta.check_or_partition(7, [2, 3, 4])
    assert meta.weights == [3.0, 4.0, 5.0]
    assert meta.init_score == [2.5, 3.5, 4.5]
    assert meta.query_boundaries == [0, 3]
    assert meta.query_weights == pytest.approx([4.0])


def test_partition_not_matching_queries_raises(data_file):
    _write(data_file.with_name("train.txt.query"), ["2", "3"])
    meta = Metadata()
    meta.init_from_files(str(data_file), "")
    meta.allocate(2, -1, -1)
    with pytest.raises(MetadataError):
        meta.check_or_partition(5, [0, 2])


def test_partition_size_mismatch_raises(data_file):
    _write(data_file.with_name("train.txt.weight"), ["1.0"] * 3)
    meta = Metadata()
    meta.init_from_files(str(data_file), "")
    with pytest.raises(MetadataError):
        meta.check_or_partition(5, [0, 1])


def test_bytes_round_trip(data_file):
    _write(data_file.with_name("train.txt.query"), ["1", "2"])
    _write(data_file.with_name("train.txt.weight"), ["1.0", "0.5", "2.0"])
    meta = Metadata()
    meta.init_from_files(str(data_file), "")
    meta.allocate(3, -1, -1)
    meta.label[:] = [1.0, 0.0, 0.5]
    meta.check_or_partition(3, [])
    blob = meta.to_bytes()
    assert meta.sizes_in_byte() == len(blob)

    restored = Metadata()
    restored.load_from_bytes(blob)
    assert restored.num_data == 3
    assert restored.label == meta.label
    assert restored.weights == meta.weights
    assert restored.query_boundaries == meta.query_boundaries
    assert restored.query_weights == pytest.approx(meta.query_weights)


def test_bytes_round_trip_labels_only():
    meta = Metadata()
    meta.allocate(2, -1, -1)
    meta.label[:] = [0.25, 4.0]
    restored = Metadata()
    restored.load_from_bytes(meta.to_bytes())
    assert restored.label == [0.25, 4.0]
    assert restored.weights is None
    assert restored.query_boundaries is None


def test_truncated_bytes_raise():
    meta = Metadata()
    meta.allocate(3, -1, -1)
    with pytest.raises(MetadataError):
        Metadata().load_from_bytes(meta.to_bytes()[:-2])