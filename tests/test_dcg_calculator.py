import pytest

from gbmcore.dcg_calculator import DCGCalculator

GAINS = [float(2**i - 1) for i in range(31)]


@pytest.fixture(autouse=True)
def _init_gains():
    DCGCalculator.init(GAINS)


def test_single_relevant_item_at_top():
    assert DCGCalculator.cal_max_dcg_at_k(1, [1.0]) == pytest.approx(1.0)


def test_ideal_ranking_reaches_max_dcg():
    labels = [0.0, 2.0, 1.0, 3.0, 0.0]
    ks = [1, 2, 3, 5]
    assert DCGCalculator.cal_dcg(ks, labels, labels) == pytest.approx(
        DCGCalculator.cal_max_dcg(ks, labels)
    )


def test_dcg_never_exceeds_max():
    labels = [0.0, 2.0, 1.0, 3.0, 0.0]
    scores = [5.0, 1.0, 2.0, 0.0, 4.0]
    for k in range(1, 6):
        assert DCGCalculator.cal_dcg_at_k(k, labels, scores) <= (
            DCGCalculator.cal_max_dcg_at_k(k, labels) + 1e-12
        )


def test_one_pass_matches_individual_positions():
    labels = [1.0, 0.0, 2.0, 1.0]
    scores = [0.3, 0.9, 0.1, 0.5]
    ks = [1, 2, 3, 4]
    batch = DCGCalculator.cal_dcg(ks, labels, scores)
    assert batch == pytest.approx([DCGCalculator.cal_dcg_at_k(k, labels, scores) for k in ks])
    max_batch = DCGCalculator.cal_max_dcg(ks, labels)
    assert max_batch == pytest.approx([DCGCalculator.cal_max_dcg_at_k(k, labels) for k in ks])


def test_dcg_is_non_decreasing_in_k_and_capped_by_data():
    labels = [1.0, 0.0, 2.0]
    scores = [0.2, 0.4, 0.6]
    values = DCGCalculator.cal_dcg([1, 2, 3, 10], labels, scores)
    assert values == sorted(values)
    assert values[-1] == pytest.approx(values[-2])


def test_all_zero_labels_give_zero():
    assert DCGCalculator.cal_max_dcg_at_k(3, [0.0, 0.0, 0.0]) == 0.0


def test_label_outside_gain_table_rejected():
    with pytest.raises(ValueError):
        DCGCalculator.cal_max_dcg([1], [31.0])


def test_second_init_is_ignored():
    before = DCGCalculator.cal_max_dcg_at_k(2, [2.0, 1.0])
    DCGCalculator.init([10.0] * 31)
    assert DCGCalculator.cal_max_dcg_at_k(2, [2.0, 1.0]) == before