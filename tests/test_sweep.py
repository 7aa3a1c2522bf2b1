import pytest

from wdbc_knn.data import load_dataset
from wdbc_knn.errors import InvalidConfigurationError
from wdbc_knn.scaling import scale_dataset
from wdbc_knn.split import Split, split_dataset
from wdbc_knn.sweep import (
    RESULT_COLUMNS,
    SweepResult,
    confusion_for_k,
    evaluate_k,
    rank_results,
    results_frame,
    select_k,
    sweep_k,
)


def result(k, odds, fn=1, fp=1):
    return SweepResult(k=k, odds_ratio=odds, false_negatives=fn, false_positives=fp, accuracy=0.9)


@pytest.fixture(scope="module")
def wdbc_split(wdbc_csv):
    scaled, _ = scale_dataset(load_dataset(wdbc_csv), "normalize")
    return split_dataset(scaled, 0.75, seed=123)


class TestSweepK:

    def test_one_result_per_k(self, wdbc_split):
        results = sweep_k(wdbc_split, range(1, 26))
        assert len(results) == 25
        assert [r.k for r in results] == list(range(1, 26))

    def test_error_counts_bounded_by_test_size(self, wdbc_split):
        n_test = wdbc_split.test.n_samples
        for r in sweep_k(wdbc_split, range(1, 26)):
            assert r.false_negatives >= 0
            assert r.false_positives >= 0
            assert r.false_negatives + r.false_positives <= n_test

    def test_evaluate_k_matches_sweep_entry(self, wdbc_split):
        assert evaluate_k(wdbc_split, 7) == sweep_k(wdbc_split, [7])[0]

    def test_k_beyond_training_size(self, toy_dataset):
        split = split_dataset(toy_dataset, 0.5, seed=0)
        with pytest.raises(InvalidConfigurationError, match="exceed the training set size"):
            sweep_k(split, range(1, 7))

    def test_empty_range(self, toy_dataset):
        split = split_dataset(toy_dataset, 0.5, seed=0)
        with pytest.raises(InvalidConfigurationError, match="empty"):
            sweep_k(split, [])

    def test_separable_data_gives_undefined_odds_ratio(self, toy_dataset):
        split = split_dataset(toy_dataset, 0.6, seed=0, stratify=True)
        r = sweep_k(split, [1])[0]
        assert (r.false_negatives, r.false_positives) == (0, 0)
        assert r.odds_ratio is None


class TestRanking:

    def test_descending_by_odds_ratio(self):
        ranked = rank_results([result(1, 5.0), result(2, 20.0), result(3, 10.0)])
        assert [r.k for r in ranked] == [2, 3, 1]

    def test_ties_prefer_smaller_k(self):
        ranked = rank_results([result(4, 10.0), result(2, 10.0)])
        assert [r.k for r in ranked] == [2, 4]

    def test_undefined_ranked_last(self):
        ranked = rank_results([result(3, None), result(1, 2.0), result(2, None)])
        assert [r.k for r in ranked] == [1, 2, 3]

    def test_frame(self):
        frame = results_frame([result(1, 5.0), result(2, 20.0)])
        assert list(frame.columns) == RESULT_COLUMNS
        assert frame["k"].tolist() == [2, 1]


class TestSelectK:

    def test_smallest_k_within_tolerance(self):
        results = [result(1, 10.0), result(2, 19.5), result(3, 20.0), result(4, 20.0)]
        assert select_k(results, tolerance=0.05) == 2

    def test_zero_tolerance_picks_first_best(self):
        results = [result(1, 10.0), result(2, 19.5), result(3, 20.0), result(4, 20.0)]
        assert select_k(results, tolerance=0.0) == 3

    def test_undefined_ignored(self):
        assert select_k([result(1, None), result(2, 3.0), result(3, 2.0)], tolerance=0.5) == 2

    def test_all_undefined_falls_back_to_smallest_k(self):
        assert select_k([result(5, None), result(3, None)]) == 3

    def test_no_results(self):
        with pytest.raises(InvalidConfigurationError):
            select_k([])

    def test_negative_tolerance(self):
        with pytest.raises(InvalidConfigurationError, match="tolerance"):
            select_k([result(1, 2.0)], tolerance=-0.1)


class TestIntegerLabels:

    def test_confusion_for_integer_categories(self, make_dataset):
        dataset = make_dataset(
            [[0.0], [0.2], [0.4], [5.0], [5.2], [5.4]], [0, 0, 0, 1, 1, 1], categories=(0, 1)
        )
        split = Split(train=dataset.take([0, 1, 3, 4]), test=dataset.take([2, 5]))
        cm = confusion_for_k(split, 1)
        assert (cm.true_negative, cm.false_negative, cm.false_positive, cm.true_positive) == (1, 0, 0, 1)
        assert cm.total == 2
