import numpy as np
import pytest

from wdbc_knn.data import load_dataset
from wdbc_knn.errors import (
    DegenerateFeatureError,
    DimensionMismatchError,
    InvalidConfigurationError,
)
from wdbc_knn.scaling import fit_scaler, scale_dataset

TOL = 1e-9


class TestNormalize:

    def test_values_within_unit_interval(self, random_dataset):
        scaled, _ = scale_dataset(random_dataset, "normalize")
        values = scaled.features.to_numpy()
        assert (values >= -TOL).all()
        assert (values <= 1 + TOL).all()

    def test_column_extremes(self, random_dataset):
        scaled, _ = scale_dataset(random_dataset, "normalize")
        np.testing.assert_allclose(scaled.features.min().to_numpy(), 0.0, atol=TOL)
        np.testing.assert_allclose(scaled.features.max().to_numpy(), 1.0, atol=TOL)

    def test_parameters_reused_on_other_rows(self, make_dataset):
        reference = make_dataset([[0.0], [10.0]], ["B", "M"])
        other = make_dataset([[5.0], [20.0]], ["M", "B"])
        scaler = fit_scaler(reference, "normalize")
        result = scaler.transform(other)
        np.testing.assert_allclose(result.features["f0"].to_numpy(), [0.5, 2.0])
        assert result.labels.tolist() == ["M", "B"]


class TestStandardize:

    def test_zero_mean_unit_std(self, wdbc_csv):
        scaled, _ = scale_dataset(load_dataset(wdbc_csv), "standardize")
        np.testing.assert_allclose(scaled.features.mean().to_numpy(), 0.0, atol=1e-9)
        np.testing.assert_allclose(scaled.features.std(ddof=0).to_numpy(), 1.0, atol=1e-9)

    def test_known_values(self, make_dataset):
        dataset = make_dataset([[1.0], [3.0]], ["B", "M"])
        scaled, scaler = scale_dataset(dataset, "standardize")
        np.testing.assert_allclose(scaled.features["f0"].to_numpy(), [-1.0, 1.0])
        assert scaler.policy == "standardize"


class TestScalerContract:

    def test_index_and_columns_preserved(self, toy_dataset):
        scaled, _ = scale_dataset(toy_dataset, "standardize")
        assert list(scaled.features.index) == list(toy_dataset.features.index)
        assert scaled.feature_names == toy_dataset.feature_names

    def test_input_left_untouched(self, toy_dataset):
        before = toy_dataset.features.copy()
        scale_dataset(toy_dataset, "normalize")
        assert toy_dataset.features.equals(before)

    @pytest.mark.parametrize("policy", ["standardize", "normalize"])
    def test_constant_column_is_degenerate(self, make_dataset, policy):
        dataset = make_dataset([[1.0, 2.0], [1.0, 3.0], [1.0, 4.0]], ["B", "M", "B"])
        with pytest.raises(DegenerateFeatureError, match="f0") as info:
            fit_scaler(dataset, policy)
        assert info.value.columns == ["f0"]
        assert info.value.policy == policy

    def test_unknown_policy(self, toy_dataset):
        with pytest.raises(InvalidConfigurationError, match="unknown scaling policy"):
            fit_scaler(toy_dataset, "robust")

    def test_dimension_mismatch(self, toy_dataset, make_dataset):
        scaler = fit_scaler(toy_dataset, "normalize")
        other = make_dataset([[1.0, 2.0, 3.0]], ["B"])
        with pytest.raises(DimensionMismatchError):
            scaler.transform(other)
