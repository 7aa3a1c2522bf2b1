"""Scaler stage: standardization or min-max normalization of every feature."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import pandas as pd
from sklearn.preprocessing import MinMaxScaler, StandardScaler

from wdbc_knn.config import SCALING_POLICIES
from wdbc_knn.data import Dataset
from wdbc_knn.errors import (
    DegenerateFeatureError,
    DimensionMismatchError,
    InvalidConfigurationError,
)

Transformer = Union[StandardScaler, MinMaxScaler]


def _make_transformer(policy: str) -> Transformer:
    if policy == "standardize":
        # population standard deviation (ddof=0)
        return StandardScaler()
    if policy == "normalize":
        return MinMaxScaler(feature_range=(0.0, 1.0))
    raise InvalidConfigurationError(
        f"unknown scaling policy {policy!r}; expected one of {SCALING_POLICIES}"
    )


@dataclass(frozen=True)
class FittedScaler:
    """
    Scaling parameters computed once over a reference dataset.

    Applying the same instance to any other dataset (e.g. a test split)
    reuses those parameters unchanged.
    """

    policy: str
    transformer: Transformer
    feature_names: tuple[str, ...]

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    def transform(self, dataset: Dataset) -> Dataset:
        if dataset.n_features != self.n_features:
            raise DimensionMismatchError(self.n_features, dataset.n_features)
        scaled = self.transformer.transform(dataset.features.to_numpy())
        frame = pd.DataFrame(
            scaled,
            columns=dataset.features.columns,
            index=dataset.features.index,
        )
        return dataset.with_features(frame)


def fit_scaler(dataset: Dataset, policy: str) -> FittedScaler:
    """
    Compute per-feature scaling parameters over `dataset`.

    Parameters
    ----------
    dataset : Dataset
        Reference set the mean/std or min/max are computed from.
    policy : str
        ``"standardize"`` → (v - mean) / std
        ``"normalize"``   → (v - min) / (max - min)

    Returns
    -------
    FittedScaler

    Raises
    ------
    InvalidConfigurationError
        Unknown policy.
    DegenerateFeatureError
        A column is constant, so its std or range is zero.
    """
    transformer = _make_transformer(policy)
    if dataset.n_samples == 0:
        raise InvalidConfigurationError("cannot fit a scaler on an empty dataset")

    features = dataset.features
    constant = features.columns[((features.max() - features.min()) == 0).to_numpy()]
    if len(constant):
        raise DegenerateFeatureError(policy, [str(col) for col in constant])

    transformer.fit(features.to_numpy())
    return FittedScaler(
        policy=policy,
        transformer=transformer,
        feature_names=tuple(str(col) for col in features.columns),
    )


def scale_dataset(dataset: Dataset, policy: str) -> tuple[Dataset, FittedScaler]:
    """Fit on `dataset` and transform it in one go (whole-table scaling)."""
    scaler = fit_scaler(dataset, policy)
    return scaler.transform(dataset), scaler
