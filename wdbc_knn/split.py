"""Splitter stage: deterministic train/test partition of a Dataset."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.model_selection import train_test_split

from wdbc_knn.data import Dataset
from wdbc_knn.errors import InvalidConfigurationError


@dataclass(frozen=True)
class Split:
    """Disjoint training and test subsets covering the whole dataset."""

    train: Dataset
    test: Dataset

    @property
    def n_samples(self) -> int:
        return self.train.n_samples + self.test.n_samples

    def describe(self) -> dict:
        return {
            "train": self.train.n_samples,
            "test": self.test.n_samples,
            "train_ratio": self.train.n_samples / self.n_samples,
        }


def split_dataset(
    dataset: Dataset,
    train_ratio: float,
    seed: int,
    stratify: bool = False,
) -> Split:
    """
    Shuffle with a fixed seed and cut `dataset` into train and test parts.

    The same seed and input order always give the same partition. Rows keep
    their original index labels, so both sides can be traced back.

    Parameters
    ----------
    dataset : Dataset
    train_ratio : float
        Target share of rows in the training set, strictly between 0 and 1.
    seed : int
        `random_state` handed to `train_test_split`.
    stratify : bool, default=False
        Preserve the label proportions on both sides.

    Raises
    ------
    InvalidConfigurationError
        Ratio outside (0, 1), or a ratio that would leave one side empty.
    """
    if not 0.0 < train_ratio < 1.0:
        raise InvalidConfigurationError(
            f"train_ratio must lie in (0, 1), got {train_ratio}"
        )

    positions = np.arange(dataset.n_samples)
    try:
        train_pos, test_pos = train_test_split(
            positions,
            train_size=train_ratio,
            random_state=seed,
            shuffle=True,
            stratify=dataset.labels.to_numpy() if stratify else None,
        )
    except ValueError as exc:
        # raised by sklearn when a side would be empty or a class is too small
        raise InvalidConfigurationError(
            f"cannot split {dataset.n_samples} samples at train_ratio={train_ratio}: {exc}"
        ) from exc

    return Split(train=dataset.take(train_pos), test=dataset.take(test_pos))
