"""
classifier.py
=============
Classifier stage: K-Nearest-Neighbors with explicit tie-breaking.

`KNNClassifier` follows the scikit-learn estimator contract (fit / predict /
score, `get_params`, usable inside a `Pipeline`) but computes distances and
votes itself so that both tie-breaking rules are fixed and documented:

* neighbour selection — stable sort on Euclidean distance; equal distances
  keep training-set order, so the earlier training row wins;
* majority vote — when several labels share the top count, the label met
  first in the neighbour order (i.e. the nearest one) wins.
"""

from __future__ import annotations

import numbers
from collections import Counter

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_is_fitted

from wdbc_knn.data import Dataset
from wdbc_knn.errors import (
    DimensionMismatchError,
    InvalidConfigurationError,
    MalformedInputError,
)


def _as_matrix(X) -> np.ndarray:
    matrix = np.asarray(X, dtype=np.float64)
    if matrix.ndim == 1:
        matrix = matrix.reshape(1, -1)
    if matrix.ndim != 2:
        raise MalformedInputError(f"feature matrix must be 2-D, got {matrix.ndim}-D")
    return matrix


def euclidean_distances(queries: np.ndarray, references: np.ndarray) -> np.ndarray:
    """Exact pairwise Euclidean distances, shape (n_queries, n_references)."""
    diff = queries[:, np.newaxis, :] - references[np.newaxis, :, :]
    return np.sqrt(np.einsum("ijk,ijk->ij", diff, diff))


def majority_vote(neighbor_labels) -> object:
    """Most frequent label; ties go to the label seen first (nearest)."""
    # most_common orders equal counts by first occurrence
    return Counter(neighbor_labels).most_common(1)[0][0]


class KNNClassifier(ClassifierMixin, BaseEstimator):
    """
    K-Nearest-Neighbors classifier over Euclidean distance.

    sklearn.neighbors.KNeighborsClassifier is not used here: its neighbour
    search does not guarantee training-order tie-breaks on equal distances,
    and its vote resolves count ties by smallest class label instead of by
    the nearest neighbour.

    Parameters
    ----------
    n_neighbors : int, default=5
        k — number of nearest training samples that vote on each query.
        Must satisfy 1 <= k <= number of training samples.

    Attributes
    ----------
    classes_ : np.ndarray
        Distinct training labels, sorted.
    n_features_in_ : int
        Feature dimensionality seen at fit time.
    """

    def __init__(self, n_neighbors: int = 5):
        self.n_neighbors = n_neighbors

    def fit(self, X, y) -> "KNNClassifier":
        """
        Memorise the training set.

        Raises
        ------
        InvalidConfigurationError
            `n_neighbors` is not a positive integer or exceeds the number
            of training samples.
        MalformedInputError
            Empty training set or X / y length mismatch.
        """
        k = self.n_neighbors
        if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 1:
            raise InvalidConfigurationError(
                f"n_neighbors must be a positive integer, got {k!r}"
            )

        fit_X = _as_matrix(X)
        fit_y = np.asarray(y)
        if fit_X.shape[0] == 0:
            raise MalformedInputError("cannot fit on an empty training set")
        if fit_y.shape[0] != fit_X.shape[0]:
            raise MalformedInputError(
                f"X has {fit_X.shape[0]} samples but y has {fit_y.shape[0]}"
            )
        if k > fit_X.shape[0]:
            raise InvalidConfigurationError(
                f"n_neighbors ({k}) cannot exceed the number of "
                f"training samples ({fit_X.shape[0]})"
            )

        self._fit_X = fit_X.copy()
        self._fit_y = fit_y.copy()
        self.classes_ = np.unique(fit_y)
        self.n_features_in_ = fit_X.shape[1]
        return self

    def kneighbors(self, X) -> tuple[np.ndarray, np.ndarray]:
        """
        Distances to, and training positions of, the k nearest neighbours.

        Returns
        -------
        distances : np.ndarray, shape (n_queries, k)
        indices : np.ndarray, shape (n_queries, k)
            Positions in the training set, nearest first.
        """
        check_is_fitted(self)
        queries = _as_matrix(X)
        if queries.shape[1] != self.n_features_in_:
            raise DimensionMismatchError(self.n_features_in_, queries.shape[1])

        distances = euclidean_distances(queries, self._fit_X)
        order = np.argsort(distances, axis=1, kind="stable")[:, : self.n_neighbors]
        return np.take_along_axis(distances, order, axis=1), order

    def predict(self, X) -> np.ndarray:
        _, indices = self.kneighbors(X)
        return np.array([majority_vote(self._fit_y[row]) for row in indices])


def classify(train: Dataset, queries, k: int) -> pd.Series:
    """
    Predict a label for every query row from the `train` Dataset.

    `queries` may be a Dataset, a DataFrame or a 2-D array. The result is a
    categorical Series with the training label categories; when `queries`
    is a Dataset or DataFrame its index is kept.
    """
    if isinstance(queries, Dataset):
        queries = queries.features

    model = KNNClassifier(n_neighbors=k).fit(
        train.features.to_numpy(), train.labels.to_numpy()
    )
    predicted = model.predict(np.asarray(queries, dtype=np.float64))
    index = queries.index if isinstance(queries, pd.DataFrame) else None
    return pd.Series(
        pd.Categorical(predicted, categories=train.labels.cat.categories),
        index=index,
        name=train.labels.name,
    )
