"""
data.py
=======
Loader stage: read the diagnostic table and turn it into a `Dataset`.

The input is a CSV with a header row: an opaque identifier column, a
two-valued diagnosis column and numeric feature columns. It can come from
a local path, an http(s) URL (fetched with `requests`), or scikit-learn's
bundled copy of WDBC.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from io import StringIO
from typing import Sequence

import numpy as np
import pandas as pd
import requests
from sklearn.datasets import load_breast_cancer

from wdbc_knn.errors import MalformedInputError

BUNDLED_SOURCE = "bundled"
HTTP_TIMEOUT = 30  # seconds


@dataclass(frozen=True)
class Dataset:
    """
    Ordered samples with a uniform feature dimensionality.

    Attributes
    ----------
    features : pd.DataFrame
        float64 feature matrix, one column per feature.
    labels : pd.Series
        Categorical series with exactly two categories, ordered
        ``[negative, positive]``. Shares the index of `features`.
    """

    features: pd.DataFrame
    labels: pd.Series

    def __post_init__(self) -> None:
        if len(self.features) != len(self.labels):
            raise MalformedInputError(
                f"{len(self.features)} feature rows but {len(self.labels)} labels"
            )
        if not isinstance(self.labels.dtype, pd.CategoricalDtype):
            raise MalformedInputError("labels must be categorical")
        if len(self.labels.cat.categories) != 2:
            raise MalformedInputError(
                f"expected 2 label categories, got "
                f"{list(self.labels.cat.categories)}"
            )

    @property
    def n_samples(self) -> int:
        return len(self.features)

    @property
    def n_features(self) -> int:
        return self.features.shape[1]

    @property
    def feature_names(self) -> list[str]:
        return list(self.features.columns)

    @property
    def classes(self) -> tuple[str, str]:
        """(negative, positive) label pair."""
        negative, positive = self.labels.cat.categories
        return negative, positive

    def take(self, positions: Sequence[int] | np.ndarray) -> "Dataset":
        """Return a new Dataset over the given row positions."""
        positions = np.asarray(positions, dtype=int)
        return Dataset(
            features=self.features.iloc[positions].copy(),
            labels=self.labels.iloc[positions].copy(),
        )

    def with_features(self, features: pd.DataFrame) -> "Dataset":
        """Same labels, replaced feature matrix (used by the scaler)."""
        return Dataset(features=features, labels=self.labels.copy())

    def class_proportions(self) -> pd.DataFrame:
        """Count and share of each label, negative first."""
        counts = self.labels.value_counts(sort=False).reindex(self.labels.cat.categories)
        total = counts.sum()
        shares = counts / total if total else counts.astype(float)
        return pd.DataFrame({"count": counts, "proportion": shares})


# ════════════════════════════════════════════════════════════════════════════
# Reading
# ════════════════════════════════════════════════════════════════════════════

def _bundled_frame() -> pd.DataFrame:
    # sklearn encodes malignant as 0 and benign as 1
    bunch = load_breast_cancer(as_frame=True)
    features = bunch.data.copy()
    features.columns = [name.replace(" ", "_") for name in features.columns]
    diagnosis = np.where(bunch.target.to_numpy() == 0, "M", "B")
    frame = pd.DataFrame({"id": np.arange(1, len(features) + 1), "diagnosis": diagnosis})
    return pd.concat([frame, features], axis=1)


def read_table(source: str) -> pd.DataFrame:
    """
    Read the raw table from a path, an http(s) URL, or ``"bundled"``.

    Raises
    ------
    MalformedInputError
        If the path does not exist or the CSV is empty.
    requests.HTTPError
        If the remote endpoint returns a non-2xx status code.
    """
    if source == BUNDLED_SOURCE:
        return _bundled_frame()

    try:
        if source.startswith(("http://", "https://")):
            response = requests.get(source, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
            return pd.read_csv(StringIO(response.text))
        if not os.path.exists(source):
            raise MalformedInputError(f"dataset file not found: {source}")
        return pd.read_csv(source)
    except pd.errors.EmptyDataError as exc:
        raise MalformedInputError(f"dataset {source} is empty") from exc


def _drop_empty_columns(raw: pd.DataFrame) -> pd.DataFrame:
    # trailing comma in the header produces a fully-empty "Unnamed: N" column
    empty = [
        col for col in raw.columns
        if str(col).startswith("Unnamed:") and raw[col].isna().all()
    ]
    return raw.drop(columns=empty)


def _to_categorical(values: pd.Series, labels: tuple[str, str], column: str) -> pd.Series:
    if values.isna().any():
        raise MalformedInputError(
            f"label column {column!r} has {int(values.isna().sum())} missing value(s)"
        )
    as_text = values.astype(str).str.strip()
    observed = sorted(as_text.unique())
    if len(observed) != 2:
        raise MalformedInputError(
            f"label column {column!r} must hold exactly 2 distinct values, "
            f"found {len(observed)}: {observed[:10]}"
        )
    if set(observed) != set(labels):
        raise MalformedInputError(
            f"label column {column!r} holds {observed}, expected {list(labels)}"
        )
    return pd.Series(
        pd.Categorical(as_text, categories=list(labels)),
        index=values.index,
        name=column,
    )


def _to_numeric(features: pd.DataFrame) -> pd.DataFrame:
    missing = [col for col in features.columns if features[col].isna().any()]
    if missing:
        raise MalformedInputError(f"missing feature values in column(s): {missing}")

    numeric = features.apply(pd.to_numeric, errors="coerce")
    bad = [col for col in features.columns if numeric[col].isna().any()]
    if bad:
        raise MalformedInputError(f"non-numeric feature values in column(s): {bad}")
    return numeric.astype("float64")


def load_dataset(
    source: str,
    id_column: str = "id",
    label_column: str = "diagnosis",
    labels: tuple[str, str] = ("B", "M"),
) -> Dataset:
    """
    Load the diagnostic table into a `Dataset`.

    Steps
    -----
    1. Read the CSV (path, URL or bundled copy).
    2. Drop fully-empty ``Unnamed:`` columns.
    3. Drop the identifier column.
    4. Map the diagnosis column to a two-category categorical,
       negative label first.
    5. Coerce every remaining column to float64.

    Parameters
    ----------
    source : str
        Local path, http(s) URL, or ``"bundled"``.
    id_column, label_column : str
        Names of the identifier and label columns.
    labels : (str, str)
        (negative, positive) label values expected in `label_column`.

    Returns
    -------
    Dataset

    Raises
    ------
    MalformedInputError
        Missing columns, empty table, wrong label cardinality, unexpected
        labels, missing or non-numeric feature values.
    """
    raw = _drop_empty_columns(read_table(source))

    missing = [col for col in (id_column, label_column) if col not in raw.columns]
    if missing:
        raise MalformedInputError(
            f"missing required column(s) {missing}; found {list(raw.columns)[:10]}"
        )
    if raw.empty:
        raise MalformedInputError(f"dataset {source} has no rows")

    features = raw.drop(columns=[id_column, label_column])
    if features.shape[1] == 0:
        raise MalformedInputError("dataset has no feature columns")

    return Dataset(
        features=_to_numeric(features),
        labels=_to_categorical(raw[label_column], labels, label_column),
    )
