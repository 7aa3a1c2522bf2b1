"""Shared fixtures: small hand-made datasets and a WDBC-shaped CSV on disk."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import load_breast_cancer

from wdbc_knn.data import Dataset


def build_dataset(rows, labels, categories=("B", "M")) -> Dataset:
    features = pd.DataFrame(
        np.asarray(rows, dtype=float),
        columns=[f"f{i}" for i in range(len(rows[0]))],
    )
    return Dataset(
        features=features,
        labels=pd.Series(
            pd.Categorical(labels, categories=list(categories)), name="diagnosis"
        ),
    )


@pytest.fixture
def make_dataset():
    return build_dataset


@pytest.fixture
def toy_dataset() -> Dataset:
    """Two well separated clusters, 6 benign and 4 malignant rows."""
    rows = [
        [0.0, 0.0], [0.5, 0.2], [0.2, 0.6], [1.0, 0.1], [0.3, 0.3], [0.9, 0.8],
        [5.0, 5.0], [5.5, 4.8], [6.0, 5.2], [4.8, 6.1],
    ]
    labels = ["B"] * 6 + ["M"] * 4
    return build_dataset(rows, labels)


@pytest.fixture
def random_dataset() -> Dataset:
    rng = np.random.default_rng(7)
    rows = rng.normal(size=(100, 4))
    labels = np.where(rows[:, 0] + rng.normal(scale=0.5, size=100) > 0, "M", "B")
    return build_dataset(rows, labels)


@pytest.fixture
def write_csv(tmp_path):
    """Write a DataFrame to a CSV under tmp_path and return its path."""
    def _write(frame: pd.DataFrame, name: str = "data.csv") -> str:
        path = tmp_path / name
        frame.to_csv(path, index=False)
        return str(path)
    return _write


@pytest.fixture(scope="session")
def wdbc_frame() -> pd.DataFrame:
    """WDBC in the usual CSV schema: id, diagnosis, 30 features, empty trailer."""
    bunch = load_breast_cancer(as_frame=True)
    features = bunch.data.copy()
    features.columns = [name.replace(" ", "_") for name in features.columns]
    frame = pd.DataFrame({
        "id": np.arange(842300, 842300 + len(features)),
        "diagnosis": np.where(bunch.target.to_numpy() == 0, "M", "B"),
    })
    frame = pd.concat([frame, features], axis=1)
    frame["Unnamed: 32"] = np.nan
    return frame


@pytest.fixture(scope="session")
def wdbc_csv(tmp_path_factory, wdbc_frame) -> str:
    path = tmp_path_factory.mktemp("wdbc") / "data.csv"
    wdbc_frame.to_csv(path, index=False)
    return str(path)
