"""
config.py
=========
Run configuration for the WDBC KNN pipeline.

The module-level constants mirror the header of the analysis script they
came from; `RunConfig` groups them for a single run so that the CLI can
override any of them without touching global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from wdbc_knn.errors import InvalidConfigurationError

# ── Global constants ─────────────────────────────────────────────────────────
# "bundled" builds the CSV schema from scikit-learn's copy of WDBC
DATA_SOURCE: str = "bundled"

ID_COLUMN:    str = "id"
LABEL_COLUMN: str = "diagnosis"

# (negative, positive): B = benign, M = malignant
LABELS: tuple[str, str] = ("B", "M")

SCALING_POLICIES: tuple[str, ...] = ("standardize", "normalize")

RANDOM_STATE:        int = 123     # seed for reproducibility
TRAIN_RATIO:         float = 0.75  # 75 / 25 train-test split
DEFAULT_K:           int = 5
K_RANGE:             tuple[int, ...] = tuple(range(1, 26))
SELECTION_TOLERANCE: float = 0.05  # relative distance from the best odds ratio


@dataclass(frozen=True)
class RunConfig:
    """Every knob of one pipeline run."""

    data_source: str = DATA_SOURCE
    id_column: str = ID_COLUMN
    label_column: str = LABEL_COLUMN
    labels: tuple[str, str] = LABELS
    scaling: str = "normalize"
    train_ratio: float = TRAIN_RATIO
    seed: int = RANDOM_STATE
    k: int = DEFAULT_K
    k_values: tuple[int, ...] = field(default=K_RANGE)
    selection_tolerance: float = SELECTION_TOLERANCE
    scale_before_split: bool = True
    stratify: bool = False

    def validate(self) -> "RunConfig":
        """
        Check the configuration before any data is touched.

        Returns
        -------
        RunConfig
            `self`, so calls can be chained.

        Raises
        ------
        InvalidConfigurationError
            On the first invalid setting.
        """
        if self.scaling not in SCALING_POLICIES:
            raise InvalidConfigurationError(
                f"unknown scaling policy {self.scaling!r}; "
                f"expected one of {SCALING_POLICIES}"
            )
        if not 0.0 < self.train_ratio < 1.0:
            raise InvalidConfigurationError(
                f"train_ratio must lie in (0, 1), got {self.train_ratio}"
            )
        if self.k < 1:
            raise InvalidConfigurationError(f"k must be >= 1, got {self.k}")
        if not self.k_values:
            raise InvalidConfigurationError("k_values must not be empty")
        if self.k_values[0] < 1:
            raise InvalidConfigurationError(
                f"k_values must start at 1 or above, got {self.k_values[0]}"
            )
        if any(b <= a for a, b in zip(self.k_values, self.k_values[1:])):
            raise InvalidConfigurationError("k_values must be strictly ascending")
        if self.selection_tolerance < 0:
            raise InvalidConfigurationError(
                f"selection_tolerance must be >= 0, got {self.selection_tolerance}"
            )
        if len(set(self.labels)) != 2:
            raise InvalidConfigurationError(
                f"labels must name two distinct categories, got {self.labels}"
            )
        return self
