"""
sweep.py
========
Sweep driver: run the classifier for every K in a range, rank the outcomes
by odds ratio and pick K.

Selection rule
--------------
Among the results whose odds ratio is defined and at least
``(1 - tolerance) * best``, the smallest K is chosen.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Optional, Sequence

import pandas as pd

from wdbc_knn.classifier import classify
from wdbc_knn.config import K_RANGE, SELECTION_TOLERANCE
from wdbc_knn.errors import InvalidConfigurationError
from wdbc_knn.metrics import ConfusionMatrix, PredictionResult
from wdbc_knn.split import Split

RESULT_COLUMNS = ["k", "odds_ratio", "false_negatives", "false_positives", "accuracy"]


@dataclass(frozen=True)
class SweepResult:
    k: int
    odds_ratio: Optional[float]
    false_negatives: int
    false_positives: int
    accuracy: Optional[float]


def confusion_for_k(split: Split, k: int) -> ConfusionMatrix:
    """Classify the test side with `k` neighbours against its true labels."""
    predicted = classify(split.train, split.test, k)
    result = PredictionResult(predicted=predicted, actual=split.test.labels)
    return result.confusion_matrix(split.train.classes)


def evaluate_k(split: Split, k: int) -> SweepResult:
    cm = confusion_for_k(split, k)
    return SweepResult(
        k=k,
        odds_ratio=cm.odds_ratio,
        false_negatives=cm.false_negative,
        false_positives=cm.false_positive,
        accuracy=cm.accuracy,
    )


def sweep_k(split: Split, k_values: Iterable[int] = K_RANGE) -> list[SweepResult]:
    """
    One `SweepResult` per K, in the order of `k_values`.

    Raises
    ------
    InvalidConfigurationError
        Empty K range, or a K outside 1..len(train).
    """
    k_values = list(k_values)
    if not k_values:
        raise InvalidConfigurationError("k_values must not be empty")
    too_large = [k for k in k_values if k > split.train.n_samples]
    if too_large:
        raise InvalidConfigurationError(
            f"k values {too_large} exceed the training set size ({split.train.n_samples})"
        )
    return [evaluate_k(split, k) for k in k_values]


def _rank_key(result: SweepResult) -> tuple:
    if result.odds_ratio is None:
        return (1, 0.0, result.k)
    return (0, -result.odds_ratio, result.k)


def rank_results(results: Sequence[SweepResult]) -> list[SweepResult]:
    """Odds ratio descending, smaller K first on ties, undefined ratios last."""
    return sorted(results, key=_rank_key)


def select_k(
    results: Sequence[SweepResult],
    tolerance: float = SELECTION_TOLERANCE,
) -> int:
    """
    Smallest K whose odds ratio lies within `tolerance` of the best one.

    Falls back to the smallest K when no odds ratio is defined.
    """
    if not results:
        raise InvalidConfigurationError("no sweep results to select from")
    if tolerance < 0:
        raise InvalidConfigurationError(f"tolerance must be >= 0, got {tolerance}")

    defined = [r for r in results if r.odds_ratio is not None]
    if not defined:
        return min(r.k for r in results)

    best = max(r.odds_ratio for r in defined)
    threshold = (1.0 - tolerance) * best
    return min(r.k for r in defined if r.odds_ratio >= threshold)


def results_frame(results: Sequence[SweepResult]) -> pd.DataFrame:
    """Ranked results as a DataFrame, one row per K."""
    rows = [asdict(r) for r in rank_results(results)]
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)
