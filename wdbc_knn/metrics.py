"""
metrics.py
==========
Evaluator stage: 2×2 confusion matrix and the odds ratio derived from it.

An odds ratio whose denominator (FN × FP) is zero is undefined. It is
represented as ``None`` and rendered as ``"undefined"``; NaN or Inf is
never produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix as sk_confusion_matrix

from wdbc_knn.errors import MalformedInputError

UNDEFINED = "undefined"


def _ratio(numerator: int, denominator: int) -> Optional[float]:
    return numerator / denominator if denominator else None


@dataclass(frozen=True)
class ConfusionMatrix:
    """Counts of a binary prediction against the truth."""

    true_negative: int
    false_negative: int
    false_positive: int
    true_positive: int
    negative_label: str = "B"
    positive_label: str = "M"

    @property
    def total(self) -> int:
        return (
            self.true_negative + self.false_negative
            + self.false_positive + self.true_positive
        )

    @property
    def odds_ratio(self) -> Optional[float]:
        """(TN × TP) / (FN × FP), or None when FN or FP is zero."""
        return odds_ratio(self)

    @property
    def odds_ratio_defined(self) -> bool:
        return self.odds_ratio is not None

    @property
    def accuracy(self) -> Optional[float]:
        return _ratio(self.true_negative + self.true_positive, self.total)

    @property
    def sensitivity(self) -> Optional[float]:
        return _ratio(self.true_positive, self.true_positive + self.false_negative)

    @property
    def specificity(self) -> Optional[float]:
        return _ratio(self.true_negative, self.true_negative + self.false_positive)

    def as_frame(self) -> pd.DataFrame:
        """Rows are the actual label, columns the predicted label."""
        neg, pos = self.negative_label, self.positive_label
        return pd.DataFrame(
            [[self.true_negative, self.false_positive],
             [self.false_negative, self.true_positive]],
            index=pd.Index([neg, pos], name="actual"),
            columns=pd.Index([neg, pos], name="predicted"),
        )


@dataclass(frozen=True)
class PredictionResult:
    """Predicted and true label for every test sample, index-aligned."""

    predicted: pd.Series
    actual: pd.Series

    def __post_init__(self) -> None:
        if len(self.predicted) != len(self.actual):
            raise MalformedInputError(
                f"{len(self.predicted)} predictions but {len(self.actual)} true labels"
            )

    def confusion_matrix(self, labels: Sequence[str]) -> ConfusionMatrix:
        return confusion_matrix(self.predicted, self.actual, labels)


def confusion_matrix(predicted, actual, labels: Sequence[str]) -> ConfusionMatrix:
    """
    Build the 2×2 matrix for `labels` = (negative, positive).

    Raises
    ------
    MalformedInputError
        Sequences of different length, a label list that is not a pair, or
        values outside the two labels.
    """
    if len(labels) != 2:
        raise MalformedInputError(f"expected a (negative, positive) pair, got {labels}")
    y_pred = np.asarray(predicted)
    y_true = np.asarray(actual)
    if y_pred.shape[0] != y_true.shape[0]:
        raise MalformedInputError(
            f"{y_pred.shape[0]} predictions but {y_true.shape[0]} true labels"
        )

    allowed = set(labels)
    stray = (set(y_pred.tolist()) | set(y_true.tolist())) - allowed
    if stray:
        raise MalformedInputError(
            f"labels {sorted(map(str, stray))} are outside {list(labels)}"
        )

    negative, positive = labels
    if y_true.shape[0] == 0:
        tn = fp = fn = tp = 0
    else:
        tn, fp, fn, tp = (
            int(v) for v in
            sk_confusion_matrix(y_true, y_pred, labels=[negative, positive]).ravel()
        )
    return ConfusionMatrix(
        true_negative=tn,
        false_negative=fn,
        false_positive=fp,
        true_positive=tp,
        negative_label=str(negative),
        positive_label=str(positive),
    )


def odds_ratio(cm: ConfusionMatrix) -> Optional[float]:
    """(TN × TP) / (FN × FP); ``None`` when the denominator is zero."""
    denominator = cm.false_negative * cm.false_positive
    if denominator == 0:
        return None
    return (cm.true_negative * cm.true_positive) / denominator


def format_odds_ratio(value: Optional[float]) -> str:
    return UNDEFINED if value is None else f"{value:.4f}"
