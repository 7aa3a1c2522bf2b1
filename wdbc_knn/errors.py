"""Exceptions raised by the pipeline stages."""

from __future__ import annotations


class PipelineError(ValueError):
    """Base class: any fatal problem with the input data or the run settings."""


class MalformedInputError(PipelineError):
    """Missing columns, wrong label cardinality, non-numeric or missing values."""


class DegenerateFeatureError(PipelineError):
    """A feature column has zero variance or zero range and cannot be scaled."""

    def __init__(self, policy: str, columns: list[str]) -> None:
        self.policy = policy
        self.columns = list(columns)
        super().__init__(
            f"cannot {policy} degenerate feature column(s) "
            f"{', '.join(self.columns)}: all values are identical"
        )


class InvalidConfigurationError(PipelineError):
    """K out of range, split ratio outside (0, 1), unknown policy."""


class DimensionMismatchError(PipelineError):
    """Query feature count differs from the feature count seen at fit time."""

    def __init__(self, expected: int, got: int) -> None:
        self.expected = expected
        self.got = got
        super().__init__(
            f"expected {expected} feature(s) per sample, got {got}"
        )
