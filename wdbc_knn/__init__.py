"""K-Nearest-Neighbors analysis of the Wisconsin Diagnostic Breast Cancer table."""

from wdbc_knn.classifier import KNNClassifier, classify
from wdbc_knn.config import RunConfig
from wdbc_knn.data import Dataset, load_dataset
from wdbc_knn.errors import (
    DegenerateFeatureError,
    DimensionMismatchError,
    InvalidConfigurationError,
    MalformedInputError,
    PipelineError,
)
from wdbc_knn.metrics import ConfusionMatrix, PredictionResult, confusion_matrix, odds_ratio
from wdbc_knn.pipeline import PipelineResult, render_report, run_pipeline, run_sanity_checks
from wdbc_knn.scaling import FittedScaler, fit_scaler, scale_dataset
from wdbc_knn.split import Split, split_dataset
from wdbc_knn.sweep import SweepResult, rank_results, select_k, sweep_k

__version__ = "0.1.0"
