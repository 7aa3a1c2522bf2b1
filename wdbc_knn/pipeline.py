"""
pipeline.py
===========
Breast-Cancer Diagnosis — KNN Pipeline
======================================

Chains the stages of the WDBC analysis and renders the text report.

Dataset
-------
Wisconsin Diagnostic Breast Cancer — 569 samples, 30 numerical features,
diagnosis B (benign) / M (malignant).

Pipeline Stages
---------------
1. load_dataset()    → read CSV, drop id, diagnosis → categorical
2. scale_dataset()   → standardize or min-max normalize every feature
3. split_dataset()   → seeded train/test partition
4. classify()        → KNN with the baseline K
5. confusion_matrix  → 2×2 counts + odds ratio
6. sweep_k()         → K = 1..25, ranked by odds ratio, K selected
7. render_report()   → human-readable summary

Each stage returns a new value; no stage mutates the output of another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from wdbc_knn.config import RunConfig
from wdbc_knn.data import Dataset, load_dataset
from wdbc_knn.metrics import ConfusionMatrix, format_odds_ratio
from wdbc_knn.scaling import FittedScaler, fit_scaler
from wdbc_knn.split import Split, split_dataset
from wdbc_knn.sweep import (
    SweepResult,
    confusion_for_k,
    rank_results,
    results_frame,
    select_k,
    sweep_k,
)

RANGE_TOL = 1e-9  # float slack on the [0, 1] bound of min-max output


@dataclass(frozen=True)
class PipelineResult:
    config: RunConfig
    dataset: Dataset
    scaler: FittedScaler
    split: Split
    baseline: ConfusionMatrix
    sweep: list[SweepResult]
    selected_k: int
    selected: ConfusionMatrix


def _scale_and_split(dataset: Dataset, config: RunConfig) -> tuple[Split, FittedScaler]:
    if config.scale_before_split:
        # parameters computed over the whole table, then partitioned
        scaler = fit_scaler(dataset, config.scaling)
        scaled = scaler.transform(dataset)
        return split_dataset(scaled, config.train_ratio, config.seed, config.stratify), scaler

    raw_split = split_dataset(dataset, config.train_ratio, config.seed, config.stratify)
    scaler = fit_scaler(raw_split.train, config.scaling)
    scaled_split = Split(
        train=scaler.transform(raw_split.train),
        test=scaler.transform(raw_split.test),
    )
    return scaled_split, scaler


# ════════════════════════════════════════════════════════════════════════════
# Orchestrator — run_pipeline()
# ════════════════════════════════════════════════════════════════════════════

def run_pipeline(config: RunConfig | None = None, verbose: bool = True) -> PipelineResult:
    """
    End-to-end KNN analysis of the diagnostic table.

        load_dataset()
            └─► fit_scaler / transform   (whole table, or train side only)
                    └─► split_dataset    (seeded, train_ratio)
                            ├─► classify + confusion_matrix  (baseline K)
                            └─► sweep_k → select_k → confusion_matrix

    Parameters
    ----------
    config : RunConfig, optional
        Defaults to `RunConfig()`; validated before any data is read.
    verbose : bool, default=True
        Print stage banners and progress lines.

    Returns
    -------
    PipelineResult

    Raises
    ------
    PipelineError
        Any malformed input, degenerate feature or invalid setting.
    """
    config = (config or RunConfig()).validate()
    say = print if verbose else (lambda *args, **kwargs: None)

    # ── Stage 1: Load ────────────────────────────────────────────────────
    say("── Stage 1: Load ──────────────────────────────────────")
    dataset = load_dataset(
        config.data_source,
        id_column=config.id_column,
        label_column=config.label_column,
        labels=config.labels,
    )
    say(f"[load_dataset] {dataset.n_samples} samples, {dataset.n_features} features, "
        f"labels {list(dataset.classes)}\n")

    # ── Stage 2: Scale / Split ───────────────────────────────────────────
    order = "scale → split" if config.scale_before_split else "split → scale"
    say(f"── Stage 2: {config.scaling} / split ({order}) ──────────")
    split, scaler = _scale_and_split(dataset, config)
    say(f"  Train : {split.train.n_samples} samples")
    say(f"  Test  : {split.test.n_samples} samples\n")

    # ── Stage 3: Baseline KNN ────────────────────────────────────────────
    say(f"── Stage 3: KNN (k={config.k}) ──────────────────────────")
    baseline = confusion_for_k(split, config.k)
    say(f"[confusion_matrix] odds ratio = {format_odds_ratio(baseline.odds_ratio)}\n")

    # ── Stage 4: Sweep ───────────────────────────────────────────────────
    say(f"── Stage 4: Sweep k = {config.k_values[0]}..{config.k_values[-1]} ─────────────")
    results = sweep_k(split, config.k_values)
    selected_k = select_k(results, config.selection_tolerance)
    selected = confusion_for_k(split, selected_k)
    say(f"[select_k] k={selected_k} "
        f"(tolerance {config.selection_tolerance:.0%} of best odds ratio)\n")

    return PipelineResult(
        config=config,
        dataset=dataset,
        scaler=scaler,
        split=split,
        baseline=baseline,
        sweep=results,
        selected_k=selected_k,
        selected=selected,
    )


# ════════════════════════════════════════════════════════════════════════════
# Report
# ════════════════════════════════════════════════════════════════════════════

def _format_cell(value) -> str:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return "undefined"
    return f"{value:.4f}"


def render_sweep_table(results: Sequence[SweepResult]) -> str:
    """Ranked K table; undefined odds ratios read "undefined", never NaN."""
    table = results_frame(results)
    # formatters are skipped for missing cells, so format before rendering
    ranked = rank_results(results)
    table["odds_ratio"] = [format_odds_ratio(r.odds_ratio) for r in ranked]
    table["accuracy"] = [_format_cell(r.accuracy) for r in ranked]
    return table.to_string(index=False)


def render_report(result: PipelineResult) -> str:
    """Class proportions, baseline confusion matrix, ranked K table, choice."""
    lines: list[str] = []
    rule = "=" * 60

    lines += [rule, "CLASS PROPORTIONS", rule]
    proportions = result.dataset.class_proportions()
    lines.append(proportions.to_string(formatters={"proportion": "{:.1%}".format}))
    lines.append("")

    cm = result.baseline
    lines += [rule, f"CONFUSION MATRIX — KNN (k={result.config.k}, {result.config.scaling})", rule]
    lines.append(cm.as_frame().to_string())
    lines.append("")
    lines.append(f"  Odds ratio  : {format_odds_ratio(cm.odds_ratio)}")
    lines.append(f"  Accuracy    : {_format_cell(cm.accuracy)}")
    lines.append(f"  Sensitivity : {_format_cell(cm.sensitivity)}")
    lines.append(f"  Specificity : {_format_cell(cm.specificity)}")
    lines.append("")

    lines += [rule, "K SWEEP — ranked by odds ratio", rule]
    lines.append(render_sweep_table(result.sweep))
    lines.append("")

    chosen = result.selected
    lines += [rule, "SELECTED K", rule]
    lines.append(f"  k           : {result.selected_k}")
    lines.append(f"  Odds ratio  : {format_odds_ratio(chosen.odds_ratio)}")
    lines.append(f"  FN / FP     : {chosen.false_negative} / {chosen.false_positive}")
    return "\n".join(lines)


# ════════════════════════════════════════════════════════════════════════════
# Sanity Checks
# ════════════════════════════════════════════════════════════════════════════

def run_sanity_checks(result: PipelineResult) -> int:
    """
    Assert-based checks across every pipeline artefact.

    Checks
    ------
     1  Every sample has the same feature dimensionality
     2  Exactly two label categories
     3  Train + Test == Total samples       (no dropped/duplicated rows)
     4  Train and test indices are disjoint
     5  Scaled features are finite; within [0, 1] under normalize
     6  Confusion-matrix cells sum to the test size
     7  One sweep result per K tried
     8  FN + FP never exceeds the test size

    Returns
    -------
    int : number of checks passed.

    Raises
    ------
    AssertionError  On the first failing check, with label + FIX hint.
    """
    passed = 0

    def check(condition: bool, label: str, fix: str = "") -> None:
        nonlocal passed
        msg = label + (f"\n         FIX → {fix}" if fix else "")
        assert condition, msg
        passed += 1
        print(f"  [PASS]  {label}")

    print("=" * 60)
    print("SANITY CHECKS")
    print("=" * 60)

    dataset, split = result.dataset, result.split
    n_test = split.test.n_samples

    check(
        split.train.n_features == split.test.n_features == dataset.n_features,
        f"Uniform dimensionality ({dataset.n_features} features)",
        "Every row must carry the same feature columns.",
    )
    check(
        len(dataset.classes) == 2,
        f"Two label categories {list(dataset.classes)}",
        "Check the label column and the configured label pair.",
    )
    check(
        split.n_samples == dataset.n_samples,
        f"Train ({split.train.n_samples}) + Test ({n_test}) == {dataset.n_samples}",
        "split_dataset() must neither drop nor duplicate rows.",
    )
    overlap = split.train.features.index.intersection(split.test.features.index)
    check(
        len(overlap) == 0,
        f"Train and test are disjoint ({len(overlap)} shared rows)",
        "split_dataset() must partition row positions.",
    )

    scaled = pd.concat([split.train.features, split.test.features]).to_numpy()
    check(
        bool(np.isfinite(scaled).all()),
        "Scaled features are finite",
        "Degenerate columns must raise DegenerateFeatureError.",
    )
    if result.config.scaling == "normalize" and result.config.scale_before_split:
        check(
            bool(((scaled >= -RANGE_TOL) & (scaled <= 1.0 + RANGE_TOL)).all()),
            "Normalized features lie in [0, 1]",
            "fit the scaler on the same table it transforms.",
        )

    check(
        result.baseline.total == n_test,
        f"Confusion matrix total ({result.baseline.total}) == test size ({n_test})",
        "Pass the test labels, not the training labels, to confusion_matrix().",
    )
    check(
        len(result.sweep) == len(result.config.k_values),
        f"{len(result.sweep)} sweep results for {len(result.config.k_values)} K values",
    )
    check(
        all(0 <= r.false_negatives + r.false_positives <= n_test for r in result.sweep),
        "FN + FP within [0, test size] for every K",
    )

    print()
    print(f"  {passed} checks passed")
    return passed
