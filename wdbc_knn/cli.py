"""Command-line entry point: run the pipeline and print the report."""

from __future__ import annotations

import argparse
import sys

import requests

from wdbc_knn import config as defaults
from wdbc_knn.config import RunConfig
from wdbc_knn.errors import PipelineError
from wdbc_knn.pipeline import render_report, run_pipeline, run_sanity_checks


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wdbc-knn",
        description="Train and evaluate a KNN classifier on the WDBC diagnostic table.",
    )
    parser.add_argument("--data", default=defaults.DATA_SOURCE,
                        help="CSV path, http(s) URL, or 'bundled' (default: bundled).")
    parser.add_argument("--scaling", choices=defaults.SCALING_POLICIES, default="normalize",
                        help="Feature transform (default: normalize).")
    parser.add_argument("--train-ratio", type=float, default=defaults.TRAIN_RATIO,
                        help=f"Share of rows used for training (default: {defaults.TRAIN_RATIO}).")
    parser.add_argument("--seed", type=int, default=defaults.RANDOM_STATE,
                        help=f"Split seed (default: {defaults.RANDOM_STATE}).")
    parser.add_argument("--k", type=int, default=defaults.DEFAULT_K,
                        help=f"Baseline number of neighbours (default: {defaults.DEFAULT_K}).")
    parser.add_argument("--k-min", type=int, default=defaults.K_RANGE[0],
                        help="Smallest K in the sweep.")
    parser.add_argument("--k-max", type=int, default=defaults.K_RANGE[-1],
                        help="Largest K in the sweep.")
    parser.add_argument("--tolerance", type=float, default=defaults.SELECTION_TOLERANCE,
                        help="Relative distance from the best odds ratio still accepted "
                             "when picking the smallest K.")
    parser.add_argument("--stratify", action="store_true",
                        help="Keep label proportions equal on both sides of the split.")
    parser.add_argument("--scale-after-split", action="store_true",
                        help="Fit the scaler on the training side only.")
    parser.add_argument("--sanity-checks", action="store_true",
                        help="Run the invariant checks after the report.")
    parser.add_argument("--quiet", action="store_true",
                        help="Print only the report.")
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        data_source=args.data,
        scaling=args.scaling,
        train_ratio=args.train_ratio,
        seed=args.seed,
        k=args.k,
        k_values=tuple(range(args.k_min, args.k_max + 1)),
        selection_tolerance=args.tolerance,
        scale_before_split=not args.scale_after_split,
        stratify=args.stratify,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        result = run_pipeline(config_from_args(args), verbose=not args.quiet)
    except (PipelineError, requests.RequestException) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(render_report(result))
    if args.sanity_checks:
        print()
        run_sanity_checks(result)
    return 0
