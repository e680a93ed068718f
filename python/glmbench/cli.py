"""
Command-line entry point.

    glmbench --sample 100000 --n-runs 5 --output report/

Runs every stage in order (fetch, design, fit, compare, time, report),
prints the tables, and exits with status 1 when the solvers' deviances
disagree.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from glmbench.appendix import OffsetWeightComparison, offset_weight_equivalence
from glmbench.benchmark import BenchmarkResult, run_benchmark
from glmbench.config import BenchmarkConfig
from glmbench.constants import (
    DEFAULT_N_RUNS,
    DEFAULT_OBJECTIVE_RTOL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SAMPLE_SEED,
    DEFAULT_SOLVERS,
    DEFAULT_TOLERANCE,
    MTPL_FREQ_OPENML_ID,
)
from glmbench.data import load_mtpl_frequency
from glmbench.design import Design, build_design
from glmbench.deviance import ObjectiveTable, compare_objectives
from glmbench.exceptions import ConfigurationError
from glmbench.log import configure_logging, logger
from glmbench.report import objective_markdown, render_report, timing_markdown
from glmbench.solvers import SOLVERS, available_solvers

__all__ = ["RunOutput", "run", "build_parser", "main"]


@dataclass
class RunOutput:
    design: Design
    objectives: ObjectiveTable
    benchmark: BenchmarkResult
    equivalence: OffsetWeightComparison
    report_path: Path


def run(config: BenchmarkConfig, design: Optional[Design] = None) -> RunOutput:
    """Run the full benchmark. ``design`` skips fetching when given."""
    if design is None:
        df = load_mtpl_frequency(
            config.data_id, n_rows=config.n_rows, sample=config.sample, seed=config.seed,
        )
        design = build_design(df)

    solvers = available_solvers(config.solvers)
    if not solvers:
        raise ConfigurationError(
            f"None of the requested solvers {list(config.solvers)} can run here"
        )

    bench = run_benchmark(
        design, solvers, n_runs=config.n_runs, tol=config.tol,
        measure_mem=config.measure_memory,
    )
    objectives = compare_objectives(list(bench.models.values()), design, rtol=config.rtol)
    equivalence = offset_weight_equivalence(design, tol=config.tol)

    report_path = render_report(
        design, objectives, bench, config.output_dir,
        equivalence=equivalence, data_id=config.data_id,
    )
    return RunOutput(
        design=design,
        objectives=objectives,
        benchmark=bench,
        equivalence=equivalence,
        report_path=report_path,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glmbench",
        description="Benchmark Poisson GLM solvers in Python and R on French MTPL claims.",
    )
    parser.add_argument("--data-id", type=int, default=MTPL_FREQ_OPENML_ID,
                        help="OpenML dataset id (default: %(default)s)")
    parser.add_argument("--n-rows", type=int, default=None,
                        help="keep only the first N rows")
    parser.add_argument("--sample", type=int, default=None,
                        help="random subsample of N rows after cleaning")
    parser.add_argument("--seed", type=int, default=DEFAULT_SAMPLE_SEED)
    parser.add_argument("--solvers", nargs="+", default=list(DEFAULT_SOLVERS),
                        choices=sorted(SOLVERS), metavar="SOLVER",
                        help=f"solvers to run, from {sorted(SOLVERS)} (default: %(default)s)")
    parser.add_argument("--n-runs", type=int, default=DEFAULT_N_RUNS,
                        help="timed fits per solver (default: %(default)s)")
    parser.add_argument("--tol", type=float, default=DEFAULT_TOLERANCE,
                        help="convergence tolerance (default: %(default)s)")
    parser.add_argument("--rtol", type=float, default=DEFAULT_OBJECTIVE_RTOL,
                        help="relative deviance tolerance for agreement (default: %(default)s)")
    parser.add_argument("--output", default=DEFAULT_OUTPUT_DIR,
                        help="report directory (default: %(default)s)")
    parser.add_argument("--memory", action="store_true",
                        help="also measure peak memory per solver")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = BenchmarkConfig(
            data_id=args.data_id,
            n_rows=args.n_rows,
            sample=args.sample,
            seed=args.seed,
            solvers=tuple(args.solvers),
            n_runs=args.n_runs,
            tol=args.tol,
            rtol=args.rtol,
            output_dir=args.output,
            measure_memory=args.memory,
        )
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    out = run(config)

    print("\n### Deviance")
    print(objective_markdown(out.objectives))
    print("\n### Time (seconds)")
    print(timing_markdown(out.benchmark))
    print(f"\nReport saved to {out.report_path}")

    if not out.objectives.all_agree:
        logger.warning("Solvers disagree on the objective (max relative diff {:.2e})",
                       out.objectives.max_rel_diff)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
