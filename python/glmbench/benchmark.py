"""
Timing Harness
==============

Re-runs each fitting closure ``n_runs`` times, sequentially, on the same
design. Nothing runs in parallel: each fit finishes before the next starts.

For R solvers the design is shared with R before the clock starts, so
timings measure fitting only.
"""

from __future__ import annotations

import gc
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence

import numpy as np
import polars as pl
import psutil

from glmbench.constants import (
    DEFAULT_N_RUNS,
    DEFAULT_SOLVERS,
    DEFAULT_TOLERANCE,
    MEMORY_SAMPLE_INTERVAL,
)
from glmbench.design import Design
from glmbench.exceptions import ConfigurationError
from glmbench.log import logger
from glmbench.solvers import FittedModel, get_solver

__all__ = ["time_fn", "measure_memory", "BenchmarkResult", "run_benchmark"]


def time_fn(func: Callable[[], object], n_runs: int = DEFAULT_N_RUNS) -> List[float]:
    """Wall-clock seconds of ``n_runs`` sequential calls to ``func``."""
    if n_runs < 1:
        raise ConfigurationError(f"n_runs must be >= 1, got {n_runs}")
    times = []
    for _ in range(n_runs):
        start = time.perf_counter()
        func()
        times.append(time.perf_counter() - start)
    return times


def measure_memory(func: Callable[[], object]) -> float:
    """Measure peak memory usage during function execution in MB.

    Tracks total process RSS, so allocations made by R through the bridge
    are included. Baseline is taken right before ``func`` runs.
    """
    process = psutil.Process()
    gc.collect()

    baseline = process.memory_info().rss
    peak_mem = baseline
    stop_flag = threading.Event()

    def monitor():
        nonlocal peak_mem
        while not stop_flag.is_set():
            current = process.memory_info().rss
            peak_mem = max(peak_mem, current)
            time.sleep(MEMORY_SAMPLE_INTERVAL)

    monitor_thread = threading.Thread(target=monitor, daemon=True)
    monitor_thread.start()
    try:
        func()
    finally:
        stop_flag.set()
        monitor_thread.join()

    return (peak_mem - baseline) / (1024 * 1024)


@dataclass
class BenchmarkResult:
    """Timings and fitted models from one benchmark run.

    Attributes
    ----------
    timings : pl.DataFrame
        Long format: ``solver``, ``run``, ``seconds``.
    models : dict
        Solver name -> model from the first (untimed) fit.
    memory_mb : dict
        Solver name -> peak RSS increase in MB (empty unless requested).
    n_runs : int
        Timed fits per solver.
    """
    timings: pl.DataFrame
    models: Dict[str, FittedModel]
    memory_mb: Dict[str, float] = field(default_factory=dict)
    n_runs: int = DEFAULT_N_RUNS

    @property
    def solvers(self) -> List[str]:
        return list(self.models)

    def seconds(self, solver: str) -> np.ndarray:
        return (
            self.timings.filter(pl.col("solver") == solver)
            .sort("run")
            .get_column("seconds")
            .to_numpy()
        )

    def summary(self) -> pl.DataFrame:
        """Per-solver min/median/mean/std/max seconds, in solver order."""
        order = pl.DataFrame({"solver": self.solvers, "_order": list(range(len(self.solvers)))})
        stats = (
            self.timings.group_by("solver")
            .agg(
                pl.col("seconds").min().alias("min"),
                pl.col("seconds").median().alias("median"),
                pl.col("seconds").mean().alias("mean"),
                pl.col("seconds").std().fill_null(0.0).alias("std"),
                pl.col("seconds").max().alias("max"),
            )
            .join(order, on="solver")
            .sort("_order")
            .drop("_order")
        )
        fastest = stats.get_column("median").min()
        stats = stats.with_columns((pl.col("median") / fastest).alias("relative"))
        if self.memory_mb:
            mem = pl.DataFrame({
                "solver": list(self.memory_mb),
                "peak_mb": list(self.memory_mb.values()),
            })
            stats = stats.join(mem, on="solver", how="left")
        return stats


def run_benchmark(
    design: Design,
    solvers: Sequence[str] = DEFAULT_SOLVERS,
    n_runs: int = DEFAULT_N_RUNS,
    tol: float = DEFAULT_TOLERANCE,
    measure_mem: bool = False,
) -> BenchmarkResult:
    """
    Fit every solver once, then time ``n_runs`` further fits of each.

    The first fit is kept as the solver's model and doubles as warm-up
    (imports, R package loading, sharing the design with R).

    Parameters
    ----------
    design : Design
        Shared design.
    solvers : sequence of str
        Solver names, in report order.
    n_runs : int
        Timed fits per solver.
    tol : float
        Convergence tolerance for every solver.
    measure_mem : bool
        Also measure peak RSS of one extra fit per solver.
    """
    if n_runs < 1:
        raise ConfigurationError(f"n_runs must be >= 1, got {n_runs}")
    if not solvers:
        raise ConfigurationError("run_benchmark needs at least one solver")

    models: Dict[str, FittedModel] = {}
    rows: List[dict] = []
    memory: Dict[str, float] = {}

    for name in solvers:
        spec = get_solver(name)
        fit = lambda: spec.fit(design, tol)

        logger.info("Fitting {} ({}, {})", name, spec.library, spec.method)
        models[name] = fit()

        times = time_fn(fit, n_runs=n_runs)
        for run, seconds in enumerate(times):
            logger.debug("{} run {}: {:.4f}s", name, run, seconds)
            rows.append({"solver": name, "run": run, "seconds": seconds})
        logger.info("{}: median {:.3f}s over {} runs", name, float(np.median(times)), n_runs)

        if measure_mem:
            memory[name] = measure_memory(fit)
            logger.info("{}: peak memory {:.1f}MB", name, memory[name])

        gc.collect()

    timings = pl.DataFrame(
        rows,
        schema={"solver": pl.Utf8, "run": pl.Int64, "seconds": pl.Float64},
    )
    return BenchmarkResult(timings=timings, models=models, memory_mb=memory, n_runs=n_runs)
