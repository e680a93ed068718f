"""Benchmark configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from glmbench.constants import (
    DEFAULT_N_RUNS,
    DEFAULT_OBJECTIVE_RTOL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SAMPLE_SEED,
    DEFAULT_SOLVERS,
    DEFAULT_TOLERANCE,
    MTPL_FREQ_OPENML_ID,
)
from glmbench.exceptions import ConfigurationError
from glmbench.solvers import SOLVERS

__all__ = ["BenchmarkConfig"]


@dataclass
class BenchmarkConfig:
    """Settings for one benchmark run.
    
    Attributes
    ----------
    data_id : int
        OpenML identifier of the dataset.
    n_rows : int, optional
        Keep only the first ``n_rows`` rows after fetching.
    sample : int, optional
        Randomly subsample this many rows (with ``seed``) after cleaning.
    solvers : tuple of str
        Solver names, in report order.
    n_runs : int
        Number of timed fits per solver.
    tol : float
        Convergence tolerance passed to every solver.
    rtol : float
        Relative deviance difference below which solvers agree.
    output_dir : Path
        Directory the report is written to.
    measure_memory : bool
        Also record peak RSS per solver.
    """
    data_id: int = MTPL_FREQ_OPENML_ID
    n_rows: Optional[int] = None
    sample: Optional[int] = None
    seed: int = DEFAULT_SAMPLE_SEED
    solvers: Tuple[str, ...] = DEFAULT_SOLVERS
    n_runs: int = DEFAULT_N_RUNS
    tol: float = DEFAULT_TOLERANCE
    rtol: float = DEFAULT_OBJECTIVE_RTOL
    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))
    measure_memory: bool = False
    
    def __post_init__(self):
        self.solvers = tuple(self.solvers)
        self.output_dir = Path(self.output_dir)
        
        if not self.solvers:
            raise ConfigurationError("At least one solver is required")
        unknown = [s for s in self.solvers if s not in SOLVERS]
        if unknown:
            raise ConfigurationError(
                f"Unknown solver(s) {unknown}. Available: {sorted(SOLVERS)}"
            )
        if len(set(self.solvers)) != len(self.solvers):
            raise ConfigurationError(f"Duplicate solver names in {self.solvers}")
        if self.n_runs < 1:
            raise ConfigurationError(f"n_runs must be >= 1, got {self.n_runs}")
        if self.tol <= 0:
            raise ConfigurationError(f"tol must be positive, got {self.tol}")
        if self.rtol <= 0:
            raise ConfigurationError(f"rtol must be positive, got {self.rtol}")
        for name in ("n_rows", "sample"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {value}")
