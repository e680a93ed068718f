"""
glmbench: Poisson GLM Solvers Benchmarked on French Motor Claims
================================================================

Fits the same claim-frequency model with several GLM implementations in
Python and R, checks that they reach the same deviance, times them, and
writes a report.

Quick Start
-----------
>>> import glmbench as gb
>>>
>>> df = gb.load_mtpl_frequency(n_rows=100_000)
>>> design = gb.build_design(df)
>>>
>>> result = gb.run_benchmark(design, solvers=["sklearn", "statsmodels"], n_runs=3)
>>> objectives = gb.compare_objectives(list(result.models.values()), design)
>>> print(objectives.table)
>>> print(result.summary())

Or from the shell::

    glmbench --sample 100000 --output report/

Solvers
-------
- **sklearn**: scikit-learn PoissonRegressor (Newton-Cholesky)
- **statsmodels**: statsmodels GLM (Newton-Raphson)
- **r_glm**: R stats::glm.fit (IRLS), through rpy2
- **r_glmnet**: R glmnet with lambda = 0 (coordinate descent), through rpy2
- **glum**: glum GeneralizedLinearRegressor (IRLS-CD), not run by default

The Model
---------
Poisson family, log link, claim frequency as response, exposure as
weights. The design has an intercept, driver age, vehicle age and power,
log density, and indicator columns for region, vehicle brand and fuel.
"""

__version__ = "0.1.0"

from glmbench.exceptions import (
    GlmBenchError,
    ValidationError,
    ConfigurationError,
    BridgeUnavailableError,
    FittingError,
    ConvergenceError,
)
from glmbench.config import BenchmarkConfig
from glmbench.data import load_mtpl_frequency, fetch_mtpl_frequency, clean_mtpl_frequency
from glmbench.design import Design, build_design
from glmbench.deviance import (
    poisson_deviance,
    mean_poisson_deviance,
    null_deviance,
    compare_objectives,
    ObjectiveTable,
)
from glmbench.solvers import FittedModel, SOLVERS, get_solver, available_solvers
from glmbench.benchmark import run_benchmark, BenchmarkResult, time_fn, measure_memory
from glmbench.appendix import offset_weight_equivalence, coefficient_table
from glmbench.report import render_report, plot_timings
from glmbench.cli import run

__all__ = [
    # Version
    "__version__",
    # Data and design
    "load_mtpl_frequency",
    "fetch_mtpl_frequency",
    "clean_mtpl_frequency",
    "Design",
    "build_design",
    # Objective
    "poisson_deviance",
    "mean_poisson_deviance",
    "null_deviance",
    "compare_objectives",
    "ObjectiveTable",
    # Solvers
    "FittedModel",
    "SOLVERS",
    "get_solver",
    "available_solvers",
    # Benchmark and report
    "run_benchmark",
    "BenchmarkResult",
    "time_fn",
    "measure_memory",
    "offset_weight_equivalence",
    "coefficient_table",
    "render_report",
    "plot_timings",
    "run",
    "BenchmarkConfig",
    # Exceptions
    "GlmBenchError",
    "ValidationError",
    "ConfigurationError",
    "BridgeUnavailableError",
    "FittingError",
    "ConvergenceError",
]
