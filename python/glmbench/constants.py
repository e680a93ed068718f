"""
Central configuration and constants for glmbench.

This module provides a single source of truth for all default values
and magic numbers used throughout the benchmark.
"""

__all__ = [
    # Dataset
    "MTPL_FREQ_OPENML_ID",
    "COUNT_COLUMN",
    "EXPOSURE_COLUMN",
    "FREQUENCY_COLUMN",
    "NUMERIC_COLUMNS",
    "LOG_COLUMNS",
    "CATEGORICAL_COLUMNS",
    "INTERCEPT_NAME",
    "DEFAULT_CLAIM_CAP",
    "DEFAULT_EXPOSURE_CAP",
    "DEFAULT_SAMPLE_SEED",
    # Solvers
    "DEFAULT_TOLERANCE",
    "DEFAULT_MAX_ITER",
    "DEFAULT_SOLVERS",
    "OPTIONAL_SOLVERS",
    # Benchmark
    "DEFAULT_N_RUNS",
    "DEFAULT_OBJECTIVE_RTOL",
    "MEMORY_SAMPLE_INTERVAL",
    # Report
    "DEFAULT_OUTPUT_DIR",
    "REPORT_FILENAME",
    "TIMING_PLOT_FILENAME",
    "OBJECTIVE_CSV_FILENAME",
    "TIMING_CSV_FILENAME",
    # Numerical Stability
    "EPSILON",
    "ZERO_VARIANCE_THRESHOLD",
]

# =============================================================================
# Dataset (French MTPL frequency, freMTPL2freq on OpenML)
# =============================================================================
MTPL_FREQ_OPENML_ID = 41214

COUNT_COLUMN = "ClaimNb"
EXPOSURE_COLUMN = "Exposure"
FREQUENCY_COLUMN = "Frequency"

NUMERIC_COLUMNS = ("DrivAge", "VehAge", "VehPower")
LOG_COLUMNS = ("Density",)
CATEGORICAL_COLUMNS = ("Region", "VehBrand", "VehGas")
INTERCEPT_NAME = "Intercept"

# Same cleaning as the scikit-learn MTPL example
DEFAULT_CLAIM_CAP = 4
DEFAULT_EXPOSURE_CAP = 1.0
DEFAULT_SAMPLE_SEED = 42

# =============================================================================
# Solver Defaults
# =============================================================================
DEFAULT_TOLERANCE = 1e-8
DEFAULT_MAX_ITER = 100

# Order matters: it is the order of every table in the report
DEFAULT_SOLVERS = ("sklearn", "statsmodels", "r_glm", "r_glmnet")
OPTIONAL_SOLVERS = ("glum",)

# =============================================================================
# Benchmark Defaults
# =============================================================================
DEFAULT_N_RUNS = 5
DEFAULT_OBJECTIVE_RTOL = 1e-4
MEMORY_SAMPLE_INTERVAL = 0.01  # seconds between RSS samples

# =============================================================================
# Report
# =============================================================================
DEFAULT_OUTPUT_DIR = "glmbench-report"
REPORT_FILENAME = "report.md"
TIMING_PLOT_FILENAME = "timings.png"
OBJECTIVE_CSV_FILENAME = "objectives.csv"
TIMING_CSV_FILENAME = "timings.csv"

# =============================================================================
# Numerical Stability
# =============================================================================
EPSILON = 1e-10
ZERO_VARIANCE_THRESHOLD = 1e-10
