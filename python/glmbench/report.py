"""
Report Rendering
================

Turns the objective table and benchmark timings into:

- ``report.md``: dataset summary, deviance table, timing table, appendix
- ``timings.png``: box plot of per-run fit times
- ``objectives.csv`` / ``timings.csv``: the raw tables
"""

from __future__ import annotations

import platform
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import polars as pl
from matplotlib.figure import Figure

from glmbench.appendix import OffsetWeightComparison, coefficient_table
from glmbench.benchmark import BenchmarkResult
from glmbench.constants import (
    OBJECTIVE_CSV_FILENAME,
    REPORT_FILENAME,
    TIMING_CSV_FILENAME,
    TIMING_PLOT_FILENAME,
)
from glmbench.deviance import ObjectiveTable
from glmbench.design import Design
from glmbench.log import logger

__all__ = [
    "markdown_table",
    "dataset_summary",
    "objective_markdown",
    "timing_markdown",
    "plot_timings",
    "render_report",
]


def _format_cell(value, float_fmt: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        if np.isnan(value):
            return "nan"
        return format(value, float_fmt)
    return str(value)


def markdown_table(df: pl.DataFrame, float_fmt: str = ".6g") -> str:
    """Render a Polars DataFrame as a GitHub-flavoured markdown table."""
    header = "| " + " | ".join(df.columns) + " |"
    sep = "|" + "|".join("-" * (len(c) + 2) for c in df.columns) + "|"
    lines = [header, sep]
    for row in df.iter_rows():
        lines.append("| " + " | ".join(_format_cell(v, float_fmt) for v in row) + " |")
    return "\n".join(lines)


def dataset_summary(design: Design) -> pl.DataFrame:
    """Size, exposure, claims and average frequency of the design."""
    exposure = float(np.sum(design.weights))
    claims = float(np.sum(design.counts))
    return pl.DataFrame({
        "metric": ["observations", "features", "total exposure", "total claims", "claim frequency"],
        "value": [
            f"{design.n_obs:,}",
            f"{design.n_features}",
            f"{exposure:,.1f}",
            f"{claims:,.0f}",
            f"{claims / exposure:.4f}",
        ],
    })


def objective_markdown(objectives: ObjectiveTable) -> str:
    table = objectives.table.select(
        "solver", "library", "method", "deviance", "mean_deviance",
        "deviance_explained", "rel_diff_from_best", "agrees",
    )
    return markdown_table(table, float_fmt=".8g")


def timing_markdown(result: BenchmarkResult) -> str:
    return markdown_table(result.summary(), float_fmt=".4f")


def plot_timings(result: BenchmarkResult, ax=None):
    """Box plot of per-run fit times with individual runs overlaid.

    Parameters
    ----------
    result : BenchmarkResult
        Benchmark output.
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates a new figure.

    Returns
    -------
    matplotlib.axes.Axes
    """
    if ax is None:
        fig = Figure(figsize=(8, 5))
        ax = fig.add_subplot()

    solvers = result.solvers
    data = [result.seconds(s) for s in solvers]

    ax.boxplot(data, showmeans=True)
    ax.set_xticks(range(1, len(solvers) + 1), solvers)
    for i, seconds in enumerate(data, start=1):
        jitter = np.linspace(-0.08, 0.08, len(seconds)) if len(seconds) > 1 else [0.0]
        ax.scatter(i + np.asarray(jitter), seconds, s=12, alpha=0.6, color="tab:blue")

    ax.set_ylabel("Fit time (seconds)")
    ax.set_title(f"Poisson GLM fit time ({result.n_runs} runs per solver)")
    ax.set_ylim(bottom=0)
    ax.grid(axis="y", linestyle="--", linewidth=0.5)
    return ax


def _environment_lines() -> List[str]:
    lines = [f"- Python {platform.python_version()} on {platform.platform()}"]
    for module in ("numpy", "sklearn", "statsmodels", "glum", "rpy2"):
        try:
            mod = __import__(module)
        except ImportError:
            continue
        lines.append(f"- {module} {getattr(mod, '__version__', 'unknown')}")
    return lines


def render_report(
    design: Design,
    objectives: ObjectiveTable,
    result: BenchmarkResult,
    output_dir: Union[str, Path],
    equivalence: Optional[OffsetWeightComparison] = None,
    data_id: Optional[int] = None,
) -> Path:
    """
    Write the report files into ``output_dir``.

    Returns
    -------
    Path
        Path of ``report.md``.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    ax = plot_timings(result)
    ax.figure.tight_layout()
    ax.figure.savefig(output_dir / TIMING_PLOT_FILENAME, dpi=120)

    objectives.table.write_csv(output_dir / OBJECTIVE_CSV_FILENAME)
    result.timings.write_csv(output_dir / TIMING_CSV_FILENAME)

    status = (
        f"All solvers agree to within a relative deviance difference of {objectives.rtol:.0e}."
        if objectives.all_agree
        else f"**Solvers disagree**: largest relative deviance difference "
             f"{objectives.max_rel_diff:.2e} exceeds {objectives.rtol:.0e}."
    )

    source = f"OpenML dataset {data_id}" if data_id is not None else "in-memory data"
    parts = [
        "# Poisson GLM benchmark",
        "",
        f"Generated {datetime.now():%Y-%m-%d %H:%M} from {source}.",
        "",
        "## Data",
        "",
        markdown_table(dataset_summary(design)),
        "",
        "## Objective",
        "",
        f"Null deviance: {objectives.null_deviance:.6f}",
        "",
        objective_markdown(objectives),
        "",
        status,
        "",
        "## Timing",
        "",
        timing_markdown(result),
        "",
        f"![Fit time distribution]({TIMING_PLOT_FILENAME})",
        "",
        "## Appendix",
        "",
        "### Coefficients",
        "",
        markdown_table(coefficient_table(result.models, design.feature_names)),
        "",
    ]
    if equivalence is not None:
        parts += [
            "### Offset vs. weights",
            "",
            "Counts with a log-exposure offset and frequency with exposure weights "
            "give the same Poisson GLM. Largest absolute coefficient difference: "
            f"{equivalence.max_abs_diff:.3e}.",
            "",
        ]
    parts += ["### Environment", "", *_environment_lines(), ""]

    report_path = output_dir / REPORT_FILENAME
    report_path.write_text("\n".join(parts), encoding="utf-8")
    logger.info("Report written to {}", report_path)
    return report_path
