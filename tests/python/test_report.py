"""Tests for report rendering."""

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import polars as pl
import pytest

from glmbench.appendix import offset_weight_equivalence
from glmbench.benchmark import run_benchmark
from glmbench.deviance import compare_objectives
from glmbench.report import dataset_summary, markdown_table, plot_timings, render_report


@pytest.fixture(scope="module")
def bench(design):
    return run_benchmark(design, ["sklearn", "statsmodels"], n_runs=2)


@pytest.fixture(scope="module")
def objectives(bench, design):
    return compare_objectives(list(bench.models.values()), design)


def test_markdown_table():
    df = pl.DataFrame({"solver": ["a", "b"], "seconds": [0.123456, 2.0], "ok": [True, False]})
    text = markdown_table(df, float_fmt=".3f")
    lines = text.splitlines()
    assert lines[0] == "| solver | seconds | ok |"
    assert lines[2] == "| a | 0.123 | yes |"
    assert lines[3] == "| b | 2.000 | no |"


def test_dataset_summary(design):
    summary = dataset_summary(design)
    assert summary["metric"].to_list()[0] == "observations"
    assert summary["value"][0] == f"{design.n_obs:,}"


def test_plot_timings_on_given_axes(bench):
    fig, ax = plt.subplots()
    out = plot_timings(bench, ax=ax)
    assert out is ax
    assert [t.get_text() for t in ax.get_xticklabels()] == ["sklearn", "statsmodels"]
    plt.close(fig)


def test_render_report(tmp_path, design, bench, objectives):
    equivalence = offset_weight_equivalence(design)
    path = render_report(design, objectives, bench, tmp_path / "out",
                         equivalence=equivalence, data_id=41214)
    
    assert path.name == "report.md"
    out = tmp_path / "out"
    assert (out / "timings.png").stat().st_size > 0
    assert pl.read_csv(out / "objectives.csv")["solver"].to_list() == ["sklearn", "statsmodels"]
    assert pl.read_csv(out / "timings.csv").height == 4
    
    text = path.read_text()
    assert "OpenML dataset 41214" in text
    assert "## Objective" in text
    assert "All solvers agree" in text
    assert "Offset vs. weights" in text
    assert "| sklearn |" in text
