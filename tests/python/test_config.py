"""Tests for BenchmarkConfig validation."""

from pathlib import Path

import pytest

from glmbench.config import BenchmarkConfig
from glmbench.constants import DEFAULT_SOLVERS, MTPL_FREQ_OPENML_ID
from glmbench.exceptions import ConfigurationError


def test_defaults():
    config = BenchmarkConfig()
    assert config.data_id == MTPL_FREQ_OPENML_ID
    assert config.solvers == DEFAULT_SOLVERS
    assert isinstance(config.output_dir, Path)


def test_list_of_solvers_becomes_tuple():
    config = BenchmarkConfig(solvers=["glum", "sklearn"])
    assert config.solvers == ("glum", "sklearn")


@pytest.mark.parametrize("kwargs, match", [
    ({"solvers": ("sklearn", "spss")}, "Unknown solver"),
    ({"solvers": ()}, "At least one solver"),
    ({"solvers": ("sklearn", "sklearn")}, "Duplicate"),
    ({"n_runs": 0}, "n_runs"),
    ({"tol": 0.0}, "tol"),
    ({"rtol": -1.0}, "rtol"),
    ({"sample": 0}, "sample"),
    ({"n_rows": -5}, "n_rows"),
])
def test_invalid(kwargs, match):
    with pytest.raises(ConfigurationError, match=match):
        BenchmarkConfig(**kwargs)
