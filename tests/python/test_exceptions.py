"""Tests for the exception hierarchy and error wrapping."""

import numpy as np

from glmbench.exceptions import (
    BridgeUnavailableError,
    ConfigurationError,
    ConvergenceError,
    FittingError,
    GlmBenchError,
    ValidationError,
    wrap_fitting_error,
)


def test_hierarchy():
    for cls in (ValidationError, ConfigurationError, BridgeUnavailableError, FittingError):
        assert issubclass(cls, GlmBenchError)
    assert issubclass(ConvergenceError, FittingError)


def test_wrap_singular():
    err = wrap_fitting_error(np.linalg.LinAlgError("Singular matrix"), "statsmodels")
    assert type(err) is FittingError
    assert "singular" in str(err)
    assert "statsmodels" in str(err)


def test_wrap_convergence():
    err = wrap_fitting_error(RuntimeError("did not converge"))
    assert isinstance(err, ConvergenceError)


def test_wrap_generic():
    err = wrap_fitting_error(ValueError("boom"), "sklearn")
    assert type(err) is FittingError
    assert "Original error: boom" in str(err)
