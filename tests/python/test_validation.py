"""Tests for input validation."""

import numpy as np
import pytest

from glmbench.exceptions import ValidationError
from glmbench.validation import (
    coerce_to_float64,
    validate_design_inputs,
    validate_design_matrix,
    validate_response,
    validate_weights,
)


class TestCoerce:
    
    def test_integers_become_float(self):
        out = coerce_to_float64(np.array([1, 2, 3]))
        assert out.dtype == np.float64
    
    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="NaN"):
            coerce_to_float64(np.array([1.0, np.nan]), "x")
    
    def test_nan_allowed(self):
        out = coerce_to_float64(np.array([1.0, np.nan]), allow_nan=True)
        assert np.isnan(out[1])
    
    def test_inf_rejected(self):
        with pytest.raises(ValidationError, match="infinite"):
            coerce_to_float64(np.array([1.0, np.inf]))
    
    def test_strings_rejected(self):
        with pytest.raises(ValidationError, match="numeric"):
            coerce_to_float64(np.array(["a", "b"]))


class TestResponse:
    
    def test_non_integer_frequency_allowed(self):
        y = validate_response(np.array([0.0, 1.5, 4.0]))
        np.testing.assert_array_equal(y, [0.0, 1.5, 4.0])
    
    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            validate_response(np.array([0.0, -1.0, 2.0]))
    
    def test_constant_rejected(self):
        with pytest.raises(ValidationError, match="constant"):
            validate_response(np.zeros(5))
    
    def test_empty_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            validate_response(np.array([]))


class TestWeights:
    
    def test_zero_weight_rejected(self):
        with pytest.raises(ValidationError, match="strictly positive"):
            validate_weights(np.array([1.0, 0.0]), 2)
    
    def test_shape_mismatch(self):
        with pytest.raises(ValidationError, match="shape"):
            validate_weights(np.ones(3), 4)


class TestDesignMatrix:
    
    def _X(self):
        rng = np.random.default_rng(0)
        return np.column_stack([np.ones(10), rng.normal(size=10), rng.normal(size=10)])
    
    def test_valid(self):
        X = validate_design_matrix(self._X(), 10, ["Intercept", "a", "b"])
        assert X.shape == (10, 3)
    
    def test_constant_column_named(self):
        X = self._X()
        X[:, 2] = 0.0
        with pytest.raises(ValidationError, match="b is constant"):
            validate_design_matrix(X, 10, ["Intercept", "a", "b"])
    
    def test_missing_intercept(self):
        X = self._X()
        X[:, 0] = 2.0
        with pytest.raises(ValidationError, match="intercept"):
            validate_design_matrix(X, 10)
    
    def test_row_mismatch(self):
        with pytest.raises(ValidationError, match="rows"):
            validate_design_matrix(self._X(), 11)
    
    def test_one_dimensional(self):
        with pytest.raises(ValidationError, match="2-dimensional"):
            validate_design_matrix(np.ones(10), 10)
    
    def test_name_count_mismatch(self):
        with pytest.raises(ValidationError, match="feature names"):
            validate_design_matrix(self._X(), 10, ["Intercept", "a"])


def test_validate_design_inputs_together():
    rng = np.random.default_rng(1)
    X = np.column_stack([np.ones(20), rng.normal(size=20)])
    y = rng.poisson(1.0, 20) / 0.5
    w = np.full(20, 0.5)
    X2, y2, w2 = validate_design_inputs(X, y, w)
    assert X2.dtype == y2.dtype == w2.dtype == np.float64
