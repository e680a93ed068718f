"""
Input validation for the shared design.

Every solver receives the same arrays, so they are validated once when the
design is built. Catches common data issues early with actionable error
messages instead of letting four different libraries fail four different ways.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from glmbench.constants import ZERO_VARIANCE_THRESHOLD
from glmbench.exceptions import ValidationError


__all__ = [
    "coerce_to_float64",
    "validate_response",
    "validate_weights",
    "validate_design_matrix",
    "validate_design_inputs",
]


# =============================================================================
# Array Coercion
# =============================================================================

def coerce_to_float64(
    arr: np.ndarray,
    name: str = "array",
    allow_nan: bool = False,
    allow_inf: bool = False,
) -> np.ndarray:
    """
    Coerce array to float64.

    Parameters
    ----------
    arr : np.ndarray
        Input array (may be object dtype, integer, Decimal, etc.)
    name : str
        Name for error messages.
    allow_nan : bool
        If False, raises on NaN values.
    allow_inf : bool
        If False, raises on Inf values.

    Returns
    -------
    np.ndarray
        Array coerced to float64.

    Raises
    ------
    ValidationError
        If array cannot be coerced or contains invalid values.
    """
    try:
        result = np.asarray(arr, dtype=np.float64)
    except (ValueError, TypeError) as e:
        raise ValidationError(
            f"{name} cannot be converted to numeric values. Error: {e}"
        ) from e

    nan_count = int(np.isnan(result).sum())
    if nan_count > 0 and not allow_nan:
        nan_pct = 100 * nan_count / result.size
        raise ValidationError(
            f"{name} contains {nan_count} NaN values ({nan_pct:.1f}%). "
            "Remove rows with missing values before building the design."
        )

    inf_count = int(np.isinf(result).sum())
    if inf_count > 0 and not allow_inf:
        raise ValidationError(
            f"{name} contains {inf_count} infinite values. "
            "Check log-transformed columns for zeros."
        )

    return result


# =============================================================================
# Response and Weights
# =============================================================================

def validate_response(y: np.ndarray, name: str = "response (y)") -> np.ndarray:
    """
    Validate a Poisson rate response.

    Claim frequency is a count divided by exposure, so non-integer values
    are expected. Only negativity and emptiness are errors.
    """
    y = coerce_to_float64(y, name)

    if y.ndim != 1:
        raise ValidationError(f"{name} must be 1-dimensional, got shape {y.shape}")

    if len(y) == 0:
        raise ValidationError(f"{name} is empty. Cannot fit model with no observations.")

    if np.any(y < 0):
        n_neg = int(np.sum(y < 0))
        raise ValidationError(
            f"Poisson family requires non-negative {name}. "
            f"Found {n_neg} negative values."
        )

    if np.all(y == y[0]):
        raise ValidationError(
            f"{name} is constant (all values = {y[0]}). "
            "A GLM requires variation in the response variable."
        )

    return y


def validate_weights(
    weights: np.ndarray,
    n_obs: int,
    name: str = "weights (exposure)",
) -> np.ndarray:
    """Validate exposure weights: positive, finite, one per observation."""
    weights = coerce_to_float64(weights, name)

    if weights.shape != (n_obs,):
        raise ValidationError(
            f"{name} has shape {weights.shape} but response has {n_obs} observations"
        )

    if np.any(weights <= 0):
        n_bad = int(np.sum(weights <= 0))
        raise ValidationError(
            f"{name} must be strictly positive. Found {n_bad} values <= 0. "
            "Drop rows with zero exposure before building the design."
        )

    return weights


# =============================================================================
# Design Matrix
# =============================================================================

def validate_design_matrix(
    X: np.ndarray,
    n_obs: int,
    feature_names: Optional[Sequence[str]] = None,
    intercept_index: Optional[int] = 0,
) -> np.ndarray:
    """
    Validate the design matrix.

    Parameters
    ----------
    X : np.ndarray
        Design matrix of shape (n_obs, n_features).
    n_obs : int
        Expected number of rows.
    feature_names : sequence of str, optional
        Column names, used in error messages.
    intercept_index : int, optional
        Column that is allowed (and required) to be constant.

    Raises
    ------
    ValidationError
        If shapes mismatch or a non-intercept column has no variation.
    """
    X = coerce_to_float64(X, "design matrix (X)")

    if X.ndim != 2:
        raise ValidationError(f"X must be 2-dimensional, got shape {X.shape}")

    if X.shape[0] != n_obs:
        raise ValidationError(
            f"y has {n_obs} observations but X has {X.shape[0]} rows"
        )

    if feature_names is not None and len(feature_names) != X.shape[1]:
        raise ValidationError(
            f"{len(feature_names)} feature names given for {X.shape[1]} columns"
        )

    variances = X.var(axis=0)
    constant = np.where(variances < ZERO_VARIANCE_THRESHOLD)[0]
    for j in constant:
        if intercept_index is not None and j == intercept_index:
            continue
        label = feature_names[j] if feature_names is not None else f"column {j}"
        raise ValidationError(
            f"{label} is constant. "
            "This usually means a categorical level has no rows after filtering."
        )

    if intercept_index is not None and not np.allclose(X[:, intercept_index], 1.0):
        raise ValidationError(
            f"Column {intercept_index} should be the intercept (all ones)"
        )

    return X


def validate_design_inputs(
    X: np.ndarray,
    y: np.ndarray,
    weights: np.ndarray,
    feature_names: Optional[Sequence[str]] = None,
) -> tuple:
    """Validate response, weights and design matrix together."""
    y = validate_response(y)
    weights = validate_weights(weights, len(y))
    X = validate_design_matrix(X, len(y), feature_names)
    return X, y, weights
