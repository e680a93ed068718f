"""
Design Matrix Construction
==========================

Builds the one design that every solver is benchmarked on. The matrix is
constructed once, validated once, and then handed verbatim to each
implementation so the comparison is apples-to-apples.

Column layout
-------------
1. ``Intercept`` (all ones)
2. Numeric columns: ``DrivAge``, ``VehAge``, ``VehPower``
3. Log-transformed columns: ``log(Density)``
4. Indicator columns for ``Region``, ``VehBrand``, ``VehGas``,
   named ``Region[R21]`` etc. Levels are sorted and the first level of
   each factor is the reference (dropped).

Response is claim frequency; weights are exposure. For a Poisson GLM with
log link this is equivalent to modelling counts with a ``log(exposure)``
offset (see ``glmbench.appendix.offset_weight_equivalence``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import polars as pl

from glmbench.constants import (
    CATEGORICAL_COLUMNS,
    EXPOSURE_COLUMN,
    FREQUENCY_COLUMN,
    INTERCEPT_NAME,
    LOG_COLUMNS,
    NUMERIC_COLUMNS,
)
from glmbench.exceptions import ValidationError
from glmbench.log import logger
from glmbench.validation import validate_design_inputs

__all__ = ["Design", "build_design", "categorical_levels"]


@dataclass(frozen=True)
class Design:
    """The shared inputs of every solver.

    Attributes
    ----------
    X : np.ndarray
        Design matrix of shape (n_obs, n_features), float64, C-contiguous.
        Column 0 is the intercept.
    y : np.ndarray
        Claim frequency, shape (n_obs,).
    weights : np.ndarray
        Exposure, shape (n_obs,).
    feature_names : list of str
        One name per column of ``X``.
    """
    X: np.ndarray
    y: np.ndarray
    weights: np.ndarray
    feature_names: List[str]

    @property
    def n_obs(self) -> int:
        return self.X.shape[0]

    @property
    def n_features(self) -> int:
        return self.X.shape[1]

    @property
    def counts(self) -> np.ndarray:
        """Claim counts recovered from frequency and exposure."""
        return self.y * self.weights

    def to_dataframe(self) -> pl.DataFrame:
        """Design, response and weights as one Polars DataFrame."""
        data = {name: self.X[:, j] for j, name in enumerate(self.feature_names)}
        data[FREQUENCY_COLUMN] = self.y
        data[EXPOSURE_COLUMN] = self.weights
        return pl.DataFrame(data)


def categorical_levels(df: pl.DataFrame, column: str) -> List[str]:
    """Sorted distinct levels of ``column`` as strings."""
    return sorted(df.get_column(column).cast(pl.Utf8).unique().drop_nulls().to_list())


def build_design(
    df: pl.DataFrame,
    numeric: Sequence[str] = NUMERIC_COLUMNS,
    log_numeric: Sequence[str] = LOG_COLUMNS,
    categorical: Sequence[str] = CATEGORICAL_COLUMNS,
    response: str = FREQUENCY_COLUMN,
    weight: str = EXPOSURE_COLUMN,
) -> Design:
    """
    Build the shared design from a cleaned MTPL frame.

    Parameters
    ----------
    df : pl.DataFrame
        Output of ``glmbench.data.clean_mtpl_frequency``.
    numeric : sequence of str
        Columns entered as-is.
    log_numeric : sequence of str
        Columns entered as ``log(col)``. Must be strictly positive.
    categorical : sequence of str
        Columns expanded to indicator columns with the first sorted level
        as reference.
    response, weight : str
        Response and weight columns.

    Returns
    -------
    Design

    Raises
    ------
    ValidationError
        If a column is missing, a log column has non-positive values, or
        the assembled inputs fail validation.
    """
    required = [*numeric, *log_numeric, *categorical, response, weight]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValidationError(
            f"Cannot build design: missing column(s) {missing}. Found: {df.columns}"
        )

    exprs = [pl.lit(1.0, dtype=pl.Float64).alias(INTERCEPT_NAME)]
    exprs += [pl.col(c).cast(pl.Float64).alias(c) for c in numeric]

    for c in log_numeric:
        if (df.get_column(c).cast(pl.Float64) <= 0).any():
            raise ValidationError(
                f"{c} has non-positive values and cannot be log-transformed"
            )
        exprs.append(pl.col(c).cast(pl.Float64).log().alias(f"log({c})"))

    for c in categorical:
        levels = categorical_levels(df, c)
        if len(levels) < 2:
            raise ValidationError(
                f"Categorical column {c} has only {len(levels)} level(s); "
                "it would contribute no columns to the design"
            )
        # first level is the reference
        for level in levels[1:]:
            exprs.append(
                (pl.col(c).cast(pl.Utf8) == level).cast(pl.Float64).alias(f"{c}[{level}]")
            )

    frame = df.select(exprs)
    feature_names = frame.columns
    X = np.ascontiguousarray(frame.to_numpy(), dtype=np.float64)
    y = df.get_column(response).to_numpy()
    w = df.get_column(weight).to_numpy()

    X, y, w = validate_design_inputs(X, y, w, feature_names)

    logger.info(
        "Built design: {:,} observations x {} columns ({} categorical indicators)",
        X.shape[0], X.shape[1],
        X.shape[1] - 1 - len(numeric) - len(log_numeric),
    )
    return Design(X=X, y=y, weights=w, feature_names=list(feature_names))
