"""
Appendix snippets for the report.

- ``offset_weight_equivalence``: a Poisson GLM on counts with a
  ``log(exposure)`` offset has the same coefficients as a Poisson GLM on
  frequency with exposure weights. This is why every solver can be given
  frequency + weights.
- ``coefficient_table``: coefficients of every model side by side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np
import polars as pl
import statsmodels.api as sm

from glmbench.constants import DEFAULT_MAX_ITER, DEFAULT_TOLERANCE
from glmbench.design import Design
from glmbench.solvers import FittedModel

__all__ = ["OffsetWeightComparison", "offset_weight_equivalence", "coefficient_table"]


@dataclass
class OffsetWeightComparison:
    """Coefficients of the offset and weighted formulations."""
    feature_names: Sequence[str]
    offset_params: np.ndarray
    weight_params: np.ndarray

    @property
    def max_abs_diff(self) -> float:
        return float(np.max(np.abs(self.offset_params - self.weight_params)))

    def to_dataframe(self) -> pl.DataFrame:
        return pl.DataFrame({
            "feature": list(self.feature_names),
            "offset": self.offset_params,
            "weights": self.weight_params,
            "abs_diff": np.abs(self.offset_params - self.weight_params),
        })


def offset_weight_equivalence(
    design: Design,
    tol: float = DEFAULT_TOLERANCE,
) -> OffsetWeightComparison:
    """Fit counts + log-exposure offset and frequency + exposure weights with statsmodels (IRLS)."""
    poisson = sm.families.Poisson()

    offset_fit = sm.GLM(
        design.counts, design.X, family=poisson, offset=np.log(design.weights),
    ).fit(tol=tol, maxiter=DEFAULT_MAX_ITER)

    weight_fit = sm.GLM(
        design.y, design.X, family=poisson, var_weights=design.weights,
    ).fit(tol=tol, maxiter=DEFAULT_MAX_ITER)

    return OffsetWeightComparison(
        feature_names=design.feature_names,
        offset_params=np.asarray(offset_fit.params, dtype=np.float64),
        weight_params=np.asarray(weight_fit.params, dtype=np.float64),
    )


def coefficient_table(
    models: Mapping[str, FittedModel],
    feature_names: Sequence[str],
) -> pl.DataFrame:
    """One column per model that exposes coefficients, one row per feature."""
    data = {"feature": list(feature_names)}
    for name, model in models.items():
        if model.coefficients is None or len(model.coefficients) != len(feature_names):
            continue
        data[name] = model.coefficients
    return pl.DataFrame(data)
