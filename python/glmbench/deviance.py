"""
Poisson Deviance and Objective Comparison
=========================================

The solvers are only comparable through what they optimise. For an
unpenalised Poisson GLM that is the (weighted) deviance:

    D = 2 × Σ wᵢ × [yᵢ log(yᵢ/μᵢ) − (yᵢ − μᵢ)]

with the convention 0 × log(0) = 0. All solvers minimise the same D, so
converged fits should land on nearly identical values; differences are a
measure of how far each solver stopped from the optimum.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import numpy as np
import polars as pl
from scipy.special import xlogy

from glmbench.constants import DEFAULT_OBJECTIVE_RTOL, EPSILON
from glmbench.log import logger

if TYPE_CHECKING:
    from glmbench.design import Design
    from glmbench.solvers import FittedModel

__all__ = [
    "unit_poisson_deviance",
    "poisson_deviance",
    "mean_poisson_deviance",
    "null_deviance",
    "ObjectiveTable",
    "compare_objectives",
]


def unit_poisson_deviance(y: np.ndarray, mu: np.ndarray) -> np.ndarray:
    """Per-observation deviance 2 × [y log(y/μ) − y + μ]."""
    y = np.asarray(y, dtype=np.float64)
    mu = np.asarray(mu, dtype=np.float64)
    if np.any(mu <= 0):
        raise ValueError("Predicted means must be strictly positive for Poisson deviance")
    # xlogy handles y == 0
    return 2.0 * (xlogy(y, y) - xlogy(y, mu) - y + mu)


def poisson_deviance(
    y: np.ndarray,
    mu: np.ndarray,
    weights: Optional[np.ndarray] = None,
) -> float:
    """Weighted total Poisson deviance."""
    dev = unit_poisson_deviance(y, mu)
    if weights is None:
        return float(np.sum(dev))
    return float(np.sum(np.asarray(weights, dtype=np.float64) * dev))


def mean_poisson_deviance(
    y: np.ndarray,
    mu: np.ndarray,
    weights: Optional[np.ndarray] = None,
) -> float:
    """Weighted mean Poisson deviance (same as ``sklearn.metrics.mean_poisson_deviance``)."""
    dev = unit_poisson_deviance(y, mu)
    return float(np.average(dev, weights=weights))


def null_deviance(y: np.ndarray, weights: Optional[np.ndarray] = None) -> float:
    """Deviance of the intercept-only model (μ = weighted mean of y)."""
    y = np.asarray(y, dtype=np.float64)
    mu = np.full_like(y, np.average(y, weights=weights))
    return poisson_deviance(y, mu, weights)


@dataclass
class ObjectiveTable:
    """Deviance of every fitted model on the shared design.

    Attributes
    ----------
    table : pl.DataFrame
        One row per solver with columns ``solver``, ``library``, ``method``,
        ``deviance``, ``mean_deviance``, ``deviance_explained``,
        ``diff_from_best``, ``rel_diff_from_best``, ``agrees``.
    null_deviance : float
        Deviance of the intercept-only model.
    rtol : float
        Relative tolerance used for ``agrees``.
    """
    table: pl.DataFrame
    null_deviance: float
    rtol: float

    @property
    def all_agree(self) -> bool:
        return bool(self.table.get_column("agrees").all())

    @property
    def best_solver(self) -> str:
        return self.table.sort("deviance").get_column("solver")[0]

    @property
    def max_rel_diff(self) -> float:
        return float(self.table.get_column("rel_diff_from_best").max())

    def deviances(self) -> Dict[str, float]:
        return dict(zip(
            self.table.get_column("solver").to_list(),
            self.table.get_column("deviance").to_list(),
        ))


def compare_objectives(
    models: Sequence["FittedModel"],
    design: "Design",
    rtol: float = DEFAULT_OBJECTIVE_RTOL,
) -> ObjectiveTable:
    """
    Evaluate every model's deviance on the shared design.

    Parameters
    ----------
    models : sequence of FittedModel
        Fitted models, in report order.
    design : Design
        The design they were fitted on.
    rtol : float
        A model agrees when ``(D - D_best) / D_best <= rtol``.

    Returns
    -------
    ObjectiveTable
    """
    if not models:
        raise ValueError("compare_objectives needs at least one fitted model")

    d_null = null_deviance(design.y, design.weights)
    total_weight = float(np.sum(design.weights))

    rows: List[dict] = []
    for model in models:
        mu = model.predict(design.X)
        dev = poisson_deviance(design.y, mu, design.weights)
        rows.append({
            "solver": model.name,
            "library": model.library,
            "method": model.method,
            "deviance": dev,
            "mean_deviance": dev / total_weight,
            "deviance_explained": 1.0 - dev / d_null if d_null > EPSILON else float("nan"),
        })

    best = min(r["deviance"] for r in rows)
    for r in rows:
        r["diff_from_best"] = r["deviance"] - best
        r["rel_diff_from_best"] = r["diff_from_best"] / max(abs(best), EPSILON)
        r["agrees"] = r["rel_diff_from_best"] <= rtol

    result = ObjectiveTable(table=pl.DataFrame(rows), null_deviance=d_null, rtol=rtol)

    for r in rows:
        if not r["agrees"]:
            logger.warning(
                "{} deviance {:.6f} is {:.2e} (relative) above the best; tolerance {:.0e}",
                r["solver"], r["deviance"], r["rel_diff_from_best"], rtol,
            )
    return result
