"""
Model-Fitting Closures
======================

One closure per library/method. Every closure fits the same model on the
same ``Design``:

- Poisson family, log link
- exposure as sample weights, claim frequency as response
- no penalty
- no extra intercept (the design already has one)

and returns a ``FittedModel``, an opaque object whose only contract is
``predict(X) -> expected frequency``.

+--------------+---------------------------------+--------------------+
| Name         | Library                         | Method             |
+==============+=================================+====================+
| sklearn      | scikit-learn PoissonRegressor   | Newton-Cholesky    |
| statsmodels  | statsmodels GLM                 | Newton-Raphson     |
| r_glm        | R stats::glm.fit                | IRLS               |
| r_glmnet     | R glmnet (lambda = 0)           | Coordinate descent |
| glum         | glum GeneralizedLinearRegressor | IRLS-CD            |
+--------------+---------------------------------+--------------------+

Only the convergence tolerance is exposed; all numerical work belongs to
the libraries.
"""

from __future__ import annotations

import importlib.util
import warnings
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from glmbench.constants import (
    DEFAULT_MAX_ITER,
    DEFAULT_SOLVERS,
    DEFAULT_TOLERANCE,
    INTERCEPT_NAME,
)
from glmbench.design import Design
from glmbench.exceptions import ConfigurationError, wrap_fitting_error
from glmbench.log import logger

__all__ = [
    "FittedModel",
    "SolverSpec",
    "SOLVERS",
    "get_solver",
    "solver_available",
    "available_solvers",
    "fit_sklearn",
    "fit_statsmodels",
    "fit_r_glm",
    "fit_r_glmnet",
    "fit_glum",
]


@dataclass
class FittedModel:
    """A fitted Poisson GLM from any library.

    Attributes
    ----------
    name : str
        Solver name (key in ``SOLVERS``).
    library : str
        Library that did the fitting.
    method : str
        Optimisation method used.
    predict_fn : callable
        Maps a design matrix to expected frequency.
    coefficients : np.ndarray, optional
        Coefficients in design-column order, when the library exposes them.
    converged : bool, optional
        Convergence flag reported by the library.
    n_iter : int, optional
        Iterations reported by the library.
    """
    name: str
    library: str
    method: str
    predict_fn: Callable[[np.ndarray], np.ndarray] = field(repr=False)
    coefficients: Optional[np.ndarray] = field(default=None, repr=False)
    converged: Optional[bool] = None
    n_iter: Optional[int] = None

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Expected claim frequency for each row of ``X``."""
        return np.asarray(self.predict_fn(X), dtype=np.float64)


def _log_warnings(name: str, caught: Sequence[warnings.WarningMessage]) -> None:
    for w in caught:
        logger.warning("{}: {}", name, w.message)


# =============================================================================
# Python solvers
# =============================================================================

def fit_sklearn(design: Design, tol: float = DEFAULT_TOLERANCE) -> FittedModel:
    """scikit-learn ``PoissonRegressor`` with the Newton-Cholesky solver."""
    from sklearn.linear_model import PoissonRegressor

    model = PoissonRegressor(
        alpha=0.0,
        fit_intercept=False,
        solver="newton-cholesky",
        tol=tol,
        max_iter=DEFAULT_MAX_ITER,
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        model.fit(design.X, design.y, sample_weight=design.weights)
    _log_warnings("sklearn", caught)

    n_iter = int(model.n_iter_)
    return FittedModel(
        name="sklearn",
        library="scikit-learn",
        method="Newton-Cholesky",
        predict_fn=model.predict,
        coefficients=np.asarray(model.coef_, dtype=np.float64),
        converged=n_iter < DEFAULT_MAX_ITER,
        n_iter=n_iter,
    )


def fit_statsmodels(design: Design, tol: float = DEFAULT_TOLERANCE) -> FittedModel:
    """statsmodels ``GLM`` optimised with Newton-Raphson.

    ``GLM.fit(method="newton")`` runs a few IRLS iterations first and only
    hands ``tol`` to those, so the likelihood optimiser is called directly:
    pure Newton steps, stopped by ``tol`` on the parameter change. The start
    is the weighted-mean model (intercept only).
    """
    import statsmodels.api as sm
    from statsmodels.base.model import LikelihoodModel

    model = sm.GLM(
        design.y,
        design.X,
        family=sm.families.Poisson(),
        var_weights=design.weights,
    )
    start = np.zeros(design.n_features)
    if INTERCEPT_NAME in design.feature_names:
        start[design.feature_names.index(INTERCEPT_NAME)] = np.log(
            np.average(design.y, weights=design.weights)
        )

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result = LikelihoodModel.fit(
                model,
                start_params=start,
                method="newton",
                maxiter=DEFAULT_MAX_ITER,
                tol=tol,
                disp=False,
            )
        except np.linalg.LinAlgError as e:
            raise wrap_fitting_error(e, "statsmodels GLM (newton)") from e
    _log_warnings("statsmodels", caught)

    params = np.asarray(result.params, dtype=np.float64)
    retvals = result.mle_retvals
    return FittedModel(
        name="statsmodels",
        library="statsmodels",
        method="Newton-Raphson",
        predict_fn=lambda X: model.predict(params, exog=X),
        coefficients=params,
        converged=bool(retvals["converged"]),
        n_iter=int(retvals["iterations"]),
    )


def fit_glum(design: Design, tol: float = DEFAULT_TOLERANCE) -> FittedModel:
    """glum ``GeneralizedLinearRegressor`` with its IRLS coordinate-descent solver."""
    from glum import GeneralizedLinearRegressor

    model = GeneralizedLinearRegressor(
        family="poisson",
        alpha=0.0,
        fit_intercept=False,
        solver="irls-cd",
        gradient_tol=tol,
        max_iter=DEFAULT_MAX_ITER,
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        model.fit(design.X, design.y, sample_weight=design.weights)
    _log_warnings("glum", caught)

    n_iter = int(model.n_iter_)
    return FittedModel(
        name="glum",
        library="glum",
        method="IRLS-CD",
        predict_fn=model.predict,
        coefficients=np.asarray(model.coef_, dtype=np.float64),
        converged=n_iter < DEFAULT_MAX_ITER,
        n_iter=n_iter,
    )


# =============================================================================
# R solvers (through the shared bridge)
# =============================================================================

def _r_model(design: Design, tol: float, name: str, library: str, method: str) -> FittedModel:
    from glmbench.bridge import get_bridge

    bridge = get_bridge()
    bridge.share(design)
    fit = bridge.fit_glm(tol) if name == "r_glm" else bridge.fit_glmnet(tol)
    return FittedModel(
        name=name,
        library=library,
        method=method,
        predict_fn=lambda X: bridge.predict(fit.coefficients, X),
        coefficients=fit.coefficients,
        converged=fit.converged,
        n_iter=fit.n_iter,
    )


def fit_r_glm(design: Design, tol: float = DEFAULT_TOLERANCE) -> FittedModel:
    """R ``stats::glm.fit`` (IRLS)."""
    return _r_model(design, tol, "r_glm", "R stats", "IRLS")


def fit_r_glmnet(design: Design, tol: float = DEFAULT_TOLERANCE) -> FittedModel:
    """R ``glmnet`` with lambda = 0 (coordinate descent)."""
    return _r_model(design, tol, "r_glmnet", "R glmnet", "Coordinate descent")


# =============================================================================
# Registry
# =============================================================================

@dataclass(frozen=True)
class SolverSpec:
    """Registry entry for one solver."""
    name: str
    library: str
    method: str
    fit: Callable[[Design, float], FittedModel]
    requires_r: bool = False
    module: Optional[str] = None  # Python module that must be importable


SOLVERS: Dict[str, SolverSpec] = {
    spec.name: spec
    for spec in (
        SolverSpec("sklearn", "scikit-learn", "Newton-Cholesky", fit_sklearn, module="sklearn"),
        SolverSpec("statsmodels", "statsmodels", "Newton-Raphson", fit_statsmodels, module="statsmodels"),
        SolverSpec("r_glm", "R stats", "IRLS", fit_r_glm, requires_r=True),
        SolverSpec("r_glmnet", "R glmnet", "Coordinate descent", fit_r_glmnet, requires_r=True),
        SolverSpec("glum", "glum", "IRLS-CD", fit_glum, module="glum"),
    )
}


def get_solver(name: str) -> SolverSpec:
    """Look up a solver by name."""
    try:
        return SOLVERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown solver '{name}'. Available: {sorted(SOLVERS)}"
        ) from None


def solver_available(name: str) -> bool:
    """True when the solver's library (or the R bridge) can be used."""
    spec = get_solver(name)
    if spec.requires_r:
        from glmbench.bridge import r_available

        return r_available()
    return importlib.util.find_spec(spec.module) is not None


def available_solvers(names: Sequence[str] = DEFAULT_SOLVERS) -> List[str]:
    """Filter ``names`` down to the solvers that can run here, logging the rest."""
    usable = []
    for name in names:
        if solver_available(name):
            usable.append(name)
        else:
            logger.warning("Skipping solver '{}': {} is not available", name, get_solver(name).library)
    return usable
