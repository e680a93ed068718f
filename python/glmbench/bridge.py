"""
R Bridge
========

A single in-process R session (via rpy2) that the R solvers share.

The design is pushed into R once with ``RBridge.share``; every subsequent
fit reads the same R objects, so the R solvers work on byte-identical
copies of the arrays the Python solvers see and timing does not include
the Python → R conversion.

Example
-------
>>> from glmbench.bridge import get_bridge
>>> bridge = get_bridge()
>>> bridge.share(design)
>>> fit = bridge.fit_glm(tol=1e-8)
>>> fit.coefficients
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from glmbench.constants import DEFAULT_MAX_ITER
from glmbench.exceptions import BridgeUnavailableError
from glmbench.log import logger

if TYPE_CHECKING:
    from glmbench.design import Design

__all__ = ["RFit", "RBridge", "get_bridge", "r_available"]


# Everything lives in one R environment so the global env stays clean.
# X keeps its intercept column for glm.fit; glmnet adds its own intercept.
# Warnings are collected per fit; dpois "non-integer x" comes from the
# frequency response and is dropped.
_R_SOURCE = """
glmbench_env <- new.env()

glmbench_share <- function(X, y, w) {
  assign("X", X, envir = glmbench_env)
  assign("y", y, envir = glmbench_env)
  assign("w", w, envir = glmbench_env)
  invisible(NULL)
}

glmbench_capture <- function(expr) {
  msgs <- character(0)
  value <- withCallingHandlers(expr, warning = function(w) {
    msg <- conditionMessage(w)
    if (!grepl("non-integer", msg, fixed = TRUE)) {
      msgs <<- c(msgs, msg)
    }
    invokeRestart("muffleWarning")
  })
  assign("warnings", msgs, envir = glmbench_env)
  value
}

glmbench_warnings <- function() {
  get("warnings", envir = glmbench_env)
}

glmbench_fit_glm <- function(tol, maxit) {
  e <- glmbench_env
  fit <- glmbench_capture(stats::glm.fit(
    x = e$X, y = e$y, weights = e$w,
    family = stats::poisson(),
    control = stats::glm.control(epsilon = tol, maxit = maxit)
  ))
  c(as.numeric(fit$converged), fit$iter, as.numeric(fit$coefficients))
}

glmbench_fit_glmnet <- function(tol, maxit) {
  e <- glmbench_env
  fit <- glmbench_capture(glmnet::glmnet(
    x = e$X[, -1, drop = FALSE], y = e$y, weights = e$w,
    family = "poisson", lambda = 0, alpha = 1,
    standardize = FALSE, intercept = TRUE,
    thresh = tol, maxit = maxit
  ))
  c(as.numeric(fit$jerr == 0), fit$npasses, as.numeric(as.matrix(stats::coef(fit))))
}

glmbench_predict <- function(coef, newx) {
  as.numeric(exp(newx %*% coef))
}
"""

_GLMNET_MAXIT = 100_000


@dataclass
class RFit:
    """Result of a fit run in R.

    Attributes
    ----------
    name : str
        Solver name (``r_glm`` or ``r_glmnet``).
    coefficients : np.ndarray
        Coefficients in design-column order (intercept first).
    converged : bool
        Whether R reported convergence.
    n_iter : int
        IRLS iterations (glm) or coordinate-descent passes (glmnet).
    warnings : list of str
        Warnings R raised during the fit.
    """
    name: str
    coefficients: np.ndarray
    converged: bool
    n_iter: int
    warnings: List[str] = field(default_factory=list)


class RBridge:
    """
    In-process R session holding the shared design.

    Raises
    ------
    BridgeUnavailableError
        If rpy2 cannot be imported, R cannot be started, or a required
        R package is missing.
    """

    REQUIRED_PACKAGES = ("stats", "glmnet")

    def __init__(self):
        try:
            import rpy2.robjects as ro
            from rpy2.robjects import numpy2ri
            from rpy2.robjects.packages import importr
        except (ImportError, RuntimeError, OSError, ValueError) as e:
            raise BridgeUnavailableError(
                f"rpy2 / R is not available: {e}. "
                "Install R and `pip install glmbench[r]`."
            ) from e

        self._ro = ro
        self._converter = ro.default_converter + numpy2ri.converter

        for pkg in self.REQUIRED_PACKAGES:
            try:
                importr(pkg)
            except RuntimeError as e:
                raise BridgeUnavailableError(
                    f"R package '{pkg}' could not be loaded: {e}. "
                    f"Run install.packages(\"{pkg}\") in R."
                ) from e

        ro.r(_R_SOURCE)
        self._shared: Optional["Design"] = None
        self.r_version = str(ro.r("R.version.string")[0])
        self.glmnet_version = str(ro.r('as.character(packageVersion("glmnet"))')[0])
        logger.info("R bridge ready: {} (glmnet {})", self.r_version, self.glmnet_version)

    def _call(self, func: str, *args):
        from rpy2.robjects.conversion import localconverter

        with localconverter(self._converter):
            return self._ro.globalenv[func](*args)

    def share(self, design: "Design") -> None:
        """Copy the design into R. Re-sharing the same design is a no-op."""
        if self._shared is design:
            return
        logger.debug("Sharing {:,} x {} design with R", design.n_obs, design.n_features)
        self._call(
            "glmbench_share",
            np.asfortranarray(design.X),
            design.y,
            design.weights,
        )
        self._shared = design

    @property
    def shared_design(self) -> Optional["Design"]:
        return self._shared

    def _require_shared(self) -> None:
        if self._shared is None:
            raise RuntimeError("No design shared with R; call RBridge.share(design) first")

    def _fit(self, name: str, func: str, tol: float, maxit: int) -> RFit:
        self._require_shared()
        # R returns c(converged, iterations, coefficients...)
        res = np.asarray(self._call(func, float(tol), int(maxit)), dtype=np.float64)
        fit = RFit(
            name=name,
            coefficients=res[2:].copy(),
            converged=bool(res[0]),
            n_iter=int(res[1]),
            warnings=[str(msg) for msg in self._call("glmbench_warnings")],
        )
        for msg in fit.warnings:
            logger.warning("{}: {}", name, msg)
        if not fit.converged:
            logger.warning("{} did not converge after {} iterations", name, fit.n_iter)
        return fit

    def fit_glm(self, tol: float, maxit: int = DEFAULT_MAX_ITER) -> RFit:
        """Unpenalised Poisson GLM with ``stats::glm.fit`` (IRLS)."""
        return self._fit("r_glm", "glmbench_fit_glm", tol, maxit)

    def fit_glmnet(self, tol: float, maxit: int = _GLMNET_MAXIT) -> RFit:
        """Poisson GLM with ``glmnet`` at lambda = 0 (coordinate descent)."""
        return self._fit("r_glmnet", "glmbench_fit_glmnet", tol, maxit)

    def predict(self, coefficients: np.ndarray, X: np.ndarray) -> np.ndarray:
        """Expected frequency ``exp(X @ coefficients)``, evaluated in R.

        Coefficients are in design-column order, as in ``RFit``, so a model
        predicts from its own fit however many fits ran since.
        """
        out = self._call(
            "glmbench_predict",
            np.asarray(coefficients, dtype=np.float64),
            np.asfortranarray(X, dtype=np.float64),
        )
        return np.asarray(out, dtype=np.float64)


@functools.lru_cache(maxsize=None)
def get_bridge() -> RBridge:
    """The process-wide R bridge (created on first use)."""
    return RBridge()


def r_available() -> bool:
    """True when the R bridge can be created."""
    try:
        get_bridge()
    except BridgeUnavailableError as e:
        logger.debug("R bridge unavailable: {}", e)
        return False
    return True
