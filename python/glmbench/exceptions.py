"""
Custom exceptions for glmbench with actionable error messages.

Errors raised by the statistical libraries themselves (network failures,
R evaluation errors, solver internals) are not translated and propagate
unchanged. The classes here cover the checks glmbench performs itself.
"""

__all__ = [
    "GlmBenchError",
    "ValidationError",
    "ConfigurationError",
    "BridgeUnavailableError",
    "FittingError",
    "ConvergenceError",
    "wrap_fitting_error",
]


class GlmBenchError(Exception):
    """Base exception for all glmbench errors."""
    pass


class ValidationError(GlmBenchError):
    """
    Input validation error.
    
    Common causes:
    - NaN or infinite values in the design matrix
    - Negative claim frequencies
    - Non-positive exposure
    - Incompatible array shapes
    """
    pass


class ConfigurationError(GlmBenchError):
    """
    Invalid benchmark configuration.
    
    Common causes:
    - Unknown solver name
    - n_runs < 1
    - Non-positive tolerance
    """
    pass


class BridgeUnavailableError(GlmBenchError):
    """
    The R bridge cannot be used.
    
    Check:
    - rpy2 is installed (pip install glmbench[r])
    - R is installed and R_HOME is set
    - The glmnet R package is installed (install.packages("glmnet"))
    """
    pass


class FittingError(GlmBenchError):
    """
    Error during model fitting.
    
    Common causes:
    - Singular design matrix
    - Numerical overflow in the linear predictor
    """
    pass


class ConvergenceError(FittingError):
    """
    Solver failed to converge within max iterations.
    
    Try:
    - Increasing max_iter
    - Loosening the tolerance
    """
    pass


def wrap_fitting_error(original_error: Exception, context: str = "") -> FittingError:
    """
    Wrap a low-level error with fitting context.
    
    Parameters
    ----------
    original_error : Exception
        The original exception
    context : str
        Which solver was running
        
    Returns
    -------
    FittingError
        Wrapped exception with actionable message
    """
    msg = str(original_error).lower()
    
    if "singular" in msg or "rank" in msg:
        return FittingError(
            f"Design matrix is singular (rank deficient). "
            f"Check for a categorical level with no rows or duplicate columns.\n"
            f"{context}\n"
            f"Original error: {original_error}"
        )
    
    if "converge" in msg or "iteration" in msg:
        return ConvergenceError(
            f"Solver failed to converge. Try increasing max_iter "
            f"or loosening --tol.\n"
            f"{context}\n"
            f"Original error: {original_error}"
        )
    
    return FittingError(
        f"Model fitting failed. {context}\n"
        f"Original error: {original_error}"
    )
