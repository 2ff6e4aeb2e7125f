import numpy as np


class ConfigurationError(ValueError):
    """Raised when a run is configured in a way that cannot be integrated.

    Always raised during setup, before any time step is taken.
    """

    pass


class NonFiniteError(RuntimeError):
    """Raised when NaN or Inf values appear in an intermediate result,
    indicating the integration has diverged."""

    pass


def ensure_finite(array: np.ndarray, description: str):
    """Raise NonFiniteError if any value of array is NaN or Inf.

    Args:
        array: array to check
        description: what the array holds, used in the error message
    """
    finite = np.isfinite(array)
    if not np.all(finite):
        n_bad = int(np.sum(~finite))
        raise NonFiniteError(f"{n_bad} non-finite values found in {description}")
