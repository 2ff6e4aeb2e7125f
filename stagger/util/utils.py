from typing import Union

import numpy as np


def is_contiguous(array: np.ndarray) -> bool:
    return array.flags["C_CONTIGUOUS"] or array.flags["F_CONTIGUOUS"]


def ensure_contiguous(maybe_array: Union[np.ndarray, None]) -> None:
    """Raise ValueError if a buffer handed to a comm is not contiguous."""
    if maybe_array is not None and not is_contiguous(maybe_array):
        raise ValueError("ndarray is not contiguous")


def assign_array(to_array: np.ndarray, from_array: np.ndarray):
    """Copy from_array into to_array, checking the shapes agree.

    Args:
        to_array: destination ndarray
        from_array: source ndarray
    """
    if to_array.shape != np.shape(from_array):
        raise ValueError(
            f"cannot assign array of shape {np.shape(from_array)} "
            f"into array of shape {to_array.shape}"
        )
    to_array[...] = from_array
