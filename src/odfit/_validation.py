"""Input checks run before any scaling iteration."""

import math
from typing import Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from odfit._errors import DimensionMismatchError, MarginSumMismatchError


def as_margin(values: ArrayLike, name: str) -> NDArray[np.float64]:
    """Convert a margin to a float64 vector, rejecting unusable values.

    Raises:
        ValueError: If the margin is not one-dimensional, is empty, or holds
            negative or non-finite values.
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        raise ValueError(f"{name} must be non-empty")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must contain only finite values")
    if np.any(arr < 0):
        raise ValueError(f"{name} must be non-negative")
    return arr


def as_weights(m: ArrayLike, expected: Tuple[int, int]) -> NDArray[np.float64]:
    """Convert the auxiliary matrix to a float64 array.

    Shape is checked by validate(); only the values are checked here, apart
    from ragged rows, which cannot form an array at all.

    Raises:
        DimensionMismatchError: If the rows of m differ in length.
        ValueError: If m holds negative or non-finite values.
    """
    try:
        arr = np.asarray(m, dtype=np.float64)
    except ValueError as exc:
        if len({np.shape(row) for row in m}) > 1:  # type: ignore[union-attr]
            raise DimensionMismatchError(expected, None) from exc
        raise
    if not np.all(np.isfinite(arr)):
        raise ValueError("m must contain only finite values")
    if np.any(arr < 0):
        raise ValueError("m must be non-negative")
    return arr


def check_options(tol: float, maxit: int) -> Tuple[float, int]:
    """Validate the convergence options and return them normalised."""
    tol = float(tol)
    if not math.isfinite(tol) or tol <= 0:
        raise ValueError(f"tol must be a positive finite number, got {tol!r}")
    if isinstance(maxit, bool) or not math.isfinite(maxit) or int(maxit) != maxit:
        raise ValueError(f"maxit must be an integer, got {maxit!r}")
    maxit = int(maxit)
    if maxit < 1:
        raise ValueError(f"maxit must be at least 1, got {maxit}")
    return tol, maxit


def validate(rtot: NDArray[np.float64], ctot: NDArray[np.float64], m: NDArray[np.float64]) -> None:
    """Check margin and dimension consistency.

    Args:
        rtot: Row (origin) totals. Shape (I,).
        ctot: Column (destination) totals. Shape (J,).
        m: Auxiliary matrix. Must have shape (I, J).

    Raises:
        MarginSumMismatchError: If round(sum(rtot)) != round(sum(ctot)).
        DimensionMismatchError: If m does not have shape (I, J).
    """
    row_total = float(np.sum(rtot))
    col_total = float(np.sum(ctot))
    if round(row_total) != round(col_total):
        raise MarginSumMismatchError(row_total, col_total)

    expected = (len(rtot), len(ctot))
    if np.ndim(m) != 2 or np.shape(m) != expected:
        raise DimensionMismatchError(expected, tuple(np.shape(m)))
