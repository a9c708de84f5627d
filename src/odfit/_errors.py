"""Exceptions and warnings raised by the odfit estimator.

Structural problems (margins that do not add up, an auxiliary matrix of the
wrong shape) are detected before any iteration runs. A vanishing scaling
denominator aborts the fixed-point loop. Hitting the iteration cap is not an
error: it is reported through NonConvergenceWarning and the returned result.
"""

from typing import Optional, Tuple


class FitError(Exception):
    """Base class for fatal estimation errors."""


class MarginSumMismatchError(FitError, ValueError):
    """Row and column totals do not agree once rounded."""

    def __init__(self, row_total: float, col_total: float) -> None:
        self.row_total = row_total
        self.col_total = col_total
        super().__init__(
            f"row and column totals are not equal: sum(rtot)={row_total:g}, "
            f"sum(ctot)={col_total:g}; ensure sum(rtot) == sum(ctot)"
        )


class DimensionMismatchError(FitError, ValueError):
    """Auxiliary matrix shape disagrees with the margin lengths."""

    def __init__(
        self, expected: Tuple[int, ...], actual: Optional[Tuple[int, ...]]
    ) -> None:
        self.expected = expected
        self.actual = actual
        got = "rows of unequal length" if actual is None else str(actual)
        super().__init__(
            f"auxiliary matrix must have shape {expected} to match the margins, "
            f"got {got}"
        )


class DegenerateMarginError(FitError, ArithmeticError):
    """A scaling factor denominator is zero (or not finite).

    Raised when a whole row or column of the auxiliary matrix carries no
    weight under the current scaling, so the multiplicative update for that
    index is undefined, or so little weight that the update overflows.
    """

    def __init__(self, axis: str, index: int, iteration: Optional[int] = None) -> None:
        self.axis = axis
        self.index = index
        self.iteration = iteration
        where = f" at iteration {iteration}" if iteration is not None else ""
        super().__init__(
            f"{axis} {index} has zero weight under the current scaling{where}; "
            f"the {axis} scaling factor is undefined"
        )


class NonConvergenceWarning(UserWarning):
    """Iteration cap reached before the scaling factors settled."""
