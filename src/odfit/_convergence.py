"""Alternating multiplicative scaling: the fixed-point loop behind compute().

Each iteration first rescales every column factor against the current row
factors, then every row factor against the new column factors:

    beta_j  = ctot_j / sum_i(alpha_i * m_ij)
    alpha_i = rtot_i / sum_j(beta_j * m_ij)

This is the EM / conditional maximisation scheme of Willekens (1999) for the
log-linear model log y_ij = log alpha_i + log beta_j + log m_ij. Within a
phase the updates are independent across the index, so each phase is a single
vectorised matrix-vector product. The loop stops once the largest change of
any factor is <= tol, or after maxit iterations.
"""

import logging
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from odfit._errors import DegenerateMarginError
from odfit._types import ConvergenceState, Observer

logger = logging.getLogger(__name__)


def _rescale(
    totals: NDArray[np.float64],
    weights: NDArray[np.float64],
    axis: str,
    iteration: int,
) -> NDArray[np.float64]:
    """Divide targets by the current weighted sums, refusing undefined factors.

    A zero or non-finite sum is rejected before dividing; a sum so small that
    the quotient overflows is rejected after.
    """
    bad = (weights == 0) | ~np.isfinite(weights)
    if not np.any(bad):
        with np.errstate(over="ignore"):
            factors = totals / weights
        bad = ~np.isfinite(factors)
        if not np.any(bad):
            return factors
    index = int(np.flatnonzero(bad)[0])
    raise DegenerateMarginError(axis, index, iteration)


def scaling_step(
    state: ConvergenceState,
    rtot: NDArray[np.float64],
    ctot: NDArray[np.float64],
    m: NDArray[np.float64],
) -> ConvergenceState:
    """Perform one column update followed by one row update.

    Returns a new state; the vectors of ``state`` are left untouched.

    Raises:
        DegenerateMarginError: If a column or row of m carries zero weight
            under the current scaling.
    """
    iteration = state.iteration + 1

    # Columns use the previous alpha, rows use the freshly computed beta.
    beta = _rescale(ctot, state.alpha @ m, "column", iteration)
    alpha = _rescale(rtot, m @ beta, "row", iteration)

    max_diff = float(
        max(
            np.max(np.abs(alpha - state.alpha)),
            np.max(np.abs(beta - state.beta)),
        )
    )

    return ConvergenceState(
        iteration=iteration,
        alpha=alpha,
        beta=beta,
        max_diff=max_diff,
        tol=state.tol,
        maxit=state.maxit,
    )


def iterate(
    rtot: NDArray[np.float64],
    ctot: NDArray[np.float64],
    m: NDArray[np.float64],
    tol: float = 1e-5,
    maxit: int = 500,
    observer: Optional[Observer] = None,
) -> ConvergenceState:
    """Run the scaling loop to a terminal state.

    The observer, if given, receives the initial state (iteration 0) and then
    one record per completed iteration.

    Returns:
        The terminal ConvergenceState: either converged (max_diff <= tol) or
        exhausted (iteration == maxit).
    """
    n_rows, n_cols = m.shape
    state = ConvergenceState.initial(n_rows, n_cols, tol, maxit)

    logger.debug("Scaling %dx%d table (tol=%g, maxit=%d)", n_rows, n_cols, tol, maxit)

    if observer is not None:
        observer(state.record())

    while not state.terminal:
        state = scaling_step(state, rtot, ctot, m)
        if observer is not None:
            observer(state.record())

    logger.debug(
        "Scaling stopped after %d iterations (max_diff=%.3e, converged=%s)",
        state.iteration,
        state.max_diff,
        state.converged,
    )
    return state


def solve(
    rtot: NDArray[np.float64],
    ctot: NDArray[np.float64],
    m: NDArray[np.float64],
    tol: float = 1e-5,
    maxit: int = 500,
    observer: Optional[Observer] = None,
) -> Tuple[NDArray[np.float64], NDArray[np.float64], int, bool]:
    """Solve for the row and column scaling factors.

    Args:
        rtot: Row totals. Shape (I,).
        ctot: Column totals. Shape (J,).
        m: Auxiliary matrix. Shape (I, J).
        tol: Convergence threshold on the largest factor change.
        maxit: Maximum number of iterations.
        observer: Optional callable receiving an IterationRecord per iteration.

    Returns:
        Tuple of:
            - alpha: Row scaling factors. Shape (I,).
            - beta: Column scaling factors. Shape (J,).
            - iterations: Number of iterations performed.
            - converged: True if the loop stopped on the tolerance.

    Raises:
        DegenerateMarginError: If a scaling denominator vanishes.
    """
    state = iterate(rtot, ctot, m, tol=tol, maxit=maxit, observer=observer)
    return state.alpha, state.beta, state.iteration, state.converged
