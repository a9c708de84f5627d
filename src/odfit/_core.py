"""Core compute() function estimating a flow table from its margins.

This module chains the three stages of the estimator:
1. Input Validation - margins must add up, m must match their lengths
2. Alternating Scaling - column/row factor updates to a fixed point
3. Result Assembly - N = outer(alpha, beta) * m plus the parameter record

The compute() function is the main public API of the odfit package.
"""

import logging
import warnings
from typing import List, Optional

import numpy as np
from numpy.typing import ArrayLike

from odfit._assembly import assemble
from odfit._convergence import iterate
from odfit._errors import NonConvergenceWarning
from odfit._trace import TracePrinter
from odfit._types import FitResult, IterationRecord, Observer
from odfit._validation import as_margin, as_weights, check_options, validate

logger = logging.getLogger(__name__)


def compute(
    rtot: ArrayLike,
    ctot: ArrayLike,
    m: Optional[ArrayLike] = None,
    tol: float = 1e-5,
    maxit: int = 500,
    verbose: bool = False,
    *,
    callback: Optional[Observer] = None,
    history: bool = False,
) -> FitResult:
    """Estimate an origin-destination table with known margins.

    Finds maximum likelihood estimates for the log-linear model

        log y_ij = log alpha_i + log beta_j + log m_ij

    as introduced by Willekens (1999), using the EM / conditional
    maximisation routine (equivalent to iterative proportional fitting).
    alpha and beta capture origin and destination characteristics; m imposes
    its interaction structure onto the estimated flows.

    Args:
        rtot: Origin totals that the rows of the estimate must sum to.
        ctot: Destination totals that the columns of the estimate must sum to.
        m: Auxiliary matrix of shape (len(rtot), len(ctot)). Defaults to all
            ones, which gives the independence fit.
        tol: Convergence threshold on the largest change of any scaling
            factor between iterations. Default 1e-5.
        maxit: Maximum number of iterations. Default 500.
        verbose: If True, print the scaling factors at every iteration with
            as many decimals as ``tol`` has. Default False.
        callback: Optional function called with an IterationRecord for the
            initial state and after each iteration.
        history: If True, include the list of iteration records in the
            result. Default False.

    Returns:
        FitResult with fields:
            N: Estimated flow matrix
            theta: ParameterRecord (mu=1, alpha, beta)
            iterations: Iterations performed
            converged: True if the factors settled within tol
            max_diff: Last change in the scaling factors
            message: Status message
            history: Iteration records (if requested)

    Raises:
        MarginSumMismatchError: If the rounded margin totals differ.
        DimensionMismatchError: If m does not match the margin lengths.
        DegenerateMarginError: If a row or column of m has no weight.
        ValueError: If a margin, m, tol or maxit holds unusable values.

    Warns:
        NonConvergenceWarning: If maxit is reached before convergence. The
            last estimate is still returned, with converged=False.

    Example:
        >>> from odfit import compute
        >>> y = compute([18, 20], [16, 22], m=[[5, 1], [2, 7]])
        >>> y.N.sum(axis=1)  # close to [18, 20]
    """
    # =========================================================================
    # Input Validation
    # =========================================================================
    tol, maxit = check_options(tol, maxit)
    rtot_arr = as_margin(rtot, "rtot")
    ctot_arr = as_margin(ctot, "ctot")
    if m is None:
        m_arr = np.ones((len(rtot_arr), len(ctot_arr)), dtype=np.float64)
    else:
        m_arr = as_weights(m, (len(rtot_arr), len(ctot_arr)))

    validate(rtot_arr, ctot_arr, m_arr)

    # =========================================================================
    # Observers
    # =========================================================================
    observers: List[Observer] = []
    records: List[IterationRecord] = []

    if verbose:
        observers.append(TracePrinter(tol))
    if history:
        observers.append(records.append)
    if callback is not None:
        observers.append(callback)

    def notify(record: IterationRecord) -> None:
        for observer in observers:
            observer(record)

    # =========================================================================
    # Alternating Scaling
    # =========================================================================
    state = iterate(
        rtot_arr,
        ctot_arr,
        m_arr,
        tol=tol,
        maxit=maxit,
        observer=notify if observers else None,
    )

    # =========================================================================
    # Build Result
    # =========================================================================
    N, theta = assemble(state.alpha, state.beta, m_arr)

    if state.converged:
        message = (
            f"Converged after {state.iteration} iterations: "
            f"max change {state.max_diff:.2e} <= tol {tol:.1e}"
        )
    else:
        message = (
            f"Not converged: iteration limit {maxit} reached with "
            f"max change {state.max_diff:.2e} > tol {tol:.1e}"
        )
        logger.warning(message)
        warnings.warn(message, NonConvergenceWarning, stacklevel=2)

    return FitResult(
        N=N,
        theta=theta,
        iterations=state.iteration,
        converged=state.converged,
        max_diff=state.max_diff,
        message=message,
        history=records if history else None,
    )
