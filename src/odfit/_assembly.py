"""Combine converged scaling factors with the auxiliary matrix."""

from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from odfit._types import ParameterRecord


def assemble(
    alpha: NDArray[np.float64],
    beta: NDArray[np.float64],
    m: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], ParameterRecord]:
    """Build the estimated flow matrix and its parameter record.

    N_ij = alpha_i * beta_j * m_ij, i.e. outer(alpha, beta) * m.

    Returns:
        Tuple of:
            - N: Estimated flow matrix. Shape (I, J).
            - theta: ParameterRecord with mu fixed at 1.
    """
    N = np.outer(alpha, beta) * m
    theta = ParameterRecord(mu=1.0, alpha=alpha.copy(), beta=beta.copy())
    return N, theta
