"""Public type definitions for the odfit estimator.

This module defines the data structures passed between the validator, the
scaling engine and the result assembler:
- FitConfig: Documents available options and their defaults
- IterationRecord: Structured per-iteration trace record for observers
- ConvergenceState: Immutable snapshot of the fixed-point loop
- ParameterRecord: Parameters of the log-linear model (mu, alpha, beta)
- FitResult: Immutable result container returned by compute()
"""

import math
from dataclasses import dataclass, field, fields
from typing import Callable, Iterator, List, Optional

import numpy as np
from numpy.typing import NDArray


class _FieldAccess:
    """Dict-style access over dataclass fields: obj['name']."""

    def __getitem__(self, key: str) -> object:
        if key not in self.keys():
            raise KeyError(key)
        return getattr(self, key)

    def keys(self) -> List[str]:
        """Return list of field names for dict-like iteration."""
        return [f.name for f in fields(self)]  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __contains__(self, key: object) -> bool:
        return key in self.keys()


@dataclass(frozen=True)
class FitConfig:
    """Configuration parameters for compute() (for reference/introspection).

    Note: compute() takes these as keyword arguments, not a config object.

    Attributes:
        tol: Convergence threshold on the largest change of any scaling
            factor between consecutive iterations. Default 1e-5.
        maxit: Hard cap on the number of column+row update pairs. Default 500.
        verbose: Print the scaling factors at every iteration. Default False.
    """

    tol: float = 1e-5
    maxit: int = 500
    verbose: bool = False


@dataclass(frozen=True)
class IterationRecord:
    """Scaling factors after one iteration, as handed to observers.

    Iteration 0 is the initial state (all factors 1); its max_diff is inf
    because no change has been measured yet.
    """

    iteration: int
    alpha: NDArray[np.float64]
    beta: NDArray[np.float64]
    max_diff: float


Observer = Callable[[IterationRecord], None]


@dataclass(frozen=True)
class ConvergenceState:
    """Immutable snapshot of the alternating scaling loop.

    Each step of the engine builds a new state from the previous one; the
    vectors held here are never written to after construction.
    """

    iteration: int
    alpha: NDArray[np.float64]
    beta: NDArray[np.float64]
    max_diff: float
    tol: float
    maxit: int

    @classmethod
    def initial(cls, n_rows: int, n_cols: int, tol: float, maxit: int) -> "ConvergenceState":
        return cls(
            iteration=0,
            alpha=np.ones(n_rows, dtype=np.float64),
            beta=np.ones(n_cols, dtype=np.float64),
            max_diff=math.inf,
            tol=tol,
            maxit=maxit,
        )

    @property
    def converged(self) -> bool:
        return self.max_diff <= self.tol

    @property
    def exhausted(self) -> bool:
        return self.iteration >= self.maxit

    @property
    def terminal(self) -> bool:
        return self.converged or self.exhausted

    def record(self) -> IterationRecord:
        return IterationRecord(
            iteration=self.iteration,
            alpha=self.alpha.copy(),
            beta=self.beta.copy(),
            max_diff=self.max_diff,
        )


@dataclass(frozen=True)
class ParameterRecord(_FieldAccess):
    """Parameters of the log-linear model log y_ij = log a_i + log b_j + log m_ij.

    Attributes:
        mu: Normalising constant, fixed at 1.
        alpha: Origin (row) scaling factors. Shape (I,).
        beta: Destination (column) scaling factors. Shape (J,).
    """

    mu: float
    alpha: NDArray[np.float64]
    beta: NDArray[np.float64]

    def as_vector(self) -> NDArray[np.float64]:
        """Flatten to [mu, alpha_1..alpha_I, beta_1..beta_J]."""
        return np.concatenate(([self.mu], self.alpha, self.beta))

    def log_linear(self) -> NDArray[np.float64]:
        """Linear predictor log mu + log alpha_i + log beta_j, shape (I, J).

        Adding log m gives log N. Zero factors map to -inf.
        """
        with np.errstate(divide="ignore"):
            return (
                np.log(self.mu)
                + np.log(self.alpha)[:, np.newaxis]
                + np.log(self.beta)[np.newaxis, :]
            )


@dataclass(frozen=True)
class FitResult(_FieldAccess):
    """Result of odfit.compute() - immutable container with dict-like access.

    Attributes:
        N: Estimated flow matrix. Shape (I, J).
        theta: Parameter estimates (mu, alpha, beta).
        iterations: Number of column+row update pairs performed.
        converged: True if the last change in the scaling factors was <= tol.
        max_diff: Largest absolute change of any scaling factor in the last
            iteration.
        message: Human-readable status message.
        history: Optional list of per-iteration records, iteration 0 first.
    """

    N: NDArray[np.float64]
    theta: ParameterRecord
    iterations: int
    converged: bool
    max_diff: float = field(default=math.nan)
    message: str = ""
    history: Optional[List[IterationRecord]] = None
