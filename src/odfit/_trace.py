"""Per-iteration trace printing for verbose runs."""

import numpy as np

from odfit._types import IterationRecord


def decimal_places(tol: float) -> int:
    """Digits after the decimal point of ``tol`` written in fixed notation.

    >>> decimal_places(1e-5)
    5
    >>> decimal_places(0.0025)
    4
    >>> decimal_places(1.0)
    0
    """
    text = np.format_float_positional(tol, trim="-")
    _, _, fraction = text.partition(".")
    return len(fraction)


class TracePrinter:
    """Observer printing the scaling factors of every iteration to stdout.

    One line per record: the iteration number followed by alpha then beta,
    each shown with as many decimals as the tolerance has.
    """

    def __init__(self, tol: float) -> None:
        self.precision = decimal_places(tol)

    def format(self, record: IterationRecord) -> str:
        values = np.concatenate((record.alpha, record.beta))
        body = " ".join(f"{v:.{self.precision}f}" for v in values)
        return f"[odfit] iter {record.iteration:4d}: {body}"

    def __call__(self, record: IterationRecord) -> None:
        print(self.format(record))
