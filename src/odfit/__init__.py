"""odfit: origin-destination flow estimation from known margins."""

import logging

from odfit._assembly import assemble
from odfit._convergence import solve
from odfit._core import compute
from odfit._errors import (
    DegenerateMarginError,
    DimensionMismatchError,
    FitError,
    MarginSumMismatchError,
    NonConvergenceWarning,
)
from odfit._trace import TracePrinter, decimal_places
from odfit._types import (
    ConvergenceState,
    FitConfig,
    FitResult,
    IterationRecord,
    ParameterRecord,
)
from odfit._validation import validate

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "compute",
    "validate",
    "solve",
    "assemble",
    "FitConfig",
    "FitResult",
    "ParameterRecord",
    "IterationRecord",
    "ConvergenceState",
    "TracePrinter",
    "decimal_places",
    "FitError",
    "MarginSumMismatchError",
    "DimensionMismatchError",
    "DegenerateMarginError",
    "NonConvergenceWarning",
]
