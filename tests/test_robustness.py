"""Robustness tests for invalid input and degenerate tables."""

import numpy as np
import pytest

from odfit import (
    DegenerateMarginError,
    DimensionMismatchError,
    FitError,
    MarginSumMismatchError,
    compute,
    validate,
)
from tests.conftest import WILLEKENS_CTOT, WILLEKENS_M, WILLEKENS_RTOT


# =============================================================================
# Margin Consistency
# =============================================================================


@pytest.mark.robustness
def test_margin_sum_mismatch():
    """Margins whose rounded sums differ are rejected before iterating."""
    seen = []
    with pytest.raises(MarginSumMismatchError) as excinfo:
        compute([18, 20], [16, 23], callback=seen.append)

    assert seen == []
    assert excinfo.value.row_total == 38
    assert excinfo.value.col_total == 39
    assert isinstance(excinfo.value, FitError)
    assert isinstance(excinfo.value, ValueError)


@pytest.mark.robustness
def test_margin_sums_compared_after_rounding():
    """Totals that agree once rounded pass validation."""
    validate(np.array([18.2, 20.0]), np.array([16.0, 22.0]), np.ones((2, 2)))


# =============================================================================
# Dimension Consistency
# =============================================================================


@pytest.mark.robustness
def test_offset_with_too_many_rows():
    """A 3x2 offset for two origins raises DimensionMismatchError."""
    m = np.ones((3, 2))
    with pytest.raises(DimensionMismatchError) as excinfo:
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, m)
    assert excinfo.value.expected == (2, 2)
    assert excinfo.value.actual == (3, 2)


@pytest.mark.robustness
def test_offset_with_too_few_columns():
    with pytest.raises(DimensionMismatchError):
        compute([10, 10, 10], [15, 15], np.ones((3, 1)))


@pytest.mark.robustness
def test_offset_not_two_dimensional():
    """A flat offset cannot be matched to the margins."""
    with pytest.raises(DimensionMismatchError):
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, np.ones(4))


@pytest.mark.robustness
def test_ragged_offset():
    """Rows of unequal length are a shape problem, not a conversion failure."""
    with pytest.raises(DimensionMismatchError) as excinfo:
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, [[1.0, 1.0], [1.0]])
    assert excinfo.value.expected == (2, 2)
    assert excinfo.value.actual is None


@pytest.mark.robustness
def test_margin_check_runs_before_dimension_check():
    """Both problems present: the margin mismatch is reported."""
    with pytest.raises(MarginSumMismatchError):
        compute([18, 20], [16, 23], np.ones((3, 3)))


# =============================================================================
# Degenerate Offsets
# =============================================================================


@pytest.mark.robustness
def test_zero_row_in_offset():
    """A zero row in m raises instead of producing NaN or Inf."""
    m = np.array([[0.0, 0.0], [1.0, 1.0]])
    with pytest.raises(DegenerateMarginError) as excinfo:
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, m)

    assert excinfo.value.axis == "row"
    assert excinfo.value.index == 0
    assert excinfo.value.iteration == 1


@pytest.mark.robustness
def test_zero_column_in_offset():
    """A zero column in m raises on the first column pass."""
    m = np.array([[1.0, 0.0], [1.0, 0.0]])
    with pytest.raises(DegenerateMarginError) as excinfo:
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, m)

    assert excinfo.value.axis == "column"
    assert excinfo.value.index == 1
    assert isinstance(excinfo.value, ArithmeticError)


@pytest.mark.robustness
def test_vanishing_row_weight_overflows():
    """A subnormal row sum overflows the factor; it is rejected, not returned as inf."""
    m = np.array([[1e-310, 1e-310], [1.0, 1.0]])
    with pytest.raises(DegenerateMarginError) as excinfo:
        compute([1.0, 1.0], [1.0, 1.0], m, maxit=1)

    assert excinfo.value.axis == "row"
    assert excinfo.value.index == 0
    assert excinfo.value.iteration == 1


@pytest.mark.robustness
def test_zero_row_with_zero_total_still_degenerate():
    """An empty row is undefined even when its target total is zero."""
    m = np.array([[1.0, 1.0], [0.0, 0.0]])
    with pytest.raises(DegenerateMarginError):
        compute([38, 0], WILLEKENS_CTOT, m)


@pytest.mark.robustness
def test_zero_margin_with_positive_offset():
    """A zero target with a usable offset row gives a zero row in N."""
    result = compute([38.0, 0.0], WILLEKENS_CTOT, WILLEKENS_M)
    assert result.converged
    assert np.all(result.N[1] == 0.0)
    assert np.all(np.isfinite(result.N))


# =============================================================================
# Argument Values
# =============================================================================


@pytest.mark.robustness
@pytest.mark.parametrize("tol", [0.0, -1e-5, float("nan"), float("inf")])
def test_invalid_tol(tol):
    with pytest.raises(ValueError, match="tol"):
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, tol=tol)


@pytest.mark.robustness
@pytest.mark.parametrize("maxit", [0, -3, 2.5, True, float("inf"), float("nan")])
def test_invalid_maxit(maxit):
    with pytest.raises(ValueError, match="maxit"):
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, maxit=maxit)


@pytest.mark.robustness
def test_negative_margin():
    with pytest.raises(ValueError, match="non-negative"):
        compute([40, -2], WILLEKENS_CTOT)


@pytest.mark.robustness
def test_empty_margin():
    with pytest.raises(ValueError, match="non-empty"):
        compute([], [])


@pytest.mark.robustness
def test_two_dimensional_margin():
    with pytest.raises(ValueError, match="one-dimensional"):
        compute([[18, 20]], WILLEKENS_CTOT)


@pytest.mark.robustness
def test_non_finite_offset():
    m = np.array([[5.0, np.nan], [2.0, 7.0]])
    with pytest.raises(ValueError, match="finite"):
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, m)


@pytest.mark.robustness
def test_negative_offset():
    m = np.array([[5.0, -1.0], [2.0, 7.0]])
    with pytest.raises(ValueError, match="non-negative"):
        compute(WILLEKENS_RTOT, WILLEKENS_CTOT, m)


# =============================================================================
# Scale
# =============================================================================


@pytest.mark.robustness
def test_large_table():
    """A 200x150 table with a random positive offset converges."""
    rng = np.random.default_rng(0)
    m = rng.uniform(0.5, 2.0, size=(200, 150))
    rtot = rng.uniform(10.0, 100.0, size=200)
    ctot = rng.uniform(10.0, 100.0, size=150)
    ctot *= rtot.sum() / ctot.sum()

    result = compute(rtot, ctot, m, tol=1e-8, maxit=2000)
    assert result.converged
    np.testing.assert_allclose(result.N.sum(axis=1), rtot, rtol=1e-8)
    np.testing.assert_allclose(result.N.sum(axis=0), ctot, rtol=1e-5)
