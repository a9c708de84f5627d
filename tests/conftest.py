"""Pytest configuration and reference tables for odfit testing.

This module provides:
- The Willekens (1999) two-region example
- The independence (all-ones offset) case with its closed-form answer
- A three-region example whose offset contains a structural zero
"""

import numpy as np


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "robustness: mark test as robustness/edge case test"
    )

# =============================================================================
# Reference Tables
# =============================================================================

# Willekens (1999): two origins, two destinations, informative offset.
WILLEKENS_RTOT = np.array([18.0, 20.0])
WILLEKENS_CTOT = np.array([16.0, 22.0])
WILLEKENS_M = np.array([[5.0, 1.0], [2.0, 7.0]])

# Three regions; m[1, 2] is a structural zero but no row or column is empty.
THREE_REGION_RTOT = np.array([170.0, 120.0, 410.0])
THREE_REGION_CTOT = np.array([500.0, 140.0, 60.0])
THREE_REGION_M = np.array(
    [
        [50.0, 120.0, 545.0],
        [10.0, 120.0, 0.0],
        [220.0, 30.0, 10.0],
    ]
)


def independence_fit(rtot, ctot):
    """Closed-form biproportional estimate for an all-ones offset.

    N_ij = rtot_i * ctot_j / sum(rtot)
    """
    rtot = np.asarray(rtot, dtype=float)
    ctot = np.asarray(ctot, dtype=float)
    return np.outer(rtot, ctot) / rtot.sum()
