"""
numeric.py
----------
Arithmetic helpers shared by the ratio and returns calculations.
"""

import numpy as np


def safe_divide(numerator: float, denominator: float) -> float:
    """
    IEEE division: x/0 gives +/-inf and 0/0 gives nan instead of raising.

    Degenerate deals (zero interest, zero equity) produce these values on
    purpose; callers display them rather than treat them as errors.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))
