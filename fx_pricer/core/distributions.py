"""
Standard normal distribution with a closed-form rational approximation.

This module provides the standard normal cumulative distribution function
(CDF) and probability density function (PDF) used by every closed-form
model. The CDF follows Abramowitz & Stegun 26.2.17, whose absolute error is
below 7.5e-8 over the whole real line.
"""

import math

from fx_pricer.utils.constants import (
    AS_B1,
    AS_B2,
    AS_B3,
    AS_B4,
    AS_B5,
    AS_P,
    CDF_SATURATION,
)

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def normal_pdf(x: float) -> float:
    """
    Standard normal probability density function.

    Args:
        x: Value at which to evaluate the PDF

    Returns:
        Probability density at x for standard normal distribution

    Notes:
        φ(x) = (1/√(2π)) * exp(-x²/2)
    """
    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)


def normal_cdf(x: float) -> float:
    """
    Standard normal cumulative distribution function.

    Uses the Abramowitz & Stegun rational approximation with
    t = 1/(1 + p|x|) and y = t(b1 + t(b2 + t(b3 + t(b4 + t·b5)))):

        x >= 0:  N(x) = 1 - φ(x)·y
        x <  0:  N(x) = φ(x)·y

    The negative branch must use φ(x)·y directly. Computing it as 1 - y
    collapses N(x) towards 1 for small negative x, which pushes
    near-the-money deltas to ~100%.

    Args:
        x: Value at which to evaluate the CDF

    Returns:
        Probability that a standard normal random variable is less than x

    Examples:
        >>> abs(normal_cdf(0.0) - 0.5) < 1e-9
        True
        >>> normal_cdf(10.0)
        1.0
    """
    if x >= CDF_SATURATION:
        return 1.0
    if x <= -CDF_SATURATION:
        return 0.0

    t = 1.0 / (1.0 + AS_P * abs(x))
    y = t * (AS_B1 + t * (AS_B2 + t * (AS_B3 + t * (AS_B4 + t * AS_B5))))
    tail = normal_pdf(x) * y

    return 1.0 - tail if x >= 0.0 else tail
