"""
Unit tests for the standard normal approximation and the discounting kernel.

This module validates:
1. CDF accuracy against scipy over the whole real line
2. Symmetry and the value at zero
3. Saturation beyond ±6
4. d1/d2 and exercise probabilities, including the degenerate limit
"""

import math
from dataclasses import replace

import numpy as np
import pytest
from scipy.stats import norm

from fx_pricer.core.discounting import (
    d1,
    d2,
    discount_domestic,
    discount_foreign,
    exercise_probabilities,
    forward,
    option_sign,
    sigma_sqrt_t,
)
from fx_pricer.core.distributions import normal_cdf, normal_pdf
from fx_pricer.utils.types import GKParams


# ===========================
# Normal Distribution Tests
# ===========================


@pytest.mark.parametrize("x", np.linspace(-8.0, 8.0, 321))
def test_cdf_matches_scipy(x):
    """Abramowitz-Stegun error stays below 1e-7 everywhere."""
    assert abs(normal_cdf(float(x)) - norm.cdf(x)) < 1e-7


@pytest.mark.parametrize("x", [-3.0, -1.0, 0.0, 0.5, 2.5])
def test_pdf_matches_scipy(x):
    assert normal_pdf(x) == pytest.approx(norm.pdf(x), rel=1e-12)


def test_cdf_at_zero():
    assert abs(normal_cdf(0.0) - 0.5) < 1e-9


@pytest.mark.parametrize("x", [1e-6, 0.01, 0.3, 1.0, 2.0, 4.5, 5.999])
def test_cdf_symmetry(x):
    assert normal_cdf(x) + normal_cdf(-x) == pytest.approx(1.0, abs=1e-12)


def test_cdf_saturates():
    assert normal_cdf(6.0) == 1.0
    assert normal_cdf(50.0) == 1.0
    assert normal_cdf(-6.0) == 0.0
    assert normal_cdf(-50.0) == 0.0


def test_small_negative_argument_stays_near_half():
    """The negative branch must not collapse towards 1."""
    assert 0.49 < normal_cdf(-0.01) < 0.5


# ===========================
# Discounting Kernel Tests
# ===========================


def test_discount_factors():
    assert discount_domestic(0.05, 2.0) == pytest.approx(math.exp(-0.1))
    assert discount_foreign(-0.01, 1.0) == pytest.approx(math.exp(0.01))


def test_d1_d2_relationship(eurusd_params):
    assert d1(eurusd_params) - d2(eurusd_params) == pytest.approx(sigma_sqrt_t(eurusd_params))


def test_d1_uses_expiry_not_settlement(eurusd_params):
    later_settlement = replace(eurusd_params, T2=2.0)
    assert d1(later_settlement) == d1(eurusd_params)


def test_d1_d2_zero_when_degenerate():
    params = GKParams(S=1.2, K=1.0, T=0.0, r_d=0.03, r_f=0.01, sigma=0.1)
    assert d1(params) == 0.0
    assert d2(params) == 0.0


def test_forward():
    params = GKParams(S=1.1, K=1.0, T=0.5, r_d=0.04, r_f=0.02, sigma=0.1)
    assert forward(params) == pytest.approx(1.1 * math.exp(0.01))


def test_exercise_probabilities_call_put_complement(eurusd_params):
    call_n1, call_n2 = exercise_probabilities(eurusd_params, "call")
    put_n1, put_n2 = exercise_probabilities(eurusd_params, "put")
    assert call_n1 + put_n1 == pytest.approx(1.0, abs=1e-12)
    assert call_n2 + put_n2 == pytest.approx(1.0, abs=1e-12)


def test_exercise_probabilities_zero_vol_indicators():
    itm = GKParams(S=1.2, K=1.0, T=0.5, r_d=0.03, r_f=0.01, sigma=0.0)
    assert exercise_probabilities(itm, "call") == (1.0, 1.0)
    assert exercise_probabilities(itm, "put") == (0.0, 0.0)


def test_exercise_probabilities_at_the_forward():
    at_forward = GKParams(S=1.0, K=1.0, T=0.5, r_d=0.02, r_f=0.02, sigma=0.0)
    assert exercise_probabilities(at_forward, "call") == (0.5, 0.5)


def test_option_sign():
    assert option_sign("call") == 1.0
    assert option_sign("put") == -1.0
    with pytest.raises(ValueError, match="option_type"):
        option_sign("straddle")
