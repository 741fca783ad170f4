"""
Discount factors and the risk-neutral moment terms shared by all
closed-form pricers.

Garman-Kohlhagen treats the foreign interest rate exactly like a
continuous dividend yield: the foreign leg is discounted at r_f and the
domestic (strike) leg at r_d.

Two clocks are in play:
    - T (expiry tenor) drives d1/d2, i.e. how much diffusion happens.
    - T2 (discount tenor) drives premium discounting only.
"""

import math

from fx_pricer.core.distributions import normal_cdf
from fx_pricer.utils.types import GKParams, OptionType


def option_sign(option_type: OptionType) -> float:
    """+1 for calls, -1 for puts."""
    if option_type == "call":
        return 1.0
    if option_type == "put":
        return -1.0
    raise ValueError(f"option_type must be 'call' or 'put', got '{option_type}'")


def discount_domestic(r_d: float, T: float) -> float:
    """Domestic discount factor e^(-r_d·T)."""
    return math.exp(-r_d * T)


def discount_foreign(r_f: float, T: float) -> float:
    """Foreign discount factor e^(-r_f·T)."""
    return math.exp(-r_f * T)


def discount_tenor(params: GKParams) -> float:
    """T2 when supplied, otherwise T."""
    return params.discount_tenor


def sigma_sqrt_t(params: GKParams) -> float:
    """Total standard deviation of log-spot to expiry, σ√T."""
    return params.sigma * math.sqrt(params.T)


def d1(params: GKParams) -> float:
    """
    Calculate d1 on the expiry clock.

    Formula:
        d1 = [ln(S/K) + (r_d - r_f + σ²/2)T] / (σ√T)

    Returns 0 when σ√T = 0 (degenerate limit).
    """
    total_vol = sigma_sqrt_t(params)
    if total_vol == 0.0:
        return 0.0

    log_moneyness = math.log(params.S) - math.log(params.K)
    drift = (params.r_d - params.r_f + 0.5 * params.sigma * params.sigma) * params.T

    return (log_moneyness + drift) / total_vol


def d2(params: GKParams) -> float:
    """
    Calculate d2 = d1 - σ√T.

    Returns 0 when σ√T = 0 (degenerate limit).
    """
    total_vol = sigma_sqrt_t(params)
    if total_vol == 0.0:
        return 0.0
    return d1(params) - total_vol


def forward(params: GKParams) -> float:
    """Outright forward to expiry, S·e^((r_d - r_f)T)."""
    return params.S * math.exp((params.r_d - params.r_f) * params.T)


def exercise_probabilities(params: GKParams, option_type: OptionType) -> tuple[float, float]:
    """
    Return (N(±d1), N(±d2)) with the sign chosen by option type.

    For a call this is (N(d1), N(d2)); for a put (N(-d1), N(-d2)).
    When σ√T = 0 the distribution collapses onto the forward and both
    probabilities become the exercise indicator: 1 in the money,
    0 out of the money, 1/2 exactly at the money.
    """
    if sigma_sqrt_t(params) == 0.0:
        fwd = forward(params)
        if fwd == params.K:
            return 0.5, 0.5
        in_the_money = fwd > params.K if option_type == "call" else fwd < params.K
        indicator = 1.0 if in_the_money else 0.0
        return indicator, indicator

    d1_value = d1(params)
    d2_value = d2(params)
    if option_type == "call":
        return normal_cdf(d1_value), normal_cdf(d2_value)
    return normal_cdf(-d1_value), normal_cdf(-d2_value)
