"""
Digital (binary) FX options: cash-or-nothing and asset-or-nothing.

Payoff variants and closed forms:

    Cash-or-nothing, domestic payoff (D domestic units if in the money):
        Call = D·e^(-r_d·T2)·N(d2)          Put = D·e^(-r_d·T2)·N(-d2)

    Cash-or-nothing, foreign payoff (D foreign units, valued in domestic):
        Call = D·S·e^(-r_f·T)·N(d1)         Put = D·S·e^(-r_f·T)·N(-d1)

    Asset-or-nothing (one unit of foreign currency):
        Call = S·e^(-r_f·T)·N(d1)           Put = S·e^(-r_f·T)·N(-d1)

For the domestic cash payoff Call + Put = D·e^(-r_d·T2) exactly. Gamma is
quoted per 1% spot move (raw / 100) and vega per 1% vol, as in the vanilla
engine. Gamma and theta of the foreign-currency cash payoff are not
provided; those entries are None and are left out of results.
"""

from dataclasses import replace
from typing import Optional

from fx_pricer.core.discounting import (
    d1,
    d2,
    discount_domestic,
    discount_foreign,
    exercise_probabilities,
    option_sign,
    sigma_sqrt_t,
)
from fx_pricer.core.distributions import normal_pdf
from fx_pricer.utils.constants import DAYS_PER_YEAR, PER_ONE_PERCENT
from fx_pricer.utils.types import DigitalParams, OptionType, PricingResult


def _payoff_style(params: DigitalParams) -> str:
    """Resolve (digital_kind, payoff_currency) into one of three payoff styles."""
    if params.digital_kind == "asset_or_nothing":
        return "asset"
    if params.digital_kind != "cash_or_nothing":
        raise ValueError(
            f"digital_kind must be 'cash_or_nothing' or 'asset_or_nothing', "
            f"got '{params.digital_kind}'"
        )
    if params.payoff_currency == "domestic":
        return "cash_domestic"
    if params.payoff_currency == "foreign":
        return "cash_foreign"
    raise ValueError(
        f"payoff_currency must be 'domestic' or 'foreign', got '{params.payoff_currency}'"
    )


def _asset_notional(params: DigitalParams, style: str) -> float:
    """Foreign units delivered by the asset-style payoffs."""
    return params.D if style == "cash_foreign" else 1.0


# ===========================
# Prices
# ===========================


def cash_or_nothing_call(params: DigitalParams) -> float:
    """Cash-or-nothing call in the payoff currency set on params."""
    return digital_price(replace(params, digital_kind="cash_or_nothing"), "call")


def cash_or_nothing_put(params: DigitalParams) -> float:
    """Cash-or-nothing put in the payoff currency set on params."""
    return digital_price(replace(params, digital_kind="cash_or_nothing"), "put")


def asset_or_nothing_call(params: DigitalParams) -> float:
    """Asset-or-nothing call: S·e^(-r_f·T)·N(d1)."""
    n1, _ = exercise_probabilities(params, "call")
    return params.S * discount_foreign(params.r_f, params.T) * n1


def asset_or_nothing_put(params: DigitalParams) -> float:
    """Asset-or-nothing put: S·e^(-r_f·T)·N(-d1)."""
    n1, _ = exercise_probabilities(params, "put")
    return params.S * discount_foreign(params.r_f, params.T) * n1


def digital_price(params: DigitalParams, option_type: OptionType) -> float:
    """
    Price a digital option according to its kind and payoff currency.

    Args:
        params: Digital parameters (D, digital_kind, payoff_currency)
        option_type: "call" or "put"

    Returns:
        Premium in domestic currency

    Raises:
        ValueError: If any of the tags is unknown
    """
    option_sign(option_type)
    style = _payoff_style(params)
    n1, n2 = exercise_probabilities(params, option_type)

    if style == "cash_domestic":
        return params.D * discount_domestic(params.r_d, params.discount_tenor) * n2

    notional = _asset_notional(params, style)
    return notional * params.S * discount_foreign(params.r_f, params.T) * n1


# ===========================
# Greeks
# ===========================


def digital_delta(params: DigitalParams, option_type: OptionType) -> float:
    """
    Spot delta (∂V/∂S).

    Formulas:
        Cash domestic: ±D·e^(-r_d·T2)·φ(d2) / (S·σ√T)
        Asset style:   N·e^(-r_f·T)·[N(±d1) ± φ(d1)/(σ√T)], N = D or 1
    """
    sign = option_sign(option_type)
    style = _payoff_style(params)
    total_vol = sigma_sqrt_t(params)

    if style == "cash_domestic":
        if total_vol == 0.0:
            return 0.0
        D_d = discount_domestic(params.r_d, params.discount_tenor)
        return sign * params.D * D_d * normal_pdf(d2(params)) / (params.S * total_vol)

    n1, _ = exercise_probabilities(params, option_type)
    D_f = discount_foreign(params.r_f, params.T)
    density = 0.0 if total_vol == 0.0 else normal_pdf(d1(params)) / total_vol
    return _asset_notional(params, style) * D_f * (n1 + sign * density)


def digital_gamma(params: DigitalParams, option_type: OptionType) -> Optional[float]:
    """
    Gamma (∂²V/∂S²) per 1% spot move, or None for the foreign cash payoff.

    Formulas:
        Cash domestic: ∓D·e^(-r_d·T2)·φ(d2)·d1 / (S²·σ²·T)
        Asset:         ∓e^(-r_f·T)·φ(d1)·d2 / (S·σ²·T)
    """
    sign = option_sign(option_type)
    style = _payoff_style(params)
    if style == "cash_foreign":
        return None
    if sigma_sqrt_t(params) == 0.0:
        return 0.0

    variance = params.sigma * params.sigma * params.T
    if style == "cash_domestic":
        D_d = discount_domestic(params.r_d, params.discount_tenor)
        gamma_raw = (
            -sign * params.D * D_d * normal_pdf(d2(params)) * d1(params)
            / (params.S * params.S * variance)
        )
    else:
        D_f = discount_foreign(params.r_f, params.T)
        gamma_raw = -sign * D_f * normal_pdf(d1(params)) * d2(params) / (params.S * variance)

    return gamma_raw / PER_ONE_PERCENT


def digital_vega(params: DigitalParams, option_type: OptionType) -> float:
    """
    Vega (∂V/∂σ) per 1% vol.

    Formulas:
        Cash domestic: ∓D·e^(-r_d·T2)·φ(d2)·d1/σ
        Asset style:   ∓N·S·e^(-r_f·T)·φ(d1)·d2/σ, N = D or 1
    """
    sign = option_sign(option_type)
    style = _payoff_style(params)
    if sigma_sqrt_t(params) == 0.0:
        return 0.0

    if style == "cash_domestic":
        D_d = discount_domestic(params.r_d, params.discount_tenor)
        vega_raw = -sign * params.D * D_d * normal_pdf(d2(params)) * d1(params) / params.sigma
    else:
        D_f = discount_foreign(params.r_f, params.T)
        vega_raw = (
            -sign * _asset_notional(params, style) * params.S * D_f
            * normal_pdf(d1(params)) * d2(params) / params.sigma
        )

    return vega_raw / PER_ONE_PERCENT


def digital_theta(params: DigitalParams, option_type: OptionType) -> Optional[float]:
    """
    Theta (∂V/∂t) per calendar day, or None for the foreign cash payoff.

    Calendar time shortens the expiry and the discount tenor together:

        Cash domestic: Θ = r_d·V ∓ D·e^(-r_d·T2)·φ(d2)·∂d2/∂T
        Asset:         Θ = r_f·V ∓ S·e^(-r_f·T)·φ(d1)·∂d1/∂T

    with ∂d1/∂T = (r_d - r_f + σ²/2)/(σ√T) - d1/(2T) and
    ∂d2/∂T = (r_d - r_f - σ²/2)/(σ√T) - d2/(2T).
    """
    sign = option_sign(option_type)
    style = _payoff_style(params)
    if style == "cash_foreign":
        return None

    value = digital_price(params, option_type)
    total_vol = sigma_sqrt_t(params)
    carry_rate = params.r_d if style == "cash_domestic" else params.r_f

    if total_vol == 0.0:
        return carry_rate * value / DAYS_PER_YEAR

    half_var = 0.5 * params.sigma * params.sigma
    drift = params.r_d - params.r_f
    if style == "cash_domestic":
        d_value = d2(params)
        d_dT = (drift - half_var) / total_vol - d_value / (2.0 * params.T)
        scale = params.D * discount_domestic(params.r_d, params.discount_tenor)
    else:
        d_value = d1(params)
        d_dT = (drift + half_var) / total_vol - d_value / (2.0 * params.T)
        scale = params.S * discount_foreign(params.r_f, params.T)

    theta_annual = carry_rate * value - sign * scale * normal_pdf(d_value) * d_dT
    return theta_annual / DAYS_PER_YEAR


def digital_price_and_greeks(params: DigitalParams, option_type: OptionType) -> PricingResult:
    """
    Price plus the greeks defined for this payoff.

    Gamma and theta stay None for the foreign cash payoff.
    """
    return PricingResult(
        price=digital_price(params, option_type),
        delta=digital_delta(params, option_type),
        gamma=digital_gamma(params, option_type),
        vega=digital_vega(params, option_type),
        theta=digital_theta(params, option_type),
    )


def domestic_cash_sum(params: DigitalParams) -> float:
    """Call + Put for the domestic cash payoff: D·e^(-r_d·T2)."""
    return params.D * discount_domestic(params.r_d, params.discount_tenor)
