"""
American-style FX options on CRR binomial and trinomial lattices.

The holder may exercise at any node, so each backward step keeps
max(intrinsic, discounted continuation). There is no closed form; greeks
come from the lattice itself and from bump-and-reprice:

    delta, gamma      read off today's slice of an extended lattice
    vega, volga       central differences on a 1bp vol bump
    vanna             S·√T times the central difference of lattice deltas
    theta             V(T - 1d) - V(T), steps rescaled to keep Δt
    time_decay        (V(T - 1d) - V(T + 1d)) / 2, steps rescaled
    rho_d, rho_f      forward differences on a 1% rate bump

Units follow the Garman-Kohlhagen engine: gamma, vega, vanna and volga
per 1% move, theta and time decay per calendar day.

The lattice discounts on the expiry tenor T. A separate settlement tenor
T2 on the parameters is ignored here.
"""

import logging
import math
from dataclasses import replace

import numpy as np

from fx_pricer.core.discounting import option_sign
from fx_pricer.core.garman_kohlhagen import garman_kohlhagen_price
from fx_pricer.solvers.lattice import LatticeValuation, value_on_lattice
from fx_pricer.utils.constants import (
    LATTICE_RATE_BUMP,
    LATTICE_SPOT_BUMP,
    LATTICE_VOL_BUMP,
    MIN_TREE_STEPS,
    ONE_DAY,
    PER_ONE_PERCENT,
)
from fx_pricer.utils.types import AmericanParams, AmericanResult, GKParams, OptionType

logger = logging.getLogger(__name__)


def _is_degenerate(params: AmericanParams) -> bool:
    return params.T <= 0.0 or params.sigma * math.sqrt(params.T) == 0.0


def _deterministic_value(params: AmericanParams, option_type: OptionType) -> float:
    """
    Value when the spot follows its forward path without diffusion.

    The holder picks the best exercise date on the lattice time grid:
        max_i e^(-r_d·t_i) · intrinsic(S·e^((r_d - r_f)·t_i))
    """
    sign = option_sign(option_type)
    if params.T <= 0.0:
        return max(sign * (params.S - params.K), 0.0)

    times = np.linspace(0.0, params.T, params.steps + 1)
    forwards = params.S * np.exp((params.r_d - params.r_f) * times)
    payoffs = np.exp(-params.r_d * times) * np.maximum(sign * (forwards - params.K), 0.0)
    return float(payoffs.max())


def _valuation(params: AmericanParams, option_type: OptionType) -> LatticeValuation:
    return value_on_lattice(
        params.S,
        params.K,
        params.T,
        params.r_d,
        params.r_f,
        params.sigma,
        option_type,
        steps=params.steps,
        tree_type=params.tree_type,
    )


def american_price(params: AmericanParams, option_type: OptionType) -> float:
    """
    Price an American FX option.

    Args:
        params: American parameters (lattice steps and tree type included)
        option_type: "call" or "put"

    Returns:
        Premium in domestic currency per unit of foreign notional

    Raises:
        ValueError: If option_type or tree_type is unknown

    Examples:
        >>> p = AmericanParams(S=100, K=100, T=0.25, r_d=0.05, r_f=0.02, sigma=0.2)
        >>> american_price(p, "put") >= 3.45
        True
    """
    if _is_degenerate(params):
        option_sign(option_type)
        return _deterministic_value(params, option_type)
    return _valuation(params, option_type).price


def rescale_steps(steps: int, T: float, new_T: float) -> int:
    """
    Step count for a shifted expiry that keeps Δt close to T / steps.

    The result keeps the parity of the given count so that CRR
    odd/even oscillation does not leak into time differences.
    """
    if T <= 0.0:
        return steps
    scaled = int(round(steps * new_T / T))
    if scaled % 2 != steps % 2:
        scaled += 1
    return max(scaled, MIN_TREE_STEPS)


def _price_at_expiry(params: AmericanParams, option_type: OptionType, new_T: float) -> float:
    new_T = max(new_T, 0.0)
    steps = rescale_steps(params.steps, params.T, new_T)
    logger.debug("Expiry shifted %.6f -> %.6f, steps %d -> %d", params.T, new_T, params.steps, steps)
    return american_price(replace(params, T=new_T, steps=steps), option_type)


def _vol_greeks(
    params: AmericanParams, option_type: OptionType, base: LatticeValuation
) -> tuple[float, float, float]:
    """(vega, vanna, volga) per 1% vol from a two-sided vol bump."""
    bump_up = LATTICE_VOL_BUMP
    bump_down = min(LATTICE_VOL_BUMP, params.sigma / 2.0)

    up = _valuation(replace(params, sigma=params.sigma + bump_up), option_type)
    down = _valuation(replace(params, sigma=params.sigma - bump_down), option_type)

    width = bump_up + bump_down
    vega_raw = (up.price - down.price) / width
    vanna_raw = params.S * math.sqrt(params.T) * (up.delta() - down.delta()) / width
    volga_raw = 2.0 * (
        (up.price - base.price) / bump_up - (base.price - down.price) / bump_down
    ) / width

    return (
        vega_raw / PER_ONE_PERCENT,
        vanna_raw / PER_ONE_PERCENT,
        volga_raw / PER_ONE_PERCENT,
    )


def _rate_rhos(params: AmericanParams, option_type: OptionType, price: float) -> tuple[float, float]:
    """Forward-difference (rho_d, rho_f)."""
    bumped_d = american_price(replace(params, r_d=params.r_d + LATTICE_RATE_BUMP), option_type)
    bumped_f = american_price(replace(params, r_f=params.r_f + LATTICE_RATE_BUMP), option_type)
    return (
        (bumped_d - price) / LATTICE_RATE_BUMP,
        (bumped_f - price) / LATTICE_RATE_BUMP,
    )


def _european_price(params: AmericanParams, option_type: OptionType) -> float:
    """Garman-Kohlhagen value on the lattice clock (no separate T2)."""
    european = GKParams(
        S=params.S,
        K=params.K,
        T=params.T,
        r_d=params.r_d,
        r_f=params.r_f,
        sigma=params.sigma,
    )
    return garman_kohlhagen_price(european, option_type)


def price_american(params: AmericanParams, option_type: OptionType) -> AmericanResult:
    """
    Price an American FX option with numerical greeks.

    Args:
        params: American parameters
        option_type: "call" or "put"

    Returns:
        AmericanResult with price, the full greek set, the early-exercise
        premium over the European value and, for puts, the exercise
        boundary as (time_to_expiry, critical spot) points ordered from
        nearest expiry outwards. Calls carry no boundary (None).

    Notes:
        When σ√T = 0 the lattice collapses. The price is then the best
        discounted intrinsic value along the forward path, delta comes
        from a 0.001% relative spot bump, and gamma and the volatility
        greeks are 0.
    """
    option_sign(option_type)

    if _is_degenerate(params):
        price = _deterministic_value(params, option_type)
        h = params.S * LATTICE_SPOT_BUMP
        spot_up = _deterministic_value(replace(params, S=params.S + h), option_type)
        spot_down = _deterministic_value(replace(params, S=params.S - h), option_type)
        delta = (spot_up - spot_down) / (2.0 * h)
        gamma = vega = vanna = volga = 0.0
        boundary = [] if option_type == "put" else None
    else:
        base = _valuation(params, option_type)
        price = base.price
        delta = base.delta()
        gamma = base.gamma() / PER_ONE_PERCENT
        vega, vanna, volga = _vol_greeks(params, option_type, base)
        boundary = base.boundary if option_type == "put" else None

    earlier = _price_at_expiry(params, option_type, params.T - ONE_DAY)
    later = _price_at_expiry(params, option_type, params.T + ONE_DAY)
    rho_d, rho_f = _rate_rhos(params, option_type, price)

    return AmericanResult(
        price=price,
        delta=delta,
        gamma=gamma,
        vega=vega,
        theta=earlier - price,
        rho_d=rho_d,
        rho_f=rho_f,
        vanna=vanna,
        volga=volga,
        time_decay=(earlier - later) / 2.0,
        early_exercise_premium=price - _european_price(params, option_type),
        early_exercise_boundary=boundary,
    )
