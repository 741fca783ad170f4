"""
Average-rate (Asian) FX options.

Payoff on the average A of N + 1 fixings (today's spot plus N equally
spaced fixings up to expiry):

    Call = max(A - K, 0)        Put = max(K - A, 0)

Arithmetic averages have no closed form and are priced by Monte Carlo.
Geometric averages are lognormal, which gives an exact closed form for
this fixing schedule:

    σ_g = σ · √((2N + 1) / (6(N + 1)))
    F_G = S · exp((r_d - r_f - σ²/2) · T/2 + σ_g²·T/2)
    V   = e^(-r_d·T) · [F_G·N(d1) - K·N(d2)]   (call)

with d1 = [ln(F_G/K) + σ_g²T/2] / (σ_g√T), d2 = d1 - σ_g√T. The geometric
value is mainly a low-variance benchmark for the simulator.
"""

import logging
import math
from typing import Optional

from fx_pricer.core.discounting import discount_domestic, option_sign
from fx_pricer.core.garman_kohlhagen import garman_kohlhagen_price
from fx_pricer.solvers.monte_carlo import NormalSampler, simulate_average_rate
from fx_pricer.utils.constants import CONFIDENCE_Z, DEFAULT_MC_PATHS
from fx_pricer.utils.types import AsianParams, AsianResult, GKParams, OptionType

logger = logging.getLogger(__name__)


def geometric_average_params(params: AsianParams) -> GKParams:
    """
    Garman-Kohlhagen inputs whose forward and variance match the geometric average.

    The adjusted spot S_adj = F_G·e^(-(r_d - r_f)T) makes the model forward
    equal F_G, and σ_g carries the variance of ln(G) over the expiry clock.
    """
    N = max(1, params.observation_count)
    carry = params.r_d - params.r_f
    sigma_g = params.sigma * math.sqrt((2 * N + 1) / (6.0 * (N + 1)))

    log_forward = (
        (carry - 0.5 * params.sigma * params.sigma) * params.T / 2.0
        + 0.5 * sigma_g * sigma_g * params.T
    )
    adjusted_spot = params.S * math.exp(log_forward - carry * params.T)

    return GKParams(
        S=adjusted_spot,
        K=params.K,
        T=params.T,
        r_d=params.r_d,
        r_f=params.r_f,
        sigma=sigma_g,
    )


def price_asian_geometric(params: AsianParams, option_type: OptionType) -> AsianResult:
    """
    Closed-form price of a geometric-average option.

    Args:
        params: Asian parameters (average_type is not consulted)
        option_type: "call" or "put"

    Returns:
        AsianResult carrying only the price
    """
    return AsianResult(price=garman_kohlhagen_price(geometric_average_params(params), option_type))


def price_asian_monte_carlo(
    params: AsianParams,
    option_type: OptionType,
    num_paths: int = DEFAULT_MC_PATHS,
    sampler: Optional[NormalSampler] = None,
    workers: int = 1,
    antithetic: bool = False,
) -> AsianResult:
    """
    Monte Carlo price of an average-rate option.

    Args:
        params: Asian parameters; average_type picks the path average
        option_type: "call" or "put"
        num_paths: Number of simulated paths
        sampler: Normal generator (seeded numpy Generator, SobolSampler, ...)
        workers: Threads used to evaluate batches
        antithetic: Use antithetic variates

    Returns:
        AsianResult with price, standard error, 95% confidence interval
        and the number of paths actually simulated

    Formula:
        price = e^(-r_d·T) · mean(payoff)
        SE    = e^(-r_d·T) · √(s² / n)
        CI    = price ± 1.96 · SE
    """
    option_sign(option_type)
    N = max(1, params.observation_count)

    statistics = simulate_average_rate(
        params.S,
        params.K,
        params.T,
        params.r_d,
        params.r_f,
        params.sigma,
        option_type,
        params.average_type,
        num_fixings=N,
        num_paths=num_paths,
        sampler=sampler,
        workers=workers,
        antithetic=antithetic,
    )

    D_d = discount_domestic(params.r_d, params.T)
    price = D_d * statistics.mean
    standard_error = D_d * statistics.standard_error
    half_width = CONFIDENCE_Z * standard_error

    return AsianResult(
        price=price,
        standard_error=standard_error,
        confidence_interval=(price - half_width, price + half_width),
        num_paths=2 * statistics.count if antithetic else statistics.count,
    )


def price_asian(
    params: AsianParams,
    option_type: OptionType,
    num_paths: int = DEFAULT_MC_PATHS,
    use_monte_carlo: bool = True,
    sampler: Optional[NormalSampler] = None,
    workers: int = 1,
    antithetic: bool = False,
) -> AsianResult:
    """
    Price an average-rate option, by simulation or (geometric only) in closed form.

    Raises:
        ValueError: If average_type is unknown, or an arithmetic average is
            requested without Monte Carlo
    """
    if params.average_type == "geometric" and not use_monte_carlo:
        return price_asian_geometric(params, option_type)
    if params.average_type == "arithmetic" and not use_monte_carlo:
        raise ValueError("arithmetic averages have no closed form; use_monte_carlo must be True")
    if params.average_type not in ("arithmetic", "geometric"):
        raise ValueError(
            f"average_type must be 'arithmetic' or 'geometric', got '{params.average_type}'"
        )

    logger.debug(
        "Pricing %s %s Asian by Monte Carlo: N=%d, paths=%d",
        params.average_type, option_type, params.observation_count, num_paths,
    )
    return price_asian_monte_carlo(
        params,
        option_type,
        num_paths=num_paths,
        sampler=sampler,
        workers=workers,
        antithetic=antithetic,
    )
