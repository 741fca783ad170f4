"""
Multi-leg vanilla structures: risk reversals and seagulls.

Each leg is a Garman-Kohlhagen option on the shared market data with its
own strike and volatility. The structure's price and every greek are the
coefficient-weighted sums over legs:

    Risk reversal, long:   +Call(K_call) - Put(K_put)
    Risk reversal, short:  -Call(K_call) + Put(K_put)
    Seagull:               +Call(K_high) - Put(K_mid) - Put(K_low),  K_low < K_mid
"""

from dataclasses import fields
from typing import Union

from fx_pricer.core.garman_kohlhagen import price_and_greeks
from fx_pricer.utils.types import (
    CombinationLeg,
    CombinationResult,
    CombinationShared,
    CombinationType,
    GKParams,
    Greeks,
    LegResult,
    OptionType,
    RiskReversal,
    Seagull,
)

_GREEK_FIELDS = tuple(f.name for f in fields(Greeks))


def _price_leg(
    shared: CombinationShared,
    leg: CombinationLeg,
    option_type: OptionType,
    coefficient: float,
    label: str,
) -> LegResult:
    """Price one leg and scale price and greeks by its signed coefficient."""
    params = GKParams(
        S=shared.S,
        K=leg.strike,
        T=shared.T,
        r_d=shared.r_d,
        r_f=shared.r_f,
        sigma=leg.sigma,
        T2=shared.T2,
    )
    result = price_and_greeks(params, option_type)
    scaled = {name: coefficient * getattr(result, name) for name in _GREEK_FIELDS}
    return LegResult(
        label=label,
        coefficient=coefficient,
        price=coefficient * result.price,
        **scaled,
    )


def _net(legs: list[LegResult], with_legs: bool) -> CombinationResult:
    """Sum price and greeks across already-scaled legs."""
    totals = {name: sum(getattr(leg, name) for leg in legs) for name in _GREEK_FIELDS}
    return CombinationResult(
        price=sum(leg.price for leg in legs),
        legs=legs if with_legs else None,
        **totals,
    )


def price_risk_reversal(
    shared: CombinationShared, structure: RiskReversal, with_legs: bool = False
) -> CombinationResult:
    """
    Price a risk reversal.

    Args:
        shared: Spot, tenors and rates common to both legs
        structure: Direction plus call and put legs
        with_legs: Attach the per-leg breakdown (call first)

    Returns:
        CombinationResult with the netted price and greeks

    Raises:
        ValueError: If direction is not "long" or "short"
    """
    if structure.direction == "long":
        call_sign = 1.0
    elif structure.direction == "short":
        call_sign = -1.0
    else:
        raise ValueError(f"direction must be 'long' or 'short', got '{structure.direction}'")

    legs = [
        _price_leg(shared, structure.call, "call", call_sign, "Call(K_call)"),
        _price_leg(shared, structure.put, "put", -call_sign, "Put(K_put)"),
    ]
    return _net(legs, with_legs)


def price_seagull(
    shared: CombinationShared, structure: Seagull, with_legs: bool = False
) -> CombinationResult:
    """
    Price a seagull: long call, short mid put, short low put.

    Raises:
        ValueError: If put_low.strike >= put_mid.strike
    """
    if structure.put_low.strike >= structure.put_mid.strike:
        raise ValueError(
            f"seagull requires put_low.strike < put_mid.strike, got "
            f"{structure.put_low.strike} >= {structure.put_mid.strike}"
        )

    legs = [
        _price_leg(shared, structure.call, "call", 1.0, "Call(K_high)"),
        _price_leg(shared, structure.put_mid, "put", -1.0, "Put(K_mid)"),
        _price_leg(shared, structure.put_low, "put", -1.0, "Put(K_low)"),
    ]
    return _net(legs, with_legs)


def price_combination(
    combination_type: CombinationType,
    shared: CombinationShared,
    structure: Union[RiskReversal, Seagull],
    with_legs: bool = False,
) -> CombinationResult:
    """
    Dispatch on combination type.

    Raises:
        ValueError: If combination_type is unknown or does not match the structure
    """
    if combination_type == "risk_reversal":
        if not isinstance(structure, RiskReversal):
            raise ValueError("risk_reversal requires a RiskReversal structure")
        return price_risk_reversal(shared, structure, with_legs=with_legs)
    if combination_type == "seagull":
        if not isinstance(structure, Seagull):
            raise ValueError("seagull requires a Seagull structure")
        return price_seagull(shared, structure, with_legs=with_legs)
    raise ValueError(
        f"combination_type must be 'risk_reversal' or 'seagull', got '{combination_type}'"
    )
