"""
Scale a per-unit pricing result to a traded position.

Engines price one unit of foreign notional. A desk ticket also wants the
premium in both currencies and the greeks of the whole position, signed
by the trade direction.
"""

from dataclasses import dataclass, field

from fx_pricer.utils.types import Direction, PricingResult


@dataclass
class PositionView:
    """
    Position-level figures.

    Attributes:
        premium: Premium in domestic currency (price × notional)
        premium_foreign: Premium in foreign currency (premium / spot)
        premium_pct: Premium as a percentage of spot
        greeks: Greek name -> greek × notional × direction sign, for every
            greek the engine provided
    """
    premium: float
    premium_foreign: float
    premium_pct: float
    greeks: dict[str, float] = field(default_factory=dict)


def position_view(
    result: PricingResult, spot: float, notional: float, direction: Direction = "long"
) -> PositionView:
    """
    Build a PositionView from a per-unit result.

    Args:
        result: Any pricing result (vanilla, digital, American, Asian, combination)
        spot: Spot used for pricing
        notional: Foreign notional
        direction: "long" or "short"

    Raises:
        ValueError: If direction is unknown
    """
    if direction == "long":
        sign = 1.0
    elif direction == "short":
        sign = -1.0
    else:
        raise ValueError(f"direction must be 'long' or 'short', got '{direction}'")

    premium = result.price * notional
    greeks = {
        name: value * notional * sign
        for name, value in result.available().items()
        if name not in ("price", "early_exercise_premium", "standard_error")
    }

    return PositionView(
        premium=premium,
        premium_foreign=premium / spot,
        premium_pct=result.price / spot * 100.0,
        greeks=greeks,
    )
