"""
Caller-side input validation for the pricing engines.

The engines assume well-formed inputs and do not check them. Front ends
(the CLI, notebooks, services) run these validators first. Every
validator collects all field problems before raising, so a user sees the
complete list at once.
"""

import math
from typing import Optional

from fx_pricer.utils.constants import MAX_TREE_STEPS, MAX_VOLATILITY, MIN_MC_PATHS, MIN_TREE_STEPS
from fx_pricer.utils.types import (
    AmericanParams,
    AsianParams,
    CombinationLeg,
    CombinationShared,
    DigitalParams,
    GKParams,
    RiskReversal,
    Seagull,
)


class InvalidParametersError(ValueError):
    """
    Raised when pricing inputs fail validation.

    Attributes:
        errors: Mapping of field name to a human-readable problem
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        summary = "; ".join(f"{name}: {message}" for name, message in errors.items())
        super().__init__(f"Invalid pricing parameters: {summary}")


def _finite(errors: dict[str, str], name: str, value: float) -> bool:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        errors[name] = f"must be a finite number, got {value!r}"
        return False
    return True


def _positive(errors: dict[str, str], name: str, value: float) -> None:
    if _finite(errors, name, value) and value <= 0:
        errors[name] = f"must be > 0, got {value}"


def _non_negative(errors: dict[str, str], name: str, value: float) -> None:
    if _finite(errors, name, value) and value < 0:
        errors[name] = f"must be >= 0, got {value}"


def _volatility(errors: dict[str, str], name: str, value: float, strict: bool = False) -> None:
    if not _finite(errors, name, value):
        return
    if strict and value <= 0:
        errors[name] = f"must be > 0, got {value}"
    elif value < 0:
        errors[name] = f"must be >= 0, got {value}"
    elif value > MAX_VOLATILITY:
        errors[name] = f"must be <= {MAX_VOLATILITY:.0%}, got {value:.2%}"


def _raise_if_any(errors: dict[str, str]) -> None:
    if errors:
        raise InvalidParametersError(errors)


def _market_errors(
    S: float, T: float, r_d: float, r_f: float, T2: Optional[float]
) -> dict[str, str]:
    errors: dict[str, str] = {}
    _positive(errors, "S", S)
    _non_negative(errors, "T", T)
    _finite(errors, "r_d", r_d)
    _finite(errors, "r_f", r_f)
    if T2 is not None:
        _non_negative(errors, "T2", T2)
    return errors


def _gk_errors(params: GKParams) -> dict[str, str]:
    errors = _market_errors(params.S, params.T, params.r_d, params.r_f, params.T2)
    _positive(errors, "K", params.K)
    _volatility(errors, "sigma", params.sigma)
    return errors


def validate_gk_params(params: GKParams) -> None:
    """
    Check a Garman-Kohlhagen parameter set.

    Rules: finite numbers, S > 0, K > 0, T >= 0, T2 >= 0 when given,
    0 <= sigma <= 200%.

    Raises:
        InvalidParametersError: Listing every failing field
    """
    _raise_if_any(_gk_errors(params))


def validate_digital_params(params: DigitalParams) -> None:
    """GK rules plus D > 0 for cash-or-nothing payoffs."""
    errors = _gk_errors(params)
    if params.digital_kind == "cash_or_nothing":
        _positive(errors, "D", params.D)
    _raise_if_any(errors)


def validate_american_params(params: AmericanParams) -> None:
    """GK rules plus an integer step count in [2, 1000]."""
    errors = _gk_errors(params)
    if not isinstance(params.steps, int) or isinstance(params.steps, bool):
        errors["steps"] = f"must be an integer, got {params.steps!r}"
    elif not MIN_TREE_STEPS <= params.steps <= MAX_TREE_STEPS:
        errors["steps"] = f"must be in [{MIN_TREE_STEPS}, {MAX_TREE_STEPS}], got {params.steps}"
    _raise_if_any(errors)


def validate_asian_params(params: AsianParams, num_paths: Optional[int] = None) -> None:
    """GK rules plus observation_count >= 1 and, when given, num_paths >= 2."""
    errors = _gk_errors(params)
    if not isinstance(params.observation_count, int) or params.observation_count < 1:
        errors["observation_count"] = f"must be an integer >= 1, got {params.observation_count!r}"
    if num_paths is not None and (not isinstance(num_paths, int) or num_paths < MIN_MC_PATHS):
        errors["num_paths"] = f"must be an integer >= {MIN_MC_PATHS}, got {num_paths!r}"
    _raise_if_any(errors)


def validate_combination_shared(shared: CombinationShared) -> None:
    """Market data rules shared by every combination leg."""
    _raise_if_any(_market_errors(shared.S, shared.T, shared.r_d, shared.r_f, shared.T2))


def _leg_errors(errors: dict[str, str], prefix: str, leg: CombinationLeg) -> None:
    _positive(errors, f"{prefix}.strike", leg.strike)
    _volatility(errors, f"{prefix}.sigma", leg.sigma, strict=True)


def validate_risk_reversal(structure: RiskReversal) -> None:
    """Direction tag plus positive strikes and vols on both legs."""
    errors: dict[str, str] = {}
    if structure.direction not in ("long", "short"):
        errors["direction"] = f"must be 'long' or 'short', got {structure.direction!r}"
    _leg_errors(errors, "call", structure.call)
    _leg_errors(errors, "put", structure.put)
    _raise_if_any(errors)


def validate_seagull(structure: Seagull) -> None:
    """Positive strikes and vols on all legs, and put_low.strike < put_mid.strike."""
    errors: dict[str, str] = {}
    _leg_errors(errors, "call", structure.call)
    _leg_errors(errors, "put_mid", structure.put_mid)
    _leg_errors(errors, "put_low", structure.put_low)
    if (
        "put_low.strike" not in errors
        and "put_mid.strike" not in errors
        and structure.put_low.strike >= structure.put_mid.strike
    ):
        errors["put_low.strike"] = (
            f"must be below put_mid.strike ({structure.put_mid.strike}), "
            f"got {structure.put_low.strike}"
        )
    _raise_if_any(errors)
