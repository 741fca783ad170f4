"""
No-arbitrage diagnostics for FX option prices.

This module checks engine outputs (or quoted prices) against model-free
relationships:
- Garman-Kohlhagen price bounds
- Put-call parity on the discount tenor
- Cash-or-nothing domestic sum, C + P = D·e^(-r_d·T2)
- American-over-European dominance
- Monte Carlo confidence-interval coverage of a reference value
"""

import math
from typing import Optional

from fx_pricer.utils.constants import ARBITRAGE_TOLERANCE, PARITY_TOLERANCE
from fx_pricer.utils.types import ArbitrageCheck, AsianResult


def _tenor(T: float, T2: Optional[float]) -> float:
    return T if T2 is None else T2


def check_price_bounds(
    call_price: float,
    put_price: float,
    S: float,
    K: float,
    T: float,
    r_d: float,
    r_f: float,
    T2: Optional[float] = None,
    tolerance: float = ARBITRAGE_TOLERANCE,
) -> ArbitrageCheck:
    """
    Validate European FX option prices against no-arbitrage bounds.

    Checks:
    1. Call lower bound: C >= max(S·e^(-r_f·T2) - K·e^(-r_d·T2), 0)
    2. Call upper bound: C <= S·e^(-r_f·T2)
    3. Put lower bound: P >= max(K·e^(-r_d·T2) - S·e^(-r_f·T2), 0)
    4. Put upper bound: P <= K·e^(-r_d·T2)

    Args:
        call_price, put_price: Option prices
        S, K, T, r_d, r_f: Market and contract data
        T2: Discount tenor (T when absent)
        tolerance: Tolerance for floating point comparisons

    Returns:
        ArbitrageCheck with validation results
    """
    violations = []
    details = {}

    tenor = _tenor(T, T2)
    discount_spot = S * math.exp(-r_f * tenor)
    discount_strike = K * math.exp(-r_d * tenor)

    call_lower = max(discount_spot - discount_strike, 0.0)
    call_lower_ok = call_price >= call_lower - tolerance
    details["call_lower_bound"] = call_lower_ok
    if not call_lower_ok:
        violations.append(f"Call price {call_price:.6f} below lower bound {call_lower:.6f}")

    call_upper_ok = call_price <= discount_spot + tolerance
    details["call_upper_bound"] = call_upper_ok
    if not call_upper_ok:
        violations.append(f"Call price {call_price:.6f} above upper bound {discount_spot:.6f}")

    put_lower = max(discount_strike - discount_spot, 0.0)
    put_lower_ok = put_price >= put_lower - tolerance
    details["put_lower_bound"] = put_lower_ok
    if not put_lower_ok:
        violations.append(f"Put price {put_price:.6f} below lower bound {put_lower:.6f}")

    put_upper_ok = put_price <= discount_strike + tolerance
    details["put_upper_bound"] = put_upper_ok
    if not put_upper_ok:
        violations.append(f"Put price {put_price:.6f} above upper bound {discount_strike:.6f}")

    return ArbitrageCheck(is_valid=not violations, violations=violations, details=details)


def check_put_call_parity(
    call_price: float,
    put_price: float,
    S: float,
    K: float,
    T: float,
    r_d: float,
    r_f: float,
    T2: Optional[float] = None,
    tolerance: float = PARITY_TOLERANCE,
) -> ArbitrageCheck:
    """
    Validate FX put-call parity.

    Put-call parity:
        C - P = S·e^(-r_f·T2) - K·e^(-r_d·T2)
    """
    tenor = _tenor(T, T2)
    lhs = call_price - put_price
    rhs = S * math.exp(-r_f * tenor) - K * math.exp(-r_d * tenor)

    diff = abs(lhs - rhs)
    is_valid = diff < tolerance

    violations = []
    if not is_valid:
        violations.append(
            f"Put-call parity violated: C - P = {lhs:.8f}, "
            f"S·e^(-r_f·T2) - K·e^(-r_d·T2) = {rhs:.8f}, diff = {diff:.2e}"
        )

    details = {"parity_lhs": lhs, "parity_rhs": rhs, "difference": diff}
    return ArbitrageCheck(is_valid=is_valid, violations=violations, details=details)


def check_digital_sum(
    call_price: float,
    put_price: float,
    D: float,
    r_d: float,
    T: float,
    T2: Optional[float] = None,
    tolerance: float = PARITY_TOLERANCE,
) -> ArbitrageCheck:
    """
    Validate the cash-or-nothing (domestic payoff) sum.

    Exactly one of the call and the put pays D, so:
        C + P = D·e^(-r_d·T2)
    """
    lhs = call_price + put_price
    rhs = D * math.exp(-r_d * _tenor(T, T2))

    diff = abs(lhs - rhs)
    is_valid = diff < tolerance

    violations = []
    if not is_valid:
        violations.append(
            f"Digital sum violated: C + P = {lhs:.10f}, D·e^(-r_d·T2) = {rhs:.10f}, "
            f"diff = {diff:.2e}"
        )

    details = {"sum": lhs, "discounted_cash": rhs, "difference": diff}
    return ArbitrageCheck(is_valid=is_valid, violations=violations, details=details)


def check_american_dominance(
    american_price: float,
    european_price: float,
    option_type: str,
    tolerance: float = ARBITRAGE_TOLERANCE,
) -> ArbitrageCheck:
    """
    Check that the early-exercise right has non-negative value.

    Condition: American >= European - tolerance. The tolerance absorbs
    lattice discretization error.
    """
    premium = american_price - european_price
    is_valid = premium >= -tolerance

    violations = []
    if not is_valid:
        violations.append(
            f"American {option_type} {american_price:.6f} below European "
            f"{european_price:.6f} by {-premium:.6f}"
        )

    details = {
        "american_price": american_price,
        "european_price": european_price,
        "early_exercise_premium": premium,
    }
    return ArbitrageCheck(is_valid=is_valid, violations=violations, details=details)


def check_confidence_interval(result: AsianResult, reference_price: float) -> ArbitrageCheck:
    """
    Check that a Monte Carlo confidence interval covers a reference value.

    A 95% interval misses the true value about one run in twenty, so a
    single failure is a warning sign rather than proof of a bug.

    Raises:
        ValueError: If the result carries no confidence interval
    """
    if result.confidence_interval is None:
        raise ValueError("result has no confidence interval (closed-form price?)")

    lower, upper = result.confidence_interval
    is_valid = lower <= reference_price <= upper

    violations = []
    if not is_valid:
        violations.append(
            f"Reference {reference_price:.6f} outside confidence interval "
            f"[{lower:.6f}, {upper:.6f}]"
        )

    details = {"lower": lower, "upper": upper, "reference": reference_price}
    return ArbitrageCheck(is_valid=is_valid, violations=violations, details=details)
