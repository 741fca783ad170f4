"""
Data types and structures for FX options pricing.

This module defines the immutable parameter records consumed by the
engines and the result containers they return. Every record is built
fresh per pricing call; nothing here holds shared state.
"""

from dataclasses import dataclass
from typing import Literal, Optional, Union

from fx_pricer.utils.constants import DEFAULT_TREE_STEPS

OptionType = Literal["call", "put"]
DigitalKind = Literal["cash_or_nothing", "asset_or_nothing"]
PayoffCurrency = Literal["domestic", "foreign"]
TreeType = Literal["crr", "trinomial"]
AverageType = Literal["arithmetic", "geometric"]
CombinationType = Literal["risk_reversal", "seagull"]
Direction = Literal["long", "short"]


@dataclass(frozen=True)
class GKParams:
    """
    Immutable Garman-Kohlhagen parameter set.

    Attributes:
        S: Spot exchange rate (domestic units per unit of foreign currency)
        K: Strike
        T: Time to expiry in years; drives d1/d2
        r_d: Domestic risk-free rate (continuous)
        r_f: Foreign risk-free rate (continuous), any sign
        sigma: Annualized volatility
        T2: Premium discounting tenor in years (settlement minus premium date).
            Defaults to T when not given.
    """
    S: float
    K: float
    T: float
    r_d: float
    r_f: float
    sigma: float
    T2: Optional[float] = None

    @property
    def discount_tenor(self) -> float:
        """Tenor used for premium and greek discounting."""
        return self.T if self.T2 is None else self.T2


@dataclass(frozen=True)
class DigitalParams(GKParams):
    """
    Digital option parameters.

    Attributes:
        D: Cash amount paid when in the money (cash-or-nothing only)
        digital_kind: "cash_or_nothing" or "asset_or_nothing"
        payoff_currency: "domestic" or "foreign" (cash-or-nothing only)
    """
    D: float = 1.0
    digital_kind: DigitalKind = "cash_or_nothing"
    payoff_currency: PayoffCurrency = "domestic"


@dataclass(frozen=True)
class AmericanParams(GKParams):
    """American option parameters: lattice size and tree family."""
    steps: int = DEFAULT_TREE_STEPS
    tree_type: TreeType = "crr"


@dataclass(frozen=True)
class AsianParams(GKParams):
    """
    Average-rate option parameters.

    Attributes:
        average_type: "arithmetic" or "geometric"
        observation_count: Number of averaging fixings after today; the
            spot fixing at t=0 is always included as one more observation.
    """
    average_type: AverageType = "arithmetic"
    observation_count: int = 252


@dataclass(frozen=True)
class CombinationShared:
    """Market data shared by every leg of a combination."""
    S: float
    T: float
    r_d: float
    r_f: float
    T2: Optional[float] = None


@dataclass(frozen=True)
class CombinationLeg:
    """One vanilla leg: strike and its own volatility."""
    strike: float
    sigma: float


@dataclass(frozen=True)
class RiskReversal:
    """Long = long call, short put. Short = short call, long put."""
    direction: Direction
    call: CombinationLeg
    put: CombinationLeg


@dataclass(frozen=True)
class Seagull:
    """Long call, short mid put, short low put (put_low.strike < put_mid.strike)."""
    call: CombinationLeg
    put_mid: CombinationLeg
    put_low: CombinationLeg


@dataclass
class Greeks:
    """
    Container for the full Garman-Kohlhagen greek set.

    Attributes:
        delta: ∂V/∂S
        gamma: ∂²V/∂S², per 1% spot move (raw / 100)
        vega: ∂V/∂σ, per 1% vol
        theta: Analytic ∂V/∂t, per calendar day
        rho_d: ∂V/∂r_d
        rho_f: ∂V/∂r_f
        vanna: S·√T·∂²V/∂S∂σ (= -vega·d2/σ), per 1% vol
        volga: ∂²V/∂σ², per 1% vol
        time_decay: (V(T-1d) - V(T+1d)) / 2
    """
    delta: float
    gamma: float
    vega: float
    theta: float
    rho_d: float
    rho_f: float
    vanna: float
    volga: float
    time_decay: float


@dataclass
class PricingResult:
    """Price per unit notional in domestic currency plus any available greeks."""
    price: float
    delta: Optional[float] = None
    gamma: Optional[float] = None
    vega: Optional[float] = None
    theta: Optional[float] = None
    rho_d: Optional[float] = None
    rho_f: Optional[float] = None
    vanna: Optional[float] = None
    volga: Optional[float] = None
    time_decay: Optional[float] = None

    def available(self) -> dict[str, float]:
        """Fields that were computed, in declaration order."""
        return {
            name: value
            for name, value in vars(self).items()
            if isinstance(value, float)
        }


@dataclass(frozen=True)
class BoundaryPoint:
    """Critical spot at a given time to expiry; exercise is optimal at or below it."""
    time_to_expiry: float
    spot: float


@dataclass
class AmericanResult(PricingResult):
    """
    American pricing output.

    Attributes:
        early_exercise_premium: American price minus the European value on T
        early_exercise_boundary: Put boundary, nearest expiry first; None for calls
    """
    early_exercise_premium: Optional[float] = None
    early_exercise_boundary: Optional[list[BoundaryPoint]] = None


@dataclass
class AsianResult(PricingResult):
    """
    Average-rate pricing output. The Monte Carlo fields are None for the closed form.

    Attributes:
        standard_error: Discounted standard error of the mean
        confidence_interval: 95% interval around the price
        num_paths: Paths actually simulated
    """
    standard_error: Optional[float] = None
    confidence_interval: Optional[tuple[float, float]] = None
    num_paths: Optional[int] = None


@dataclass
class LegResult:
    """One leg of a combination, already multiplied by its signed coefficient."""
    label: str
    coefficient: float
    price: float
    delta: float
    gamma: float
    vega: float
    theta: float
    rho_d: float
    rho_f: float
    vanna: float
    volga: float
    time_decay: float


@dataclass
class CombinationResult(PricingResult):
    """
    Netted combination output.

    Attributes:
        legs: Per-leg breakdown in leg order, when requested
    """
    legs: Optional[list[LegResult]] = None


@dataclass
class ArbitrageCheck:
    """
    Result from arbitrage validation.

    Attributes:
        is_valid: Whether the prices satisfy the no-arbitrage condition
        violations: List of specific violations detected
        details: Dictionary with detailed check results
    """
    is_valid: bool
    violations: list[str]
    details: dict[str, Union[bool, float]]
