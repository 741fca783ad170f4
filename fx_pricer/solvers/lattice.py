"""
Recombining lattices for early-exercisable FX options.

Two tree families share one backward-induction driver:

    CRR binomial:
        u = e^(σ√Δt), d = 1/u
        q = (e^((r_d - r_f)Δt) - d) / (u - d)

    Moment-matched trinomial:
        u = e^(σ√(2Δt)), d = 1/u, middle factor 1
        (p_u, p_m, p_d) match the first two moments of S(t+Δt)/S(t)

Both discount one step at e^(-r_d·Δt). Slices are flat numpy arrays indexed
by node position, top node first: slice i of the CRR tree holds the spots
S·u^(i-2j), j = 0..i, and slice i of the trinomial tree holds S·u^(i-j),
j = 0..2i.

The tree is grown a little before today (two CRR steps, one trinomial step)
so that the slice standing at today's date carries three spots (S·u^k, S,
S·d^k) rather than one. Its middle node is exactly the n-step price; the
outer nodes give delta and gamma from the same induction.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from fx_pricer.core.discounting import option_sign
from fx_pricer.utils.types import BoundaryPoint, OptionType, TreeType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LatticeGeometry:
    """
    Per-step parameters of one lattice.

    Attributes:
        tree_type: "crr" or "trinomial"
        dt: Step length in years
        up: Up factor u (down factor is 1/u)
        probabilities: Branch probabilities, top branch first
        step_discount: e^(-r_d·Δt)
    """
    tree_type: TreeType
    dt: float
    up: float
    probabilities: tuple[float, ...]
    step_discount: float

    @property
    def anchor_slice(self) -> int:
        """Index of the slice standing at today's date in the extended tree."""
        return 2 if self.tree_type == "crr" else 1


@dataclass
class LatticeValuation:
    """
    Output of one backward induction.

    Attributes:
        spots: Spots of today's slice, top node first
        values: Option values on today's slice; values[mid] is the price
        boundary: Put early-exercise boundary, nearest to expiry first
    """
    spots: np.ndarray
    values: np.ndarray
    boundary: list[BoundaryPoint] = field(default_factory=list)

    @property
    def price(self) -> float:
        return float(self.values[len(self.values) // 2])

    def delta(self) -> float:
        """Central difference across the outer nodes of today's slice."""
        return float(
            (self.values[0] - self.values[-1]) / (self.spots[0] - self.spots[-1])
        )

    def gamma(self) -> float:
        """Raw ∂²V/∂S² from the three nodes of today's slice."""
        mid = len(self.values) // 2
        up_slope = (self.values[0] - self.values[mid]) / (self.spots[0] - self.spots[mid])
        down_slope = (self.values[mid] - self.values[-1]) / (self.spots[mid] - self.spots[-1])
        return float((up_slope - down_slope) / (0.5 * (self.spots[0] - self.spots[-1])))


def crr_geometry(sigma: float, r_d: float, r_f: float, dt: float) -> LatticeGeometry:
    """
    Cox-Ross-Rubinstein step parameters.

    The risk-neutral probability leaves [0, 1] when the carry per step
    outruns the volatility per step (|r_d - r_f|·√Δt > σ roughly). It is
    clipped back into range and a warning is logged.
    """
    up = math.exp(sigma * math.sqrt(dt))
    down = 1.0 / up
    q = (math.exp((r_d - r_f) * dt) - down) / (up - down)

    if not 0.0 <= q <= 1.0:
        logger.warning(
            "CRR probability %.6f outside [0, 1] (sigma=%.6f, dt=%.6f); clipping", q, sigma, dt
        )
        q = min(max(q, 0.0), 1.0)

    return LatticeGeometry(
        tree_type="crr",
        dt=dt,
        up=up,
        probabilities=(q, 1.0 - q),
        step_discount=math.exp(-r_d * dt),
    )


def trinomial_geometry(sigma: float, r_d: float, r_f: float, dt: float) -> LatticeGeometry:
    """
    Moment-matched trinomial step parameters.

    Formulas (M = e^((r_d - r_f)Δt), V = M²·e^(σ²Δt), a = M - 1, b = V - 1):
        p_u = (a(d + 1) - b) / ((u - 1)(d - u))
        p_d = (b - a(u + 1)) / ((d - 1)(d - u))
        p_m = 1 - p_u - p_d

    Each probability is clamped to [0, 1] and the triple renormalized.
    """
    up = math.exp(sigma * math.sqrt(2.0 * dt))
    down = 1.0 / up

    growth = math.exp((r_d - r_f) * dt)
    second_moment = growth * growth * math.exp(sigma * sigma * dt)
    a = growth - 1.0
    b = second_moment - 1.0

    p_up = (a * (down + 1.0) - b) / ((up - 1.0) * (down - up))
    p_down = (b - a * (up + 1.0)) / ((down - 1.0) * (down - up))
    p_mid = 1.0 - p_up - p_down

    raw = (p_up, p_mid, p_down)
    clamped = tuple(min(max(p, 0.0), 1.0) for p in raw)
    if clamped != raw:
        logger.warning(
            "Trinomial probabilities %s clamped into [0, 1] (sigma=%.6f, dt=%.6f)",
            tuple(round(p, 6) for p in raw), sigma, dt,
        )
    total = sum(clamped)
    probabilities = tuple(p / total for p in clamped)

    return LatticeGeometry(
        tree_type="trinomial",
        dt=dt,
        up=up,
        probabilities=probabilities,
        step_discount=math.exp(-r_d * dt),
    )


def build_geometry(
    tree_type: TreeType, sigma: float, r_d: float, r_f: float, dt: float
) -> LatticeGeometry:
    """
    Dispatch on tree type.

    Raises:
        ValueError: If tree_type is not "crr" or "trinomial"
    """
    if tree_type == "crr":
        return crr_geometry(sigma, r_d, r_f, dt)
    if tree_type == "trinomial":
        return trinomial_geometry(sigma, r_d, r_f, dt)
    raise ValueError(f"tree_type must be 'crr' or 'trinomial', got '{tree_type}'")


def slice_spots(S: float, geometry: LatticeGeometry, i: int) -> np.ndarray:
    """Spots on slice i, top node first."""
    if geometry.tree_type == "crr":
        exponents = i - 2 * np.arange(i + 1)
    else:
        exponents = i - np.arange(2 * i + 1)
    return S * geometry.up ** exponents.astype(float)


def continuation(values: np.ndarray, geometry: LatticeGeometry) -> np.ndarray:
    """Discounted expectation of the next slice, one entry per node of the current slice."""
    if geometry.tree_type == "crr":
        q_up, q_down = geometry.probabilities
        expected = q_up * values[:-1] + q_down * values[1:]
    else:
        p_up, p_mid, p_down = geometry.probabilities
        expected = p_up * values[:-2] + p_mid * values[1:-1] + p_down * values[2:]
    return geometry.step_discount * expected


def intrinsic_values(spots: np.ndarray, K: float, option_type: OptionType) -> np.ndarray:
    """max(±(S - K), 0) on a slice."""
    sign = option_sign(option_type)
    return np.maximum(sign * (spots - K), 0.0)


def value_on_lattice(
    S: float,
    K: float,
    T: float,
    r_d: float,
    r_f: float,
    sigma: float,
    option_type: OptionType,
    steps: int,
    tree_type: TreeType = "crr",
    american: bool = True,
) -> LatticeValuation:
    """
    Run backward induction from expiry down to today's slice.

    Args:
        S, K, T, r_d, r_f, sigma: Market and contract data (T > 0, σ > 0)
        option_type: "call" or "put"
        steps: Number of steps between today and expiry (Δt = T / steps)
        tree_type: "crr" or "trinomial"
        american: Allow exercise at every node; False gives the European value

    Returns:
        LatticeValuation for today's slice, with the exercise boundary
        filled in for American puts

    Raises:
        ValueError: If σ√T = 0 (the tree collapses onto a single path)
    """
    option_sign(option_type)
    if sigma * math.sqrt(T) == 0.0:
        raise ValueError("lattice requires sigma * sqrt(T) > 0")

    dt = T / steps
    geometry = build_geometry(tree_type, sigma, r_d, r_f, dt)
    anchor = geometry.anchor_slice
    total_steps = steps + anchor

    logger.debug(
        "%s lattice: steps=%d (+%d), dt=%.6g, u=%.8f, p=%s",
        geometry.tree_type, steps, anchor, dt, geometry.up,
        tuple(round(p, 6) for p in geometry.probabilities),
    )

    track_boundary = american and option_type == "put"
    boundary: list[BoundaryPoint] = []

    values = intrinsic_values(slice_spots(S, geometry, total_steps), K, option_type)

    for i in range(total_steps - 1, anchor - 1, -1):
        held = continuation(values, geometry)
        if not american:
            values = held
            continue

        spots = slice_spots(S, geometry, i)
        exercise = intrinsic_values(spots, K, option_type)
        values = np.maximum(exercise, held)

        if track_boundary:
            early = (exercise > held) & (exercise > 0.0)
            if early.any():
                boundary.append(
                    BoundaryPoint(
                        time_to_expiry=(total_steps - i) * dt,
                        spot=float(spots[early].max()),
                    )
                )

    return LatticeValuation(
        spots=slice_spots(S, geometry, anchor),
        values=values,
        boundary=boundary,
    )
