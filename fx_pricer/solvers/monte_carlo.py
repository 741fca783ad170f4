"""
Monte Carlo simulation of average-rate FX payoffs.

Spot paths follow risk-neutral geometric Brownian motion with the FX drift:

    S(t + Δt) = S(t) · exp((r_d - r_f - σ²/2)Δt + σ√Δt · Z)

with Δt = T / N over N fixings. The fixing at t = 0 (today's spot) is
always included, so each average runs over N + 1 observations.

Paths are generated in batches. Each batch reduces to a PayoffStatistics
(count, sum, sum of squares); merging is associative, so batches can be
evaluated on a thread pool and reduced in batch order.

The normal generator is injectable. Anything with a
standard_normal(size) method works: numpy.random.Generator (seed it for
reproducible tests) or SobolSampler for scrambled quasi-random draws.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import numpy as np
from scipy.stats import norm, qmc

from fx_pricer.core.discounting import option_sign
from fx_pricer.utils.constants import MC_BATCH_SIZE
from fx_pricer.utils.types import AverageType, OptionType

logger = logging.getLogger(__name__)


class NormalSampler(Protocol):
    """Source of independent standard normal draws."""

    def standard_normal(self, size: tuple[int, int]) -> np.ndarray:
        ...


class SobolSampler:
    """
    Scrambled Sobol sequence mapped to normals through the inverse CDF.

    Each path consumes one point of a `dimension`-dimensional sequence, so
    dimension must equal the number of fixings. Uniforms are clipped away
    from 0 and 1 before the inverse CDF.
    """

    _EPSILON = 1e-12

    def __init__(self, dimension: int, seed: Optional[int] = None, scramble: bool = True):
        self.dimension = dimension
        self._engine = qmc.Sobol(d=dimension, scramble=scramble, rng=seed)

    def standard_normal(self, size: tuple[int, int]) -> np.ndarray:
        num_points, dimension = size
        if dimension != self.dimension:
            raise ValueError(
                f"SobolSampler built for dimension {self.dimension}, asked for {dimension}"
            )
        uniforms = np.clip(self._engine.random(num_points), self._EPSILON, 1.0 - self._EPSILON)
        return norm.ppf(uniforms)


@dataclass(frozen=True)
class PayoffStatistics:
    """
    Running moments of a payoff sample.

    Attributes:
        count: Number of samples
        total: Σ x
        total_sq: Σ x²
    """
    count: int = 0
    total: float = 0.0
    total_sq: float = 0.0

    @classmethod
    def from_samples(cls, samples: np.ndarray) -> "PayoffStatistics":
        return cls(
            count=int(samples.size),
            total=float(samples.sum()),
            total_sq=float(np.dot(samples, samples)),
        )

    def merge(self, other: "PayoffStatistics") -> "PayoffStatistics":
        return PayoffStatistics(
            count=self.count + other.count,
            total=self.total + other.total,
            total_sq=self.total_sq + other.total_sq,
        )

    @property
    def mean(self) -> float:
        return self.total / self.count

    @property
    def variance(self) -> float:
        """Unbiased sample variance (n - 1 denominator), floored at 0."""
        if self.count < 2:
            return 0.0
        centered = self.total_sq - self.total * self.total / self.count
        return max(centered / (self.count - 1), 0.0)

    @property
    def standard_error(self) -> float:
        """√(variance / n) of the sample mean."""
        return math.sqrt(self.variance / self.count)


def average_rate_payoffs(
    S: float,
    K: float,
    T: float,
    r_d: float,
    r_f: float,
    sigma: float,
    option_type: OptionType,
    average_type: AverageType,
    normals: np.ndarray,
) -> np.ndarray:
    """
    Undiscounted average-rate payoffs, one per row of `normals`.

    Args:
        S, K, T, r_d, r_f, sigma: Market and contract data
        option_type: "call" pays max(A - K, 0), "put" pays max(K - A, 0)
        average_type: "arithmetic" or "geometric" mean of the N + 1 fixings
        normals: Standard normal draws, shape (paths, N)

    Returns:
        Payoff array of shape (paths,)
    """
    sign = option_sign(option_type)
    num_fixings = normals.shape[1]
    dt = T / num_fixings

    drift = (r_d - r_f - 0.5 * sigma * sigma) * dt
    log_paths = np.cumsum(drift + sigma * math.sqrt(dt) * normals, axis=1)

    if average_type == "arithmetic":
        averages = (S + S * np.exp(log_paths).sum(axis=1)) / (num_fixings + 1)
    elif average_type == "geometric":
        averages = S * np.exp(log_paths.sum(axis=1) / (num_fixings + 1))
    else:
        raise ValueError(
            f"average_type must be 'arithmetic' or 'geometric', got '{average_type}'"
        )

    return np.maximum(sign * (averages - K), 0.0)


def batch_sizes(num_samples: int, batch_size: int = MC_BATCH_SIZE) -> list[int]:
    """Split num_samples into full batches plus one remainder batch."""
    full, remainder = divmod(num_samples, batch_size)
    sizes = [batch_size] * full
    if remainder:
        sizes.append(remainder)
    return sizes


def _simulate_batch(
    sampler: NormalSampler,
    size: int,
    num_fixings: int,
    antithetic: bool,
    payoff_args: tuple,
) -> PayoffStatistics:
    normals = sampler.standard_normal((size, num_fixings))
    payoffs = average_rate_payoffs(*payoff_args, normals)
    if antithetic:
        payoffs = 0.5 * (payoffs + average_rate_payoffs(*payoff_args, -normals))
    return PayoffStatistics.from_samples(payoffs)


def _batch_samplers(sampler: NormalSampler, count: int) -> Optional[Sequence[NormalSampler]]:
    """Independent child streams when the sampler can spawn them."""
    spawn = getattr(sampler, "spawn", None)
    if spawn is None:
        return None
    return spawn(count)


def simulate_average_rate(
    S: float,
    K: float,
    T: float,
    r_d: float,
    r_f: float,
    sigma: float,
    option_type: OptionType,
    average_type: AverageType,
    num_fixings: int,
    num_paths: int,
    sampler: Optional[NormalSampler] = None,
    workers: int = 1,
    antithetic: bool = False,
    batch_size: int = MC_BATCH_SIZE,
) -> PayoffStatistics:
    """
    Simulate average-rate payoffs and reduce them to sample statistics.

    Args:
        S, K, T, r_d, r_f, sigma: Market and contract data
        option_type: "call" or "put"
        average_type: "arithmetic" or "geometric"
        num_fixings: Fixings after today (N)
        num_paths: Paths to simulate
        sampler: Normal generator; an unseeded numpy Generator by default
        workers: Thread pool size; 1 runs inline
        antithetic: Pair each draw with its negation and average the two
            payoffs. Each pair is one sample, so num_paths // 2 pairs are run.
        batch_size: Samples per batch

    Returns:
        PayoffStatistics of the undiscounted payoffs

    Notes:
        Samplers with a spawn() method (numpy Generators) give every batch
        its own child stream, so the result depends on the seed and the
        batch size but not on the number of workers. Samplers without one
        (SobolSampler) are consumed sequentially on the calling thread.
    """
    option_sign(option_type)
    if sampler is None:
        sampler = np.random.default_rng()

    num_samples = num_paths // 2 if antithetic else num_paths
    sizes = batch_sizes(num_samples, batch_size)
    payoff_args = (S, K, T, r_d, r_f, sigma, option_type, average_type)

    children = _batch_samplers(sampler, len(sizes))
    logger.debug(
        "Simulating %d %s samples in %d batches (workers=%d, antithetic=%s, spawned=%s)",
        num_samples, average_type, len(sizes), workers, antithetic, children is not None,
    )

    if children is None:
        if workers > 1:
            logger.debug("Sampler cannot spawn child streams; running batches sequentially")
        results = [
            _simulate_batch(sampler, size, num_fixings, antithetic, payoff_args)
            for size in sizes
        ]
    elif workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(
                executor.map(
                    lambda job: _simulate_batch(job[0], job[1], num_fixings, antithetic, payoff_args),
                    zip(children, sizes),
                )
            )
    else:
        results = [
            _simulate_batch(child, size, num_fixings, antithetic, payoff_args)
            for child, size in zip(children, sizes)
        ]

    statistics = PayoffStatistics()
    for batch in results:
        statistics = statistics.merge(batch)

    logger.debug(
        "Monte Carlo estimate: mean=%.8f, stderr=%.8f over %d samples",
        statistics.mean, statistics.standard_error, statistics.count,
    )
    return statistics
