"""
Unit tests for the average-rate Monte Carlo simulator.

This module validates:
1. PayoffStatistics moments and merging
2. Batch splitting and worker-count independence
3. Path construction (drift, inclusion of today's fixing)
4. Samplers (numpy Generator, scrambled Sobol)
"""

import math

import numpy as np
import pytest

from fx_pricer.core.asian import price_asian_geometric
from fx_pricer.solvers.monte_carlo import (
    PayoffStatistics,
    SobolSampler,
    average_rate_payoffs,
    batch_sizes,
    simulate_average_rate,
)
from fx_pricer.utils.types import AsianParams


# ===========================
# PayoffStatistics Tests
# ===========================


def test_statistics_match_numpy(rng):
    samples = rng.exponential(size=1_000)
    stats = PayoffStatistics.from_samples(samples)
    assert stats.count == 1_000
    assert stats.mean == pytest.approx(samples.mean(), rel=1e-12)
    assert stats.variance == pytest.approx(samples.var(ddof=1), rel=1e-9)
    assert stats.standard_error == pytest.approx(samples.std(ddof=1) / math.sqrt(1_000), rel=1e-9)


def test_merge_equals_pooled_sample(rng):
    first, second = rng.normal(size=300), rng.normal(size=700)
    merged = PayoffStatistics.from_samples(first).merge(PayoffStatistics.from_samples(second))
    pooled = PayoffStatistics.from_samples(np.concatenate([first, second]))
    assert merged.count == pooled.count
    assert merged.total == pytest.approx(pooled.total, rel=1e-12)
    assert merged.variance == pytest.approx(pooled.variance, rel=1e-9)


def test_single_sample_has_zero_variance():
    stats = PayoffStatistics.from_samples(np.array([3.0]))
    assert stats.variance == 0.0
    assert stats.standard_error == 0.0


def test_constant_sample_variance_floored():
    stats = PayoffStatistics.from_samples(np.full(10_000, 0.1))
    assert stats.variance >= 0.0
    assert stats.variance == pytest.approx(0.0, abs=1e-12)


# ===========================
# Batching Tests
# ===========================


@pytest.mark.parametrize(
    "num_samples,batch_size,expected",
    [
        (25, 10, [10, 10, 5]),
        (30, 10, [10, 10, 10]),
        (7, 10, [7]),
        (0, 10, []),
    ],
)
def test_batch_sizes(num_samples, batch_size, expected):
    assert batch_sizes(num_samples, batch_size) == expected


def _simulate(sampler, **overrides):
    kwargs = dict(
        S=1.10, K=1.10, T=0.5, r_d=0.03, r_f=0.01, sigma=0.1,
        option_type="call", average_type="arithmetic",
        num_fixings=12, num_paths=5_000, sampler=sampler, batch_size=1_000,
    )
    kwargs.update(overrides)
    return simulate_average_rate(**kwargs)


def test_result_independent_of_worker_count():
    single = _simulate(np.random.default_rng(7), workers=1)
    pooled = _simulate(np.random.default_rng(7), workers=3)
    assert single == pooled


def test_same_seed_reproduces():
    assert _simulate(np.random.default_rng(99)) == _simulate(np.random.default_rng(99))


def test_antithetic_counts_pairs():
    stats = _simulate(np.random.default_rng(3), antithetic=True, num_paths=5_001)
    assert stats.count == 2_500


# ===========================
# Path Construction Tests
# ===========================


def test_zero_shocks_follow_drift():
    """With Z = 0 every fixing sits on exp((r_d - r_f - σ²/2)·t)."""
    S, K, T, r_d, r_f, sigma, N = 1.0, 0.9, 1.0, 0.05, 0.01, 0.2, 4
    payoffs = average_rate_payoffs(S, K, T, r_d, r_f, sigma, "call", "arithmetic", np.zeros((3, N)))

    mu = r_d - r_f - 0.5 * sigma * sigma
    fixings = [S * math.exp(mu * i * T / N) for i in range(N + 1)]
    expected = sum(fixings) / (N + 1) - K
    assert np.allclose(payoffs, expected)


def test_geometric_zero_shocks():
    payoffs = average_rate_payoffs(
        2.0, 2.5, 1.0, 0.0, 0.0, 0.0, "put", "geometric", np.zeros((1, 5))
    )
    assert payoffs[0] == pytest.approx(0.5)


def test_today_fixing_included():
    """One fixing at T on a drift of ln 3 averages with today's spot: (1 + 3) / 2."""
    payoffs = average_rate_payoffs(
        1.0, 0.0, 1.0, math.log(3.0), 0.0, 0.0, "call", "arithmetic", np.zeros((1, 1))
    )
    assert payoffs[0] == pytest.approx(2.0)


def test_unknown_average_type():
    with pytest.raises(ValueError, match="average_type"):
        average_rate_payoffs(1.0, 1.0, 1.0, 0.0, 0.0, 0.1, "call", "harmonic", np.zeros((1, 2)))


def test_arithmetic_dominates_geometric_pathwise():
    """AM-GM holds path by path, so with the same draws the call estimate is larger."""
    arithmetic = _simulate(np.random.default_rng(11), average_type="arithmetic")
    geometric = _simulate(np.random.default_rng(11), average_type="geometric")
    assert arithmetic.mean >= geometric.mean


def test_antithetic_reduces_standard_error():
    plain = _simulate(np.random.default_rng(5), num_paths=20_000)
    paired = _simulate(np.random.default_rng(5), num_paths=20_000, antithetic=True)
    assert paired.standard_error < plain.standard_error


# ===========================
# Sampler Tests
# ===========================


def test_sobol_dimension_mismatch():
    sampler = SobolSampler(dimension=4, seed=1)
    with pytest.raises(ValueError, match="dimension"):
        sampler.standard_normal((8, 5))


def test_sobol_draws_are_finite_normals():
    draws = SobolSampler(dimension=3, seed=2).standard_normal((1_024, 3))
    assert draws.shape == (1_024, 3)
    assert np.all(np.isfinite(draws))
    assert abs(draws.mean()) < 0.05
    assert draws.std() == pytest.approx(1.0, abs=0.05)


def test_sobol_geometric_matches_closed_form():
    params = AsianParams(
        S=1.10, K=1.10, T=0.5, r_d=0.03, r_f=0.01, sigma=0.10,
        average_type="geometric", observation_count=12,
    )
    stats = simulate_average_rate(
        params.S, params.K, params.T, params.r_d, params.r_f, params.sigma,
        "call", "geometric", num_fixings=12, num_paths=16_384,
        sampler=SobolSampler(dimension=12, seed=4), batch_size=4_096,
    )
    estimate = math.exp(-params.r_d * params.T) * stats.mean
    assert estimate == pytest.approx(price_asian_geometric(params, "call").price, rel=0.01)
