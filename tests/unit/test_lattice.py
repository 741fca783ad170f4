"""
Unit tests for the CRR and trinomial lattices.

This module validates:
1. Branch probabilities (sum to one, moment matching, clipping)
2. Slice layout and today's three-node slice
3. European lattice convergence to Garman-Kohlhagen
4. Early-exercise boundary shape and ordering
"""

import logging
import math

import numpy as np
import pytest

from fx_pricer.core.garman_kohlhagen import garman_kohlhagen_price
from fx_pricer.solvers.lattice import (
    build_geometry,
    continuation,
    crr_geometry,
    slice_spots,
    trinomial_geometry,
    value_on_lattice,
)
from fx_pricer.utils.types import GKParams


# ===========================
# Geometry Tests
# ===========================


def test_crr_probability_matches_forward():
    geometry = crr_geometry(sigma=0.2, r_d=0.05, r_f=0.02, dt=0.01)
    q_up, q_down = geometry.probabilities
    expected_growth = q_up * geometry.up + q_down / geometry.up
    assert q_up + q_down == pytest.approx(1.0)
    assert expected_growth == pytest.approx(math.exp(0.03 * 0.01), rel=1e-12)
    assert geometry.step_discount == pytest.approx(math.exp(-0.05 * 0.01))


def test_trinomial_matches_two_moments():
    sigma, r_d, r_f, dt = 0.15, 0.04, 0.01, 0.005
    geometry = trinomial_geometry(sigma, r_d, r_f, dt)
    p_up, p_mid, p_down = geometry.probabilities
    u, d = geometry.up, 1.0 / geometry.up
    growth = math.exp((r_d - r_f) * dt)

    assert p_up + p_mid + p_down == pytest.approx(1.0)
    assert all(0.0 <= p <= 1.0 for p in geometry.probabilities)
    assert p_up * u + p_mid + p_down * d == pytest.approx(growth, rel=1e-12)
    assert p_up * u * u + p_mid + p_down * d * d == pytest.approx(
        growth * growth * math.exp(sigma * sigma * dt), rel=1e-12
    )


def test_trinomial_zero_carry_probabilities_near_quarter():
    p_up, p_mid, p_down = trinomial_geometry(0.2, 0.0, 0.0, 1e-4).probabilities
    assert p_up == pytest.approx(0.25, abs=1e-3)
    assert p_down == pytest.approx(0.25, abs=1e-3)
    assert p_mid == pytest.approx(0.5, abs=2e-3)


def test_crr_clips_probability_and_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="fx_pricer.solvers.lattice"):
        geometry = crr_geometry(sigma=0.001, r_d=0.5, r_f=0.0, dt=1.0)
    assert geometry.probabilities == (1.0, 0.0)
    assert "clipping" in caplog.text


def test_trinomial_clamps_and_renormalizes(caplog):
    with caplog.at_level(logging.WARNING, logger="fx_pricer.solvers.lattice"):
        geometry = trinomial_geometry(sigma=0.001, r_d=0.5, r_f=0.0, dt=1.0)
    assert sum(geometry.probabilities) == pytest.approx(1.0)
    assert all(0.0 <= p <= 1.0 for p in geometry.probabilities)
    assert "clamped" in caplog.text


def test_unknown_tree_type():
    with pytest.raises(ValueError, match="tree_type"):
        build_geometry("quadrinomial", 0.2, 0.05, 0.02, 0.01)


# ===========================
# Slice Layout Tests
# ===========================


def test_slice_spots_layout():
    crr = crr_geometry(0.2, 0.05, 0.02, 0.01)
    spots = slice_spots(100.0, crr, 2)
    assert len(spots) == 3
    assert spots[1] == pytest.approx(100.0)
    assert spots[0] == pytest.approx(100.0 * crr.up ** 2)

    tri = trinomial_geometry(0.2, 0.05, 0.02, 0.01)
    spots = slice_spots(100.0, tri, 2)
    assert len(spots) == 5
    assert spots[2] == pytest.approx(100.0)
    assert np.all(np.diff(spots) < 0)


def test_continuation_of_constant_is_discounted_constant():
    for geometry in (crr_geometry(0.2, 0.05, 0.0, 0.1), trinomial_geometry(0.2, 0.05, 0.0, 0.1)):
        width = 7 if geometry.tree_type == "crr" else 9
        held = continuation(np.ones(width), geometry)
        assert np.allclose(held, geometry.step_discount)


@pytest.mark.parametrize("tree_type", ["crr", "trinomial"])
def test_today_slice_centres_on_spot(tree_type):
    valuation = value_on_lattice(100.0, 100.0, 0.5, 0.05, 0.02, 0.2, "call", 100, tree_type)
    assert len(valuation.spots) == 3
    assert valuation.spots[1] == pytest.approx(100.0)
    assert valuation.spots[0] > 100.0 > valuation.spots[2]


def test_degenerate_lattice_rejected():
    with pytest.raises(ValueError, match="sigma"):
        value_on_lattice(100.0, 100.0, 0.5, 0.05, 0.02, 0.0, "put", 50)


# ===========================
# European Convergence Tests
# ===========================


@pytest.mark.parametrize("tree_type", ["crr", "trinomial"])
@pytest.mark.parametrize("option_type", ["call", "put"])
def test_european_lattice_converges_to_closed_form(tree_type, option_type):
    params = GKParams(S=1.10, K=1.10, T=0.5, r_d=0.03, r_f=0.01, sigma=0.1)
    exact = garman_kohlhagen_price(params, option_type)
    valuation = value_on_lattice(
        params.S, params.K, params.T, params.r_d, params.r_f, params.sigma,
        option_type, steps=400, tree_type=tree_type, american=False,
    )
    assert valuation.price == pytest.approx(exact, rel=5e-3)


def test_european_lattice_delta_gamma():
    params = GKParams(S=100.0, K=100.0, T=0.5, r_d=0.04, r_f=0.01, sigma=0.2)
    valuation = value_on_lattice(
        params.S, params.K, params.T, params.r_d, params.r_f, params.sigma,
        "call", steps=400, american=False,
    )
    d1 = (math.log(1.0) + (0.03 + 0.02) * 0.5) / (0.2 * math.sqrt(0.5))
    phi = math.exp(-0.5 * d1 * d1) / math.sqrt(2 * math.pi)
    exact_gamma = math.exp(-0.01 * 0.5) * phi / (100.0 * 0.2 * math.sqrt(0.5))
    assert valuation.gamma() == pytest.approx(exact_gamma, rel=0.03)
    assert 0.5 < valuation.delta() < 0.65


def test_european_put_has_no_boundary():
    valuation = value_on_lattice(100.0, 100.0, 0.5, 0.05, 0.0, 0.2, "put", 100, american=False)
    assert valuation.boundary == []


# ===========================
# Early-Exercise Boundary Tests
# ===========================


@pytest.mark.parametrize("tree_type", ["crr", "trinomial"])
def test_put_boundary_order_and_range(tree_type):
    T, steps = 0.5, 200
    valuation = value_on_lattice(100.0, 100.0, T, 0.06, 0.01, 0.2, "put", steps, tree_type)
    boundary = valuation.boundary

    assert boundary, "expected early exercise for a put with r_d > r_f"
    times = [point.time_to_expiry for point in boundary]
    assert times == sorted(times)
    assert len(set(times)) == len(times)
    assert 0.0 < times[0] <= times[-1] <= T + 1e-12
    assert all(0.0 < point.spot < 100.0 for point in boundary)
    # Critical spot falls as time to expiry grows
    assert boundary[0].spot >= boundary[-1].spot


def test_call_lattice_tracks_no_boundary():
    valuation = value_on_lattice(100.0, 100.0, 0.5, 0.06, 0.01, 0.2, "call", 100)
    assert valuation.boundary == []
