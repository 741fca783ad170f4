"""
Pytest configuration and shared fixtures.
"""

import numpy as np
import pytest

from fx_pricer.utils.types import (
    AmericanParams,
    AsianParams,
    CombinationLeg,
    CombinationShared,
    DigitalParams,
    GKParams,
)


@pytest.fixture
def standard_params():
    """At-the-money option; r_f = 0 reduces Garman-Kohlhagen to Black-Scholes."""
    return GKParams(S=100.0, K=100.0, T=1.0, r_d=0.05, r_f=0.0, sigma=0.20)


@pytest.fixture
def eurusd_params():
    """Six-month EURUSD call-ish parameters with a settlement lag."""
    return GKParams(S=1.10, K=1.12, T=0.5, r_d=0.03, r_f=0.01, sigma=0.08, T2=0.51)


@pytest.fixture
def fd_params():
    """Parameters for finite-difference checks (T2 tied to T)."""
    return GKParams(S=1.25, K=1.20, T=0.75, r_d=0.04, r_f=0.015, sigma=0.12)


@pytest.fixture
def digital_params():
    """Cash-or-nothing with domestic payoff, D = 1."""
    return DigitalParams(
        S=1.1, K=1.0, T=0.25, r_d=0.05, r_f=0.03, sigma=0.1, T2=0.25,
        D=1.0, digital_kind="cash_or_nothing", payoff_currency="domestic",
    )


@pytest.fixture
def american_put_params():
    """ATM put where early exercise has value (r_d > r_f)."""
    return AmericanParams(S=100.0, K=100.0, T=0.25, r_d=0.05, r_f=0.02, sigma=0.2, steps=200)


@pytest.fixture
def american_call_params():
    """ATM call with no foreign carry: early exercise is never optimal."""
    return AmericanParams(S=100.0, K=100.0, T=0.25, r_d=0.05, r_f=0.0, sigma=0.2, steps=200)


@pytest.fixture
def asian_params():
    """Six-month ATM average-rate option with fortnightly fixings."""
    return AsianParams(
        S=1.10, K=1.10, T=0.5, r_d=0.03, r_f=0.01, sigma=0.10,
        average_type="arithmetic", observation_count=13,
    )


@pytest.fixture
def combination_shared():
    return CombinationShared(S=1.10, T=0.5, r_d=0.03, r_f=0.01)


@pytest.fixture
def combination_legs():
    """Call, mid put and low put legs with a typical skew."""
    return {
        "call": CombinationLeg(strike=1.15, sigma=0.085),
        "put_mid": CombinationLeg(strike=1.05, sigma=0.095),
        "put_low": CombinationLeg(strike=1.00, sigma=0.105),
    }


@pytest.fixture
def rng():
    """Seeded generator so Monte Carlo tests are reproducible."""
    return np.random.default_rng(20240611)
