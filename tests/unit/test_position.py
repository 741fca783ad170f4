"""Unit tests for position scaling."""

import pytest

from fx_pricer.core.american import price_american
from fx_pricer.core.garman_kohlhagen import price_and_greeks
from fx_pricer.utils.position import position_view
from fx_pricer.utils.types import AsianResult, PricingResult


def test_premium_in_both_currencies(eurusd_params):
    result = price_and_greeks(eurusd_params, "call")
    view = position_view(result, eurusd_params.S, 1_000_000)

    assert view.premium == pytest.approx(result.price * 1_000_000)
    assert view.premium_foreign == pytest.approx(view.premium / eurusd_params.S)
    assert view.premium_pct == pytest.approx(result.price / eurusd_params.S * 100)


def test_short_flips_greeks_not_premium(eurusd_params):
    result = price_and_greeks(eurusd_params, "put")
    long_view = position_view(result, eurusd_params.S, 5_000_000, "long")
    short_view = position_view(result, eurusd_params.S, 5_000_000, "short")

    assert short_view.premium == long_view.premium
    assert short_view.greeks["delta"] == pytest.approx(-long_view.greeks["delta"])
    assert short_view.greeks["vega"] == pytest.approx(-long_view.greeks["vega"])


def test_only_available_greeks_scaled():
    result = PricingResult(price=0.5, delta=0.01, vega=0.002)
    view = position_view(result, 1.25, 100.0)
    assert view.greeks == pytest.approx({"delta": 1.0, "vega": 0.2})


def test_engine_extras_excluded(american_put_params):
    view = position_view(price_american(american_put_params, "put"), american_put_params.S, 10.0)
    assert "early_exercise_premium" not in view.greeks
    assert "price" not in view.greeks

    asian = AsianResult(price=0.02, standard_error=0.001, confidence_interval=(0.018, 0.022))
    assert position_view(asian, 1.1, 1e6).greeks == {}


def test_unknown_direction(eurusd_params):
    with pytest.raises(ValueError, match="direction"):
        position_view(price_and_greeks(eurusd_params, "call"), eurusd_params.S, 1.0, "flat")
