"""
Command-line interface for the FX options pricer.

This CLI provides access to:
- Vanilla European pricing (Garman-Kohlhagen) with the full greek set
- Digital (cash-or-nothing / asset-or-nothing) pricing
- American pricing on CRR or trinomial lattices
- Asian (average-rate) pricing by Monte Carlo or geometric closed form
- Risk reversal and seagull combinations

Times are year fractions: --expiry drives the volatility clock (T) and the
optional --settlement sets the discount tenor (T2).
"""

import logging
import sys

import click
import numpy as np

from fx_pricer.core.american import price_american
from fx_pricer.core.asian import price_asian
from fx_pricer.core.combination import price_risk_reversal, price_seagull
from fx_pricer.core.digital import digital_price_and_greeks
from fx_pricer.core.garman_kohlhagen import price_and_greeks
from fx_pricer.utils.constants import DEFAULT_MC_PATHS, DEFAULT_TREE_STEPS
from fx_pricer.utils.position import position_view
from fx_pricer.utils.types import (
    AmericanParams,
    AsianParams,
    CombinationLeg,
    CombinationShared,
    DigitalParams,
    GKParams,
    PricingResult,
    RiskReversal,
    Seagull,
)
from fx_pricer.utils.validation import (
    InvalidParametersError,
    validate_american_params,
    validate_asian_params,
    validate_combination_shared,
    validate_digital_params,
    validate_gk_params,
    validate_risk_reversal,
    validate_seagull,
)

GREEK_LABELS = {
    "delta": "Delta",
    "gamma": "Gamma (1%)",
    "vega": "Vega (1%)",
    "theta": "Theta (1d)",
    "rho_d": "Rho dom",
    "rho_f": "Rho for",
    "vanna": "Vanna (1%)",
    "volga": "Volga (1%)",
    "time_decay": "Decay (1d)",
}


def market_options(func):
    """Spot, tenors, rates and position options shared by every command."""
    options = [
        click.option("--spot", "-S", type=float, required=True, help="Spot rate (domestic per foreign)"),
        click.option("--expiry", "-T", type=float, required=True, help="Time to expiry (years)"),
        click.option("--settlement", type=float, default=None, help="Discount tenor T2 (years); defaults to expiry"),
        click.option("--rd", type=float, required=True, help="Domestic rate (continuous)"),
        click.option("--rf", type=float, required=True, help="Foreign rate (continuous)"),
        click.option("--notional", "-n", type=float, default=None, help="Foreign notional for the position view"),
        click.option("--direction", type=click.Choice(["long", "short"]), default="long"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def option_options(func):
    """Strike, volatility and call/put for single-option commands."""
    options = [
        click.option("--strike", "-K", type=float, required=True, help="Strike"),
        click.option("--vol", "-v", type=float, required=True, help="Volatility (annualized)"),
        click.option("--type", "-t", "option_type", type=click.Choice(["call", "put"]), default="call"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _validate(validator, *args) -> None:
    """Run a validator; report every problem on stderr and exit 1."""
    try:
        validator(*args)
    except InvalidParametersError as e:
        click.echo("\nInvalid input:", err=True)
        for name, message in e.errors.items():
            click.echo(f"  {name}: {message}", err=True)
        sys.exit(1)


def _echo_result(title: str, result: PricingResult) -> None:
    click.echo(f"\n{title}")
    click.echo(f"  Price:       {result.price:>14.8f}")
    for name, label in GREEK_LABELS.items():
        value = getattr(result, name)
        if value is not None:
            click.echo(f"  {label + ':':<12} {value:>14.8f}")


def _echo_position(
    result: PricingResult, spot: float, notional, direction: str, signed: bool = True
) -> None:
    """Position figures; signed=False when the result already carries the direction."""
    if notional is None:
        return
    view = position_view(result, spot, notional, direction if signed else "long")
    click.echo(f"\nPosition ({direction} {notional:,.0f} foreign)")
    click.echo(f"  Premium (dom):   {view.premium:>16,.2f}")
    click.echo(f"  Premium (for):   {view.premium_foreign:>16,.2f}")
    click.echo(f"  Premium % spot:  {view.premium_pct:>16.4f}%")
    for name, value in view.greeks.items():
        label = GREEK_LABELS.get(name, name)
        click.echo(f"  {label + ':':<16} {value:>16,.2f}")


@click.group()
@click.version_option(version="1.0.0")
@click.option("--verbose", is_flag=True, help="Log lattice and simulation details")
def cli(verbose):
    """FX Options Pricer - Garman-Kohlhagen vanilla, digital, American and Asian options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@market_options
@option_options
def vanilla(spot, expiry, settlement, rd, rf, notional, direction, strike, vol, option_type):
    """Price a European option with the full greek set."""
    params = GKParams(S=spot, K=strike, T=expiry, r_d=rd, r_f=rf, sigma=vol, T2=settlement)
    _validate(validate_gk_params, params)

    result = price_and_greeks(params, option_type)
    _echo_result(f"European {option_type.capitalize()}", result)
    _echo_position(result, spot, notional, direction)


@cli.command()
@market_options
@option_options
@click.option("--kind", type=click.Choice(["cash_or_nothing", "asset_or_nothing"]), default="cash_or_nothing")
@click.option("--payoff-currency", type=click.Choice(["domestic", "foreign"]), default="domestic")
@click.option("--cash", "-D", type=float, default=1.0, help="Cash amount paid (cash-or-nothing)")
def digital(
    spot, expiry, settlement, rd, rf, notional, direction, strike, vol, option_type,
    kind, payoff_currency, cash,
):
    """Price a digital option."""
    params = DigitalParams(
        S=spot, K=strike, T=expiry, r_d=rd, r_f=rf, sigma=vol, T2=settlement,
        D=cash, digital_kind=kind, payoff_currency=payoff_currency,
    )
    _validate(validate_digital_params, params)

    result = digital_price_and_greeks(params, option_type)
    _echo_result(f"Digital {option_type.capitalize()} ({kind}, {payoff_currency})", result)
    _echo_position(result, spot, notional, direction)


@cli.command()
@market_options
@option_options
@click.option("--steps", type=int, default=DEFAULT_TREE_STEPS, help="Lattice steps")
@click.option("--tree", type=click.Choice(["crr", "trinomial"]), default="crr")
def american(
    spot, expiry, settlement, rd, rf, notional, direction, strike, vol, option_type, steps, tree,
):
    """Price an American option on a lattice."""
    params = AmericanParams(
        S=spot, K=strike, T=expiry, r_d=rd, r_f=rf, sigma=vol, T2=settlement,
        steps=steps, tree_type=tree,
    )
    _validate(validate_american_params, params)

    result = price_american(params, option_type)
    _echo_result(f"American {option_type.capitalize()} ({tree}, {steps} steps)", result)
    click.echo(f"  Early-ex premium: {result.early_exercise_premium:>9.8f}")

    if result.early_exercise_boundary:
        click.echo("\nEarly-exercise boundary (time to expiry, critical spot):")
        for point in result.early_exercise_boundary[:: max(1, len(result.early_exercise_boundary) // 10)]:
            click.echo(f"  {point.time_to_expiry:>8.4f}  {point.spot:>12.6f}")

    _echo_position(result, spot, notional, direction)


@cli.command()
@market_options
@option_options
@click.option("--average", type=click.Choice(["arithmetic", "geometric"]), default="arithmetic")
@click.option("--fixings", type=int, default=252, help="Averaging fixings after today")
@click.option("--paths", type=int, default=DEFAULT_MC_PATHS, help="Monte Carlo paths")
@click.option("--closed-form", is_flag=True, help="Geometric closed form instead of Monte Carlo")
@click.option("--seed", type=int, default=None, help="Seed for reproducible paths")
@click.option("--workers", type=int, default=1, help="Simulation threads")
@click.option("--antithetic", is_flag=True, help="Use antithetic variates")
def asian(
    spot, expiry, settlement, rd, rf, notional, direction, strike, vol, option_type,
    average, fixings, paths, closed_form, seed, workers, antithetic,
):
    """Price an average-rate option."""
    params = AsianParams(
        S=spot, K=strike, T=expiry, r_d=rd, r_f=rf, sigma=vol, T2=settlement,
        average_type=average, observation_count=fixings,
    )
    _validate(validate_asian_params, params, paths)

    try:
        result = price_asian(
            params,
            option_type,
            num_paths=paths,
            use_monte_carlo=not closed_form,
            sampler=np.random.default_rng(seed),
            workers=workers,
            antithetic=antithetic,
        )
    except ValueError as e:
        click.echo(f"\nError: {e}", err=True)
        sys.exit(1)

    _echo_result(f"Asian {average} {option_type.capitalize()}", result)
    if result.standard_error is not None:
        lower, upper = result.confidence_interval
        click.echo(f"  Std error:   {result.standard_error:>14.8f}")
        click.echo(f"  95% CI:      [{lower:.8f}, {upper:.8f}] over {result.num_paths} paths")
    _echo_position(result, spot, notional, direction)


def _echo_legs(result) -> None:
    if not result.legs:
        return
    click.echo("\nLegs:")
    for leg in result.legs:
        click.echo(
            f"  {leg.label:<14} x{leg.coefficient:+.0f}  price {leg.price:>12.8f}  "
            f"delta {leg.delta:>10.6f}  vega {leg.vega:>10.6f}"
        )


@cli.command("risk-reversal")
@market_options
@click.option("--call-strike", type=float, required=True)
@click.option("--call-vol", type=float, required=True)
@click.option("--put-strike", type=float, required=True)
@click.option("--put-vol", type=float, required=True)
@click.option("--legs", "show_legs", is_flag=True, help="Show the per-leg breakdown")
def risk_reversal(
    spot, expiry, settlement, rd, rf, notional, direction,
    call_strike, call_vol, put_strike, put_vol, show_legs,
):
    """Price a risk reversal (long = long call, short put)."""
    shared = CombinationShared(S=spot, T=expiry, r_d=rd, r_f=rf, T2=settlement)
    structure = RiskReversal(
        direction=direction,
        call=CombinationLeg(strike=call_strike, sigma=call_vol),
        put=CombinationLeg(strike=put_strike, sigma=put_vol),
    )
    _validate(validate_combination_shared, shared)
    _validate(validate_risk_reversal, structure)

    result = price_risk_reversal(shared, structure, with_legs=show_legs)
    _echo_result(f"Risk Reversal ({direction})", result)
    _echo_legs(result)
    _echo_position(result, spot, notional, direction, signed=False)


@cli.command()
@market_options
@click.option("--call-strike", type=float, required=True)
@click.option("--call-vol", type=float, required=True)
@click.option("--mid-strike", type=float, required=True)
@click.option("--mid-vol", type=float, required=True)
@click.option("--low-strike", type=float, required=True)
@click.option("--low-vol", type=float, required=True)
@click.option("--legs", "show_legs", is_flag=True, help="Show the per-leg breakdown")
def seagull(
    spot, expiry, settlement, rd, rf, notional, direction,
    call_strike, call_vol, mid_strike, mid_vol, low_strike, low_vol, show_legs,
):
    """Price a seagull (long call, short mid put, short low put)."""
    shared = CombinationShared(S=spot, T=expiry, r_d=rd, r_f=rf, T2=settlement)
    structure = Seagull(
        call=CombinationLeg(strike=call_strike, sigma=call_vol),
        put_mid=CombinationLeg(strike=mid_strike, sigma=mid_vol),
        put_low=CombinationLeg(strike=low_strike, sigma=low_vol),
    )
    _validate(validate_combination_shared, shared)
    _validate(validate_seagull, structure)

    result = price_seagull(shared, structure, with_legs=show_legs)
    _echo_result("Seagull", result)
    _echo_legs(result)
    _echo_position(result, spot, notional, direction)


if __name__ == "__main__":
    cli()
