from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .model import run_simulation
from .schemas import (
    DEFAULT_PARAMETERS,
    DeductionPolicy,
    RateBandPolicy,
    SimulationParameters,
)

app = typer.Typer(
    help="Compare net worth from buying a home versus renting and investing."
)


def _default_params_file() -> Optional[Path]:
    value = os.environ.get("BUY_VS_RENT_PARAMS")
    return Path(value) if value else None


def _load_parameters(
    params_file: Optional[Path], overrides: Dict[str, Any]
) -> SimulationParameters:
    base = DEFAULT_PARAMETERS
    if params_file is not None:
        try:
            mapping = json.loads(params_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise typer.BadParameter(
                f"Could not read parameters from {params_file}: {exc}"
            ) from exc
        if not isinstance(mapping, dict):
            raise typer.BadParameter(f"{params_file} must contain a JSON object")
        try:
            base = SimulationParameters.from_mapping(mapping)
        except (TypeError, ValueError) as exc:
            raise typer.BadParameter(str(exc)) from exc

    changes = {key: value for key, value in overrides.items() if value is not None}
    try:
        return replace(base, **changes)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def run(
    params_file: Optional[Path] = typer.Option(
        default_factory=_default_params_file,
        help="JSON file of parameter overrides (env BUY_VS_RENT_PARAMS if omitted).",
    ),
    property_price: Optional[float] = typer.Option(None, help="Purchase price."),
    transaction_cost_rate: Optional[float] = typer.Option(
        None, help="Acquisition costs as a percentage of price (financed)."
    ),
    loan_years: Optional[int] = typer.Option(None, help="Loan term in years."),
    rate1: Optional[float] = typer.Option(None, help="Annual loan rate, first band (%)."),
    rate2: Optional[float] = typer.Option(None, help="Annual loan rate, second band (%)."),
    rate3: Optional[float] = typer.Option(None, help="Annual loan rate, third band (%)."),
    rate_band_policy: Optional[RateBandPolicy] = typer.Option(
        None, help="How the three rates are spread over the years."
    ),
    deduction_policy: Optional[DeductionPolicy] = typer.Option(
        None, help="Flat mortgage deduction or a capped share of the balance."
    ),
    rent_start: Optional[float] = typer.Option(None, help="Starting monthly rent."),
    rent_increase: Optional[float] = typer.Option(
        None, help="Rent increase applied every two years."
    ),
    investment_return: Optional[float] = typer.Option(
        None, help="Annual investment return (%), e.g., 7 for 7%."
    ),
    horizon_years: Optional[int] = typer.Option(None, help="Projection horizon in years."),
    property_growth_rate: Optional[float] = typer.Option(
        None, help="Annual property price growth (%)."
    ),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the yearly timeline as JSON."
    ),
    monthly: bool = typer.Option(
        False, help="With --show-timeline, dump every month instead of year ends."
    ),
    verbose: bool = typer.Option(False, help="Log simulation details to stderr."),
) -> None:
    """
    Simulate both strategies and report final net worth and the break-even price.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    params = _load_parameters(
        params_file,
        {
            "property_price": property_price,
            "transaction_cost_rate": transaction_cost_rate,
            "loan_years": loan_years,
            "rate1": rate1,
            "rate2": rate2,
            "rate3": rate3,
            "rate_band_policy": rate_band_policy,
            "deduction_policy": deduction_policy,
            "rent_start": rent_start,
            "rent_increase": rent_increase,
            "investment_return": investment_return,
            "horizon_years": horizon_years,
            "property_growth_rate": property_growth_rate,
        },
    )
    result = run_simulation(params)

    typer.echo(f"Horizon: {params.horizon_years} years")
    typer.echo(f"Loan principal: ¥{params.loan_principal:,.0f}")
    typer.echo(f"Final loan balance: ¥{result.final_loan_balance:,.0f}")
    typer.echo(f"Final property value: ¥{result.final_property_value:,.0f}")
    typer.echo(f"Buy-side investments (tax balance): ¥{result.buy_invest_asset:,.0f}")
    typer.echo(f"Rent at horizon: ¥{params.rent_at_horizon:,.0f}/month")
    typer.echo("")
    typer.echo(f"Buy net worth: ¥{result.buy_final_net_worth:,.0f}")
    typer.echo(f"Rent net worth: ¥{result.rent_final_net_worth:,.0f}")
    typer.echo(
        f"Better outcome: {result.better_option} "
        f"(by ¥{abs(result.net_worth_difference):,.0f})"
    )
    typer.echo("")
    typer.echo(f"Break-even sale price: ¥{result.break_even_price:,.0f}")
    typer.echo(
        f"Break-even growth: {result.break_even_growth_rate:+.2f}% "
        f"({result.break_even_annual_rate:+.2f}%/year)"
    )
    if result.break_even_pinned:
        typer.echo("No realistic break-even: the price is pinned at a search bound.")

    if show_timeline:
        points = result.points if monthly else result.yearly
        typer.echo(json.dumps([asdict(point) for point in points], indent=2))


@app.command()
def defaults() -> None:
    """
    Print the default parameters as JSON, ready to edit for --params-file.
    """
    typer.echo(json.dumps(DEFAULT_PARAMETERS.to_dict(), indent=2))


if __name__ == "__main__":
    app()
