from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .schemas import SimulationParameters


@dataclass(frozen=True)
class Settlement:
    """End-of-horizon outcome once the home is sold."""

    buy_net_worth: float
    rent_net_worth: float
    final_property_value: float
    sale_cost: float
    capital_gains_tax: float


def final_property_value(params: SimulationParameters) -> float:
    return params.property_price * (
        1 + params.property_growth_rate / 100
    ) ** params.horizon_years


def sale_cost(params: SimulationParameters, sale_price: float) -> float:
    return sale_price * params.sell_cost_rate / 100


def capital_gains_tax(params: SimulationParameters, sale_price: float) -> float:
    """Tax on the gain over the acquisition cost beyond the exemption."""
    gain = sale_price - params.acquisition_cost
    taxable_gain = max(0.0, gain - params.capital_gains_exemption)
    return taxable_gain * params.capital_gains_tax_rate / 100


def net_worth_at_sale_price(
    params: SimulationParameters,
    sale_price: float,
    final_loan_balance: float,
    final_buy_invest_asset: float,
) -> float:
    return (
        sale_price
        - sale_cost(params, sale_price)
        - final_loan_balance
        - capital_gains_tax(params, sale_price)
        + final_buy_invest_asset
    )


def sale_price_evaluator(
    params: SimulationParameters,
    final_loan_balance: float,
    final_buy_invest_asset: float,
) -> Callable[[float], float]:
    """
    Freeze everything but the sale price so the solver sees a function of
    one variable.
    """

    def evaluate(sale_price: float) -> float:
        return net_worth_at_sale_price(
            params, sale_price, final_loan_balance, final_buy_invest_asset
        )

    return evaluate


def settle(
    params: SimulationParameters,
    final_loan_balance: float,
    final_buy_invest_asset: float,
    final_rent_invest_asset: float,
) -> Settlement:
    property_value = final_property_value(params)
    return Settlement(
        buy_net_worth=net_worth_at_sale_price(
            params, property_value, final_loan_balance, final_buy_invest_asset
        ),
        rent_net_worth=final_rent_invest_asset,
        final_property_value=property_value,
        sale_cost=sale_cost(params, property_value),
        capital_gains_tax=capital_gains_tax(params, property_value),
    )
