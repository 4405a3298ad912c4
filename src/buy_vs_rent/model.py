from __future__ import annotations

import logging
import math
from typing import List, Optional

from .breakeven import (
    UPPER_BOUND_MULTIPLE,
    break_even_annual_rate,
    break_even_growth_rate,
    is_pinned,
    solve_break_even,
)
from .schemas import (
    DEFAULT_PARAMETERS,
    DeductionPolicy,
    MonthlyDataPoint,
    MonthlyState,
    Projection,
    SimulationParameters,
    SimulationResult,
)
from .settlement import sale_price_evaluator, settle

logger = logging.getLogger(__name__)

# Month of each 12-month cycle on which the yearly tax balance is settled.
TAX_SETTLEMENT_MONTH = 6
RENT_RENEWAL_MONTHS = 24


def run_simulation(
    params: Optional[SimulationParameters] = None,
) -> SimulationResult:
    params = params or DEFAULT_PARAMETERS

    projection = project_months(params)
    settlement = settle(
        params,
        projection.final_loan_balance,
        projection.final_buy_invest_asset,
        projection.final_rent_invest_asset,
    )

    evaluate = sale_price_evaluator(
        params, projection.final_loan_balance, projection.final_buy_invest_asset
    )
    upper_bound = params.property_price * UPPER_BOUND_MULTIPLE
    break_even_price = solve_break_even(
        evaluate, settlement.rent_net_worth, upper_bound
    )
    growth_rate = break_even_growth_rate(params.property_price, break_even_price)

    logger.debug(
        "Simulated %d months: buy %.0f vs rent %.0f, break-even price %.0f",
        params.horizon_months,
        settlement.buy_net_worth,
        settlement.rent_net_worth,
        break_even_price,
    )

    return SimulationResult(
        parameters=params,
        buy_final_net_worth=settlement.buy_net_worth,
        rent_final_net_worth=settlement.rent_net_worth,
        break_even_price=break_even_price,
        break_even_growth_rate=growth_rate,
        break_even_annual_rate=break_even_annual_rate(
            params.property_price, break_even_price, params.horizon_years
        ),
        break_even_pinned=is_pinned(evaluate, settlement.rent_net_worth, upper_bound),
        final_loan_balance=projection.final_loan_balance,
        final_property_value=settlement.final_property_value,
        buy_invest_asset=projection.final_buy_invest_asset,
        rent_invest_asset=projection.final_rent_invest_asset,
        sale_cost=settlement.sale_cost,
        capital_gains_tax=settlement.capital_gains_tax,
        points=projection.points,
    )


def project_months(params: SimulationParameters) -> Projection:
    """
    Walk the horizon one month at a time for both strategies.

    The loan installment is re-derived every month from the current balance,
    rate and remaining term, so a rate band change shows up as a step in the
    payment. Months where renting costs more than buying do not draw on the
    renter's portfolio; the shortfall is carried into the next month instead.
    """
    monthly_return = annual_to_monthly_growth(params.investment_return)
    state = MonthlyState(
        loan_balance=params.loan_principal,
        year_end_balance=params.loan_principal,
    )
    points: List[MonthlyDataPoint] = []

    for month in range(1, params.horizon_months + 1):
        year = math.ceil(month / 12)
        rate = params.rate_for_year(year)

        remaining_months = params.loan_months - (month - 1)
        payment = 0.0
        if remaining_months > 0:
            payment = monthly_mortgage_payment(
                state.loan_balance, rate, remaining_months
            )
            interest = state.loan_balance * annual_to_monthly_rate(rate)
            state.loan_balance = max(0.0, state.loan_balance - (payment - interest))
            if remaining_months == 1:
                state.loan_balance = 0.0
                logger.debug("Loan paid off in month %d", month)
        if month % 12 == 0:
            state.year_end_balance = state.loan_balance

        buy_monthly_cost = payment + params.management_fee_for_year(year)

        if month % 12 == TAX_SETTLEMENT_MONTH:
            benefit = annual_net_tax_benefit(params, year, state.year_end_balance)
            state.buy_invest_asset = (state.buy_invest_asset + benefit) * (
                1 + monthly_return
            )
        else:
            state.buy_invest_asset *= 1 + monthly_return

        rent = monthly_rent(params, month)
        rent_charges = rent_one_time_charges(params, month, rent)
        buy_charges = params.down_payment if month == 1 else 0.0

        investable = (
            buy_monthly_cost + buy_charges - rent - rent_charges + state.carry_over
        )
        if investable >= 0:
            state.rent_invest_asset = (
                state.rent_invest_asset * (1 + monthly_return) + investable
            )
            state.carry_over = 0.0
        else:
            state.rent_invest_asset *= 1 + monthly_return
            state.carry_over = investable

        property_value = params.property_price * (
            1 + params.property_growth_rate / 100
        ) ** (month / 12)

        points.append(
            MonthlyDataPoint(
                month=month,
                elapsed_years=month / 12,
                buy_monthly_cost=buy_monthly_cost,
                rent_monthly_cost=rent,
                loan_balance=state.loan_balance,
                buy_invest_asset=state.buy_invest_asset,
                rent_invest_asset=state.rent_invest_asset,
                buy_net_worth=(
                    property_value - state.loan_balance + state.buy_invest_asset
                ),
                rent_net_worth=state.rent_invest_asset,
                property_value=property_value,
                investable=investable,
                carry_over=state.carry_over,
            )
        )

    return Projection(
        points=points,
        final_loan_balance=state.loan_balance,
        final_buy_invest_asset=state.buy_invest_asset,
        final_rent_invest_asset=state.rent_invest_asset,
    )


def annual_net_tax_benefit(
    params: SimulationParameters, year: int, year_end_balance: float
) -> float:
    """Mortgage deduction for the year minus the fixed-asset tax."""
    deduction = 0.0
    if year <= params.deduction_years:
        if params.deduction_policy is DeductionPolicy.PERCENT_OF_BALANCE_CAPPED:
            deduction = min(
                year_end_balance * params.deduction_rate / 100, params.deduction_cap
            )
        else:
            deduction = params.mortgage_deduction
    return deduction - params.fixed_asset_tax


def monthly_rent(params: SimulationParameters, month: int) -> float:
    tier = (month - 1) // RENT_RENEWAL_MONTHS
    return params.rent_start + tier * params.rent_increase


def rent_one_time_charges(
    params: SimulationParameters, month: int, rent: float
) -> float:
    """Move-in charges in month 1, renewal charges every 24 months after."""
    if month == 1:
        return params.rent_start * params.rent_deposit_months + params.relocation_cost
    if (month - 1) % RENT_RENEWAL_MONTHS == 0:
        return rent * params.renewal_fee_months + params.relocation_cost
    return 0.0


def monthly_mortgage_payment(
    principal: float, annual_rate_pct: float, term_months: int
) -> float:
    if principal <= 0 or term_months <= 0:
        return 0.0
    monthly_rate = annual_to_monthly_rate(annual_rate_pct)
    if monthly_rate == 0:
        return principal / term_months
    growth = (1 + monthly_rate) ** term_months
    return principal * monthly_rate * growth / (growth - 1)


def annual_to_monthly_rate(annual_rate_pct: float) -> float:
    if annual_rate_pct <= 0:
        return 0.0
    return annual_rate_pct / 100.0 / 12.0


def annual_to_monthly_growth(annual_rate_pct: float) -> float:
    if annual_rate_pct <= -100:
        raise ValueError("annual rate must be greater than -100%")
    return (1 + annual_rate_pct / 100.0) ** (1 / 12.0) - 1
