"""
Buy vs. rent break-even toolkit.

This package projects month-by-month net worth for buying a home with a
loan versus renting and investing the difference, then solves for the
resale price at which both strategies finish level.
"""

from .schemas import (
    DEFAULT_PARAMETERS,
    DeductionPolicy,
    MonthlyDataPoint,
    RateBandPolicy,
    SimulationParameters,
    SimulationResult,
)
from .model import monthly_mortgage_payment, project_months, run_simulation
from .settlement import net_worth_at_sale_price, settle
from .breakeven import solve_break_even

__all__ = [
    "DEFAULT_PARAMETERS",
    "DeductionPolicy",
    "MonthlyDataPoint",
    "RateBandPolicy",
    "SimulationParameters",
    "SimulationResult",
    "monthly_mortgage_payment",
    "net_worth_at_sale_price",
    "project_months",
    "run_simulation",
    "settle",
    "solve_break_even",
]
