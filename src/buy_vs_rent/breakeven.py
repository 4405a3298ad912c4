from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

# Search range is [0, UPPER_BOUND_MULTIPLE * price].
UPPER_BOUND_MULTIPLE = 3
# Enough for sub-unit precision at realistic property prices.
BISECTION_ITERATIONS = 60


def solve_break_even(
    net_worth_at_sale_price: Callable[[float], float],
    target_net_worth: float,
    upper_bound: float,
    iterations: int = BISECTION_ITERATIONS,
) -> float:
    """
    Bisect for the sale price whose buy-side net worth equals the target.

    The function must be non-decreasing in the sale price. An unreachable
    target converges onto the nearest bound instead of raising; see
    ``is_pinned``.
    """
    lo, hi = 0.0, float(upper_bound)
    for _ in range(iterations):
        mid = (lo + hi) / 2
        if net_worth_at_sale_price(mid) < target_net_worth:
            lo = mid
        else:
            hi = mid
    return (lo + hi) / 2


def is_pinned(
    net_worth_at_sale_price: Callable[[float], float],
    target_net_worth: float,
    upper_bound: float,
) -> bool:
    if net_worth_at_sale_price(0.0) >= target_net_worth:
        logger.debug("Buying matches renting even at a sale price of 0")
        return True
    if net_worth_at_sale_price(upper_bound) < target_net_worth:
        logger.debug("Buying never catches up below a sale price of %.0f", upper_bound)
        return True
    return False


def break_even_growth_rate(property_price: float, break_even_price: float) -> float:
    return (break_even_price / property_price - 1) * 100


def break_even_annual_rate(
    property_price: float, break_even_price: float, years: int
) -> float:
    return ((break_even_price / property_price) ** (1 / years) - 1) * 100
