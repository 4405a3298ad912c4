from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping


class RateBandPolicy(str, Enum):
    """How the three interest rates are laid out over the years."""

    FIXED_YEAR_BANDS = "fixed_year_bands"  # years 1-3, 4-6, 7+
    EQUAL_THIRDS_OF_HORIZON = "equal_thirds_of_horizon"


class DeductionPolicy(str, Enum):
    """How the annual mortgage-interest tax deduction is computed."""

    FLAT_ANNUAL_AMOUNT = "flat_annual_amount"
    PERCENT_OF_BALANCE_CAPPED = "percent_of_balance_capped"


_NON_NEGATIVE_FIELDS = (
    "transaction_cost_rate",
    "down_payment",
    "rate1",
    "rate2",
    "rate3",
    "management_fee_1",
    "management_fee_2",
    "fixed_asset_tax",
    "mortgage_deduction",
    "deduction_rate",
    "deduction_cap",
    "capital_gains_exemption",
    "rent_start",
    "rent_increase",
    "rent_deposit_months",
    "renewal_fee_months",
    "relocation_cost",
)

# Upper bounds keep every run finite.
MAX_YEARS = 100
MAX_RATE_PCT = 100.0
MAX_AMOUNT = 1e15
MAX_RENT_MONTHS = 120

_PERCENT_FIELDS = (
    "transaction_cost_rate",
    "rate1",
    "rate2",
    "rate3",
    "deduction_rate",
    "investment_return",
    "property_growth_rate",
)

_AMOUNT_FIELDS = (
    "property_price",
    "down_payment",
    "management_fee_1",
    "management_fee_2",
    "fixed_asset_tax",
    "mortgage_deduction",
    "deduction_cap",
    "capital_gains_exemption",
    "rent_start",
    "rent_increase",
    "relocation_cost",
)

_INTEGER_FIELDS = (
    "loan_years",
    "horizon_years",
    "management_fee_step_year",
    "deduction_years",
)


@dataclass(frozen=True)
class SimulationParameters:
    """Everything one buy-vs-rent run needs. Currency values share one unit."""

    # Purchase and loan
    property_price: float = 140_000_000
    transaction_cost_rate: float = 7.0  # % of price, financed into the loan
    down_payment: float = 0.0
    loan_years: int = 35
    rate1: float = 1.5  # annual percentage, e.g., 1.5
    rate2: float = 1.75
    rate3: float = 2.0
    rate_band_policy: RateBandPolicy = RateBandPolicy.FIXED_YEAR_BANDS

    # Ownership running costs
    management_fee_1: float = 40_000  # monthly, management + repair reserve
    management_fee_2: float = 60_000
    management_fee_step_year: int = 6  # first year billed at management_fee_2
    fixed_asset_tax: float = 200_000  # annual
    mortgage_deduction: float = 315_000  # annual, flat policy
    deduction_policy: DeductionPolicy = DeductionPolicy.FLAT_ANNUAL_AMOUNT
    deduction_rate: float = 0.7  # % of year-end balance, capped policy
    deduction_cap: float = 350_000
    deduction_years: int = 10

    # Disposal
    sell_cost_rate: float = 4.0
    capital_gains_exemption: float = 30_000_000
    capital_gains_tax_rate: float = 20.315

    # Renting
    rent_start: float = 330_000  # monthly
    rent_increase: float = 15_000  # added every 24 months
    rent_deposit_months: float = 1.0
    renewal_fee_months: float = 1.0
    relocation_cost: float = 0.0

    # Shared assumptions
    investment_return: float = 7.0  # annual
    horizon_years: int = 10
    property_growth_rate: float = 0.43  # annual

    def __post_init__(self) -> None:
        # Accept plain strings for the policy fields (JSON configs, CLI).
        object.__setattr__(
            self, "rate_band_policy", RateBandPolicy(self.rate_band_policy)
        )
        object.__setattr__(
            self, "deduction_policy", DeductionPolicy(self.deduction_policy)
        )

        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, Enum):
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{item.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{item.name} must be finite, got {value!r}")

        for name in _INTEGER_FIELDS:
            if int(getattr(self, name)) != getattr(self, name):
                raise ValueError(f"{name} must be a whole number of years")
            object.__setattr__(self, name, int(getattr(self, name)))

        if self.loan_years < 1:
            raise ValueError("loan_years must be at least 1")
        if self.horizon_years < 1:
            raise ValueError("horizon_years must be at least 1")
        if self.management_fee_step_year < 1:
            raise ValueError("management_fee_step_year must be at least 1")
        if self.deduction_years < 0:
            raise ValueError("deduction_years must not be negative")
        if self.property_price <= 0:
            raise ValueError("property_price must be positive")
        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.investment_return <= -100:
            raise ValueError("investment_return must be greater than -100%")
        if self.property_growth_rate <= -100:
            raise ValueError("property_growth_rate must be greater than -100%")
        if not 0 <= self.sell_cost_rate < 100:
            raise ValueError("sell_cost_rate must be in [0, 100)")
        if not 0 <= self.capital_gains_tax_rate < 100:
            raise ValueError("capital_gains_tax_rate must be in [0, 100)")
        for name in _INTEGER_FIELDS:
            if getattr(self, name) > MAX_YEARS:
                raise ValueError(f"{name} must be at most {MAX_YEARS} years")
        for name in _PERCENT_FIELDS:
            if getattr(self, name) > MAX_RATE_PCT:
                raise ValueError(f"{name} must be at most {MAX_RATE_PCT:g}%")
        for name in _AMOUNT_FIELDS:
            if getattr(self, name) > MAX_AMOUNT:
                raise ValueError(f"{name} must be at most {MAX_AMOUNT:g}")
        for name in ("rent_deposit_months", "renewal_fee_months"):
            if getattr(self, name) > MAX_RENT_MONTHS:
                raise ValueError(f"{name} must be at most {MAX_RENT_MONTHS} months")
        if self.down_payment > self.acquisition_cost:
            raise ValueError("down_payment cannot exceed the acquisition cost")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SimulationParameters":
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(unknown)}")
        return cls(**dict(mapping))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["rate_band_policy"] = self.rate_band_policy.value
        data["deduction_policy"] = self.deduction_policy.value
        return data

    @property
    def horizon_months(self) -> int:
        return self.horizon_years * 12

    @property
    def loan_months(self) -> int:
        return self.loan_years * 12

    @property
    def acquisition_cost(self) -> float:
        """Price plus transaction costs; the basis for capital gains."""
        return self.property_price * (1 + self.transaction_cost_rate / 100)

    @property
    def loan_principal(self) -> float:
        return self.acquisition_cost - self.down_payment

    @property
    def rent_at_horizon(self) -> float:
        """Monthly rent in force once the horizon has elapsed."""
        return self.rent_start + (self.horizon_months // 24) * self.rent_increase

    def rate_for_year(self, year: int) -> float:
        rates = (self.rate1, self.rate2, self.rate3)
        if self.rate_band_policy is RateBandPolicy.EQUAL_THIRDS_OF_HORIZON:
            band = min(2, (year - 1) * 3 // self.horizon_years)
            return rates[band]
        if year <= 3:
            return self.rate1
        if year <= 6:
            return self.rate2
        return self.rate3

    def management_fee_for_year(self, year: int) -> float:
        if year < self.management_fee_step_year:
            return self.management_fee_1
        return self.management_fee_2


DEFAULT_PARAMETERS = SimulationParameters()


@dataclass
class MonthlyState:
    """Running balances; owned by a single projection run."""

    loan_balance: float
    year_end_balance: float
    buy_invest_asset: float = 0.0
    rent_invest_asset: float = 0.0
    carry_over: float = 0.0  # deferred negative investable amount


@dataclass(frozen=True)
class MonthlyDataPoint:
    month: int
    elapsed_years: float
    buy_monthly_cost: float
    rent_monthly_cost: float
    loan_balance: float
    buy_invest_asset: float
    rent_invest_asset: float
    buy_net_worth: float
    rent_net_worth: float
    property_value: float
    investable: float = 0.0
    carry_over: float = 0.0


@dataclass(frozen=True)
class Projection:
    points: List[MonthlyDataPoint]
    final_loan_balance: float
    final_buy_invest_asset: float
    final_rent_invest_asset: float


@dataclass(frozen=True)
class SimulationResult:
    parameters: SimulationParameters
    buy_final_net_worth: float
    rent_final_net_worth: float
    break_even_price: float
    break_even_growth_rate: float  # % over the whole horizon
    break_even_annual_rate: float  # % per year
    break_even_pinned: bool  # True when no break-even lies inside the search range
    final_loan_balance: float
    final_property_value: float
    buy_invest_asset: float
    rent_invest_asset: float
    sale_cost: float
    capital_gains_tax: float
    points: List[MonthlyDataPoint] = field(default_factory=list)

    @property
    def yearly(self) -> List[MonthlyDataPoint]:
        return [point for point in self.points if point.month % 12 == 0]

    @property
    def net_worth_difference(self) -> float:
        return self.buy_final_net_worth - self.rent_final_net_worth

    @property
    def better_option(self) -> str:
        if self.buy_final_net_worth >= self.rent_final_net_worth:
            return "buying"
        return "renting"
