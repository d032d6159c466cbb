"""
Cash Flow Calculations

Generates annual unlevered (asset) and levered (equity) cash flow
projections for a single property held for N years and sold at the end.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from redcf.calculations.amortization import DebtSchedule
from redcf.calculations.errors import (
    DCFError,
    DCFErrorType,
    ErrorContext,
    ErrorSeverity,
    unrealistic_result_warning,
)
from redcf.calculations.models import DCFInput


@dataclass
class CashFlowProjection:
    """Both cash flow vectors (index 0 = acquisition) and exit figures."""

    cf_asset: List[float]
    cf_equity: List[float]
    noi: List[float]
    sale_price: float  # Gross price in year N, before exit costs
    sale_price_net: float
    remaining_debt_at_exit: float
    implicit_cap: Optional[float] = None
    warnings: List[DCFError] = field(default_factory=list)


def calculate_escalation_factor(annual_rate: float, periods: int) -> float:
    """Compound growth factor (1 + rate)^periods."""
    return (1 + annual_rate) ** periods


def calculate_noi(input: DCFInput, year: int) -> float:
    """
    Net operating income for a projection year.

    Rent grows at (inflation - rent_decay) and opex at inflation, both
    compounded from year 1. The annual tax charge is flat.

    Args:
        input: Property assumptions
        year: Projection year (1-based)

    Returns:
        NOI for the year
    """
    rent_monthly = input.rent_monthly0 * calculate_escalation_factor(
        input.inflation - input.rent_decay, year - 1
    )
    egi = 12 * rent_monthly * (1 - input.vacancy)
    opex = 12 * input.monthly_opex0 * calculate_escalation_factor(input.inflation, year - 1)
    return egi - opex - input.tax_annual_fixed


def calculate_sale_price(input: DCFInput) -> float:
    """Gross sale price in the exit year: p0 grown at (inflation - price_decay)."""
    return input.p0 * calculate_escalation_factor(
        input.inflation - input.price_decay, input.years
    )


def calculate_implicit_cap(input: DCFInput, sale_price: float) -> Optional[float]:
    """
    Forward cap rate implied by the exit: NOI of year N+1 over the year-N price.

    Returns None when either operand is not positive.
    """
    forward_noi = calculate_noi(input, input.years + 1)
    if forward_noi <= 0 or sale_price <= 0:
        return None
    return forward_noi / sale_price


def project_cash_flows(input: DCFInput, schedule: DebtSchedule) -> CashFlowProjection:
    """
    Project asset and equity cash flows for years 0..N.

    Args:
        input: Validated property assumptions
        schedule: Debt schedule covering years 1..N

    Returns:
        CashFlowProjection with negative-NOI warnings collected

    Raises:
        DCFError: if the exit-year sale price is not positive
    """
    years = input.years
    warnings = []

    cf_asset = [0.0] * (years + 1)
    cf_equity = [0.0] * (years + 1)
    noi_by_year = [0.0] * (years + 1)

    # === ACQUISITION ===
    cf_asset[0] = -(input.p0 + input.i0)
    cf_equity[0] = -(input.p0 + input.i0 - input.loan_amount)

    # === OPERATIONS ===
    for year in range(1, years + 1):
        noi = calculate_noi(input, year)
        noi_by_year[year] = noi
        cf_asset[year] = noi
        cf_equity[year] = noi - schedule.payment_for_year(year)

        if noi < 0 and year < years:
            warnings.append(
                unrealistic_result_warning(
                    "noi",
                    noi,
                    f"NOI is negative in year {year}",
                    {"year": year, "noi": noi},
                )
            )

    # === EXIT ===
    sale_price = calculate_sale_price(input)
    if sale_price <= 0:
        raise DCFError(
            DCFErrorType.UNREALISTIC_RESULT,
            ErrorSeverity.error,
            "Sale price at exit is zero or negative",
            ErrorContext(
                field="sale_price",
                value=sale_price,
                operation="sale_price_calculation",
                metadata={
                    "p0": input.p0,
                    "inflation": input.inflation,
                    "price_decay": input.price_decay,
                    "years": years,
                },
            ),
        )

    sale_net = sale_price * (1 - input.exit_cost_rate)
    remaining = schedule.remaining
    prepay_penalty = remaining * input.prepay_penalty

    cf_asset[years] += sale_net
    cf_equity[years] += sale_net - remaining - prepay_penalty

    return CashFlowProjection(
        cf_asset=cf_asset,
        cf_equity=cf_equity,
        noi=noi_by_year,
        sale_price=sale_price,
        sale_price_net=sale_net,
        remaining_debt_at_exit=remaining,
        implicit_cap=calculate_implicit_cap(input, sale_price),
        warnings=warnings,
    )
