"""
Investment Metrics

Summary figures derived from a DCF result: payback period and a
coarse investment grade, plus display formatting helpers.
"""

import math
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class InvestmentGrade:
    """Classification of an investment by NPV and IRR."""

    grade: str  # excellent | good | caution | poor
    label: str
    description: str


# NPV above this loss still counts as 'caution' rather than 'poor'
CAUTION_NPV_FLOOR = -1_000_000
IRR_MARGIN = 0.01


def get_investment_grade(npv: float, irr: float, discount_rate: float) -> InvestmentGrade:
    """
    Grade an investment against its required return.

    Args:
        npv: Net present value
        irr: Internal rate of return as decimal
        discount_rate: Required rate of return as decimal

    Returns:
        InvestmentGrade

    Raises:
        ValueError: If any argument is not finite or the discount rate is negative
    """
    if not all(math.isfinite(v) for v in (npv, irr, discount_rate)):
        raise ValueError("All parameters must be finite numbers")
    if discount_rate < 0:
        raise ValueError("Discount rate must be non-negative")

    if npv > 0 and irr > discount_rate + IRR_MARGIN:
        return InvestmentGrade(
            "excellent",
            "Strong investment",
            "NPV is positive and IRR is well above the required return",
        )
    if npv >= 0 and irr >= discount_rate:
        return InvestmentGrade(
            "good",
            "Investable",
            "NPV is positive and IRR meets the required return",
        )
    if npv >= CAUTION_NPV_FLOOR and irr >= discount_rate - IRR_MARGIN:
        return InvestmentGrade(
            "caution",
            "Needs review",
            "NPV or IRR falls slightly short of the required return",
        )
    return InvestmentGrade(
        "poor",
        "Not recommended",
        "NPV is negative and IRR is well below the required return",
    )


def calculate_payback_period(cf_equity: List[float]) -> int:
    """
    Years until operating equity cash flows recover the initial outlay.

    The sale year (last element) is excluded. Returns the holding period
    when the outlay is never recovered from operations.

    Args:
        cf_equity: Equity cash flows, index 0 = initial investment (negative)

    Returns:
        Payback year
    """
    if len(cf_equity) < 2:
        raise ValueError(
            "Cash flows must contain at least 2 elements (initial investment + 1 year)"
        )

    initial_investment = abs(cf_equity[0])
    if initial_investment == 0:
        return 0

    cumulative = 0.0
    for year in range(1, len(cf_equity) - 1):
        annual_cf = cf_equity[year]
        if not math.isfinite(annual_cf):
            raise ValueError(f"Cash flow at year {year} must be a finite number")
        cumulative += annual_cf
        if cumulative >= initial_investment:
            return year

    return len(cf_equity) - 1


def format_percent(value: float) -> str:
    """0.0512 -> '5.12%'"""
    if not math.isfinite(value):
        raise ValueError("Value must be a finite number")
    return f"{value * 100:.2f}%"


def format_currency(value: float) -> str:
    """
    Format yen amounts with oku (1e8) / man (1e4) units.

    150000 -> '15万円', 250000000 -> '2.5億円'
    """
    if not math.isfinite(value):
        raise ValueError("Value must be a finite number")

    abs_value = abs(value)
    sign = "-" if value < 0 else ""

    if abs_value >= 100_000_000:
        return f"{sign}{abs_value / 100_000_000:.1f}億円"
    if abs_value >= 10_000:
        return f"{sign}{abs_value / 10_000:.0f}万円"
    return f"{sign}{abs_value:,.0f}円"
