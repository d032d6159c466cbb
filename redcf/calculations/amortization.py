"""
Loan Amortization Calculations

Builds an annual level-payment (annuity) debt schedule truncated
to the holding horizon.
"""

from dataclasses import dataclass, asdict, field
from typing import List, Dict

EPS = 1e-12


@dataclass(frozen=True)
class DebtYear:
    """One projection year of the debt schedule."""

    year: int
    begin_balance: float
    interest: float
    principal: float
    payment: float
    end_balance: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class DebtSchedule:
    """Schedule rows for years 1..horizon plus the balance due at exit."""

    rows: List[DebtYear] = field(default_factory=list)
    remaining: float = 0.0
    payment: float = 0.0

    def payment_for_year(self, year: int) -> float:
        """Debt service in a projection year (0 once the schedule runs out)."""
        if 1 <= year <= len(self.rows):
            return self.rows[year - 1].payment
        return 0.0


def calculate_payment(
    principal: float, annual_rate: float, term_years: int, eps: float = EPS
) -> float:
    """
    Calculate the annual level payment.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal (e.g., 0.025 for 2.5%)
        term_years: Amortization period in years
        eps: Rates with magnitude below this are treated as zero

    Returns:
        Annual payment amount (positive number)
    """
    if principal <= 0:
        return 0.0
    if term_years <= 0:
        return 0.0

    if abs(annual_rate) < eps:
        return principal / term_years

    return principal * annual_rate / (1 - (1 + annual_rate) ** -term_years)


def build_debt_schedule(
    principal: float,
    annual_rate: float,
    term_years: int,
    horizon: int,
    eps: float = EPS,
) -> DebtSchedule:
    """
    Generate the annual amortization schedule for years 1..horizon.

    Years past the loan term (or after the balance is repaid) are recorded
    as zero-payment rows with a flat balance.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal
        term_years: Amortization period in years
        horizon: Holding period in years
        eps: Numerical tolerance

    Returns:
        DebtSchedule with the rows and the balance remaining at the horizon
        (non-zero only when horizon < term_years)
    """
    if principal <= 0:
        return DebtSchedule()

    payment = calculate_payment(principal, annual_rate, term_years, eps)
    balance = principal
    rows = []

    for year in range(1, horizon + 1):
        begin = balance
        if year <= term_years and balance > eps:
            interest = balance * annual_rate
            principal_pmt = min(payment - interest, balance)
            year_payment = interest + principal_pmt
            balance = balance - principal_pmt
            rows.append(
                DebtYear(
                    year=year,
                    begin_balance=max(0.0, begin),
                    interest=max(0.0, interest),
                    principal=max(0.0, principal_pmt),
                    payment=max(0.0, year_payment),
                    end_balance=max(0.0, balance),
                )
            )
        else:
            rows.append(
                DebtYear(
                    year=year,
                    begin_balance=max(0.0, begin),
                    interest=0.0,
                    principal=0.0,
                    payment=0.0,
                    end_balance=max(0.0, balance),
                )
            )

    remaining = max(0.0, balance) if horizon < term_years else 0.0
    return DebtSchedule(rows=rows, remaining=remaining, payment=payment)


def calculate_total_interest(schedule: DebtSchedule) -> float:
    """Calculate total interest paid over the schedule."""
    return sum(row.interest for row in schedule.rows)


def calculate_total_principal(schedule: DebtSchedule) -> float:
    """Calculate total principal repaid over the schedule."""
    return sum(row.principal for row in schedule.rows)
