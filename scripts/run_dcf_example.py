"""
Run the DCF engine on a sample leveraged 10-year hold and print a summary.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from redcf.calculations import DCFError, run_dcf
from redcf.calculations.metrics import (
    calculate_payback_period,
    format_currency,
    format_percent,
    get_investment_grade,
)

EXAMPLE = {
    "p0": 50_000_000,
    "i0": 1_500_000,
    "rentMonthly0": 180_000,
    "monthlyOpex0": 30_000,
    "vacancy": 0.05,
    "inflation": 0.02,
    "rentDecay": 0.01,
    "priceDecay": 0.005,
    "taxAnnualFixed": 120_000,
    "exitCostRate": 0.03,
    "years": 10,
    "discountAsset": 0.02,
    "discountEquity": 0.05,
    "loanAmount": 35_000_000,
    "loanRate": 0.025,
    "loanTerm": 35,
    "prepayPenaltyRate": 0,
}


def main():
    try:
        result = run_dcf(EXAMPLE)
    except DCFError as e:
        print(f"Error: {e.user_message}")
        raise

    print("Year  Asset CF        Equity CF")
    for year, (asset, equity) in enumerate(zip(result.cf_asset, result.cf_equity)):
        print(f"{year:>4}  {format_currency(asset):>14}  {format_currency(equity):>14}")

    print(f"\nAsset NPV:   {format_currency(result.npv_asset)}")
    print(f"Equity NPV:  {format_currency(result.npv_equity)}")
    print(f"Asset IRR:   {format_percent(result.irr_asset)} ({result.irr_methods['asset']})")
    print(f"Equity IRR:  {format_percent(result.irr_equity)} ({result.irr_methods['equity']})")
    print(f"Net sale:    {format_currency(result.sale_price_net)}")
    print(f"Loan payoff: {format_currency(result.remaining_debt_at_exit)}")
    if result.implicit_cap is not None:
        print(f"Exit cap:    {format_percent(result.implicit_cap)}")

    grade = get_investment_grade(result.npv_equity, result.irr_equity, EXAMPLE["discountEquity"])
    print(f"\nPayback:     year {calculate_payback_period(result.cf_equity)}")
    print(f"Grade:       {grade.label} ({grade.grade})")

    for warning in result.warnings:
        print(f"Warning: {warning.user_message}")


if __name__ == "__main__":
    main()
