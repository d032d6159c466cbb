"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
Engine errors (DCFError) are rendered by the handler in redcf.main.
"""

import logging
import math
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict

from redcf.calculations import amortization, irr, metrics, validation
from redcf.calculations.dcf import run_dcf
from redcf.calculations.errors import validation_error
from redcf.calculations.models import CAMEL_NAMES, DCFInput

logger = logging.getLogger(__name__)

router = APIRouter()


class DCFRequest(BaseModel):
    """
    Input for a DCF run. Accepts snake_case or camelCase keys.

    Fields are optional here so that missing or out-of-range values are
    reported by the engine with the same error shape as any other input error.
    """

    model_config = ConfigDict(
        alias_generator=lambda name: CAMEL_NAMES.get(name, name), populate_by_name=True
    )

    # Property
    p0: Optional[float] = None
    i0: Optional[float] = None

    # Income / expense
    rent_monthly0: Optional[float] = None
    monthly_opex0: Optional[float] = None
    tax_annual_fixed: Optional[float] = None

    # Market
    vacancy: Optional[float] = None
    inflation: Optional[float] = None
    rent_decay: Optional[float] = None
    price_decay: Optional[float] = None

    # Exit
    exit_cost_rate: Optional[float] = None
    years: Optional[int] = None

    # Discounting
    discount_asset: Optional[float] = None
    discount_equity: Optional[float] = None

    # Financing (optional)
    loan_amount: Optional[float] = None
    loan_rate: Optional[float] = None
    loan_term: Optional[int] = None
    prepay_penalty_rate: Optional[float] = None

    def to_input(self) -> DCFInput:
        return DCFInput.from_dict(self.model_dump(exclude_none=True))


class DCFMetrics(BaseModel):
    """Summary metrics derived from the equity cash flows."""

    payback_period: int
    investment_grade: Optional[str] = None
    investment_grade_label: Optional[str] = None
    irr_asset_display: str
    irr_equity_display: str


class DCFResponse(BaseModel):
    """Response with the full DCF result and summary metrics."""

    result: dict
    metrics: DCFMetrics


def _summarize(result, discount_equity: float) -> DCFMetrics:
    grade = None
    if math.isfinite(result.npv_equity):
        grade = metrics.get_investment_grade(
            result.npv_equity, result.irr_equity, discount_equity
        )
    else:
        logger.warning("Equity NPV is not finite; skipping investment grade")

    return DCFMetrics(
        payback_period=metrics.calculate_payback_period(result.cf_equity),
        investment_grade=grade.grade if grade else None,
        investment_grade_label=grade.label if grade else None,
        irr_asset_display=metrics.format_percent(result.irr_asset),
        irr_equity_display=metrics.format_percent(result.irr_equity),
    )


@router.post("/dcf", response_model=DCFResponse)
def calculate_dcf(inputs: DCFRequest):
    """Run the full DCF analysis for one property."""
    dcf_input = inputs.to_input()
    result = run_dcf(dcf_input)

    return DCFResponse(
        result=result.to_dict(),
        metrics=_summarize(result, dcf_input.discount_equity),
    )


@router.post("/validate")
def validate_dcf_input(inputs: DCFRequest):
    """Run input and business-rule validation without calculating."""
    outcome = validation.validate_complete(inputs.to_input())
    return outcome.to_dict()


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    initial_guess: float = irr.DEFAULT_GUESS
    discount_rate: Optional[float] = None


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    method: str
    iterations: Optional[int] = None
    converged: bool
    npv: Optional[float] = None


@router.post("/irr", response_model=IRRResponse)
def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR (and optionally NPV) for annual cash flows."""
    result = irr.calculate_irr(inputs.cash_flows, initial_guess=inputs.initial_guess)
    if not result.converged:
        raise result.error

    npv = None
    if inputs.discount_rate is not None:
        npv = irr.calculate_npv(inputs.cash_flows, inputs.discount_rate)

    return IRRResponse(
        irr=result.value,
        method=result.method,
        iterations=result.iterations,
        converged=result.converged,
        npv=npv,
    )


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float
    term_years: int
    horizon: Optional[int] = None


@router.post("/amortization")
def calculate_amortization(inputs: AmortizationInput):
    """Generate an annual loan amortization schedule."""
    if inputs.term_years < 1:
        raise validation_error(
            "term_years", inputs.term_years, "Loan term must be at least 1 year"
        )
    if inputs.horizon is not None and inputs.horizon < 0:
        raise validation_error("horizon", inputs.horizon, "Horizon must be zero or greater")

    horizon = inputs.horizon if inputs.horizon is not None else inputs.term_years
    schedule = amortization.build_debt_schedule(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        term_years=inputs.term_years,
        horizon=horizon,
    )

    return {
        "schedule": [row.to_dict() for row in schedule.rows],
        "remaining": schedule.remaining,
        "payment": schedule.payment,
        "total_interest": amortization.calculate_total_interest(schedule),
        "total_principal": amortization.calculate_total_principal(schedule),
    }
