"""
DCF Orchestration

run_dcf sequences validation, debt schedule, cash flow projection,
NPV/IRR and result checks into one DCFResult.

Fatal problems raise DCFError. Non-fatal findings are collected into
the result's warnings in the order they were found.
"""

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Union

from redcf.calculations.amortization import build_debt_schedule
from redcf.calculations.cashflow import project_cash_flows
from redcf.calculations.config import DEFAULT_CONFIG, DCFConfig
from redcf.calculations.errors import (
    DCFError,
    DCFErrorType,
    ErrorContext,
    critical_error,
    log_error,
)
from redcf.calculations.irr import calculate_irr, calculate_npv
from redcf.calculations.models import DCFInput, DCFResult
from redcf.calculations.validation import (
    validate_business_rules,
    validate_input,
    validate_results,
)

logger = logging.getLogger(__name__)


def _collect(warnings: List[DCFError], found: List[DCFError], context: str) -> None:
    for warning in found:
        log_error(warning, context)
    warnings.extend(found)


def _solve_irr(cash_flows: List[float], guess: float, name: str, config: DCFConfig):
    result = calculate_irr(cash_flows, initial_guess=guess, config=config.irr)
    if not result.converged:
        error = result.error
        error.context.operation = name
        raise error
    return result


def _run(input: DCFInput, config: DCFConfig) -> DCFResult:
    warnings: List[DCFError] = []

    # === INPUT ===
    validation = validate_input(input, config.validation)
    if not validation.is_valid:
        raise validation.first_error

    # Whole-number floats (10.0) pass validation; the projection needs ints
    input = replace(
        input,
        years=int(input.years),
        loan_term=int(input.loan_term) if input.loan_amount > 0 else input.loan_term,
    )

    _collect(
        warnings,
        validate_business_rules(input, config.validation).warnings,
        "business_rules",
    )

    # === CASH FLOWS ===
    schedule = build_debt_schedule(
        input.loan_amount,
        input.loan_rate,
        input.loan_term or 0,
        input.years,
        eps=config.eps,
    )
    projection = project_cash_flows(input, schedule)
    _collect(warnings, projection.warnings, "cash_flow_projection")

    # === RETURNS ===
    npv_asset = calculate_npv(projection.cf_asset, input.discount_asset)
    npv_equity = calculate_npv(projection.cf_equity, input.discount_equity)

    irr_asset = _solve_irr(projection.cf_asset, config.asset_irr_guess, "irr_asset", config)
    irr_equity = _solve_irr(projection.cf_equity, config.equity_irr_guess, "irr_equity", config)

    result = DCFResult(
        cf_asset=projection.cf_asset,
        cf_equity=projection.cf_equity,
        npv_asset=npv_asset,
        npv_equity=npv_equity,
        irr_asset=irr_asset.value,
        irr_equity=irr_equity.value,
        sale_price_net=projection.sale_price_net,
        remaining_debt_at_exit=projection.remaining_debt_at_exit,
        implicit_cap=projection.implicit_cap,
        noi=projection.noi,
        debt_schedule=list(schedule.rows),
        irr_methods={"asset": irr_asset.method, "equity": irr_equity.method},
    )

    _collect(warnings, validate_results(result, config.validation).warnings, "result_validation")
    result.warnings = warnings
    return result


def run_dcf(
    input: Union[DCFInput, Mapping[str, Any]], config: DCFConfig = DEFAULT_CONFIG
) -> DCFResult:
    """
    Run a full DCF analysis for one property.

    Args:
        input: DCFInput, or a mapping of its fields (snake_case or camelCase)
        config: Engine configuration

    Returns:
        DCFResult with cash flows, NPVs, IRRs, exit figures and warnings

    Raises:
        DCFError: INVALID_INPUT for the first structural problem,
            UNREALISTIC_RESULT for a non-positive sale price,
            IRR_CALCULATION_FAILED when an IRR does not converge, or
            NUMERICAL_INSTABILITY (critical) wrapping any other failure
    """
    try:
        if not isinstance(input, DCFInput):
            input = DCFInput.from_dict(input)
        logger.debug(f"Running DCF for {input.years} years, loan={input.loan_amount}")
        result = _run(input, config)
    except DCFError as e:
        log_error(e, "run_dcf")
        raise
    except Exception as e:
        error = critical_error(
            DCFErrorType.NUMERICAL_INSTABILITY,
            "Unexpected error during DCF calculation",
            ErrorContext(
                operation="dcf_execution",
                metadata={"original_error": repr(e), "error_type": type(e).__name__},
            ),
        )
        log_error(error, "run_dcf")
        raise error from e

    logger.debug(
        f"DCF complete: irr_asset={result.irr_asset:.6f}, irr_equity={result.irr_equity:.6f}, "
        f"warnings={len(result.warnings)}"
    )
    return result
