"""
DCF Validation

Three independent passes:
- validate_input: structural checks, every violation is an INVALID_INPUT error
- validate_business_rules: implausible but legal assumptions, warnings only
- validate_results: sanity checks on computed IRR/NPV/cap rate, warnings only
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from redcf.calculations.config import DEFAULT_CONFIG, ValidationConfig
from redcf.calculations.errors import (
    DCFError,
    business_rule_warning,
    market_inconsistency_warning,
    numerical_instability_warning,
    unrealistic_result_warning,
    validation_error,
)
from redcf.calculations.models import DCFInput, DCFResult


@dataclass
class ValidationResult:
    """Outcome of a validation pass."""

    is_valid: bool
    value: Any = None
    errors: List[DCFError] = field(default_factory=list)
    warnings: List[DCFError] = field(default_factory=list)

    @property
    def first_error(self) -> Optional[DCFError]:
        return self.errors[0] if self.errors else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


# =============================================================================
# HELPERS
# =============================================================================


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_percentage(value: Any) -> bool:
    return is_finite_number(value) and 0 <= value <= 1


def is_non_negative(value: Any) -> bool:
    return is_finite_number(value) and value >= 0


def is_positive(value: Any) -> bool:
    return is_finite_number(value) and value > 0


def is_integer_in_range(value: Any, low: int, high: int) -> bool:
    return is_finite_number(value) and float(value).is_integer() and low <= value <= high


def _pct(value: float, digits: int = 1) -> str:
    return f"{value * 100:.{digits}f}%"


# =============================================================================
# STRUCTURAL VALIDATION
# =============================================================================


def validate_input(
    input: DCFInput, config: ValidationConfig = DEFAULT_CONFIG.validation
) -> ValidationResult:
    """
    Check every input field against its domain.

    Args:
        input: Assumptions to check
        config: Year limits

    Returns:
        ValidationResult with one INVALID_INPUT error per offending field
    """
    errors = []
    years_range = f"{config.min_years}-{config.max_years}"

    positive_fields = {
        "p0": "Purchase price must be a positive number",
        "rent_monthly0": "Monthly rent must be a positive number",
    }
    non_negative_fields = {
        "i0": "Initial costs must be zero or greater",
        "monthly_opex0": "Monthly operating expenses must be zero or greater",
        "tax_annual_fixed": "Annual property tax must be zero or greater",
        "rent_decay": "Rent decay rate must be zero or greater",
        "price_decay": "Price decay rate must be zero or greater",
        "discount_asset": "Asset discount rate must be zero or greater",
        "discount_equity": "Equity discount rate must be zero or greater",
        "loan_amount": "Loan amount must be zero or greater",
        "loan_rate": "Loan rate must be zero or greater",
    }
    percentage_fields = {
        "vacancy": "Vacancy rate must be between 0 and 1",
        "exit_cost_rate": "Exit cost rate must be between 0 and 1",
    }

    for name, message in positive_fields.items():
        value = getattr(input, name)
        if not is_positive(value):
            errors.append(validation_error(name, value, message))

    for name, message in non_negative_fields.items():
        value = getattr(input, name)
        if not is_non_negative(value):
            errors.append(validation_error(name, value, message))

    if not is_finite_number(input.inflation):
        errors.append(
            validation_error("inflation", input.inflation, "Inflation must be a finite number")
        )

    for name, message in percentage_fields.items():
        value = getattr(input, name)
        if not is_percentage(value):
            errors.append(validation_error(name, value, message))

    if input.prepay_penalty_rate is not None and not is_percentage(input.prepay_penalty_rate):
        errors.append(
            validation_error(
                "prepay_penalty_rate",
                input.prepay_penalty_rate,
                "Prepayment penalty rate must be between 0 and 1",
            )
        )

    if not is_integer_in_range(input.years, config.min_years, config.max_years):
        errors.append(
            validation_error(
                "years", input.years, f"Holding period must be {years_range} whole years"
            )
        )

    # Loan term only matters when there is a loan
    if is_positive(input.loan_amount) and not is_integer_in_range(
        input.loan_term, config.min_years, config.max_years
    ):
        errors.append(
            validation_error(
                "loan_term", input.loan_term, f"Loan term must be {years_range} whole years"
            )
        )

    return ValidationResult(
        is_valid=not errors,
        value=input if not errors else None,
        errors=errors,
    )


# =============================================================================
# BUSINESS RULES
# =============================================================================


def validate_business_rules(
    input: DCFInput, config: ValidationConfig = DEFAULT_CONFIG.validation
) -> ValidationResult:
    """
    Flag economically implausible assumptions. Never invalidates the input.

    Expects an input that already passed validate_input.
    """
    warnings = []
    total_cost = input.p0 + input.i0

    # Loan rules
    if input.loan_amount > 0 and input.loan_term is not None and input.loan_term < input.years:
        warnings.append(
            business_rule_warning(
                "loan_term",
                input.loan_term,
                "Loan term is shorter than the holding period; the loan is repaid before exit",
                {"loan_term": input.loan_term, "years": input.years},
            )
        )

    loan_to_cost = input.loan_amount / total_cost if total_cost > 0 else 0.0
    if loan_to_cost > config.max_loan_to_cost:
        warnings.append(
            business_rule_warning(
                "loan_amount",
                loan_to_cost,
                f"Loan-to-cost ({_pct(loan_to_cost)}) exceeds "
                f"{_pct(config.max_loan_to_cost, 0)}; very high leverage",
                {
                    "loan_to_cost": loan_to_cost,
                    "loan_amount": input.loan_amount,
                    "total_cost": total_cost,
                },
            )
        )

    if input.loan_rate > config.max_loan_rate:
        warnings.append(
            business_rule_warning(
                "loan_rate",
                input.loan_rate,
                f"Loan rate ({_pct(input.loan_rate)}) exceeds {_pct(config.max_loan_rate, 0)}",
                {"value": input.loan_rate},
            )
        )

    # Equity should normally carry the higher discount rate
    if input.discount_equity < input.discount_asset:
        warnings.append(
            business_rule_warning(
                "discount_equity",
                input.discount_equity,
                "Equity discount rate is below the asset discount rate; "
                "leverage normally raises equity risk",
                {
                    "discount_asset": input.discount_asset,
                    "discount_equity": input.discount_equity,
                },
            )
        )

    # Discount rates
    bounds = config.discount_rate
    for name, label in (("discount_asset", "Asset"), ("discount_equity", "Equity")):
        value = getattr(input, name)
        if not bounds.contains(value):
            warnings.append(
                unrealistic_result_warning(
                    name,
                    value,
                    f"{label} discount rate ({_pct(value)}) is outside the usual range "
                    f"({_pct(bounds.low)}-{_pct(bounds.high)})",
                    {"value": value, "min_bound": bounds.low, "max_bound": bounds.high},
                )
            )

    # Market parameters
    if not config.inflation.contains(input.inflation):
        warnings.append(
            unrealistic_result_warning(
                "inflation",
                input.inflation,
                f"Inflation ({_pct(input.inflation)}) is outside the usual range "
                f"({_pct(config.inflation.low)}-{_pct(config.inflation.high)})",
                {
                    "value": input.inflation,
                    "min_bound": config.inflation.low,
                    "max_bound": config.inflation.high,
                },
            )
        )

    upper_limits = (
        ("rent_decay", "Rent decay rate", config.rent_decay.high),
        ("price_decay", "Price decay rate", config.price_decay.high),
        ("vacancy", "Vacancy rate", config.vacancy.high),
    )
    for name, label, limit in upper_limits:
        value = getattr(input, name)
        if value > limit:
            warnings.append(
                unrealistic_result_warning(
                    name,
                    value,
                    f"{label} ({_pct(value)}) may be too high",
                    {"value": value, "max_bound": limit},
                )
            )

    return ValidationResult(is_valid=True, value=input, warnings=warnings)


# =============================================================================
# RESULT VALIDATION
# =============================================================================


def _result_value(result: Union[DCFResult, Mapping[str, Any]], name: str) -> Any:
    if isinstance(result, Mapping):
        return result.get(name)
    return getattr(result, name, None)


def validate_results(
    result: Union[DCFResult, Mapping[str, Any]],
    config: ValidationConfig = DEFAULT_CONFIG.validation,
) -> ValidationResult:
    """
    Sanity-check computed figures. Missing values are skipped.

    Args:
        result: DCFResult or a mapping holding any of irr_asset, irr_equity,
            npv_asset, npv_equity, implicit_cap
        config: Plausibility bands

    Returns:
        ValidationResult carrying warnings only
    """
    warnings = []

    for name, label in (("irr_asset", "Asset IRR"), ("irr_equity", "Equity IRR")):
        value = _result_value(result, name)
        if value is None:
            continue
        if not is_finite_number(value):
            warnings.append(
                numerical_instability_warning(
                    name, f"{name}_calculation", value, f"{label} calculation is unstable"
                )
            )
        elif abs(value) > config.irr_absolute.high:
            warnings.append(
                unrealistic_result_warning(
                    name,
                    value,
                    f"{label} ({_pct(value)}) is an abnormal value",
                    {"value": value},
                )
            )
        elif abs(value) > config.irr_relative.high:
            warnings.append(
                unrealistic_result_warning(
                    name,
                    value,
                    f"{label} ({_pct(value)}) exceeds 100%; the calculation may be off",
                    {"value": value},
                )
            )

    for name, label in (("npv_asset", "Asset NPV"), ("npv_equity", "Equity NPV")):
        value = _result_value(result, name)
        if value is not None and not is_finite_number(value):
            warnings.append(
                numerical_instability_warning(
                    name, f"{name}_calculation", value, f"{label} calculation is unstable"
                )
            )

    cap = _result_value(result, "implicit_cap")
    bounds = config.implicit_cap
    if cap is not None:
        if not is_finite_number(cap):
            warnings.append(
                numerical_instability_warning(
                    "implicit_cap",
                    "implicit_cap_calculation",
                    cap,
                    "Implicit cap rate calculation is unstable",
                )
            )
        elif not bounds.contains(cap):
            warnings.append(
                market_inconsistency_warning(
                    "implicit_cap",
                    cap,
                    f"Implicit cap rate ({_pct(cap, 2)}) is outside the usual market range "
                    f"({_pct(bounds.low)}-{_pct(bounds.high)})",
                    {"value": cap, "min_bound": bounds.low, "max_bound": bounds.high},
                )
            )

    return ValidationResult(is_valid=True, value=result, warnings=warnings)


def validate_complete(
    input: DCFInput,
    result: Optional[Union[DCFResult, Mapping[str, Any]]] = None,
    config: ValidationConfig = DEFAULT_CONFIG.validation,
) -> ValidationResult:
    """Run all applicable passes and merge their errors and warnings."""
    input_validation = validate_input(input, config)
    passes = [input_validation]
    if input_validation.is_valid:
        passes.append(validate_business_rules(input, config))
    if result is not None:
        passes.append(validate_results(result, config))

    errors = [e for p in passes for e in p.errors]
    warnings = [w for p in passes for w in p.warnings]

    return ValidationResult(
        is_valid=not errors,
        value={"input": input, "result": result} if not errors else None,
        errors=errors,
        warnings=warnings,
    )
