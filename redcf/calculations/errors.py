"""
DCF Error Taxonomy

A single exception type tagged with an error type and a severity.
Fatal errors are raised; warnings are the same records collected in lists.
"""

import enum
import logging
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class DCFErrorType(str, enum.Enum):
    """Error classification."""

    INVALID_INPUT = "INVALID_INPUT"
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    IRR_CALCULATION_FAILED = "IRR_CALCULATION_FAILED"
    NUMERICAL_INSTABILITY = "NUMERICAL_INSTABILITY"
    UNREALISTIC_RESULT = "UNREALISTIC_RESULT"
    MARKET_INCONSISTENCY = "MARKET_INCONSISTENCY"


class ErrorSeverity(str, enum.Enum):
    """Severity levels, lowest first."""

    warning = "warning"
    error = "error"
    critical = "critical"


DEFAULT_MESSAGES = {
    DCFErrorType.INVALID_INPUT: "Invalid input value",
    DCFErrorType.BUSINESS_RULE_VIOLATION: "Business rule violated",
    DCFErrorType.IRR_CALCULATION_FAILED: "IRR calculation did not converge",
    DCFErrorType.NUMERICAL_INSTABILITY: "Numerical calculation is unstable",
    DCFErrorType.UNREALISTIC_RESULT: "Unrealistic result",
    DCFErrorType.MARKET_INCONSISTENCY: "Inconsistent with market data",
}


@dataclass
class ErrorContext:
    """Structured payload attached to an error."""

    field: Optional[str] = None
    value: Any = None
    operation: Optional[str] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)


class DCFError(Exception):
    """Engine error or warning."""

    def __init__(
        self,
        type: DCFErrorType,
        severity: ErrorSeverity,
        message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.type = type
        self.severity = severity
        self.message = message or DEFAULT_MESSAGES[type]
        self.context = context or ErrorContext()
        super().__init__(self.message)

    @property
    def field(self) -> Optional[str]:
        return self.context.field

    @property
    def value(self) -> Any:
        return self.context.value

    @property
    def is_warning(self) -> bool:
        return self.severity == ErrorSeverity.warning

    @property
    def is_critical(self) -> bool:
        return self.severity == ErrorSeverity.critical

    @property
    def user_message(self) -> str:
        """Message prefixed with the offending field, if any."""
        if self.context.field:
            return f"{self.context.field}: {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Debug representation, safe to serialize as JSON."""
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "field": self.context.field,
            "value": _jsonable(self.context.value),
            "operation": self.context.operation,
            "metadata": {k: _jsonable(v) for k, v in self.context.metadata.items()},
        }

    def __repr__(self) -> str:
        return (
            f"DCFError(type={self.type.value}, severity={self.severity.value}, "
            f"field={self.context.field!r}, message={self.message!r})"
        )


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        # NaN/inf are not valid JSON
        return value if value == value and abs(value) != float("inf") else str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, DCFError):
        return value.to_dict()
    return repr(value)


# =============================================================================
# FACTORIES
# =============================================================================


def validation_error(field: str, value: Any, message: Optional[str] = None) -> DCFError:
    """Structural input error for a single field."""
    return DCFError(
        DCFErrorType.INVALID_INPUT,
        ErrorSeverity.error,
        message,
        ErrorContext(field=field, value=value, operation="validation"),
    )


def calculation_error(operation: str, details: Optional[Dict[str, Any]] = None) -> DCFError:
    return DCFError(
        DCFErrorType.NUMERICAL_INSTABILITY,
        ErrorSeverity.error,
        "DCF calculation failed",
        ErrorContext(operation=operation, metadata=dict(details or {})),
    )


def irr_error(
    method: str, cash_flows: List[float], details: Optional[Dict[str, Any]] = None
) -> DCFError:
    metadata = {"method": method, "cash_flow_length": len(cash_flows or [])}
    metadata.update(details or {})
    return DCFError(
        DCFErrorType.IRR_CALCULATION_FAILED,
        ErrorSeverity.error,
        "IRR calculation did not converge",
        ErrorContext(operation="irr_calculation", metadata=metadata),
    )


def warning(
    type: DCFErrorType, message: str, context: Optional[ErrorContext] = None
) -> DCFError:
    return DCFError(type, ErrorSeverity.warning, message, context)


def business_rule_warning(
    field: str, value: Any, message: str, metadata: Optional[Dict[str, Any]] = None
) -> DCFError:
    return DCFError(
        DCFErrorType.BUSINESS_RULE_VIOLATION,
        ErrorSeverity.warning,
        message,
        ErrorContext(
            field=field,
            value=value,
            operation="business_rule_validation",
            metadata=dict(metadata or {}),
        ),
    )


def unrealistic_result_warning(
    field: str, value: Any, message: str, metadata: Optional[Dict[str, Any]] = None
) -> DCFError:
    return DCFError(
        DCFErrorType.UNREALISTIC_RESULT,
        ErrorSeverity.warning,
        message,
        ErrorContext(
            field=field,
            value=value,
            operation="result_validation",
            metadata=dict(metadata or {}),
        ),
    )


def market_inconsistency_warning(
    field: str, value: Any, message: str, metadata: Optional[Dict[str, Any]] = None
) -> DCFError:
    return DCFError(
        DCFErrorType.MARKET_INCONSISTENCY,
        ErrorSeverity.warning,
        message,
        ErrorContext(
            field=field,
            value=value,
            operation="market_validation",
            metadata=dict(metadata or {}),
        ),
    )


def numerical_instability_warning(
    field: str, operation: str, value: Any, message: Optional[str] = None
) -> DCFError:
    return DCFError(
        DCFErrorType.NUMERICAL_INSTABILITY,
        ErrorSeverity.warning,
        message,
        ErrorContext(field=field, value=value, operation=operation),
    )


def critical_error(
    type: DCFErrorType, message: str, context: Optional[ErrorContext] = None
) -> DCFError:
    return DCFError(type, ErrorSeverity.critical, message, context)


def log_error(error: DCFError, context: str = "unknown") -> None:
    """Log an engine error at the level matching its severity."""
    if error.severity == ErrorSeverity.warning:
        logger.warning(f"[DCF Warning] {context}: {error.to_dict()}")
    elif error.severity == ErrorSeverity.error:
        logger.error(f"[DCF Error] {context}: {error.to_dict()}")
    else:
        logger.critical(f"[DCF CRITICAL] {context}: {error.to_dict()}")
