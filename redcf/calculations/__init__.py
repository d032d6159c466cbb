"""
Financial Calculation Engine

Discounted cash flow analysis for a single real estate investment:
debt schedule, cash flow projection, NPV, IRR and validation.
"""

from redcf.calculations import irr, amortization, cashflow, dcf, metrics, validation
from redcf.calculations.dcf import run_dcf
from redcf.calculations.errors import DCFError, DCFErrorType, ErrorSeverity
from redcf.calculations.models import DCFInput, DCFResult

__all__ = [
    "irr",
    "amortization",
    "cashflow",
    "dcf",
    "metrics",
    "validation",
    "run_dcf",
    "DCFError",
    "DCFErrorType",
    "ErrorSeverity",
    "DCFInput",
    "DCFResult",
]
