"""
DCF Input and Result Records

Plain dataclasses exchanged with the calculation engine.
Inputs are frozen; every calculation validates them afresh.
"""

import math
from dataclasses import MISSING, dataclass, field, fields, asdict
from typing import Any, Dict, List, Mapping, Optional

from redcf.calculations.amortization import DebtYear
from redcf.calculations.errors import DCFError, validation_error

# camelCase names used by dataset/preset records
FIELD_ALIASES = {
    "p0": "p0",
    "i0": "i0",
    "rentMonthly0": "rent_monthly0",
    "monthlyOpex0": "monthly_opex0",
    "vacancy": "vacancy",
    "inflation": "inflation",
    "rentDecay": "rent_decay",
    "priceDecay": "price_decay",
    "taxAnnualFixed": "tax_annual_fixed",
    "exitCostRate": "exit_cost_rate",
    "years": "years",
    "discountAsset": "discount_asset",
    "discountEquity": "discount_equity",
    "loanAmount": "loan_amount",
    "loanRate": "loan_rate",
    "loanTerm": "loan_term",
    "prepayPenaltyRate": "prepay_penalty_rate",
}
CAMEL_NAMES = {name: alias for alias, name in FIELD_ALIASES.items()}


@dataclass(frozen=True)
class DCFInput:
    """Assumptions for one property. Rates are decimals (0.05 = 5%)."""

    # Property
    p0: float  # Purchase price
    i0: float  # Initial (acquisition) costs

    # Income / expense
    rent_monthly0: float
    monthly_opex0: float
    tax_annual_fixed: float  # Flat, never inflated

    # Market dynamics
    vacancy: float
    inflation: float
    rent_decay: float
    price_decay: float

    # Exit
    exit_cost_rate: float
    years: int

    # Discounting
    discount_asset: float
    discount_equity: float

    # Loan (level annual payment)
    loan_amount: float = 0.0
    loan_rate: float = 0.0
    loan_term: Optional[int] = None
    prepay_penalty_rate: Optional[float] = None

    @property
    def total_cost(self) -> float:
        return self.p0 + self.i0

    @property
    def prepay_penalty(self) -> float:
        return self.prepay_penalty_rate or 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DCFInput":
        """
        Build an input from a mapping with snake_case or camelCase keys.

        Raises:
            DCFError: INVALID_INPUT if data is not a mapping, or naming the
                first missing required field
        """
        if not isinstance(data, Mapping):
            raise validation_error(
                "input", data, f"Input must be a mapping, got {type(data).__name__}"
            )

        values = {}
        for key, value in data.items():
            name = FIELD_ALIASES.get(key, key)
            values[name] = value

        known = {f.name for f in fields(cls)}
        for f in fields(cls):
            required = f.default is MISSING and f.default_factory is MISSING
            if required and f.name not in values:
                raise validation_error(f.name, None, f"{f.name} is required")

        return cls(**{k: v for k, v in values.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DCFResult:
    """Output of run_dcf."""

    cf_asset: List[float]
    cf_equity: List[float]
    npv_asset: float
    npv_equity: float
    irr_asset: float
    irr_equity: float
    sale_price_net: float
    remaining_debt_at_exit: float
    implicit_cap: Optional[float] = None
    warnings: List[DCFError] = field(default_factory=list)

    # Supporting detail
    noi: List[float] = field(default_factory=list)
    debt_schedule: List[DebtYear] = field(default_factory=list)
    irr_methods: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly rendering (NaN/inf become None)."""
        return {
            "cf_asset": [_finite_or_none(v) for v in self.cf_asset],
            "cf_equity": [_finite_or_none(v) for v in self.cf_equity],
            "npv_asset": _finite_or_none(self.npv_asset),
            "npv_equity": _finite_or_none(self.npv_equity),
            "irr_asset": _finite_or_none(self.irr_asset),
            "irr_equity": _finite_or_none(self.irr_equity),
            "sale_price_net": self.sale_price_net,
            "remaining_debt_at_exit": self.remaining_debt_at_exit,
            "implicit_cap": _finite_or_none(self.implicit_cap),
            "warnings": [w.to_dict() for w in self.warnings],
            "noi": [_finite_or_none(v) for v in self.noi],
            "debt_schedule": [row.to_dict() for row in self.debt_schedule],
            "irr_methods": dict(self.irr_methods),
        }


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value
