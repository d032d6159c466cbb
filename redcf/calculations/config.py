"""
Engine Configuration

Numeric and validation constants for the DCF engine.
Values are frozen; pass a different DCFConfig into run_dcf to override them.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Bounds:
    """Inclusive [low, high] range."""

    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class GridSearchConfig:
    """Grid search sweep settings (coarse range is in whole percent)."""

    coarse_start: int = -95
    coarse_end: int = 500
    fine_step: float = 0.001
    fine_range: float = 0.05
    convergence_npv: float = 1e-6


@dataclass(frozen=True)
class IRRConfig:
    """Root-finding settings shared by all IRR strategies."""

    max_iterations: int = 100
    tolerance: float = 1e-8
    derivative_tolerance: float = 1e-14
    divergence_limit: float = 100.0
    bounds: Bounds = field(default_factory=lambda: Bounds(-0.99, 10.0))
    bisection_tolerance: float = 1e-6
    grid_search: GridSearchConfig = field(default_factory=GridSearchConfig)
    # Accepted IRR range for the strategy chain (exclusive)
    accept_low: float = -0.99
    accept_high: float = 100.0


@dataclass(frozen=True)
class ValidationConfig:
    """Hard limits and 'reasonable' bands used by the validators."""

    min_years: int = 1
    max_years: int = 50
    max_loan_to_cost: float = 1.2
    max_loan_rate: float = 0.10
    inflation: Bounds = field(default_factory=lambda: Bounds(-0.10, 0.20))
    rent_decay: Bounds = field(default_factory=lambda: Bounds(0.0, 0.10))
    price_decay: Bounds = field(default_factory=lambda: Bounds(0.0, 0.05))
    vacancy: Bounds = field(default_factory=lambda: Bounds(0.0, 0.50))
    discount_rate: Bounds = field(default_factory=lambda: Bounds(0.01, 0.30))
    irr_absolute: Bounds = field(default_factory=lambda: Bounds(-10.0, 10.0))
    irr_relative: Bounds = field(default_factory=lambda: Bounds(-1.0, 1.0))
    implicit_cap: Bounds = field(default_factory=lambda: Bounds(0.01, 0.20))


@dataclass(frozen=True)
class DCFConfig:
    """Complete engine configuration."""

    eps: float = 1e-12
    irr: IRRConfig = field(default_factory=IRRConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    asset_irr_guess: float = 0.06
    equity_irr_guess: float = 0.08


DEFAULT_CONFIG = DCFConfig()
