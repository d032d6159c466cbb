"""
IRR and NPV Calculations

IRR is solved with an ordered chain of strategies:
Newton-Raphson first, then bisection, then a grid search as last resort.
The first strategy that converges to a plausible rate wins.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from redcf.calculations.config import DEFAULT_CONFIG, IRRConfig
from redcf.calculations.errors import DCFError, calculation_error, irr_error

logger = logging.getLogger(__name__)

DEFAULT_GUESS = 0.08


@dataclass
class IRRResult:
    """Outcome of one strategy (or of the whole chain)."""

    value: float
    method: str
    converged: bool
    iterations: Optional[int] = None
    error: Optional[DCFError] = None


class IRRStrategy(NamedTuple):
    """A named root-finding method."""

    name: str
    is_applicable: Callable[[Sequence[float], IRRConfig], bool]
    calculate: Callable[[Sequence[float], float, IRRConfig], IRRResult]


def calculate_npv(cash_flows: Sequence[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Array of cash flows, index 0 = today (negative = outflow)
        discount_rate: Annual discount rate (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    npv = 0.0
    for period, cf in enumerate(cash_flows):
        npv += cf / ((1 + discount_rate) ** period)
    return npv


def _npv_and_derivative(cash_flows: Sequence[float], rate: float) -> Tuple[float, float]:
    """NPV and its derivative with respect to rate (for Newton-Raphson)."""
    npv = 0.0
    dnpv = 0.0
    for period, cf in enumerate(cash_flows):
        power = (1 + rate) ** period
        if not math.isfinite(power) or power <= 0:
            raise calculation_error(
                "npv_derivative", {"rate": rate, "period": period, "power_term": power}
            )
        npv += cf / power
        if period > 0:
            dnpv -= (period * cf) / (power * (1 + rate))
    return npv, dnpv


def _npv_grid(cash_flows: Sequence[float], rates: np.ndarray) -> np.ndarray:
    """Vectorised NPV for many rates at once; non-finite values become inf."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        discount = (1.0 + rates[:, np.newaxis]) ** periods
        values = np.abs((flows / discount).sum(axis=1))
    values[~np.isfinite(values)] = np.inf
    return values


# =============================================================================
# NEWTON-RAPHSON
# =============================================================================


def _newton_is_applicable(cash_flows: Sequence[float], config: IRRConfig) -> bool:
    return True


def _newton_calculate(
    cash_flows: Sequence[float], initial_guess: float, config: IRRConfig
) -> IRRResult:
    """
    Newton-Raphson iteration on NPV(r).

    Fast when the derivative is well-behaved. Fails with a distinct reason on
    a near-zero derivative, oscillation, divergence or exhausted iterations.
    """
    name = "newton-raphson"
    rate = initial_guess
    last_rate = math.inf
    tolerance = config.tolerance

    for i in range(config.max_iterations):
        npv, dnpv = _npv_and_derivative(cash_flows, rate)

        if abs(dnpv) < config.derivative_tolerance:
            return IRRResult(
                value=math.nan,
                method=name,
                converged=False,
                iterations=i,
                error=irr_error(
                    name,
                    cash_flows,
                    {"reason": "derivative_near_zero", "iteration": i, "derivative": dnpv},
                ),
            )

        new_rate = rate - npv / dnpv

        if math.isfinite(new_rate) and abs(new_rate - rate) < tolerance:
            return IRRResult(value=new_rate, method=name, converged=True, iterations=i + 1)

        if abs(new_rate - last_rate) < tolerance:
            return IRRResult(
                value=math.nan,
                method=name,
                converged=False,
                iterations=i,
                error=irr_error(
                    name,
                    cash_flows,
                    {
                        "reason": "oscillation",
                        "iteration": i,
                        "current_rate": rate,
                        "new_rate": new_rate,
                        "last_rate": last_rate,
                    },
                ),
            )

        if not math.isfinite(new_rate) or abs(new_rate) > config.divergence_limit:
            return IRRResult(
                value=math.nan,
                method=name,
                converged=False,
                iterations=i,
                error=irr_error(
                    name,
                    cash_flows,
                    {"reason": "divergence", "iteration": i, "new_rate": new_rate},
                ),
            )

        last_rate = rate
        rate = new_rate

    return IRRResult(
        value=math.nan,
        method=name,
        converged=False,
        iterations=config.max_iterations,
        error=irr_error(name, cash_flows, {"reason": "max_iterations_reached"}),
    )


# =============================================================================
# BISECTION
# =============================================================================


def _bisection_is_applicable(cash_flows: Sequence[float], config: IRRConfig) -> bool:
    # A sign change between the bounds guarantees a root
    npv_low = calculate_npv(cash_flows, config.bounds.low)
    npv_high = calculate_npv(cash_flows, config.bounds.high)
    return npv_low * npv_high < 0


def _bisection_calculate(
    cash_flows: Sequence[float], initial_guess: float, config: IRRConfig
) -> IRRResult:
    name = "bisection"
    low = config.bounds.low
    high = config.bounds.high
    tolerance = config.bisection_tolerance

    npv_low = calculate_npv(cash_flows, low)
    npv_high = calculate_npv(cash_flows, high)

    if npv_low * npv_high > 0:
        return IRRResult(
            value=math.nan,
            method=name,
            converged=False,
            error=irr_error(
                name,
                cash_flows,
                {
                    "reason": "no_root_in_bounds",
                    "npv_at_low_bound": npv_low,
                    "npv_at_high_bound": npv_high,
                    "low_bound": low,
                    "high_bound": high,
                },
            ),
        )

    for i in range(config.max_iterations):
        mid = (low + high) / 2
        npv_mid = calculate_npv(cash_flows, mid)

        if abs(npv_mid) < tolerance or abs(high - low) < tolerance:
            return IRRResult(value=mid, method=name, converged=True, iterations=i + 1)

        if npv_mid * npv_low < 0:
            high = mid
        else:
            low = mid

    return IRRResult(
        value=math.nan,
        method=name,
        converged=False,
        iterations=config.max_iterations,
        error=irr_error(name, cash_flows, {"reason": "max_iterations_reached"}),
    )


# =============================================================================
# GRID SEARCH
# =============================================================================


def _grid_is_applicable(cash_flows: Sequence[float], config: IRRConfig) -> bool:
    return True


def _grid_calculate(
    cash_flows: Sequence[float], initial_guess: float, config: IRRConfig
) -> IRRResult:
    """
    Brute-force search: 1% steps over the coarse range, then 0.1% steps
    within +/-5% of the best coarse rate.
    """
    name = "grid-search"
    grid = config.grid_search

    coarse_rates = np.arange(grid.coarse_start, grid.coarse_end + 1) / 100.0
    coarse_errors = _npv_grid(cash_flows, coarse_rates)
    best_index = int(np.argmin(coarse_errors))

    if not np.isfinite(coarse_errors[best_index]):
        return IRRResult(
            value=math.nan,
            method=name,
            converged=False,
            error=irr_error(name, cash_flows, {"reason": "no_solution_found"}),
        )

    center = float(coarse_rates[best_index])
    steps = int(round(2 * grid.fine_range / grid.fine_step))
    fine_rates = center + np.linspace(-grid.fine_range, grid.fine_range, steps + 1)
    fine_rates = fine_rates[fine_rates > -1]
    fine_errors = _npv_grid(cash_flows, fine_rates)

    best_rate = center
    best_error = float(coarse_errors[best_index])
    if len(fine_errors):
        fine_index = int(np.argmin(fine_errors))
        if fine_errors[fine_index] < best_error:
            best_rate = float(fine_rates[fine_index])
            best_error = float(fine_errors[fine_index])

    converged = best_error < grid.convergence_npv
    return IRRResult(
        value=best_rate,
        method=name,
        converged=converged,
        iterations=len(coarse_rates) + len(fine_rates),
        error=None
        if converged
        else irr_error(name, cash_flows, {"reason": "not_converged", "npv_error": best_error}),
    )


newton_raphson = IRRStrategy("newton-raphson", _newton_is_applicable, _newton_calculate)
bisection = IRRStrategy("bisection", _bisection_is_applicable, _bisection_calculate)
grid_search = IRRStrategy("grid-search", _grid_is_applicable, _grid_calculate)

STRATEGIES = (newton_raphson, bisection, grid_search)


# =============================================================================
# STRATEGY CHAIN
# =============================================================================


def _validate_cash_flows(cash_flows: Sequence[float]) -> Optional[DCFError]:
    if not cash_flows:
        return irr_error("validation", [], {"reason": "empty_cash_flows"})

    positive_count = sum(1 for cf in cash_flows if cf > 0)
    negative_count = sum(1 for cf in cash_flows if cf < 0)

    if positive_count == 0 or negative_count == 0:
        return irr_error(
            "validation",
            list(cash_flows),
            {
                "reason": "no_sign_change",
                "positive_count": positive_count,
                "negative_count": negative_count,
            },
        )
    return None


def _is_plausible(value: float, config: IRRConfig) -> bool:
    return math.isfinite(value) and config.accept_low < value < config.accept_high


def calculate_irr(
    cash_flows: Sequence[float],
    initial_guess: float = DEFAULT_GUESS,
    config: IRRConfig = DEFAULT_CONFIG.irr,
    strategies: Sequence[IRRStrategy] = STRATEGIES,
) -> IRRResult:
    """
    Calculate IRR (Internal Rate of Return) for periodic cash flows.

    Tries each applicable strategy in order and returns the first result
    that converged to a finite rate inside the accepted range.

    Args:
        cash_flows: Array of periodic cash flows, index 0 = today
        initial_guess: Starting rate for Newton-Raphson
        config: Solver settings
        strategies: Ordered strategies to try

    Returns:
        IRRResult; on failure value is NaN, converged is False and error
        carries an IRR_CALCULATION_FAILED DCFError
    """
    validation_error = _validate_cash_flows(cash_flows)
    if validation_error is not None:
        return IRRResult(
            value=math.nan, method="validation", converged=False, error=validation_error
        )

    flows: List[float] = list(cash_flows)
    for strategy in strategies:
        try:
            if not strategy.is_applicable(flows, config):
                logger.debug(f"IRR strategy {strategy.name} not applicable")
                continue
            result = strategy.calculate(flows, initial_guess, config)
        except (DCFError, ArithmeticError) as e:
            logger.debug(f"IRR strategy {strategy.name} raised: {e}")
            continue

        if result.converged and _is_plausible(result.value, config):
            return result

        reason = result.error.context.metadata.get("reason") if result.error else None
        logger.debug(f"IRR strategy {strategy.name} failed ({reason})")

    return IRRResult(
        value=math.nan,
        method="failed",
        converged=False,
        error=irr_error(
            "all_methods",
            flows,
            {"attempted_methods": [s.name for s in strategies]},
        ),
    )
