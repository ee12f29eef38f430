"""
Binary search for the smallest constant monthly deposit that funds every
remaining goal.
"""
import logging
import math
from typing import Optional, Sequence

from .models import AccountState, PlanParameters, SavingsEvent, SolverConfig
from .segment import group_events_by_month, simulate_segment
from .stepper import MonthlyRates

logger = logging.getLogger(__name__)


def round_up_deposit(value: float, step: float = 10.0) -> float:
    """Round a deposit up to the next multiple of `step`."""
    return math.ceil(value / step) * step


def solve_required_deposit(
    params: PlanParameters,
    state: AccountState,
    start_month: int,
    events: Sequence[SavingsEvent],
    config: Optional[SolverConfig] = None
) -> float:
    """
    Find the minimal monthly deposit for which all `events` can be withdrawn.

    The search simulates from `start_month` through the month of the last
    goal with every goal applied, so that a near goal is never funded at the
    expense of a larger one further out.

    Args:
        params: Plan parameters
        state: Account state entering `start_month`
        start_month: First month the deposit applies to
        events: Remaining goals (month offsets >= start_month)
        config: Iteration count, deposit cap, tolerance and rounding

    Returns:
        Required deposit, rounded up to `config.rounding_step`
    """
    if not events:
        return 0.0

    config = config or SolverConfig()
    rates = MonthlyRates.from_parameters(params)
    last_month = max(e.month_offset for e in events)
    duration = last_month - start_month + 1
    events_by_month = group_events_by_month(events)

    low = 0.0
    high = config.deposit_cap
    best = high

    for _ in range(config.max_iterations):
        mid = (low + high) / 2
        segment = simulate_segment(
            params,
            state,
            start_month,
            duration,
            mid,
            events_by_month,
            min_balance=config.min_balance,
            rates=rates
        )
        if segment.failed:
            low = mid
        else:
            best = mid
            high = mid

    if best >= config.deposit_cap:
        logger.warning(
            "Deposit solver hit the cap of %s for months %s-%s",
            config.deposit_cap, start_month, last_month
        )

    required = min(round_up_deposit(best, config.rounding_step), config.deposit_cap)
    logger.debug(
        "Required deposit from month %s over %s goals: %s",
        start_month, len(events), required
    )
    return required
