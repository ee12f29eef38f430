"""
Savings plan orchestration - monthly deposits that fund a sequence of goals.

The timeline is split into segments ending at each goal month. For every
segment the deposit is solved against all remaining goals, capped so that it
never rises above the previous segment's deposit, and then simulated with
only that segment's own goals.
"""
import logging
import math
from typing import Optional, Sequence

from .models import (
    AccountState,
    MonthRecord,
    PlanParameters,
    PlanResult,
    SavingsEvent,
    SegmentSummary,
    SolverConfig,
)
from .segment import group_events_by_month, simulate_segment
from .solver import solve_required_deposit
from .stepper import MonthlyRates

logger = logging.getLogger(__name__)


def schedule_succeeded(schedule: Sequence[MonthRecord], min_balance: float = -1.0) -> bool:
    """True if no month ends below `min_balance`."""
    return not any(m.balance_end < min_balance for m in schedule)


def calculate_savings_plan(
    params: PlanParameters,
    events: Sequence[SavingsEvent],
    config: Optional[SolverConfig] = None
) -> PlanResult:
    """
    Compute the non-increasing deposit schedule for a list of goals.

    Args:
        params: Plan parameters
        events: Withdrawal goals in any order
        config: Solver policy constants

    Returns:
        PlanResult spanning month 0 through the last goal month
    """
    config = config or SolverConfig()
    sorted_events = sorted(events, key=lambda e: e.month_offset)

    if not sorted_events:
        return PlanResult(
            success=True,
            schedule=[],
            final_balance=params.initial_capital,
            total_deposited=0.0,
            total_withdrawn_net=0.0,
            total_tax_paid=0.0
        )

    rates = MonthlyRates.from_parameters(params)
    events_by_month = group_events_by_month(sorted_events)
    goal_months = sorted(events_by_month)

    state = AccountState.opening(params.initial_capital)
    current_month = 0
    deposit_ceiling = math.inf
    schedule: list[MonthRecord] = []
    segments: list[SegmentSummary] = []

    for goal_month in goal_months:
        remaining = [e for e in sorted_events if e.month_offset >= current_month]
        required = solve_required_deposit(params, state, current_month, remaining, config)

        deposit = min(required, deposit_ceiling)
        deposit_ceiling = deposit
        if deposit < required:
            logger.info(
                "Month %s: solver asked for %s, holding deposit at %s",
                current_month, required, deposit
            )

        due = events_by_month[goal_month]
        segment = simulate_segment(
            params,
            state,
            current_month,
            goal_month - current_month + 1,
            deposit,
            {goal_month: due},
            min_balance=config.min_balance,
            rates=rates
        )

        segments.append(SegmentSummary(
            start_month=current_month,
            end_month=goal_month,
            required_deposit=required,
            deposit=deposit,
            events=tuple(due)
        ))
        schedule.extend(segment.schedule)
        state = segment.final_state
        current_month = goal_month + 1

    success = schedule_succeeded(schedule, config.min_balance)
    if not success:
        logger.warning("Savings plan cannot fund all %s goals", len(sorted_events))

    result = PlanResult(
        success=success,
        schedule=schedule,
        final_balance=state.balance,
        total_deposited=sum(m.deposit for m in schedule),
        total_withdrawn_net=sum(m.withdrawal_net or 0.0 for m in schedule),
        total_tax_paid=sum(m.tax_paid or 0.0 for m in schedule),
        segments=segments
    )
    logger.info(
        "Planned %s months over %s segments, initial deposit %s",
        result.horizon_months, len(segments), result.initial_deposit
    )
    return result
