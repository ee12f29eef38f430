"""
Fixed-deposit simulation over a contiguous run of months.
"""
from dataclasses import dataclass
from typing import Mapping, Sequence

from .models import AccountState, MonthRecord, PlanParameters, SavingsEvent
from .months import month_label
from .stepper import MonthlyRates, step_month


@dataclass(frozen=True)
class SegmentResult:
    schedule: list[MonthRecord]
    final_state: AccountState
    failed: bool

    @property
    def final_balance(self) -> float:
        return self.final_state.balance


def group_events_by_month(
    events: Sequence[SavingsEvent]
) -> dict[int, list[SavingsEvent]]:
    """Map month offset -> events due that month, keeping input order."""
    grouped: dict[int, list[SavingsEvent]] = {}
    for event in events:
        grouped.setdefault(event.month_offset, []).append(event)
    return grouped


def simulate_segment(
    params: PlanParameters,
    state: AccountState,
    start_month: int,
    duration: int,
    monthly_deposit: float,
    events_by_month: Mapping[int, Sequence[SavingsEvent]],
    min_balance: float = -1.0,
    rates: MonthlyRates | None = None
) -> SegmentResult:
    """
    Run `duration` months starting at `start_month` with a constant deposit.

    Args:
        params: Plan parameters (start date and rates)
        state: Account state entering the first month
        start_month: Absolute month index of the first simulated month
        duration: Number of months to simulate
        monthly_deposit: Deposit applied every month
        events_by_month: Goals to withdraw, keyed by absolute month index
        min_balance: Lowest balance that still counts as funded
        rates: Precomputed monthly rates (derived from params if omitted)

    Returns:
        SegmentResult with the month records, ending state and failure flag
    """
    if rates is None:
        rates = MonthlyRates.from_parameters(params)

    schedule: list[MonthRecord] = []
    failed = False

    for month_index in range(start_month, start_month + duration):
        step = step_month(
            state,
            month_index,
            month_label(params.start_date, month_index),
            monthly_deposit,
            events_by_month.get(month_index, ()),
            rates,
            min_balance
        )
        schedule.append(step.record)
        state = step.state
        failed = failed or step.failed

    if state.balance < min_balance:
        failed = True

    return SegmentResult(schedule=schedule, final_state=state, failed=failed)
