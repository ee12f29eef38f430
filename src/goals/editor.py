"""
Helpers for editing plan parameters and withdrawal goals.

The engine accepts any well-typed input; the checks here are what the input
forms run before handing a plan to it.
"""
import uuid
from datetime import date
from typing import Optional, Sequence

from src.simulation.models import PlanParameters, SavingsEvent
from src.simulation.months import add_months
from src.simulation.stepper import monthly_rate

DEFAULT_GOAL_NAME = "New goal"
DEFAULT_GOAL_AMOUNT = 10000.0
DEFAULT_GOAL_SPACING = 12
MAX_PLAN_MONTHS = 480


def default_parameters(today: Optional[date] = None) -> PlanParameters:
    """Parameters a fresh plan starts with."""
    return PlanParameters(
        start_date=today or date.today(),
        annual_return=7.0,
        annual_inflation=2.0,
        capital_gains_tax=25.0,
        initial_capital=0.0
    )


def sort_events(events: Sequence[SavingsEvent]) -> list[SavingsEvent]:
    return sorted(events, key=lambda e: e.month_offset)


def validate_plan_inputs(params: PlanParameters, events: Sequence[SavingsEvent]) -> None:
    """
    Reject inputs the planner cannot give a meaningful answer for.

    Raises:
        ValueError: Describing the first problem found
    """
    if params.initial_capital < 0:
        raise ValueError("Initial capital cannot be negative")
    if not 0 <= params.capital_gains_tax <= 100:
        raise ValueError("Capital gains tax must be between 0 and 100 percent")
    if params.annual_return <= -100:
        raise ValueError("Annual return must be above -100 percent")
    if params.annual_inflation <= -100:
        raise ValueError("Annual inflation must be above -100 percent")

    seen: set[str] = set()
    for event in events:
        if event.id in seen:
            raise ValueError(f"Duplicate goal id: {event.id}")
        seen.add(event.id)
        if event.month_offset < 0:
            raise ValueError(f"Goal '{event.name}' lies before the start date")
        if event.target_amount < 0:
            raise ValueError(f"Goal '{event.name}' has a negative amount")


def new_default_event(
    events: Sequence[SavingsEvent],
    name: str = DEFAULT_GOAL_NAME,
    target_amount: float = DEFAULT_GOAL_AMOUNT
) -> SavingsEvent:
    """Create a goal one year after the latest existing one."""
    last_offset = max((e.month_offset for e in events), default=0)
    return SavingsEvent(
        id=str(uuid.uuid4()),
        name=name,
        month_offset=last_offset + DEFAULT_GOAL_SPACING,
        target_amount=target_amount
    )


def adjusted_target_amount(
    target_amount: float,
    month_offset: int,
    annual_inflation: float
) -> float:
    """Nominal amount a goal in today's money will cost at `month_offset`."""
    if month_offset <= 0:
        return target_amount
    return target_amount * (1 + monthly_rate(annual_inflation)) ** month_offset


def _describe_offset(offset: int) -> str:
    if offset == 0:
        return "this month"
    years, months = divmod(offset, 12)
    parts = []
    if years > 0:
        parts.append(f"{years} year{'s' if years != 1 else ''}")
    if months > 0:
        parts.append(f"{months} month{'s' if months != 1 else ''}")
    return " and ".join(parts)


def month_options(start_date: date, max_months: int = MAX_PLAN_MONTHS) -> list[tuple[int, str]]:
    """(offset, label) pairs for a goal date picker, e.g. (14, '03/2027 (1 year and 2 months)')."""
    options = []
    for offset in range(max_months + 1):
        d = add_months(start_date, offset)
        options.append((offset, f"{d.month:02d}/{d.year} ({_describe_offset(offset)})"))
    return options
