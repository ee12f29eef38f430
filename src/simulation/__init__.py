from .models import (
    AccountState,
    MonthRecord,
    PlanParameters,
    PlanResult,
    SavingsEvent,
    SegmentSummary,
    SolverConfig,
)
from .months import add_months, format_month, month_label
from .stepper import MonthlyRates, MonthStep, monthly_rate, step_month
from .segment import SegmentResult, group_events_by_month, simulate_segment
from .solver import round_up_deposit, solve_required_deposit
from .savings_plan import calculate_savings_plan, schedule_succeeded
