"""
Shared test fixtures for all test modules.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import date

import pytest

from src.simulation.models import PlanParameters, SavingsEvent
from src.simulation.savings_plan import calculate_savings_plan


@pytest.fixture
def base_params() -> PlanParameters:
    """7% return, 2% inflation, 25% capital gains tax, no initial capital."""
    return PlanParameters(
        start_date=date(2025, 1, 15),
        annual_return=7.0,
        annual_inflation=2.0,
        capital_gains_tax=25.0,
        initial_capital=0.0
    )


@pytest.fixture
def flat_params() -> PlanParameters:
    """No growth, no inflation, no tax - balances are plain sums."""
    return PlanParameters(
        start_date=date(2025, 1, 1),
        annual_return=0.0,
        annual_inflation=0.0,
        capital_gains_tax=0.0,
        initial_capital=0.0
    )


@pytest.fixture
def single_goal() -> list[SavingsEvent]:
    return [SavingsEvent(id="car", name="Car", month_offset=12, target_amount=10000)]


@pytest.fixture
def two_goals() -> list[SavingsEvent]:
    return [
        SavingsEvent(id="trip", name="Trip", month_offset=12, target_amount=5000),
        SavingsEvent(id="wedding", name="Wedding", month_offset=24, target_amount=20000),
    ]


@pytest.fixture
def plan_result(base_params, two_goals):
    return calculate_savings_plan(base_params, two_goals)
