"""
Data model for the goal-based savings planner.

Parameters and goals come in, a PlanResult goes out. AccountState is threaded
through the engine between months and segments and never leaves it.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PlanParameters:
    """Base settings of a savings plan. Rates are given in percent."""
    start_date: date
    annual_return: float = 7.0
    annual_inflation: float = 2.0
    capital_gains_tax: float = 25.0
    initial_capital: float = 0.0


@dataclass(frozen=True)
class SavingsEvent:
    """A future withdrawal goal, expressed as a net amount in today's money."""
    id: str
    name: str
    month_offset: int
    target_amount: float


@dataclass(frozen=True)
class AccountState:
    """Balance plus the real (inflation indexed) and nominal cost basis."""
    balance: float
    cost_basis: float
    nominal_cost_basis: float

    @classmethod
    def opening(cls, initial_capital: float) -> "AccountState":
        return cls(
            balance=initial_capital,
            cost_basis=initial_capital,
            nominal_cost_basis=initial_capital
        )


@dataclass(frozen=True)
class SolverConfig:
    """Policy constants of the deposit solver."""
    max_iterations: int = 20
    deposit_cap: float = 1_000_000.0
    balance_tolerance: float = 1.0  # Balances down to -tolerance count as zero
    rounding_step: float = 10.0

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.deposit_cap <= 0:
            raise ValueError("deposit_cap must be positive")
        if self.balance_tolerance < 0:
            raise ValueError("balance_tolerance cannot be negative")
        if self.rounding_step <= 0:
            raise ValueError("rounding_step must be positive")

    @property
    def min_balance(self) -> float:
        return -self.balance_tolerance


@dataclass(frozen=True)
class MonthRecord:
    """One month of the schedule. Withdrawal fields are None without a withdrawal."""
    month_index: int
    date: str
    deposit: float
    balance_start: float
    balance_end: float
    cost_basis: float
    events: tuple[SavingsEvent, ...] = ()
    withdrawal_gross: Optional[float] = None
    withdrawal_net: Optional[float] = None
    tax_paid: Optional[float] = None
    pre_withdrawal_balance: Optional[float] = None
    real_gain: Optional[float] = None
    nominal_gain: Optional[float] = None

    @property
    def event(self) -> Optional[SavingsEvent]:
        """Display reference for the month: the last event processed."""
        return self.events[-1] if self.events else None

    @property
    def has_withdrawal(self) -> bool:
        return self.withdrawal_gross is not None


@dataclass(frozen=True)
class SegmentSummary:
    """Deposit decision for one span of months ending at a goal month."""
    start_month: int
    end_month: int
    required_deposit: float
    deposit: float
    events: tuple[SavingsEvent, ...] = ()

    @property
    def duration(self) -> int:
        return self.end_month - self.start_month + 1

    @property
    def capped(self) -> bool:
        """True if the non-increasing rule lowered the solver's deposit."""
        return self.deposit < self.required_deposit


@dataclass
class PlanResult:
    """Outcome of a full plan computation."""
    success: bool
    schedule: list[MonthRecord]
    final_balance: float
    total_deposited: float
    total_withdrawn_net: float
    total_tax_paid: float
    segments: list[SegmentSummary] = field(default_factory=list)

    @property
    def initial_deposit(self) -> float:
        return self.schedule[0].deposit if self.schedule else 0.0

    @property
    def has_variable_deposit(self) -> bool:
        return any(m.deposit != self.initial_deposit for m in self.schedule)

    @property
    def withdrawals(self) -> list[MonthRecord]:
        return [m for m in self.schedule if m.has_withdrawal]

    @property
    def horizon_months(self) -> int:
        return len(self.schedule)
