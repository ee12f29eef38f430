"""
Single month state transition: deposit, growth, inflation indexation and
goal withdrawals with capital gains tax on the real (inflation adjusted) gain.
"""
import math
from dataclasses import dataclass
from typing import Sequence

from .models import AccountState, MonthRecord, PlanParameters, SavingsEvent


def monthly_rate(annual_rate_pct: float) -> float:
    """Geometric monthly equivalent of an annual rate given in percent."""
    return (1 + annual_rate_pct / 100) ** (1 / 12) - 1


@dataclass(frozen=True)
class MonthlyRates:
    """Monthly return and inflation rates plus the tax rate as a fraction."""
    return_rate: float
    inflation_rate: float
    tax_rate: float

    @classmethod
    def from_parameters(cls, params: PlanParameters) -> "MonthlyRates":
        return cls(
            return_rate=monthly_rate(params.annual_return),
            inflation_rate=monthly_rate(params.annual_inflation),
            tax_rate=params.capital_gains_tax / 100
        )

    def inflation_factor(self, month_index: int) -> float:
        """Cumulative price level at month_index relative to month 0."""
        return (1 + self.inflation_rate) ** month_index


@dataclass(frozen=True)
class Withdrawal:
    """Gross-up of one goal's net amount against the current balance."""
    gross: float
    net: float
    tax: float
    real_gain: float
    nominal_gain: float


@dataclass(frozen=True)
class MonthStep:
    state: AccountState
    record: MonthRecord
    failed: bool


def profit_ratio(cost_basis: float, balance: float) -> float:
    """Share of the balance that is gain rather than principal."""
    if balance <= 0:
        return 0.0
    return max(0.0, 1 - cost_basis / balance)


def gross_up_withdrawal(
    net_amount: float,
    state: AccountState,
    tax_rate: float
) -> Withdrawal:
    """
    Compute the gross sale needed so that `net_amount` remains after tax.

    Tax is levied on the real gain share of the sale only:
    net = gross * (1 - real_profit_ratio * tax_rate).
    """
    if net_amount == 0:
        return Withdrawal(gross=0.0, net=0.0, tax=0.0, real_gain=0.0, nominal_gain=0.0)

    real_ratio = profit_ratio(state.cost_basis, state.balance)
    nominal_ratio = profit_ratio(state.nominal_cost_basis, state.balance)
    effective_tax_rate = real_ratio * tax_rate

    if effective_tax_rate >= 1:
        gross = math.inf
    else:
        gross = net_amount / (1 - effective_tax_rate)

    return Withdrawal(
        gross=gross,
        net=net_amount,
        tax=gross - net_amount,
        real_gain=gross * real_ratio,
        nominal_gain=gross * nominal_ratio
    )


def apply_withdrawal(state: AccountState, gross: float) -> AccountState:
    """Take `gross` out of the balance and shrink both cost bases pro rata."""
    balance_before = state.balance
    if balance_before > 0 and math.isfinite(gross):
        keep = 1 - gross / balance_before
        cost_basis = state.cost_basis * keep
        nominal_cost_basis = state.nominal_cost_basis * keep
    else:
        cost_basis = 0.0
        nominal_cost_basis = 0.0

    return AccountState(
        balance=balance_before - gross,
        cost_basis=cost_basis,
        nominal_cost_basis=nominal_cost_basis
    )


def step_month(
    state: AccountState,
    month_index: int,
    date_label: str,
    deposit: float,
    events: Sequence[SavingsEvent],
    rates: MonthlyRates,
    min_balance: float = -1.0
) -> MonthStep:
    """
    Advance the account by one month.

    Args:
        state: Account state at the start of the month
        month_index: Absolute month index since the plan start
        date_label: Formatted calendar month for the record
        deposit: Deposit paid in at the start of the month
        events: Goals due this month, withdrawn in list order
        rates: Monthly return/inflation rates and tax rate
        min_balance: Lowest end-of-month balance that still counts as funded

    Returns:
        MonthStep with the new state, the month record and a failure flag
    """
    balance_start = state.balance

    # Deposit at the start of the month, then growth and basis indexation
    balance = (state.balance + deposit) * (1 + rates.return_rate)
    cost_basis = (state.cost_basis + deposit) * (1 + rates.inflation_rate)
    nominal_cost_basis = state.nominal_cost_basis + deposit
    current = AccountState(balance, cost_basis, nominal_cost_basis)

    failed = False
    pre_withdrawal_balance = current.balance
    gross_total = net_total = tax_total = 0.0
    real_gain_total = nominal_gain_total = 0.0

    if events:
        inflation_factor = rates.inflation_factor(month_index)
        for event in events:
            withdrawal = gross_up_withdrawal(
                event.target_amount * inflation_factor, current, rates.tax_rate
            )
            if current.balance <= 0 and withdrawal.gross > 0:
                failed = True
            if not math.isfinite(withdrawal.gross):
                failed = True

            current = apply_withdrawal(current, withdrawal.gross)

            gross_total += withdrawal.gross
            net_total += withdrawal.net
            tax_total += withdrawal.tax
            real_gain_total += withdrawal.real_gain
            nominal_gain_total += withdrawal.nominal_gain

    if current.balance < min_balance:
        failed = True

    withdrew = gross_total > 0
    record = MonthRecord(
        month_index=month_index,
        date=date_label,
        deposit=deposit,
        balance_start=balance_start,
        balance_end=current.balance,
        cost_basis=current.cost_basis,
        events=tuple(events),
        withdrawal_gross=gross_total if withdrew else None,
        withdrawal_net=net_total if net_total > 0 else None,
        tax_paid=tax_total if tax_total > 0 else None,
        pre_withdrawal_balance=pre_withdrawal_balance if withdrew else None,
        real_gain=real_gain_total if withdrew else None,
        nominal_gain=nominal_gain_total if withdrew else None
    )
    return MonthStep(state=current, record=record, failed=failed)
