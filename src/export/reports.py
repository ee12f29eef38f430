"""
Export functionality for savings plan results.
"""
import csv
import io
from datetime import datetime
from typing import TYPE_CHECKING, Sequence
import numpy as np
import pandas as pd

from src.goals.editor import adjusted_target_amount
from src.simulation.months import add_months, format_month

if TYPE_CHECKING:
    from src.simulation.models import PlanParameters, PlanResult, SavingsEvent


SCHEDULE_COLUMNS = [
    'Month', 'Date', 'Deposit', 'Cumulative Deposits', 'Balance Start', 'Balance End', 'Cost Basis',
    'Goal', 'Gross Withdrawal', 'Net Withdrawal', 'Tax Paid'
]

WITHDRAWAL_COLUMNS = [
    'Goal', 'Date', 'Period (Months)', 'Monthly Deposit', 'Balance Before Withdrawal',
    'Gross Withdrawal', 'Nominal Gain', 'Real Gain', 'Tax Paid', 'Net Withdrawal'
]


def schedule_to_dataframe(result: "PlanResult") -> pd.DataFrame:
    """One row per simulated month."""
    rows = [
        {
            'Month': m.month_index,
            'Date': m.date,
            'Deposit': m.deposit,
            'Balance Start': m.balance_start,
            'Balance End': m.balance_end,
            'Cost Basis': m.cost_basis,
            'Goal': ", ".join(e.name for e in m.events),
            'Gross Withdrawal': m.withdrawal_gross or 0.0,
            'Net Withdrawal': m.withdrawal_net or 0.0,
            'Tax Paid': m.tax_paid or 0.0,
        }
        for m in result.schedule
    ]
    df = pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)
    df['Cumulative Deposits'] = np.cumsum(np.asarray(df['Deposit'], dtype=float))
    return df


def withdrawals_to_dataframe(result: "PlanResult") -> pd.DataFrame:
    """
    One row per withdrawal month, with the savings period leading up to it.

    The period length counts the months since the previous withdrawal (or
    since the plan start for the first one).
    """
    rows = []
    previous_month = -1
    for m in result.withdrawals:
        rows.append({
            'Goal': m.event.name if m.event else "",
            'Date': m.date,
            'Period (Months)': m.month_index - previous_month,
            'Monthly Deposit': m.deposit,
            'Balance Before Withdrawal': m.pre_withdrawal_balance or 0.0,
            'Gross Withdrawal': m.withdrawal_gross or 0.0,
            'Nominal Gain': m.nominal_gain or 0.0,
            'Real Gain': m.real_gain or 0.0,
            'Tax Paid': m.tax_paid or 0.0,
            'Net Withdrawal': m.withdrawal_net or 0.0,
        })
        previous_month = m.month_index
    return pd.DataFrame(rows, columns=WITHDRAWAL_COLUMNS)


def goals_to_dataframe(
    params: "PlanParameters",
    events: Sequence["SavingsEvent"]
) -> pd.DataFrame:
    """Goals with their calendar month and inflation-adjusted nominal amount."""
    rows = [
        {
            'Goal': e.name,
            'Month Offset': e.month_offset,
            'Date': format_month(add_months(params.start_date, e.month_offset)),
            "Target (Today's Money)": e.target_amount,
            'Target (Nominal)': adjusted_target_amount(
                e.target_amount, e.month_offset, params.annual_inflation
            ),
        }
        for e in sorted(events, key=lambda e: e.month_offset)
    ]
    return pd.DataFrame(rows, columns=[
        'Goal', 'Month Offset', 'Date', "Target (Today's Money)", 'Target (Nominal)'
    ])


def _summary_rows(params: "PlanParameters", result: "PlanResult") -> dict:
    return {
        'Metric': [
            'Start Date',
            'Annual Return',
            'Annual Inflation',
            'Capital Gains Tax',
            'Initial Capital',
            'Initial Monthly Deposit',
            'Final Balance',
            'Total Deposited',
            'Total Withdrawn (Net)',
            'Total Tax Paid',
            'Plan Funded'
        ],
        'Value': [
            params.start_date.isoformat(),
            params.annual_return / 100,
            params.annual_inflation / 100,
            params.capital_gains_tax / 100,
            params.initial_capital,
            result.initial_deposit,
            result.final_balance,
            result.total_deposited,
            result.total_withdrawn_net,
            result.total_tax_paid,
            'Yes' if result.success else 'No'
        ]
    }


def create_excel_report(
    params: "PlanParameters",
    events: Sequence["SavingsEvent"],
    result: "PlanResult"
) -> bytes:
    """
    Create an Excel report with multiple sheets.

    Args:
        params: Plan parameters
        events: Withdrawal goals
        result: Computed savings plan

    Returns:
        Excel file as bytes
    """
    output = io.BytesIO()

    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        pd.DataFrame(_summary_rows(params, result)).to_excel(
            writer, sheet_name='Summary', index=False
        )
        goals_to_dataframe(params, events).to_excel(writer, sheet_name='Goals', index=False)
        schedule_to_dataframe(result).to_excel(writer, sheet_name='Schedule', index=False)
        withdrawals_to_dataframe(result).to_excel(writer, sheet_name='Withdrawals', index=False)

    output.seek(0)
    return output.getvalue()


def create_csv_report(params: "PlanParameters", result: "PlanResult") -> str:
    """
    Create a simple CSV summary report.

    Returns:
        CSV content as string
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    writer.writerows([
        ["Savings Plan Report"],
        [f"Created: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"],
        [],
        ["=== Parameters ==="],
        ["Start Date", params.start_date.isoformat()],
        ["Annual Return", f"{params.annual_return / 100:.2%}"],
        ["Annual Inflation", f"{params.annual_inflation / 100:.2%}"],
        ["Capital Gains Tax", f"{params.capital_gains_tax / 100:.2%}"],
        ["Initial Capital", f"{params.initial_capital:.2f}"],
        [],
        ["=== Result ==="],
        ["Plan Funded", 'Yes' if result.success else 'No'],
        ["Initial Monthly Deposit", f"{result.initial_deposit:.2f}"],
        ["Final Balance", f"{result.final_balance:.2f}"],
        ["Total Deposited", f"{result.total_deposited:.2f}"],
        ["Total Withdrawn (Net)", f"{result.total_withdrawn_net:.2f}"],
        ["Total Tax Paid", f"{result.total_tax_paid:.2f}"],
    ])

    if result.segments:
        writer.writerows([
            [],
            ["=== Deposit Periods ==="],
            ["From Month", "To Month", "Required Deposit", "Monthly Deposit"],
        ])
        for s in result.segments:
            writer.writerow([
                s.start_month, s.end_month, f"{s.required_deposit:.2f}", f"{s.deposit:.2f}"
            ])

    withdrawals = result.withdrawals
    if withdrawals:
        writer.writerows([
            [],
            ["=== Withdrawals ==="],
            ["Goal", "Date", "Gross", "Tax", "Net"],
        ])
        for m in withdrawals:
            writer.writerow([
                m.event.name if m.event else "",
                m.date,
                f"{m.withdrawal_gross or 0:.2f}",
                f"{m.tax_paid or 0:.2f}",
                f"{m.withdrawal_net or 0:.2f}",
            ])

    return output.getvalue()


def format_currency(value: float, currency: str = "₪") -> str:
    """Format a number as currency."""
    return f"{currency}{value:,.0f}"


def format_percentage(value: float) -> str:
    """Format a number as percentage."""
    return f"{value:.2%}"
