"""
Plotly visualizations for savings plan results.
"""
import plotly.graph_objects as go

from src.simulation.models import PlanResult


def plot_plan_schedule(result: PlanResult) -> go.Figure:
    """
    Plot balance development and monthly deposits with withdrawal markers.

    Args:
        result: Computed savings plan

    Returns:
        Plotly figure
    """
    fig = go.Figure()

    dates = [m.date for m in result.schedule]

    fig.add_trace(go.Scatter(
        x=dates,
        y=[m.balance_end for m in result.schedule],
        mode='lines',
        name='Balance',
        fill='tozeroy',
        line=dict(width=2, color='rgb(16, 185, 129)'),
        fillcolor='rgba(16, 185, 129, 0.1)'
    ))

    fig.add_trace(go.Scatter(
        x=dates,
        y=[m.deposit for m in result.schedule],
        mode='lines',
        name='Monthly Deposit',
        line=dict(width=2, color='rgb(59, 130, 246)', shape='hv'),
    ))

    # Category axis: annotations are placed separately from the vline
    for m in result.withdrawals:
        fig.add_vline(x=m.date, line_dash="dash", line_color="red")
        fig.add_annotation(
            x=m.date,
            y=1,
            yref='paper',
            text=m.event.name if m.event else "📍",
            showarrow=False,
            font=dict(color='red')
        )

    fig.update_layout(
        title='Portfolio Balance and Deposits',
        xaxis_title='Month',
        yaxis_title='Amount (₪)',
        yaxis_tickformat=',.0f',
        hovermode='x unified',
        legend=dict(yanchor="top", y=0.99, xanchor="left", x=0.01)
    )

    return fig


def plot_withdrawal_breakdown(result: PlanResult) -> go.Figure:
    """
    Stacked bars of net amount and tax for every withdrawal.

    Args:
        result: Computed savings plan

    Returns:
        Plotly figure
    """
    withdrawals = result.withdrawals
    labels = [
        f"{m.event.name if m.event else ''} ({m.date})" for m in withdrawals
    ]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=labels,
        y=[m.withdrawal_net or 0.0 for m in withdrawals],
        name='Net',
        marker_color='rgba(16, 185, 129, 0.8)'
    ))
    fig.add_trace(go.Bar(
        x=labels,
        y=[m.tax_paid or 0.0 for m in withdrawals],
        name='Tax',
        marker_color='rgba(239, 68, 68, 0.8)'
    ))

    fig.update_layout(
        title='Withdrawals: Net Amount and Tax',
        barmode='stack',
        xaxis_title='Goal',
        yaxis_title='Amount (₪)',
        yaxis_tickformat=',.0f'
    )

    return fig


def plot_deposit_segments(result: PlanResult) -> go.Figure:
    """
    Compare the solver's required deposit with the applied deposit per period.

    The applied deposit is lower where the never-increase rule held it down.
    """
    labels = [f"{s.start_month}-{s.end_month}" for s in result.segments]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=labels,
        y=[s.required_deposit for s in result.segments],
        name='Required',
        marker_color='rgba(156, 163, 175, 0.6)'
    ))
    fig.add_trace(go.Bar(
        x=labels,
        y=[s.deposit for s in result.segments],
        name='Applied',
        marker_color='rgba(59, 130, 246, 0.8)'
    ))

    fig.update_layout(
        title='Monthly Deposit per Period',
        barmode='group',
        xaxis_title='Months',
        yaxis_title='Deposit (₪)',
        yaxis_tickformat=',.0f'
    )

    return fig
