"""
Goal-Based Savings Planner - Streamlit Web Application
Monthly deposits for future withdrawal goals, with inflation and capital gains tax
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import date

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from src.simulation.models import PlanParameters, SavingsEvent
from src.simulation.savings_plan import calculate_savings_plan
from src.goals.editor import (
    adjusted_target_amount,
    default_parameters,
    month_options,
    new_default_event,
    sort_events,
    validate_plan_inputs,
)
from src.export.snapshot import dump_plan_snapshot, load_plan_snapshot, snapshot_filename
from src.export.reports import (
    create_csv_report,
    create_excel_report,
    format_currency,
    withdrawals_to_dataframe,
)
from src.visualization.charts import (
    plot_deposit_segments,
    plot_plan_schedule,
    plot_withdrawal_breakdown,
)

# Page configuration - responsive layout
st.set_page_config(
    page_title="Savings Planner",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("💰 Family Savings Planner")
st.caption("Plan monthly deposits for future life events")

# Initialize session state
if 'params' not in st.session_state:
    st.session_state.params = default_parameters()
if 'events' not in st.session_state:
    st.session_state.events = []
if 'plan_result' not in st.session_state:
    st.session_state.plan_result = None


def events_to_frame(events: list[SavingsEvent], params: PlanParameters) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "id": e.id,
            "Name": e.name,
            "Month Offset": e.month_offset,
            "Net Amount": e.target_amount,
            "Adjusted Amount": adjusted_target_amount(
                e.target_amount, e.month_offset, params.annual_inflation
            ),
        }
        for e in sort_events(events)
    ], columns=["id", "Name", "Month Offset", "Net Amount", "Adjusted Amount"])


def frame_to_events(frame: pd.DataFrame) -> list[SavingsEvent]:
    events = []
    for row in frame.to_dict("records"):
        if pd.isna(row.get("Month Offset")) or pd.isna(row.get("Net Amount")):
            continue
        template = new_default_event([])
        events.append(SavingsEvent(
            id=row["id"] if isinstance(row.get("id"), str) and row["id"] else template.id,
            name=str(row.get("Name") or template.name),
            month_offset=int(row["Month Offset"]),
            target_amount=float(row["Net Amount"]),
        ))
    return events


# Sidebar - Configuration
with st.sidebar:
    st.header("⚙️ Base Settings")

    with st.expander("💾 Load Plan", expanded=False):
        uploaded_file = st.file_uploader(
            "Plan file",
            type=["json"],
            help="Load a previously exported plan"
        )
        if uploaded_file is not None:
            try:
                snapshot = load_plan_snapshot(uploaded_file.getvalue())
                if snapshot.params is not None:
                    st.session_state.params = snapshot.params
                if snapshot.events is not None:
                    st.session_state.events = snapshot.events
                st.session_state.plan_result = None
                st.success("Plan loaded")
            except ValueError as e:
                st.error(f"Error: {e}")

    params = st.session_state.params

    start_date = st.date_input("Start date", value=params.start_date)
    annual_return = st.number_input(
        "Annual return (%)", min_value=-99.0, max_value=50.0,
        value=float(params.annual_return), step=0.1
    )
    annual_inflation = st.number_input(
        "Annual inflation (%)", min_value=-50.0, max_value=50.0,
        value=float(params.annual_inflation), step=0.1
    )
    capital_gains_tax = st.number_input(
        "Capital gains tax (%)", min_value=0.0, max_value=100.0,
        value=float(params.capital_gains_tax), step=1.0
    )
    initial_capital = st.number_input(
        "Initial capital (₪)", min_value=0.0, max_value=100_000_000.0,
        value=float(params.initial_capital), step=1000.0
    )

    params = PlanParameters(
        start_date=start_date if isinstance(start_date, date) else params.start_date,
        annual_return=annual_return,
        annual_inflation=annual_inflation,
        capital_gains_tax=capital_gains_tax,
        initial_capital=initial_capital
    )
    st.session_state.params = params

    st.markdown("---")
    st.download_button(
        label="📥 Export plan",
        data=dump_plan_snapshot(params, st.session_state.events),
        file_name=snapshot_filename(),
        mime="application/json",
        use_container_width=True
    )

# Goals editor
st.subheader("📅 Future Events")

if st.button("➕ Add event"):
    st.session_state.events = st.session_state.events + [
        new_default_event(st.session_state.events)
    ]

edited = st.data_editor(
    events_to_frame(st.session_state.events, params),
    column_config={
        "id": None,
        "Month Offset": st.column_config.NumberColumn(min_value=0, max_value=480, step=1),
        "Net Amount": st.column_config.NumberColumn(min_value=0, step=1000, format="₪%d"),
        "Adjusted Amount": st.column_config.NumberColumn(disabled=True, format="₪%d"),
    },
    num_rows="dynamic",
    use_container_width=True,
    key="events_editor"
)
st.session_state.events = frame_to_events(edited)

if st.session_state.events:
    labels = dict(month_options(params.start_date))
    st.caption(" · ".join(
        f"{e.name}: {labels.get(e.month_offset, e.month_offset)}"
        for e in sort_events(st.session_state.events)
    ))

if st.button("🧮 Calculate plan", type="primary", use_container_width=True):
    try:
        validate_plan_inputs(params, st.session_state.events)
    except ValueError as e:
        st.error(str(e))
    else:
        with st.spinner("Solving deposits..."):
            st.session_state.plan_result = calculate_savings_plan(params, st.session_state.events)

# Display results
result = st.session_state.plan_result
if result is not None:
    if not result.success:
        st.error("The goals cannot be fully funded with these settings.")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric(
            "Initial monthly deposit", format_currency(result.initial_deposit),
            help="Decreases after events" if result.has_variable_deposit else "Constant for all periods"
        )
    with col2:
        st.metric("Final balance", format_currency(result.final_balance), help="After all withdrawals")
    with col3:
        st.metric("Total deposited", format_currency(result.total_deposited))
    with col4:
        st.metric("Total tax paid", format_currency(result.total_tax_paid))

    tab1, tab2, tab3 = st.tabs(["📈 Development", "📋 Withdrawals", "📥 Export"])

    with tab1:
        st.plotly_chart(plot_plan_schedule(result), use_container_width=True)
        if result.segments:
            st.plotly_chart(plot_deposit_segments(result), use_container_width=True)

    with tab2:
        if result.withdrawals:
            st.dataframe(
                withdrawals_to_dataframe(result).style.format({
                    'Monthly Deposit': '₪{:,.0f}',
                    'Balance Before Withdrawal': '₪{:,.0f}',
                    'Gross Withdrawal': '₪{:,.0f}',
                    'Nominal Gain': '₪{:,.0f}',
                    'Real Gain': '₪{:,.0f}',
                    'Tax Paid': '₪{:,.0f}',
                    'Net Withdrawal': '₪{:,.0f}',
                }),
                use_container_width=True
            )
            st.plotly_chart(plot_withdrawal_breakdown(result), use_container_width=True)
        else:
            st.info("No withdrawals in this plan.")

    with tab3:
        col1, col2 = st.columns(2)
        with col1:
            st.download_button(
                label="📊 Excel report",
                data=create_excel_report(params, st.session_state.events, result),
                file_name=f"savings-plan-{date.today().isoformat()}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                use_container_width=True
            )
        with col2:
            st.download_button(
                label="📄 CSV report",
                data=create_csv_report(params, result),
                file_name=f"savings-plan-{date.today().isoformat()}.csv",
                mime="text/csv",
                use_container_width=True
            )

st.markdown("---")
st.caption("All figures are estimates and do not constitute financial advice.")
