"""
Betting Operations Dashboard — Interactive Dashboard

Run with:  streamlit run app.py
"""

import asyncio
import sys
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go
import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent))

from betting_dashboard.config import API_URL, AUTO_REFRESH_SECONDS, EXPORT_MIME_TYPE
from betting_dashboard.dashboard import get_chart_frame, get_dashboard_view, get_export
from betting_dashboard.loaders import FeedClient
from betting_dashboard.models import FeedPayload, PeriodFilter, TypeFilter
from betting_dashboard.scheduler import RefreshScheduler
from betting_dashboard.simulator import generate_report_records
from betting_dashboard.store import RecordStore

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Betting Ops Dashboard",
    page_icon="🎰",
    layout="wide",
    initial_sidebar_state="expanded",
)

TREND_COLORS = {
    "up": "#2ecc71",
    "down": "#e74c3c",
    "flat": "#95a5a6",
}

PERIOD_LABELS = {
    PeriodFilter.TODAY: "Today",
    PeriodFilter.LAST_20: "Last 20 reports",
    PeriodFilter.LAST_50: "Last 50 reports",
    PeriodFilter.ALL: "All history",
}
TYPE_LABELS = {
    TypeFilter.ALL: "All reports",
    TypeFilter.PRODUCT_PERFORMANCE: "Product performance",
    TypeFilter.RISK_TEAM: "Risk team",
}


# ---------------------------------------------------------------------------
# Store & scheduler (one per browser session)
# ---------------------------------------------------------------------------
def _build_scheduler(simulated: bool) -> RefreshScheduler:
    store = RecordStore()
    if simulated:
        async def fetch() -> FeedPayload:
            return FeedPayload(records=tuple(generate_report_records()))

        return RefreshScheduler(store, fetch, interval=AUTO_REFRESH_SECONDS)

    client = FeedClient(API_URL)
    return RefreshScheduler(
        store,
        client.fetch_dashboard_data,
        client.trigger_ingestion,
        interval=AUTO_REFRESH_SECONDS,
    )


def run_refresh(source: str, reingest: bool = False) -> None:
    asyncio.run(st.session_state.scheduler.refresh(source=source, reingest=reingest))


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Betting Ops")
st.sidebar.markdown("Near-real-time operations metrics")
st.sidebar.divider()

simulated = st.sidebar.toggle("Simulated data", value=False)
if st.session_state.get("simulated") != simulated or "scheduler" not in st.session_state:
    st.session_state.simulated = simulated
    st.session_state.scheduler = _build_scheduler(simulated)
    run_refresh("startup")

scheduler: RefreshScheduler = st.session_state.scheduler

selected_period = st.sidebar.selectbox(
    "Period", list(PERIOD_LABELS), format_func=PERIOD_LABELS.get,
)
selected_type = st.sidebar.selectbox(
    "Report type", list(TYPE_LABELS), format_func=TYPE_LABELS.get,
)

col_a, col_b = st.sidebar.columns(2)
if col_a.button("Refresh", use_container_width=True):
    run_refresh("manual")
if col_b.button("Fetch new", use_container_width=True, disabled=simulated):
    run_refresh("manual", reingest=True)

auto_refresh = st.sidebar.toggle(f"Auto-refresh ({AUTO_REFRESH_SECONDS:.0f}s)", value=False)

st.sidebar.divider()
st.sidebar.caption(f"Feed: {'simulator' if simulated else API_URL}")


# ---------------------------------------------------------------------------
# Helper: metric card
# ---------------------------------------------------------------------------
def trend_card(label: str, value: str, trend: float | None = None, show_trend: bool = True):
    if not show_trend:
        trend_str, color = "", TREND_COLORS["flat"]
    elif trend is None:
        trend_str, color = "n/a", TREND_COLORS["flat"]
    else:
        key = "up" if trend > 0 else "down" if trend < 0 else "flat"
        trend_str, color = f"{trend:+.2f}%", TREND_COLORS[key]
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value}</div>
            <div style="font-size: 13px; color: {color}; font-weight: 600;">{trend_str}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def brl(value) -> str:
    return f"R$ {value:,.2f}" if value is not None else "--"


def pct(value) -> str:
    return f"{value:.2f}%" if value is not None else "--"


def line_chart(df: pd.DataFrame, columns: list[tuple[str, str, str]], title: str, yaxis: str):
    fig = go.Figure()
    for col, name, color in columns:
        if col in df.columns and df[col].notna().any():
            fig.add_trace(go.Scatter(
                x=df["label"],
                y=df[col],
                name=name,
                mode="lines+markers",
                line=dict(color=color, width=2),
                connectgaps=False,
            ))
    fig.update_layout(
        title=title,
        yaxis_title=yaxis,
        height=340,
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=40, b=40),
    )
    st.plotly_chart(fig, use_container_width=True)


# ===========================================================================
# Main view
# ===========================================================================
def render() -> None:
    # Take the snapshot once so every panel reads the same records
    snapshot = scheduler.store.snapshot
    view = get_dashboard_view(snapshot, selected_period, selected_type)

    st.title("Betting Operations Dashboard")
    updated = snapshot.fetched_at.strftime("%H:%M:%S") if snapshot.fetched_at is not None else "never"
    st.caption(f"{view.record_count} reports | last updated {updated}")

    if scheduler.last_error:
        st.error(f"{scheduler.last_error_type}: {scheduler.last_error}")
        if scheduler.is_stale:
            st.warning("Showing data from the last successful refresh.")

    if not view.records:
        st.info("No reports for the selected filters yet.")
        return

    # Headline cards
    m = view.metrics
    cols = st.columns(4)
    with cols[0]:
        trend_card("Avg GGR", brl(m.avg_ggr) if m else "--", m.ggr_trend if m else None)
    with cols[1]:
        trend_card("Avg NGR", brl(m.avg_ngr) if m else "--", show_trend=False)
    with cols[2]:
        trend_card("Margin", pct(m.margin_pct) if m else "--", m.margin_trend if m else None)
    with cols[3]:
        trend_card("GGR volatility", brl(m.volatility) if m else "--", show_trend=False)
    if m is not None:
        st.caption(f"NGR / turnover conversion: {m.conversion * 100:.2f}%")
        if m.anomalies:
            st.caption(f"Undefined (division by zero): {', '.join(m.anomalies)}")

    st.divider()

    # Trend charts
    df = get_chart_frame(view)
    col1, col2 = st.columns(2)
    with col1:
        line_chart(df, [("ggr", "GGR", "#3498db"), ("ngr", "NGR", "#9b59b6")], "GGR vs NGR", "R$")
    with col2:
        line_chart(df, [("deposits", "Deposits", "#2ecc71"), ("withdrawals", "Withdrawals", "#e74c3c")],
                   "Deposits vs Withdrawals", "R$")
    col3, col4 = st.columns(2)
    with col3:
        line_chart(df, [("margin_pct", "Margin", "#f39c12")], "Margin per report", "%")
    with col4:
        line_chart(df, [("unique_players", "Unique players", "#1abc9c"), ("bettors", "Bettors", "#34495e")],
                   "Players", "players")

    st.divider()

    # Segment cards
    col5, col6 = st.columns(2)
    with col5:
        st.subheader("Casino vs Sportsbook")
        split = view.product_split
        if split is None:
            st.info("No product split in this view.")
        else:
            fig = go.Figure(go.Pie(
                labels=["Casino", "Sportsbook"],
                values=[split.casino_ggr, split.sportsbook_ggr],
                hole=0.5,
                marker_colors=["#9b59b6", "#3498db"],
            ))
            fig.update_layout(height=300, margin=dict(l=10, r=10, t=10, b=10))
            st.plotly_chart(fig, use_container_width=True)
            st.caption(
                f"{split.date} {split.time}: casino {pct(split.casino_share)}, "
                f"sportsbook {pct(split.sportsbook_share)}"
            )

    with col6:
        st.subheader("Bonus & Behaviour")
        card = view.bonus_behavior
        if card is None or not card.has_data:
            st.info("No bonus or behaviour data in this view.")
        else:
            b = card.bonus
            st.markdown(
                f"**Bonus** granted {brl(b.granted)} | converted {brl(b.converted)} | "
                f"rate {pct(b.conversion_rate)} | cost {brl(b.cost)} | ROI {pct(b.roi)}"
            )
            st.markdown(
                f"**Balance** opening {brl(card.balance.opening)} | "
                f"closing {brl(card.balance.closing)} | delta {brl(card.balance.delta)}"
            )
            h = card.behavior
            st.markdown(
                f"**Behaviour** avg deposit {brl(h.avg_deposit)} | "
                f"avg withdrawal {brl(h.avg_withdrawal)} | avg ticket {brl(h.avg_ticket)} | "
                f"GGR/player {brl(h.avg_ggr_per_player)}"
            )

    # Anomalies
    if view.anomalies:
        st.divider()
        st.subheader("Anomalies")
        st.dataframe(
            pd.DataFrame([a.__dict__ for a in view.anomalies])[
                ["date", "time", "report_type", "severity", "type", "message"]
            ],
            use_container_width=True,
            hide_index=True,
        )

    # Export
    filename, payload = get_export(view)
    st.download_button("Export CSV", payload, file_name=filename, mime=EXPORT_MIME_TYPE)


if auto_refresh:
    # Set on every full rerun; only timer-driven fragment reruns find it cleared
    st.session_state.full_rerun = True

    @st.fragment(run_every=AUTO_REFRESH_SECONDS)
    def auto_refreshing_view() -> None:
        if st.session_state.full_rerun:
            st.session_state.full_rerun = False
        else:
            run_refresh("timer")
        render()

    auto_refreshing_view()
else:
    render()
