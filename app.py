"""
Steel Production Dashboard — Interactive Dashboard

Run with:  streamlit run app.py
"""

import asyncio
from datetime import datetime
from pathlib import Path

import plotly.graph_objects as go
import streamlit as st

from steel_dashboard.config import (
    CARD_REGISTRY,
    DASHBOARD_NAME,
    PERIOD_LABELS,
    REFRESH_INTERVAL_MS,
)
from steel_dashboard.dashboard import (
    get_available_periods,
    get_card_type_options,
    get_cards_frame,
    get_dashboard_overview,
)
from steel_dashboard.errors import DashboardError
from steel_dashboard.lifecycle import CardDataManager
from steel_dashboard.stores import InMemoryCardStore, LocalStorage

LOCAL_STORAGE_FILE = Path(__file__).resolve().parent / ".steel_dashboard" / "local_storage.json"

TREND_ARROWS = {"up": "▲", "down": "▼", "stable": "●"}

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title=DASHBOARD_NAME,
    page_icon="🏭",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ---------------------------------------------------------------------------
# Card manager (one per browser session, sharing one card store)
# ---------------------------------------------------------------------------
@st.cache_resource
def get_card_store() -> InMemoryCardStore:
    return InMemoryCardStore()


def get_manager() -> CardDataManager:
    if "manager" not in st.session_state:
        manager = CardDataManager(get_card_store(), LocalStorage(LOCAL_STORAGE_FILE))
        saved = asyncio.run(manager.load_cards())
        if not saved:
            manager.bootstrap_default_cards()
            run_action(manager.save_cards())
        st.session_state["manager"] = manager
    return st.session_state["manager"]


def run_action(coro) -> None:
    """Run a manager coroutine, surfacing failures without losing local state."""
    try:
        asyncio.run(coro)
    except DashboardError as e:
        st.session_state["last_error"] = f"{e.code}: {e.message}"


manager = get_manager()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Steel Dashboard")
st.sidebar.markdown("Production KPI Monitor")
now = datetime.now()
st.sidebar.caption(f"{now:%A, %B %d, %Y} · {now:%I:%M %p}")
st.sidebar.divider()

periods = get_available_periods()
selected_period = st.sidebar.radio(
    "Time Period",
    periods,
    index=periods.index(manager.period),
    format_func=lambda p: f"{p.title()} ({PERIOD_LABELS[p]})",
)
if selected_period != manager.period:
    manager.set_period(selected_period)

interchange_mode = st.sidebar.toggle("Interchange mode", value=False)

online = st.sidebar.toggle("Online", value=manager.is_online)
if online and not manager.is_online:
    run_action(manager.go_online())
elif not online and manager.is_online:
    manager.go_offline()

pending = len(manager.pending_offline_changes())
if pending:
    st.sidebar.warning(f"{pending} change(s) waiting to sync")
if manager.last_sync_time is not None:
    st.sidebar.caption(f"Last sync: {manager.last_sync_time:%H:%M:%S} UTC")

# Create card form
st.sidebar.divider()
with st.sidebar.form("create_card", clear_on_submit=True):
    st.markdown("**Create KPI Card**")
    options = get_card_type_options()
    card_type = st.selectbox(
        "Card type",
        options["type"].tolist(),
        format_func=lambda t: CARD_REGISTRY[t]["title"],
    )
    custom_title = st.text_input("Title (optional)", max_chars=50)
    if st.form_submit_button("Create"):
        title = custom_title.strip() or CARD_REGISTRY[card_type]["title"]
        run_action(manager.create_card(title, card_type))

st.sidebar.divider()
st.sidebar.caption("All values are simulated.")


# ---------------------------------------------------------------------------
# Helper: KPI card
# ---------------------------------------------------------------------------
def kpi_card(view: dict) -> None:
    color = view["color"]
    arrow = TREND_ARROWS[view["trend"]]
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">
                {view["title"]} <span style="float: right;">{view["period_label"]}</span>
            </div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">
                {view["actual_str"]} <span style="font-size: 16px; color: {color};">{arrow}</span>
            </div>
            <div style="font-size: 13px; color: #666;">
                Target: {view["benchmark_str"]} &nbsp;|&nbsp;
                <span style="color: {color}; font-weight: 600;">{view["percentage_str"]}</span>
                &nbsp;|&nbsp; {view["variance_str"]}
            </div>
            <div style="background: #eee; border-radius: 4px; height: 6px; margin-top: 8px;">
                <div style="background: {color}; width: {view["progress"]}%; height: 6px; border-radius: 4px;"></div>
            </div>
            <div style="font-size: 12px; color: {color}; margin-top: 6px;">{view["status_text"]}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


# ===========================================================================
# Main page
# ===========================================================================
st.title(DASHBOARD_NAME)

if "last_error" in st.session_state:
    st.error(st.session_state.pop("last_error"))


# The fragment timer stands in for DashboardScheduler; the manager is never started.
@st.fragment(run_every=REFRESH_INTERVAL_MS / 1000)
def card_grid() -> None:
    manager.refresh_data()
    overview = get_dashboard_overview(manager.cards, manager.period, manager.previous_actuals)

    info = overview["period_info"]
    st.caption(f"Period: **{info['start']:%d %b %Y}** to **{info['end']:%d %b %Y}** · Live data")

    if not overview["cards"]:
        st.info("No KPI cards. Use the Create form in the sidebar to add your first card.")
        return

    cols = st.columns(3)
    last = len(overview["cards"]) - 1
    for i, view in enumerate(overview["cards"]):
        with cols[i % 3]:
            kpi_card(view)
            if interchange_mode:
                up, down = st.columns(2)
                if up.button("▲ Move up", key=f"up-{view['id']}", disabled=i == 0):
                    run_action(manager.move_card_up(view["id"]))
                    st.rerun()
                if down.button("▼ Move down", key=f"down-{view['id']}", disabled=i == last):
                    run_action(manager.move_card_down(view["id"]))
                    st.rerun()
            elif st.button("Delete", key=f"del-{view['id']}"):
                run_action(manager.delete_card(view["id"]))
                st.rerun()

    st.divider()

    # Achievement chart
    st.subheader("Achievement vs Target")
    df = get_cards_frame(manager.cards, manager.period)
    fig = go.Figure(go.Bar(
        x=df["percentage"],
        y=df["title"],
        orientation="h",
        marker_color=df["color"].tolist(),
        text=df["percentage"].apply(lambda x: f"{x:.1f}%"),
        textposition="outside",
    ))
    fig.update_layout(
        height=max(250, len(df) * 45),
        xaxis_title="Achievement %",
        yaxis_title="",
        yaxis=dict(autorange="reversed"),
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=10, b=40),
    )
    fig.add_vline(x=100, line_dash="dash", line_color="#888")
    st.plotly_chart(fig, use_container_width=True)

    with st.expander("Card data"):
        st.dataframe(df.drop(columns=["id", "color"]), use_container_width=True, hide_index=True)


card_grid()
