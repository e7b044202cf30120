import streamlit as st

from lounge.config import AppConfig
from lounge.dashboard_runner import DashboardRunner
from lounge.dashboard_sync import ALL, AdminDashboardSync
from lounge.models import BookingKind
from lounge.reports import bookings_frame, status_breakdown, status_chart, to_csv
from lounge.session import AdminSession
from lounge.ui import go_to, notice_board, show_notices
from db.database import create_async_supabase_client
from db.repository import AsyncBookingRepository

REFRESH_SECONDS = 3
# missed renders before a closed tab is assumed
IDLE_RENDERS = 4

ACTIONS = {
    BookingKind.TABLE: [("✅ Approve", "approved"), ("❌ Reject", "rejected")],
    BookingKind.EVENT: [("🕒 Quoted", "quoted"), ("✅ Confirm", "confirmed"), ("❌ Reject", "cancelled")],
}


def _get_runner(cfg: AppConfig) -> DashboardRunner:
    if "dashboard_runner" not in st.session_state:
        board = notice_board()

        async def build_sync() -> AdminDashboardSync:
            client = await create_async_supabase_client(cfg.supabase)
            return AdminDashboardSync(AsyncBookingRepository(client), notify=board.post)

        st.session_state.dashboard_runner = DashboardRunner(
            build_sync, notify=board.post, idle_timeout=REFRESH_SECONDS * IDLE_RENDERS,
        )
    return st.session_state.dashboard_runner


def stop_dashboard():
    runner = st.session_state.pop("dashboard_runner", None)
    if runner is not None:
        runner.stop()


def _logout(session: AdminSession):
    session.logout()
    stop_dashboard()


def render_admin_dashboard(cfg: AppConfig, session: AdminSession):
    if not session.is_active():
        stop_dashboard()
        go_to("admin-login")

    runner = _get_runner(cfg)
    sync = runner.start()

    head, nav_home, nav_logout = st.columns([4, 1, 1])
    head.title("📊 Cube Bar Lounge Admin")
    if nav_home.button("Go to site"):
        go_to("home")
    nav_logout.button("Logout", on_click=_logout, args=(session,))

    _live_view(runner, sync)


@st.fragment(run_every=REFRESH_SECONDS)
def _live_view(runner: DashboardRunner, sync: AdminDashboardSync):
    runner.heartbeat()
    if not runner.running:
        # released by the watchdog while no render arrived
        sync = runner.start()
    show_notices()

    # --- KPI Metrics ---
    col1, col2, col3 = st.columns(3)
    col1.metric("Pending Table Bookings", sync.pending_table_count)
    col2.metric("Pending Event Inquiries", sync.pending_event_count)
    col3.metric("Today's Bookings", sync.todays_count)

    if sync.loading:
        st.caption("Refreshing…")

    # --- Booking Management ---
    st.divider()
    table_tab, event_tab, chart_tab = st.tabs(["Table Bookings", "Event Bookings", "Overview"])

    with table_tab:
        _booking_section(runner, sync, BookingKind.TABLE)
    with event_tab:
        _booking_section(runner, sync, BookingKind.EVENT)
    with chart_tab:
        breakdown = status_breakdown(sync.table_bookings, sync.event_bookings)
        st.plotly_chart(status_chart(breakdown), use_container_width=True)


def _booking_section(runner: DashboardRunner, sync: AdminDashboardSync, kind: BookingKind):
    options = [ALL] + list(kind.statuses)
    current = sync.table_status_filter if kind is BookingKind.TABLE else sync.event_status_filter
    chosen = st.selectbox(
        "Filter by Status", options, index=options.index(current), key=f"filter-{kind.value}"
    )
    sync.set_filter(kind, chosen)

    if kind is BookingKind.TABLE:
        bookings = sync.filtered_table_bookings()
    else:
        bookings = sync.filtered_event_bookings()

    st.write(f"{len(bookings)} records")
    df = bookings_frame(kind, bookings)
    if df.empty:
        st.info("No records")
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)

    # --- Actions ---
    c1, c2 = st.columns([2, 1])
    with c1:
        st.write("### Actions")
        labels = {
            b.id: f"{b.sort_date.isoformat()} · {b.customer_name} · {b.status}"
            for b in bookings
        }
        booking_id = st.selectbox(
            "Booking",
            list(labels),
            format_func=labels.get,
            index=None,
            placeholder="Choose a booking",
            key=f"target-{kind.value}",
        )
        buttons = st.columns(len(ACTIONS[kind]))
        for col, (label, status) in zip(buttons, ACTIONS[kind]):
            if col.button(label, key=f"{kind.value}-{status}", disabled=booking_id is None):
                runner.submit(sync.set_status(kind, booking_id, status))

    # --- Export ---
    with c2:
        st.write("### Export")
        st.download_button(
            "📥 Download as CSV",
            to_csv(df),
            f"{kind.table_name}.csv",
            "text/csv",
            key=f"download-{kind.value}",
        )
