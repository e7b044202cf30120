from __future__ import annotations

import sys
import os

# --- Add project root to sys.path ---
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

import streamlit as st

# IMPORTS
from lounge.config import load_config
from lounge.errors import ConfigurationError
from lounge.logging_config import setup_logging
from lounge.ui import admin_session, init_app_state, inject_custom_css, register_pages
from lounge.pages.landing import render_landing
from lounge.pages.table_booking import render_table_booking
from lounge.pages.event_booking import render_event_booking
from lounge.pages.admin_login import render_admin_login
from lounge.pages.admin_dashboard import render_admin_dashboard, stop_dashboard


def _public(render, *args):
    """Public pages release the dashboard subscription when navigated to."""
    def run():
        stop_dashboard()
        render(*args)
    return run


def main():
    st.set_page_config(
        page_title="Cube Bar Lounge",
        page_icon="🪩",
        layout="wide",
    )

    inject_custom_css()
    try:
        cfg = load_config()
    except ConfigurationError as e:
        # No degraded mode without a database
        st.error(e.message)
        st.stop()

    setup_logging(cfg.log_level)
    init_app_state(cfg)

    pages = {
        "home": st.Page(
            _public(render_landing), title="Home", icon="🏠", url_path="home", default=True,
        ),
        "table-booking": st.Page(
            _public(render_table_booking, cfg), title="Book a Table", icon="🍸",
            url_path="table-booking",
        ),
        "event-booking": st.Page(
            _public(render_event_booking, cfg), title="Host an Event", icon="🎉",
            url_path="event-booking",
        ),
        "admin-login": st.Page(
            _public(render_admin_login, cfg), title="Admin Login", icon="🔐",
            url_path="admin-login",
        ),
        "admin-dashboard": st.Page(
            lambda: render_admin_dashboard(cfg, admin_session()), title="Admin Dashboard",
            icon="📊", url_path="admin-dashboard",
        ),
    }
    register_pages(pages)

    navigation = st.navigation(list(pages.values()), position="hidden")
    navigation.run()


if __name__ == "__main__":
    main()
