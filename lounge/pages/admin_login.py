import streamlit as st

from lounge.config import AppConfig
from lounge.errors import ConfigurationError
from lounge.notices import Notice
from lounge.ui import admin_session, go_to, notice_board, show_notices


def render_admin_login(cfg: AppConfig):
    session = admin_session()
    if session.is_active():
        go_to("admin-dashboard")

    st.title("Cube Bar Lounge Admin")
    st.caption("Sign in to continue")
    show_notices()

    with st.form("admin-login"):
        password = st.text_input("Password", type="password", placeholder="Enter admin password")
        submitted = st.form_submit_button("Sign In", type="primary", use_container_width=True)

    if not submitted:
        return

    try:
        ok = session.login(password, cfg.admin.password)
    except ConfigurationError as e:
        # Login is unavailable, the rest of the site keeps working
        st.error(e.message)
        return

    if ok:
        notice_board().post(Notice("success", "Welcome, admin!"))
        go_to("admin-dashboard")
    else:
        st.error("Invalid password")
