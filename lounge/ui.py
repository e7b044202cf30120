# lounge/ui.py
"""Streamlit glue shared by every page: session objects, notices, styling."""

from __future__ import annotations

from datetime import timedelta
from typing import Dict

import streamlit as st

from lounge.config import AppConfig
from lounge.notices import NoticeBoard
from lounge.session import AdminSession
from lounge.submission import BookingSubmissionService
from db.database import get_supabase_client
from db.repository import BookingRepository

TOAST_ICONS = {"success": "✅", "error": "⚠️", "info": "💡"}

_PAGES: Dict[str, object] = {}


# --- NAVIGATION ---------------------------------------------------------------

def register_pages(pages: Dict[str, object]) -> None:
    _PAGES.clear()
    _PAGES.update(pages)


def go_to(name: str) -> None:
    st.switch_page(_PAGES[name])


# --- SESSION OBJECTS ------------------------------------------------------------

def init_app_state(cfg: AppConfig):
    if "notices" not in st.session_state:
        st.session_state.notices = NoticeBoard()
    if "admin_session" not in st.session_state:
        st.session_state.admin_session = AdminSession(
            ttl=timedelta(minutes=cfg.admin.session_ttl_minutes)
        )


def notice_board() -> NoticeBoard:
    return st.session_state.notices


def admin_session() -> AdminSession:
    return st.session_state.admin_session


def submission_service(cfg: AppConfig) -> BookingSubmissionService:
    if "submission_service" not in st.session_state:
        repository = BookingRepository(get_supabase_client(cfg.supabase))
        st.session_state.submission_service = BookingSubmissionService(repository)
    return st.session_state.submission_service


def wizard_state(key: str, factory):
    """One wizard per browser session; widget keys carry a revision so a reset clears them."""
    if key not in st.session_state:
        st.session_state[key] = factory(notify=notice_board().post)
        st.session_state[f"{key}_rev"] = 0
    return st.session_state[key]


def widget_key(wizard_key: str, name: str) -> str:
    return f"{wizard_key}-{name}-{st.session_state[f'{wizard_key}_rev']}"


def bump_revision(wizard_key: str) -> None:
    st.session_state[f"{wizard_key}_rev"] += 1


def show_notices() -> None:
    for notice in notice_board().drain():
        st.toast(notice.message, icon=TOAST_ICONS.get(notice.level))


# --- CSS STYLING ---
def inject_custom_css():
    st.markdown("""
    <style>
        /* --- Dark lounge palette --- */
        .stApp {
            background: linear-gradient(180deg, #111827 0%, #4c1d95 50%, #111827 100%);
            color: #ffffff;
        }

        /* Feature cards on the landing page */
        .feature-card {
            border-radius: 1rem;
            background: rgba(255, 255, 255, 0.08);
            padding: 1.25rem;
            min-height: 140px;
        }
        .feature-card h4 {
            margin: 0.5rem 0 0.25rem 0;
        }

        /* Touch-friendly buttons */
        .stButton button {
            min-height: 44px;
            min-width: 44px;
        }

        /* --- Hide footer for clean look --- */
        footer {visibility: hidden;}
    </style>
    """, unsafe_allow_html=True)
