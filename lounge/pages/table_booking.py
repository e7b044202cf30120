from datetime import date

import streamlit as st

from lounge.config import AppConfig
from lounge.models import TIME_SLOTS, TABLE_GUEST_OPTIONS
from lounge.ui import (
    bump_revision,
    go_to,
    show_notices,
    submission_service,
    widget_key,
    wizard_state,
)
from lounge.wizard import TableBookingWizard

WIZARD_KEY = "table_wizard"


def _index(options, value):
    return options.index(value) if value in options else None


def _nav(wizard: TableBookingWizard, cfg: AppConfig):
    left, right = st.columns(2)
    if wizard.step > 1:
        left.button("Back", on_click=wizard.back, use_container_width=True)
    if wizard.step < 4:
        right.button("Continue", type="primary", on_click=wizard.next, use_container_width=True)
    else:
        right.button(
            "Submitting..." if wizard.loading else "Confirm Booking",
            type="primary",
            disabled=wizard.loading,
            on_click=_submit,
            args=(wizard, cfg),
            use_container_width=True,
        )


CONTACT_WIDGETS = (
    ("customer_name", "name"),
    ("phone", "phone"),
    ("email", "email"),
    ("special_requests", "requests"),
)


def _submit(wizard: TableBookingWizard, cfg: AppConfig):
    # Callbacks run before the script, so pick up text typed just before the click
    for field_name, name in CONTACT_WIDGETS:
        key = widget_key(WIZARD_KEY, name)
        if key in st.session_state:
            setattr(wizard, field_name, st.session_state[key])
    if wizard.submit(submission_service(cfg)):
        bump_revision(WIZARD_KEY)


def render_table_booking(cfg: AppConfig):
    wizard: TableBookingWizard = wizard_state(WIZARD_KEY, TableBookingWizard)

    if st.button("← Back to Home"):
        go_to("home")

    st.title("Book a Table")
    st.caption("Reserve your spot with a few quick steps.")
    show_notices()
    st.progress(wizard.progress)

    if wizard.step == 1:
        st.subheader("Select a date")
        wizard.booking_date = st.date_input(
            "Date",
            value=wizard.booking_date,
            min_value=date.today(),
            key=widget_key(WIZARD_KEY, "date"),
        )

    elif wizard.step == 2:
        st.subheader("Choose a time slot")
        wizard.time_slot = st.radio(
            "Time slot",
            TIME_SLOTS,
            index=_index(TIME_SLOTS, wizard.time_slot),
            key=widget_key(WIZARD_KEY, "slot"),
        ) or ""

    elif wizard.step == 3:
        st.subheader("How many guests?")
        wizard.guest_count = st.radio(
            "Guests",
            TABLE_GUEST_OPTIONS,
            index=_index(TABLE_GUEST_OPTIONS, wizard.guest_count),
            format_func=lambda n: f"{n} guests",
            horizontal=True,
            key=widget_key(WIZARD_KEY, "guests"),
        )
        if wizard.table_number_preview:
            st.info(f"Assigned table number: {wizard.table_number_preview}")

    else:
        st.subheader("Contact details")
        wizard.customer_name = st.text_input(
            "Full name", value=wizard.customer_name, key=widget_key(WIZARD_KEY, "name"))
        wizard.phone = st.text_input(
            "Phone", value=wizard.phone, key=widget_key(WIZARD_KEY, "phone"))
        wizard.email = st.text_input(
            "Email", value=wizard.email, key=widget_key(WIZARD_KEY, "email"))
        wizard.special_requests = st.text_area(
            "Special requests (optional)",
            value=wizard.special_requests,
            key=widget_key(WIZARD_KEY, "requests"),
        )

    _nav(wizard, cfg)
