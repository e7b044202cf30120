from datetime import date

import streamlit as st

from lounge.config import AppConfig
from lounge.models import ADD_ONS, DURATIONS, EVENT_GUEST_MAX, EVENT_GUEST_MIN, EVENT_TYPES
from lounge.ui import (
    bump_revision,
    go_to,
    show_notices,
    submission_service,
    widget_key,
    wizard_state,
)
from lounge.wizard import EventBookingWizard

WIZARD_KEY = "event_wizard"

EVENT_ICONS = {
    "Birthday Party": "🎂",
    "Corporate Event": "💼",
    "Wedding Reception": "💍",
    "Other": "🎉",
}


def _index(options, value):
    return options.index(value) if value in options else None


CONTACT_WIDGETS = (
    ("customer_name", "name"),
    ("phone", "phone"),
    ("email", "email"),
    ("event_details", "details"),
)


def _submit(wizard: EventBookingWizard, cfg: AppConfig):
    for field_name, name in CONTACT_WIDGETS:
        key = widget_key(WIZARD_KEY, name)
        if key in st.session_state:
            setattr(wizard, field_name, st.session_state[key])
    if wizard.submit(submission_service(cfg)):
        bump_revision(WIZARD_KEY)


def _nav(wizard: EventBookingWizard, cfg: AppConfig):
    left, right = st.columns(2)
    if wizard.step > 1:
        left.button("Back", on_click=wizard.back, use_container_width=True)
    if wizard.step < 4:
        right.button("Continue", type="primary", on_click=wizard.next, use_container_width=True)
    else:
        right.button(
            "Submitting..." if wizard.loading else "Submit Inquiry",
            type="primary",
            disabled=wizard.loading,
            on_click=_submit,
            args=(wizard, cfg),
            use_container_width=True,
        )


def render_event_booking(cfg: AppConfig):
    wizard: EventBookingWizard = wizard_state(WIZARD_KEY, EventBookingWizard)

    if st.button("← Back to Home"):
        go_to("home")

    st.title("Host an Event")
    st.caption("Tell us about your event and we'll help make it unforgettable.")
    show_notices()
    st.progress(wizard.progress)

    if wizard.step == 1:
        st.subheader("What type of event?")
        wizard.event_type = st.radio(
            "Event type",
            EVENT_TYPES,
            index=_index(EVENT_TYPES, wizard.event_type),
            format_func=lambda t: f"{EVENT_ICONS[t]} {t}",
            key=widget_key(WIZARD_KEY, "type"),
        ) or ""

    elif wizard.step == 2:
        st.subheader("Event details")
        wizard.event_date = st.date_input(
            "Date",
            value=wizard.event_date,
            min_value=date.today(),
            key=widget_key(WIZARD_KEY, "date"),
        )
        wizard.duration = st.radio(
            "Duration",
            DURATIONS,
            index=_index(DURATIONS, wizard.duration),
            format_func=lambda h: f"{h} hours",
            horizontal=True,
            key=widget_key(WIZARD_KEY, "duration"),
        )
        # Bounds are enforced on submit, not here
        wizard.guest_count = int(st.number_input(
            "Guest count",
            min_value=0,
            value=wizard.guest_count,
            step=1,
            help=f"Between {EVENT_GUEST_MIN} and {EVENT_GUEST_MAX} guests",
            key=widget_key(WIZARD_KEY, "guests"),
        ))

    elif wizard.step == 3:
        st.subheader("Add-ons")
        for item in ADD_ONS:
            st.checkbox(
                item,
                value=item in wizard.add_ons,
                on_change=wizard.toggle_add_on,
                args=(item,),
                key=widget_key(WIZARD_KEY, f"addon-{item}"),
            )

    else:
        st.subheader("Contact details")
        wizard.customer_name = st.text_input(
            "Full name", value=wizard.customer_name, key=widget_key(WIZARD_KEY, "name"))
        wizard.phone = st.text_input(
            "Phone", value=wizard.phone, key=widget_key(WIZARD_KEY, "phone"))
        wizard.email = st.text_input(
            "Email", value=wizard.email, key=widget_key(WIZARD_KEY, "email"))
        wizard.event_details = st.text_area(
            "Event details (optional)",
            value=wizard.event_details,
            key=widget_key(WIZARD_KEY, "details"),
        )

    _nav(wizard, cfg)
