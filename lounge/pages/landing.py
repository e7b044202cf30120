import streamlit as st

from lounge.ui import go_to

VENUE_NAME = "Cube Bar Lounge"
TAGLINE = "West African Cuisine • Premium Shisha • Live Music • DJ Nights"

FEATURES = [
    ("🎵", "Live DJ", "Vibes curated by top DJs every weekend."),
    ("🔥", "Premium Shisha", "Smooth, flavorful blends with premium coals."),
    ("🍽️", "Authentic Food", "West African dishes prepared to perfection."),
    ("🎉", "Private Events", "Celebrate birthdays, weddings, and corporate nights."),
]


def render_landing():
    st.title(VENUE_NAME)
    st.subheader(TAGLINE)

    c1, c2 = st.columns(2)
    if c1.button("Book a Table", type="primary", use_container_width=True):
        go_to("table-booking")
    if c2.button("Host an Event", use_container_width=True):
        go_to("event-booking")

    st.divider()

    for col, (icon, title, description) in zip(st.columns(len(FEATURES)), FEATURES):
        col.markdown(
            f'<div class="feature-card"><div>{icon}</div>'
            f"<h4>{title}</h4><p>{description}</p></div>",
            unsafe_allow_html=True,
        )
