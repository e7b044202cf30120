from __future__ import annotations

from typing import Iterable, List

import pandas as pd
import plotly.express as px

from lounge.models import Booking, BookingKind, TableBooking, EventBooking


TABLE_COLUMNS = {
    "booking_date": "Date",
    "time_slot": "Time",
    "customer_name": "Customer",
    "phone": "Phone",
    "email": "Email",
    "guest_count": "Guests",
    "table_number": "Table #",
    "status": "Status",
    "id": "ID",
}

EVENT_COLUMNS = {
    "event_date": "Date",
    "event_type": "Event Type",
    "duration": "Hours",
    "customer_name": "Customer",
    "phone": "Phone",
    "email": "Email",
    "guest_count": "Guests",
    "add_ons": "Add-ons",
    "status": "Status",
    "id": "ID",
}


def _columns(kind: BookingKind) -> dict:
    return TABLE_COLUMNS if kind is BookingKind.TABLE else EVENT_COLUMNS


def bookings_frame(kind: BookingKind, bookings: Iterable[Booking]) -> pd.DataFrame:
    """Display table for one booking kind; keeps the incoming order."""
    columns = _columns(kind)
    rows = []
    for b in bookings:
        row = {name: getattr(b, name) for name in columns}
        if isinstance(b, EventBooking):
            row["add_ons"] = ", ".join(b.add_ons) if b.add_ons else "—"
        rows.append(row)
    df = pd.DataFrame(rows, columns=list(columns))
    return df.rename(columns=columns)


def status_breakdown(
    table_bookings: List[TableBooking], event_bookings: List[EventBooking]
) -> pd.DataFrame:
    """Counts per (kind, status), including statuses with no bookings."""
    records = []
    for kind, bookings in ((BookingKind.TABLE, table_bookings), (BookingKind.EVENT, event_bookings)):
        for status in kind.statuses:
            records.append({
                "Kind": kind.label,
                "Status": status,
                "Count": sum(1 for b in bookings if b.status == status),
            })
    return pd.DataFrame(records, columns=["Kind", "Status", "Count"])


def status_chart(breakdown: pd.DataFrame):
    return px.bar(
        breakdown,
        x="Status",
        y="Count",
        color="Kind",
        barmode="group",
        title="Bookings by status",
    )


def to_csv(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")
