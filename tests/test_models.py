from datetime import date, datetime, timedelta, timezone

import pytest

from lounge.errors import ValidationError
from lounge.models import (
    ADD_ONS,
    BookingKind,
    EventBooking,
    TableBooking,
    assign_table_number,
    sort_bookings,
    validate_event_booking,
    validate_table_booking,
)

from conftest import TODAY, event_row, table_row


@pytest.mark.parametrize(
    "guest_count, expected",
    [(1, 1), (2, 1), (3, 2), (4, 3), (5, 4), (6, 5), (7, 5), (40, 5)],
)
def test_assign_table_number_breakpoints(guest_count, expected):
    assert assign_table_number(guest_count) == expected


def test_assign_table_number_is_non_decreasing():
    numbers = [assign_table_number(n) for n in range(1, 30)]
    assert numbers == sorted(numbers)
    assert set(numbers) == {1, 2, 3, 4, 5}


def test_table_number_follows_guest_count():
    booking = TableBooking(
        booking_date=TODAY,
        time_slot="5:00 PM - 7:00 PM",
        guest_count=4,
        customer_name="Ama",
        phone="1",
        email="ama@cubelounge.com",
    )
    assert booking.table_number == 3
    with pytest.raises(TypeError):
        TableBooking(
            booking_date=TODAY, time_slot="5:00 PM - 7:00 PM", guest_count=4,
            customer_name="Ama", phone="1", email="a@a.com", table_number=1,
        )


def _table_record(**overrides):
    record = {
        "booking_date": TODAY,
        "time_slot": "9:00 PM - 11:00 PM",
        "guest_count": 3,
        "customer_name": "Ama",
        "phone": "0241234567",
        "email": "ama@cubelounge.com",
    }
    record.update(overrides)
    return record


def _event_record(**overrides):
    record = {
        "event_type": "Corporate Event",
        "event_date": TODAY + timedelta(days=10),
        "duration": 6,
        "guest_count": 50,
        "add_ons": [],
        "customer_name": "Kofi",
        "phone": "0207654321",
        "email": "kofi@cubelounge.com",
    }
    record.update(overrides)
    return record


def test_table_booking_payload_has_explicit_pending_status():
    booking = validate_table_booking(_table_record(special_requests="  "), TODAY)
    payload = booking.to_insert_payload()

    assert payload["status"] == "pending"
    assert payload["table_number"] == 2
    assert payload["booking_date"] == TODAY.isoformat()
    assert payload["special_requests"] is None
    assert "id" not in payload and "created_at" not in payload


def test_table_booking_today_is_allowed_but_yesterday_is_not():
    validate_table_booking(_table_record(booking_date=TODAY), TODAY)
    with pytest.raises(ValidationError) as exc:
        validate_table_booking(_table_record(booking_date=TODAY - timedelta(days=1)), TODAY)
    assert exc.value.field == "booking_date"


def test_table_booking_accepts_iso_date_strings():
    booking = validate_table_booking(_table_record(booking_date="2025-07-01"), TODAY)
    assert booking.booking_date == date(2025, 7, 1)


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"time_slot": "3:00 AM - 4:00 AM"}, "time_slot"),
        ({"guest_count": 0}, "guest_count"),
        ({"guest_count": True}, "guest_count"),
        ({"guest_count": "4"}, "guest_count"),
        ({"customer_name": "  "}, "customer_name"),
        ({"phone": None}, "phone"),
        ({"email": "not-an-email"}, "email"),
        ({"booking_date": None}, "booking_date"),
        ({"booking_date": "15/06/2025"}, "booking_date"),
        ({"table_number": 5}, "table_number"),
        ({"status": "approved"}, "status"),
        ({"id": "abc"}, "id"),
    ],
)
def test_table_booking_rejections(overrides, field):
    with pytest.raises(ValidationError) as exc:
        validate_table_booking(_table_record(**overrides), TODAY)
    assert exc.value.field == field


def test_table_booking_has_no_upper_guest_bound():
    booking = validate_table_booking(_table_record(guest_count=25), TODAY)
    assert booking.table_number == 5


@pytest.mark.parametrize("guest_count, ok", [(19, False), (20, True), (200, True), (201, False)])
def test_event_guest_count_bounds_are_inclusive(guest_count, ok):
    record = _event_record(guest_count=guest_count)
    if ok:
        assert validate_event_booking(record, TODAY).guest_count == guest_count
    else:
        with pytest.raises(ValidationError) as exc:
            validate_event_booking(record, TODAY)
        assert exc.value.field == "guest_count"
        assert "between 20 and 200" in exc.value.message


def test_event_add_ons_are_a_set_in_catalog_order():
    chosen = [ADD_ONS[3], ADD_ONS[0], ADD_ONS[3]]
    booking = validate_event_booking(_event_record(add_ons=chosen), TODAY)
    assert booking.add_ons == [ADD_ONS[0], ADD_ONS[3]]


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"event_type": "Bar Mitzvah"}, "event_type"),
        ({"duration": 5}, "duration"),
        ({"duration": True}, "duration"),
        ({"add_ons": ["Fireworks"]}, "add_ons"),
        ({"event_date": TODAY - timedelta(days=1)}, "event_date"),
        ({"status": "confirmed"}, "status"),
    ],
)
def test_event_booking_rejections(overrides, field):
    with pytest.raises(ValidationError) as exc:
        validate_event_booking(_event_record(**overrides), TODAY)
    assert exc.value.field == field


def test_event_booking_payload_defaults_to_inquiry():
    payload = validate_event_booking(_event_record(), TODAY).to_insert_payload()
    assert payload["status"] == "inquiry"
    assert payload["add_ons"] == []
    assert payload["event_details"] is None


def test_from_row_parses_server_fields():
    row = table_row("t1", "2025-06-20", created_at="2025-06-14T18:30:00.123456+00:00", guest_count=6)
    booking = TableBooking.from_row(row)

    assert booking.id == "t1"
    assert booking.booking_date == date(2025, 6, 20)
    assert booking.created_at == datetime(2025, 6, 14, 18, 30, 0, 123456, tzinfo=timezone.utc)
    assert booking.table_number == 5

    event = EventBooking.from_row(event_row(7, "2025-07-01", created_at="2025-06-14T18:30:00Z"))
    assert event.id == "7"
    assert event.created_at.tzinfo is not None


def test_sort_orders_by_date_then_creation_time_descending():
    rows = [
        table_row("a", "2024-01-01", created_at="2023-12-01T10:00:00+00:00"),
        table_row("b", "2024-03-01", created_at="2024-02-01T10:00:00+00:00"),
    ]
    ordered = sort_bookings(TableBooking.from_row(r) for r in rows)
    assert [b.booking_date.isoformat() for b in ordered] == ["2024-03-01", "2024-01-01"]


def test_sort_puts_missing_creation_time_last_within_a_date():
    rows = [
        table_row("no-ts", "2024-03-01", created_at=None),
        table_row("old", "2024-03-01", created_at="2024-02-01T10:00:00+00:00"),
        table_row("new", "2024-03-01", created_at="2024-02-20T10:00:00+00:00"),
        table_row("earlier-day", "2024-02-01", created_at="2024-02-25T10:00:00+00:00"),
    ]
    ordered = sort_bookings(TableBooking.from_row(r) for r in rows)
    assert [b.id for b in ordered] == ["new", "old", "no-ts", "earlier-day"]


def test_booking_kind_metadata():
    assert BookingKind.TABLE.table_name == "table_bookings"
    assert BookingKind.EVENT.date_field == "event_date"
    assert BookingKind("event").initial_status == "inquiry"
