from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Dict, Any, List, Mapping, Iterable, Union

from email_validator import validate_email as _validate_email, EmailNotValidError

from lounge.errors import ValidationError


# ---------------------- CATALOGS ----------------------

TIME_SLOTS = (
    "5:00 PM - 7:00 PM",
    "7:00 PM - 9:00 PM",
    "9:00 PM - 11:00 PM",
    "11:00 PM - 1:00 AM",
)

TABLE_GUEST_OPTIONS = (2, 3, 4, 5, 6)

EVENT_TYPES = (
    "Birthday Party",
    "Corporate Event",
    "Wedding Reception",
    "Other",
)

DURATIONS = (3, 4, 6)

ADD_ONS = (
    "Professional DJ",
    "Live Band/Drums",
    "West African Food Buffet",
    "Shisha Bar Setup",
    "Professional Photographer",
    "Premium Decorations",
)

TABLE_STATUSES = ("pending", "approved", "rejected")
EVENT_STATUSES = ("inquiry", "quoted", "confirmed", "cancelled")

EVENT_GUEST_MIN = 20
EVENT_GUEST_MAX = 200

# Fields the database assigns; a submission must never carry them.
SERVER_FIELDS = ("id", "created_at", "status")

_FRACTION = re.compile(r"\.(\d+)")


class BookingKind(str, Enum):
    TABLE = "table"
    EVENT = "event"

    @classmethod
    def parse(cls, value: Union["BookingKind", str]) -> "BookingKind":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("kind", f"Unknown booking kind: {value}") from None

    @property
    def table_name(self) -> str:
        return "table_bookings" if self is BookingKind.TABLE else "event_bookings"

    @property
    def date_field(self) -> str:
        return "booking_date" if self is BookingKind.TABLE else "event_date"

    @property
    def statuses(self) -> tuple:
        return TABLE_STATUSES if self is BookingKind.TABLE else EVENT_STATUSES

    @property
    def initial_status(self) -> str:
        return self.statuses[0]

    @property
    def label(self) -> str:
        return "Table booking" if self is BookingKind.TABLE else "Event booking"


def assign_table_number(guest_count: int) -> int:
    """Map a party size onto one of five tables.

    This is a fixed step function, not an availability check: two parties of
    the same size in the same slot get the same table.
    """
    if guest_count <= 2:
        return 1
    if guest_count <= 3:
        return 2
    if guest_count <= 4:
        return 3
    if guest_count <= 5:
        return 4
    return 5


# ---------------------- PARSING HELPERS ----------------------

def parse_date(val: Union[str, date, None]) -> Optional[date]:
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    return date.fromisoformat(str(val).strip()[:10])


def parse_timestamp(val: Union[str, datetime, None]) -> Optional[datetime]:
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val
    text = str(val).strip()
    # Postgres returns "Z" and trims trailing zeros from the fraction;
    # fromisoformat before 3.11 wants "+00:00" and exactly six digits
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


# ---------------------- ENTITIES ----------------------

@dataclass
class TableBooking:
    booking_date: date
    time_slot: str
    guest_count: int
    customer_name: str
    phone: str
    email: str
    special_requests: Optional[str] = None
    status: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    table_number: int = field(init=False)

    kind = BookingKind.TABLE

    def __post_init__(self):
        self.table_number = assign_table_number(self.guest_count)

    @property
    def sort_date(self) -> date:
        return self.booking_date

    def to_insert_payload(self) -> Dict[str, Any]:
        return {
            "booking_date": self.booking_date.isoformat(),
            "time_slot": self.time_slot,
            "table_number": self.table_number,
            "guest_count": self.guest_count,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "email": self.email,
            "special_requests": self.special_requests,
            "status": self.status or self.kind.initial_status,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TableBooking":
        return cls(
            booking_date=parse_date(row["booking_date"]),
            time_slot=row.get("time_slot") or "",
            guest_count=int(row["guest_count"]),
            customer_name=row.get("customer_name") or "",
            phone=row.get("phone") or "",
            email=row.get("email") or "",
            special_requests=row.get("special_requests"),
            status=row.get("status"),
            id=None if row.get("id") is None else str(row["id"]),
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass
class EventBooking:
    event_type: str
    event_date: date
    duration: int
    guest_count: int
    customer_name: str
    phone: str
    email: str
    add_ons: List[str] = field(default_factory=list)
    event_details: Optional[str] = None
    status: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    kind = BookingKind.EVENT

    @property
    def sort_date(self) -> date:
        return self.event_date

    def to_insert_payload(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_date": self.event_date.isoformat(),
            "duration": self.duration,
            "guest_count": self.guest_count,
            "add_ons": list(self.add_ons),
            "customer_name": self.customer_name,
            "phone": self.phone,
            "email": self.email,
            "event_details": self.event_details,
            "status": self.status or self.kind.initial_status,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "EventBooking":
        return cls(
            event_type=row.get("event_type") or "",
            event_date=parse_date(row["event_date"]),
            duration=int(row["duration"]),
            guest_count=int(row["guest_count"]),
            customer_name=row.get("customer_name") or "",
            phone=row.get("phone") or "",
            email=row.get("email") or "",
            add_ons=list(row.get("add_ons") or []),
            event_details=row.get("event_details"),
            status=row.get("status"),
            id=None if row.get("id") is None else str(row["id"]),
            created_at=parse_timestamp(row.get("created_at")),
        )


Booking = Union[TableBooking, EventBooking]


def model_for(kind: BookingKind):
    return TableBooking if kind is BookingKind.TABLE else EventBooking


def sort_bookings(records: Iterable[Booking]) -> List[Booking]:
    """Newest date first, then newest creation time; rows without created_at go last."""
    # Two stable passes: secondary key first, then primary.
    by_created = sorted(
        records,
        key=lambda r: (r.created_at is not None, r.created_at.timestamp() if r.created_at else 0.0),
        reverse=True,
    )
    return sorted(by_created, key=lambda r: r.sort_date, reverse=True)


# ----------------- VALIDATORS ------------------------

def _required_text(record: Mapping[str, Any], name: str, label: str) -> str:
    val = record.get(name)
    if not isinstance(val, str) or not val.strip():
        raise ValidationError(name, f"{label} is required.")
    return val.strip()


def _optional_text(record: Mapping[str, Any], name: str) -> Optional[str]:
    val = record.get(name)
    if val is None:
        return None
    val = str(val).strip()
    return val or None


def _required_date(record: Mapping[str, Any], name: str, today: date) -> date:
    try:
        parsed = parse_date(record.get(name))
    except ValueError:
        raise ValidationError(name, "Invalid date format. Please use YYYY-MM-DD.")
    if parsed is None:
        raise ValidationError(name, "Please pick a date.")
    if parsed < today:
        raise ValidationError(name, "Invalid date (past). Please choose an upcoming date.")
    return parsed


def _guest_count(record: Mapping[str, Any]) -> int:
    val = record.get("guest_count")
    if isinstance(val, bool) or not isinstance(val, int):
        raise ValidationError("guest_count", "Guest count must be a whole number.")
    if val < 1:
        raise ValidationError("guest_count", "Guest count must be at least 1.")
    return val


def _email(record: Mapping[str, Any]) -> str:
    email = _required_text(record, "email", "Email")
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("email", "Invalid email. Please try format: name@example.com")
    return email


def _reject_assigned_fields(record: Mapping[str, Any], extra: tuple = ()) -> None:
    for name in SERVER_FIELDS + extra:
        if record.get(name) is not None:
            raise ValidationError(name, f"{name} is assigned automatically and cannot be submitted.")


def validate_table_booking(record: Mapping[str, Any], today: date) -> TableBooking:
    _reject_assigned_fields(record, extra=("table_number",))

    booking_date = _required_date(record, "booking_date", today)

    time_slot = record.get("time_slot")
    if time_slot not in TIME_SLOTS:
        raise ValidationError("time_slot", "Please select one of the available time slots.")

    guest_count = _guest_count(record)

    return TableBooking(
        booking_date=booking_date,
        time_slot=time_slot,
        guest_count=guest_count,
        customer_name=_required_text(record, "customer_name", "Name"),
        phone=_required_text(record, "phone", "Phone"),
        email=_email(record),
        special_requests=_optional_text(record, "special_requests"),
        status=BookingKind.TABLE.initial_status,
    )


def validate_event_booking(record: Mapping[str, Any], today: date) -> EventBooking:
    _reject_assigned_fields(record)

    event_type = record.get("event_type")
    if event_type not in EVENT_TYPES:
        raise ValidationError("event_type", "Please select an event type.")

    event_date = _required_date(record, "event_date", today)

    duration = record.get("duration")
    if isinstance(duration, bool) or duration not in DURATIONS:
        raise ValidationError("duration", "Duration must be 3, 4 or 6 hours.")

    guest_count = _guest_count(record)
    if not EVENT_GUEST_MIN <= guest_count <= EVENT_GUEST_MAX:
        raise ValidationError(
            "guest_count",
            f"Guest count must be between {EVENT_GUEST_MIN} and {EVENT_GUEST_MAX}.",
        )

    chosen = set(record.get("add_ons") or [])
    unknown = chosen.difference(ADD_ONS)
    if unknown:
        raise ValidationError("add_ons", f"Unknown add-on: {sorted(unknown)[0]}")

    return EventBooking(
        event_type=event_type,
        event_date=event_date,
        duration=duration,
        guest_count=guest_count,
        add_ons=[a for a in ADD_ONS if a in chosen],
        customer_name=_required_text(record, "customer_name", "Name"),
        phone=_required_text(record, "phone", "Phone"),
        email=_email(record),
        event_details=_optional_text(record, "event_details"),
        status=BookingKind.EVENT.initial_status,
    )


def validate_booking(kind: BookingKind, record: Mapping[str, Any], today: date) -> Booking:
    if kind is BookingKind.TABLE:
        return validate_table_booking(record, today)
    return validate_event_booking(record, today)
