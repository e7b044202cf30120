from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Callable, Optional, Dict, Any, List

from lounge.errors import BookingError, PersistenceError
from lounge.models import (
    BookingKind,
    EVENT_GUEST_MAX,
    EVENT_GUEST_MIN,
    assign_table_number,
)
from lounge.notices import Notice

FIRST_STEP = 1
LAST_STEP = 4

Notify = Callable[[Notice], None]


def _ignore(_: Notice) -> None:
    pass


@dataclass
class _Wizard:
    """Linear four-step form. Fields live on the subclass; `reset()` restores their defaults."""

    kind = None
    failure_prefix = "Failed to submit booking"
    success_message = ""

    step: int = FIRST_STEP
    loading: bool = False
    notify: Notify = field(default=_ignore, repr=False, compare=False)

    # ----------------- NAVIGATION ------------------------

    def gate(self) -> Optional[str]:
        """Message naming what the current step is missing, or None."""
        return None

    def next(self) -> bool:
        missing = self.gate()
        if missing:
            self.notify(Notice("error", missing))
            return False
        self.step = min(self.step + 1, LAST_STEP)
        return True

    def back(self) -> None:
        self.step = max(self.step - 1, FIRST_STEP)

    @property
    def progress(self) -> float:
        return self.step / LAST_STEP

    # ----------------- SUBMISSION ------------------------

    def contact_complete(self) -> bool:
        return all(
            (getattr(self, name) or "").strip()
            for name in ("customer_name", "phone", "email")
        )

    def precheck(self) -> Optional[str]:
        return None

    def to_record(self) -> Dict[str, Any]:
        raise NotImplementedError

    def submit(self, service) -> bool:
        problem = self.precheck()
        if problem:
            self.notify(Notice("error", problem))
            return False

        self.loading = True
        try:
            service.submit(self.kind, self.to_record())
        except PersistenceError as e:
            self.notify(Notice("error", f"{self.failure_prefix}: {e.message}"))
            return False
        except BookingError as e:
            self.notify(Notice("error", e.message))
            return False
        finally:
            self.loading = False

        self.notify(Notice("success", self.success_message))
        self.reset()
        return True

    def reset(self) -> None:
        fresh = type(self)(notify=self.notify)
        for f in fields(self):
            if f.name != "notify":
                setattr(self, f.name, getattr(fresh, f.name))


@dataclass
class TableBookingWizard(_Wizard):
    kind = BookingKind.TABLE
    success_message = "Booking submitted! We'll confirm shortly."

    booking_date: Optional[date] = None
    time_slot: str = ""
    guest_count: Optional[int] = None
    customer_name: str = ""
    phone: str = ""
    email: str = ""
    special_requests: str = ""

    def gate(self) -> Optional[str]:
        if self.step == 1 and not self.booking_date:
            return "Pick a date"
        if self.step == 2 and not self.time_slot:
            return "Select a time slot"
        if self.step == 3 and not self.guest_count:
            return "Select guest count"
        return None

    @property
    def table_number_preview(self) -> Optional[int]:
        return assign_table_number(self.guest_count) if self.guest_count else None

    def precheck(self) -> Optional[str]:
        if not (self.booking_date and self.time_slot and self.guest_count and self.contact_complete()):
            return "Please complete all required fields."
        return None

    def to_record(self) -> Dict[str, Any]:
        return {
            "booking_date": self.booking_date,
            "time_slot": self.time_slot,
            "guest_count": self.guest_count,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "email": self.email,
            "special_requests": self.special_requests or None,
        }


@dataclass
class EventBookingWizard(_Wizard):
    kind = BookingKind.EVENT
    failure_prefix = "Failed to submit event booking"
    success_message = "Event inquiry submitted! We'll contact you with a quote."

    event_type: str = ""
    event_date: Optional[date] = None
    duration: Optional[int] = None
    guest_count: int = EVENT_GUEST_MIN
    add_ons: List[str] = field(default_factory=list)
    customer_name: str = ""
    phone: str = ""
    email: str = ""
    event_details: str = ""

    def gate(self) -> Optional[str]:
        if self.step == 1 and not self.event_type:
            return "Select an event type"
        # guest count is only bounds-checked on submit
        if self.step == 2 and not (self.event_date and self.duration):
            return "Select date and duration"
        return None

    def toggle_add_on(self, item: str) -> None:
        if item in self.add_ons:
            self.add_ons = [a for a in self.add_ons if a != item]
        else:
            self.add_ons = self.add_ons + [item]

    def precheck(self) -> Optional[str]:
        if not (self.event_type and self.event_date and self.duration and self.contact_complete()):
            return "Please complete all required fields."
        if not EVENT_GUEST_MIN <= self.guest_count <= EVENT_GUEST_MAX:
            return f"Guest count must be between {EVENT_GUEST_MIN} and {EVENT_GUEST_MAX}."
        return None

    def to_record(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_date": self.event_date,
            "duration": self.duration,
            "guest_count": self.guest_count,
            "add_ons": list(self.add_ons),
            "customer_name": self.customer_name,
            "phone": self.phone,
            "email": self.email,
            "event_details": self.event_details or None,
        }
