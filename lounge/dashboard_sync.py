"""
Admin dashboard state: both booking lists, kept current from the hosted database.

The lists are replaced whole on every refresh. Realtime notifications that
carry a row are patched in place of a refresh while no read is in flight;
anything else falls back to re-reading both tables.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, List, Mapping, Optional, Set, Union

from lounge.errors import PersistenceError, ValidationError
from lounge.models import (
    Booking,
    BookingKind,
    EventBooking,
    TableBooking,
    model_for,
    sort_bookings,
)
from lounge.notices import Notice

logger = logging.getLogger(__name__)

ALL = "All"
OBSERVED_EVENTS = ("INSERT", "UPDATE")


@dataclass(frozen=True)
class ChangeEvent:
    kind: BookingKind
    type: str
    record: Optional[Mapping[str, Any]] = None


def _ignore(_: Notice) -> None:
    pass


class AdminDashboardSync:
    def __init__(
        self,
        repository,
        notify: Callable[[Notice], None] = _ignore,
        today: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.notify = notify
        self.today = today

        self.table_bookings: List[TableBooking] = []
        self.event_bookings: List[EventBooking] = []
        self.table_status_filter = ALL
        self.event_status_filter = ALL

        self.refresh_count = 0
        self._issued = 0
        self._applied = 0
        self._in_flight = 0
        self._disposed = False
        self._subscription = None
        self._tasks: Set[asyncio.Task] = set()

    # ----------------- LIFECYCLE ------------------------

    async def mount(self) -> None:
        self._subscription = await self.repository.subscribe(self._on_notification, OBSERVED_EVENTS)
        await self.fetch_all()

    async def unmount(self) -> None:
        # In-flight reads are not cancelled; `_disposed` keeps them from
        # writing into a released view.
        self._disposed = True
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await subscription.close()

    async def __aenter__(self) -> "AdminDashboardSync":
        try:
            await self.mount()
        except BaseException:
            await self.unmount()
            raise
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.unmount()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def pending_tasks(self) -> Set[asyncio.Task]:
        return set(self._tasks)

    # ----------------- REFRESH ------------------------

    async def fetch_all(self) -> bool:
        """Re-read both tables; state changes only if both reads succeed.

        Each call takes a sequence number. A result older than the last one
        applied is dropped, so overlapping refreshes settle on the newest.
        """
        self._issued += 1
        seq = self._issued
        self._in_flight += 1
        try:
            table_rows, event_rows = await asyncio.gather(
                self.repository.select(BookingKind.TABLE),
                self.repository.select(BookingKind.EVENT),
            )
        except PersistenceError as e:
            logger.warning("Refresh #%d failed: %s", seq, e.message)
            self.notify(Notice("error", f"Failed to load bookings: {e.message}"))
            return False
        finally:
            self._in_flight -= 1

        if self._disposed:
            logger.debug("Refresh #%d finished after dispose; dropped", seq)
            return False
        if seq <= self._applied:
            logger.debug("Refresh #%d is older than applied #%d; dropped", seq, self._applied)
            return False

        self._applied = seq
        self.table_bookings = sort_bookings(TableBooking.from_row(r) for r in table_rows)
        self.event_bookings = sort_bookings(EventBooking.from_row(r) for r in event_rows)
        self.refresh_count += 1
        logger.info(
            "Refresh #%d loaded %d table and %d event bookings",
            seq, len(self.table_bookings), len(self.event_bookings),
        )
        return True

    # ----------------- STATUS ACTIONS ------------------------

    async def set_status(self, kind: Union[BookingKind, str], booking_id: str, status: str) -> bool:
        kind = BookingKind.parse(kind)
        if status not in kind.statuses:
            raise ValidationError("status", f"Unknown {kind.value} booking status: {status}")

        try:
            await self.repository.update(kind, booking_id, {"status": status})
        except PersistenceError as e:
            self.notify(Notice("error", f"Update failed: {e.message}"))
            return False

        logger.info("%s %s set to %s", kind.label, booking_id, status)
        self.notify(Notice("success", f"{kind.label} updated."))
        await self.fetch_all()
        return True

    # ----------------- CHANGE FEED ------------------------

    def _on_notification(self, kind: BookingKind, event: str, record: Optional[Mapping[str, Any]]) -> None:
        task = asyncio.ensure_future(self.handle_change(ChangeEvent(kind, event, record)))
        self._tasks.add(task)
        task.add_done_callback(self._change_done)

    def _change_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Handling a booking change failed", exc_info=exc)
            self.notify(Notice("error", getattr(exc, "message", None) or str(exc)))

    async def handle_change(self, event: ChangeEvent) -> None:
        if self._disposed or event.type not in OBSERVED_EVENTS:
            return

        # Reads in flight may predate this change and would undo a patch.
        booking = None if self._in_flight else self._booking_from(event)
        if booking is None:
            await self.fetch_all()
            return
        self._patch(booking)

    def _booking_from(self, event: ChangeEvent) -> Optional[Booking]:
        if not event.record or event.record.get("id") is None:
            return None
        try:
            return model_for(event.kind).from_row(event.record)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Change on %s not patchable (%s); refreshing", event.kind.table_name, e)
            return None

    def _patch(self, booking: Booking) -> None:
        current = self.table_bookings if booking.kind is BookingKind.TABLE else self.event_bookings
        others = [b for b in current if b.id != booking.id]
        patched = sort_bookings(others + [booking])
        if booking.kind is BookingKind.TABLE:
            self.table_bookings = patched
        else:
            self.event_bookings = patched
        logger.debug("Patched %s %s", booking.kind.value, booking.id)

    # ----------------- DERIVED VIEWS ------------------------

    @property
    def pending_table_count(self) -> int:
        return sum(1 for b in self.table_bookings if b.status == BookingKind.TABLE.initial_status)

    @property
    def pending_event_count(self) -> int:
        return sum(1 for b in self.event_bookings if b.status == BookingKind.EVENT.initial_status)

    @property
    def todays_count(self) -> int:
        today = self.today()
        return (
            sum(1 for b in self.table_bookings if b.booking_date == today)
            + sum(1 for b in self.event_bookings if b.event_date == today)
        )

    def set_filter(self, kind: Union[BookingKind, str], value: str) -> None:
        kind = BookingKind.parse(kind)
        if value != ALL and value not in kind.statuses:
            raise ValidationError("status", f"Unknown {kind.value} booking status: {value}")
        if kind is BookingKind.TABLE:
            self.table_status_filter = value
        else:
            self.event_status_filter = value

    def filtered_table_bookings(self) -> List[TableBooking]:
        return _filter(self.table_bookings, self.table_status_filter)

    def filtered_event_bookings(self) -> List[EventBooking]:
        return _filter(self.event_bookings, self.event_status_filter)


def _filter(bookings, status: str):
    if status == ALL:
        return list(bookings)
    return [b for b in bookings if b.status == status]
