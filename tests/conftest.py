import asyncio
import itertools
from datetime import date, datetime, timedelta, timezone

import pytest

from lounge.errors import PersistenceError
from lounge.models import BookingKind

TODAY = date(2025, 6, 15)


class FakeRepository:
    """In-memory stand-in for BookingRepository; mimics the database defaults."""

    def __init__(self):
        self.inserted = []
        self.fail_with = None
        self._ids = itertools.count(1)

    def insert(self, kind, payload):
        if self.fail_with:
            raise PersistenceError(self.fail_with)
        row = dict(payload)
        row["id"] = f"{kind.value}-{next(self._ids)}"
        row["created_at"] = datetime.now(timezone.utc).isoformat()
        row.setdefault("status", kind.initial_status)
        self.inserted.append((kind, row))
        return row


class FakeSubscription:
    def __init__(self):
        self.closed = False
        self.close_calls = 0

    async def close(self):
        self.close_calls += 1
        self.closed = True


class FakeAsyncRepository:
    """In-memory stand-in for AsyncBookingRepository.

    `select` snapshots the rows when it starts, then waits `delays[n]`
    seconds for the n-th call (1-based), so tests can make reads overlap.
    """

    def __init__(self, table_rows=None, event_rows=None):
        self.rows = {
            BookingKind.TABLE: list(table_rows or []),
            BookingKind.EVENT: list(event_rows or []),
        }
        self.select_calls = 0
        self.delays = {}
        self.fail_select = {}
        self.fail_update = None
        self.updates = []
        self.subscriptions = []
        self.callback = None

    async def select(self, kind):
        self.select_calls += 1
        call = self.select_calls
        snapshot = [dict(r) for r in self.rows[kind]]
        if call in self.delays:
            await asyncio.sleep(self.delays[call])
        if kind in self.fail_select:
            raise PersistenceError(self.fail_select[kind])
        return snapshot

    async def update(self, kind, booking_id, fields):
        if self.fail_update:
            raise PersistenceError(self.fail_update)
        self.updates.append((kind, booking_id, fields))
        for row in self.rows[kind]:
            if row["id"] == booking_id:
                row.update(fields)

    async def subscribe(self, callback, events=("INSERT", "UPDATE")):
        self.callback = callback
        self.events = tuple(events)
        subscription = FakeSubscription()
        self.subscriptions.append(subscription)
        return subscription


def table_row(id, booking_date, created_at=None, status="pending", guest_count=2, **extra):
    row = {
        "id": id,
        "booking_date": booking_date,
        "time_slot": "7:00 PM - 9:00 PM",
        "table_number": 1,
        "guest_count": guest_count,
        "customer_name": "Ama",
        "phone": "0241234567",
        "email": "ama@cubelounge.com",
        "special_requests": None,
        "status": status,
        "created_at": created_at,
    }
    row.update(extra)
    return row


def event_row(id, event_date, created_at=None, status="inquiry", **extra):
    row = {
        "id": id,
        "event_type": "Birthday Party",
        "event_date": event_date,
        "duration": 4,
        "guest_count": 40,
        "add_ons": ["Professional DJ"],
        "customer_name": "Kofi",
        "phone": "0207654321",
        "email": "kofi@cubelounge.com",
        "event_details": None,
        "status": status,
        "created_at": created_at,
    }
    row.update(extra)
    return row


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def tomorrow():
    return TODAY + timedelta(days=1)


@pytest.fixture
def notices():
    return []


@pytest.fixture
def repository():
    return FakeRepository()
