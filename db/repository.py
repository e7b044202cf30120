# db/repository.py
"""
Thin adapters over the Supabase tables `table_bookings` and `event_bookings`.

Both adapters translate client failures into PersistenceError and keep the
service's own message, so callers can show it to the user unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import httpx
from supabase import Client, AsyncClient, PostgrestAPIError

from lounge.errors import PersistenceError
from lounge.models import BookingKind

logger = logging.getLogger(__name__)

CHANNEL_NAME = "admin-bookings"
SUBSCRIBED_EVENTS = ("INSERT", "UPDATE")

ChangeCallback = Callable[[BookingKind, str, Optional[Mapping[str, Any]]], None]


def _error_message(exc: Exception) -> str:
    error_msg = getattr(exc, "message", None)
    if not error_msg:
        error_msg = getattr(exc, "details", None)
    return str(error_msg) if error_msg else str(exc)


def _persistence_error(action: str, kind: BookingKind, exc: Exception) -> PersistenceError:
    msg = _error_message(exc)
    logger.warning("%s on %s failed: %s", action, kind.table_name, msg)
    return PersistenceError(msg)


def _ordered_select(query, kind: BookingKind):
    return (
        query.select("*")
        .order(kind.date_field, desc=True)
        .order("created_at", desc=True, nullsfirst=False)
    )


# --- SYNC ADAPTER (booking wizards) -----------------------------------------

class BookingRepository:
    def __init__(self, client: Client):
        self.client = client

    def insert(self, kind: BookingKind, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.table(kind.table_name).insert(payload).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise _persistence_error("insert", kind, e) from e

        if not response.data:
            raise PersistenceError(f"Failed to insert into {kind.table_name}. No data returned.")
        return response.data[0]


# --- ASYNC ADAPTER (admin dashboard) ----------------------------------------

class Subscription:
    """Handle for one realtime channel; close() is idempotent."""

    def __init__(self, client: AsyncClient, channel):
        self._client = client
        self._channel = channel

    @property
    def closed(self) -> bool:
        return self._channel is None

    async def close(self) -> None:
        if self._channel is None:
            return
        channel, self._channel = self._channel, None
        await self._client.remove_channel(channel)
        logger.info("Realtime channel %s released", CHANNEL_NAME)


def _change_record(payload: Any) -> Optional[Mapping[str, Any]]:
    # Payload shape differs between realtime versions; the row sits under
    # data.record, record, or new.
    if not isinstance(payload, Mapping):
        return None
    data = payload.get("data", payload)
    if not isinstance(data, Mapping):
        return None
    record = data.get("record") or data.get("new")
    return record if isinstance(record, Mapping) else None


class AsyncBookingRepository:
    def __init__(self, client: AsyncClient):
        self.client = client

    async def select(self, kind: BookingKind) -> List[Dict[str, Any]]:
        try:
            response = await _ordered_select(self.client.table(kind.table_name), kind).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise _persistence_error("select", kind, e) from e
        return response.data or []

    async def update(self, kind: BookingKind, booking_id: str, fields: Dict[str, Any]) -> None:
        try:
            await self.client.table(kind.table_name).update(fields).eq("id", booking_id).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise _persistence_error("update", kind, e) from e

    async def subscribe(
        self,
        callback: ChangeCallback,
        events: Iterable[str] = SUBSCRIBED_EVENTS,
    ) -> Subscription:
        """Listen for row changes on both booking tables.

        `callback(kind, event, record)` runs on the event loop for every
        notification; `record` is None when the payload carries no row.
        """
        events = tuple(events)
        channel = self.client.channel(CHANNEL_NAME)
        for kind in BookingKind:
            for event in events:
                channel.on_postgres_changes(
                    event,
                    schema="public",
                    table=kind.table_name,
                    callback=self._bind(callback, kind, event),
                )
        await channel.subscribe()
        logger.info("Realtime channel %s subscribed (%s)", CHANNEL_NAME, ", ".join(events))
        return Subscription(self.client, channel)

    @staticmethod
    def _bind(callback: ChangeCallback, kind: BookingKind, event: str):
        def _on_change(payload, *_):
            callback(kind, event, _change_record(payload))
        return _on_change
