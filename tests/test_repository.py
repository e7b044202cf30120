import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from supabase import PostgrestAPIError

from db.repository import AsyncBookingRepository, BookingRepository
from lounge.errors import PersistenceError
from lounge.models import BookingKind


def test_insert_returns_first_row():
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.return_value = MagicMock(
        data=[{"id": "abc", "status": "pending"}]
    )

    row = BookingRepository(client).insert(BookingKind.TABLE, {"guest_count": 2})

    assert row == {"id": "abc", "status": "pending"}
    client.table.assert_called_once_with("table_bookings")
    client.table.return_value.insert.assert_called_once_with({"guest_count": 2})


def test_insert_error_message_is_passed_through():
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.side_effect = PostgrestAPIError(
        {"message": 'null value in column "phone" violates not-null constraint', "code": "23502"}
    )

    with pytest.raises(PersistenceError) as exc:
        BookingRepository(client).insert(BookingKind.EVENT, {})
    assert exc.value.message == 'null value in column "phone" violates not-null constraint'


def test_insert_connection_error():
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.side_effect = httpx.ConnectError(
        "Name or service not known"
    )

    with pytest.raises(PersistenceError) as exc:
        BookingRepository(client).insert(BookingKind.TABLE, {})
    assert exc.value.message == "Name or service not known"


def test_insert_without_returned_row():
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])

    with pytest.raises(PersistenceError):
        BookingRepository(client).insert(BookingKind.TABLE, {})


def test_select_orders_by_date_then_created_at_nulls_last():
    client = MagicMock()
    select = client.table.return_value.select.return_value
    by_date = select.order.return_value
    by_date.order.return_value.execute = AsyncMock(return_value=MagicMock(data=[{"id": 1}]))

    rows = asyncio.run(AsyncBookingRepository(client).select(BookingKind.EVENT))

    assert rows == [{"id": 1}]
    client.table.assert_called_once_with("event_bookings")
    select.order.assert_called_once_with("event_date", desc=True)
    by_date.order.assert_called_once_with("created_at", desc=True, nullsfirst=False)


def test_update_by_id_and_error_translation():
    client = MagicMock()
    eq = client.table.return_value.update.return_value.eq
    eq.return_value.execute = AsyncMock(return_value=MagicMock(data=[]))
    repo = AsyncBookingRepository(client)

    asyncio.run(repo.update(BookingKind.TABLE, "abc", {"status": "approved"}))
    client.table.return_value.update.assert_called_once_with({"status": "approved"})
    eq.assert_called_once_with("id", "abc")

    eq.return_value.execute = AsyncMock(side_effect=PostgrestAPIError({"message": "JWT expired"}))
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(repo.update(BookingKind.TABLE, "abc", {"status": "approved"}))
    assert exc.value.message == "JWT expired"


def test_subscribe_listens_to_both_tables_and_releases_once():
    client = MagicMock()
    channel = client.channel.return_value
    channel.subscribe = AsyncMock()
    client.remove_channel = AsyncMock()
    received = []

    async def scenario():
        repo = AsyncBookingRepository(client)
        subscription = await repo.subscribe(lambda *args: received.append(args))

        calls = channel.on_postgres_changes.call_args_list
        assert {(c.args[0], c.kwargs["table"]) for c in calls} == {
            ("INSERT", "table_bookings"),
            ("UPDATE", "table_bookings"),
            ("INSERT", "event_bookings"),
            ("UPDATE", "event_bookings"),
        }
        callback = next(
            c.kwargs["callback"] for c in calls
            if c.args[0] == "UPDATE" and c.kwargs["table"] == "event_bookings"
        )
        callback({"data": {"type": "UPDATE", "record": {"id": "e1", "status": "quoted"}}})
        callback({"data": {"type": "UPDATE"}})

        await subscription.close()
        await subscription.close()
        return subscription

    subscription = asyncio.run(scenario())

    client.channel.assert_called_once_with("admin-bookings")
    channel.subscribe.assert_awaited_once()
    client.remove_channel.assert_awaited_once_with(channel)
    assert subscription.closed
    assert received == [
        (BookingKind.EVENT, "UPDATE", {"id": "e1", "status": "quoted"}),
        (BookingKind.EVENT, "UPDATE", None),
    ]
