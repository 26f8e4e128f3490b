"""
Durable session records: activity tracking, expiry listing and write retries.
"""

from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from pedidobot.db.sessions import SessionStore

NOW = datetime(2024, 5, 6, 10, 0)
TIMEOUT = timedelta(minutes=30)


def storage_error():
    return OperationalError("SELECT", {}, Exception("database is locked"))


class BrokenDatabase:
    """Database whose sessions always fail."""

    def session(self):
        raise storage_error()


async def test_touch_get_and_remove(sessions):
    assert await sessions.get("1001") is None

    await sessions.touch("1001", NOW)
    assert await sessions.get("1001") == NOW

    await sessions.touch("1001", NOW + timedelta(minutes=5))
    assert await sessions.get("1001") == NOW + timedelta(minutes=5)

    await sessions.remove("1001")
    assert await sessions.get("1001") is None


async def test_remove_unknown_sender_is_a_no_op(sessions):
    await sessions.remove("nobody")
    assert await sessions.get("nobody") is None


async def test_list_expired_uses_strict_timeout(sessions):
    await sessions.touch("old", NOW - timedelta(minutes=31))
    await sessions.touch("edge", NOW - TIMEOUT)
    await sessions.touch("fresh", NOW - timedelta(minutes=5))

    assert await sessions.list_expired(NOW, TIMEOUT) == ["old"]


async def test_records_survive_a_new_store_instance(database):
    await SessionStore(database).touch("1001", NOW - timedelta(hours=2))

    restarted = SessionStore(database)
    assert await restarted.list_expired(NOW, TIMEOUT) == ["1001"]


async def test_reads_fail_open():
    sessions = SessionStore(BrokenDatabase())

    assert await sessions.get("1001") is None
    assert await sessions.list_expired(NOW, TIMEOUT) == []


async def test_failed_writes_are_kept_and_retried(database, monkeypatch):
    sessions = SessionStore(database)
    working = database.session

    def broken():
        raise storage_error()

    monkeypatch.setattr(database, "session", broken)
    await sessions.touch("1001", NOW - timedelta(hours=1))

    # Still visible to this process while the write is pending
    assert await sessions.get("1001") == NOW - timedelta(hours=1)
    assert await sessions.flush_pending() == 1

    monkeypatch.setattr(database, "session", working)
    assert await sessions.flush_pending() == 0
    assert await SessionStore(database).get("1001") == NOW - timedelta(hours=1)


async def test_pending_removal_hides_the_stored_record(database, monkeypatch):
    sessions = SessionStore(database)
    await sessions.touch("1001", NOW - timedelta(hours=1))
    working = database.session

    def broken():
        raise storage_error()

    monkeypatch.setattr(database, "session", broken)
    await sessions.remove("1001")
    assert await sessions.get("1001") is None

    monkeypatch.setattr(database, "session", working)
    assert await sessions.list_expired(NOW, TIMEOUT) == []
    assert await SessionStore(database).get("1001") is None
