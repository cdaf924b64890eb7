from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import aiosqlite
import pytest

from vaultbot.database import initialize_database
from vaultbot.errors import PersistenceError, ValidationError
from vaultbot.services.tempban_store import TempBanStore
from vaultbot.services.tempbans import TempBan, TempBanSchedule

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def schedule():
    return TempBanSchedule()


async def test_schedule_requires_future_time(schedule):
    with pytest.raises(ValidationError):
        await schedule.schedule(1, 10, NOW - timedelta(seconds=1), "spam", now=NOW)
    assert await schedule.pending() == []


async def test_sweep_lifts_only_expired(schedule):
    await schedule.schedule(1, 10, NOW + timedelta(minutes=1), "a", now=NOW)
    await schedule.schedule(2, 10, NOW + timedelta(hours=1), "b", now=NOW)
    lift = AsyncMock()

    expired = await schedule.sweep(lift, now=NOW + timedelta(minutes=5))

    assert [e.user_id for e in expired] == [1]
    lift.assert_awaited_once_with(expired[0])
    assert [e.user_id for e in await schedule.pending()] == [2]


async def test_expiry_boundary_is_inclusive(schedule):
    due = NOW + timedelta(minutes=1)
    await schedule.schedule(1, 10, due, "a", now=NOW)
    lift = AsyncMock()

    assert len(await schedule.sweep(lift, now=due)) == 1
    assert await schedule.pending() == []


async def test_past_due_entry_removed_even_when_lift_fails(schedule, caplog):
    await schedule.schedule(1, 10, NOW + timedelta(seconds=1), "a", now=NOW)
    lift = AsyncMock(side_effect=RuntimeError("discord down"))

    expired = await schedule.sweep(lift, now=NOW + timedelta(minutes=1))

    assert len(expired) == 1
    assert await schedule.pending() == []
    assert "Failed to lift expired ban" in caplog.text

    # No retry on the next sweep.
    lift.reset_mock()
    assert await schedule.sweep(lift, now=NOW + timedelta(minutes=2)) == []
    lift.assert_not_awaited()


async def test_one_failing_lift_does_not_block_others(schedule):
    await schedule.schedule(1, 10, NOW + timedelta(seconds=1), "a", now=NOW)
    await schedule.schedule(2, 10, NOW + timedelta(seconds=2), "b", now=NOW)
    lifted = []

    async def lift(ban: TempBan) -> None:
        if ban.user_id == 1:
            raise RuntimeError("boom")
        lifted.append(ban.user_id)

    await schedule.sweep(lift, now=NOW + timedelta(minutes=1))
    assert lifted == [2]


async def test_cancel(schedule):
    await schedule.schedule(1, 10, NOW + timedelta(hours=1), "a", now=NOW)
    await schedule.schedule(1, 10, NOW + timedelta(hours=2), "dup", now=NOW)
    await schedule.schedule(1, 20, NOW + timedelta(hours=1), "other guild", now=NOW)
    await schedule.schedule(2, 10, NOW + timedelta(hours=1), "b", now=NOW)

    assert await schedule.cancel(1, 10) == 2
    assert sorted((e.user_id, e.guild_id) for e in await schedule.pending()) == [(1, 20), (2, 10)]
    assert await schedule.cancel(1) == 1
    assert await schedule.cancel(1) == 0

    lift = AsyncMock()
    await schedule.sweep(lift, now=NOW + timedelta(days=1))
    assert [c.args[0].user_id for c in lift.await_args_list] == [2]


async def test_duplicates_each_get_one_attempt(schedule):
    await schedule.schedule(1, 10, NOW + timedelta(seconds=1), "a", now=NOW)
    await schedule.schedule(1, 10, NOW + timedelta(seconds=2), "a again", now=NOW)
    lift = AsyncMock()

    await schedule.sweep(lift, now=NOW + timedelta(minutes=1))
    assert lift.await_count == 2


async def test_persistent_schedule_survives_restart(tmp_path):
    path = str(tmp_path / "bans.sqlite3")
    store = TempBanStore(path)
    await initialize_database(path, [store])

    first = TempBanSchedule(store)
    await first.schedule(1, 10, NOW + timedelta(hours=1), "a", now=NOW)
    await first.schedule(2, 10, NOW + timedelta(hours=2), "b", now=NOW)
    await first.schedule(3, 10, NOW + timedelta(hours=3), "c", now=NOW)
    await first.cancel(2)
    await first.sweep(AsyncMock(), now=NOW + timedelta(minutes=90))

    second = TempBanSchedule(TempBanStore(path))
    assert await second.load() == 1
    [entry] = await second.pending()
    assert (entry.user_id, entry.guild_id, entry.reason) == (3, 10, "c")
    assert entry.unban_at == NOW + timedelta(hours=3)


class BrokenStore:
    """A store whose writes fail the way a locked SQLite file does."""

    def __init__(self) -> None:
        self.rows: list[TempBan] = []

    async def all(self) -> list[TempBan]:
        return list(self.rows)

    async def add(self, ban: TempBan) -> None:
        raise RuntimeError("database is locked")

    async def delete(self, ban: TempBan) -> None:
        raise RuntimeError("database is locked")

    async def delete_user(self, user_id: int, guild_id: int | None = None) -> None:
        raise RuntimeError("database is locked")


async def test_sweep_lifts_even_when_store_delete_fails(caplog):
    store = BrokenStore()
    store.rows.append(TempBan(1, 10, NOW + timedelta(seconds=1), "a"))
    schedule = TempBanSchedule(store)
    await schedule.load()
    lift = AsyncMock()

    expired = await schedule.sweep(lift, now=NOW + timedelta(minutes=1))

    assert [e.user_id for e in expired] == [1]
    lift.assert_awaited_once_with(expired[0])
    assert await schedule.pending() == []
    assert "Failed to delete stored temp ban" in caplog.text


async def test_schedule_not_kept_when_store_add_fails():
    schedule = TempBanSchedule(BrokenStore())

    with pytest.raises(PersistenceError):
        await schedule.schedule(1, 10, NOW + timedelta(hours=1), "a", now=NOW)
    assert await schedule.pending() == []


async def test_cancel_survives_store_failure(caplog):
    store = BrokenStore()
    store.rows.append(TempBan(1, 10, NOW + timedelta(hours=1), "a"))
    schedule = TempBanSchedule(store)
    await schedule.load()

    assert await schedule.cancel(1, 10) == 1
    assert await schedule.pending() == []
    assert "Failed to delete stored temp bans" in caplog.text


async def test_initialize_database_enables_wal(tmp_path):
    path = str(tmp_path / "wal.sqlite3")
    await initialize_database(path, [TempBanStore(path)])

    async with aiosqlite.connect(path) as db:
        async with db.execute("PRAGMA journal_mode") as cur:
            assert (await cur.fetchone())[0] == "wal"
        async with db.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='temp_bans'") as cur:
            assert await cur.fetchone() is not None
