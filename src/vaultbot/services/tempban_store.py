from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import aiosqlite

from .base import BaseService

if TYPE_CHECKING:
    from .tempbans import TempBan


class TempBanStore(BaseService["TempBan"]):
    """Mirror of the temp-ban schedule so pending unbans survive restarts."""

    async def _create_tables(self, db: aiosqlite.Connection) -> None:
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS temp_bans (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                guild_id INTEGER NOT NULL,
                unban_at REAL NOT NULL,
                reason TEXT NOT NULL
            )
            """
        )
        await db.execute("CREATE INDEX IF NOT EXISTS idx_temp_bans_unban_at ON temp_bans(unban_at)")

    def _from_row(self, row: aiosqlite.Row) -> "TempBan":
        from .tempbans import TempBan

        return TempBan(
            user_id=int(row["user_id"]),
            guild_id=int(row["guild_id"]),
            unban_at=datetime.fromtimestamp(float(row["unban_at"]), tz=timezone.utc),
            reason=str(row["reason"]),
        )

    async def all(self) -> list["TempBan"]:
        async with aiosqlite.connect(self._path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT user_id, guild_id, unban_at, reason FROM temp_bans ORDER BY unban_at ASC"
            ) as cur:
                rows = await cur.fetchall()
        return [self._from_row(r) for r in rows]

    async def add(self, ban: "TempBan") -> None:
        async with aiosqlite.connect(self._path) as db:
            await db.execute(
                "INSERT INTO temp_bans (user_id, guild_id, unban_at, reason) VALUES (?, ?, ?, ?)",
                (int(ban.user_id), int(ban.guild_id), ban.unban_at.timestamp(), ban.reason),
            )
            await db.commit()

    async def delete(self, ban: "TempBan") -> None:
        async with aiosqlite.connect(self._path) as db:
            await db.execute(
                "DELETE FROM temp_bans WHERE user_id=? AND guild_id=? AND ABS(unban_at - ?) < 0.001",
                (int(ban.user_id), int(ban.guild_id), ban.unban_at.timestamp()),
            )
            await db.commit()

    async def delete_user(self, user_id: int, guild_id: int | None = None) -> None:
        async with aiosqlite.connect(self._path) as db:
            if guild_id is None:
                await db.execute("DELETE FROM temp_bans WHERE user_id=?", (int(user_id),))
            else:
                await db.execute(
                    "DELETE FROM temp_bans WHERE user_id=? AND guild_id=?",
                    (int(user_id), int(guild_id)),
                )
            await db.commit()
