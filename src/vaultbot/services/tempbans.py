from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from ..errors import PersistenceError, ValidationError
from .tempban_store import TempBanStore

log = logging.getLogger("vaultbot.tempbans")


@dataclass(frozen=True)
class TempBan:
    user_id: int
    guild_id: int
    unban_at: datetime
    reason: str


LiftBan = Callable[[TempBan], Awaitable[None]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TempBanSchedule:
    """Pending automatic unbans, reconciled by :meth:`sweep`.

    Each expired entry gets exactly one unban attempt. A failed attempt is
    logged and the entry is still dropped, leaving the user banned until a
    moderator runs ``/unban``.
    """

    def __init__(self, store: TempBanStore | None = None) -> None:
        self._entries: list[TempBan] = []
        self._lock = asyncio.Lock()
        self._store = store

    async def load(self) -> int:
        if self._store is None:
            return 0
        entries = await self._store.all()
        async with self._lock:
            self._entries = list(entries)
        log.info("Loaded %d pending temp bans", len(entries))
        return len(entries)

    async def pending(self) -> list[TempBan]:
        async with self._lock:
            return list(self._entries)

    async def schedule(
        self,
        user_id: int,
        guild_id: int,
        unban_at: datetime,
        reason: str,
        *,
        now: datetime | None = None,
    ) -> TempBan:
        if unban_at <= (now or _utcnow()):
            raise ValidationError("The unban time must be in the future.")
        entry = TempBan(user_id=int(user_id), guild_id=int(guild_id), unban_at=unban_at, reason=reason)
        async with self._lock:
            if self._store is not None:
                try:
                    await self._store.add(entry)
                except Exception as e:
                    log.exception("Failed to persist temp ban of %s in guild %s", entry.user_id, entry.guild_id)
                    raise PersistenceError("Could not save the scheduled unban.") from e
            self._entries.append(entry)
        log.info("Scheduled unban of %s in guild %s at %s", entry.user_id, entry.guild_id, unban_at.isoformat())
        return entry

    async def cancel(self, user_id: int, guild_id: int | None = None) -> int:
        def matches(e: TempBan) -> bool:
            return e.user_id == int(user_id) and (guild_id is None or e.guild_id == int(guild_id))

        async with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if not matches(e)]
            removed = before - len(self._entries)
            if removed and self._store is not None:
                try:
                    await self._store.delete_user(int(user_id), None if guild_id is None else int(guild_id))
                except Exception:
                    log.exception("Failed to delete stored temp bans of %s", user_id)
        if removed:
            log.info("Cancelled %d scheduled unban(s) for %s", removed, user_id)
        return removed

    async def sweep(self, lift: LiftBan, now: datetime | None = None) -> list[TempBan]:
        now = now or _utcnow()
        async with self._lock:
            expired = [e for e in self._entries if e.unban_at <= now]
            if not expired:
                return []
            self._entries = [e for e in self._entries if e.unban_at > now]
            if self._store is not None:
                for entry in expired:
                    try:
                        await self._store.delete(entry)
                    except Exception:
                        # The row may be reloaded and lifted again after a restart.
                        log.exception("Failed to delete stored temp ban of %s in guild %s", entry.user_id, entry.guild_id)

        for entry in expired:
            try:
                await lift(entry)
                log.info("Temp ban expired: unbanned %s in guild %s", entry.user_id, entry.guild_id)
            except Exception:
                log.exception("Failed to lift expired ban of %s in guild %s", entry.user_id, entry.guild_id)
        return expired
