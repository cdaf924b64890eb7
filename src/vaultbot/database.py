from __future__ import annotations

import logging
from collections.abc import Iterable

import aiosqlite

from .services.base import BaseService

log = logging.getLogger("vaultbot.database")


async def initialize_database(sqlite_path: str, stores: Iterable[BaseService]) -> None:
    """Prepare the SQLite file behind the persistent stores.

    Switches the file to WAL journaling, then each store creates its own
    tables (``temp_bans`` for :class:`~vaultbot.services.tempban_store.TempBanStore`).
    """
    async with aiosqlite.connect(sqlite_path) as db:
        async with db.execute("PRAGMA journal_mode=WAL") as cur:
            row = await cur.fetchone()
        await db.execute("PRAGMA synchronous=NORMAL")
        await db.commit()
    log.debug("SQLite %s journal mode: %s", sqlite_path, row[0] if row else "unknown")

    names = []
    for store in stores:
        await store.init()
        names.append(type(store).__name__)
    log.info("SQLite ready at %s (%s)", sqlite_path, ", ".join(names) or "no stores")
