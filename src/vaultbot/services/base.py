from __future__ import annotations

import aiosqlite
import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class BaseService(ABC, Generic[T]):
    """Base class for SQLite-backed services."""

    def __init__(self, sqlite_path: str) -> None:
        self._path = sqlite_path
        self._logger = logging.getLogger(f"vaultbot.{self.__class__.__name__.lower()}")

    async def init(self) -> None:
        """Initialize the database schema."""
        async with aiosqlite.connect(self._path) as db:
            await self._create_tables(db)
            await db.commit()

    @abstractmethod
    async def _create_tables(self, db: aiosqlite.Connection) -> None:
        """Create the necessary database tables."""
        pass

    @abstractmethod
    def _from_row(self, row: aiosqlite.Row) -> T:
        """Convert a database row to the service's data type."""
        pass
