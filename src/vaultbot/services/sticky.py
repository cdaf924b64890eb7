from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import discord

from ..errors import Conflict, KindMismatch, NotFound

log = logging.getLogger("vaultbot.sticky")


class StickyKind(str, Enum):
    TEXT = "text"
    STATUS = "status"


@dataclass(frozen=True)
class StickyContent:
    """Render template for a sticky embed."""
    title: str
    description: str
    color: int
    footer: str | None = None
    timestamp: bool = False

    def render(self) -> discord.Embed:
        embed = discord.Embed(title=self.title, description=self.description, color=self.color)
        if self.footer:
            embed.set_footer(text=self.footer)
        if self.timestamp:
            embed.timestamp = discord.utils.utcnow()
        return embed


@dataclass
class StickyAnchor:
    channel_id: int
    message_id: int
    content: StickyContent
    kind: StickyKind


class StickyChannel(Protocol):
    id: int

    async def send(self, *args: Any, **kwargs: Any) -> Any: ...

    async def fetch_message(self, id: int, /) -> Any: ...


class StickyAnchorController:
    """Keeps one embed per channel at the bottom of the channel.

    Every non-bot message triggers a reposition: the old embed is deleted and a
    fresh copy is sent. Each channel has its own lock; activity that arrives
    while a reposition is running is dropped since the running reposition
    already ends with the anchor at the bottom.
    """

    def __init__(self) -> None:
        self._anchors: dict[int, StickyAnchor] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._holders: dict[int, int] = {}

    def _lock_for(self, channel_id: int) -> asyncio.Lock:
        lock = self._locks.get(channel_id)
        if lock is None:
            lock = self._locks[channel_id] = asyncio.Lock()
        return lock

    @contextlib.asynccontextmanager
    async def _hold(self, channel_id: int) -> AsyncIterator[None]:
        """Hold the channel lock; drop it once idle and the channel has no anchor."""
        lock = self._lock_for(channel_id)
        self._holders[channel_id] = self._holders.get(channel_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[channel_id] -= 1
            if not self._holders[channel_id]:
                del self._holders[channel_id]
                if channel_id not in self._anchors:
                    self._locks.pop(channel_id, None)

    def get(self, channel_id: int) -> StickyAnchor | None:
        return self._anchors.get(channel_id)

    def is_locked(self, channel_id: int) -> bool:
        lock = self._locks.get(channel_id)
        return lock is not None and lock.locked()

    async def _delete_quietly(self, channel: StickyChannel, message_id: int) -> None:
        try:
            message = await channel.fetch_message(message_id)
            await message.delete()
        except discord.HTTPException as e:
            log.debug("Old sticky %s in channel %s already gone: %s", message_id, channel.id, e)

    async def create(self, channel: StickyChannel, content: StickyContent, kind: StickyKind) -> StickyAnchor:
        async with self._hold(channel.id):
            existing = self._anchors.get(channel.id)
            if existing is not None and (kind is StickyKind.TEXT or existing.kind is not kind):
                if existing.kind is StickyKind.TEXT:
                    raise Conflict("This channel already has a sticky message. Use `/remove-sticky` first.")
                raise Conflict("This channel already has an order status. Use `/remove-status` first.")

            message = await channel.send(embed=content.render())
            anchor = StickyAnchor(channel_id=channel.id, message_id=message.id, content=content, kind=kind)
            self._anchors[channel.id] = anchor

            if existing is not None:
                await self._delete_quietly(channel, existing.message_id)
                log.info("Replaced %s sticky in channel %s", kind.value, channel.id)
            else:
                log.info("Created %s sticky in channel %s", kind.value, channel.id)
            return anchor

    async def on_channel_activity(self, channel: StickyChannel) -> bool:
        """Move the channel's sticky to the bottom. Returns False when nothing was done."""
        anchor = self._anchors.get(channel.id)
        if anchor is None:
            return False

        if self.is_locked(channel.id):
            log.debug("Sticky update already in progress in channel %s, skipping", channel.id)
            return False

        async with self._hold(channel.id):
            # A remove may have completed while we were scheduled.
            anchor = self._anchors.get(channel.id)
            if anchor is None:
                return False
            await self._delete_quietly(channel, anchor.message_id)
            message = await channel.send(embed=anchor.content.render())
            anchor.message_id = message.id
            log.debug("Sticky repositioned to bottom of channel %s", channel.id)
            return True

    async def remove(self, channel: StickyChannel, expected_kind: StickyKind) -> StickyAnchor:
        async with self._hold(channel.id):
            anchor = self._anchors.get(channel.id)
            if anchor is None:
                if expected_kind is StickyKind.STATUS:
                    raise NotFound("No order status found in this channel.")
                raise NotFound("No sticky message found in this channel.")
            if anchor.kind is not expected_kind:
                if anchor.kind is StickyKind.TEXT:
                    raise KindMismatch(
                        "This channel has a text sticky, not an order status. Use `/remove-sticky` instead."
                    )
                raise KindMismatch(
                    "This channel has an order status, not a text sticky. Use `/remove-status` instead."
                )

            del self._anchors[channel.id]
            await self._delete_quietly(channel, anchor.message_id)
            log.info("Removed %s sticky from channel %s", anchor.kind.value, channel.id)
            return anchor
