from __future__ import annotations

import asyncio
import logging

import discord
from discord.ext import commands

from .config import Settings
from .database import initialize_database
from .error_handlers import setup_error_handlers
from .services.sticky import StickyAnchorController
from .services.tempban_store import TempBanStore
from .services.tempbans import TempBanSchedule
from .services.vouch_ledger import VouchLedger

log = logging.getLogger("vaultbot.bot")


class _CommandSyncManager:
    def __init__(self, bot: "VaultBot") -> None:
        self.bot = bot
        self._lock = asyncio.Lock()

    async def sync_startup(self) -> None:
        if self.bot.settings.sync_guild_id:
            await self.sync_guild(self.bot.settings.sync_guild_id)
            if self.bot.settings.clear_global_commands:
                await self.clear_global()
        else:
            await self.sync_global()

    async def sync_global(self) -> None:
        async with self._lock:
            synced = await self.bot.tree.sync()
            log.info("Commands synced globally: %d", len(synced))
            for c in synced:
                log.info(" - /%s", c.name)

    async def sync_guild(self, guild_id: int) -> None:
        async with self._lock:
            guild = discord.Object(id=guild_id)
            self.bot.tree.copy_global_to(guild=guild)
            synced = await self.bot.tree.sync(guild=guild)
            log.info("Commands synced to guild %d: %d", guild_id, len(synced))
            for c in synced:
                log.info(" - /%s", c.name)

    async def clear_global(self) -> None:
        async with self._lock:
            self.bot.tree.clear_commands(guild=None)
            await self.bot.tree.sync()
            log.info("Cleared global application commands (may take up to an hour to disappear)")


class VaultBot(commands.Bot):
    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        intents.members = True
        intents.message_content = bool(settings.message_content_intent)

        log.info("INTENTS: guilds=%s members=%s message_content=%s", intents.guilds, intents.members, intents.message_content)

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            allowed_mentions=discord.AllowedMentions(everyone=False, roles=False, users=True),
            help_command=None,
        )

        self.settings = settings

        # State owned by the bot and handed to cogs in their constructors
        self.sticky = StickyAnchorController()
        self.vouch_ledger = VouchLedger(settings.vouches_path)
        self.tempban_store = TempBanStore(settings.sqlite_path) if settings.persist_temp_bans else None
        self.temp_bans = TempBanSchedule(self.tempban_store)

        self._sync_mgr = _CommandSyncManager(self)

    async def setup_hook(self) -> None:
        self.vouch_ledger.load()
        if self.tempban_store is not None:
            await initialize_database(self.settings.sqlite_path, [self.tempban_store])
            await self.temp_bans.load()

        await setup_error_handlers(self)

        loaded: list[str] = []
        failed: list[str] = []

        async def _load_cog(import_path: str, class_name: str) -> None:
            try:
                mod = __import__(import_path, fromlist=[class_name])
                cls = getattr(mod, class_name)
                await self.add_cog(cls(self))
                log.info("Loaded cog: %s.%s", import_path, class_name)
                loaded.append(f"{import_path}.{class_name}")
            except Exception as e:
                log.exception("Failed to load cog: %s.%s", import_path, class_name)
                failed.append(f"{import_path}.{class_name} ({type(e).__name__})")

        await _load_cog("vaultbot.cogs.robux", "RobuxCog")
        await _load_cog("vaultbot.cogs.moderation", "ModerationCog")
        await _load_cog("vaultbot.cogs.sticky", "StickyCog")
        await _load_cog("vaultbot.cogs.vouches", "VouchesCog")

        log.info("Startup cog load summary: loaded=%d failed=%d", len(loaded), len(failed))
        for name in failed:
            log.warning("Startup cog failed: %s", name)

        await self._sync_mgr.sync_startup()
        log.info("Command sync complete")

    async def on_ready(self) -> None:
        log.info("Bot is ready! Logged in as %s", self.user)

    async def on_error(self, event_method: str, /, *args: object, **kwargs: object) -> None:
        log.exception("Unhandled error in %s", event_method)
