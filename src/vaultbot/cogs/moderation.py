from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime, timedelta
from typing import Any

import discord
from discord import app_commands
from discord.ext import commands

from ..constants import COLORS, DEFAULT_REASON, MAX_TEMPBAN_MS, MAX_TIMEOUT_MS, PERMANENT_DURATIONS
from ..errors import NotActionable, NotFound, PersistenceError, TransientCollaboratorFailure, ValidationError
from ..parsing import parse_duration
from ..permissions import ensure_actionable, require_guild, require_guild_permission, resolve_member
from ..services.tempbans import TempBan, TempBanSchedule
from ..utils import moderation_embed

log = logging.getLogger("vaultbot.cogs.moderation")


async def _moderate(call: Awaitable[Any], action: str) -> None:
    try:
        await call
    except discord.Forbidden as e:
        raise NotActionable(f"I cannot {action} this member. They may have a higher role than me.") from e
    except discord.HTTPException as e:
        raise TransientCollaboratorFailure(f"Failed to {action} member.") from e


def _ban_expiry(duration: str) -> datetime:
    """Resolve a timed ban duration to its unban time, before anything is changed."""
    duration_ms = parse_duration(duration)
    if not duration_ms:
        raise ValidationError("Invalid duration format. Use: 1h, 1d, 7d, or permanent.")
    if duration_ms > MAX_TEMPBAN_MS:
        raise ValidationError("Invalid duration: timed bans cannot exceed 3650 days. Use permanent instead.")
    try:
        return discord.utils.utcnow() + timedelta(milliseconds=duration_ms)
    except (OverflowError, ValueError) as e:
        raise ValidationError("Invalid duration: that date is out of range.") from e


class ModerationCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.schedule: TempBanSchedule = bot.temp_bans  # type: ignore[attr-defined]
        self.sweep_seconds: int = bot.settings.tempban_sweep_seconds  # type: ignore[attr-defined]
        self._task: asyncio.Task | None = None

    async def cog_load(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._sweep_loop(), name="vaultbot-tempban-sweep")

    async def cog_unload(self) -> None:
        if self._task:
            self._task.cancel()
            self._task = None

    async def _sweep_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.sweep_seconds)
                await self.schedule.sweep(self.lift_ban)
            except asyncio.CancelledError:
                raise
            except Exception:
                log.exception("Temp ban sweep iteration failed")

    async def lift_ban(self, ban: TempBan) -> None:
        guild = self.bot.get_guild(ban.guild_id)
        if guild is None:
            raise TransientCollaboratorFailure(f"Guild {ban.guild_id} is unavailable")
        await guild.unban(discord.Object(id=ban.user_id), reason=f"Temporary ban expired | {ban.reason}")

    @app_commands.command(name="ban", description="Ban a member from the server.")
    @app_commands.default_permissions(ban_members=True)
    @app_commands.describe(
        target="The member to ban",
        duration="Ban duration (e.g., 1d, 7d, 30d, permanent)",
        reason="Reason for the ban",
    )
    async def ban(
        self,
        interaction: discord.Interaction,
        target: discord.User,
        duration: str,
        reason: str | None = None,
    ) -> None:
        require_guild_permission(interaction, "ban_members", "ban members")
        guild = require_guild(interaction)
        member = resolve_member(guild, target)

        duration = duration.strip()
        unban_at: datetime | None = None
        if duration.lower() not in PERMANENT_DURATIONS:
            unban_at = _ban_expiry(duration)

        ensure_actionable(guild, member, "ban")
        reason = reason or DEFAULT_REASON
        await _moderate(
            member.ban(reason=f"{reason} | Banned by {interaction.user}", delete_message_seconds=0),
            "ban",
        )

        shown_duration = "Permanent"
        if unban_at is not None:
            try:
                await self.schedule.schedule(member.id, guild.id, unban_at, reason)
            except PersistenceError as e:
                raise PersistenceError(
                    f"{target} was banned, but the automatic unban could not be saved. "
                    "Use `/unban` when the ban should end."
                ) from e
            shown_duration = f"{duration} (until {discord.utils.format_dt(unban_at, 'f')})"

        log.info("%s banned %s in guild %s for %s", interaction.user.id, member.id, guild.id, duration)
        embed = moderation_embed("🔨 Member Banned", COLORS["ban"], target, interaction.user, reason, shown_duration)
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="unban", description="Unban a user from the server.")
    @app_commands.default_permissions(ban_members=True)
    @app_commands.rename(user_id="user-id")
    @app_commands.describe(user_id="The ID of the user to unban", reason="Reason for the unban")
    async def unban(self, interaction: discord.Interaction, user_id: str, reason: str | None = None) -> None:
        require_guild_permission(interaction, "ban_members", "unban members")
        guild = require_guild(interaction)

        raw = user_id.strip()
        if not raw.isdigit():
            raise ValidationError("Invalid user ID. Provide the numeric ID of the banned user.")
        user = discord.Object(id=int(raw))

        reason = reason or DEFAULT_REASON
        try:
            await guild.unban(user, reason=f"{reason} | Unbanned by {interaction.user}")
        except discord.NotFound as e:
            await self.schedule.cancel(user.id, guild.id)
            raise NotFound("This user is not banned.") from e
        except discord.Forbidden as e:
            raise NotActionable("I don't have permission to unban members.") from e
        except discord.HTTPException as e:
            raise TransientCollaboratorFailure("Failed to unban user.") from e

        await self.schedule.cancel(user.id, guild.id)
        log.info("%s unbanned %s in guild %s", interaction.user.id, user.id, guild.id)
        embed = moderation_embed("🔓 User Unbanned", COLORS["unban"], user, interaction.user, reason)
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="kick", description="Kick a member from the server.")
    @app_commands.default_permissions(kick_members=True)
    @app_commands.describe(target="The member to kick", reason="Reason for the kick")
    async def kick(self, interaction: discord.Interaction, target: discord.User, reason: str | None = None) -> None:
        require_guild_permission(interaction, "kick_members", "kick members")
        guild = require_guild(interaction)
        member = resolve_member(guild, target)
        ensure_actionable(guild, member, "kick")

        reason = reason or DEFAULT_REASON
        await _moderate(member.kick(reason=f"{reason} | Kicked by {interaction.user}"), "kick")

        log.info("%s kicked %s in guild %s", interaction.user.id, member.id, guild.id)
        embed = moderation_embed("👢 Member Kicked", COLORS["kick"], target, interaction.user, reason)
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="mute", description="Timeout a member (mute them).")
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.describe(
        target="The member to mute",
        duration="Mute duration (e.g., 5m, 1h, 1d)",
        reason="Reason for the mute",
    )
    async def mute(
        self,
        interaction: discord.Interaction,
        target: discord.User,
        duration: str,
        reason: str | None = None,
    ) -> None:
        require_guild_permission(interaction, "moderate_members", "timeout members")
        guild = require_guild(interaction)
        member = resolve_member(guild, target)

        duration = duration.strip()
        duration_ms = parse_duration(duration)
        if not duration_ms:
            raise ValidationError("Invalid duration format. Use: 5m, 1h, 1d, etc.")
        if duration_ms > MAX_TIMEOUT_MS:
            raise ValidationError("Duration cannot exceed 28 days.")

        ensure_actionable(guild, member, "timeout")
        reason = reason or DEFAULT_REASON
        await _moderate(
            member.timeout(timedelta(milliseconds=duration_ms), reason=f"{reason} | Muted by {interaction.user}"),
            "timeout",
        )

        log.info("%s muted %s in guild %s for %s", interaction.user.id, member.id, guild.id, duration)
        embed = moderation_embed("🔇 Member Muted", COLORS["mute"], target, interaction.user, reason, duration)
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="unmute", description="Remove a member's timeout.")
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.describe(target="The member to unmute", reason="Reason for the unmute")
    async def unmute(self, interaction: discord.Interaction, target: discord.User, reason: str | None = None) -> None:
        require_guild_permission(interaction, "moderate_members", "remove timeouts")
        guild = require_guild(interaction)
        member = resolve_member(guild, target)
        if not member.is_timed_out():
            raise NotFound("This member is not muted.")
        ensure_actionable(guild, member, "unmute")

        reason = reason or DEFAULT_REASON
        await _moderate(member.timeout(None, reason=f"{reason} | Unmuted by {interaction.user}"), "unmute")

        log.info("%s unmuted %s in guild %s", interaction.user.id, member.id, guild.id)
        embed = moderation_embed("🔊 Member Unmuted", COLORS["unmute"], target, interaction.user, reason)
        await interaction.response.send_message(embed=embed)
