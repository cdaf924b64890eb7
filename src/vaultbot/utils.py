from __future__ import annotations

import logging
from typing import Any

import discord

from .constants import COLORS, MAX_EMBED_DESCRIPTION, MAX_EMBED_TITLE, MAX_FIELD_VALUE

log = logging.getLogger("vaultbot.utils")


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def safe_embed(title: str, description: str, color: int = COLORS["default"]) -> discord.Embed:
    """Create an embed with safe length limits."""
    return discord.Embed(
        title=truncate(title, MAX_EMBED_TITLE),
        description=truncate(description, MAX_EMBED_DESCRIPTION),
        color=color,
    )


def error_embed(message: str) -> discord.Embed:
    return safe_embed("Error", f"❌ {message}", COLORS["error"])


def moderation_embed(
    title: str,
    color: int,
    target: discord.abc.User | discord.Object,
    moderator: discord.abc.User,
    reason: str,
    duration: str | None = None,
) -> discord.Embed:
    """Embed announcing a moderation action."""
    e = discord.Embed(title=title, color=color, timestamp=discord.utils.utcnow())
    if isinstance(target, discord.Object):
        e.add_field(name="👤 Target", value=f"<@{target.id}> ({target.id})", inline=True)
    else:
        e.set_thumbnail(url=target.display_avatar.url)
        e.add_field(name="👤 Target", value=f"{target} ({target.id})", inline=True)
    if duration is not None:
        e.add_field(name="⏰ Duration", value=duration, inline=True)
    e.add_field(name="👮 Moderator", value=moderator.mention, inline=True)
    e.add_field(name="📝 Reason", value=truncate(reason, MAX_FIELD_VALUE), inline=False)
    return e


async def safe_response(
    interaction: discord.Interaction,
    content: str | None = None,
    embed: discord.Embed | None = None,
    ephemeral: bool = False,
    **kwargs: Any,
) -> bool:
    """Respond to an interaction, falling back to a followup once it was answered."""
    if embed is not None:
        kwargs["embed"] = embed
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content=content, ephemeral=ephemeral, **kwargs)
        else:
            await interaction.response.send_message(content=content, ephemeral=ephemeral, **kwargs)
        return True
    except discord.HTTPException as e:
        log.error("Failed to send response: %s", e)
        return False
