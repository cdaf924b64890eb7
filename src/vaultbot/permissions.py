from __future__ import annotations

import logging

import discord

from .constants import ERROR_MESSAGES
from .errors import NotActionable, PermissionDenied, ValidationError

log = logging.getLogger("vaultbot.permissions")


def require_guild(interaction: discord.Interaction) -> discord.Guild:
    if interaction.guild is None:
        raise ValidationError(ERROR_MESSAGES["guild_only"])
    return interaction.guild


def require_guild_permission(interaction: discord.Interaction, permission: str, action: str | None = None) -> None:
    """Raise :class:`PermissionDenied` unless the invoking member holds ``permission``."""
    require_guild(interaction)
    perms = getattr(interaction.user, "guild_permissions", None)
    if perms is not None and (perms.administrator or getattr(perms, permission, False)):
        return
    log.info("Denied %s to %s: missing %s", action or permission, interaction.user.id, permission)
    if action:
        raise PermissionDenied(f"You do not have permission to {action}.", [permission])
    raise PermissionDenied(missing_permissions=[permission])


def resolve_member(guild: discord.Guild, user: discord.abc.Snowflake) -> discord.Member:
    member = guild.get_member(user.id)
    if member is None:
        raise NotActionable(ERROR_MESSAGES["member_not_found"])
    return member


def ensure_actionable(guild: discord.Guild, member: discord.Member, action: str) -> None:
    """The bot can only act on members ranked strictly below its own top role."""
    me = guild.me
    if member.id == guild.owner_id or me is None or member.top_role >= me.top_role:
        raise NotActionable(f"I cannot {action} this member. They may have a higher role than me.")
