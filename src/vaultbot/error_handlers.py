from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .constants import ERROR_MESSAGES
from .errors import BotError
from .utils import error_embed, safe_response

log = logging.getLogger("vaultbot.error_handlers")


class ErrorHandler:
    """Turns app command failures into ephemeral replies."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        original = error.original if isinstance(error, app_commands.CommandInvokeError) else error
        command = interaction.command.name if interaction.command else "unknown"

        if isinstance(original, BotError):
            log.info("/%s rejected for %s: %s", command, interaction.user.id, original.user_message)
            await safe_response(interaction, embed=error_embed(original.user_message), ephemeral=True)
            return

        if isinstance(original, app_commands.MissingPermissions):
            await safe_response(interaction, embed=error_embed(ERROR_MESSAGES["missing_permissions"]), ephemeral=True)
            return

        if isinstance(original, app_commands.BotMissingPermissions):
            await safe_response(interaction, embed=error_embed(ERROR_MESSAGES["bot_missing_permissions"]), ephemeral=True)
            return

        if isinstance(original, app_commands.CommandOnCooldown):
            await safe_response(
                interaction,
                embed=error_embed(f"This command is on cooldown. Try again in {original.retry_after:.1f}s"),
                ephemeral=True,
            )
            return

        log.error("Unexpected error in /%s", command, exc_info=original)
        await safe_response(interaction, embed=error_embed(ERROR_MESSAGES["unexpected"]), ephemeral=True)


async def setup_error_handlers(bot: commands.Bot) -> ErrorHandler:
    """Install the handler on the bot's command tree."""
    handler = ErrorHandler(bot)
    bot.tree.on_error = handler.on_app_command_error  # type: ignore[method-assign]
    return handler
