from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from ..constants import COLORS, ORDER_STATUSES, UNKNOWN_STATUS, OrderStatus
from ..errors import ValidationError
from ..parsing import parse_hex_color
from ..permissions import require_guild_permission
from ..services.sticky import StickyAnchorController, StickyContent, StickyKind

log = logging.getLogger("vaultbot.cogs.sticky")

STATUS_CHOICES = [
    app_commands.Choice(name=s.title, value=s.value) for s in ORDER_STATUSES.values()
]


def status_content(status: OrderStatus, updated_by: discord.abc.User) -> StickyContent:
    return StickyContent(
        title=f"{status.emoji} Order Status",
        description=f"**Current Status:** {status.title}\n\n**Details:** {status.description}",
        color=status.color,
        footer=f"Last updated by {updated_by}",
        timestamp=True,
    )


class StickyCog(commands.Cog):
    """Sticky embeds that follow the conversation to the bottom of a channel."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.controller: StickyAnchorController = bot.sticky  # type: ignore[attr-defined]

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or message.guild is None:
            return
        try:
            await self.controller.on_channel_activity(message.channel)
        except discord.HTTPException:
            log.exception("Error handling sticky message in channel %s", message.channel.id)

    def _channel(self, interaction: discord.Interaction) -> discord.abc.Messageable:
        channel = interaction.channel
        if channel is None or not hasattr(channel, "send"):
            raise ValidationError("Could not access this channel.")
        return channel  # type: ignore[return-value]

    @app_commands.command(name="set-order-status", description="Create or update an order status message.")
    @app_commands.default_permissions(manage_messages=True)
    @app_commands.describe(status="Order status")
    @app_commands.choices(status=STATUS_CHOICES)
    async def set_order_status(self, interaction: discord.Interaction, status: app_commands.Choice[str]) -> None:
        require_guild_permission(interaction, "manage_messages", "set order statuses")
        channel = self._channel(interaction)
        details = ORDER_STATUSES.get(status.value, UNKNOWN_STATUS)

        await self.controller.create(channel, status_content(details, interaction.user), StickyKind.STATUS)
        await interaction.response.send_message(
            "✅ Order status set! This message will stay at the bottom.", ephemeral=True
        )

    @app_commands.command(name="stick-message", description="Stick an embed to the bottom of this channel.")
    @app_commands.default_permissions(manage_messages=True)
    @app_commands.describe(
        title="Embed title",
        description="Embed text (Discord markdown supported)",
        color="Hex color, e.g. #5865F2",
    )
    async def stick_message(
        self,
        interaction: discord.Interaction,
        title: str,
        description: str,
        color: str | None = None,
    ) -> None:
        require_guild_permission(interaction, "manage_messages", "stick messages")
        channel = self._channel(interaction)
        content = StickyContent(
            title=title,
            description=description,
            color=parse_hex_color(color, COLORS["default"]),
        )

        await self.controller.create(channel, content, StickyKind.TEXT)
        await interaction.response.send_message(
            "✅ Message stickied! It will stay at the bottom. "
            "Use Discord markdown: **bold** *italic* __underline__ ~~strikethrough~~",
            ephemeral=True,
        )

    @app_commands.command(name="remove-sticky", description="Remove the sticky message from this channel.")
    @app_commands.default_permissions(manage_messages=True)
    async def remove_sticky(self, interaction: discord.Interaction) -> None:
        require_guild_permission(interaction, "manage_messages", "remove sticky messages")
        await self.controller.remove(self._channel(interaction), StickyKind.TEXT)
        await interaction.response.send_message("✅ Sticky message removed!", ephemeral=True)

    @app_commands.command(name="remove-status", description="Remove the order status message from this channel.")
    @app_commands.default_permissions(manage_messages=True)
    async def remove_status(self, interaction: discord.Interaction) -> None:
        require_guild_permission(interaction, "manage_messages", "remove order statuses")
        await self.controller.remove(self._channel(interaction), StickyKind.STATUS)
        await interaction.response.send_message("✅ Order status removed!", ephemeral=True)
