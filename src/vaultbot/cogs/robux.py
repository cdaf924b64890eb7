from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from ..parsing import robux_after_tax, robux_before_tax


class RobuxCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(
        name="robux-before-tax",
        description="Calculate how much to charge so the receiver gets X robux after tax.",
    )
    @app_commands.describe(amount="The amount of robux wanted after tax")
    async def before_tax(self, interaction: discord.Interaction, amount: app_commands.Range[int, 1]) -> None:
        charge = robux_before_tax(amount)
        await interaction.response.send_message(
            f"💰 To receive **{amount:,}** Robux after tax, you need to charge **{charge:,}** Robux."
        )

    @app_commands.command(name="robux-after-tax", description="Calculate how much robux you will receive after tax.")
    @app_commands.describe(amount="The amount of robux before tax")
    async def after_tax(self, interaction: discord.Interaction, amount: app_commands.Range[int, 1]) -> None:
        received = robux_after_tax(amount)
        await interaction.response.send_message(
            f"💵 If you charge **{amount:,}** Robux, you will receive **{received:,}** Robux after tax."
        )
