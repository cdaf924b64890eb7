from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from ..constants import COLORS, MAX_FIELD_VALUE, VOUCHES_PAGE_SIZE
from ..services.vouch_ledger import VouchLedger
from ..utils import truncate


def stars(rating: int) -> str:
    return "⭐" * rating + "☆" * (5 - rating)


class VouchesCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.ledger: VouchLedger = bot.vouch_ledger  # type: ignore[attr-defined]

    @app_commands.command(name="vouch", description="Vouch for a user with a 1-5 star rating.")
    @app_commands.describe(user="The user to vouch for", rating="Rating from 1 to 5", comment="Your experience")
    async def vouch(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        rating: app_commands.Range[int, 1, 5],
        comment: str,
    ) -> None:
        result = self.ledger.upsert(
            interaction.user.id,
            str(interaction.user),
            user.id,
            rating,
            comment,
            target_is_bot=user.bot,
        )
        e = discord.Embed(
            title="✅ Vouch Added" if result == "created" else "🔄 Vouch Updated",
            color=COLORS["vouch"],
            timestamp=discord.utils.utcnow(),
        )
        e.add_field(name="👤 User", value=user.mention, inline=True)
        e.add_field(name="⭐ Rating", value=stars(rating), inline=True)
        e.add_field(name="💬 Comment", value=truncate(comment, MAX_FIELD_VALUE), inline=False)
        e.set_footer(text=f"Vouched by {interaction.user}")
        await interaction.response.send_message(embed=e)

    @app_commands.command(name="vouches", description="Show the vouches a user has received.")
    @app_commands.describe(user="The user to look up (defaults to you)")
    async def vouches(self, interaction: discord.Interaction, user: discord.User | None = None) -> None:
        target = user or interaction.user
        entries = self.ledger.list(target.id)
        if not entries:
            await interaction.response.send_message(f"📭 **{target}** has no vouches yet.", ephemeral=True)
            return

        average = self.ledger.average_rating(target.id)
        e = discord.Embed(
            title=f"Vouches for {target}",
            description=f"**Average:** {average:.1f}/5 {stars(round(average))}\n**Total:** {len(entries)}",
            color=COLORS["vouch"],
        )
        e.set_thumbnail(url=target.display_avatar.url)
        for v in entries[:VOUCHES_PAGE_SIZE]:
            e.add_field(
                name=f"{stars(v.rating)} from {v.voucher_tag}",
                value=truncate(f"{v.comment}\n{discord.utils.format_dt(v.timestamp, 'R')}", MAX_FIELD_VALUE),
                inline=False,
            )
        if len(entries) > VOUCHES_PAGE_SIZE:
            e.set_footer(text=f"Showing the {VOUCHES_PAGE_SIZE} most recent of {len(entries)} vouches")
        await interaction.response.send_message(embed=e)

    @app_commands.command(name="remove-vouch", description="Remove your vouch for a user.")
    @app_commands.describe(user="The user you vouched for")
    async def remove_vouch(self, interaction: discord.Interaction, user: discord.User) -> None:
        self.ledger.remove(interaction.user.id, user.id)
        await interaction.response.send_message(f"✅ Your vouch for **{user}** was removed.", ephemeral=True)
