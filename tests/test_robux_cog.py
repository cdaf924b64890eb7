from vaultbot.cogs.robux import RobuxCog
from vaultbot.testing.fakes import FakeUser


async def test_after_tax(bot, make_interaction):
    cog = RobuxCog(bot)
    interaction = make_interaction(FakeUser())
    await cog.after_tax.callback(cog, interaction, 1000)
    assert interaction.last_reply["content"] == (
        "💵 If you charge **1,000** Robux, you will receive **700** Robux after tax."
    )


async def test_before_tax(bot, make_interaction):
    cog = RobuxCog(bot)
    interaction = make_interaction(FakeUser())
    await cog.before_tax.callback(cog, interaction, 700)
    assert interaction.last_reply["content"] == (
        "💰 To receive **700** Robux after tax, you need to charge **1,000** Robux."
    )
