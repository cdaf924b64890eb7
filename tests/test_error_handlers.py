from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from discord import app_commands

from vaultbot.error_handlers import setup_error_handlers
from vaultbot.errors import Conflict, NotFound
from vaultbot.testing.fakes import FakeInteraction, FakeUser


@pytest.fixture
async def handler():
    bot = SimpleNamespace(tree=SimpleNamespace(on_error=None))
    handler = await setup_error_handlers(bot)
    assert bot.tree.on_error == handler.on_app_command_error
    return handler


def invoke_error(exc: Exception) -> app_commands.CommandInvokeError:
    command = MagicMock()
    command.name = "ban"
    return app_commands.CommandInvokeError(command, exc)


async def test_bot_error_is_shown_ephemerally(handler):
    interaction = FakeInteraction(user=FakeUser())
    await handler.on_app_command_error(interaction, invoke_error(NotFound("Member is not muted.")))

    reply = interaction.last_reply
    assert reply["ephemeral"] is True
    assert reply["embed"].description == "❌ Member is not muted."


async def test_default_message_used_when_none_given(handler):
    interaction = FakeInteraction(user=FakeUser())
    await handler.on_app_command_error(interaction, invoke_error(Conflict()))
    assert interaction.last_reply["embed"].description == f"❌ {Conflict.default_message}"


async def test_missing_permissions(handler):
    interaction = FakeInteraction(user=FakeUser())
    await handler.on_app_command_error(interaction, app_commands.MissingPermissions(["ban_members"]))
    assert "permission" in interaction.last_reply["embed"].description


async def test_unexpected_error_is_logged_and_hidden(handler, caplog):
    interaction = FakeInteraction(user=FakeUser())
    await handler.on_app_command_error(interaction, invoke_error(KeyError("secret")))

    assert interaction.last_reply["embed"].description == "❌ An error occurred."
    assert "secret" not in interaction.last_reply["embed"].description
    assert "Unexpected error in /test" in caplog.text


async def test_falls_back_to_followup(handler):
    interaction = FakeInteraction(user=FakeUser())
    await interaction.response.defer()

    await handler.on_app_command_error(interaction, invoke_error(NotFound("gone")))

    assert interaction.response.messages == []
    assert interaction.followup.messages[-1]["embed"].description == "❌ gone"
