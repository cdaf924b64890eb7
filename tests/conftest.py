"""
Shared fixtures.

Async tests run under pytest-asyncio (auto mode, see pyproject.toml).
Discord objects are replaced by the fakes in ``vaultbot.testing.fakes``.
"""

from __future__ import annotations

from types import SimpleNamespace

import discord
import pytest

from vaultbot.services.sticky import StickyAnchorController
from vaultbot.services.tempbans import TempBanSchedule
from vaultbot.services.vouch_ledger import VouchLedger
from vaultbot.testing.fakes import FakeGuild, FakeInteraction, FakeMember, FakeTextChannel


@pytest.fixture
def guild() -> FakeGuild:
    return FakeGuild(id=4242)


@pytest.fixture
def channel(guild: FakeGuild) -> FakeTextChannel:
    return FakeTextChannel(id=777, guild=guild)


@pytest.fixture
def moderator(guild: FakeGuild) -> FakeMember:
    perms = discord.Permissions(
        ban_members=True, kick_members=True, moderate_members=True, manage_messages=True
    )
    return guild.add_member(FakeMember(id=1001, name="mod", permissions=perms))


@pytest.fixture
def member(guild: FakeGuild) -> FakeMember:
    return guild.add_member(FakeMember(id=2002, name="member"))


@pytest.fixture
def ledger(tmp_path) -> VouchLedger:
    return VouchLedger(str(tmp_path / "vouches.json"))


@pytest.fixture
def bot(guild: FakeGuild, ledger: VouchLedger) -> SimpleNamespace:
    return SimpleNamespace(
        settings=SimpleNamespace(tempban_sweep_seconds=60),
        sticky=StickyAnchorController(),
        temp_bans=TempBanSchedule(),
        vouch_ledger=ledger,
        get_guild=lambda gid: guild if gid == guild.id else None,
    )


@pytest.fixture
def make_interaction(guild: FakeGuild, channel: FakeTextChannel):
    def _make(user, command_name: str = "test") -> FakeInteraction:
        return FakeInteraction(user=user, guild=guild, channel=channel, command_name=command_name)

    return _make
