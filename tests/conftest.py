"""Pytest configuration and shared fixtures."""

import logging
from unittest.mock import AsyncMock, MagicMock

import hikari
import pytest
from helpers import (
    ANNOUNCEMENTS_CHANNEL_ID,
    CATEGORY_ID,
    GENERAL_CHANNEL_ID,
    GUILD_ID,
    MEMBER_ID,
    MOD_ID,
    MOD_ROLE_ID,
    OTHER_ROLE_ID,
    OWNER_ID,
    TARGET_ID,
    TIMEOUT_CHANNEL_ID,
    VOICE_CHANNEL_ID,
    FakeGateway,
)

from timeout_bot.commands.router import CommandRouter
from timeout_bot.core.snapshots import (
    Actor,
    ChannelSnapshot,
    GuildSnapshot,
    MemberSnapshot,
)
from timeout_bot.storage import ConfigStore

# Disable logging during tests
logging.disable(logging.CRITICAL)


@pytest.fixture
def guild_snapshot():
    """Guild with an owner, a moderator, two regular members and mixed channels."""
    members = {
        OWNER_ID: MemberSnapshot(id=OWNER_ID),
        MOD_ID: MemberSnapshot(id=MOD_ID, role_ids=frozenset({MOD_ROLE_ID})),
        MEMBER_ID: MemberSnapshot(id=MEMBER_ID, role_ids=frozenset({OTHER_ROLE_ID})),
        TARGET_ID: MemberSnapshot(id=TARGET_ID),
    }
    types = hikari.ChannelType
    channels = (
        ChannelSnapshot(id=GENERAL_CHANNEL_ID, type=types.GUILD_TEXT),
        ChannelSnapshot(id=TIMEOUT_CHANNEL_ID, type=types.GUILD_TEXT),
        ChannelSnapshot(id=ANNOUNCEMENTS_CHANNEL_ID, type=types.GUILD_NEWS),
        ChannelSnapshot(id=VOICE_CHANNEL_ID, type=types.GUILD_VOICE),
        ChannelSnapshot(id=CATEGORY_ID, type=types.GUILD_CATEGORY),
    )
    return GuildSnapshot(
        guild_id=GUILD_ID, owner_id=OWNER_ID, members=members, channels=channels
    )


@pytest.fixture
def fake_gateway(guild_snapshot):
    return FakeGateway(guild_snapshot)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.yml"


@pytest.fixture
def store(config_path):
    """Freshly created store with the default configuration."""
    config_store = ConfigStore(config_path)
    config_store.load()
    return config_store


@pytest.fixture
def router(store, fake_gateway):
    return CommandRouter(store, fake_gateway)


@pytest.fixture
def owner():
    return Actor(id=OWNER_ID)


@pytest.fixture
def moderator():
    return Actor(id=MOD_ID, role_ids=frozenset({MOD_ROLE_ID}))


@pytest.fixture
def regular_member():
    return Actor(id=MEMBER_ID, role_ids=frozenset({OTHER_ROLE_ID}))


@pytest.fixture
def interaction():
    """Opaque interaction handle as passed through by the router."""
    return MagicMock(name="interaction")


@pytest.fixture
def mock_context():
    """Mock lightbulb command context."""
    ctx = MagicMock()
    ctx.guild_id = hikari.Snowflake(GUILD_ID)
    ctx.member = MagicMock()
    ctx.member.id = hikari.Snowflake(MOD_ID)
    ctx.member.role_ids = [
        hikari.Snowflake(MOD_ROLE_ID),
        hikari.Snowflake(OTHER_ROLE_ID),
    ]
    ctx.respond = AsyncMock()
    ctx.defer = AsyncMock()
    return ctx
