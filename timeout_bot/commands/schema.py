"""Slash commands exposed by the bot and how their options decode into actions."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import hikari

from .actions import (
    Action,
    SetModRole,
    SetTimeoutChannel,
    SetTimeoutRole,
    ToggleTimeout,
)
from .argument_types import CommandArgument


@dataclass(frozen=True)
class CommandDefinition:
    name: str
    description: str
    argument: CommandArgument
    build_action: Callable[[Any], Action]


USER_TO_TIMEOUT = CommandArgument(
    "user", hikari.OptionType.USER, "User to send to timeout."
)
USER_TO_RELEASE = CommandArgument(
    "user", hikari.OptionType.USER, "User to remove from timeout."
)

TIMEOUT_COMMANDS: tuple[CommandDefinition, ...] = (
    CommandDefinition(
        name="timeout",
        description=(
            "Send a user on timeout. "
            "They will only be allowed to post in the timeout channel."
        ),
        argument=USER_TO_TIMEOUT,
        build_action=lambda user: ToggleTimeout(target_id=int(user.id), add=True),
    ),
    CommandDefinition(
        name="untimeout",
        description="Remove a user from timeout.",
        argument=USER_TO_RELEASE,
        build_action=lambda user: ToggleTimeout(target_id=int(user.id), add=False),
    ),
    CommandDefinition(
        name="timeout-mods",
        description="Set the role for moderators, who will be able to use /timeout.",
        argument=CommandArgument(
            "role", hikari.OptionType.ROLE, "Role for moderators."
        ),
        build_action=lambda role: SetModRole(role_id=int(role.id)),
    ),
    CommandDefinition(
        name="timeout-role",
        description="Set which role is the timeout role.",
        argument=CommandArgument("role", hikari.OptionType.ROLE, "Role for timeout."),
        build_action=lambda role: SetTimeoutRole(role_id=int(role.id)),
    ),
    CommandDefinition(
        name="timeout-channel",
        description="Set a timeout channel.",
        argument=CommandArgument(
            "channel", hikari.OptionType.CHANNEL, "Timeout channel."
        ),
        build_action=lambda channel: SetTimeoutChannel(
            channel_id=int(channel.id), channel_type=channel.type
        ),
    ),
)
