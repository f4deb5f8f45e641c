"""Command system for the timeout bot."""

from .actions import (
    Action,
    ActionKind,
    SetModRole,
    SetTimeoutChannel,
    SetTimeoutRole,
    ToggleTimeout,
)
from .argument_types import CommandArgument
from .schema import TIMEOUT_COMMANDS, CommandDefinition

__all__ = [
    "Action",
    "ActionKind",
    "CommandArgument",
    "CommandDefinition",
    "SetModRole",
    "SetTimeoutChannel",
    "SetTimeoutRole",
    "TIMEOUT_COMMANDS",
    "ToggleTimeout",
]
