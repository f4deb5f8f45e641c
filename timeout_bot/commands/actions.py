"""The closed set of actions a slash command decodes into."""

import enum
from dataclasses import dataclass
from typing import ClassVar

import hikari


class ActionKind(enum.Enum):
    TOGGLE_TIMEOUT = "toggle_timeout"
    SET_MOD_ROLE = "set_mod_role"
    SET_TIMEOUT_ROLE = "set_timeout_role"
    SET_TIMEOUT_CHANNEL = "set_timeout_channel"


# Actions that change who moderates or what timeout means; owner only
CONFIG_ACTIONS = frozenset(
    {
        ActionKind.SET_MOD_ROLE,
        ActionKind.SET_TIMEOUT_ROLE,
        ActionKind.SET_TIMEOUT_CHANNEL,
    }
)


@dataclass(frozen=True, slots=True)
class ToggleTimeout:
    kind: ClassVar[ActionKind] = ActionKind.TOGGLE_TIMEOUT

    target_id: int
    add: bool


@dataclass(frozen=True, slots=True)
class SetModRole:
    kind: ClassVar[ActionKind] = ActionKind.SET_MOD_ROLE

    role_id: int


@dataclass(frozen=True, slots=True)
class SetTimeoutRole:
    kind: ClassVar[ActionKind] = ActionKind.SET_TIMEOUT_ROLE

    role_id: int


@dataclass(frozen=True, slots=True)
class SetTimeoutChannel:
    kind: ClassVar[ActionKind] = ActionKind.SET_TIMEOUT_CHANNEL

    channel_id: int
    channel_type: hikari.ChannelType


Action = ToggleTimeout | SetModRole | SetTimeoutRole | SetTimeoutChannel
