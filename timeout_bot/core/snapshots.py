"""Read-only views of guild state handed to the router and synchronizer."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import hikari


@dataclass(frozen=True, slots=True)
class MemberSnapshot:
    id: int
    role_ids: frozenset[int] = frozenset()

    def has_role(self, role_id: int | None) -> bool:
        return role_id is not None and role_id in self.role_ids


@dataclass(frozen=True, slots=True)
class ChannelSnapshot:
    id: int
    type: hikari.ChannelType


@dataclass(frozen=True, slots=True)
class GuildSnapshot:
    guild_id: int
    owner_id: int
    members: Mapping[int, MemberSnapshot] = field(default_factory=dict)
    channels: Sequence[ChannelSnapshot] = ()

    def get_member(self, member_id: int) -> MemberSnapshot | None:
        return self.members.get(member_id)


@dataclass(frozen=True, slots=True)
class Actor:
    """The member invoking a command. Only used for authorization."""

    id: int
    role_ids: frozenset[int] = frozenset()
