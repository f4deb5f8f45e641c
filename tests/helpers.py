"""Shared test doubles and identifiers."""

import asyncio

from timeout_bot.core.gateway import Gateway
from timeout_bot.core.snapshots import GuildSnapshot, MemberSnapshot
from timeout_bot.errors import ApiError, TargetNotFound


GUILD_ID = 123456789
OWNER_ID = 987654321
MOD_ID = 111111111
MEMBER_ID = 666666666
TARGET_ID = 777777777
MOD_ROLE_ID = 222222222
TIMEOUT_ROLE_ID = 333333333
OTHER_ROLE_ID = 888888888

GENERAL_CHANNEL_ID = 444444444
TIMEOUT_CHANNEL_ID = 444444445
ANNOUNCEMENTS_CHANNEL_ID = 444444446
VOICE_CHANNEL_ID = 444444447
CATEGORY_ID = 444444448


class FakeGateway(Gateway):
    """In-memory gateway recording every call the core makes."""

    def __init__(self, guild: GuildSnapshot | None = None) -> None:
        self.guilds: dict[int, GuildSnapshot] = {guild.guild_id: guild} if guild else {}
        self.overwrites: dict[tuple[int, int], tuple[int, int]] = {}
        self.overwrite_calls: list[tuple[int, int, int, int]] = []
        self.granted: list[tuple[int, int, int]] = []
        self.revoked: list[tuple[int, int, int]] = []
        self.responses: list[tuple[str, object, str]] = []
        self.registered: list[tuple[object, object, int | None]] = []
        self.failing_channels: set[int] = set()
        self.fail_role_changes = False
        self.fail_responses = False
        self.overwrite_gate: asyncio.Event | None = None

    async def get_guild_snapshot(self, guild_id: int) -> GuildSnapshot:
        try:
            return self.guilds[guild_id]
        except KeyError:
            raise TargetNotFound(f"Guild {guild_id} is not available") from None

    async def set_channel_role_overwrite(
        self, channel_id: int, role_id: int, allow: int, deny: int
    ) -> None:
        if self.overwrite_gate is not None:
            await self.overwrite_gate.wait()
        self.overwrite_calls.append((channel_id, role_id, allow, deny))
        if channel_id in self.failing_channels:
            raise ApiError(f"Missing access to channel {channel_id}")
        self.overwrites[(channel_id, role_id)] = (allow, deny)

    async def grant_role(self, guild_id: int, member_id: int, role_id: int) -> None:
        if self.fail_role_changes:
            raise ApiError("Missing permissions")
        self.granted.append((guild_id, member_id, role_id))
        self._set_roles(guild_id, member_id, lambda roles: roles | {role_id})

    async def revoke_role(self, guild_id: int, member_id: int, role_id: int) -> None:
        if self.fail_role_changes:
            raise ApiError("Missing permissions")
        self.revoked.append((guild_id, member_id, role_id))
        self._set_roles(guild_id, member_id, lambda roles: roles - {role_id})

    async def send_response(self, interaction: object, text: str) -> None:
        if self.fail_responses:
            raise ApiError("Unknown interaction")
        self.responses.append(("response", interaction, text))

    async def send_deferred_ack(self, interaction: object, placeholder: str) -> None:
        self.responses.append(("deferred", interaction, placeholder))

    async def send_followup(self, interaction: object, text: str) -> None:
        self.responses.append(("followup", interaction, text))

    async def register_command_schema(self, schema, handler, guild_id=None) -> None:
        self.registered.append((schema, handler, guild_id))

    def _set_roles(self, guild_id: int, member_id: int, change) -> None:
        members = self.guilds[guild_id].members
        member = members[member_id]
        members[member_id] = MemberSnapshot(
            id=member.id, role_ids=frozenset(change(member.role_ids))
        )

    def texts(self) -> list[str]:
        return [text for _, _, text in self.responses]
