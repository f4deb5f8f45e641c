from __future__ import annotations

import abc
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import hikari
import lightbulb

from ..commands.registry import CommandHandler, CommandRegistry
from ..errors import ApiError, TargetNotFound
from .snapshots import ChannelSnapshot, GuildSnapshot, MemberSnapshot

if TYPE_CHECKING:
    from ..commands.schema import CommandDefinition

logger = logging.getLogger(__name__)

OVERWRITE_REASON = "Timeout channel synchronization"


class Gateway(abc.ABC):
    """Operations the bot needs from the chat platform.

    ``interaction`` arguments are opaque handles for the invocation being
    answered. Every API failure is raised as :class:`ApiError`.
    """

    @abc.abstractmethod
    async def get_guild_snapshot(self, guild_id: int) -> GuildSnapshot:
        """Return the current view of a guild, or raise :class:`TargetNotFound`."""

    @abc.abstractmethod
    async def set_channel_role_overwrite(
        self, channel_id: int, role_id: int, allow: int, deny: int
    ) -> None: ...

    @abc.abstractmethod
    async def grant_role(self, guild_id: int, member_id: int, role_id: int) -> None: ...

    @abc.abstractmethod
    async def revoke_role(
        self, guild_id: int, member_id: int, role_id: int
    ) -> None: ...

    @abc.abstractmethod
    async def send_response(self, interaction: Any, text: str) -> None: ...

    @abc.abstractmethod
    async def send_deferred_ack(self, interaction: Any, placeholder: str) -> None: ...

    @abc.abstractmethod
    async def send_followup(self, interaction: Any, text: str) -> None: ...

    @abc.abstractmethod
    async def register_command_schema(
        self,
        schema: Iterable[CommandDefinition],
        handler: CommandHandler,
        guild_id: int | None = None,
    ) -> None: ...


@contextmanager
def _api_call(operation: str) -> Iterator[None]:
    try:
        yield
    except hikari.HikariError as e:
        raise ApiError(f"{operation} failed: {e}") from e


class HikariGateway(Gateway):
    """Gateway backed by hikari's cache and REST client and lightbulb contexts."""

    def __init__(
        self, app: hikari.GatewayBot, command_client: lightbulb.Client
    ) -> None:
        self.app = app
        self.registry = CommandRegistry(command_client)

    async def get_guild_snapshot(self, guild_id: int) -> GuildSnapshot:
        cache = self.app.cache
        guild = cache.get_guild(guild_id)
        if guild is None:
            raise TargetNotFound(f"Guild {guild_id} is not available in the cache")

        members = {
            int(member_id): MemberSnapshot(
                id=int(member_id),
                role_ids=frozenset(int(r) for r in member.role_ids),
            )
            for member_id, member in cache.get_members_view_for_guild(guild_id).items()
        }
        channels = tuple(
            ChannelSnapshot(id=int(channel_id), type=channel.type)
            for channel_id, channel in cache.get_guild_channels_view_for_guild(
                guild_id
            ).items()
        )
        return GuildSnapshot(
            guild_id=int(guild.id),
            owner_id=int(guild.owner_id),
            members=members,
            channels=channels,
        )

    async def set_channel_role_overwrite(
        self, channel_id: int, role_id: int, allow: int, deny: int
    ) -> None:
        with _api_call(f"Setting overwrite for role {role_id} on channel {channel_id}"):
            await self.app.rest.edit_permission_overwrite(
                channel_id,
                role_id,
                target_type=hikari.PermissionOverwriteType.ROLE,
                allow=hikari.Permissions(allow),
                deny=hikari.Permissions(deny),
                reason=OVERWRITE_REASON,
            )

    async def grant_role(self, guild_id: int, member_id: int, role_id: int) -> None:
        with _api_call(f"Adding role {role_id} to member {member_id}"):
            await self.app.rest.add_role_to_member(
                guild_id, member_id, role_id, reason="Put on timeout"
            )

    async def revoke_role(self, guild_id: int, member_id: int, role_id: int) -> None:
        with _api_call(f"Removing role {role_id} from member {member_id}"):
            await self.app.rest.remove_role_from_member(
                guild_id, member_id, role_id, reason="Taken out of timeout"
            )

    async def send_response(self, interaction: lightbulb.Context, text: str) -> None:
        with _api_call("Responding to interaction"):
            await interaction.respond(text)

    async def send_deferred_ack(
        self, interaction: lightbulb.Context, placeholder: str
    ) -> None:
        # Discord renders its own loading state for deferred responses
        logger.debug(f"Deferring interaction response: {placeholder}")
        with _api_call("Deferring interaction response"):
            await interaction.defer()

    async def send_followup(self, interaction: lightbulb.Context, text: str) -> None:
        with _api_call("Sending interaction follow-up"):
            await interaction.respond(text)

    async def register_command_schema(
        self,
        schema: Iterable[CommandDefinition],
        handler: CommandHandler,
        guild_id: int | None = None,
    ) -> None:
        self.registry.register(schema, handler, guild_id)
