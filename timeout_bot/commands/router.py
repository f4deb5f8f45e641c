from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import hikari

from ..core.locks import SharedExclusiveLock
from ..core.snapshots import Actor, GuildSnapshot
from ..errors import ApiError, AuthorizationDenied, StorageError, TargetNotFound
from ..permissions import PermissionSynchronizer, SyncReport, is_authorized
from ..storage import ConfigStore
from .actions import (
    Action,
    SetModRole,
    SetTimeoutChannel,
    SetTimeoutRole,
    ToggleTimeout,
)

if TYPE_CHECKING:
    from ..core.gateway import Gateway

logger = logging.getLogger(__name__)

TEXT_CHANNEL_TYPES = frozenset(
    {hikari.ChannelType.GUILD_TEXT, hikari.ChannelType.GUILD_NEWS}
)
LOADING_PLACEHOLDER = "Loading..."


class CommandRouter:
    """Runs decoded commands against the configuration and the guild.

    Configuration changes and synchronization sweeps hold the lock
    exclusively. Timeout toggles share it, so toggles on different members
    run side by side but never overlap a configuration change.

    Denied or unresolvable invocations get no response at all.
    """

    def __init__(
        self,
        store: ConfigStore,
        gateway: Gateway,
        synchronizer: PermissionSynchronizer | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.synchronizer = synchronizer or PermissionSynchronizer(gateway)
        self.last_report: SyncReport | None = None
        self._lock = SharedExclusiveLock()
        self._closing = False

    @property
    def is_closing(self) -> bool:
        return self._closing

    @property
    def in_sync(self) -> bool:
        """Whether the last sweep reached every channel."""
        return self.last_report is not None and self.last_report.ok

    async def dispatch(
        self, interaction: Any, actor: Actor, guild_id: int, action: Action
    ) -> None:
        if self._closing:
            logger.info(
                f"Shutting down, ignoring {action.kind.value} from user {actor.id}"
            )
            return

        try:
            match action:
                case ToggleTimeout():
                    async with self._lock.shared():
                        await self._toggle_timeout(interaction, actor, guild_id, action)
                case SetModRole():
                    async with self._lock.exclusive():
                        await self._set_mod_role(interaction, actor, guild_id, action)
                case SetTimeoutRole():
                    async with self._lock.exclusive():
                        await self._set_timeout_role(
                            interaction, actor, guild_id, action
                        )
                case SetTimeoutChannel():
                    async with self._lock.exclusive():
                        await self._set_timeout_channel(
                            interaction, actor, guild_id, action
                        )
                case _:
                    raise TypeError(f"Unknown action: {action!r}")

        except AuthorizationDenied as e:
            logger.info(f"Permission denied: {e}")
        except TargetNotFound as e:
            logger.info(f"Ignoring {action.kind.value}: {e}")
        except ApiError as e:
            logger.error(f"Error in {action.kind.value} command: {e}")

    async def resync(self, guild_id: int) -> SyncReport | None:
        """Sweep every channel of ``guild_id`` with the current configuration."""
        if self._closing:
            return None

        async with self._lock.exclusive():
            try:
                guild = await self.gateway.get_guild_snapshot(guild_id)
            except TargetNotFound as e:
                logger.warning(f"Cannot synchronize channels: {e}")
                return None
            return await self._sweep(guild)

    async def shutdown(self) -> None:
        """Stop accepting commands and wait for in-flight work to finish."""
        self._closing = True
        async with self._lock.exclusive():
            logger.info("Command router drained")

    async def _sweep(self, guild: GuildSnapshot) -> SyncReport:
        self.last_report = await self.synchronizer.resync(guild, self.store.config)
        return self.last_report

    def _authorize(self, actor: Actor, guild: GuildSnapshot, action: Action) -> None:
        if not is_authorized(actor, guild, self.store.config, action.kind):
            raise AuthorizationDenied(
                f"user {actor.id} tried to use {action.kind.value} "
                f"in guild {guild.guild_id}"
            )

    def _persist(self, **changes: Any) -> None:
        try:
            self.store.update(**changes)
        except StorageError as e:
            logger.error(f"Configuration change kept in memory only: {e}")

    async def _toggle_timeout(
        self, interaction: Any, actor: Actor, guild_id: int, action: ToggleTimeout
    ) -> None:
        guild = await self.gateway.get_guild_snapshot(guild_id)
        self._authorize(actor, guild, action)

        role_id = self.store.config.timeout_role_id
        if role_id is None:
            logger.warning("Timeout role is not configured, ignoring timeout toggle")
            return

        member = guild.get_member(action.target_id)
        if member is None:
            raise TargetNotFound(
                f"member {action.target_id} is not in guild {guild.guild_id}"
            )

        has_role = member.has_role(role_id)
        if action.add and not has_role:
            await self.gateway.grant_role(guild.guild_id, member.id, role_id)
            logger.info(f"User {actor.id} put member {member.id} on timeout")
            await self.gateway.send_response(
                interaction, f"<@{member.id}> has been put on timeout."
            )
        elif not action.add and has_role:
            await self.gateway.revoke_role(guild.guild_id, member.id, role_id)
            logger.info(f"User {actor.id} took member {member.id} out of timeout")
            await self.gateway.send_response(
                interaction, f"<@{member.id}> has been taken out of timeout."
            )
        else:
            logger.debug(
                f"Member {member.id} already in requested timeout state ({action.add})"
            )

    async def _set_mod_role(
        self, interaction: Any, actor: Actor, guild_id: int, action: SetModRole
    ) -> None:
        guild = await self.gateway.get_guild_snapshot(guild_id)
        self._authorize(actor, guild, action)

        self._persist(mod_role_id=action.role_id, guild_id=guild.guild_id)
        logger.info(f"Mod role set to {action.role_id} in guild {guild.guild_id}")
        await self.gateway.send_response(
            interaction, f"<@&{action.role_id}> has been set as the new mod role."
        )

    async def _set_timeout_role(
        self, interaction: Any, actor: Actor, guild_id: int, action: SetTimeoutRole
    ) -> None:
        guild = await self.gateway.get_guild_snapshot(guild_id)
        self._authorize(actor, guild, action)

        self._persist(timeout_role_id=action.role_id, guild_id=guild.guild_id)
        logger.info(f"Timeout role set to {action.role_id} in guild {guild.guild_id}")
        await self._sweep(guild)
        await self.gateway.send_response(
            interaction, f"<@&{action.role_id}> has been set as the new timeout role."
        )

    async def _set_timeout_channel(
        self, interaction: Any, actor: Actor, guild_id: int, action: SetTimeoutChannel
    ) -> None:
        guild = await self.gateway.get_guild_snapshot(guild_id)
        self._authorize(actor, guild, action)

        if action.channel_type not in TEXT_CHANNEL_TYPES:
            logger.info(
                f"Ignoring timeout channel {action.channel_id}: "
                f"not a text channel ({action.channel_type})"
            )
            return

        # The sweep can take a while on large guilds
        await self.gateway.send_deferred_ack(interaction, LOADING_PLACEHOLDER)

        self._persist(timeout_channel_id=action.channel_id, guild_id=guild.guild_id)
        logger.info(
            f"Timeout channel set to {action.channel_id} in guild {guild.guild_id}"
        )
        await self._sweep(guild)
        text = f"<#{action.channel_id}> has been set as the new timeout channel."
        await self.gateway.send_followup(interaction, text)
