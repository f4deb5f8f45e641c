from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..errors import ApiError
from ..storage import Configuration

if TYPE_CHECKING:
    from ..core.gateway import Gateway
    from ..core.snapshots import GuildSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Overwrite:
    """Allow/deny bits for the timeout role on one channel."""

    allow: int
    deny: int

    @classmethod
    def for_channel(cls, channel_id: int, config: Configuration) -> Overwrite:
        if channel_id == config.timeout_channel_id:
            return cls(allow=config.permission_timeout_bits, deny=0)
        return cls(allow=0, deny=config.permission_all_bits)

    def matches(self, allow: int, deny: int) -> bool:
        return self.allow == int(allow) and self.deny == int(deny)


@dataclass(slots=True)
class SyncReport:
    role_id: int | None
    applied: dict[int, Overwrite] = field(default_factory=dict)
    failed: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class PermissionSynchronizer:
    """Re-applies the timeout role's overwrite on every channel of a guild.

    Every sweep covers all channels, so a previous timeout channel is put
    back to the deny state. A failing channel is logged and skipped; the
    next trigger reconciles it.
    """

    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway

    async def resync(self, guild: GuildSnapshot, config: Configuration) -> SyncReport:
        role_id = config.timeout_role_id
        report = SyncReport(role_id=role_id)
        if role_id is None:
            logger.debug("No timeout role configured, skipping channel synchronization")
            return report

        for channel in guild.channels:
            overwrite = Overwrite.for_channel(channel.id, config)
            try:
                await self.gateway.set_channel_role_overwrite(
                    channel.id, role_id, overwrite.allow, overwrite.deny
                )
            except ApiError as e:
                logger.error(f"Error synchronizing channel {channel.id}: {e}")
                report.failed.append(channel.id)
                continue
            report.applied[channel.id] = overwrite

        logger.info(
            f"Synchronized timeout role {role_id} on "
            f"{len(report.applied)}/{len(guild.channels)} channels "
            f"in guild {guild.guild_id}"
        )
        if report.failed:
            logger.warning(
                f"Failed to synchronize {len(report.failed)} channels: {report.failed}"
            )
        return report
