import logging

import hikari
import lightbulb

from ..commands.actions import Action
from ..commands.router import CommandRouter
from ..commands.schema import TIMEOUT_COMMANDS
from ..errors import ApiError
from ..permissions import Overwrite, PermissionSynchronizer
from ..storage import ConfigStore
from .gateway import HikariGateway
from .snapshots import Actor

logger = logging.getLogger(__name__)


class TimeoutBot:
    def __init__(self, store: ConfigStore, token: str) -> None:
        # Member cache is needed to resolve timeout targets
        intents = hikari.Intents.GUILDS | hikari.Intents.GUILD_MEMBERS
        self.hikari_bot = hikari.GatewayBot(token=token, intents=intents)
        self._command_client = lightbulb.client_from_app(self.hikari_bot)

        self.store = store
        self.gateway = HikariGateway(self.hikari_bot, self._command_client)
        self.synchronizer = PermissionSynchronizer(self.gateway)
        self.router = CommandRouter(store, self.gateway, self.synchronizer)

        self.is_ready = False
        self._setup_event_listeners()

    @property
    def command_client(self) -> lightbulb.Client:
        return self._command_client

    def _setup_event_listeners(self) -> None:
        subscribe = self.hikari_bot.subscribe
        subscribe(hikari.StartingEvent, self.on_starting)
        subscribe(hikari.StartedEvent, self.on_started)
        subscribe(hikari.StoppingEvent, self.on_stopping)
        subscribe(hikari.GuildAvailableEvent, self.on_guild_available)
        subscribe(hikari.GuildChannelCreateEvent, self.on_channel_create)
        subscribe(hikari.GuildChannelUpdateEvent, self.on_channel_update)

    async def on_starting(self, event: hikari.StartingEvent) -> None:
        logger.info("Bot is starting...")
        # Commands must be registered before the client syncs them on start
        try:
            await self.gateway.register_command_schema(
                TIMEOUT_COMMANDS, self.handle_command, self.store.config.guild_id
            )
        except ApiError as e:
            logger.critical(f"Failed to register slash commands: {e}")
            await self.hikari_bot.close()
            return

        await self._command_client.start()

    async def on_started(self, event: hikari.StartedEvent) -> None:
        self.is_ready = True
        logger.info(f"Bot is ready! Logged in as {self.hikari_bot.get_me()}")

    async def on_stopping(self, event: hikari.StoppingEvent) -> None:
        logger.info("Bot is stopping, waiting for in-flight work...")
        await self.router.shutdown()

    async def on_guild_available(self, event: hikari.GuildAvailableEvent) -> None:
        if self._is_managed_guild(event.guild_id):
            logger.info(f"Guild {event.guild_id} available, synchronizing channels")
            await self.router.resync(int(event.guild_id))

    async def on_channel_create(self, event: hikari.GuildChannelCreateEvent) -> None:
        if self._is_managed_guild(event.guild_id):
            await self.router.resync(int(event.guild_id))

    async def on_channel_update(self, event: hikari.GuildChannelUpdateEvent) -> None:
        if not self._is_managed_guild(event.guild_id):
            return
        # Our own overwrite writes come back as updates; only skip those while
        # the last sweep reached every channel
        if self.router.in_sync and self._channel_in_sync(event.channel):
            logger.debug(f"Channel {event.channel.id} already in sync, skipping sweep")
            return
        await self.router.resync(int(event.guild_id))

    async def handle_command(self, ctx: lightbulb.Context, action: Action) -> None:
        if ctx.guild_id is None or ctx.member is None:
            logger.debug(f"Ignoring {action.kind.value} outside of a guild")
            return

        actor = Actor(
            id=int(ctx.member.id),
            role_ids=frozenset(int(r) for r in ctx.member.role_ids),
        )
        await self.router.dispatch(ctx, actor, int(ctx.guild_id), action)

    def _is_managed_guild(self, guild_id: hikari.Snowflakeish) -> bool:
        return self.store.config.guild_id == int(guild_id)

    def _channel_in_sync(self, channel: hikari.PermissibleGuildChannel) -> bool:
        config = self.store.config
        if config.timeout_role_id is None:
            return True

        role = hikari.Snowflake(config.timeout_role_id)
        current = channel.permission_overwrites.get(role)
        if current is None:
            return False
        expected = Overwrite.for_channel(int(channel.id), config)
        return expected.matches(current.allow, current.deny)

    def run(self) -> None:
        try:
            logger.info("Starting Discord bot...")
            self.hikari_bot.run()
        except KeyboardInterrupt:
            logger.info("Bot stopped by user")
        except Exception as e:
            logger.error(f"Bot crashed: {e}")
            raise
