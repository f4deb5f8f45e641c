"""Command registration system."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import hikari
import lightbulb

from ..errors import ApiError
from .actions import Action
from .argument_types import CommandArgument
from .schema import CommandDefinition

logger = logging.getLogger(__name__)

CommandHandler = Callable[[lightbulb.Context, Action], Awaitable[None]]


class OptionDescriptorFactory:
    """Factory for creating lightbulb option descriptors."""

    option_mapping = {
        hikari.OptionType.STRING: lightbulb.string,
        hikari.OptionType.INTEGER: lightbulb.integer,
        hikari.OptionType.BOOLEAN: lightbulb.boolean,
        hikari.OptionType.USER: lightbulb.user,
        hikari.OptionType.CHANNEL: lightbulb.channel,
        hikari.OptionType.ROLE: lightbulb.role,
    }

    @classmethod
    def create(cls, arg_def: CommandArgument) -> Any:
        """Create the appropriate lightbulb option descriptor for an argument."""
        descriptor_func = cls.option_mapping.get(arg_def.arg_type)
        if descriptor_func is None:
            raise ValueError(
                f"Unsupported option type for '{arg_def.name}': {arg_def.arg_type}"
            )

        kwargs = {}
        if not arg_def.required:
            kwargs["default"] = (
                arg_def.default if arg_def.default is not None else hikari.UNDEFINED
            )
        return descriptor_func(arg_def.name, arg_def.description, **kwargs)


class CommandRegistry:
    """Turns command definitions into lightbulb slash commands."""

    def __init__(self, client: lightbulb.Client) -> None:
        self.client = client
        self._commands: list[type[lightbulb.SlashCommand]] = []

    @property
    def commands(self) -> list[type[lightbulb.SlashCommand]]:
        return list(self._commands)

    def register(
        self,
        schema: Iterable[CommandDefinition],
        handler: CommandHandler,
        guild_id: int | None = None,
    ) -> None:
        """Register every command of ``schema``, scoped to ``guild_id`` when given."""
        guilds = [guild_id] if guild_id else None

        for definition in schema:
            cmd_class = self.build_command(definition, handler)
            try:
                self.client.register(cmd_class, guilds=guilds)
            except Exception as e:
                raise ApiError(f"Cannot create '{definition.name}' command: {e}") from e

            self._commands.append(cmd_class)
            scope = f"guild {guild_id}" if guild_id else "global scope"
            logger.info(f"Registered slash command: {definition.name} ({scope})")

    @staticmethod
    def build_command(
        definition: CommandDefinition, handler: CommandHandler
    ) -> type[lightbulb.SlashCommand]:
        """Create a SlashCommand subclass whose invoke decodes its option."""
        arg_def = definition.argument

        async def invoke_wrapper(
            cmd_instance: lightbulb.SlashCommand, ctx: lightbulb.Context
        ) -> None:
            value = getattr(cmd_instance, arg_def.name)
            await handler(ctx, definition.build_action(value))

        base_name = definition.name.title().replace("-", "").replace("_", "")
        cmd_class_name = f"{base_name}Command"
        class_attrs = {
            "invoke": lightbulb.invoke(invoke_wrapper),
            arg_def.name: OptionDescriptorFactory.create(arg_def),
        }

        return type(
            cmd_class_name,
            (lightbulb.SlashCommand,),
            class_attrs,
            name=definition.name,
            description=definition.description,
        )
