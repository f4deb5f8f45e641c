"""Command argument definitions."""

from dataclasses import dataclass
from typing import Any

import hikari


@dataclass(frozen=True)
class CommandArgument:
    """Defines an argument for a slash command using hikari option types."""

    name: str
    arg_type: hikari.OptionType
    description: str
    required: bool = True
    default: Any = None
