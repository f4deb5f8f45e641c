import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import hikari
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import StorageError

logger = logging.getLogger(__name__)

# Deny the send-message family (SEND_MESSAGES | ATTACH_FILES == 34816)
DEFAULT_PERMISSION_ALL = int(
    hikari.Permissions.SEND_MESSAGES | hikari.Permissions.ATTACH_FILES
)
DEFAULT_PERMISSION_TIMEOUT = 0

SECTION = "bot"


class Configuration(BaseModel):
    """Moderation setup of the managed guild, as stored under the ``bot`` section."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    guild_id: int | None = Field(default=None, alias="serverID")
    mod_role_id: int | None = Field(default=None, alias="modRole")
    timeout_role_id: int | None = Field(default=None, alias="timeoutRole")
    timeout_channel_id: int | None = Field(default=None, alias="timeoutChannel")
    permission_all_bits: int = Field(
        default=DEFAULT_PERMISSION_ALL, alias="permissionDenyForAllChannels", ge=0
    )
    permission_timeout_bits: int = Field(
        default=DEFAULT_PERMISSION_TIMEOUT,
        alias="permissionAllowForTimeoutChannel",
        ge=0,
    )

    @field_validator(
        "guild_id",
        "mod_role_id",
        "timeout_role_id",
        "timeout_channel_id",
        mode="before",
    )
    @classmethod
    def _blank_snowflake(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return value

    @field_validator("permission_all_bits", mode="before")
    @classmethod
    def _default_all_bits(cls, value: Any) -> Any:
        return DEFAULT_PERMISSION_ALL if value is None else value

    @field_validator("permission_timeout_bits", mode="before")
    @classmethod
    def _default_timeout_bits(cls, value: Any) -> Any:
        return DEFAULT_PERMISSION_TIMEOUT if value is None else value

    @property
    def legacy_token(self) -> str | None:
        """Bot token kept in the file by older deployments, if any."""
        token = (self.model_extra or {}).get("token")
        return str(token) if token else None

    def to_document(self) -> dict[str, Any]:
        # Unknown keys first so a legacy token stays at the top of the section
        section: dict[str, Any] = dict(self.model_extra or {})
        section.update(
            {
                "timeoutChannel": _dump_snowflake(self.timeout_channel_id),
                "modRole": _dump_snowflake(self.mod_role_id),
                "timeoutRole": _dump_snowflake(self.timeout_role_id),
                "serverID": _dump_snowflake(self.guild_id),
                "permissionDenyForAllChannels": self.permission_all_bits,
                "permissionAllowForTimeoutChannel": self.permission_timeout_bits,
            }
        )
        return {SECTION: section}


def _dump_snowflake(value: int | None) -> str:
    return "" if value is None else str(value)


class ConfigStore:
    """Owns the in-memory :class:`Configuration` and its YAML file on disk.

    The store does no locking of its own; callers serialize access through the
    command router's lock.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._config: Configuration | None = None

    @property
    def config(self) -> Configuration:
        if self._config is None:
            raise StorageError(f"Configuration {self.path} has not been loaded")
        return self._config

    def load(self) -> Configuration:
        """Read the configuration file, creating it with defaults when absent.

        Raises:
            StorageError: the file exists but cannot be read or parsed.
        """
        if not self.path.exists():
            logger.info(f"No configuration found at {self.path}, writing defaults")
            self._config = Configuration()
            self.save(self._config)
            return self._config

        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise StorageError(f"Cannot read configuration {self.path}: {e}") from e

        self._config = self._parse(raw)
        logger.info(f"Loaded configuration from {self.path}")
        return self._config

    def _parse(self, raw: Any) -> Configuration:
        if raw is None:
            return Configuration()
        if not isinstance(raw, dict):
            raise StorageError(
                f"Configuration {self.path} must be a mapping at the top level"
            )

        section = raw.get(SECTION)
        if section is None:
            return Configuration()
        if not isinstance(section, dict):
            raise StorageError(f"Section '{SECTION}' in {self.path} must be a mapping")

        try:
            return Configuration.model_validate(section)
        except ValidationError as e:
            raise StorageError(f"Invalid configuration in {self.path}: {e}") from e

    def save(self, config: Configuration | None = None) -> None:
        """Atomically replace the file with ``config`` (the current one by default)."""
        config = config if config is not None else self.config
        payload = yaml.safe_dump(
            config.to_document(), sort_keys=False, default_flow_style=False
        )

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write configuration {self.path}: {e}") from e

        self._config = config
        logger.debug(f"Configuration saved to {self.path}")

    def update(self, **changes: Any) -> Configuration:
        """Apply ``changes`` in memory, then persist them.

        The in-memory change is kept even when persisting fails; the
        :class:`StorageError` is re-raised for the caller to report.
        """
        self._config = self.config.model_copy(update=changes)
        self.save(self._config)
        return self._config
