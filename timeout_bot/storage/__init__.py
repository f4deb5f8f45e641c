from .store import (
    DEFAULT_PERMISSION_ALL,
    DEFAULT_PERMISSION_TIMEOUT,
    ConfigStore,
    Configuration,
)

__all__ = [
    "ConfigStore",
    "Configuration",
    "DEFAULT_PERMISSION_ALL",
    "DEFAULT_PERMISSION_TIMEOUT",
]
