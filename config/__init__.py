from .settings import BotSettings, settings

__all__ = ["BotSettings", "settings"]
