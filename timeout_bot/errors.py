"""Exception hierarchy shared by the timeout bot components."""


class TimeoutBotError(Exception):
    """Base class for all errors raised by the bot."""


class StorageError(TimeoutBotError):
    """The persisted configuration could not be read or written."""


class ApiError(TimeoutBotError):
    """A call to the Discord API failed."""


class AuthorizationDenied(TimeoutBotError):
    """The actor may not invoke the requested action. Never shown to the actor."""


class TargetNotFound(TimeoutBotError):
    """A guild, member, role or channel is missing from the current snapshot."""
