"""Discord moderation bot that confines timed-out members to a single channel."""

__version__ = "1.0.0"
