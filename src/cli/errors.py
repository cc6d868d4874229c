"""Typed exception hierarchy for CLI-related errors.

This module defines all custom exceptions raised while talking the
remote-helper protocol. All exceptions inherit from CLIError base class for
easy catching and include descriptive messages with context to help with
debugging.
"""

from typing import Optional

from src.mediawiki_client.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class ProtocolError(CLIError):
    """Raised when git sends input the helper cannot parse. Fatal."""

    def __init__(self, message: str, line: Optional[str] = None):
        full_message = f"Protocol error: {message}"
        if line is not None:
            full_message += f" (got {line!r})"
        super().__init__(full_message)
        self.line = line


class ConfigError(CLIError):
    """Raised when the remote's configuration is invalid."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class UnsupportedOperationError(CLIError):
    """Raised for a refspec the wiki cannot honour.

    Attributes:
        remote_ref: Destination ref of the refspec
        reply: Reason sent back to git on the ``error`` line
    """

    def __init__(self, remote_ref: str, reply: str, message: str):
        super().__init__(message)
        self.remote_ref = remote_ref
        self.reply = reply
