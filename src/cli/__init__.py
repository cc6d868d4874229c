"""Command-line interface of the MediaWiki remote helper.

This package provides the `git-remote-mediawiki` program that git runs for
``mediawiki::`` remotes. It speaks the remote-helper protocol and drives the
import and push paths over the wiki client and the local repository.
"""

from .dispatcher import CommandDispatcher
from .import_command import ImportCommand
from .push_command import PushPlanner
from .models import ExitCode, FetchStrategy, PushOutcome, RemoteConfig, SyncState
from .errors import (
    CLIError,
    ConfigError,
    ProtocolError,
    UnsupportedOperationError,
)

__all__ = [
    'CommandDispatcher',
    'ImportCommand',
    'PushPlanner',
    'ExitCode',
    'FetchStrategy',
    'PushOutcome',
    'RemoteConfig',
    'SyncState',
    'CLIError',
    'ConfigError',
    'ProtocolError',
    'UnsupportedOperationError',
]
