"""MediaWiki client library for the git remote helper.

This package provides a thin session object over the MediaWiki Action API
(through mwclient) with typed errors, credential loading and throttling
retries.
"""

from .errors import (
    SyncError,
    MediaWikiError,
    NetworkError,
    WikiUnreachableError,
    MalformedResponseError,
    InvalidCredentialsError,
    WikiAPIError,
)

__all__ = [
    "SyncError",
    "MediaWikiError",
    "NetworkError",
    "WikiUnreachableError",
    "MalformedResponseError",
    "InvalidCredentialsError",
    "WikiAPIError",
]
