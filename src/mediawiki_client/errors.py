"""Typed exception hierarchy for MediaWiki-related errors.

This module defines all custom exceptions used by the MediaWiki client library.
All exceptions inherit from the SyncError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all git-remote-mediawiki errors.

    Use this to catch any application-level error from the remote helper.
    """
    pass


class MediaWikiError(SyncError):
    """Base exception for all MediaWiki-related errors."""
    pass


class NetworkError(MediaWikiError):
    """Raised when the wiki cannot be used: unreachable or answering garbage.

    Network errors are fatal and terminate the whole helper run.
    """
    pass


class WikiUnreachableError(NetworkError):
    """Raised when the MediaWiki API is not available or unreachable."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"MediaWiki API is not available at {endpoint}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class MalformedResponseError(NetworkError):
    """Raised when an API response is missing the expected structure."""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Unexpected response from MediaWiki during {operation}: {detail}")
        self.operation = operation
        self.detail = detail


class InvalidCredentialsError(MediaWikiError):
    """Raised when login to the wiki fails."""

    def __init__(self, user: str, endpoint: str):
        super().__init__(
            f"Login rejected by MediaWiki (user: {user}, endpoint: {endpoint})"
        )
        self.user = user
        self.endpoint = endpoint


class WikiAPIError(MediaWikiError):
    """Raised when the API answers with an error object.

    Attributes:
        code: MediaWiki error code (e.g. "editconflict", "protectedpage")
        info: Human readable error description from the wiki
    """

    def __init__(self, code: str, info: str = ""):
        super().__init__(f"Error {code} from MediaWiki: {info}")
        self.code = code
        self.info = info
