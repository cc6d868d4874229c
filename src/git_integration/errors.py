"""Typed exception hierarchy for git integration errors.

This module defines all custom exceptions used by the git integration module.
All exceptions inherit from the SyncError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from src.mediawiki_client.errors import SyncError


class GitRepositoryError(SyncError):
    """Raised when git repository operations fail.

    Attributes:
        repo_path: Path to git repository
        message: Error description
        git_output: Git command stderr output
    """

    def __init__(self, repo_path: str, message: str, git_output: str = ""):
        super().__init__(f"Git repository error at {repo_path}: {message}")
        self.repo_path = repo_path
        self.message = message
        self.git_output = git_output


class NonFastForwardError(SyncError):
    """Raised when a push cannot be applied on top of the wiki's history.

    Covers a wiki that moved past what this clone has imported, a local
    history with no path back to the last synchronized commit, and edit
    conflicts reported by the wiki mid-push.

    Attributes:
        reason: Description of why the push is not a fast-forward
    """

    def __init__(self, reason: str):
        super().__init__(f"Non fast-forward push: {reason}")
        self.reason = reason
