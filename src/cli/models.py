"""Data models for CLI operations.

This module defines the data models used by the remote-helper front end:
exit codes, protocol commands, the remote's configuration and the state a
push carries between its steps.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Set


class ExitCode(IntEnum):
    """Exit codes for the remote helper process.

    - SUCCESS (0): Session ended normally
    - GENERAL_ERROR (1): Protocol, configuration or repository failure
    - AUTH_ERROR (3): Login rejected by the wiki
    - NETWORK_ERROR (4): Wiki unreachable or answering malformed data
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


class ProtocolCommand(Enum):
    """Commands of the git remote-helper protocol the helper understands.

    The value is the command word; ``min_args``/``max_args`` bound the
    number of space-separated arguments that may follow it.
    """
    CAPABILITIES = ("capabilities", 0, 0)
    LIST = ("list", 0, 1)
    IMPORT = ("import", 1, 1)
    OPTION = ("option", 2, 2)
    PUSH = ("push", 1, 1)

    def __init__(self, word: str, min_args: int, max_args: int):
        self.word = word
        self.min_args = min_args
        self.max_args = max_args

    @classmethod
    def from_word(cls, word: str) -> Optional["ProtocolCommand"]:
        for command in cls:
            if command.word == word:
                return command
        return None


class FetchStrategy(Enum):
    """How new revisions are discovered on import."""
    BY_PAGE = "by_page"  # Walk the history of every tracked page
    BY_REV = "by_rev"  # Enumerate revision ids wiki-wide, keep tracked pages


@dataclass
class RemoteConfig:
    """Configuration of one MediaWiki remote, read from git config.

    Attributes:
        remote_name: Name git gave the remote (first helper argument)
        url: Wiki base URL without trailing slash
        pages: Explicitly tracked titles
        categories: Tracked categories
        shallow: Import only the latest revision of each page
        dumb_push: Push without recording notes or moving the import ref
        fetch_strategy: Revision discovery strategy
        login: Wiki account name
        password: Wiki password
        domain: Login domain for LDAP-backed wikis
    """
    remote_name: str
    url: str
    pages: Set[str] = field(default_factory=set)
    categories: Set[str] = field(default_factory=set)
    shallow: bool = False
    dumb_push: bool = False
    fetch_strategy: FetchStrategy = FetchStrategy.BY_PAGE
    login: Optional[str] = None
    password: Optional[str] = None
    domain: Optional[str] = None


@dataclass
class SyncState:
    """State shared by the steps of one push.

    Attributes:
        last_local_revision_id: Wiki revision the local import ref is noted
                                with (0 when never imported)
        last_remote_revision_id: Newest revision among tracked pages on the wiki
        base_timestamps: Timestamp of each known revision, sent with edits so
                         the wiki can detect conflicts
    """
    last_local_revision_id: int = 0
    last_remote_revision_id: int = 0
    base_timestamps: Dict[int, str] = field(default_factory=dict)


@dataclass
class PushOutcome:
    """Result of pushing one refspec, as reported to git.

    Attributes:
        remote_ref: Destination ref of the refspec
        ok: Whether the push succeeded
        reason: Error text for the ``error`` line
        pushed_commits: Commits replayed onto the wiki
    """
    remote_ref: str
    ok: bool
    reason: str = ""
    pushed_commits: List[str] = field(default_factory=list)

    def protocol_line(self) -> str:
        if self.ok:
            return f"ok {self.remote_ref}"
        return f"error {self.remote_ref} {self.reason}"
