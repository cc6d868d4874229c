"""Wiki page and revision data models."""

from dataclasses import dataclass, field
from typing import Optional, Set


@dataclass(frozen=True)
class Page:
    """A tracked wiki page.

    Attributes:
        title: Page title as the wiki spells it (natural key)
        page_id: Stable page identifier used for every revision query
    """
    title: str
    page_id: int


@dataclass(frozen=True, order=True)
class RevisionRef:
    """Identifier pair of one revision, ordered by revision id.

    Attributes:
        revision_id: Wiki-wide revision number
        page_id: Page the revision belongs to
    """
    revision_id: int
    page_id: int


@dataclass
class Revision:
    """One immutable version of one wiki page.

    Attributes:
        page_id: Page the revision belongs to
        revision_id: Wiki-wide revision number
        title: Page title at fetch time
        timestamp: ISO 8601 timestamp, None when the wiki omits it
        author: User name, None for hidden/missing users
        comment: Edit summary
        content: Raw wikitext
    """
    page_id: int
    revision_id: int
    title: str
    timestamp: Optional[str]
    author: Optional[str]
    comment: str
    content: str


@dataclass
class TrackingSpec:
    """Which pages a remote follows.

    Empty sets on both sides mean "every page of the wiki".
    """
    explicit_titles: Set[str] = field(default_factory=set)
    categories: Set[str] = field(default_factory=set)
