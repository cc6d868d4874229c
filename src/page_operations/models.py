"""Data models for page operations.

This module defines the results handed back by the page-level operations
of a push.
"""

from dataclasses import dataclass
from enum import Enum


class EditStatus(Enum):
    """Outcome of translating one changed path into a wiki edit."""

    OK = "ok"
    CONFLICT = "conflict"
    SKIPPED = "skipped"  # Path is not a wiki page, nothing was sent


@dataclass(frozen=True)
class EditResult:
    """Result of one DiffTranslator call.

    Attributes:
        new_revision_id: Wiki revision id after the edit; the base revision
                         id when nothing new was created (conflict, skip,
                         no-change edit)
        status: Outcome of the edit
        title: Page title the path maps to
    """

    new_revision_id: int
    status: EditStatus
    title: str = ""

    @property
    def is_conflict(self) -> bool:
        return self.status is EditStatus.CONFLICT
