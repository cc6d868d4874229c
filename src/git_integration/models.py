"""Data models for git integration module.

This module defines the data structures passed between the repository
wrapper and the push planner.
"""

from dataclasses import dataclass

# Tree id of the empty tree, valid in every SHA-1 repository
EMPTY_TREE_ID = '4b825dc642cb6eb9a060e54bf8d69288fbee4904'


def is_null_id(object_id: str) -> bool:
    """Whether an object id is git's all-zero "no object" id."""
    return bool(object_id) and set(object_id) == {'0'}


@dataclass(frozen=True)
class DiffEntry:
    """One changed path between two trees, as reported by ``git diff-tree``.

    Attributes:
        old_mode: File mode before the change ("000000" when created)
        new_mode: File mode after the change ("000000" when deleted)
        old_blob: Blob id before the change (all zeros when created)
        new_blob: Blob id after the change (all zeros when deleted)
        status: Single-letter status (A, M, D, T)
        path: Path of the file in the tree
    """

    old_mode: str
    new_mode: str
    old_blob: str
    new_blob: str
    status: str
    path: str

    @property
    def is_creation(self) -> bool:
        return is_null_id(self.old_blob)

    @property
    def is_deletion(self) -> bool:
        return is_null_id(self.new_blob)


@dataclass(frozen=True)
class CommitPlanEntry:
    """One step of a push plan.

    Attributes:
        child_commit_id: Commit (or tree) the diff starts from, the side
                         already reflected on the wiki
        commit_id: Commit whose changes are replayed in this step
    """

    child_commit_id: str
    commit_id: str
