"""Git integration for the MediaWiki remote helper.

This package provides repository access, the fast-import stream writer, the
import stream builder and edit conflict classification.
"""

from src.git_integration.errors import (
    GitRepositoryError,
    NonFastForwardError,
)
from src.git_integration.fast_import import FastImportWriter
from src.git_integration.git_repository import GitRepository
from src.git_integration.models import (
    EMPTY_TREE_ID,
    CommitPlanEntry,
    DiffEntry,
)

__all__ = [
    # Errors
    'GitRepositoryError',
    'NonFastForwardError',
    # Components
    'FastImportWriter',
    'GitRepository',
    # Models
    'EMPTY_TREE_ID',
    'CommitPlanEntry',
    'DiffEntry',
]
