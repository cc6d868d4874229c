"""Test helper modules.

This package provides utilities for integration testing:
- git_test_utils: Create throwaway git repositories and commits
"""

from .git_test_utils import (
    cleanup_git_repo,
    create_temp_git_repo,
    create_test_commit,
    run_git,
)

__all__ = [
    'cleanup_git_repo',
    'create_temp_git_repo',
    'create_test_commit',
    'run_git',
]
