"""Content normalization between wikitext revisions and git blobs."""

from .wikitext_normalizer import (
    DELETED_CONTENT,
    EMPTY_CONTENT,
    EMPTY_MESSAGE,
    clean,
    is_deleted_content,
    smudge,
)

__all__ = [
    'DELETED_CONTENT',
    'EMPTY_CONTENT',
    'EMPTY_MESSAGE',
    'clean',
    'is_deleted_content',
    'smudge',
]
