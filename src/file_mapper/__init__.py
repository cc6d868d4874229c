"""Mapping between wiki page titles and files in the git tree."""

from .filesafe_converter import (
    FilesafeConverter,
    FORBIDDEN_CHARS,
    NAME_MAX,
    PAGE_EXTENSION,
    SLASH_REPLACEMENT,
)

__all__ = [
    'FilesafeConverter',
    'FORBIDDEN_CHARS',
    'NAME_MAX',
    'PAGE_EXTENSION',
    'SLASH_REPLACEMENT',
]
