"""Test fixtures for the MediaWiki remote helper.

This module provides test fixtures for:
- An in-memory wiki answering the API calls the helper makes
"""

from .fake_wiki import FakeWiki, wiki_timestamp

__all__ = [
    "FakeWiki",
    "wiki_timestamp",
]
