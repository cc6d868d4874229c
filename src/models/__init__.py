"""Data models for wiki pages and revisions."""

from src.models.wiki_page import Page, Revision, RevisionRef, TrackingSpec

__all__ = ['Page', 'Revision', 'RevisionRef', 'TrackingSpec']
