"""Page-level operations of the sync engine.

The submodules cover page resolution (page_resolver), revision discovery
(revision_fetcher) and edit translation (diff_translator). Only the result
models are re-exported here so that importing the package stays cheap.
"""

from .models import EditResult, EditStatus

__all__ = [
    'EditResult',
    'EditStatus',
]
