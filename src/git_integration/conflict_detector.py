"""Classification of failed wiki edits during a push.

An edit refused because somebody else changed the page first is a conflict:
the push stops and git is told the push was not a fast-forward, so the user
can fetch and retry. Any other refusal (protected page, blocked user, spam
filter) means the push cannot succeed by retrying and is fatal.
"""

import logging

from src.mediawiki_client.errors import WikiAPIError
from src.page_operations.models import EditStatus

logger = logging.getLogger(__name__)

# API error codes meaning "the page moved on since your base revision"
EDIT_CONFLICT_CODES = frozenset({
    'editconflict',
    'pagedeleted',
    'articleexists',
})


class ConflictDetector:
    """Classifies wiki edit errors as conflicts or fatal failures.

    Example:
        >>> detector = ConflictDetector()
        >>> detector.classify(WikiAPIError("editconflict", "Edit conflict."))
        <EditStatus.CONFLICT: 'conflict'>
    """

    def is_conflict(self, error: WikiAPIError) -> bool:
        """Whether the error belongs to the edit-conflict class."""
        return error.code in EDIT_CONFLICT_CODES

    def classify(self, error: WikiAPIError) -> EditStatus:
        """Classify a failed edit.

        Args:
            error: Error returned by the wiki for an edit request

        Returns:
            EditStatus.CONFLICT for recoverable conflicts

        Raises:
            WikiAPIError: The same error, re-raised, when it is fatal
        """
        if self.is_conflict(error):
            logger.warning(f"Edit conflict reported by the wiki: {error.code} ({error.info})")
            return EditStatus.CONFLICT

        logger.error(f"Fatal error from the wiki: {error.code} ({error.info})")
        raise error
