"""Translation of changed files into wiki edits.

Each path a commit touches becomes at most one edit. Wikis usually reserve
real deletion for administrators, so deleting a file replaces the page text
with a sentinel instead; creating an empty file writes the empty-page
sentinel because zero-length pages are refused.
"""

import logging
from typing import TYPE_CHECKING, Dict, Optional

from src.content_converter.wikitext_normalizer import (
    DELETED_CONTENT,
    EMPTY_MESSAGE,
    clean,
)
from src.file_mapper.filesafe_converter import FilesafeConverter
from src.git_integration.conflict_detector import ConflictDetector
from src.git_integration.errors import GitRepositoryError
from src.git_integration.git_repository import GitRepository
from src.git_integration.models import DiffEntry
from src.mediawiki_client.api_wrapper import MediaWikiClient
from src.mediawiki_client.errors import WikiAPIError
from src.page_operations.models import EditResult, EditStatus

if TYPE_CHECKING:
    from src.cli.output import OutputHandler

logger = logging.getLogger(__name__)


class DiffTranslator:
    """Turns one changed path of a commit into one wiki edit.

    The translator shares ``base_timestamps`` with the push planner: it reads
    the timestamp of the revision an edit builds on and records the
    timestamp of every revision it creates.

    Example:
        >>> translator = DiffTranslator(client, repo, ConflictDetector(), base_timestamps={})
        >>> result = translator.translate(entry, "Fix typo", base_revision_id=42)
        >>> result.status
        <EditStatus.OK: 'ok'>
    """

    def __init__(
        self,
        client: MediaWikiClient,
        repository: GitRepository,
        conflict_detector: ConflictDetector,
        base_timestamps: Dict[int, str],
        output: Optional["OutputHandler"] = None,
    ):
        self.client = client
        self.repository = repository
        self.conflict_detector = conflict_detector
        self.base_timestamps = base_timestamps
        self.output = output

    def translate(self, entry: DiffEntry, summary: str, base_revision_id: int) -> EditResult:
        """Submit the edit for one changed path.

        Args:
            entry: Changed path from ``git diff-tree``
            summary: Subject line of the commit, used as edit summary
            base_revision_id: Wiki revision the edit builds on

        Returns:
            EditResult with the new revision id, or the base revision id
            with status SKIPPED/CONFLICT

        Raises:
            WikiAPIError: If the wiki refuses the edit for a non-conflict reason
            GitRepositoryError: If both blob ids are null
        """
        if not FilesafeConverter.is_page_file(entry.path):
            self._diagnostic(f"{entry.path} is not a wiki page file, skipping")
            return EditResult(base_revision_id, EditStatus.SKIPPED)

        title = FilesafeConverter.filename_to_title(entry.path)

        if entry.is_creation and entry.is_deletion:
            raise GitRepositoryError(
                repo_path=self.repository.repo_path,
                message=f"Diff entry for {entry.path} has neither an old nor a new blob",
            )

        if entry.is_deletion:
            text = clean(DELETED_CONTENT)
        else:
            text = clean(self.repository.cat_blob(entry.new_blob), page_created=entry.is_creation)

        if summary == EMPTY_MESSAGE:
            summary = ''

        try:
            edit = self.client.edit(
                title=title,
                text=text,
                summary=summary,
                basetimestamp=self.base_timestamps.get(base_revision_id),
            )
        except WikiAPIError as e:
            status = self.conflict_detector.classify(e)
            self._diagnostic(f"Warning: {e}")
            return EditResult(base_revision_id, status, title)

        if 'nochange' in edit or 'newrevid' not in edit:
            logger.info(f"No change to {title}")
            return EditResult(base_revision_id, EditStatus.OK, title)

        new_revision_id = int(edit['newrevid'])
        if edit.get('newtimestamp'):
            self.base_timestamps[new_revision_id] = edit['newtimestamp']
        self._diagnostic(f"Pushed file: {entry.new_blob} - {title}")
        return EditResult(new_revision_id, EditStatus.OK, title)

    def _diagnostic(self, message: str) -> None:
        logger.info(message)
        if self.output is not None:
            self.output.print(message)
