"""Conversion of wiki revisions into a git fast-import stream.

Every revision becomes one commit on ``refs/mediawiki/<remote>/master``
touching the single file of its page, immediately followed by a commit on
``refs/notes/<remote>/mediawiki`` recording which wiki revision it came
from. Later runs read the newest note to know where to resume.
"""

import logging
from typing import TYPE_CHECKING, AbstractSet, Optional, Sequence

from src.content_converter.wikitext_normalizer import (
    EMPTY_MESSAGE,
    is_deleted_content,
    smudge,
)
from src.file_mapper.filesafe_converter import FilesafeConverter
from src.git_integration.fast_import import FastImportWriter
from src.models.wiki_page import Revision
from src.page_operations.revision_fetcher import RevisionFetcher, parse_timestamp

if TYPE_CHECKING:
    from src.cli.output import OutputHandler
    from src.git_integration.git_repository import GitRepository

logger = logging.getLogger(__name__)

NOTE_PREFIX = 'source_revision:'
NOTE_COMMIT_MESSAGE = 'Note added by git-mediawiki during import'
ANONYMOUS = 'Anonymous'


def content_ref(remote_name: str) -> str:
    return f"refs/mediawiki/{remote_name}/master"


def notes_ref(remote_name: str) -> str:
    return f"refs/notes/{remote_name}/mediawiki"


def note_text(revision_id: int) -> str:
    return f"{NOTE_PREFIX} {revision_id}"


def parse_note(note: Optional[str]) -> int:
    """Extract the revision id from a provenance note, 0 when absent or foreign."""
    if not note:
        return 0
    fields = note.split()
    if len(fields) < 2 or fields[0] != NOTE_PREFIX or not fields[1].isdigit():
        return 0
    return int(fields[1])


def _identity(name: str) -> str:
    # fast-import rejects angle brackets and newlines in identities
    return ''.join(char for char in name if char not in '<>\n')


class ImportStreamBuilder:
    """Emits content and note commits for a list of revisions.

    Example:
        >>> builder = ImportStreamBuilder(fetcher, FastImportWriter(out), "origin", "wiki.example.org")
        >>> builder.build([10, 11, 15], tracked_page_ids={1, 2}, full_import=True)
        3
    """

    def __init__(
        self,
        fetcher: RevisionFetcher,
        writer: FastImportWriter,
        remote_name: str,
        wiki_host: str,
        output: Optional["OutputHandler"] = None,
    ):
        self.fetcher = fetcher
        self.writer = writer
        self.remote_name = remote_name
        self.wiki_host = wiki_host
        self.output = output
        self.last_timestamp = 0
        self.last_revision_id = 0

    def build(
        self,
        revision_ids: Sequence[int],
        tracked_page_ids: AbstractSet[int],
        full_import: bool,
    ) -> int:
        """Fetch and emit revisions in ascending id order.

        Args:
            revision_ids: Candidate revision ids, in any order
            tracked_page_ids: Pages whose revisions are imported; revisions of
                              other pages are skipped
            full_import: True for a clone (no previous import to chain onto)

        Returns:
            Number of content commits emitted
        """
        ordered = sorted(set(revision_ids))
        total = len(ordered)
        count = 0

        for position, revision_id in enumerate(ordered, 1):
            revision = self.fetcher.fetch_revision(revision_id)
            if revision is None:
                continue
            if revision.page_id not in tracked_page_ids:
                message = f"{position}/{total}: skipping revision #{revision_id} of {revision.title}"
                logger.debug(message)
                if self.output is not None:
                    self.output.debug(message)
                continue

            count += 1
            self._progress(f"{position}/{total}: Revision #{revision.revision_id} of {revision.title}")
            self._emit(revision, mark=count, first=(count == 1), full_import=full_import)
            self.last_revision_id = revision.revision_id

        return count

    def _emit(self, revision: Revision, mark: int, first: bool, full_import: bool) -> None:
        author = _identity(revision.author or ANONYMOUS)
        committer = f"{author} <{author}@{self.wiki_host}> {self._commit_time(revision)} +0000"
        path = FilesafeConverter.title_to_filename(revision.title)

        self.writer.commit(
            content_ref(self.remote_name),
            committer=committer,
            message=revision.comment or EMPTY_MESSAGE,
            mark=mark,
            from_ref=f"{content_ref(self.remote_name)}^0" if first and not full_import else None,
        )
        if is_deleted_content(revision.content):
            self.writer.delete(path)
        else:
            self.writer.modify(path, smudge(revision.content))
        self.writer.end_commit()

        if first and full_import:
            self.writer.reset(notes_ref(self.remote_name))
        self.writer.commit(
            notes_ref(self.remote_name),
            committer=committer,
            message=NOTE_COMMIT_MESSAGE,
            from_ref=f"{notes_ref(self.remote_name)}^0" if first and not full_import else None,
        )
        self.writer.note(mark, note_text(revision.revision_id))
        self.writer.end_commit()

    def _commit_time(self, revision: Revision) -> int:
        """Epoch seconds for a commit, synthesized when the wiki has none."""
        if revision.timestamp:
            self.last_timestamp = parse_timestamp(revision.timestamp)
        else:
            self.last_timestamp += 1
        return self.last_timestamp

    def _progress(self, message: str) -> None:
        logger.info(message)
        if self.output is not None:
            self.output.print(message)


def read_last_imported_revision(repository: "GitRepository", remote_name: str) -> int:
    """Wiki revision the remote's import ref is noted with, 0 if none."""
    head = repository.rev_parse(content_ref(remote_name))
    if head is None:
        return 0
    return parse_note(repository.notes_show(notes_ref(remote_name), head))
