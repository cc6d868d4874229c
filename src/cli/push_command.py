"""Push planning and replay for the remote helper.

This module provides the PushPlanner class that answers git's ``push``
requests. A push replays the local commits the wiki has not seen yet, one
edit per changed page file, in history order, after checking that the wiki
has not moved on since the last import.
"""

import logging
import re
from typing import List, Optional

from src.cli.errors import ProtocolError, UnsupportedOperationError
from src.cli.models import PushOutcome, RemoteConfig, SyncState
from src.cli.output import OutputHandler
from src.git_integration.conflict_detector import ConflictDetector
from src.git_integration.errors import GitRepositoryError, NonFastForwardError
from src.git_integration.git_repository import GitRepository
from src.git_integration.import_stream import (
    content_ref,
    note_text,
    notes_ref,
    read_last_imported_revision,
)
from src.git_integration.models import CommitPlanEntry
from src.mediawiki_client.api_wrapper import MediaWikiClient
from src.models.wiki_page import TrackingSpec
from src.page_operations.diff_translator import DiffTranslator
from src.page_operations.page_resolver import PageResolver
from src.page_operations.revision_fetcher import RevisionFetcher

logger = logging.getLogger(__name__)

MASTER_REF = "refs/heads/master"
NON_FAST_FORWARD_REPLY = '"non-fast-forward"'
REFSPEC_PATTERN = re.compile(r'^(\+)?([^:]*):([^:]*)$')


class PushPlanner:
    """Pushes local commits to the wiki as a sequence of edits.

    The push workflow:
        1. Compare the last imported revision with the wiki's newest one
        2. Reject the push if the wiki is ahead (before any edit)
        3. Linearize the commits to replay, oldest first
        4. Translate every changed page file of each commit into an edit
        5. Note each replayed commit and advance the import ref

    Example:
        >>> planner = PushPlanner(config, client, repo, OutputHandler())
        >>> planner.push_refspec("refs/heads/master:refs/heads/master").protocol_line()
        'ok refs/heads/master'
    """

    def __init__(
        self,
        config: RemoteConfig,
        client: MediaWikiClient,
        repository: GitRepository,
        output_handler: Optional[OutputHandler] = None,
        page_resolver: Optional[PageResolver] = None,
        revision_fetcher: Optional[RevisionFetcher] = None,
        conflict_detector: Optional[ConflictDetector] = None,
    ):
        """Initialize push planner with dependencies.

        Args:
            config: Remote configuration
            client: Wiki session
            repository: Local repository
            output_handler: OutputHandler for user-facing messages (optional)
            page_resolver: PageResolver (optional, created from client)
            revision_fetcher: RevisionFetcher (optional, created from client)
            conflict_detector: ConflictDetector (optional)
        """
        self.config = config
        self.client = client
        self.repository = repository
        self.output_handler = output_handler or OutputHandler()
        self.page_resolver = page_resolver or PageResolver(client, self.output_handler)
        self.revision_fetcher = revision_fetcher or RevisionFetcher(client)
        self.state = SyncState()
        self.translator = DiffTranslator(
            client,
            repository,
            conflict_detector or ConflictDetector(),
            self.state.base_timestamps,
            output=self.output_handler,
        )
        self.pushed_any = False

    def push_refspec(self, refspec: str) -> PushOutcome:
        """Parse and push one ``[+]<local>:<remote>`` refspec.

        Raises:
            ProtocolError: If the refspec cannot be parsed
            UnsupportedOperationError: For a deletion or a target other than master
        """
        match = REFSPEC_PATTERN.match(refspec)
        if match is None:
            raise ProtocolError("invalid refspec", line=refspec)
        force, local, remote = match.groups()

        if force:
            self.output_handler.warning("Warning: forced push not allowed on a MediaWiki.")
        if not local:
            raise UnsupportedOperationError(
                remote, "cannot delete", "Cannot delete a branch on a MediaWiki"
            )
        if remote != MASTER_REF:
            raise UnsupportedOperationError(
                remote,
                "only master allowed",
                "Only push to the branch 'master' is supported on a MediaWiki",
            )
        return self.push(local, remote)

    def push(self, local: str, remote: str) -> PushOutcome:
        """Push a local ref onto the wiki.

        Returns:
            PushOutcome; conflicts and divergence are reported as a
            non-fast-forward error rather than raised
        """
        try:
            pushed = self._push(local)
        except NonFastForwardError as e:
            logger.info(str(e))
            self.output_handler.warning(f"Warning: {e.reason}")
            return PushOutcome(remote, ok=False, reason=NON_FAST_FORWARD_REPLY)
        return PushOutcome(remote, ok=True, pushed_commits=pushed)

    def _push(self, local: str) -> List[str]:
        self.state.last_local_revision_id = read_last_imported_revision(
            self.repository, self.config.remote_name
        )
        self.state.last_remote_revision_id = self._last_remote_revision()
        last_local = self.state.last_local_revision_id
        last_remote = self.state.last_remote_revision_id
        logger.debug(f"Last local revision #{last_local}, last remote revision #{last_remote}")

        if last_local > 0 and last_local < last_remote:
            raise NonFastForwardError(
                f"wiki is at revision #{last_local + 1} or later, "
                f"last imported revision is #{last_local}; fetch first"
            )

        head = self.repository.rev_parse(local)
        if head is None:
            raise GitRepositoryError(
                repo_path=self.repository.repo_path,
                message=f"cannot resolve {local} to a commit",
            )
        synced = self._synchronized_commit()
        if head == synced:
            logger.info(f"{local} is already on the wiki")
            return []

        plan = self._plan(head, synced, last_local)
        return self._replay(plan)

    def _synchronized_commit(self) -> Optional[str]:
        """Commit last known to match the wiki.

        That is the remote-tracking branch, or the import ref when the
        remote-tracking branch was never written.
        """
        tracking = self.repository.rev_parse(f"refs/remotes/{self.config.remote_name}/master")
        if tracking is not None:
            return tracking
        return self.repository.rev_parse(content_ref(self.config.remote_name))

    def _plan(self, head: str, synced: Optional[str], last_local: int) -> List[CommitPlanEntry]:
        if last_local > 0 and synced is not None:
            path = self.repository.find_path(synced, head)
            if path is None:
                raise NonFastForwardError("local history does not descend from the last pushed commit")
            return path

        self.output_handler.warning("Warning: no common ancestor, pushing complete history")
        return self.repository.first_parent_pairs(head)

    def _replay(self, plan: List[CommitPlanEntry]) -> List[str]:
        revision = self.state.last_remote_revision_id
        pushed: List[str] = []

        for step in plan:
            summary = self.repository.commit_summary(step.commit_id)
            for entry in self.repository.diff_tree(step.child_commit_id, step.commit_id):
                result = self.translator.translate(entry, summary, base_revision_id=revision)
                if result.is_conflict:
                    raise NonFastForwardError(
                        f"edit conflict on {result.title or entry.path}; "
                        f"fetch and merge before pushing again"
                    )
                revision = result.new_revision_id
                self.pushed_any = True

            if not self.config.dumb_push:
                self.repository.notes_add(
                    notes_ref(self.config.remote_name), step.commit_id, note_text(revision)
                )
                self.repository.update_ref(
                    content_ref(self.config.remote_name),
                    step.commit_id,
                    message="Git-MediaWiki push",
                )
            pushed.append(step.commit_id)
            logger.info(f"Pushed commit {step.commit_id[:8]} as revision #{revision}")

        return pushed

    def _last_remote_revision(self) -> int:
        """Newest revision among the tracked pages; records base timestamps."""
        spec = TrackingSpec(
            explicit_titles=set(self.config.pages),
            categories=set(self.config.categories),
        )
        last = 0
        for page in self.page_resolver.resolve(spec).values():
            latest = self.revision_fetcher.fetch_latest_revision(page)
            if latest is None:
                continue
            revision_id, timestamp = latest
            if timestamp:
                self.state.base_timestamps[revision_id] = timestamp
            last = max(last, revision_id)
        return last
