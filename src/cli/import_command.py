"""Import command orchestration for the remote helper.

This module provides the ImportCommand class that answers git's ``import``
requests: it works out where the previous import stopped, discovers the
newer revisions of the tracked pages and streams them to git fast-import.
"""

import logging
from typing import BinaryIO, List, Optional

from src.cli.models import FetchStrategy, RemoteConfig
from src.cli.output import OutputHandler
from src.git_integration.fast_import import FastImportWriter
from src.git_integration.git_repository import GitRepository
from src.git_integration.import_stream import ImportStreamBuilder, read_last_imported_revision
from src.mediawiki_client.api_wrapper import MediaWikiClient
from src.models.wiki_page import TrackingSpec
from src.page_operations.page_resolver import PageResolver
from src.page_operations.revision_fetcher import RevisionFetcher

logger = logging.getLogger(__name__)


class ImportCommand:
    """Orchestrates one batch of ``import`` requests.

    The import workflow:
        1. Read the revision id noted on the last imported commit
        2. Resolve the tracked pages
        3. Discover newer revisions (per page, or wiki-wide with by_rev)
        4. Emit them as content and note commits, oldest first
        5. Terminate the stream with ``done``

    Example:
        >>> command = ImportCommand(config, client, repo, sys.stdout.buffer, OutputHandler())
        >>> command.run(["refs/heads/master"])
    """

    def __init__(
        self,
        config: RemoteConfig,
        client: MediaWikiClient,
        repository: GitRepository,
        stream: BinaryIO,
        output_handler: Optional[OutputHandler] = None,
        page_resolver: Optional[PageResolver] = None,
        revision_fetcher: Optional[RevisionFetcher] = None,
    ):
        """Initialize import command with dependencies.

        Args:
            config: Remote configuration
            client: Wiki session
            repository: Local repository
            stream: Binary stream read by git fast-import (stdout)
            output_handler: OutputHandler for user-facing messages (optional)
            page_resolver: PageResolver (optional, created from client)
            revision_fetcher: RevisionFetcher (optional, created from client)
        """
        self.config = config
        self.client = client
        self.repository = repository
        self.output_handler = output_handler or OutputHandler()
        self.page_resolver = page_resolver or PageResolver(client, self.output_handler)
        self.revision_fetcher = revision_fetcher or RevisionFetcher(client, shallow=config.shallow)
        self.writer = FastImportWriter(stream)

    def run(self, refs: List[str]) -> int:
        """Import every requested ref and terminate the stream.

        Returns:
            Number of revisions imported
        """
        imported = 0
        for ref in refs:
            imported += self.import_ref(ref)
        self.writer.done()
        return imported

    def import_ref(self, ref: str) -> int:
        """Import new revisions for one ref.

        ``HEAD`` is a symbolic ref to master (see the ``list`` answer), so it
        needs no work of its own.

        Returns:
            Number of revisions imported
        """
        if ref == 'HEAD':
            return 0

        self.output_handler.print("Searching revisions...")
        last_local = read_last_imported_revision(self.repository, self.config.remote_name)
        full_import = last_local == 0
        if full_import:
            self.output_handler.print("No previous mediawiki revision found, fetching from beginning.")
        else:
            self.output_handler.print(
                f"Last local mediawiki revision found is {last_local}, fetching from here."
            )

        spec = TrackingSpec(
            explicit_titles=set(self.config.pages),
            categories=set(self.config.categories),
        )
        pages = self.page_resolver.resolve(spec)

        if self.config.fetch_strategy is FetchStrategy.BY_REV:
            last_remote = self.revision_fetcher.fetch_last_global_revision_id()
            revision_ids = list(range(last_local + 1, last_remote + 1))
        else:
            refs = self.revision_fetcher.fetch_all(pages.values(), last_local)
            revision_ids = [revision.revision_id for revision in refs]
        message = f"{len(revision_ids)} candidate revision(s) after #{last_local} for {len(pages)} page(s)"
        logger.info(message)
        self.output_handler.info(message)

        builder = ImportStreamBuilder(
            self.revision_fetcher,
            self.writer,
            self.config.remote_name,
            self.client.wiki_host,
            output=self.output_handler,
        )
        count = builder.build(
            revision_ids,
            tracked_page_ids={page.page_id for page in pages.values()},
            full_import=full_import,
        )

        if full_import and count == 0 and pages:
            # git reports the missing HEAD itself; the clone is still usable
            self.output_handler.warning("You appear to have cloned an empty MediaWiki.")
        else:
            self.output_handler.print_import_summary(count, builder.last_revision_id)
        return count
