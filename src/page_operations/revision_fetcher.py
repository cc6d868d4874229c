"""Revision discovery and retrieval for tracked pages.

Discovery only collects revision ids, page by page and batch by batch, so a
large history costs a few cheap queries; full revision text is fetched one
revision at a time by the import stream, in the order it is written.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from src.mediawiki_client.api_wrapper import MediaWikiClient
from src.mediawiki_client.errors import MalformedResponseError
from src.models.wiki_page import Page, Revision, RevisionRef

logger = logging.getLogger(__name__)

# Revisions requested per query, the API maximum for normal users
PAGE_SIZE = 500


def _page_block(query: Dict[str, Any], page_id: int, operation: str) -> Dict[str, Any]:
    """Extract one page's entry from a ``query.pages`` object."""
    pages = query.get('pages')
    if not isinstance(pages, dict):
        raise MalformedResponseError(operation, "'pages' is missing")
    page = pages.get(str(page_id), pages.get(page_id))
    if page is None:
        raise MalformedResponseError(operation, f"page {page_id} missing from response")
    return page


def _revision_content(revision: Dict[str, Any]) -> str:
    """Read revision text from either the slots layout or the legacy one."""
    slots = revision.get('slots')
    if isinstance(slots, dict) and isinstance(slots.get('main'), dict):
        return slots['main'].get('*', slots['main'].get('content', ''))
    return revision.get('*', revision.get('content', ''))


class RevisionFetcher:
    """Finds and fetches revisions of tracked pages.

    Example:
        >>> fetcher = RevisionFetcher(client, shallow=False)
        >>> refs = fetcher.fetch_revision_ids(Page("Main Page", 1), since_revision_id=41)
        >>> revision = fetcher.fetch_revision(refs[0].revision_id)
    """

    def __init__(self, client: MediaWikiClient, shallow: bool = False, page_size: int = PAGE_SIZE):
        """Initialize the fetcher.

        Args:
            client: Wiki session
            shallow: Keep only the newest revision of each page
            page_size: Revisions requested per query
        """
        self.client = client
        self.shallow = shallow
        self.page_size = page_size

    def fetch_revision_ids(self, page: Page, since_revision_id: int) -> List[RevisionRef]:
        """List revisions of one page newer than ``since_revision_id``.

        Follows continuation until the history is exhausted. In shallow mode
        only the highest revision id survives.

        Args:
            page: Page to inspect
            since_revision_id: Exclusive lower bound

        Returns:
            Revision refs in ascending id order
        """
        refs: List[RevisionRef] = []
        batches = self.client.query_continued(
            prop='revisions',
            rvprop='ids',
            rvdir='newer',
            rvstartid=since_revision_id + 1,
            rvlimit=self.page_size,
            pageids=page.page_id,
        )
        for query in batches:
            block = _page_block(query, page.page_id, f"revisions of {page.title}")
            for revision in block.get('revisions', []):
                revision_id = int(revision['revid'])
                if revision_id > since_revision_id:
                    refs.append(RevisionRef(revision_id=revision_id, page_id=page.page_id))

        refs.sort()
        if self.shallow and refs:
            logger.info(f"{page.title}: found 1 revision (shallow import)")
            return [refs[-1]]

        logger.info(f"{page.title}: found {len(refs)} revision(s)")
        return refs

    def fetch_all(self, pages: Iterable[Page], since_revision_id: int) -> List[RevisionRef]:
        """Merge the new revisions of every page into one ascending list."""
        merged = set()
        for page in pages:
            merged.update(self.fetch_revision_ids(page, since_revision_id))
        return sorted(merged)

    def fetch_revision(self, revision_id: int) -> Optional[Revision]:
        """Fetch content and metadata of one revision.

        Returns:
            The revision, or None if the wiki reports the id as bad
            (deleted or suppressed since discovery)

        Raises:
            MalformedResponseError: If the response lacks the page or revision
        """
        operation = f"revision {revision_id}"
        query = self.client.query(
            prop='revisions',
            rvprop='content|timestamp|comment|user|ids',
            rvslots='main',
            revids=revision_id,
        )

        badrevids = query.get('badrevids') or {}
        if str(revision_id) in badrevids or revision_id in badrevids:
            logger.warning(f"Revision {revision_id} no longer exists on the wiki, skipping")
            return None

        pages = query.get('pages')
        if not isinstance(pages, dict) or not pages:
            raise MalformedResponseError(operation, "'pages' is missing")
        page = next(iter(pages.values()))
        revisions = page.get('revisions')
        if not revisions:
            raise MalformedResponseError(operation, "no revision data returned")
        revision = revisions[0]

        return Revision(
            page_id=int(page['pageid']),
            revision_id=int(revision.get('revid', revision_id)),
            title=page['title'],
            timestamp=revision.get('timestamp'),
            author=revision.get('user') or None,
            comment=revision.get('comment') or '',
            content=_revision_content(revision),
        )

    def fetch_latest_revision(self, page: Page) -> Optional[Tuple[int, str]]:
        """Return ``(revision_id, timestamp)`` of a page's newest revision."""
        query = self.client.query(
            prop='revisions',
            rvprop='ids|timestamp',
            pageids=page.page_id,
        )
        block = _page_block(query, page.page_id, f"last revision of {page.title}")
        revisions = block.get('revisions')
        if not revisions:
            return None
        latest = revisions[0]
        return int(latest['revid']), latest.get('timestamp')

    def fetch_last_global_revision_id(self) -> int:
        """Return the newest revision id of the whole wiki (0 if unknown)."""
        query = self.client.query(list='recentchanges', rcprop='ids', rclimit=1)
        changes = query.get('recentchanges')
        if not isinstance(changes, list):
            raise MalformedResponseError('recentchanges', "'recentchanges' is missing")
        if not changes:
            return 0
        return int(changes[0].get('revid', 0))


def parse_timestamp(timestamp: str) -> int:
    """Convert a MediaWiki ISO 8601 timestamp to epoch seconds."""
    return int(datetime.fromisoformat(timestamp.replace('Z', '+00:00')).timestamp())
