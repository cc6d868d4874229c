"""Resolution of the set of wiki pages a remote tracks.

A remote follows explicit titles, whole categories, or (with neither
configured) every page of the wiki. Whatever the source, the result is one
mapping from title to Page, so a page listed twice is fetched once.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from src.mediawiki_client.api_wrapper import MediaWikiClient
from src.mediawiki_client.errors import MalformedResponseError
from src.models.wiki_page import Page, TrackingSpec

if TYPE_CHECKING:
    from src.cli.output import OutputHandler

logger = logging.getLogger(__name__)

# Titles per lookup, the API limit for normal users
TITLE_BATCH_SIZE = 50

# Pages per allpages request
ALLPAGES_BATCH_SIZE = 500

CATEGORY_PREFIX = 'Category:'


def normalize_category(category: str) -> str:
    """Prefix a category name with its namespace unless it already has one."""
    if ':' in category:
        return category
    return f"{CATEGORY_PREFIX}{category}"


class PageResolver:
    """Builds the title → Page mapping for one run.

    Example:
        >>> resolver = PageResolver(client)
        >>> pages = resolver.resolve(TrackingSpec(categories={"Howto"}))
        >>> sorted(pages)
        ['Install', 'Upgrade']
    """

    def __init__(self, client: MediaWikiClient, output: Optional["OutputHandler"] = None):
        """Initialize the resolver.

        Args:
            client: Wiki session
            output: Where user-facing warnings go (optional)
        """
        self.client = client
        self.output = output

    def resolve(self, spec: TrackingSpec) -> Dict[str, Page]:
        """Resolve a tracking specification into the pages to synchronize.

        Raises:
            NetworkError: If the wiki is unreachable or answers malformed data
        """
        pages: Dict[str, Page] = {}
        if spec.explicit_titles:
            pages.update(self._resolve_titles(sorted(spec.explicit_titles)))
        if spec.categories:
            for category in sorted(spec.categories):
                pages.update(self._resolve_category(category))
        if not spec.explicit_titles and not spec.categories:
            pages.update(self._resolve_all_pages())

        logger.info(f"Tracking {len(pages)} page(s)")
        return pages

    def _resolve_titles(self, titles: List[str]) -> Dict[str, Page]:
        pages: Dict[str, Page] = {}
        for start in range(0, len(titles), TITLE_BATCH_SIZE):
            batch = titles[start:start + TITLE_BATCH_SIZE]
            for page_key, page in self.client.get_pages_by_titles(batch).items():
                title = page.get('title') if isinstance(page, dict) else None
                if not title:
                    raise MalformedResponseError('title lookup', f"entry {page_key} has no title")
                page_id = int(page.get('pageid', page_key))
                if page_id < 0 or 'missing' in page or 'invalid' in page:
                    self._warn(f"Warning: page {title} not found on wiki")
                    continue
                pages[title] = Page(title=title, page_id=page_id)
        return pages

    def _resolve_category(self, category: str) -> Dict[str, Page]:
        category = normalize_category(category)
        pages: Dict[str, Page] = {}
        batches = self.client.query_continued(
            list='categorymembers',
            cmtitle=category,
            cmlimit='max',
        )
        for query in batches:
            members = query.get('categorymembers')
            if not isinstance(members, list):
                raise MalformedResponseError(f"members of {category}", "'categorymembers' is missing")
            for member in members:
                pages[member['title']] = Page(title=member['title'], page_id=int(member['pageid']))
        logger.debug(f"{category}: {len(pages)} member(s)")
        return pages

    def _resolve_all_pages(self) -> Dict[str, Page]:
        pages: Dict[str, Page] = {}
        batches = self.client.query_continued(list='allpages', aplimit=ALLPAGES_BATCH_SIZE)
        for query in batches:
            listing = query.get('allpages')
            if not isinstance(listing, list):
                raise MalformedResponseError('allpages', "'allpages' is missing")
            for entry in listing:
                pages[entry['title']] = Page(title=entry['title'], page_id=int(entry['pageid']))
        return pages

    def _warn(self, message: str) -> None:
        logger.warning(message)
        if self.output is not None:
            self.output.warning(message)
