"""Unit tests for page_operations.revision_fetcher module."""

from unittest.mock import MagicMock

import pytest

from src.mediawiki_client.errors import MalformedResponseError
from src.models.wiki_page import Page, RevisionRef
from src.page_operations.revision_fetcher import RevisionFetcher, parse_timestamp
from tests.fixtures.fake_wiki import FakeWiki


@pytest.fixture
def wiki():
    wiki = FakeWiki()
    wiki.add_page("A", page_id=1)
    wiki.add_page("B", page_id=2)
    return wiki


class TestFetchRevisionIds:
    """Test cases for revision discovery."""

    def test_pagination_is_transparent(self, wiki):
        for revision_id in range(1, 1201):
            wiki.add_revision("A" if revision_id % 3 else "B", f"r{revision_id}", revision_id=revision_id)
        page = Page("A", 1)

        paged = RevisionFetcher(wiki, page_size=7).fetch_revision_ids(page, 0)
        unbounded = RevisionFetcher(wiki, page_size=10_000).fetch_revision_ids(page, 0)

        assert paged == unbounded
        assert len(paged) == 800
        assert paged == sorted(paged)

    def test_only_revisions_after_watermark(self, wiki):
        for revision_id in (3, 5, 9):
            wiki.add_revision("A", "x", revision_id=revision_id)

        refs = RevisionFetcher(wiki).fetch_revision_ids(Page("A", 1), since_revision_id=5)

        assert refs == [RevisionRef(9, 1)]
        assert wiki.queries[-1]['rvstartid'] == 6
        assert wiki.queries[-1]['rvdir'] == 'newer'

    def test_shallow_keeps_latest(self, wiki):
        for revision_id in (3, 5, 9):
            wiki.add_revision("A", "x", revision_id=revision_id)

        refs = RevisionFetcher(wiki, shallow=True).fetch_revision_ids(Page("A", 1), 0)

        assert refs == [RevisionRef(9, 1)]

    def test_page_without_new_revisions(self, wiki):
        assert RevisionFetcher(wiki).fetch_revision_ids(Page("A", 1), 0) == []

    def test_fetch_all_merges_sorted(self, wiki):
        wiki.add_revision("A", "a", revision_id=10)
        wiki.add_revision("B", "b1", revision_id=11)
        wiki.add_revision("B", "b2", revision_id=15)

        refs = RevisionFetcher(wiki).fetch_all([Page("B", 2), Page("A", 1)], 0)

        assert [r.revision_id for r in refs] == [10, 11, 15]

    def test_missing_pages_block_is_malformed(self):
        client = MagicMock()
        client.query_continued.return_value = iter([{'normalized': []}])

        with pytest.raises(MalformedResponseError):
            RevisionFetcher(client).fetch_revision_ids(Page("A", 1), 0)


class TestFetchRevision:
    """Test cases for single revision retrieval."""

    def test_fetches_content_and_metadata(self, wiki):
        wiki.add_revision("A", "Hello", revision_id=10, user="Bob", comment="Start")

        revision = RevisionFetcher(wiki).fetch_revision(10)

        assert revision.title == "A"
        assert revision.page_id == 1
        assert revision.author == "Bob"
        assert revision.comment == "Start"
        assert revision.content == "Hello"
        assert revision.timestamp == "2024-01-01T00:00:10Z"

    def test_bad_revision_is_none(self, wiki):
        assert RevisionFetcher(wiki).fetch_revision(99) is None

    def test_legacy_content_layout(self):
        client = MagicMock()
        client.query.return_value = {'pages': {'1': {
            'pageid': 1,
            'title': 'A',
            'revisions': [{'revid': 4, 'user': '', 'comment': '', '*': 'legacy'}],
        }}}

        revision = RevisionFetcher(client).fetch_revision(4)

        assert revision.content == 'legacy'
        assert revision.author is None


class TestLatestRevisions:
    """Test cases for the remote watermark queries."""

    def test_latest_revision_of_page(self, wiki):
        wiki.add_revision("A", "a", revision_id=10)
        wiki.add_revision("A", "a2", revision_id=12)

        assert RevisionFetcher(wiki).fetch_latest_revision(Page("A", 1)) == (12, "2024-01-01T00:00:12Z")

    def test_latest_revision_of_empty_page(self, wiki):
        assert RevisionFetcher(wiki).fetch_latest_revision(Page("A", 1)) is None

    def test_last_global_revision(self, wiki):
        wiki.add_revision("A", "a", revision_id=10)
        wiki.add_revision("B", "b", revision_id=31)

        assert RevisionFetcher(wiki).fetch_last_global_revision_id() == 31

    def test_last_global_revision_of_empty_wiki(self, wiki):
        assert RevisionFetcher(wiki).fetch_last_global_revision_id() == 0


class TestParseTimestamp:

    def test_utc_timestamp(self):
        assert parse_timestamp("1970-01-01T00:01:40Z") == 100
