"""Unit tests for git_integration.import_stream module."""

import io
import re
from unittest.mock import MagicMock

import pytest

from src.content_converter.wikitext_normalizer import DELETED_CONTENT, EMPTY_MESSAGE
from src.git_integration.fast_import import FastImportWriter
from src.git_integration.import_stream import (
    ANONYMOUS,
    ImportStreamBuilder,
    note_text,
    parse_note,
    read_last_imported_revision,
)
from src.models.wiki_page import Revision
from src.page_operations.revision_fetcher import RevisionFetcher
from tests.fixtures.fake_wiki import FakeWiki


@pytest.fixture
def wiki():
    """Pages A: [10] and B: [11, 15]."""
    wiki = FakeWiki()
    wiki.add_page("A", page_id=1)
    wiki.add_page("B", page_id=2)
    wiki.add_revision("A", "A v1", revision_id=10, user="Alice", comment="Create A")
    wiki.add_revision("B", "B v1", revision_id=11, user="Bob", comment="Create B")
    wiki.add_revision("B", "B v2", revision_id=15, user="Bob", comment="")
    return wiki


def build(wiki, revision_ids, tracked=frozenset({1, 2}), full_import=True):
    stream = io.BytesIO()
    builder = ImportStreamBuilder(
        RevisionFetcher(wiki),
        FastImportWriter(stream),
        "origin",
        wiki.wiki_host,
    )
    count = builder.build(revision_ids, tracked_page_ids=tracked, full_import=full_import)
    return builder, count, stream.getvalue().decode('utf-8')


class TestNotes:
    """Test cases for provenance note text."""

    def test_note_text(self):
        assert note_text(15) == "source_revision: 15"

    def test_parse_note(self):
        assert parse_note("source_revision: 15\n") == 15

    @pytest.mark.parametrize("note", [None, "", "something else", "source_revision: abc"])
    def test_parse_foreign_note(self, note):
        assert parse_note(note) == 0


class TestImportStreamBuilder:
    """Test cases for fast-import stream generation."""

    def test_clone_emits_revisions_in_order(self, wiki):
        builder, count, text = build(wiki, [15, 10, 11])

        assert count == 3
        assert builder.last_revision_id == 15
        content_commits = re.findall(r'commit refs/mediawiki/origin/master\nmark :(\d+)', text)
        assert content_commits == ["1", "2", "3"]
        notes = re.findall(r'source_revision: (\d+)', text)
        assert notes == ["10", "11", "15"]
        paths = re.findall(r'M 644 inline "([^"]+)"', text)
        assert paths == ["A.mw", "B.mw", "B.mw"]

    def test_each_content_commit_followed_by_note_commit(self, wiki):
        _, _, text = build(wiki, [10, 11, 15])

        refs = re.findall(r'^commit (\S+)$', text, flags=re.MULTILINE)
        assert refs == [
            "refs/mediawiki/origin/master", "refs/notes/origin/mediawiki",
        ] * 3
        for mark in ("1", "2", "3"):
            assert f"N inline :{mark}\n" in text

    def test_clone_starts_fresh_refs(self, wiki):
        _, _, text = build(wiki, [10, 11, 15])

        assert "from " not in text
        assert text.count("reset refs/notes/origin/mediawiki\n") == 1

    def test_fetch_chains_onto_existing_refs(self, wiki):
        _, _, text = build(wiki, [15], full_import=False)

        assert "from refs/mediawiki/origin/master^0\n" in text
        assert "from refs/notes/origin/mediawiki^0\n" in text
        assert "reset" not in text

    def test_committer_identity_and_message(self, wiki):
        _, _, text = build(wiki, [10, 15])

        assert "committer Alice <Alice@wiki.example.org> 1704067210 +0000\n" in text
        assert f"data {len(EMPTY_MESSAGE)}\n{EMPTY_MESSAGE}\n" in text

    def test_untracked_pages_skipped(self, wiki):
        builder, count, text = build(wiki, [10, 11, 15], tracked=frozenset({1}))

        assert count == 1
        assert builder.last_revision_id == 10
        assert "B.mw" not in text

    def test_skipped_revisions_reported_as_debug(self, wiki):
        output = MagicMock()
        builder = ImportStreamBuilder(
            RevisionFetcher(wiki), FastImportWriter(io.BytesIO()), "origin", wiki.wiki_host, output=output,
        )

        builder.build([10, 11], tracked_page_ids={1}, full_import=True)

        output.debug.assert_called_once_with("2/2: skipping revision #11 of B")
        output.print.assert_called_once_with("1/2: Revision #10 of A")

    def test_deleted_content_removes_file(self, wiki):
        wiki.add_revision("A", DELETED_CONTENT, revision_id=20)

        _, _, text = build(wiki, [20])

        assert 'D "A.mw"\n' in text
        assert "M 644" not in text

    def test_vanished_revision_skipped(self, wiki):
        _, count, _ = build(wiki, [10, 12])
        assert count == 1

    def test_nothing_to_import(self, wiki):
        builder, count, text = build(wiki, [])

        assert count == 0
        assert builder.last_revision_id == 0
        assert text == ""

    def test_missing_author_and_timestamp_fallbacks(self):
        revisions = {
            1: Revision(1, 1, "A", timestamp=None, author=None, comment="one", content="a"),
            2: Revision(1, 2, "A", timestamp=None, author=None, comment="two", content="b"),
            3: Revision(1, 3, "A", timestamp="2024-01-01T00:00:00Z", author="Alice", comment="three", content="c"),
            4: Revision(1, 4, "A", timestamp=None, author=None, comment="four", content="d"),
        }
        fetcher = MagicMock()
        fetcher.fetch_revision.side_effect = revisions.get
        stream = io.BytesIO()
        builder = ImportStreamBuilder(fetcher, FastImportWriter(stream), "origin", "wiki.example.org")

        assert builder.build([1, 2, 3, 4], tracked_page_ids={1}, full_import=True) == 4

        committers = re.findall(r"^committer (.*)$", stream.getvalue().decode("utf-8"), re.MULTILINE)
        # Each revision yields a content commit and a note commit with the same identity
        assert committers[::2] == [
            f"{ANONYMOUS} <{ANONYMOUS}@wiki.example.org> 1 +0000",
            f"{ANONYMOUS} <{ANONYMOUS}@wiki.example.org> 2 +0000",
            "Alice <Alice@wiki.example.org> 1704067200 +0000",
            f"{ANONYMOUS} <{ANONYMOUS}@wiki.example.org> 1704067201 +0000",
        ]
        assert committers[1::2] == committers[::2]


class TestReadLastImportedRevision:
    """Test cases for the import watermark."""

    def test_never_imported(self):
        repository = MagicMock()
        repository.rev_parse.return_value = None

        assert read_last_imported_revision(repository, "origin") == 0
        repository.rev_parse.assert_called_once_with("refs/mediawiki/origin/master")

    def test_reads_note_of_import_head(self):
        repository = MagicMock()
        repository.rev_parse.return_value = "abc"
        repository.notes_show.return_value = "source_revision: 42\n"

        assert read_last_imported_revision(repository, "origin") == 42
        repository.notes_show.assert_called_once_with("refs/notes/origin/mediawiki", "abc")
