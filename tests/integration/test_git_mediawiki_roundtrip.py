"""Integration tests running the import and push paths against real git.

The wiki is the in-memory FakeWiki; the repository is a throwaway git
repository, and the import stream is fed to ``git fast-import`` exactly as
git does during a clone or fetch.
"""

import io
import shutil

import pytest

from src.cli.import_command import ImportCommand
from src.cli.models import RemoteConfig
from src.cli.push_command import PushPlanner
from src.git_integration.git_repository import GitRepository
from src.git_integration.import_stream import read_last_imported_revision
from tests.fixtures.fake_wiki import FakeWiki
from tests.helpers.git_test_utils import (
    cleanup_git_repo,
    create_temp_git_repo,
    create_test_commit,
    run_git,
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed"),
]

CONTENT_REF = "refs/mediawiki/origin/master"


@pytest.fixture
def repo_path():
    path = create_temp_git_repo()
    yield path
    cleanup_git_repo(path)


@pytest.fixture
def wiki():
    wiki = FakeWiki()
    wiki.add_page("A", page_id=1)
    wiki.add_page("B", page_id=2)
    wiki.add_revision("A", "A v1", revision_id=10, user="Alice", comment="Create A")
    wiki.add_revision("B", "B v1", revision_id=11, user="Bob", comment="Create B")
    wiki.add_revision("B", "B v2", revision_id=15, user="Bob", comment="Expand B")
    return wiki


@pytest.fixture
def config():
    return RemoteConfig(remote_name="origin", url="https://wiki.example.org/w", pages={"A", "B"})


def fetch(wiki, repository, config, repo_path):
    """Run one import and feed the stream to git fast-import."""
    stream = io.BytesIO()
    count = ImportCommand(config, wiki, repository, stream).run(["refs/heads/master"])
    run_git(repo_path, ["fast-import", "--quiet"], stdin=stream.getvalue())
    return count


def checkout_import(repo_path):
    """Do what git does after a clone: track and check out the imported history."""
    run_git(repo_path, ["update-ref", "refs/remotes/origin/master", CONTENT_REF])
    run_git(repo_path, ["checkout", "--quiet", "-B", "master", CONTENT_REF])


class TestGitRepositoryAgainstGit:
    """GitRepository plumbing against a real repository."""

    def test_history_walking_and_diffs(self, repo_path):
        repository = GitRepository(str(repo_path))
        c1 = create_test_commit(repo_path, "X.mw", "one\n", "First")
        c2 = create_test_commit(repo_path, "Y.mw", "two\n", "Second")
        c3 = create_test_commit(repo_path, "X.mw", None, "Third")

        assert repository.rev_parse("refs/heads/master") == c3
        assert repository.rev_parse("refs/heads/missing") is None
        assert [(p.child_commit_id, p.commit_id) for p in repository.find_path(c1, c3)] == [
            (c1, c2), (c2, c3),
        ]

        root_pair = repository.first_parent_pairs(c3)[0]
        root_diff = repository.diff_tree(root_pair.child_commit_id, root_pair.commit_id)
        assert [(e.path, e.is_creation) for e in root_diff] == [("X.mw", True)]

        deletion = repository.diff_tree(c2, c3)
        assert [(e.path, e.is_deletion) for e in deletion] == [("X.mw", True)]
        assert repository.commit_summary(c3) == "Third"

    def test_notes_and_config(self, repo_path):
        repository = GitRepository(str(repo_path))
        commit = create_test_commit(repo_path, "X.mw", "one\n", "First")
        run_git(repo_path, ["config", "--add", "remote.origin.pages", "A B"])
        run_git(repo_path, ["config", "--add", "remote.origin.pages", "C"])
        run_git(repo_path, ["config", "remote.origin.shallow", "yes"])

        repository.notes_add("refs/notes/origin/mediawiki", commit, "source_revision: 3")
        repository.notes_add("refs/notes/origin/mediawiki", commit, "source_revision: 4")

        assert repository.notes_show("refs/notes/origin/mediawiki", commit).strip() == "source_revision: 4"
        assert repository.config_get_all("remote.origin.pages") == ["A B", "C"]
        assert repository.config_get_bool("remote.origin.shallow") is True
        assert repository.config_get_bool("remote.origin.dumbPush") is None


class TestImport:
    """Import streams accepted by git fast-import."""

    def test_clone_then_fetch(self, wiki, config, repo_path):
        repository = GitRepository(str(repo_path))

        assert fetch(wiki, repository, config, repo_path) == 3
        assert read_last_imported_revision(repository, "origin") == 15
        log = run_git(repo_path, ["log", "--format=%s|%an", CONTENT_REF]).splitlines()
        assert log == ["Expand B|Bob", "Create B|Bob", "Create A|Alice"]
        assert run_git(repo_path, ["show", f"{CONTENT_REF}:B.mw"]) == "B v2\n"

        assert fetch(wiki, repository, config, repo_path) == 0

        wiki.add_revision("A", "A v2", revision_id=16, comment="Update A")
        assert fetch(wiki, repository, config, repo_path) == 1
        assert read_last_imported_revision(repository, "origin") == 16
        assert len(run_git(repo_path, ["rev-list", CONTENT_REF]).split()) == 4


class TestPush:
    """Pushing commits made on top of an import."""

    def test_push_then_fetch_again(self, wiki, config, repo_path):
        repository = GitRepository(str(repo_path))
        fetch(wiki, repository, config, repo_path)
        checkout_import(repo_path)
        x = create_test_commit(repo_path, "A.mw", "A local\n", "Edit A")
        y = create_test_commit(repo_path, "B.mw", "B local\n", "Edit B")

        outcome = PushPlanner(config, wiki, repository).push_refspec("refs/heads/master:refs/heads/master")

        assert outcome.protocol_line() == "ok refs/heads/master"
        assert outcome.pushed_commits == [x, y]
        assert wiki.latest_content("A") == "A local\n"
        assert wiki.latest_content("B") == "B local\n"
        assert repository.rev_parse(CONTENT_REF) == y
        assert read_last_imported_revision(repository, "origin") == 17

        # The pushed revisions are already known locally
        assert fetch(wiki, repository, config, repo_path) == 0

    def test_push_rejected_when_wiki_moved(self, wiki, config, repo_path):
        repository = GitRepository(str(repo_path))
        fetch(wiki, repository, config, repo_path)
        checkout_import(repo_path)
        create_test_commit(repo_path, "A.mw", "A local\n", "Edit A")
        wiki.add_revision("B", "B remote", revision_id=16)

        outcome = PushPlanner(config, wiki, repository).push("refs/heads/master", "refs/heads/master")

        assert outcome.protocol_line() == 'error refs/heads/master "non-fast-forward"'
        assert wiki.edits == []
