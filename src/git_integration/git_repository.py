"""Git repository access for the MediaWiki remote helper.

This module provides the GitRepository class, the helper's only way to read
and write the local repository. It uses subprocess to execute git plumbing
commands and exposes the few capabilities the sync engine needs: ref and
note bookkeeping, configuration lookup, history walking, tree diffs and blob
reads.
"""

import logging
import os
import subprocess
from typing import Dict, List, Optional, Sequence

from src.git_integration.errors import GitRepositoryError
from src.git_integration.models import EMPTY_TREE_ID, CommitPlanEntry, DiffEntry

logger = logging.getLogger(__name__)

# Git command timeout in seconds
GIT_TIMEOUT = 60


class GitRepository:
    """Runs git commands against the repository the helper was invoked in.

    git starts remote helpers with the working directory and GIT_DIR already
    pointing at the repository, so the default path is the current
    directory.

    Refs used per remote:
        refs/mediawiki/<remote>/master   # imported wiki history
        refs/notes/<remote>/mediawiki    # source revision of each commit

    Example:
        >>> repo = GitRepository()
        >>> head = repo.rev_parse("refs/mediawiki/origin/master")
        >>> note = repo.notes_show("origin/mediawiki", head)
    """

    def __init__(self, repo_path: Optional[str] = None):
        """Initialize git repository wrapper.

        Args:
            repo_path: Path to the work tree or git dir (defaults to cwd)
        """
        self.repo_path = repo_path or os.getcwd()
        self._ensure_absolute_path()

    def _ensure_absolute_path(self) -> None:
        """Convert repo_path to absolute path if relative."""
        if not os.path.isabs(self.repo_path):
            self.repo_path = os.path.abspath(self.repo_path)

    def _run_git(
        self,
        args: Sequence[str],
        allowed_returncodes: Sequence[int] = (0,),
        binary: bool = False,
    ) -> subprocess.CompletedProcess:
        """Run one git command and return the completed process.

        Args:
            args: Arguments after "git"
            allowed_returncodes: Exit codes that are not failures
            binary: Return stdout as raw bytes instead of decoded text

        Raises:
            GitRepositoryError: If git is missing, times out or fails
        """
        command = ["git", *args]
        text_options = {} if binary else {"text": True, "encoding": "utf-8"}
        try:
            result = subprocess.run(
                command,
                cwd=self.repo_path,
                capture_output=True,
                timeout=GIT_TIMEOUT,
                **text_options,
            )
        except subprocess.TimeoutExpired:
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message=f"git {args[0]} timed out after {GIT_TIMEOUT} seconds",
            )
        except FileNotFoundError:
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message="Git command not found. Please install git.",
            )

        if result.returncode not in allowed_returncodes:
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message=f"git {' '.join(args[:2])} failed with exit code {result.returncode}",
                git_output=result.stderr.decode("utf-8", "replace") if binary else result.stderr,
            )
        return result

    def rev_parse(self, ref: str) -> Optional[str]:
        """Resolve a ref to a commit id.

        Returns:
            Full commit id, or None if the ref does not exist
        """
        result = self._run_git(
            ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            allowed_returncodes=(0, 1, 128),
        )
        sha = result.stdout.strip()
        if result.returncode != 0 or not sha:
            logger.debug(f"Ref {ref} does not resolve to a commit")
            return None
        return sha

    def config_get_all(self, key: str) -> List[str]:
        """Read every value of a multi-valued configuration key.

        Returns:
            Values in configuration order, empty when the key is unset
        """
        result = self._run_git(["config", "--get-all", key], allowed_returncodes=(0, 1))
        if result.returncode == 1:
            return []
        return [line for line in result.stdout.splitlines() if line]

    def config_get(self, key: str) -> Optional[str]:
        """Read the last value of a configuration key, None when unset."""
        values = self.config_get_all(key)
        return values[-1] if values else None

    def config_get_bool(self, key: str) -> Optional[bool]:
        """Read a boolean configuration key using git's boolean rules.

        Raises:
            GitRepositoryError: If the value is not a valid boolean
        """
        result = self._run_git(["config", "--bool", "--get", key], allowed_returncodes=(0, 1))
        if result.returncode == 1:
            return None
        return result.stdout.strip() == "true"

    def notes_show(self, notes_ref: str, object_id: str) -> Optional[str]:
        """Return the note attached to an object, or None if there is none."""
        result = self._run_git(
            ["notes", f"--ref={notes_ref}", "show", object_id],
            allowed_returncodes=(0, 1, 128),
        )
        if result.returncode != 0:
            return None
        return result.stdout

    def notes_add(self, notes_ref: str, object_id: str, message: str) -> None:
        """Attach (or overwrite) a note on an object."""
        self._run_git(["notes", f"--ref={notes_ref}", "add", "-f", "-m", message, object_id])
        logger.debug(f"Noted {object_id[:8]} on {notes_ref}: {message}")

    def update_ref(
        self,
        ref: str,
        new_id: str,
        old_id: Optional[str] = None,
        message: str = "git-remote-mediawiki",
    ) -> None:
        """Point a ref at a commit, optionally checking its previous value."""
        args = ["update-ref", "-m", message, ref, new_id]
        if old_id:
            args.append(old_id)
        self._run_git(args)
        logger.debug(f"Updated {ref} to {new_id[:8]}")

    def children_map(self, head: str, exclude: str) -> Dict[str, str]:
        """Map each commit between ``exclude`` and ``head`` to one of its children.

        Uses ``git rev-list --boundary --parents head ^exclude``; boundary
        commits are included as parents so the walk can start at ``exclude``.
        """
        result = self._run_git(["rev-list", "--boundary", "--parents", head, f"^{exclude}"])
        children: Dict[str, str] = {}
        for line in result.stdout.splitlines():
            ids = line.lstrip("-").split()
            if not ids:
                continue
            child, parents = ids[0], ids[1:]
            for parent in parents:
                children[parent] = child
        return children

    def find_path(self, start: str, head: str) -> Optional[List[CommitPlanEntry]]:
        """Walk child pointers from ``start`` forward to ``head``.

        Returns:
            Steps in replay order, or None if ``head`` is not reachable
            forward from ``start`` (the history was rewritten)
        """
        children = self.children_map(head, start)
        path: List[CommitPlanEntry] = []
        current = start
        while current != head:
            child = children.get(current)
            if child is None:
                logger.info(f"No path in history from {start[:8]} to {head[:8]}")
                return None
            path.append(CommitPlanEntry(child_commit_id=current, commit_id=child))
            current = child
        return path

    def first_parent_pairs(self, head: str) -> List[CommitPlanEntry]:
        """Linearize the whole first-parent history of ``head``, oldest first.

        The root commit is paired with the empty tree so the files it
        introduces are part of the plan.
        """
        result = self._run_git(["rev-list", "--first-parent", "--reverse", head])
        commits = result.stdout.split()
        pairs: List[CommitPlanEntry] = []
        previous = EMPTY_TREE_ID
        for commit in commits:
            pairs.append(CommitPlanEntry(child_commit_id=previous, commit_id=commit))
            previous = commit
        return pairs

    def diff_tree(self, old: str, new: str) -> List[DiffEntry]:
        """List the paths that differ between two commits or trees.

        Parses ``git diff-tree -r --raw -z --no-renames`` output, which
        alternates metadata and path fields separated by NUL bytes.
        """
        result = self._run_git(["diff-tree", "-r", "--raw", "-z", "--no-renames", old, new])
        fields = result.stdout.split("\0")
        entries: List[DiffEntry] = []
        index = 0
        while index + 1 < len(fields):
            info, path = fields[index], fields[index + 1]
            index += 2
            metadata = info.lstrip(":").split()
            if len(metadata) != 5:
                raise GitRepositoryError(
                    repo_path=self.repo_path,
                    message=f"Unexpected output from git diff-tree: {info!r}",
                )
            old_mode, new_mode, old_blob, new_blob, status = metadata
            entries.append(DiffEntry(old_mode, new_mode, old_blob, new_blob, status, path))
        return entries

    def commit_summary(self, commit: str) -> str:
        """Return the first line of a commit message."""
        result = self._run_git(["show", "-s", "--format=%s", commit])
        return result.stdout.rstrip("\n")

    def cat_blob(self, blob_id: str) -> str:
        """Return the content of a blob as text, line endings untouched.

        Raises:
            GitRepositoryError: If the blob is not valid UTF-8
        """
        data = self._run_git(["cat-file", "blob", blob_id], binary=True).stdout
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message=f"blob {blob_id} is not valid UTF-8 text: {e.reason} at byte {e.start}",
            ) from e
