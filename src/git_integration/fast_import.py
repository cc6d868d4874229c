"""Writer for the git fast-import stream format.

Only the subset the remote helper emits is covered: commits with marks,
inline file modifications and deletions, inline notes and ref resets.
Lengths in ``data`` commands count UTF-8 bytes, so everything goes to a
binary stream.
"""

from typing import BinaryIO, Optional


def escape_path(path: str) -> str:
    """Quote a path for a fast-import ``M``/``D`` command."""
    path = path.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')
    return f'"{path}"'


class FastImportWriter:
    """Serializes fast-import commands onto a binary stream.

    Example:
        >>> writer = FastImportWriter(sys.stdout.buffer)
        >>> writer.commit("refs/mediawiki/origin/master", mark=1,
        ...               committer="Alice <Alice@wiki.example.org> 1700000000 +0000",
        ...               message="Fix typo")
        >>> writer.modify("Main_Page.mw", "Hello\\n")
        >>> writer.end_commit()
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def _write(self, text: str) -> None:
        self.stream.write(text.encode('utf-8'))

    def data(self, payload: str) -> None:
        """Emit a ``data`` command with an exact byte count."""
        raw = payload.encode('utf-8')
        self._write(f"data {len(raw)}\n")
        self.stream.write(raw)
        self._write("\n")

    def commit(
        self,
        ref: str,
        committer: str,
        message: str,
        mark: Optional[int] = None,
        from_ref: Optional[str] = None,
    ) -> None:
        """Start a commit; file commands follow, then :meth:`end_commit`."""
        self._write(f"commit {ref}\n")
        if mark is not None:
            self._write(f"mark :{mark}\n")
        self._write(f"committer {committer}\n")
        self.data(message)
        if from_ref:
            self._write(f"from {from_ref}\n")

    def modify(self, path: str, content: str, mode: str = "644") -> None:
        self._write(f"M {mode} inline {escape_path(path)}\n")
        self.data(content)

    def delete(self, path: str) -> None:
        self._write(f"D {escape_path(path)}\n")

    def note(self, mark: int, content: str) -> None:
        """Attach an inline note to the commit carrying ``mark``."""
        self._write(f"N inline :{mark}\n")
        self.data(content)

    def reset(self, ref: str) -> None:
        self._write(f"reset {ref}\n")

    def end_commit(self) -> None:
        self._write("\n")

    def done(self) -> None:
        self._write("done\n")
        self.stream.flush()
