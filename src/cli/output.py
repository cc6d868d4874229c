"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all user-facing output of
the remote helper. stdout belongs to the protocol spoken with git, so every
message is printed on stderr, where git passes it through to the user.
"""

from rich.console import Console
from rich.markup import escape


class OutputHandler:
    """Handles all user-facing terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=normal, 1=info, 2=debug)
        console: Rich Console bound to stderr

    Example:
        >>> handler = OutputHandler(verbosity=1)
        >>> handler.warning("Page Foo not found on wiki")
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=normal, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            stderr=True,
            no_color=no_color,
            highlight=False,
            soft_wrap=True,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(message, style="yellow", markup=False)

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message, markup=False)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(message, style="dim", markup=False)

    def print(self, message: str) -> None:
        """Display message without formatting.

        Page titles may contain square brackets, so markup is disabled.
        """
        self.console.print(message, markup=False)

    def print_import_summary(self, imported_count: int, last_revision_id: int) -> None:
        """Display the outcome of an import."""
        if imported_count == 0:
            self.print("No new revisions to import.")
        else:
            self.success(
                f"Imported {imported_count} revision(s), up to revision #{last_revision_id}"
            )

    def print_dumb_push_notice(self) -> None:
        """Explain the follow-up a dumb push requires."""
        self.print("Just pushed some revisions to MediaWiki.")
        self.print("The pushed revisions now have to be re-imported, and your current branch")
        self.print("needs to be updated with these re-imported commits. You can do this with")
        self.print("")
        self.print("  git pull --rebase")
        self.print("")
