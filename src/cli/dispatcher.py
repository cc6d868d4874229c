"""Remote-helper protocol loop.

git talks to the helper one command per line on stdin and reads the answers
from stdout. ``import`` and ``push`` come in batches closed by a blank line;
a blank line outside a batch ends the session.
"""

import logging
from typing import BinaryIO, List, Optional, TextIO

from src.cli.errors import ConfigError, ProtocolError, UnsupportedOperationError
from src.cli.import_command import ImportCommand
from src.cli.models import PushOutcome, ProtocolCommand, RemoteConfig
from src.cli.output import OutputHandler
from src.cli.push_command import MASTER_REF, PushPlanner
from src.git_integration.git_repository import GitRepository
from src.mediawiki_client.api_wrapper import MediaWikiClient

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Reads protocol commands and routes them to the import and push paths.

    Example:
        >>> dispatcher = CommandDispatcher(config, client, repo, sys.stdin, sys.stdout.buffer)
        >>> dispatcher.run()
    """

    def __init__(
        self,
        config: RemoteConfig,
        client: MediaWikiClient,
        repository: GitRepository,
        stdin: TextIO,
        stdout: BinaryIO,
        output_handler: Optional[OutputHandler] = None,
    ):
        self.config = config
        self.client = client
        self.repository = repository
        self.stdin = stdin
        self.stdout = stdout
        self.output_handler = output_handler or OutputHandler()

    def run(self) -> None:
        """Serve commands until git closes the session.

        Raises:
            ProtocolError: On a command with the wrong number of arguments
        """
        while True:
            line = self._read_line()
            if line is None or line == '':
                logger.debug("End of session")
                return

            words = line.split(' ')
            command = ProtocolCommand.from_word(words[0])
            if command is None:
                logger.warning(f"Unknown command {words[0]!r}, ending session")
                return
            arguments = words[1:]
            if not command.min_args <= len(arguments) <= command.max_args:
                raise ProtocolError(f"wrong number of arguments for '{command.word}'", line=line)

            logger.debug(f"Command: {line}")
            if command is ProtocolCommand.CAPABILITIES:
                self._capabilities()
            elif command is ProtocolCommand.LIST:
                self._list()
            elif command is ProtocolCommand.OPTION:
                self._write("unsupported")
            elif command is ProtocolCommand.IMPORT:
                self._import(self._read_batch(command, arguments[0]))
            elif command is ProtocolCommand.PUSH:
                self._push(self._read_batch(command, arguments[0]))

    def _capabilities(self) -> None:
        self._write(f"refspec refs/heads/*:refs/mediawiki/{self.config.remote_name}/*")
        self._write("import")
        self._write("list")
        self._write("push")
        if self.config.dumb_push:
            self._write("no-private-update")
        self._write("")

    def _list(self) -> None:
        # MediaWiki has no branches: a single master, HEAD pointing at it
        self._write(f"? {MASTER_REF}")
        self._write(f"@{MASTER_REF} HEAD")
        self._write("")

    def _import(self, refs: List[str]) -> None:
        command = ImportCommand(
            self.config,
            self.client,
            self.repository,
            self.stdout,
            output_handler=self.output_handler,
        )
        command.run(refs)

    def _push(self, refspecs: List[str]) -> None:
        planner = PushPlanner(
            self.config,
            self.client,
            self.repository,
            output_handler=self.output_handler,
        )
        for refspec in refspecs:
            try:
                outcome = planner.push_refspec(refspec)
            except (UnsupportedOperationError, ConfigError) as e:
                self.output_handler.error(str(e))
                remote = getattr(e, 'remote_ref', refspec.split(':')[-1])
                reply = getattr(e, 'reply', str(e))
                outcome = PushOutcome(remote, ok=False, reason=reply)
            self._write(outcome.protocol_line())
        self._write("")

        if self.config.dumb_push and planner.pushed_any:
            self.output_handler.print_dumb_push_notice()

    def _read_batch(self, command: ProtocolCommand, first: str) -> List[str]:
        """Collect the arguments of a command batch up to its blank line."""
        arguments = [first]
        while True:
            line = self._read_line()
            if line is None or line == '':
                return arguments
            words = line.split(' ')
            if words[0] != command.word or len(words) != 2:
                raise ProtocolError(f"expected '{command.word} <arg>' in batch", line=line)
            arguments.append(words[1])

    def _read_line(self) -> Optional[str]:
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip('\n')

    def _write(self, line: str) -> None:
        self.stdout.write(f"{line}\n".encode('utf-8'))
        self.stdout.flush()
