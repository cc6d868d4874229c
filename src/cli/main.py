"""Main CLI entry point for the git-remote-mediawiki command.

git runs the helper as ``git-remote-mediawiki <remote> <url>`` whenever a
remote URL starts with ``mediawiki::``, then speaks the remote-helper
protocol with it over stdin/stdout. Everything meant for the user goes to
stderr.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.config import RemoteConfigLoader
from src.cli.dispatcher import CommandDispatcher
from src.cli.errors import CLIError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.git_integration.git_repository import GitRepository
from src.mediawiki_client.api_wrapper import MediaWikiClient
from src.mediawiki_client.auth import Authenticator
from src.mediawiki_client.errors import InvalidCredentialsError, NetworkError, SyncError

VERSION = "0.1.0"
URL_PREFIX = "mediawiki::"

app = typer.Typer(
    name="git-remote-mediawiki",
    help="""git remote helper for MediaWiki.

Not meant to be run by hand: git starts it for remotes such as

  git clone mediawiki::https://wiki.example.org/w

Tracked pages are chosen with remote.<name>.pages and remote.<name>.categories.""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged. Handlers write to stderr,
    stdout being reserved for the protocol.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"git-remote-mediawiki_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _resolve_url(repository: GitRepository, remote: str, url: Optional[str]) -> str:
    """Wiki URL from the arguments, or from the remote's configuration."""
    if not url:
        url = repository.config_get(f"remote.{remote}.url") or ""
    if url.startswith(URL_PREFIX):
        url = url[len(URL_PREFIX):]
    return url


def _run_helper(remote: str, url: Optional[str], verbosity: int, logdir: Optional[str]) -> int:
    """Serve one remote-helper session.

    Returns:
        Exit code for the process
    """
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity)

    try:
        repository = GitRepository()
        config = RemoteConfigLoader(repository).load(remote, _resolve_url(repository, remote, url))
        authenticator = Authenticator(config.login, config.password, config.domain)
        client = MediaWikiClient(config.url, authenticator)

        dispatcher = CommandDispatcher(
            config,
            client,
            repository,
            sys.stdin,
            sys.stdout.buffer,
            output_handler=output,
        )
        dispatcher.run()
        return ExitCode.SUCCESS

    except InvalidCredentialsError as e:
        logger.error(f"Authentication failed: {e}")
        output.error(f"Authentication failed: {e}")
        return ExitCode.AUTH_ERROR

    except NetworkError as e:
        logger.error(f"Network error: {e}")
        output.error(f"Network error: {e}")
        return ExitCode.NETWORK_ERROR

    except CLIError as e:
        logger.error(str(e))
        output.error(str(e))
        return ExitCode.GENERAL_ERROR

    except SyncError as e:
        logger.error(f"Fatal error: {e}")
        output.error(f"Fatal error: {e}")
        return ExitCode.GENERAL_ERROR

    except BrokenPipeError:
        # git hung up; nobody is left to read an error
        logger.debug("git closed the connection")
        return ExitCode.GENERAL_ERROR


@app.command()
def main_command(
    remote: Optional[str] = typer.Argument(
        None,
        help="Name of the remote, as given by git",
    ),
    url: Optional[str] = typer.Argument(
        None,
        help="Wiki URL (defaults to remote.<name>.url)",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        envvar="GIT_MEDIAWIKI_VERBOSITY",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """git remote helper for MediaWiki.

    \b
    USAGE (run by git):
      git-remote-mediawiki <remote> <url>

    \b
    EXAMPLE:
      git clone mediawiki::https://wiki.example.org/w
      git config remote.origin.pages "Main_Page Help:Contents"
    """
    if version:
        typer.echo(f"git-remote-mediawiki version {VERSION}", err=True)
        raise typer.Exit()

    if not remote:
        typer.echo("Error: missing remote name", err=True)
        typer.echo("This program is run by git for mediawiki:: remotes.", err=True)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    raise typer.Exit(_run_helper(remote, url, verbosity, logdir))


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
