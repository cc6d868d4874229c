"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from src.cli.errors import ProtocolError
from src.cli.main import _configure_logging, _resolve_url, app
from src.cli.models import ExitCode
from src.mediawiki_client.errors import InvalidCredentialsError, WikiUnreachableError


runner = CliRunner()


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    def test_verbosity_0_sets_warning_level(self):
        """Verbosity 0 sets logging to WARNING level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            _configure_logging(0)

            mock_logger.setLevel.assert_called_with(logging.WARNING)

    def test_verbosity_2_sets_debug_level(self):
        """Verbosity 2+ sets logging to DEBUG level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            _configure_logging(2)

            mock_logger.setLevel.assert_called_with(logging.DEBUG)

    def test_logdir_creates_log_file(self, tmp_path):
        app_logger = logging.getLogger("src")
        handlers = list(app_logger.handlers)
        try:
            _configure_logging(1, str(tmp_path / "logs"))
            assert list((tmp_path / "logs").glob("git-remote-mediawiki_*.log"))
        finally:
            for handler in app_logger.handlers[len(handlers):]:
                handler.close()
            app_logger.handlers = handlers


class TestResolveUrl:
    """Test cases for the wiki URL argument."""

    def test_argument_used_as_is(self):
        assert _resolve_url(MagicMock(), "origin", "https://wiki/w") == "https://wiki/w"

    def test_falls_back_to_remote_url_without_prefix(self):
        repository = MagicMock()
        repository.config_get.return_value = "mediawiki::https://wiki/w"

        assert _resolve_url(repository, "origin", None) == "https://wiki/w"
        repository.config_get.assert_called_once_with("remote.origin.url")


@pytest.fixture
def helper_mocks():
    with patch('src.cli.main._configure_logging'), \
            patch('src.cli.main.GitRepository'), \
            patch('src.cli.main.RemoteConfigLoader') as mock_loader, \
            patch('src.cli.main.MediaWikiClient') as mock_client, \
            patch('src.cli.main.CommandDispatcher') as mock_dispatcher:
        yield mock_loader, mock_client, mock_dispatcher


class TestMainCommand:
    """Test cases for the helper entry point."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "git-remote-mediawiki version" in result.output

    def test_missing_remote(self):
        result = runner.invoke(app, [])
        assert result.exit_code == ExitCode.GENERAL_ERROR

    def test_runs_dispatcher(self, helper_mocks):
        mock_loader, mock_client, mock_dispatcher = helper_mocks
        mock_loader.return_value.load.return_value = MagicMock(url="https://wiki/w")

        result = runner.invoke(app, ["origin", "https://wiki/w"])

        assert result.exit_code == ExitCode.SUCCESS
        mock_loader.return_value.load.assert_called_once_with("origin", "https://wiki/w")
        mock_dispatcher.return_value.run.assert_called_once()

    def test_network_error_exit_code(self, helper_mocks):
        _, _, mock_dispatcher = helper_mocks
        mock_dispatcher.return_value.run.side_effect = WikiUnreachableError("https://wiki/w/api.php")

        result = runner.invoke(app, ["origin", "https://wiki/w"])

        assert result.exit_code == ExitCode.NETWORK_ERROR

    def test_auth_error_exit_code(self, helper_mocks):
        _, _, mock_dispatcher = helper_mocks
        mock_dispatcher.return_value.run.side_effect = InvalidCredentialsError("Bot", "https://wiki/w/api.php")

        result = runner.invoke(app, ["origin", "https://wiki/w"])

        assert result.exit_code == ExitCode.AUTH_ERROR

    def test_protocol_error_exit_code(self, helper_mocks):
        _, _, mock_dispatcher = helper_mocks
        mock_dispatcher.return_value.run.side_effect = ProtocolError("bad", line="import")

        result = runner.invoke(app, ["origin", "https://wiki/w"])

        assert result.exit_code == ExitCode.GENERAL_ERROR

    def test_verbosity_from_environment(self, helper_mocks):
        with patch('src.cli.main.OutputHandler') as mock_output:
            runner.invoke(app, ["origin", "https://wiki/w"], env={"GIT_MEDIAWIKI_VERBOSITY": "2"})

        mock_output.assert_called_once_with(verbosity=2)
