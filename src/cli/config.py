"""Remote configuration loading and validation.

A MediaWiki remote is configured with ordinary git configuration keys under
``remote.<name>.*``; a few behaviours can also be set for every remote under
``mediawiki.*``:

    [remote "origin"]
        url = mediawiki::https://wiki.example.org/w
        pages = Main_Page Help:Contents
        categories = Howto
        shallow = false
        dumbPush = false
        fetchStrategy = by_page
        mwLogin = Bot
        mwPassword = secret
"""

import logging
from typing import Optional, Set

from src.git_integration.errors import GitRepositoryError
from src.git_integration.git_repository import GitRepository

from .errors import ConfigError
from .models import FetchStrategy, RemoteConfig

logger = logging.getLogger(__name__)


class RemoteConfigLoader:
    """Reads a remote's configuration from the repository.

    Example:
        >>> config = RemoteConfigLoader(GitRepository()).load("origin", "https://wiki.example.org/w/")
        >>> config.url
        'https://wiki.example.org/w'
    """

    def __init__(self, repository: GitRepository):
        self.repository = repository

    def load(self, remote_name: str, url: str) -> RemoteConfig:
        """Load configuration for one remote.

        Args:
            remote_name: Remote name (first helper argument)
            url: Wiki URL (second helper argument)

        Returns:
            RemoteConfig with defaults applied

        Raises:
            ConfigError: If a value is invalid or unreadable
        """
        if not url:
            raise ConfigError("no wiki URL given", config_field=f"remote.{remote_name}.url")

        prefix = f"remote.{remote_name}"
        try:
            pages = self._read_list(f"{prefix}.pages")
            categories = self._read_list(f"{prefix}.categories")
            shallow = self._read_bool(f"{prefix}.shallow") or False
            dumb_push = self._read_bool(f"{prefix}.dumbPush")
            if dumb_push is None:
                dumb_push = self._read_bool("mediawiki.dumbPush") or False
            strategy_name = (
                self.repository.config_get(f"{prefix}.fetchStrategy")
                or self.repository.config_get("mediawiki.fetchStrategy")
                or FetchStrategy.BY_PAGE.value
            )
            login = self.repository.config_get(f"{prefix}.mwLogin")
            password = self.repository.config_get(f"{prefix}.mwPassword")
            domain = self.repository.config_get(f"{prefix}.mwDomain")
        except GitRepositoryError as e:
            raise ConfigError(f"cannot read git configuration: {e.git_output or e.message}")

        try:
            fetch_strategy = FetchStrategy(strategy_name)
        except ValueError:
            raise ConfigError(
                f"invalid fetch strategy '{strategy_name}' "
                f"(expected {FetchStrategy.BY_PAGE.value} or {FetchStrategy.BY_REV.value})",
                config_field=f"{prefix}.fetchStrategy",
            )

        config = RemoteConfig(
            remote_name=remote_name,
            url=url.rstrip('/'),
            pages=pages,
            categories=categories,
            shallow=shallow,
            dumb_push=dumb_push,
            fetch_strategy=fetch_strategy,
            login=login,
            password=password,
            domain=domain,
        )
        logger.debug(
            f"Remote {remote_name}: {len(pages)} page(s), {len(categories)} categorie(s), "
            f"shallow={shallow}, dumb_push={dumb_push}, strategy={fetch_strategy.value}"
        )
        return config

    def _read_list(self, key: str) -> Set[str]:
        """Read a multi-valued key whose values may hold several entries.

        Entries are whitespace-separated; spaces inside titles are written
        as underscores, which the wiki accepts as well.
        """
        entries: Set[str] = set()
        for value in self.repository.config_get_all(key):
            entries.update(value.split())
        return entries

    def _read_bool(self, key: str) -> Optional[bool]:
        try:
            return self.repository.config_get_bool(key)
        except GitRepositoryError:
            raise ConfigError("not a boolean value", config_field=key)
