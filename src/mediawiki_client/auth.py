"""Authentication module for loading MediaWiki credentials.

Credentials come from two places: the remote's git configuration
(``remote.<name>.mwLogin``, ``mwPassword``, ``mwDomain``) and environment
variables loaded with python-dotenv, which take precedence. Missing
credentials are not an error: the helper then talks to the wiki anonymously.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv


class Credentials(NamedTuple):
    """MediaWiki login credentials."""
    user: str
    password: str
    domain: Optional[str] = None


class Authenticator:
    """Resolves MediaWiki credentials for one remote.

    Environment variables:
        MEDIAWIKI_USER: Wiki account name (overrides mwLogin)
        MEDIAWIKI_PASSWORD: Wiki password or bot password (overrides mwPassword)
        MEDIAWIKI_DOMAIN: Optional LDAP domain (overrides mwDomain)

    Example:
        >>> auth = Authenticator(login="Bot", password="secret")
        >>> creds = auth.get_credentials()
        >>> creds.user
        'Bot'
    """

    def __init__(
        self,
        login: Optional[str] = None,
        password: Optional[str] = None,
        domain: Optional[str] = None,
    ):
        """Initialize the authenticator and load a .env file if present.

        Args:
            login: Login name from git config
            password: Password from git config
            domain: Domain from git config
        """
        load_dotenv()
        self._login = login
        self._password = password
        self._domain = domain

    def get_credentials(self) -> Optional[Credentials]:
        """Get credentials, or None for anonymous access.

        Returns:
            Credentials when both a user and a password are known, None otherwise
        """
        user = os.getenv('MEDIAWIKI_USER') or self._login
        password = os.getenv('MEDIAWIKI_PASSWORD') or self._password
        domain = os.getenv('MEDIAWIKI_DOMAIN') or self._domain

        if not user or not password:
            return None

        return Credentials(user=user, password=password, domain=domain or None)
