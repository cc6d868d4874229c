"""API wrapper for the MediaWiki Action API.

This module wraps the mwclient Site object and provides error translation
from HTTP and API exceptions to our typed exception hierarchy. It integrates
with the retry logic for handling throttling responses.
"""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import urlsplit

import mwclient
from mwclient.errors import APIError, InvalidResponse, LoginError, MaximumRetriesExceeded
from requests.exceptions import ConnectionError, HTTPError, Timeout

from .auth import Authenticator
from .errors import (
    InvalidCredentialsError,
    MalformedResponseError,
    SyncError,
    WikiAPIError,
    WikiUnreachableError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

# Seconds before a single HTTP request is abandoned
API_TIMEOUT = 30

# Retries mwclient itself performs on replication lag and 5xx answers
SITE_MAX_RETRIES = 3


class MediaWikiClient:
    """Session object for one wiki, shared by every component of a run.

    The underlying mwclient Site is created (and logged in) lazily on first
    use, so commands that never touch the wiki (``capabilities``, ``list``)
    never open a connection. Query helpers follow the API continuation
    protocol and return raw result dicts; callers validate the shape they
    need.

    Example:
        >>> client = MediaWikiClient("https://wiki.example.org/w")
        >>> result = client.query(prop="info", titles="Main Page")
    """

    def __init__(self, url: str, authenticator: Optional[Authenticator] = None):
        """Initialize the client for a wiki URL.

        Args:
            url: Wiki base URL, the directory holding api.php
                 (e.g. "https://wiki.example.org/w")
            authenticator: Credential source; None means anonymous access
        """
        self.url = url.rstrip('/')
        self._authenticator = authenticator
        self._site: Optional[mwclient.Site] = None
        self._csrf_token: Optional[str] = None

    @property
    def wiki_host(self) -> str:
        """Host part of the URL without scheme, credentials or path."""
        netloc = urlsplit(self.url).netloc or self.url
        return netloc.rsplit('@', 1)[-1]

    @property
    def endpoint(self) -> str:
        """URL of api.php with any embedded credentials masked."""
        return self._sanitize_credentials(f"{self.url}/api.php")

    def _get_site(self) -> mwclient.Site:
        """Get or create the mwclient Site, logging in when credentials exist.

        Raises:
            WikiUnreachableError: If the wiki cannot be contacted
            InvalidCredentialsError: If login is rejected
        """
        if self._site is not None:
            return self._site

        parts = urlsplit(self.url)
        scheme = parts.scheme or 'https'
        host = parts.netloc.rsplit('@', 1)[-1] or parts.path
        path = parts.path.rstrip('/') + '/' if parts.netloc else '/'

        logger.debug(f"Connecting to {scheme}://{host}{path}")
        try:
            site = mwclient.Site(
                host,
                path=path,
                scheme=scheme,
                max_retries=SITE_MAX_RETRIES,
                reqs={'timeout': API_TIMEOUT},
            )
        except Exception as e:
            raise self._translate_error(e, "connect") from e

        creds = self._authenticator.get_credentials() if self._authenticator else None
        if creds is not None:
            try:
                site.login(creds.user, creds.password, domain=creds.domain)
            except LoginError as e:
                raise InvalidCredentialsError(user=creds.user, endpoint=self.endpoint) from e
            except Exception as e:
                raise self._translate_error(e, "login") from e
            logger.info(f"Logged in to {self.wiki_host} as {creds.user}")

        self._site = site
        return site

    def _sanitize_credentials(self, text: str) -> str:
        """Mask user:password pairs embedded in URLs."""
        if not text:
            return text
        return re.sub(r'://([^/@:]+):([^/@]+)@', r'://***:***@', text)

    def _translate_error(self, exception: Exception, operation: str) -> Exception:
        """Translate mwclient/requests exceptions to typed MediaWiki exceptions.

        Args:
            exception: The original exception
            operation: Description of the operation that failed (for logging)

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        if isinstance(exception, APIError):
            return WikiAPIError(code=str(exception.code), info=str(exception.info or ""))

        if isinstance(exception, (Timeout, ConnectionError, MaximumRetriesExceeded)):
            return WikiUnreachableError(
                endpoint=self.endpoint,
                reason=self._sanitize_credentials(str(exception)),
            )

        if isinstance(exception, HTTPError):
            status = getattr(exception.response, 'status_code', None)
            return WikiUnreachableError(
                endpoint=self.endpoint,
                reason=f"HTTP {status}" if status else None,
            )

        if isinstance(exception, InvalidResponse):
            return MalformedResponseError(operation, self._sanitize_credentials(str(exception)))

        safe_error_msg = self._sanitize_credentials(str(exception))
        logger.error(f"API operation failed: {operation} - {safe_error_msg}")
        return WikiUnreachableError(endpoint=self.endpoint, reason=safe_error_msg)

    def api(self, action: str, **params: Any) -> Dict[str, Any]:
        """Perform one raw API call.

        Args:
            action: API action ("query", "edit", ...)
            **params: Request parameters

        Returns:
            Decoded JSON response

        Raises:
            WikiAPIError: If the wiki answered with an error object
            WikiUnreachableError: If the wiki cannot be reached
            MalformedResponseError: If the answer is not a JSON object
        """
        site = self._get_site()
        # Raw exceptions reach the retry layer, which needs HTTP status and API codes
        try:
            result = retry_on_rate_limit(site.api, action, **params)
        except SyncError:
            raise
        except Exception as e:
            raise self._translate_error(e, f"{action}({params.get('list') or params.get('prop') or ''})") from e
        if not isinstance(result, dict):
            raise MalformedResponseError(action, f"expected an object, got {type(result).__name__}")
        return result

    def query(self, **params: Any) -> Dict[str, Any]:
        """Perform a single ``action=query`` request and return its ``query`` block.

        Raises:
            MalformedResponseError: If the response has no ``query`` object
        """
        result = self.api('query', **params)
        query = result.get('query')
        if not isinstance(query, dict):
            raise MalformedResponseError('query', "response has no 'query' object")
        return query

    def query_continued(self, **params: Any) -> Iterator[Dict[str, Any]]:
        """Run an ``action=query`` request, following continuation tokens.

        Yields the ``query`` block of every batch. Iteration stops when the
        wiki no longer returns a ``continue`` object.
        """
        request = dict(params)
        request['continue'] = ''
        while True:
            result = self.api('query', **request)
            query = result.get('query')
            if query is None and 'continue' not in result:
                # An empty listing comes back without a query block
                return
            if not isinstance(query, dict):
                raise MalformedResponseError('query', "response has no 'query' object")
            yield query

            continuation = result.get('continue')
            if not continuation:
                return
            if not isinstance(continuation, dict):
                raise MalformedResponseError('query', "malformed 'continue' object")
            request.update(continuation)

    def edit(
        self,
        title: str,
        text: str,
        summary: str,
        basetimestamp: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Save new page text.

        Args:
            title: Page title
            text: Full new wikitext
            summary: Edit summary
            basetimestamp: Timestamp of the revision the edit is based on,
                           used by the wiki to detect edit conflicts

        Returns:
            The ``edit`` block of the response (``result``, ``newrevid``,
            ``newtimestamp`` or ``nochange``)

        Raises:
            WikiAPIError: If the edit was refused
        """
        params: Dict[str, Any] = {
            'title': title,
            'text': text,
            'summary': summary,
            'token': self._get_csrf_token(),
        }
        if basetimestamp:
            params['basetimestamp'] = basetimestamp

        result = self.api('edit', **params)
        edit = result.get('edit')
        if not isinstance(edit, dict):
            raise MalformedResponseError('edit', "response has no 'edit' object")
        if edit.get('result') != 'Success':
            # Extensions (AbuseFilter, ConfirmEdit) report refusals this way
            raise WikiAPIError(code=str(edit.get('result', 'unknown')).lower(), info=str(edit))
        return edit

    def _get_csrf_token(self) -> str:
        if self._csrf_token is None:
            site = self._get_site()
            try:
                self._csrf_token = site.get_token('csrf')
            except Exception as e:
                raise self._translate_error(e, "get_token(csrf)") from e
        return self._csrf_token

    def get_pages_by_titles(self, titles: List[str]) -> Dict[str, Any]:
        """Look up several titles at once.

        Returns:
            The ``pages`` block keyed by page id; missing pages have a
            negative id or a ``missing`` marker
        """
        query = self.query(titles='|'.join(titles))
        pages = query.get('pages', {})
        if not isinstance(pages, dict):
            raise MalformedResponseError('query(titles)', "'pages' is not an object")
        return pages
