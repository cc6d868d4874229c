"""Retry logic with exponential backoff for MediaWiki throttling.

This module provides retry functionality specifically for the cases where the
wiki explicitly asks the client to slow down: HTTP 429/503 responses and the
``maxlag``/``ratelimited`` API error codes. It implements exponential backoff
(1s, 2s, 4s) and fails fast for every other error, including plain network
failures.
"""

import time
import logging
from typing import Callable, TypeVar

from .errors import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3

THROTTLE_ERROR_CODES = {'maxlag', 'ratelimited'}


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Retry function on throttling responses with exponential backoff.

    Executes the given function with the provided arguments, retrying up to 3 times
    with exponential backoff (1s, 2s, 4s) when the wiki signals throttling.
    Fails fast for all other errors.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        NetworkError: If throttling persists after 3 retries
        Other exceptions: Passed through immediately without retry
    """
    for retry_num in range(MAX_RETRIES + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise

            if retry_num >= MAX_RETRIES:
                logger.error(
                    f"Wiki throttling persisted after {MAX_RETRIES} retries, giving up"
                )
                raise NetworkError(
                    f"MediaWiki API still throttling after {MAX_RETRIES} retries"
                ) from e

            wait_time = 2 ** retry_num
            logger.info(
                f"Wiki asked us to slow down, retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{MAX_RETRIES})"
            )
            time.sleep(wait_time)

    # Unreachable, the loop either returns or raises
    raise NetworkError(f"MediaWiki API still throttling after {MAX_RETRIES} retries")


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if an exception represents a throttling response.

    Looks at MediaWiki API error codes (mwclient's APIError carries the code
    as its first argument) and at HTTP status codes on requests exceptions.

    Args:
        exception: The exception to check

    Returns:
        True if this appears to be a throttling error, False otherwise
    """
    code = getattr(exception, 'code', None)
    if code is None and exception.args:
        code = exception.args[0]
    if isinstance(code, str) and code in THROTTLE_ERROR_CODES:
        return True

    status_code = getattr(exception, 'status_code', None)
    if status_code is None:
        response = getattr(exception, 'response', None)
        status_code = getattr(response, 'status_code', None)
    if status_code in (429, 503):
        return True

    return False
