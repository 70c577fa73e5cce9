# Vayu: standardised air quality indices, aggregates and trends
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Decorators for the edges of the engine.

The data-source collaborators get retries with exponential backoff; the
public facade gets call logging with timings. Engine functions are pure
and use neither.
"""

import logging
import time
from functools import wraps
from typing import Callable, TypeVar

import requests
from tenacity import (
    after_log,
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

F = TypeVar("F", bound=Callable)

logger = logging.getLogger(__name__)

_TRANSIENT = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


def is_transient_error(exception: BaseException) -> bool:
    """
    True for errors worth retrying.

    Dropped connections and timeouts always qualify. An HTTP error only
    qualifies when the server answered 5xx; a 4xx will not fix itself.
    """
    if isinstance(exception, _TRANSIENT):
        return True
    if isinstance(exception, requests.exceptions.HTTPError):
        status = getattr(exception.response, "status_code", None)
        return status is not None and status >= 500
    return False


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 10.0,
    multiplier: float = 2.0,
) -> Callable[[F], F]:
    """
    Retry a network call on transient errors, backing off exponentially.

    Args:
        max_attempts: Total attempts, including the first
        min_wait: Shortest wait between attempts, in seconds
        max_wait: Longest wait between attempts, in seconds
        multiplier: Backoff multiplier

    Once the attempts run out the last exception propagates unchanged, so
    callers see the same requests exception they would without retries.

    Example:
        >>> @with_retry(max_attempts=5)
        ... def fetch(url):
        ...     response = requests.get(url, timeout=30)
        ...     response.raise_for_status()
        ...     return response.json()
    """
    return retry(
        retry=retry_if_exception(is_transient_error),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.DEBUG),
        reraise=True,
    )


def with_logging(logger_name: str | None = None) -> Callable[[F], F]:
    """
    Log entry, exit and duration of a call.

    Entry and exit go out at DEBUG. A raised exception is logged at ERROR,
    with traceback, and then re-raised.

    Args:
        logger_name: Logger to write to; defaults to the function's module
    """

    def decorator(func: F) -> F:
        func_logger = logging.getLogger(logger_name or func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            func_logger.debug(
                f"Calling {func.__name__}",
                extra={"function": func.__name__, "kwargs_keys": sorted(kwargs)},
            )
            started = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                func_logger.error(
                    f"Error in {func.__name__}: {e}",
                    extra={"function": func.__name__, "error_type": type(e).__name__},
                    exc_info=True,
                )
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            func_logger.debug(
                f"Completed {func.__name__} in {elapsed_ms:.1f} ms",
                extra={"function": func.__name__, "elapsed_ms": elapsed_ms},
            )
            return result

        return wrapper

    return decorator


# Retry policy for the data sources
retry_on_network_error = with_retry()
