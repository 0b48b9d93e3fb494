"""
Error taxonomy shared by services and route handlers.

Services raise these exceptions instead of ``HTTPException`` so they
stay usable outside a request.  ``main.create_app`` maps each class to
an HTTP status code:

* ``Unauthorized``     -> 401
* ``NotFound``         -> 404
* ``ValidationFailed`` -> 422
* ``StoreUnavailable`` -> 503

Whether an operation propagates a failure or degrades to a default
value is declared on the operation itself with ``degrade_on_error``.
Operations without the decorator propagate.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


class PlatformError(Exception):
    """Base class for all errors raised by the service layer."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__


class Unauthorized(PlatformError):
    """Missing, malformed, badly signed or expired bearer token."""

    status_code = 401


class NotFound(PlatformError):
    status_code = 404


class ValidationFailed(PlatformError):
    status_code = 422


class StoreUnavailable(PlatformError):
    """The graph store rejected a query or could not be reached."""

    status_code = 503


def degrade_on_error(
    default_factory: Callable[[], Any],
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Make an async operation return ``default_factory()`` on failure.

    Store failures and undecodable rows are logged and replaced with the
    default so read paths stay non-fatal for the caller.
    ``Unauthorized`` is never degraded: an authentication failure always
    aborts the request.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except Unauthorized:
                raise
            except (PlatformError, ValueError):
                logger.exception("%s failed, returning default", func.__qualname__)
                return default_factory()

        return wrapper

    return decorator
