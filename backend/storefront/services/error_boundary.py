"""
Storefront Backend — Service Error Boundary
=============================================

What:  A decorator that normalizes failures of an async service operation into
       the three-tier taxonomy (400 / 404 / 500).
How:   Application errors (ValidationError, NotFoundError, ...) pass through
       unchanged. Anything else is logged with its traceback against the
       wrapped function's module logger and re-raised as the operation's 500
       error, carrying the operation's failure message.

Usage:
    class CatalogService:
        @error_boundary("Failed to fetch services", error_cls=DatabaseError)
        async def list_all(self, db): ...

    @error_boundary("Failed to fetch page", error_cls=FileStorageError, expose_detail=False)
    async def get_page(self, slug): ...

`expose_detail=False` keeps the stringified error out of the response body
(the page endpoints never leak file system details); it is still logged.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar, Union

from storefront.exceptions import ServerError, StorefrontError

T = TypeVar("T")

AsyncFunc = Callable[..., Awaitable[T]]
MessageSource = Union[str, Callable[..., str]]


def error_boundary(
    failure_message: MessageSource,
    error_cls: Type[StorefrontError] = ServerError,
    expose_detail: bool = True,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """
    Wrap an async service method in the request-boundary error translation.

    Args:
        failure_message: Client-facing `error` text for unexpected failures.
                         May be a callable receiving the wrapped call's
                         arguments, for services shared between resources.
        error_cls:       StorefrontError subclass raised for unexpected failures.
        expose_detail:   Whether str(error) is returned as the `message` field.
    """

    def decorator(func: AsyncFunc) -> AsyncFunc:
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except StorefrontError:
                raise
            except Exception as e:
                message = (
                    failure_message(*args, **kwargs)
                    if callable(failure_message)
                    else failure_message
                )
                logger.error("%s: %s", message, e, exc_info=True)
                detail: Optional[str] = str(e) if expose_detail else None
                raise error_cls(
                    message=message,
                    detail=detail,
                    context={
                        "operation": func.__qualname__,
                        "error_type": type(e).__name__,
                    },
                ) from e

        return wrapper

    return decorator
