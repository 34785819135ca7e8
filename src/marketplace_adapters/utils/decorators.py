"""Decorators for capability module error handling."""

import functools
import logging
import uuid
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..exceptions import MarketplaceAPIError
from .error_mapper import map_http_error

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_api_errors(operation: Optional[str] = None) -> Callable[[F], F]:
    """Decorator to normalize errors raised by capability module methods.

    Any exception escaping the wrapped coroutine is re-raised as a
    MarketplaceAPIError whose context is ``{capability}.{operation}``.
    Errors that were already mapped pass through with their original
    context.

    Args:
        operation: Name used in the context string, defaults to the method name

    Returns:
        Decorator for async methods of a BaseCapabilityModule
    """

    def decorator(func: F) -> F:
        name = operation or func.__name__

        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            context = f"{self.module_name}.{name}"
            request_id = str(uuid.uuid4())
            start_time = datetime.now()

            try:
                logger.debug(f"Request {request_id}: Starting {context}")
                result = await func(self, *args, **kwargs)

                duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
                logger.debug(f"Request {request_id}: Completed {context} in {duration_ms}ms")
                return result

            except MarketplaceAPIError:
                duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
                logger.warning(f"Request {request_id}: {context} failed in {duration_ms}ms")
                raise

            except Exception as e:
                duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
                mapped = map_http_error(e, context)
                logger.warning(
                    f"Request {request_id}: {context} failed in {duration_ms}ms "
                    f"with {mapped.kind.value}: {mapped.record.message}"
                )
                raise mapped from e

        return wrapper  # type: ignore[return-value]

    return decorator
