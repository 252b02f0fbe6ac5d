"""
Error handling decorators and utilities for ChatDesk.

Provides a decorator for operations that degrade to a fallback value
instead of surfacing a failure to the caller.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .exceptions import ChatDeskError

# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])


def handle_async_errors(operation: str, fallback: Any = None, logger: Optional[logging.Logger] = None):
    """Decorator that catches exceptions from a coroutine and returns a fallback.

    Failures are logged at WARNING level (they are expected, e.g. an
    offline backend) and the fallback is returned. If ``fallback`` is
    callable it is invoked with the same arguments as the wrapped function,
    so it can build a value from local state.

    Args:
        operation: Name used in log messages
        fallback: Value (or callable producing it) returned on failure
        logger: Optional logger instance (defaults to operation-specific logger)

    Example:
        >>> @handle_async_errors("autocomplete", fallback=lambda *a, **kw: [])
        ... async def get_completions(self, partial):
        ...     return await self.dispatcher.autocomplete(partial, sid)
    """

    def decorator(func: F) -> F:
        log = logger or logging.getLogger(f"chatdesk.{operation}")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except ChatDeskError as e:
                log.warning(f"[{operation}] {e.code.value}: {e.message}")
            except Exception as e:
                log.warning(f"[{operation}] Unexpected error: {e}", exc_info=True)

            if callable(fallback):
                return fallback(*args, **kwargs)
            return fallback

        return wrapper  # type: ignore

    return decorator


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[str] = None, include_traceback: bool = True
) -> None:
    """Log an error with consistent formatting.

    Args:
        logger: Logger instance to use
        error: The exception to log
        context: Optional context string to prefix the message
        include_traceback: Whether to include the full stack trace

    Example:
        >>> log_error(logger, err, context="Dispatch")
        # Logs: "[Dispatch] TRANSPORT_RATE_LIMITED: Backend rejected request"
    """
    if isinstance(error, ChatDeskError):
        message = f"{error.code.value}: {error.message}"
    else:
        message = str(error)

    if context:
        message = f"[{context}] {message}"

    logger.error(message, exc_info=include_traceback)
