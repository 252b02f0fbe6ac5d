"""
ChatDesk Error Handling Module

Provides standardized error codes, exceptions, and response builders
for consistent error handling across the client core.

Usage:
    from errors import (
        # Error codes
        ErrorCode,

        # Exceptions
        ChatDeskError,
        TransportError,
        SessionTeardownError,
        StoreError,
        ValidationError,
        ConfigError,

        # Response builders
        error_response,
        success_response,
        format_error_for_user,

        # Decorators
        handle_async_errors,
        log_error,
    )

Example:
    from errors import TransportError

    try:
        payload = await dispatcher.send(message, session_id)
    except TransportError as e:
        if e.code == ErrorCode.TRANSPORT_RATE_LIMITED:
            ...
"""

from .codes import ErrorCode
from .exceptions import (
    ChatDeskError,
    TransportError,
    SessionTeardownError,
    StoreError,
    ValidationError,
    ConfigError,
)
from .response import (
    error_response,
    success_response,
    format_error_for_user,
)
from .handlers import (
    handle_async_errors,
    log_error,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "ChatDeskError",
    "TransportError",
    "SessionTeardownError",
    "StoreError",
    "ValidationError",
    "ConfigError",
    # Response builders
    "error_response",
    "success_response",
    "format_error_for_user",
    # Decorators
    "handle_async_errors",
    "log_error",
]
