"""
Custom exception hierarchy for ChatDesk.

All exceptions inherit from ChatDeskError and include:
- code: ErrorCode for categorization
- message: Human-readable error message
- details: Optional additional context
- recoverable: Whether the user can retry/fix the issue
- context: Additional key-value pairs for debugging
"""

from typing import Any, Optional
from .codes import ErrorCode


class ChatDeskError(Exception):
    """Base exception for all ChatDesk errors.

    Attributes:
        code: The ErrorCode categorizing this error
        message: Human-readable error message
        details: Optional additional context for the user
        recoverable: Whether the error can be resolved by user action
        context: Additional debugging information
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Allow overriding class defaults
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class TransportError(ChatDeskError):
    """Error talking to the chat backend.

    The code is derived from the HTTP status (0 means no response at all)
    or, for failures without a status, from ``error_type``.
    """

    code = ErrorCode.TRANSPORT_HTTP_ERROR
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        endpoint: Optional[str] = None,
        **context: Any,
    ):
        if error_type == "timeout":
            code = ErrorCode.TRANSPORT_TIMEOUT
        elif error_type == "unreachable" or status_code == 0:
            code = ErrorCode.TRANSPORT_UNREACHABLE
        elif status_code == 429:
            code = ErrorCode.TRANSPORT_RATE_LIMITED
        elif status_code == 401:
            code = ErrorCode.TRANSPORT_AUTH_REQUIRED
        elif status_code is not None and 500 <= status_code <= 599:
            code = ErrorCode.TRANSPORT_SERVER_FAULT
        else:
            code = ErrorCode.TRANSPORT_HTTP_ERROR

        self.status_code = status_code
        ctx = {**context}
        if status_code is not None:
            ctx["status_code"] = status_code
        if endpoint:
            ctx["endpoint"] = endpoint
        super().__init__(message, details, code=code, **ctx)


class SessionTeardownError(ChatDeskError):
    """Remote session clear failed."""

    code = ErrorCode.SESSION_TEARDOWN_FAILED
    recoverable = True

    def __init__(self, message: str, details: Optional[str] = None, session_id: Optional[str] = None, **context: Any):
        ctx = {**context}
        if session_id:
            ctx["session_id"] = session_id
        super().__init__(message, details, **ctx)


class StoreError(ChatDeskError):
    """Key/value store unavailable or misbehaving."""

    code = ErrorCode.STORE_UNAVAILABLE
    recoverable = True

    def __init__(self, message: str, details: Optional[str] = None, key: Optional[str] = None, **context: Any):
        ctx = {**context}
        if key:
            ctx["key"] = key
        super().__init__(message, details, **ctx)


class ValidationError(ChatDeskError):
    """Error during input validation."""

    code = ErrorCode.VALIDATION_INVALID_VALUE
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if parameter:
            ctx["parameter"] = parameter
        if expected:
            ctx["expected"] = expected
        if received:
            ctx["received"] = received
        super().__init__(message, details, **ctx)


class ConfigError(ChatDeskError):
    """Invalid client configuration."""

    code = ErrorCode.INTERNAL_CONFIG_ERROR
    recoverable = False

    def __init__(self, message: str, details: Optional[str] = None, setting: Optional[str] = None, **context: Any):
        ctx = {**context}
        if setting:
            ctx["setting"] = setting
        super().__init__(message, details, **ctx)
