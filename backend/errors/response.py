"""
Standard response builders for ChatDesk.

Provides consistent result dicts for operations that report success or
failure to a presentation layer instead of raising.
"""

from typing import Any, Optional
from .codes import ErrorCode
from .exceptions import ChatDeskError


def error_response(error: ChatDeskError | Exception, operation: Optional[str] = None, include_context: bool = True) -> dict:
    """Build a standard error response dictionary.

    Args:
        error: The exception to convert to a response
        operation: Optional operation name for context
        include_context: Whether to include the context dict (disable for privacy)

    Returns:
        Standard error response dict with success=False

    Example:
        >>> from errors import TransportError, error_response
        >>> err = TransportError("Feedback failed", status_code=503)
        >>> error_response(err, operation="feedback")
        {
            "success": False,
            "error": {
                "code": "TRANSPORT_SERVER_FAULT",
                "message": "Feedback failed",
                "details": None,
                "operation": "feedback",
                "recoverable": True,
                "context": {"status_code": 503}
            }
        }
    """
    if isinstance(error, ChatDeskError):
        return {
            "success": False,
            "error": {
                "code": error.code.value,
                "message": error.message,
                "details": error.details,
                "operation": operation,
                "recoverable": error.recoverable,
                "context": error.context if include_context else None,
            },
        }

    # Fallback for foreign exceptions
    return {
        "success": False,
        "error": {
            "code": ErrorCode.INTERNAL_UNEXPECTED.value,
            "message": str(error),
            "details": None,
            "operation": operation,
            "recoverable": False,
            "context": None,
        },
    }


def success_response(data: Optional[dict] = None, **kwargs: Any) -> dict:
    """Build a standard success response dictionary.

    Keyword values of None are dropped so optional fields (e.g. a warning)
    only appear when set.

    Example:
        >>> success_response(warning="Session cleared locally only")
        {"success": True, "warning": "Session cleared locally only"}
    """
    response = {"success": True}

    if data:
        response.update(data)
    if kwargs:
        response.update({k: v for k, v in kwargs.items() if v is not None})

    return response


def format_error_for_user(error: ChatDeskError | Exception) -> str:
    """Format an error as a single line for a terminal or status bar."""
    if isinstance(error, ChatDeskError):
        parts = [f"Error: {error.message}"]
        if error.details:
            parts.append(f"({error.details})")
        if error.recoverable:
            parts.append("You can try again.")
        return " ".join(parts)

    return f"Error: {str(error)}"
