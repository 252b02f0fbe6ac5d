"""
Error codes for ChatDesk.

Provides a standardized taxonomy of error codes organized by category.
Use these codes consistently across all error responses.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for ChatDesk.

    Categories:
    - TRANSPORT_*: Dispatcher / network failures
    - RESPONSE_*: Backend payload problems
    - SESSION_*: Session lifecycle errors
    - STORE_*: Key/value store errors
    - VALIDATION_*: Input validation errors
    - INTERNAL_*: Internal/unexpected errors
    """

    # Transport errors (dispatcher)
    TRANSPORT_UNREACHABLE = "TRANSPORT_UNREACHABLE"
    TRANSPORT_TIMEOUT = "TRANSPORT_TIMEOUT"
    TRANSPORT_RATE_LIMITED = "TRANSPORT_RATE_LIMITED"
    TRANSPORT_SERVER_FAULT = "TRANSPORT_SERVER_FAULT"
    TRANSPORT_AUTH_REQUIRED = "TRANSPORT_AUTH_REQUIRED"
    TRANSPORT_HTTP_ERROR = "TRANSPORT_HTTP_ERROR"

    # Response errors (backend payloads)
    RESPONSE_MALFORMED = "RESPONSE_MALFORMED"

    # Session errors
    SESSION_TEARDOWN_FAILED = "SESSION_TEARDOWN_FAILED"

    # Store errors
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    # Validation errors (input checking)
    VALIDATION_INVALID_VALUE = "VALIDATION_INVALID_VALUE"

    # Internal errors (unexpected failures)
    INTERNAL_UNEXPECTED = "INTERNAL_UNEXPECTED"
    INTERNAL_CONFIG_ERROR = "INTERNAL_CONFIG_ERROR"
