"""
Error Classifier - maps dispatch failures to conversational replies.

A failure becomes a FailureSignal (category + optional HTTP status) and
is classified into one of five fixed user messages with recovery actions.
The action tokens (retry, support, refresh, wait_retry) are interpreted
by the presentation layer; nothing here executes them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from errors import ChatDeskError, ErrorCode

from .models import ActionGroup, CanonicalResponse, CTAButton, FailureClassification
from .normalizer import build_response

logger = logging.getLogger(__name__)


class FailureCategory(Enum):
    """Transport failure categories, in classification priority order."""

    CONNECTIVITY = "connectivity"
    RATE_LIMITED = "rate_limited"
    SERVER_FAULT = "server_fault"
    AUTH_REQUIRED = "auth_required"
    OTHER = "other"


_CODE_CATEGORIES = {
    ErrorCode.TRANSPORT_UNREACHABLE: FailureCategory.CONNECTIVITY,
    ErrorCode.TRANSPORT_TIMEOUT: FailureCategory.CONNECTIVITY,
    ErrorCode.TRANSPORT_RATE_LIMITED: FailureCategory.RATE_LIMITED,
    ErrorCode.TRANSPORT_SERVER_FAULT: FailureCategory.SERVER_FAULT,
    ErrorCode.TRANSPORT_AUTH_REQUIRED: FailureCategory.AUTH_REQUIRED,
}


@dataclass(frozen=True)
class FailureSignal:
    """What the dispatcher tells us about a failed request."""

    category: FailureCategory
    status_code: Optional[int] = None
    detail: str = ""

    @classmethod
    def from_status(cls, status_code: Optional[int], detail: str = "") -> "FailureSignal":
        """Build a signal from an HTTP status. 0 means no response at all."""
        if status_code == 0:
            category = FailureCategory.CONNECTIVITY
        elif status_code == 429:
            category = FailureCategory.RATE_LIMITED
        elif status_code is not None and 500 <= status_code <= 599:
            category = FailureCategory.SERVER_FAULT
        elif status_code == 401:
            category = FailureCategory.AUTH_REQUIRED
        else:
            category = FailureCategory.OTHER
        return cls(category=category, status_code=status_code, detail=detail)

    @classmethod
    def from_exception(cls, error: BaseException) -> "FailureSignal":
        """Build a signal from an exception raised by a dispatcher."""
        if isinstance(error, ChatDeskError):
            category = _CODE_CATEGORIES.get(error.code, FailureCategory.OTHER)
            return cls(category=category, status_code=getattr(error, "status_code", None), detail=error.message)
        return cls(category=FailureCategory.OTHER, detail=str(error))


def _buttons(*pairs) -> list:
    return [ActionGroup(cta=[CTAButton(label=label, value=value) for label, value in pairs])]


_RETRY_OR_SUPPORT = (("Try Again", "retry"), ("Contact Support", "support"))

# (message, action pairs) per category
_CLASSIFICATIONS = {
    FailureCategory.CONNECTIVITY: (
        "Unable to connect to the server. Please check your internet connection.",
        _RETRY_OR_SUPPORT,
    ),
    FailureCategory.RATE_LIMITED: (
        "Too many requests. Please wait a moment before trying again.",
        (("Wait and Retry", "wait_retry"),),
    ),
    FailureCategory.SERVER_FAULT: (
        "Server error occurred. Our team has been notified.",
        _RETRY_OR_SUPPORT,
    ),
    FailureCategory.AUTH_REQUIRED: (
        "Authentication required. Please refresh the page and try again.",
        (("Refresh Page", "refresh"),),
    ),
    FailureCategory.OTHER: (
        "I apologize, but I encountered an error. Please try again.",
        _RETRY_OR_SUPPORT,
    ),
}


def to_signal(failure: Any) -> FailureSignal:
    """Coerce a signal, HTTP status, exception or None into a FailureSignal."""
    if isinstance(failure, FailureSignal):
        return failure
    if isinstance(failure, FailureCategory):
        return FailureSignal(category=failure)
    if isinstance(failure, int) and not isinstance(failure, bool):
        return FailureSignal.from_status(failure)
    if isinstance(failure, BaseException):
        return FailureSignal.from_exception(failure)
    return FailureSignal(category=FailureCategory.OTHER)


def classify(failure: Any) -> FailureClassification:
    """Classify a failure into a user-facing message and recovery actions.

    Accepts a FailureSignal, FailureCategory, HTTP status, exception or
    None. Never raises; unknown input lands in the generic row.
    """
    signal = to_signal(failure)
    message, pairs = _CLASSIFICATIONS.get(signal.category, _CLASSIFICATIONS[FailureCategory.OTHER])
    return FailureClassification(user_message=message, actions=_buttons(*pairs))


def to_response(classification: FailureClassification) -> CanonicalResponse:
    """Present a classification as an ordinary chat reply."""
    return build_response(classification.user_message, classification.actions)
