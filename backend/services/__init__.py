"""
ChatDesk Services - client core.

- normalizer: backend payload -> CanonicalResponse
- segments: reply text -> display segments
- error_classifier: dispatch failure -> user message + recovery actions
- simulator: offline replies for simulated mode
- kv_store: preference / session identity stores (Redis with fallback)
- dispatcher: HTTP transport to the chat backend
- chat_session: session identity, history and the send cycle
"""

from .chat_session import ChatSessionManager, ChatState
from .error_classifier import FailureCategory, FailureSignal, classify
from .normalizer import normalize
from .segments import split

__all__ = [
    "ChatSessionManager",
    "ChatState",
    "FailureCategory",
    "FailureSignal",
    "classify",
    "normalize",
    "split",
]
