"""
ChatDesk data model - canonical response, messages and action groups.

Every backend payload collapses into a CanonicalResponse. Messages hold
one conversation turn each and are owned by the session manager.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CTAButton:
    """A clickable call-to-action button. ``value`` is the action token."""

    label: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class VideoLink:
    label: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "url": self.url}


@dataclass
class ActionGroup:
    """A bundle of buttons and/or video links attached to a reply."""

    cta: List[CTAButton] = field(default_factory=list)
    video_links: List[VideoLink] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.cta and not self.video_links

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"cta": [b.to_dict() for b in self.cta]}
        if self.video_links:
            data["videoLinks"] = [v.to_dict() for v in self.video_links]
        return data


@dataclass
class Usage:
    """Token/cost accounting for one reply. Always fully populated."""

    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0
    duration_ms: float = 0.0
    is_estimated: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "cost": self.cost,
            "durationMs": self.duration_ms,
            "isEstimated": self.is_estimated,
        }


@dataclass
class CanonicalResponse:
    """Normalized assistant reply.

    Attributes:
        text: Reply text, never empty
        actions: Ordered action groups
        usage: Usage accounting (defaulted when the backend sends none)
        segments: ``text`` split into display bubbles
        simulated: True when generated locally instead of by the backend
    """

    text: str
    actions: List[ActionGroup] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    segments: List[str] = field(default_factory=list)
    simulated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "actions": [g.to_dict() for g in self.actions],
            "usage": self.usage.to_dict(),
            "segments": list(self.segments),
        }


@dataclass(frozen=True)
class FailureClassification:
    """User-facing message and recovery actions for a failed request."""

    user_message: str
    actions: List[ActionGroup]


@dataclass(frozen=True)
class Message:
    """One conversation turn. Immutable once appended to history."""

    id: str
    text: str
    is_from_user: bool
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    response: Optional[CanonicalResponse] = None
    segments: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "isFromUser": self.is_from_user,
            "createdAt": self.created_at.isoformat(),
        }
        if self.response is not None:
            data["response"] = self.response.to_dict()
        if self.segments is not None:
            data["segments"] = list(self.segments)
        return data


@dataclass(frozen=True)
class ChatEvent:
    """Notification published by the session manager on every transition.

    kind is one of "loading", "messages" or "cleared".
    """

    kind: str
    messages: List[Message]
    busy: bool
