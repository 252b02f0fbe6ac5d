"""
Response Normalizer - collapses backend payloads into a CanonicalResponse.

The backend is loosely typed. A reply may arrive as:
- a plain string
- a mapping carrying the text under response / message / reply, actions
  under CTAResponse / ctaResponse / actions and usage under usages / usage
- anything else (None, numbers, lists), which is treated as malformed

Each field is read by a named ExtractorRule whose keys are probed in fixed
priority order. normalize() never raises.
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from errors import ErrorCode

from .models import ActionGroup, CanonicalResponse, CTAButton, Usage, VideoLink
from .segments import split

logger = logging.getLogger(__name__)

FALLBACK_TEXT = "I received an unexpected response format. Please try again."


@dataclass(frozen=True)
class ExtractorRule:
    """Reads one canonical field from a payload mapping.

    The first key whose value passes ``accept`` wins and is passed
    through ``coerce``. When no key matches, ``default()`` is returned.
    """

    name: str
    keys: Tuple[str, ...]
    accept: Callable[[Any], bool]
    coerce: Callable[[Any], Any]
    default: Callable[[], Any]

    def apply(self, payload: Mapping) -> Any:
        for key in self.keys:
            if key in payload and self.accept(payload[key]):
                return self.coerce(payload[key])
        return self.default()


# =============================================================================
# FIELD COERCION
# =============================================================================


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _first_key(item: Mapping, keys: Sequence[str]) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_label(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _coerce_buttons(value: Any) -> List[CTAButton]:
    buttons = []
    for item in _as_list(value):
        if not isinstance(item, Mapping):
            continue
        label = _as_label(_first_key(item, ("name", "label", "text")))
        token = _as_label(_first_key(item, ("value", "action")))
        if label and token:
            buttons.append(CTAButton(label=label, value=token))
    return buttons


def _coerce_videos(value: Any) -> List[VideoLink]:
    videos = []
    for item in _as_list(value):
        if not isinstance(item, Mapping):
            continue
        label = _as_label(_first_key(item, ("name", "label", "title")))
        url = _as_label(_first_key(item, ("value", "url", "href")))
        if url:
            videos.append(VideoLink(label=label or url, url=url))
    return videos


def _coerce_actions(value: Any) -> List[ActionGroup]:
    groups = []
    for item in _as_list(value):
        if not isinstance(item, Mapping):
            continue
        group = ActionGroup(
            cta=_coerce_buttons(_first_key(item, ("cta", "buttons"))),
            video_links=_coerce_videos(_first_key(item, ("videoLinks", "video_links", "videos"))),
        )
        if not group.is_empty:
            groups.append(group)
    return groups


def _as_number(value: Any, cast: type) -> Any:
    if isinstance(value, bool):
        return cast(0)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return cast(0)
    if math.isnan(number) or math.isinf(number):
        return cast(0)
    return cast(number)


# Legacy backend keys first, then camelCase and snake_case
_USAGE_FIELDS = {
    "input_tokens": (("inputtoken", "inputTokens", "input_tokens", "inputToken"), int),
    "output_tokens": (("outputtikem", "outputtoken", "outputTokens", "output_tokens", "outputToken"), int),
    "cost": (("cost",), float),
    "duration_ms": (("duration", "durationMs", "duration_ms"), float),
}


def _coerce_usage(value: Mapping) -> Usage:
    fields = {}
    for name, (keys, cast) in _USAGE_FIELDS.items():
        fields[name] = _as_number(_first_key(value, keys), cast)

    estimated = _first_key(value, ("isEstimated", "is_estimated"))
    fields["is_estimated"] = estimated if isinstance(estimated, bool) else True
    return Usage(**fields)


TEXT_RULE = ExtractorRule(
    name="text",
    keys=("response", "message", "reply"),
    accept=_is_text,
    coerce=lambda v: v,
    default=lambda: None,
)

ACTIONS_RULE = ExtractorRule(
    name="actions",
    keys=("CTAResponse", "ctaResponse", "actions"),
    accept=bool,
    coerce=_coerce_actions,
    default=list,
)

USAGE_RULE = ExtractorRule(
    name="usage",
    keys=("usages", "usage"),
    accept=lambda v: isinstance(v, Mapping),
    coerce=_coerce_usage,
    default=Usage,
)

# Evaluated in this order for every mapping payload
PAYLOAD_RULES = (TEXT_RULE, ACTIONS_RULE, USAGE_RULE)


# =============================================================================
# NORMALIZATION
# =============================================================================


def _serialize(payload: Mapping) -> str:
    """Last-resort text for a mapping that carries no reply field."""
    try:
        return json.dumps(payload, default=str, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning(f"{ErrorCode.RESPONSE_MALFORMED.value}: payload not serializable ({e})")
        return FALLBACK_TEXT


def build_response(text: str, actions: Optional[List[ActionGroup]] = None, usage: Optional[Usage] = None,
                   simulated: bool = False) -> CanonicalResponse:
    """Assemble a CanonicalResponse with segments derived from ``text``."""
    return CanonicalResponse(
        text=text,
        actions=list(actions or []),
        usage=usage if usage is not None else Usage(),
        segments=split(text),
        simulated=simulated,
    )


def fallback_response() -> CanonicalResponse:
    return build_response(FALLBACK_TEXT)


def normalize(payload: Any) -> CanonicalResponse:
    """Normalize any backend payload into a CanonicalResponse.

    Args:
        payload: Decoded backend body of any shape

    Returns:
        CanonicalResponse with non-empty text and fully populated usage
    """
    if isinstance(payload, str):
        if not payload.strip():
            logger.warning(f"{ErrorCode.RESPONSE_MALFORMED.value}: blank string payload")
            return fallback_response()
        return build_response(payload)

    if isinstance(payload, Mapping):
        fields = {rule.name: rule.apply(payload) for rule in PAYLOAD_RULES}
        text = fields["text"]
        if text is None:
            logger.debug("Payload has no reply field, serializing whole object")
            text = _serialize(payload)
        return build_response(text, fields["actions"], fields["usage"])

    logger.warning(f"{ErrorCode.RESPONSE_MALFORMED.value}: unexpected payload type {type(payload).__name__}")
    return fallback_response()
