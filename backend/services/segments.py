"""Split reply text into display segments (one chat bubble each)."""

from typing import Any, List

SEGMENT_DELIMITER = "|"


def split(text: Any) -> List[str]:
    """Split ``text`` on ``|``, trim each piece and drop empty pieces.

    Non-string or empty input yields an empty list. Order is preserved.
    """
    if not text or not isinstance(text, str):
        return []

    parts = [part.strip() for part in text.split(SEGMENT_DELIMITER)]
    return [part for part in parts if part]
