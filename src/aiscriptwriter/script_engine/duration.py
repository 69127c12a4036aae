from __future__ import annotations

import math
import re
from typing import Optional

SCENE_DURATION_SECONDS = 8
"""Length in seconds of one generated video clip; every scene maps to one clip."""

DURATION_OPTIONS: tuple[str, ...] = (
    "5 phút",
    "8 phút",
    "10 phút",
    "12 phút",
    "15 phút",
    "20 phút",
    "25 phút",
    "30 phút",
    "40 phút",
    "50 phút",
    "60 phút",
    "90 phút",
)

_MINUTES_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:phút|minute|min|m)", re.IGNORECASE)
_SECONDS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:giây|second|sec|s)", re.IGNORECASE)
_NUMBER_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_duration_to_seconds(text: str | None) -> Optional[int]:
    """Convert free text such as ``"5 phút"`` or ``"1m30s"`` into whole seconds.

    Minute and second components are summed. A bare number is read as seconds.
    Returns ``None`` when nothing positive can be extracted.
    """
    if not text or not text.strip():
        return None

    total = 0.0
    minutes = _MINUTES_PATTERN.search(text)
    if minutes:
        total += float(minutes.group(1)) * 60
    seconds = _SECONDS_PATTERN.search(text)
    if seconds:
        total += float(seconds.group(1))

    stripped = text.strip()
    if total == 0 and _NUMBER_PATTERN.match(stripped):
        total = float(stripped)

    if total <= 0:
        return None
    # A positive sub-second duration still counts as one second.
    return max(1, _round_half_up(total))


def scenes_for(total_seconds: float) -> int:
    """Number of scenes needed to fill ``total_seconds`` of video."""
    return _round_half_up(total_seconds / SCENE_DURATION_SECONDS)
