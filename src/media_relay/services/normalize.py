"""Normalization helpers for loosely typed upstream fields.

Every function here is total: malformed or missing input yields ``None`` (or a
documented fallback) instead of raising. Callers treat ``None`` as "unknown"
and emit it as ``null``.
"""
from __future__ import annotations

import re
from typing import Any, Final, Optional

_VIEW_COUNT_RE: Final[re.Pattern[str]] = re.compile(r"[\d,]+")
_ISO_DURATION_RE: Final[re.Pattern[str]] = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")

# (minimum width, label), highest first
_IMAGE_QUALITIES: Final[tuple[tuple[int, str], ...]] = (
    (1280, "1280x720"),
    (640, "640x480"),
    (480, "480x360"),
    (320, "320x180"),
)
_SMALLEST_IMAGE_QUALITY: Final[str] = "120x90"


def _to_int(digits: str) -> Optional[int]:
    # int() refuses digit strings past sys.get_int_max_str_digits()
    try:
        return int(digits)
    except ValueError:
        return None


def parse_duration_text(text: Optional[str]) -> Optional[int]:
    """Convert ``[[H:]M:]S`` text into seconds.

    Notes
    -----
    - Parts are read right to left: seconds, minutes, hours, and so on, each
      weighted by a further power of 60.
    - Any part that is not plain digits makes the whole value unknown, so
      ``"3:4x"`` gives ``None`` rather than a silently truncated number.

    Examples
    --------
    >>> parse_duration_text("3:45")
    225
    >>> parse_duration_text("1:02:03")
    3723
    """

    if not text:
        return None
    seconds: int = 0
    for index, part in enumerate(reversed(text.split(":"))):
        part = part.strip()
        if not part.isascii() or not part.isdigit():
            return None
        value: Optional[int] = _to_int(part)
        if value is None:
            return None
        seconds += value * 60**index
    return seconds


def parse_view_count_text(text: Optional[str]) -> Optional[int]:
    """Extract the first number from text like ``"1,234,567 views"``."""

    if not text:
        return None
    match: Optional[re.Match[str]] = _VIEW_COUNT_RE.search(text)
    if match is None:
        return None
    digits: str = match.group(0).replace(",", "")
    return _to_int(digits) if digits else None


def classify_image_width(width: int) -> str:
    """Map a thumbnail pixel width onto a quality label."""

    for minimum, label in _IMAGE_QUALITIES:
        if width >= minimum:
            return label
    return _SMALLEST_IMAGE_QUALITY


def parse_iso8601_duration(text: Optional[str]) -> str:
    """Render an ISO-8601 ``PT#H#M#S`` duration as ``H:MM:SS`` or ``M:SS``.

    Notes
    -----
    - Missing components count as zero; input without a ``PT`` section
      falls back to ``"0:00"``.
    """

    match: Optional[re.Match[str]] = _ISO_DURATION_RE.search(text or "")
    if match is None:
        return "0:00"

    parts: list[Optional[int]] = [_to_int(group) if group else 0 for group in match.groups()]
    if None in parts:
        return "0:00"
    hours, minutes, seconds = parts
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def parse_int(value: Any) -> Optional[int]:
    """Coerce catalog scalars (``"245"``, ``245``, ``""``) to ``int``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text: str = str(value).strip()
    if not text.isascii() or not text.isdigit():
        return None
    return _to_int(text)


def parse_flag(value: Any) -> bool:
    """Read catalog booleans, which arrive as ``"0"``/``"1"``/``"true"``/``"false"``."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes"}
