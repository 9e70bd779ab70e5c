"""Tailles des sections : icônes ("WxH") et bannières."""
from typing import Optional, Union

DEFAULT_ICON_SIZE = 60

BANNER_HEIGHTS = {"small": 100, "medium": 150, "large": 250}
HALF_BANNER_WIDTH = "48.5%"   # deux bannières + gouttière
FULL_BANNER_WIDTH = "100%"

Dimension = Union[int, str, None]


def _to_int(part: str) -> Optional[int]:
    digits = ""
    for ch in part.strip():
        if ch.isdigit():
            digits += ch
        else:
            break
    return int(digits) if digits else None


def parse_icon_size(size: Optional[str]) -> int:
    """"80x80" → 80 ; absent, non numérique ou ≤ 0 → 60."""
    if not size:
        return DEFAULT_ICON_SIZE
    value = _to_int(size.split("x")[0])
    return value if value and value > 0 else DEFAULT_ICON_SIZE


def banner_height(mode: Optional[str]) -> int:
    return BANNER_HEIGHTS.get(mode or "medium", BANNER_HEIGHTS["medium"])
