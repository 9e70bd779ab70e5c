"""
Couleurs — parsing hex + contraste.
Luminance perçue (YIQ) : (299·R + 587·G + 114·B) / 1000, sombre si < 128.
"""
import re
from typing import Any, Optional, Tuple

LIGHT_TEXT = "#FFFFFF"
DARK_TEXT  = "#333333"

_HEX6 = re.compile(r"[0-9a-fA-F]{6}")


def hex_to_rgb(hex_color: Any) -> Optional[Tuple[int, int, int]]:
    """Convertit #RGB / #RRGGBB (dièse optionnel) en (R, G, B) ; None si illisible."""
    if not isinstance(hex_color, str):
        return None
    color = hex_color[1:] if hex_color.startswith("#") else hex_color
    if len(color) == 3:
        color = "".join(ch * 2 for ch in color)
    if not _HEX6.fullmatch(color):
        return None
    return tuple(int(color[i:i+2], 16) for i in (0, 2, 4))


def luminance(rgb: Tuple[int, int, int]) -> float:
    r, g, b = rgb
    return (r * 299 + g * 587 + b * 114) / 1000


def is_color_dark(hex_color: Any) -> bool:
    """Couleur illisible → considérée claire (texte sombre par défaut)."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return False
    return luminance(rgb) < 128


def text_color_for_background(bg: Any) -> str:
    return LIGHT_TEXT if is_color_dark(bg) else DARK_TEXT
