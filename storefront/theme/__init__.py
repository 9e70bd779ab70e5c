"""Thème — palette cascade + contraste."""
from .colors import hex_to_rgb, is_color_dark, text_color_for_background, LIGHT_TEXT, DARK_TEXT
from .resolver import ThemeColors, DEFAULT_COLORS, parse_theme, resolve_theme

__all__ = [
    "hex_to_rgb", "is_color_dark", "text_color_for_background", "LIGHT_TEXT", "DARK_TEXT",
    "ThemeColors", "DEFAULT_COLORS", "parse_theme", "resolve_theme",
]
