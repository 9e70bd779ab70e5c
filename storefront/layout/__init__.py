"""Layout — schéma + parser + resolver."""
from .schema import (
    LayoutSection, LayoutStyleConfig, ClickAction,
    ContentSource, CategorySource, TagGroupSource, ProductCollectionSource,
)
from .parser import parse_layout_document, has_consistent_source, invalid_layout_entries
from .resolver import resolve_layout, resolve_layout_document

__all__ = [
    "LayoutSection", "LayoutStyleConfig", "ClickAction",
    "ContentSource", "CategorySource", "TagGroupSource", "ProductCollectionSource",
    "parse_layout_document", "has_consistent_source", "invalid_layout_entries",
    "resolve_layout", "resolve_layout_document",
]
