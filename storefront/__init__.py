"""
Storefront layout engine — résolution de la page d'accueil d'une boutique.

Usage :
    >>> from storefront import resolve_layout_document, resolve_theme, HomePageService
    >>> sections = resolve_layout_document(raw_layout, location_id="loc-1")
    >>> theme = resolve_theme(store_theme, app_theme)
    >>> page = await HomePageService(store).build("loc-1")
"""
from .layout import (
    LayoutSection, LayoutStyleConfig, ClickAction,
    ContentSource, CategorySource, TagGroupSource, ProductCollectionSource,
    parse_layout_document, resolve_layout, resolve_layout_document,
)
from .content import (
    ProductInfo, CategoryInfo, FeaturedTagInfo,
    ContentSourceResolver, ContentResult, ResolutionContext,
)
from .theme import ThemeColors, DEFAULT_COLORS, resolve_theme, is_color_dark, text_color_for_background
from .dispatcher import SectionDispatcher, RenderableSection, BannerItem
from .home import HomePage, HomePageService, HomePageSession
from .datastore import DataStore, DataStoreError, Filter, Order, SqlDataStore

__version__ = "0.1.0"

__all__ = [
    # layout
    "LayoutSection", "LayoutStyleConfig", "ClickAction",
    "ContentSource", "CategorySource", "TagGroupSource", "ProductCollectionSource",
    "parse_layout_document", "resolve_layout", "resolve_layout_document",
    # contenu
    "ProductInfo", "CategoryInfo", "FeaturedTagInfo",
    "ContentSourceResolver", "ContentResult", "ResolutionContext",
    # thème
    "ThemeColors", "DEFAULT_COLORS", "resolve_theme", "is_color_dark", "text_color_for_background",
    # dispatch + home
    "SectionDispatcher", "RenderableSection", "BannerItem",
    "HomePage", "HomePageService", "HomePageSession",
    # données
    "DataStore", "DataStoreError", "Filter", "Order", "SqlDataStore",
]
