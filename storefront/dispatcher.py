"""
Section dispatcher — sections ordonnées → sections hydratées prêtes à peindre.

Pour chaque section :
  1. éligibilité section_type × style + cohérence de la source → sinon None (ignorée en silence)
  2. BANNER_MEDIA        → bannières calculées, aucun fetch
  3. PRODUCT_COLLECTION  → brand_id requis, sinon état "unavailable"
  4. autres              → ContentSourceResolver ; un échec de fetch donne un état "error"
                           pour cette section seulement

Les fetchs partent en parallèle (asyncio.gather) ; l'ordre de sortie est celui
des sections en entrée, quel que soit l'ordre d'arrivée des réponses.
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .content.items import FeaturedTagInfo
from .content.resolver import ContentItem, ContentSourceResolver, ResolutionContext
from .datastore import DataStoreError
from .layout.dimensions import (
    FULL_BANNER_WIDTH, HALF_BANNER_WIDTH, Dimension, banner_height, parse_icon_size,
)
from .layout.parser import has_consistent_source
from .layout.schema import (
    ClickAction, CategorySource, LayoutSection, ProductCollectionSource, TagGroupSource,
)
from .models import CollectionMode, ItemShape, SectionStatus, SectionType, is_renderable
from .theme.resolver import ThemeColors

log = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Product collection data unavailable."


class BannerItem(BaseModel):
    image_url: Optional[str] = None
    link_behavior: Optional[ClickAction] = None
    width: Dimension = FULL_BANNER_WIDTH
    height: Dimension = None
    missing_image: bool = False


class RenderableSection(BaseModel):
    section: LayoutSection
    status: SectionStatus = SectionStatus.READY
    theme: ThemeColors
    items: List[ContentItem] = Field(default_factory=list)
    banners: List[BannerItem] = Field(default_factory=list)
    error: Optional[str] = None
    retryable: bool = False
    diagnostic: Optional[str] = None
    empty_message: Optional[str] = None
    show_view_all: bool = False
    icon_size: Optional[int] = None
    circle: bool = False


# ── Helpers de présentation (purs) ──────────────────────────────────────────

def banner_items(section: LayoutSection) -> List[BannerItem]:
    """Pleine largeur → 1 bannière ; demi-largeur → principale + secondaire si présente."""
    height = banner_height(section.layout.banner_height_mode)

    def _item(url: Optional[str], link: Optional[ClickAction], width: Dimension) -> BannerItem:
        return BannerItem(image_url=url, link_behavior=link, width=width, height=height,
                          missing_image=not url)

    if section.layout.banner_width_mode == "half":
        items = [_item(section.custom_image_url, section.link_behavior, HALF_BANNER_WIDTH)]
        if section.custom_image_url_secondary:
            items.append(_item(section.custom_image_url_secondary, section.link_behavior_secondary,
                               HALF_BANNER_WIDTH))
        return items
    return [_item(section.custom_image_url, section.link_behavior, FULL_BANNER_WIDTH)]


def show_view_all(section: LayoutSection) -> bool:
    if section.link_behavior is None:
        return False
    source = section.source
    if isinstance(source, ProductCollectionSource):
        return len(source.product_ids) > 6 or (source.criteria_limit or 0) > 6
    if isinstance(source, (CategorySource, TagGroupSource)):
        return len(source.ids) > 10
    return False


def empty_message(source: ProductCollectionSource, location_id: Optional[str]) -> str:
    if source.collection_mode == CollectionMode.BY_CRITERIA.value:
        if not location_id:
            return "No products found. This collection might require a specific location to be selected."
        return f"No products found for criteria: {source.criteria_type or 'N/A'}."
    if source.collection_mode == CollectionMode.MANUAL_SELECTION.value:
        return "No products manually selected for this view."
    return "No products in this collection."


def colorize_tag(tag: FeaturedTagInfo, theme: ThemeColors) -> FeaturedTagInfo:
    """Fond : couleur du tag sinon secondary du thème ; texte : couleur du tag sinon contraste."""
    bg = tag.background_color or theme.secondary
    return tag.model_copy(update={
        "display_background": bg,
        "display_text": tag.text_color or theme.text_color_for(bg),
    })


# ── Dispatcher ──────────────────────────────────────────────────────────────

class SectionDispatcher:
    def __init__(self, resolver: ContentSourceResolver):
        self.resolver = resolver

    async def dispatch(
        self,
        sections: Sequence[LayoutSection],
        brand_id: Optional[str],
        location_id: Optional[str],
        theme: ThemeColors,
    ) -> List[Optional[RenderableSection]]:
        context = ResolutionContext(brand_id=brand_id, location_id=location_id)
        results = await asyncio.gather(*(self.hydrate(s, context, theme) for s in sections))
        log.info("Dispatch : %d sections, %d rendues (location %s)",
                 len(results), sum(r is not None for r in results), location_id)
        return list(results)

    async def hydrate(
        self,
        section: LayoutSection,
        context: ResolutionContext,
        theme: ThemeColors,
    ) -> Optional[RenderableSection]:
        if not is_renderable(section.section_type, section.layout.style):
            log.warning("Section %s (%r) ignorée : style %r non géré pour %s",
                        section.section_id, section.title, section.layout.style, section.section_type)
            return None
        if not has_consistent_source(section):
            log.warning("Section %s (%r) ignorée : source incohérente avec %s",
                        section.section_id, section.title, section.section_type)
            return None

        section_type = SectionType(section.section_type)
        out = RenderableSection(section=section, theme=theme, show_view_all=show_view_all(section))

        if section_type == SectionType.BANNER_MEDIA:
            out.banners = banner_items(section)
            return out

        if section_type in (SectionType.BASE_CATEGORY, SectionType.TAG_GROUP_NAV):
            out.icon_size = parse_icon_size(section.layout.size or section.layout.item_dimensions)
            out.circle = section.layout.shape == ItemShape.CIRCLE.value

        if section_type == SectionType.PRODUCT_COLLECTION and not context.brand_id:
            log.warning("PRODUCT_COLLECTION %s : brand_id absent", section.section_id)
            out.status = SectionStatus.UNAVAILABLE
            out.error = UNAVAILABLE_MESSAGE
            return out

        try:
            result = await self.resolver.resolve_with_diagnostics(section.source, context)
        except DataStoreError as e:
            log.error("Section %s (%r) : %s", section.section_id, section.title, e)
            return self._failed(out, str(e))
        except Exception as e:
            log.exception("Section %s (%r) : erreur inattendue", section.section_id, section.title)
            return self._failed(out, str(e) or type(e).__name__)

        items: List[ContentItem] = result.items
        if section_type == SectionType.TAG_GROUP_NAV:
            items = [colorize_tag(t, theme) for t in items]
        out.items = items
        out.diagnostic = result.diagnostic
        if section_type == SectionType.PRODUCT_COLLECTION and not items:
            out.empty_message = empty_message(section.source, context.location_id)
        return out

    @staticmethod
    def _failed(out: RenderableSection, message: str) -> RenderableSection:
        out.status = SectionStatus.ERROR
        out.error = message or "Failed to fetch content"
        out.retryable = True
        return out
