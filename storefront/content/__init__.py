"""Contenu — éléments hydratés + résolution des sources."""
from .items import ProductInfo, CategoryInfo, FeaturedTagInfo, select_image_url
from .resolver import (
    ContentSourceResolver, ContentResult, ResolutionContext,
    effective_product_ids, dedupe_by_name,
)

__all__ = [
    "ProductInfo", "CategoryInfo", "FeaturedTagInfo", "select_image_url",
    "ContentSourceResolver", "ContentResult", "ResolutionContext",
    "effective_product_ids", "dedupe_by_name",
]
