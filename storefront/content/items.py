"""
Éléments de contenu hydratés — produits, catégories, tags mis en avant.
Conversion row (dict issu du DataStore) → modèle Pydantic.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class ProductInfo(BaseModel):
    id: str
    name: str
    image_url: Optional[str] = None
    location_id: Optional[str] = None
    price: Optional[float] = None
    offer_price: Optional[float] = None
    featured_tag_ids: List[str] = Field(default_factory=list)

    @property
    def is_discounted(self) -> bool:
        """Réduction réelle : offer_price numérique strictement inférieur à price."""
        return is_number(self.price) and is_number(self.offer_price) and self.offer_price < self.price


class CategoryInfo(BaseModel):
    id: str
    name: str
    icon_url: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None


class FeaturedTagInfo(BaseModel):
    id: str
    name: str
    icon_url: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    # Couleurs résolues pour la puce (voir dispatcher)
    display_background: Optional[str] = None
    display_text: Optional[str] = None


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_or_none(value: Any) -> Optional[float]:
    return value if is_number(value) else None


def select_image_url(image_data: Any) -> Optional[str]:
    """
    Image d'affichage d'un produit :
      liste → entrée is_primary, sinon la première ; chaîne → URL directe ; sinon aucune.
    """
    if isinstance(image_data, str):
        return image_data or None
    if not isinstance(image_data, list) or not image_data:
        return None
    entries = [img for img in image_data if isinstance(img, dict)]
    primary = next((img for img in entries if img.get("is_primary")), None)
    chosen = primary or (image_data[0] if isinstance(image_data[0], dict) else None)
    return chosen.get("url") if chosen else None


def product_from_row(row: dict) -> ProductInfo:
    tags = row.get("featured_tag_ids")
    return ProductInfo(
        id=row["id"],
        name=row.get("name") or "",
        image_url=select_image_url(row.get("image_data")),
        location_id=row.get("location_id"),
        price=_number_or_none(row.get("price")),
        offer_price=_number_or_none(row.get("offer_price")),
        featured_tag_ids=tags if isinstance(tags, list) else [],
    )


def category_from_row(row: dict) -> CategoryInfo:
    return CategoryInfo(
        id=row["id"],
        name=row.get("name") or "",
        icon_url=row.get("icon_url"),
        background_color=row.get("background_color"),
        text_color=row.get("text_color"),
    )


def tag_from_row(row: dict) -> FeaturedTagInfo:
    return FeaturedTagInfo(
        id=row["id"],
        name=row.get("name") or "",
        icon_url=row.get("icon_url"),
        background_color=row.get("background_color"),
        text_color=row.get("text_color"),
    )
