"""
Schéma du layout publié — liste ordonnée de sections JSON.

Chaque section porte :
  - section_type   : BANNER_MEDIA | BASE_CATEGORY | TAG_GROUP_NAV | PRODUCT_COLLECTION
  - layout         : style d'affichage (ICON_ROW | CAROUSEL | GRID | BANNER) + forme/taille
  - source         : descripteur de contenu (union discriminée par `type`), null pour les bannières
  - display_order  : ordre de rendu (tri stable)
  - location_id    : null = toutes les locations, sinon une seule

section_type, style, collection_mode et criteria_type restent des chaînes libres :
une valeur inconnue ne doit pas invalider tout le document, elle est écartée
plus tard (section non rendue ou contenu vide).
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Snapshot(BaseModel):
    """Instantané immuable issu du document publié.
    Les identifiants restent opaques : un id numérique (7) est lu comme "7".
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class ClickAction(_Snapshot):
    """Intention de navigation déclarative (consommée par la couche de présentation)."""
    type: str
    target: str = ""


class LayoutStyleConfig(_Snapshot):
    style: Optional[str] = None
    shape: Optional[str] = None
    size: Optional[str] = None
    item_dimensions: Optional[str] = None
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    banner_width_mode: Optional[Literal["full", "half"]] = None
    banner_height_mode: Optional[Literal["small", "medium", "large"]] = None


# ── Sources de contenu ──────────────────────────────────────────────────────

class CategorySource(_Snapshot):
    type: Literal["BASE_CATEGORY"] = "BASE_CATEGORY"
    ids: List[str] = Field(default_factory=list)


class TagGroupSource(_Snapshot):
    type: Literal["TAG_GROUP_NAV"] = "TAG_GROUP_NAV"
    ids: List[str] = Field(default_factory=list)


class ProductCollectionSource(_Snapshot):
    type: Literal["PRODUCT_COLLECTION"] = "PRODUCT_COLLECTION"
    collection_mode: Optional[str] = None
    product_ids: List[str] = Field(default_factory=list)
    manual_selections_by_location: Dict[str, List[str]] = Field(
        default_factory=dict, alias="manualSelectionsByLocation",
    )
    criteria_type: Optional[str] = None
    criteria_timeframe_days: Optional[int] = None
    criteria_limit: Optional[int] = None
    source_tag_id: Optional[str] = None
    source_category_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_ids(cls, data: Any) -> Any:
        # anciens documents : sélection manuelle rangée sous `ids`
        if isinstance(data, dict) and not data.get("product_ids") and data.get("ids"):
            data = {**data, "product_ids": data["ids"]}
        return data


# Union discriminée par type — toute nouvelle variante doit être ajoutée ici
ContentSource = Annotated[
    Union[CategorySource, TagGroupSource, ProductCollectionSource],
    Field(discriminator="type"),
]


class LayoutSection(_Snapshot):
    section_id: str
    title: Optional[str] = None
    section_type: str
    display_order: Any = 0
    location_id: Optional[str] = None
    layout: LayoutStyleConfig = LayoutStyleConfig()
    source: Optional[ContentSource] = None
    custom_image_url: Optional[str] = None
    custom_image_url_secondary: Optional[str] = None
    link_behavior: Optional[ClickAction] = None
    link_behavior_secondary: Optional[ClickAction] = None
