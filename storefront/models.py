"""
Data models — Store, Location, Category, FeaturedTag, Product, settings
SQLAlchemy (SQLite) + Enums du moteur de layout
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ── ENUMS ──────────────────────────────────────────────────────────────

class SectionType(str, Enum):
    BANNER_MEDIA       = "BANNER_MEDIA"
    BASE_CATEGORY      = "BASE_CATEGORY"
    TAG_GROUP_NAV      = "TAG_GROUP_NAV"
    PRODUCT_COLLECTION = "PRODUCT_COLLECTION"


class LayoutStyle(str, Enum):
    ICON_ROW = "ICON_ROW"
    CAROUSEL = "CAROUSEL"
    GRID     = "GRID"
    BANNER   = "BANNER"


class ItemShape(str, Enum):
    SQUARE  = "SQUARE"
    CIRCLE  = "CIRCLE"
    ROUNDED = "ROUNDED"


class CollectionMode(str, Enum):
    MANUAL_SELECTION = "MANUAL_SELECTION"
    BY_CRITERIA      = "BY_CRITERIA"
    FROM_TAG         = "FROM_TAG"
    FROM_CATEGORY    = "FROM_CATEGORY"


class CriteriaType(str, Enum):
    NEW_ARRIVALS = "NEW_ARRIVALS"
    DISCOUNTED   = "DISCOUNTED"
    BEST_SELLERS = "BEST_SELLERS"
    TRENDING_NOW = "TRENDING_NOW"


class SectionStatus(str, Enum):
    READY       = "ready"
    ERROR       = "error"
    UNAVAILABLE = "unavailable"


# Combinaisons section_type × style acceptées par la couche de rendu
_ALL_STYLES = frozenset(LayoutStyle)
_NAV_STYLES = frozenset({LayoutStyle.ICON_ROW, LayoutStyle.CAROUSEL, LayoutStyle.GRID})

RENDERABLE_STYLES = {
    SectionType.BANNER_MEDIA:       _ALL_STYLES,
    SectionType.BASE_CATEGORY:      _NAV_STYLES,
    SectionType.TAG_GROUP_NAV:      _NAV_STYLES,
    SectionType.PRODUCT_COLLECTION: _ALL_STYLES,
}


def is_renderable(section_type: str, style: Optional[str]) -> bool:
    try:
        return LayoutStyle(style) in RENDERABLE_STYLES[SectionType(section_type)]
    except (ValueError, KeyError):
        return False


# ── ORM ────────────────────────────────────────────────────────────────

def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class StoreDB(Base):
    __tablename__ = "stores"
    id:                    Mapped[str]           = mapped_column(sa.String, primary_key=True, default=_uuid)
    name:                  Mapped[str]           = mapped_column(sa.String, nullable=False)
    home_layout_draft:     Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)   # JSON list
    home_layout_published: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)   # JSON list
    updated_at:            Mapped[datetime]      = mapped_column(sa.DateTime, default=datetime.utcnow)


class LocationDB(Base):
    __tablename__ = "locations"
    id:       Mapped[str] = mapped_column(sa.String, primary_key=True, default=_uuid)
    name:     Mapped[str] = mapped_column(sa.String, nullable=False)
    store_id: Mapped[str] = mapped_column(sa.String, sa.ForeignKey("stores.id"), nullable=False)


class CategoryDB(Base):
    __tablename__ = "categories"
    id:               Mapped[str]           = mapped_column(sa.String, primary_key=True, default=_uuid)
    store_id:         Mapped[str]           = mapped_column(sa.String, sa.ForeignKey("stores.id"), nullable=False)
    name:             Mapped[str]           = mapped_column(sa.String, nullable=False)
    icon_url:         Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    background_color: Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    text_color:       Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)


class FeaturedTagDB(Base):
    __tablename__ = "featured_tags"
    id:               Mapped[str]           = mapped_column(sa.String, primary_key=True, default=_uuid)
    store_id:         Mapped[str]           = mapped_column(sa.String, sa.ForeignKey("stores.id"), nullable=False)
    name:             Mapped[str]           = mapped_column(sa.String, nullable=False)
    icon_url:         Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    background_color: Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    text_color:       Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)


class ProductDB(Base):
    __tablename__ = "products"
    id:                     Mapped[str]             = mapped_column(sa.String, primary_key=True, default=_uuid)
    store_id:               Mapped[str]             = mapped_column(sa.String, sa.ForeignKey("stores.id"), nullable=False)
    location_id:            Mapped[Optional[str]]   = mapped_column(sa.String, sa.ForeignKey("locations.id"), nullable=True)
    name:                   Mapped[str]             = mapped_column(sa.String, nullable=False)
    price:                  Mapped[Optional[float]] = mapped_column(sa.Float, nullable=True)
    offer_price:            Mapped[Optional[float]] = mapped_column(sa.Float, nullable=True)
    image_data:             Mapped[Optional[str]]   = mapped_column(sa.Text, nullable=True)   # JSON [{url, is_primary}]
    referenced_category_id: Mapped[Optional[str]]   = mapped_column(sa.String, nullable=True)
    featured_tag_ids:       Mapped[Optional[str]]   = mapped_column(sa.Text, nullable=True)   # JSON list d'ids
    created_at:             Mapped[datetime]        = mapped_column(sa.DateTime, default=datetime.utcnow)


class StoreSettingsDB(Base):
    __tablename__ = "store_settings"
    store_id:    Mapped[str]           = mapped_column(sa.String, sa.ForeignKey("stores.id"), primary_key=True)
    logo_url:    Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    theme_store: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)   # JSON ou texte libre


class AppSettingsDB(Base):
    __tablename__ = "app_settings"
    id:    Mapped[int]           = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    theme: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
