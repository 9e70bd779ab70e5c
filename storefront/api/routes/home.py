"""
Lecture — page d'accueil résolue + sélecteurs de catalogue.

GET /api/home?location_id=…                       → HomePage (sections hydratées + thème)
GET /api/stores                                   → marques
GET /api/stores/{store_id}/locations              → locations d'une marque
GET /api/stores/{store_id}/categories             → catégories
GET /api/stores/{store_id}/featured-tags          → tags mis en avant
GET /api/stores/{store_id}/settings               → logo + thème résolu (boutique → app → défauts)
GET /api/stores/{store_id}/products/search?q=…    → recherche produits (dédoublonnée hors location)
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...content.items import category_from_row, tag_from_row
from ...content.resolver import ContentSourceResolver
from ...database import (
    get_db, db_list_stores, db_list_locations, db_list_categories, db_list_featured_tags,
    db_get_store_settings, db_get_app_settings,
)
from ...datastore import DataStore
from ...home import HomePageService
from ...theme.resolver import resolve_theme
from ..deps import get_datastore

log = logging.getLogger(__name__)
router = APIRouter(tags=["home"])


@router.get("/api/home", summary="Page d'accueil résolue pour une location")
async def home(location_id: Optional[str] = None, store: DataStore = Depends(get_datastore)):
    page = await HomePageService(store).build(location_id)
    return page.model_dump(mode="json", by_alias=True)


@router.get("/api/stores")
def stores(db: Session = Depends(get_db)):
    return [{"id": s.id, "name": s.name} for s in db_list_stores(db)]


@router.get("/api/stores/{store_id}/locations")
def locations(store_id: str, db: Session = Depends(get_db)):
    return [{"id": l.id, "name": l.name, "store_id": l.store_id} for l in db_list_locations(db, store_id)]


@router.get("/api/stores/{store_id}/categories")
def categories(store_id: str, db: Session = Depends(get_db)):
    return [
        category_from_row(vars(c)).model_dump(mode="json")
        for c in db_list_categories(db, store_id)
    ]


@router.get("/api/stores/{store_id}/featured-tags")
def featured_tags(store_id: str, db: Session = Depends(get_db)):
    return [
        tag_from_row(vars(t)).model_dump(mode="json", exclude={"display_background", "display_text"})
        for t in db_list_featured_tags(db, store_id)
    ]


@router.get("/api/stores/{store_id}/products/search")
async def search_products(
    store_id: str,
    q: Optional[str] = None,
    ids: Optional[List[str]] = Query(None),
    location_id: Optional[str] = None,
    dedupe: bool = True,
    store: DataStore = Depends(get_datastore),
):
    term = ids if ids else (q or "")
    products = await ContentSourceResolver(store).search_products(
        store_id, term, location_id=location_id, deduplicate_globally=dedupe,
    )
    return [p.model_dump(mode="json") for p in products]


@router.get("/api/stores/{store_id}/settings")
def store_settings(store_id: str, db: Session = Depends(get_db)):
    settings = db_get_store_settings(db, store_id)
    app_settings = db_get_app_settings(db)
    theme = resolve_theme(
        settings.theme_store if settings else None,
        app_settings.theme if app_settings else None,
    )
    return {
        "store_id": store_id,
        "logo_url": settings.logo_url if settings else None,
        "theme": theme.model_dump(by_alias=True),
    }
