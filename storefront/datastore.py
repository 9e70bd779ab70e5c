"""
Capacité de requête — interface abstraite consommée par les résolveurs.

    fetch_by_id(entity, ids)                      → rows
    fetch_filtered(entity, filters, order, limit) → rows
    fetch_one(entity, filters)                    → row | None

Les résolveurs ne connaissent que cette interface ; SqlDataStore l'implémente
sur la base SQLite (une session par requête, exécutée dans un thread).
"""
import asyncio
import json
import logging
from typing import Any, Dict, List, Literal, Optional, Protocol, Sequence

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .models import (
    StoreDB, LocationDB, CategoryDB, FeaturedTagDB, ProductDB, StoreSettingsDB, AppSettingsDB,
)

log = logging.getLogger(__name__)

FilterOp = Literal["eq", "in", "gte", "not_null", "contains", "search"]


class DataStoreError(Exception):
    """Échec signalé par le magasin de données (réseau, SQL, entité inconnue…)."""


class Filter(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    op: FilterOp = "eq"
    value: Any = None


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    descending: bool = False


class DataStore(Protocol):
    async def fetch_by_id(self, entity: str, ids: Sequence[str], *,
                          filters: Sequence[Filter] = ()) -> List[dict]: ...

    async def fetch_filtered(self, entity: str, filters: Sequence[Filter],
                             order: Optional[Order] = None,
                             limit: Optional[int] = None) -> List[dict]: ...

    async def fetch_one(self, entity: str, filters: Sequence[Filter] = ()) -> Optional[dict]: ...


# ── Implémentation SQLAlchemy ──────────────────────────────────────────────

_ENTITIES: Dict[str, Any] = {
    "stores":         StoreDB,
    "locations":      LocationDB,
    "categories":     CategoryDB,
    "featured_tags":  FeaturedTagDB,
    "products":       ProductDB,
    "store_settings": StoreSettingsDB,
    "app_settings":   AppSettingsDB,
}

# Colonnes JSON stockées en TEXT, décodées à la lecture
_JSON_COLUMNS = {"image_data", "featured_tag_ids", "home_layout_draft", "home_layout_published"}


def _decode(raw: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _to_row(obj) -> dict:
    row = {}
    for attr in sa.inspect(obj).mapper.column_attrs:
        value = getattr(obj, attr.key)
        row[attr.key] = _decode(value) if attr.key in _JSON_COLUMNS else value
    return row


def _clause(model, flt: Filter):
    col = getattr(model, flt.field, None)
    if col is None:
        raise DataStoreError(f"Colonne inconnue : {model.__tablename__}.{flt.field}")
    if flt.op == "eq":
        return col.is_(None) if flt.value is None else col == flt.value
    if flt.op == "in":
        return col.in_(list(flt.value or []))
    if flt.op == "gte":
        return col >= flt.value
    if flt.op == "not_null":
        return col.isnot(None)
    if flt.op == "contains":
        # liste JSON écrite par jd() (ensure_ascii=False) : même encodage pour l'élément cherché
        return col.contains(json.dumps(flt.value, ensure_ascii=False), autoescape=True)
    if flt.op == "search":
        return sa.func.lower(col).contains(str(flt.value).lower(), autoescape=True)
    raise DataStoreError(f"Opérateur non supporté : {flt.op!r}")


class SqlDataStore:
    """DataStore adossé à une session SQLAlchemy synchrone."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _model(self, entity: str):
        model = _ENTITIES.get(entity)
        if model is None:
            raise DataStoreError(f"Entité inconnue : {entity!r}. Registry : {list(_ENTITIES)}")
        return model

    def _query(self, entity: str, filters: Sequence[Filter],
               order: Optional[Order], limit: Optional[int]) -> List[dict]:
        model = self._model(entity)
        stmt = sa.select(model)
        for flt in filters:
            stmt = stmt.where(_clause(model, flt))
        if order is not None:
            col = getattr(model, order.field)
            stmt = stmt.order_by(col.desc() if order.descending else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            with self._session_factory() as db:
                return [_to_row(obj) for obj in db.scalars(stmt).all()]
        except SQLAlchemyError as e:
            log.error("Requête %s : %s", entity, e)
            raise DataStoreError(f"Failed operation on {entity}: {e}") from e

    async def fetch_by_id(self, entity: str, ids: Sequence[str], *,
                          filters: Sequence[Filter] = ()) -> List[dict]:
        if not ids:
            return []
        flts = [Filter(field="id", op="in", value=list(ids)), *filters]
        return await asyncio.to_thread(self._query, entity, flts, None, None)

    async def fetch_filtered(self, entity: str, filters: Sequence[Filter],
                             order: Optional[Order] = None,
                             limit: Optional[int] = None) -> List[dict]:
        return await asyncio.to_thread(self._query, entity, list(filters), order, limit)

    async def fetch_one(self, entity: str, filters: Sequence[Filter] = ()) -> Optional[dict]:
        rows = await asyncio.to_thread(self._query, entity, list(filters), None, 1)
        return rows[0] if rows else None
