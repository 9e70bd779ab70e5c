"""
Content source resolver — descripteur de source d'une section → liste d'éléments concrets.

    BASE_CATEGORY       → catégories par ids (ordre de l'appelant conservé)
    TAG_GROUP_NAV       → tags par ids (ordre de l'appelant conservé)
    PRODUCT_COLLECTION  → produits selon collection_mode :
        MANUAL_SELECTION  sélection par location > product_ids global, puis filtre location
        BY_CRITERIA       NEW_ARRIVALS | DISCOUNTED | BEST_SELLERS | TRENDING_NOW
        FROM_CATEGORY     referenced_category_id == source_category_id
        FROM_TAG          featured_tag_ids contient source_tag_id

Un mode ou un critère inconnu donne une liste vide + un diagnostic, jamais une exception.
Seules les erreurs du DataStore remontent (DataStoreError) : c'est au dispatcher
de les transformer en état d'erreur de section.
"""
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_CRITERIA_LIMIT, DEFAULT_TIMEFRAME_DAYS, SEARCH_LIMIT
from ..datastore import DataStore, Filter, Order
from ..layout.schema import CategorySource, TagGroupSource, ProductCollectionSource
from ..models import CollectionMode, CriteriaType
from .items import (
    CategoryInfo, FeaturedTagInfo, ProductInfo,
    category_from_row, product_from_row, tag_from_row,
)

log = logging.getLogger(__name__)

ContentItem = Union[ProductInfo, CategoryInfo, FeaturedTagInfo]
E = TypeVar("E", bound=Enum)


class ResolutionContext(BaseModel):
    """Contexte explicite d'une passe de résolution (jamais lu depuis un état global)."""
    model_config = ConfigDict(frozen=True)

    brand_id: Optional[str] = None
    location_id: Optional[str] = None


class ContentResult(BaseModel):
    items: List[ContentItem] = Field(default_factory=list)
    diagnostic: Optional[str] = None


def _as_enum(enum_cls: Type[E], value: Optional[str]) -> Optional[E]:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _keep_id_order(rows: Iterable[dict], ids: Sequence[str]) -> List[dict]:
    """Réordonne les lignes selon la liste d'ids de l'appelant ; ids introuvables ignorés."""
    by_id = {row.get("id"): row for row in rows}
    ordered, seen = [], set()
    for _id in ids:
        if _id in by_id and _id not in seen:
            ordered.append(by_id[_id])
            seen.add(_id)
    return ordered


def effective_product_ids(source: ProductCollectionSource, location_id: Optional[str]) -> List[str]:
    """Sélection manuelle : liste de la location si non vide, sinon product_ids global."""
    if location_id:
        per_location = source.manual_selections_by_location.get(location_id) or []
        if per_location:
            return list(per_location)
    return list(source.product_ids)


def dedupe_by_name(products: Iterable[ProductInfo]) -> List[ProductInfo]:
    """Fusionne les homonymes (insensible à la casse) : première occurrence conservée."""
    seen, unique = set(), []
    for product in products:
        key = product.name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(product)
    return unique


def _visible_at(product: ProductInfo, location_id: Optional[str]) -> bool:
    return product.location_id is None or product.location_id == location_id


class ContentSourceResolver:
    """Résout les sources de contenu via une capacité de requête abstraite."""

    def __init__(
        self,
        store: DataStore,
        default_limit: int = DEFAULT_CRITERIA_LIMIT,
        default_timeframe_days: int = DEFAULT_TIMEFRAME_DAYS,
        search_limit: int = SEARCH_LIMIT,
        now: Callable[[], datetime] = datetime.utcnow,
    ):
        self.store = store
        self.default_limit = default_limit
        self.default_timeframe_days = default_timeframe_days
        self.search_limit = search_limit
        self.now = now

    # ── API publique ────────────────────────────────────────────────────────

    async def resolve(self, source, context: ResolutionContext) -> List[ContentItem]:
        return (await self.resolve_with_diagnostics(source, context)).items

    async def resolve_with_diagnostics(self, source, context: ResolutionContext) -> ContentResult:
        handler = self._SOURCE_HANDLERS.get(type(source))
        if handler is None:
            return self._unhandled(f"source non gérée : {type(source).__name__}")
        return await handler(self, source, context)

    async def search_products(
        self,
        brand_id: str,
        term: Union[str, Sequence[str]],
        location_id: Optional[str] = None,
        deduplicate_globally: bool = True,
    ) -> List[ProductInfo]:
        """
        Recherche produits d'une marque.
        Chaîne → recherche sur le nom ; liste → lookup par ids ; vide → [] sans requête.
        Dédoublonnage par nom uniquement en recherche globale (sans location).
        """
        filters = [Filter(field="store_id", value=brand_id)]
        if isinstance(term, (list, tuple)):
            if not term:
                return []
            filters.append(Filter(field="id", op="in", value=list(term)))
        elif isinstance(term, str) and term.strip():
            filters.append(Filter(field="name", op="search", value=term.strip()))
        else:
            return []
        if location_id:
            filters.append(Filter(field="location_id", value=location_id))

        rows = await self.store.fetch_filtered("products", filters, limit=self.search_limit)
        products = [product_from_row(r) for r in rows]
        if not location_id and deduplicate_globally:
            products = dedupe_by_name(products)
        return products

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _unhandled(self, message: str) -> ContentResult:
        log.warning("Contenu vide — %s", message)
        return ContentResult(items=[], diagnostic=message)

    def _limit(self, source: ProductCollectionSource) -> int:
        return source.criteria_limit or self.default_limit

    def _product_filters(self, context: ResolutionContext, *extra: Filter) -> List[Filter]:
        filters = [Filter(field="store_id", value=context.brand_id), *extra]
        if context.location_id:
            filters.append(Filter(field="location_id", value=context.location_id))
        return filters

    async def _fetch_products(self, filters: List[Filter], limit: int,
                              order: Optional[Order] = None) -> List[dict]:
        return await self.store.fetch_filtered("products", filters, order=order, limit=limit)

    # ── Catégories / tags ───────────────────────────────────────────────────

    async def _categories(self, source: CategorySource, context: ResolutionContext) -> ContentResult:
        if not source.ids:
            return ContentResult()
        rows = await self.store.fetch_by_id("categories", source.ids)
        return ContentResult(items=[category_from_row(r) for r in _keep_id_order(rows, source.ids)])

    async def _tags(self, source: TagGroupSource, context: ResolutionContext) -> ContentResult:
        if not source.ids:
            return ContentResult()
        rows = await self.store.fetch_by_id("featured_tags", source.ids)
        return ContentResult(items=[tag_from_row(r) for r in _keep_id_order(rows, source.ids)])

    # ── Collections de produits ─────────────────────────────────────────────

    async def _collection(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        if not context.brand_id:
            return self._unhandled("brand_id manquant pour PRODUCT_COLLECTION")
        mode = _as_enum(CollectionMode, source.collection_mode)
        if mode is None:
            return self._unhandled(f"collection_mode inconnu : {source.collection_mode!r}")
        return await self._MODE_HANDLERS[mode](self, source, context)

    async def _manual_selection(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        ids = effective_product_ids(source, context.location_id)
        if not ids:
            log.info("MANUAL_SELECTION sans produits (location %s)", context.location_id)
            return ContentResult()
        rows = await self.store.fetch_by_id(
            "products", ids, filters=[Filter(field="store_id", value=context.brand_id)],
        )
        products = [product_from_row(r) for r in _keep_id_order(rows, ids)[: self._limit(source)]]
        visible = [p for p in products if _visible_at(p, context.location_id)]
        log.debug("MANUAL_SELECTION : %d/%d produits visibles à %s",
                  len(visible), len(products), context.location_id)
        return ContentResult(items=visible)

    async def _by_criteria(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        if source.criteria_type is None:
            return self._unhandled("criteria_type absent pour BY_CRITERIA")
        criteria = _as_enum(CriteriaType, source.criteria_type)
        if criteria is None:
            return self._unhandled(f"criteria_type inconnu : {source.criteria_type!r}")
        if not context.location_id:
            log.info("BY_CRITERIA %s sans location : résultats non filtrés par location", criteria.value)
        return await self._CRITERIA_HANDLERS[criteria](self, source, context)

    async def _new_arrivals(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        days = source.criteria_timeframe_days or self.default_timeframe_days
        since = self.now() - timedelta(days=days)
        rows = await self._fetch_products(
            self._product_filters(context, Filter(field="created_at", op="gte", value=since)),
            self._limit(source),
            Order(field="created_at", descending=True),
        )
        return ContentResult(items=[product_from_row(r) for r in rows])

    async def _discounted(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        rows = await self._fetch_products(
            self._product_filters(context, Filter(field="offer_price", op="not_null")),
            self._limit(source),
            Order(field="created_at", descending=True),
        )
        # le prédicat serveur (offer_price non null) ne garantit pas une vraie remise
        products = [product_from_row(r) for r in rows]
        return ContentResult(items=[p for p in products if p.is_discounted])

    async def _recent_stand_in(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        # Pas de données de ventes/vues : classement par récence en attendant un vrai signal
        log.warning("%s : classement provisoire par récence (aucun signal de ventes)", source.criteria_type)
        rows = await self._fetch_products(
            self._product_filters(context),
            self._limit(source),
            Order(field="created_at", descending=True),
        )
        return ContentResult(items=[product_from_row(r) for r in rows])

    async def _from_category(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        if not source.source_category_id:
            return self._unhandled("source_category_id absent pour FROM_CATEGORY")
        rows = await self._fetch_products(
            self._product_filters(context, Filter(field="referenced_category_id", value=source.source_category_id)),
            self._limit(source),
        )
        return ContentResult(items=[product_from_row(r) for r in rows])

    async def _from_tag(self, source: ProductCollectionSource, context: ResolutionContext) -> ContentResult:
        if not source.source_tag_id:
            return self._unhandled("source_tag_id absent pour FROM_TAG")
        rows = await self._fetch_products(
            self._product_filters(context, Filter(field="featured_tag_ids", op="contains", value=source.source_tag_id)),
            self._limit(source),
        )
        return ContentResult(items=[product_from_row(r) for r in rows])

    # ── Tables de dispatch (une entrée par variante, vérifiées par les tests) ──

    _SOURCE_HANDLERS = {
        CategorySource:          _categories,
        TagGroupSource:          _tags,
        ProductCollectionSource: _collection,
    }

    _MODE_HANDLERS = {
        CollectionMode.MANUAL_SELECTION: _manual_selection,
        CollectionMode.BY_CRITERIA:      _by_criteria,
        CollectionMode.FROM_CATEGORY:    _from_category,
        CollectionMode.FROM_TAG:         _from_tag,
    }

    _CRITERIA_HANDLERS = {
        CriteriaType.NEW_ARRIVALS: _new_arrivals,
        CriteriaType.DISCOUNTED:   _discounted,
        CriteriaType.BEST_SELLERS: _recent_stand_in,
        CriteriaType.TRENDING_NOW: _recent_stand_in,
    }
