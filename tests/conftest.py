"""
Fixtures partagées — DataStore en mémoire + catalogue de démo + SQLite temporaire.
"""
import sys, os, asyncio, tempfile
from datetime import datetime, timedelta

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DB_PATH", os.path.join(tempfile.mkdtemp(prefix="storefront-"), "test.db"))
os.environ.setdefault("ADMIN_TOKEN", "test-admin")

import pytest

NOW = datetime(2026, 3, 1, 12, 0)


# ── DataStore en mémoire ──────────────────────────────────────────────────

def _matches(row: dict, flt) -> bool:
    value = row.get(flt.field)
    if flt.op == "eq":
        return value is None if flt.value is None else value == flt.value
    if flt.op == "in":
        return value in list(flt.value or [])
    if flt.op == "gte":
        return value is not None and value >= flt.value
    if flt.op == "not_null":
        return value is not None
    if flt.op == "contains":
        return isinstance(value, list) and flt.value in value
    if flt.op == "search":
        return isinstance(value, str) and str(flt.value).lower() in value.lower()
    raise AssertionError(f"op inattendu : {flt.op}")


class FakeDataStore:
    """
    Implémente le protocole DataStore sur des listes de dicts.
    `fail[entity]` → exception levée ; `delay[entity]` → latence simulée (secondes).
    Chaque appel est journalisé dans `calls`.
    """

    def __init__(self, tables=None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.calls = []
        self.fail = {}
        self.delay = {}

    async def _io(self, entity):
        if entity in self.delay:
            await asyncio.sleep(self.delay[entity])
        if entity in self.fail:
            raise self.fail[entity]

    def _rows(self, entity, filters):
        return [r for r in self.tables.get(entity, []) if all(_matches(r, f) for f in filters)]

    async def fetch_by_id(self, entity, ids, *, filters=()):
        self.calls.append(("fetch_by_id", entity, list(ids), list(filters)))
        await self._io(entity)
        if not ids:
            return []
        return [r for r in self._rows(entity, filters) if r.get("id") in ids]

    async def fetch_filtered(self, entity, filters, order=None, limit=None):
        self.calls.append(("fetch_filtered", entity, list(filters), order, limit))
        await self._io(entity)
        rows = self._rows(entity, filters)
        if order is not None:
            rows = sorted(rows, key=lambda r: r.get(order.field), reverse=order.descending)
        return rows[:limit] if limit is not None else rows

    async def fetch_one(self, entity, filters=()):
        self.calls.append(("fetch_one", entity, list(filters)))
        await self._io(entity)
        rows = self._rows(entity, filters)
        return rows[0] if rows else None

    def calls_for(self, entity):
        return [c for c in self.calls if c[1] == entity]


def _product(id, name, store_id="brand-1", location_id=None, price=None, offer_price=None,
             days_ago=0.0, category=None, tags=None, images=None):
    return {
        "id": id, "name": name, "store_id": store_id, "location_id": location_id,
        "price": price, "offer_price": offer_price,
        "image_data": images, "referenced_category_id": category,
        "featured_tag_ids": tags or [], "created_at": NOW - timedelta(days=days_ago),
    }


def demo_tables() -> dict:
    return {
        "stores": [
            {"id": "brand-1", "name": "Acme", "home_layout_draft": [], "home_layout_published": None},
            {"id": "brand-2", "name": "Other", "home_layout_draft": [], "home_layout_published": None},
        ],
        "locations": [
            {"id": "loc-1", "name": "Downtown", "store_id": "brand-1"},
            {"id": "loc-2", "name": "Uptown", "store_id": "brand-1"},
            {"id": "loc-9", "name": "", "store_id": None},
        ],
        "categories": [
            {"id": "cat-a", "store_id": "brand-1", "name": "Boissons", "icon_url": "https://cdn/a.png"},
            {"id": "cat-b", "store_id": "brand-1", "name": "Pâtisserie"},
            {"id": "cat-c", "store_id": "brand-1", "name": "Épicerie"},
        ],
        "featured_tags": [
            {"id": "tag-x", "store_id": "brand-1", "name": "Bio", "background_color": "#000000"},
            {"id": "tag-y", "store_id": "brand-1", "name": "Local"},
        ],
        "products": [
            _product("p1", "Coffee", price=5.0, offer_price=4.0, days_ago=1, category="cat-a", tags=["tag-x"],
                     images=[{"url": "https://cdn/p1-a.jpg"}, {"url": "https://cdn/p1-b.jpg", "is_primary": True}]),
            _product("p2", "Tea", location_id="loc-1", price=4.0, days_ago=2, category="cat-a"),
            _product("p3", "Cake", location_id="loc-2", price=6.0, offer_price=6.0, days_ago=3, tags=["tag-y"]),
            _product("p4", "coffee", location_id="loc-1", price=5.0, offer_price=3.0, days_ago=10, tags=["tag-x"]),
            _product("p5", "Foreign", store_id="brand-2", price=1.0, offer_price=0.5, days_ago=0),
            _product("p6", "Juice", location_id="loc-1", price="abc", offer_price=2.0, days_ago=0.5),
        ],
        "store_settings": [],
        "app_settings": [],
    }


@pytest.fixture
def store():
    return FakeDataStore(demo_tables())


@pytest.fixture
def session_factory(tmp_path):
    """Base SQLite vierge, isolée par test."""
    from storefront.database import make_session_factory, init_db
    factory = make_session_factory(f"sqlite:///{tmp_path / 'storefront.db'}")
    init_db(factory)
    return factory
