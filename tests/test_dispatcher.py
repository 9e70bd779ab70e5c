"""
Tests dispatcher — éligibilité, bannières, états error/unavailable, ordre de sortie.
"""
import sys, os, asyncio
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from conftest import NOW, FakeDataStore
from storefront.content.resolver import ContentSourceResolver
from storefront.datastore import DataStoreError
from storefront.dispatcher import (
    UNAVAILABLE_MESSAGE, SectionDispatcher, banner_items, show_view_all,
)
from storefront.layout.schema import LayoutSection
from storefront.models import SectionStatus, is_renderable
from storefront.theme.colors import DARK_TEXT, LIGHT_TEXT
from storefront.theme.resolver import DEFAULT_COLORS


def _section(sid, section_type, style, source=None, **kw):
    layout = kw.pop("layout", {})
    return LayoutSection.model_validate({
        "section_id": sid, "title": sid, "section_type": section_type,
        "layout": {"style": style, **layout}, "source": source, **kw,
    })


def _categories(sid="cats", ids=("cat-a",), style="ICON_ROW", **kw):
    return _section(sid, "BASE_CATEGORY", style, {"type": "BASE_CATEGORY", "ids": list(ids)}, **kw)


def _tags(sid="tags", ids=("tag-x", "tag-y"), style="CAROUSEL", **kw):
    return _section(sid, "TAG_GROUP_NAV", style, {"type": "TAG_GROUP_NAV", "ids": list(ids)}, **kw)


def _products(sid="prods", style="GRID", **source):
    return _section(sid, "PRODUCT_COLLECTION", style, {"type": "PRODUCT_COLLECTION", **source})


def _banner(sid="banner", **kw):
    return _section(sid, "BANNER_MEDIA", "BANNER", **kw)


def _dispatch(store, sections, brand_id="brand-1", location_id="loc-1"):
    dispatcher = SectionDispatcher(ContentSourceResolver(store, now=lambda: NOW))
    return asyncio.run(dispatcher.dispatch(sections, brand_id, location_id, DEFAULT_COLORS))


# ── Éligibilité ───────────────────────────────────────────────────────────

class TestEligibility:
    @pytest.mark.parametrize("section_type,style,expected", [
        ("BASE_CATEGORY", "ICON_ROW", True),
        ("BASE_CATEGORY", "BANNER", False),
        ("TAG_GROUP_NAV", "GRID", True),
        ("TAG_GROUP_NAV", "BANNER", False),
        ("PRODUCT_COLLECTION", "CAROUSEL", True),
        ("BANNER_MEDIA", "BANNER", True),
        ("VIDEO", "GRID", False),
        ("BANNER_MEDIA", "MOSAIC", False),
        # sans style, aucune section n'est rendue, bannières et collections comprises
        ("BANNER_MEDIA", None, False),
        ("PRODUCT_COLLECTION", None, False),
        ("BASE_CATEGORY", None, False),
    ])
    def test_is_renderable(self, section_type, style, expected):
        assert is_renderable(section_type, style) is expected

    def test_ineligible_style_gives_none(self, store):
        out = _dispatch(store, [_categories(style="BANNER"), _categories("ok")])
        assert out[0] is None
        assert out[1].section.section_id == "ok"

    def test_missing_style_gives_none(self, store):
        unstyled = LayoutSection.model_validate({
            "section_id": "plain", "section_type": "PRODUCT_COLLECTION",
            "source": {"type": "PRODUCT_COLLECTION", "collection_mode": "MANUAL_SELECTION", "product_ids": ["p1"]},
        })
        assert _dispatch(store, [unstyled]) == [None]
        assert store.calls == []

    def test_mismatched_source_gives_none(self, store):
        bad = _section("bad", "BASE_CATEGORY", "GRID", {"type": "TAG_GROUP_NAV", "ids": ["tag-x"]})
        assert _dispatch(store, [bad]) == [None]
        assert store.calls == []


# ── Ordre + isolation ─────────────────────────────────────────────────────

class TestOrderAndIsolation:
    def test_output_order_independent_of_completion(self, store):
        store.delay["categories"] = 0.05
        sections = [_categories("slow"), _products("fast", collection_mode="MANUAL_SELECTION", product_ids=["p2"])]
        out = _dispatch(store, sections)
        assert [s.section.section_id for s in out] == ["slow", "fast"]
        assert [i.id for i in out[1].items] == ["p2"]

    def test_fetch_failure_isolated(self, store):
        store.fail["categories"] = DataStoreError("Failed operation on categories")
        sections = [_categories(), _products(collection_mode="MANUAL_SELECTION", product_ids=["p2"])]
        failed, ok = _dispatch(store, sections)
        assert failed.status == SectionStatus.ERROR
        assert failed.retryable is True
        assert "categories" in failed.error
        assert failed.items == []
        assert ok.status == SectionStatus.READY
        assert [i.id for i in ok.items] == ["p2"]

    def test_unexpected_error_becomes_section_error(self, store):
        store.fail["featured_tags"] = RuntimeError("kaput")
        (out,) = _dispatch(store, [_tags()])
        assert out.status == SectionStatus.ERROR
        assert out.error == "kaput"

    def test_no_silent_retry(self, store):
        store.fail["categories"] = DataStoreError("down")
        _dispatch(store, [_categories()])
        assert len(store.calls_for("categories")) == 1


# ── Collections de produits ───────────────────────────────────────────────

class TestProductCollections:
    def test_missing_brand_is_unavailable(self, store):
        (out,) = _dispatch(store, [_products(collection_mode="MANUAL_SELECTION", product_ids=["p1"])],
                           brand_id=None)
        assert out.status == SectionStatus.UNAVAILABLE
        assert out.error == UNAVAILABLE_MESSAGE
        assert store.calls == []

    def test_missing_brand_only_affects_products(self, store):
        out = _dispatch(store, [_categories(), _products(collection_mode="BY_CRITERIA",
                                                         criteria_type="NEW_ARRIVALS")], brand_id=None)
        assert out[0].status == SectionStatus.READY
        assert out[1].status == SectionStatus.UNAVAILABLE

    def test_empty_criteria_message(self, store):
        (out,) = _dispatch(store, [_products(collection_mode="BY_CRITERIA", criteria_type="DISCOUNTED")],
                           location_id="loc-2")
        assert out.items == []
        assert out.empty_message == "No products found for criteria: DISCOUNTED."

    def test_empty_criteria_without_location_message(self):
        (out,) = _dispatch(FakeDataStore({"products": []}),
                           [_products(collection_mode="BY_CRITERIA", criteria_type="NEW_ARRIVALS")],
                           location_id=None)
        assert "require a specific location" in out.empty_message

    def test_empty_manual_message(self, store):
        (out,) = _dispatch(store, [_products(collection_mode="MANUAL_SELECTION")])
        assert out.empty_message == "No products manually selected for this view."

    def test_unknown_mode_carries_diagnostic(self, store):
        (out,) = _dispatch(store, [_products(collection_mode="RANDOM")])
        assert out.status == SectionStatus.READY
        assert out.items == []
        assert "RANDOM" in out.diagnostic


# ── Présentation ──────────────────────────────────────────────────────────

class TestPresentation:
    def test_tags_colorized(self, store):
        (out,) = _dispatch(store, [_tags()])
        bio, local = out.items
        assert (bio.display_background, bio.display_text) == ("#000000", LIGHT_TEXT)
        assert (local.display_background, local.display_text) == (DEFAULT_COLORS.secondary, DARK_TEXT)

    def test_icon_size_and_circle(self, store):
        (out,) = _dispatch(store, [_categories(layout={"size": "80x80", "shape": "CIRCLE"})])
        assert out.icon_size == 80
        assert out.circle is True

    def test_icon_size_default(self, store):
        (out,) = _dispatch(store, [_categories(layout={"shape": "SQUARE"})])
        assert out.icon_size == 60
        assert out.circle is False

    def test_banner_needs_no_fetch(self, store):
        (out,) = _dispatch(store, [_banner(custom_image_url="https://cdn/b.jpg")])
        assert out.banners[0].image_url == "https://cdn/b.jpg"
        assert store.calls == []


class TestBanners:
    def test_full_width_default_height(self):
        (b,) = banner_items(_banner(custom_image_url="u"))
        assert (b.width, b.height, b.missing_image) == ("100%", 150, False)

    def test_half_width_pair(self):
        section = _banner(custom_image_url="a", custom_image_url_secondary="b",
                          link_behavior={"type": "LINK", "target": "https://x"},
                          layout={"banner_width_mode": "half", "banner_height_mode": "large"})
        first, second = banner_items(section)
        assert first.width == second.width == "48.5%"
        assert first.height == 250
        assert first.link_behavior.target == "https://x"
        assert second.link_behavior is None

    def test_half_width_without_secondary(self):
        section = _banner(custom_image_url="a", layout={"banner_width_mode": "half"})
        assert len(banner_items(section)) == 1

    def test_missing_image_flagged(self):
        (b,) = banner_items(_banner(layout={"banner_height_mode": "small"}))
        assert b.missing_image is True
        assert b.height == 100


class TestViewAll:
    LINK = {"type": "PRODUCT_LIST", "target": "all"}

    def test_requires_link_behavior(self):
        section = _products(collection_mode="MANUAL_SELECTION", product_ids=[f"p{i}" for i in range(7)])
        assert not show_view_all(section)

    def test_products_threshold(self):
        few = _section("s", "PRODUCT_COLLECTION", "GRID",
                       {"type": "PRODUCT_COLLECTION", "product_ids": ["a"] * 6}, link_behavior=self.LINK)
        many = _section("s", "PRODUCT_COLLECTION", "GRID",
                        {"type": "PRODUCT_COLLECTION", "product_ids": ["a"] * 7}, link_behavior=self.LINK)
        by_limit = _section("s", "PRODUCT_COLLECTION", "GRID",
                            {"type": "PRODUCT_COLLECTION", "criteria_limit": 12}, link_behavior=self.LINK)
        assert not show_view_all(few)
        assert show_view_all(many)
        assert show_view_all(by_limit)

    def test_categories_threshold(self):
        assert show_view_all(_categories(ids=[f"c{i}" for i in range(11)], link_behavior=self.LINK))
        assert not show_view_all(_categories(ids=[f"c{i}" for i in range(10)], link_behavior=self.LINK))
