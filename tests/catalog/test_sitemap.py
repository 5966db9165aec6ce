"""Tests for sitemap rendering."""

from datetime import datetime, timezone
from xml.etree import ElementTree

from catalog_api.catalog.sitemap import SITEMAP_NAMESPACE, build_sitemap

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
NS = {"sm": SITEMAP_NAMESPACE}


def _urls(xml: str) -> list[tuple[str, str, str]]:
    root = ElementTree.fromstring(xml)
    return [
        (
            url.findtext("sm:loc", namespaces=NS),
            url.findtext("sm:lastmod", namespaces=NS),
            url.findtext("sm:priority", namespaces=NS),
        )
        for url in root.findall("sm:url", NS)
    ]


def test_static_pages_come_first() -> None:
    urls = _urls(build_sitemap("https://shop.example.com/", [], [], now=NOW))
    assert urls == [
        ("https://shop.example.com/", NOW.isoformat(), "1.00"),
        ("https://shop.example.com/catalog", NOW.isoformat(), "0.90"),
    ]


def test_category_and_product_pages() -> None:
    updated = datetime(2025, 2, 1)
    xml = build_sitemap(
        "https://shop.example.com",
        [{"id": 4, "name": "Balls & Nets", "updated_at": updated}],
        [{"id": 9, "name": "Pro Ball", "updated_at": None}],
        now=NOW,
    )
    urls = _urls(xml)
    assert urls[2] == (
        "https://shop.example.com/catalog/category/4/Balls%20%26%20Nets",
        "2025-02-01T00:00:00+00:00",
        "0.80",
    )
    assert urls[3] == (
        "https://shop.example.com/catalog/product/9/Pro%20Ball",
        NOW.isoformat(),
        "0.70",
    )


def test_names_with_slashes_are_encoded() -> None:
    xml = build_sitemap("https://shop.example.com", [{"id": 1, "name": "A/B"}], [], now=NOW)
    assert _urls(xml)[2][0] == "https://shop.example.com/catalog/category/1/A%2FB"
