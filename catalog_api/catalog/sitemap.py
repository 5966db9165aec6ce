"""Sitemap generation.

Lists the static storefront pages, every category page and every product
page in sitemaps.org format.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote
from xml.sax.saxutils import escape

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

STATIC_PAGES = (
    ("/", "1.00"),
    ("/catalog", "0.90"),
)
CATEGORY_PRIORITY = "0.80"
PRODUCT_PRIORITY = "0.70"


def _lastmod(value: datetime | None, default: datetime) -> str:
    moment = value or default
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat()


def _entry(loc: str, lastmod: str, priority: str) -> str:
    return (
        "  <url>\n"
        f"    <loc>{escape(loc)}</loc>\n"
        f"    <lastmod>{lastmod}</lastmod>\n"
        f"    <priority>{priority}</priority>\n"
        "  </url>"
    )


def build_sitemap(
    base_url: str,
    categories: Iterable[Mapping[str, Any]],
    products: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
) -> str:
    """Render the sitemap XML.

    Args:
        base_url: Site origin, e.g. "https://shop.example.com".
        categories: Mappings with ``id``, ``name`` and ``updated_at``.
        products: Mappings with ``id``, ``name`` and ``updated_at``.
        now: Last modification time of the static pages.

    Returns:
        Sitemap XML document.
    """
    now = now or datetime.now(timezone.utc)
    base = base_url.rstrip("/")

    entries = [_entry(f"{base}{path}", _lastmod(None, now), priority) for path, priority in STATIC_PAGES]

    for category in categories:
        loc = f"{base}/catalog/category/{category['id']}/{quote(category['name'] or '', safe='')}"
        entries.append(_entry(loc, _lastmod(category.get("updated_at"), now), CATEGORY_PRIORITY))

    for product in products:
        loc = f"{base}/catalog/product/{product['id']}/{quote(product['name'] or '', safe='')}"
        entries.append(_entry(loc, _lastmod(product.get("updated_at"), now), PRODUCT_PRIORITY))

    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">\n'
        f"{body}\n"
        "</urlset>\n"
    )
