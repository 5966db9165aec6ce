"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from catalog_api.api.admin import router as admin_router
from catalog_api.api.health import router as health_router
from catalog_api.api.public import router as public_router
from catalog_api.api.sitemap import router as sitemap_router

__all__ = [
    "admin_router",
    "health_router",
    "public_router",
    "sitemap_router",
]
