"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.catalog.service import CatalogService
from catalog_api.infrastructure.database import get_session
from catalog_api.infrastructure.object_storage import ObjectStorage, get_object_storage


def get_catalog_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    storage: Annotated[ObjectStorage, Depends(get_object_storage)],
) -> CatalogService:
    """Get a catalog service bound to the request's session."""
    return CatalogService(session, storage=storage)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
