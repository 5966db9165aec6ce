"""Sitemap endpoint."""

from fastapi import APIRouter, Request, Response

from catalog_api.api.deps import CatalogServiceDep

router = APIRouter(tags=["SEO"])


@router.get(
    "/sitemap.xml",
    response_class=Response,
    responses={200: {"content": {"application/xml": {}}}},
    summary="Get sitemap",
)
async def get_sitemap(request: Request, service: CatalogServiceDep) -> Response:
    """Render the sitemap for the requesting origin."""
    base_url = f"{request.url.scheme}://{request.url.netloc}"
    content = await service.sitemap(base_url)
    return Response(
        content=content,
        media_type="application/xml; charset=utf-8",
        headers={"Cache-Control": "s-maxage=86400"},
    )
