from fastapi import APIRouter

from mapping_portal.routers import catalogs, clients, platform, sources

api_router = APIRouter()
api_router.include_router(clients.router)
api_router.include_router(sources.router)
api_router.include_router(catalogs.router)
api_router.include_router(platform.router)

__all__ = ["api_router"]
