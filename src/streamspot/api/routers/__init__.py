"""API routers."""

from fastapi import APIRouter

from streamspot.api.routers import albums, artists, health, updates

api_router = APIRouter()
api_router.include_router(artists.router)
api_router.include_router(albums.router)
api_router.include_router(updates.router)
api_router.include_router(health.router)

__all__ = ["api_router"]
