"""API routers."""

from portal.routers.metadata import router as metadata_router
from portal.routers.permissions import router as permissions_router
from portal.routers.quotes import router as quotes_router

__all__ = [
    "metadata_router",
    "permissions_router",
    "quotes_router",
]
