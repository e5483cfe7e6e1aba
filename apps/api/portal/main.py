"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Client Connect Portal API",
    description="Shipping quote status workflow and role-based access control",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)

# ============================================================================
# Routers
# ============================================================================

from portal.routers import metadata_router, permissions_router, quotes_router  # noqa: E402

# Quote status workflow
app.include_router(quotes_router, prefix="/quotes", tags=["quotes"])

# Permission model (router already has /settings/permissions prefix)
app.include_router(permissions_router)

# Metadata API (Picklists - any authenticated user)
app.include_router(metadata_router, prefix="/metadata", tags=["metadata"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """Health check endpoint. Returns environment info."""
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
