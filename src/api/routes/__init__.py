"""API route modules."""

from src.api.routes.catalog import router as catalog_router
from src.api.routes.documents import router as documents_router
from src.api.routes.health import router as health_router
from src.api.routes.inventory import router as inventory_router

__all__ = [
    "health_router",
    "catalog_router",
    "inventory_router",
    "documents_router",
]
