"""API v1 Router."""
from fastapi import APIRouter

from almoxarifado.api.v1 import auth, categories, items, movements, maletas, users, audit, dashboard

api_router = APIRouter(prefix="/api/v1")

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(categories.router)
api_router.include_router(items.router)
api_router.include_router(movements.router)
api_router.include_router(maletas.router)
api_router.include_router(users.router)
api_router.include_router(audit.router)
api_router.include_router(dashboard.router)

__all__ = ["api_router"]
