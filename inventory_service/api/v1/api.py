from fastapi import APIRouter

from inventory_service.api.v1.endpoints import inventory
from inventory_service.api.v1.endpoints import health

api_router = APIRouter()
api_router.include_router(inventory.router, tags=["inventory"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
