from fastapi import Request

from inventory_service.core.config import Settings
from inventory_service.services.inventory import InventoryManager


def get_inventory(request: Request) -> InventoryManager:
    """FastAPI dependency returning the manager built at startup."""
    return request.app.state.inventory


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
