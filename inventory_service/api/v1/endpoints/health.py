from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from inventory_service.api.deps import get_inventory
from inventory_service.services.inventory import InventoryManager

router = APIRouter()


@router.get("/", tags=["health"])
async def health(inventory: InventoryManager = Depends(get_inventory)) -> dict[str, object]:
    """Lightweight health endpoint for liveness checks."""
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "record_store": inventory.records.name,
    }
