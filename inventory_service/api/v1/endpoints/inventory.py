from __future__ import annotations

from pathlib import Path

import aiofiles
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse, HTMLResponse

from inventory_service.api.deps import get_app_settings, get_inventory
from inventory_service.core.config import Settings
from inventory_service.schemas.item import ItemOut, ItemRecord, ItemSummary, ItemUpdate, SearchResult
from inventory_service.services.inventory import InventoryManager, PhotoUpload

router = APIRouter()

STATIC_DIR = Path(__file__).resolve().parents[3] / "static"


def _photo_url(settings: Settings, item_id: str) -> str:
    return f"{settings.API_PREFIX}/inventory/{item_id}/photo"


def _item_out(settings: Settings, item: ItemRecord) -> ItemOut:
    return ItemOut(
        id=item.id,
        name=item.name,
        description=item.description,
        photo_url=_photo_url(settings, item.id) if item.photo else None,
    )


def _search_out(settings: Settings, summary: ItemSummary, include_photo: str | None) -> SearchResult:
    photo_url = None
    if include_photo == "on" and summary.has_photo:
        photo_url = _photo_url(settings, summary.id)
    return SearchResult(id=summary.id, name=summary.name, description=summary.description, photo_url=photo_url)


async def _read_upload(upload: UploadFile | None) -> PhotoUpload | None:
    if upload is None:
        return None
    content = await upload.read()
    return PhotoUpload(content=content, filename=upload.filename)


async def _render_form(name: str, settings: Settings) -> HTMLResponse:
    async with aiofiles.open(STATIC_DIR / name, mode="r", encoding="utf-8") as f:
        page = await f.read()
    # Form actions are relative to the mounted API prefix
    return HTMLResponse(page.replace("{api_prefix}", settings.API_PREFIX))


@router.get("/RegisterForm.html", include_in_schema=False)
async def register_form(settings: Settings = Depends(get_app_settings)) -> HTMLResponse:
    return await _render_form("RegisterForm.html", settings)


@router.get("/SearchForm.html", include_in_schema=False)
async def search_form(settings: Settings = Depends(get_app_settings)) -> HTMLResponse:
    return await _render_form("SearchForm.html", settings)


@router.post("/register", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
async def register_item(
    *,
    inventory: InventoryManager = Depends(get_inventory),
    settings: Settings = Depends(get_app_settings),
    inventory_name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    photo: UploadFile | None = File(default=None),
) -> ItemOut:
    """Register a new item, optionally with a photo."""
    item = await inventory.register(
        name=inventory_name,
        description=description,
        photo=await _read_upload(photo),
    )
    return _item_out(settings, item)


@router.get("/inventory", response_model=list[ItemOut])
async def list_items(
    inventory: InventoryManager = Depends(get_inventory),
    settings: Settings = Depends(get_app_settings),
) -> list[ItemOut]:
    """Retrieve all items."""
    return [_item_out(settings, item) for item in await inventory.list_items()]


@router.get("/inventory/{item_id}", response_model=ItemOut)
async def read_item(
    *,
    inventory: InventoryManager = Depends(get_inventory),
    settings: Settings = Depends(get_app_settings),
    item_id: str,
) -> ItemOut:
    """Get item by ID."""
    return _item_out(settings, await inventory.get_item(item_id))


@router.put("/inventory/{item_id}", response_model=ItemOut)
async def update_item(
    *,
    inventory: InventoryManager = Depends(get_inventory),
    settings: Settings = Depends(get_app_settings),
    item_id: str,
    item_in: ItemUpdate,
) -> ItemOut:
    """Update name and/or description."""
    return _item_out(settings, await inventory.update_fields(item_id, item_in))


@router.get("/inventory/{item_id}/photo", response_class=FileResponse)
async def read_photo(*, inventory: InventoryManager = Depends(get_inventory), item_id: str) -> FileResponse:
    """Stream the item's photo."""
    return FileResponse(await inventory.photo_path(item_id))


@router.put("/inventory/{item_id}/photo", response_model=ItemOut)
async def replace_photo(
    *,
    inventory: InventoryManager = Depends(get_inventory),
    settings: Settings = Depends(get_app_settings),
    item_id: str,
    photo: UploadFile | None = File(default=None),
) -> ItemOut:
    """Replace the item's photo; the previous file is removed."""
    item = await inventory.replace_photo(item_id, await _read_upload(photo))
    return _item_out(settings, item)


@router.delete("/inventory/{item_id}")
async def delete_item(*, inventory: InventoryManager = Depends(get_inventory), item_id: str) -> dict[str, str]:
    """Delete an item and its photo."""
    await inventory.delete_item(item_id)
    return {"status": "ok"}


@router.post(
    "/search",
    response_model=SearchResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def search_form_post(
    *,
    inventory: InventoryManager = Depends(get_inventory),
    settings: Settings = Depends(get_app_settings),
    item_id: str = Form(..., alias="id"),
    include_photo: str | None = Form(default=None, alias="includePhoto"),
) -> SearchResult:
    """Search an item by id (form submission)."""
    return _search_out(settings, await inventory.search(item_id), include_photo)


@router.get("/search", response_model=SearchResult, response_model_exclude_none=True)
async def search_query(
    *,
    inventory: InventoryManager = Depends(get_inventory),
    settings: Settings = Depends(get_app_settings),
    item_id: str = Query(..., alias="id"),
    include_photo: str | None = Query(default=None, alias="includePhoto"),
) -> SearchResult:
    """Search an item by id (query string)."""
    return _search_out(settings, await inventory.search(item_id), include_photo)
