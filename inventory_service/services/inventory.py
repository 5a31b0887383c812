"""Inventory manager: keeps item records and their photo files consistent.

The record store and the asset store fail independently; there is no
transaction spanning both. Consistency comes from ordering instead:

* a new photo is written before any record points at it;
* a superseded photo is released only after the record stopped pointing at it.

A crash between the two steps can therefore leave an unreferenced file (an
orphan, logged) but never a record pointing at a deleted file.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Sequence

from inventory_service.core.errors import (
    AssetMissing,
    AssetNotFound,
    NoPhoto,
    ValidationError,
)
from inventory_service.crud.base import RecordStore
from inventory_service.schemas.item import ItemRecord, ItemSummary, ItemUpdate
from inventory_service.storage.assets import AssetStore


LOG = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255


@dataclass(frozen=True)
class PhotoUpload:
    content: bytes
    filename: str | None = None


class _IdGenerator:
    """Millisecond timestamps as strings, strictly increasing per process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def __call__(self) -> str:
        with self._lock:
            now = time.time_ns() // 1_000_000
            self._last = now if now > self._last else self._last + 1
            return str(self._last)


class InventoryManager:
    def __init__(self, records: RecordStore, assets: AssetStore) -> None:
        self.records = records
        self.assets = assets
        self._new_id = _IdGenerator()
        # item id -> [lock, number of tasks holding or waiting]
        self._item_locks: dict[str, list] = {}

    @asynccontextmanager
    async def _item_lock(self, item_id: str) -> AsyncIterator[None]:
        """Serialise photo-mutating operations on one item id."""
        entry = self._item_locks.get(item_id)
        if entry is None:
            entry = self._item_locks[item_id] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                self._item_locks.pop(item_id, None)

    async def register(
        self,
        *,
        name: str | None,
        description: str | None = None,
        photo: PhotoUpload | None = None,
    ) -> ItemRecord:
        if not name or not name.strip():
            raise ValidationError("inventory_name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"inventory_name longer than {MAX_NAME_LENGTH} characters")

        photo_ref: str | None = None
        if photo is not None and photo.content:
            photo_ref = await self.assets.store(photo.content, photo.filename)

        item = ItemRecord(id=self._new_id(), name=name, description=description or "", photo=photo_ref)
        try:
            await self.records.insert(item)
        except Exception as exc:
            if photo_ref is not None:
                LOG.warning("orphaned asset after failed insert id=%s ref=%s err=%s", item.id, photo_ref, exc)
            raise
        LOG.info("item registered id=%s photo=%s", item.id, photo_ref or "-")
        return item

    async def list_items(self) -> Sequence[ItemRecord]:
        return await self.records.list_all()

    async def get_item(self, item_id: str) -> ItemRecord:
        return await self.records.get(item_id)

    async def update_fields(self, item_id: str, changes: ItemUpdate) -> ItemRecord:
        item = await self.records.update_fields(item_id, changes)
        LOG.info("item updated id=%s", item_id)
        return item

    async def replace_photo(self, item_id: str, photo: PhotoUpload | None) -> ItemRecord:
        if photo is None or not photo.content:
            raise ValidationError("No photo uploaded.")

        async with self._item_lock(item_id):
            await self.records.get(item_id)
            new_ref = await self.assets.store(photo.content, photo.filename)
            try:
                item, previous = await self.records.update_photo(item_id, new_ref)
            except Exception as exc:
                LOG.warning("orphaned asset after failed photo swap id=%s ref=%s err=%s", item_id, new_ref, exc)
                raise
            # The record no longer points at the previous file; safe to drop it
            if previous is not None and previous != new_ref:
                await self.assets.release(previous)
        LOG.info("photo replaced id=%s ref=%s previous=%s", item_id, new_ref, previous or "-")
        return item

    async def delete_item(self, item_id: str) -> ItemRecord:
        async with self._item_lock(item_id):
            removed = await self.records.delete(item_id)
            if removed.photo is not None:
                await self.assets.release(removed.photo)
        LOG.info("item deleted id=%s photo=%s", item_id, removed.photo or "-")
        return removed

    async def photo_path(self, item_id: str) -> Path:
        """Absolute path of the item's photo file."""
        item = await self.records.get(item_id)
        if item.photo is None:
            LOG.info("photo requested for item without photo id=%s", item_id)
            raise NoPhoto(item_id)
        try:
            return await self.assets.resolve(item.photo)
        except AssetNotFound:
            LOG.error("photo file missing for live item id=%s ref=%s", item_id, item.photo)
            raise AssetMissing(item_id, item.photo) from None

    async def search(self, item_id: str) -> ItemSummary:
        item = await self.records.get(item_id)
        return ItemSummary(
            id=item.id,
            name=item.name,
            description=item.description,
            has_photo=item.photo is not None,
        )

    async def orphaned_assets(self) -> list[str]:
        """Stored files that no item references. Nothing is deleted."""
        referenced = {item.photo for item in await self.records.list_all() if item.photo}
        return [ref for ref in await self.assets.list_refs() if ref not in referenced]


