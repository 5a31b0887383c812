"""Record store backed by a single JSON array on disk.

Every mutation reads the whole file, edits the list and writes it back
atomically. An ``asyncio.Lock`` makes this store the only writer inside the
process; it does not protect against a second process sharing the file.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Sequence

import aiofiles
import aiofiles.os

from inventory_service.core.config import Settings
from inventory_service.core.errors import DuplicateId, ItemNotFound, StorageIOError
from inventory_service.crud.base import field_changes
from inventory_service.crud.registry import register
from inventory_service.schemas.item import ItemRecord, ItemUpdate


LOG = logging.getLogger(__name__)


class JsonRecordStore:
    name = "json"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._write_lock = asyncio.Lock()

    async def init(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not await aiofiles.os.path.exists(self.path):
                await self._write([])
        except OSError as exc:
            raise StorageIOError(f"cannot initialise {self.path}: {exc}") from exc
        LOG.info("json record store ready path=%s", self.path)

    async def close(self) -> None:
        return None

    async def _read(self) -> list[dict[str, Any]]:
        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageIOError(f"cannot read {self.path}: {exc}") from exc
        try:
            data = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as exc:
            raise StorageIOError(f"invalid JSON data in {self.path}") from exc
        if not isinstance(data, list):
            raise StorageIOError(f"expected a JSON array in {self.path}")
        return data

    async def _write(self, rows: list[dict[str, Any]]) -> None:
        payload = json.dumps(rows, ensure_ascii=False, indent=2)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(payload)
                await f.flush()
                await asyncio.to_thread(os.fsync, f.fileno())
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageIOError(f"cannot write {self.path}: {exc}") from exc

    @staticmethod
    def _find(rows: list[dict[str, Any]], item_id: str) -> int:
        for index, row in enumerate(rows):
            if row.get("id") == item_id:
                return index
        raise ItemNotFound(item_id)

    @staticmethod
    def _to_record(row: dict[str, Any]) -> ItemRecord:
        return ItemRecord(
            id=str(row["id"]),
            name=row["name"],
            description=row.get("description") or "",
            photo=row.get("photo") or None,
        )

    async def insert(self, item: ItemRecord) -> None:
        async with self._write_lock:
            rows = await self._read()
            if any(row.get("id") == item.id for row in rows):
                raise DuplicateId(item.id)
            rows.append(item.model_dump())
            await self._write(rows)

    async def get(self, item_id: str) -> ItemRecord:
        rows = await self._read()
        return self._to_record(rows[self._find(rows, item_id)])

    async def list_all(self) -> Sequence[ItemRecord]:
        """Items in insertion order."""
        return [self._to_record(row) for row in await self._read()]

    async def update_fields(self, item_id: str, changes: ItemUpdate) -> ItemRecord:
        data = field_changes(changes)
        async with self._write_lock:
            rows = await self._read()
            row = rows[self._find(rows, item_id)]
            row.update(data)
            await self._write(rows)
        return self._to_record(row)

    async def update_photo(self, item_id: str, new_ref: str | None) -> tuple[ItemRecord, str | None]:
        async with self._write_lock:
            rows = await self._read()
            row = rows[self._find(rows, item_id)]
            previous = row.get("photo") or None
            row["photo"] = new_ref
            await self._write(rows)
        return self._to_record(row), previous

    async def delete(self, item_id: str) -> ItemRecord:
        async with self._write_lock:
            rows = await self._read()
            row = rows.pop(self._find(rows, item_id))
            await self._write(rows)
        return self._to_record(row)


@register("json")
def _factory(settings: Settings) -> JsonRecordStore:
    return JsonRecordStore(settings.json_db_path)
