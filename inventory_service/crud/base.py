from __future__ import annotations

from typing import Any, Protocol, Sequence

from inventory_service.core.errors import NoFieldsProvided
from inventory_service.schemas.item import ItemRecord, ItemUpdate


class RecordStore(Protocol):
    """Structured item storage; both backends share these semantics."""

    name: str

    async def init(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def insert(self, item: ItemRecord) -> None:
        ...

    async def get(self, item_id: str) -> ItemRecord:
        ...

    async def list_all(self) -> Sequence[ItemRecord]:
        ...

    async def update_fields(self, item_id: str, changes: ItemUpdate) -> ItemRecord:
        ...

    async def update_photo(self, item_id: str, new_ref: str | None) -> tuple[ItemRecord, str | None]:
        ...

    async def delete(self, item_id: str) -> ItemRecord:
        ...


def field_changes(changes: ItemUpdate) -> dict[str, Any]:
    """Non-blank provided fields of *changes*; raises if none remain."""
    obj_data = changes.model_dump(exclude_unset=True)
    data = {field: value for field, value in obj_data.items() if value and value.strip()}
    if not data:
        raise NoFieldsProvided()
    return data
