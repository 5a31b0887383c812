from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from inventory_service.core.config import Settings
from inventory_service.core.errors import DuplicateId, ItemNotFound, StorageIOError
from inventory_service.crud.base import field_changes
from inventory_service.crud.registry import register
from inventory_service.db.init_db import init_db
from inventory_service.db.session import create_engine, create_sessionmaker
from inventory_service.models.item import Item
from inventory_service.schemas.item import ItemRecord, ItemUpdate


LOG = logging.getLogger(__name__)


def _to_record(db_obj: Item) -> ItemRecord:
    return ItemRecord(
        id=db_obj.id,
        name=db_obj.name,
        description=db_obj.description or "",
        photo=db_obj.photo or None,
    )


class SqlRecordStore:
    """Record store over the ``items`` table; one row per item."""

    name = "sql"

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.sessions = create_sessionmaker(engine)

    async def init(self) -> None:
        try:
            await init_db(self.engine)
        except SQLAlchemyError as exc:
            raise StorageIOError(f"database initialization failed: {exc}") from exc

    async def close(self) -> None:
        await self.engine.dispose()

    async def insert(self, item: ItemRecord) -> None:
        try:
            async with self.sessions() as db:
                if await db.get(Item, item.id) is not None:
                    raise DuplicateId(item.id)
                db.add(Item(**item.model_dump()))
                await db.commit()
        except IntegrityError as exc:
            raise DuplicateId(item.id) from exc
        except SQLAlchemyError as exc:
            raise StorageIOError(f"insert failed id={item.id}: {exc}") from exc

    async def get(self, item_id: str) -> ItemRecord:
        try:
            async with self.sessions() as db:
                db_obj = await db.get(Item, item_id)
        except SQLAlchemyError as exc:
            raise StorageIOError(f"lookup failed id={item_id}: {exc}") from exc
        if db_obj is None:
            raise ItemNotFound(item_id)
        return _to_record(db_obj)

    async def list_all(self) -> Sequence[ItemRecord]:
        """Items newest-first by id."""
        try:
            async with self.sessions() as db:
                res = await db.execute(select(Item).order_by(Item.id.desc()))
                rows = res.scalars().all()
        except SQLAlchemyError as exc:
            raise StorageIOError(f"list failed: {exc}") from exc
        return [_to_record(row) for row in rows]

    async def update_fields(self, item_id: str, changes: ItemUpdate) -> ItemRecord:
        obj_data = field_changes(changes)
        try:
            async with self.sessions() as db:
                db_obj = await db.get(Item, item_id, with_for_update=True)
                if db_obj is None:
                    raise ItemNotFound(item_id)
                for field, value in obj_data.items():
                    setattr(db_obj, field, value)
                await db.commit()
                await db.refresh(db_obj)
        except SQLAlchemyError as exc:
            raise StorageIOError(f"update failed id={item_id}: {exc}") from exc
        return _to_record(db_obj)

    async def update_photo(self, item_id: str, new_ref: str | None) -> tuple[ItemRecord, str | None]:
        try:
            async with self.sessions() as db:
                db_obj = await db.get(Item, item_id, with_for_update=True)
                if db_obj is None:
                    raise ItemNotFound(item_id)
                previous = db_obj.photo or None
                db_obj.photo = new_ref
                await db.commit()
                await db.refresh(db_obj)
        except SQLAlchemyError as exc:
            raise StorageIOError(f"photo update failed id={item_id}: {exc}") from exc
        return _to_record(db_obj), previous

    async def delete(self, item_id: str) -> ItemRecord:
        try:
            async with self.sessions() as db:
                db_obj = await db.get(Item, item_id)
                if db_obj is None:
                    raise ItemNotFound(item_id)
                removed = _to_record(db_obj)
                await db.delete(db_obj)
                await db.commit()
        except SQLAlchemyError as exc:
            raise StorageIOError(f"delete failed id={item_id}: {exc}") from exc
        return removed


@register("sql")
def _factory(settings: Settings) -> SqlRecordStore:
    LOG.info("sql record store engine url=%s", _masked_url(settings.sqlalchemy_database_uri))
    return SqlRecordStore(create_engine(settings.sqlalchemy_database_uri))


def _masked_url(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    if "@" not in rest:
        return url
    creds, _, host = rest.rpartition("@")
    user = creds.split(":", 1)[0]
    return f"{scheme}{sep}{user}:***@{host}"
