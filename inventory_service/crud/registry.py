from __future__ import annotations

from typing import Callable, Dict

from inventory_service.core.config import Settings
from inventory_service.crud.base import RecordStore


_factories: Dict[str, Callable[[Settings], RecordStore]] = {}


def register(name: str):
    def deco(factory: Callable[[Settings], RecordStore]):
        _factories[name] = factory
        return factory
    return deco


def get_factory(name: str) -> Callable[[Settings], RecordStore]:
    # Ensure built-in backends are imported so they register
    from inventory_service.crud import json_store as _json_store  # noqa: F401
    from inventory_service.crud import sql_store as _sql_store  # noqa: F401

    if name not in _factories:
        raise KeyError(f"Unknown record store: {name}")
    return _factories[name]


def create_record_store(settings: Settings) -> RecordStore:
    return get_factory(settings.RECORD_STORE)(settings)
