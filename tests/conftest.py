from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from inventory_service.core.config import Settings
from inventory_service.crud.registry import create_record_store
from inventory_service.services.inventory import InventoryManager
from inventory_service.storage.assets import AssetStore


def make_settings(tmp_path: Path, backend: str) -> Settings:
    return Settings(
        CACHE_DIR=str(tmp_path / "cache"),
        RECORD_STORE=backend,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}",
        REQUEST_LOGS_ENABLED=False,
    )


@pytest.fixture(params=["json", "sql"])
def backend(request) -> str:
    return request.param


@pytest.fixture
def settings(tmp_path: Path, backend: str) -> Settings:
    return make_settings(tmp_path, backend)


@pytest.fixture
def asset_store(settings: Settings) -> AssetStore:
    store = AssetStore(
        settings.cache_path,
        reserved={settings.JSON_DB_FILENAME, f"{settings.JSON_DB_FILENAME}.tmp"},
    )
    store.ensure_root()
    return store


@pytest.fixture
async def record_store(settings: Settings):
    store = create_record_store(settings)
    await store.init()
    yield store
    await store.close()


@pytest.fixture
def manager(record_store, asset_store: AssetStore) -> InventoryManager:
    return InventoryManager(record_store, asset_store)


@pytest.fixture
def client(settings: Settings):
    from inventory_service.main import create_app

    with TestClient(create_app(settings)) as test_client:
        yield test_client
