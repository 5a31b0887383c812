import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventory_service.api.v1.api import api_router
from inventory_service.core.config import Settings, get_settings
from inventory_service.core.exception_handlers import install_exception_handlers
from inventory_service.core.logging_config import configure_logging, install_request_logging, set_request_logs_enabled
from inventory_service.crud.registry import create_record_store
from inventory_service.services.inventory import InventoryManager
from inventory_service.storage.assets import AssetStore

LOG = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
    )
    app.state.settings = settings

    set_request_logs_enabled(settings.REQUEST_LOGS_ENABLED)
    install_request_logging(app)
    install_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _init_inventory() -> None:
        assets = AssetStore(
            settings.cache_path,
            reserved={settings.JSON_DB_FILENAME, f"{settings.JSON_DB_FILENAME}.tmp"},
        )
        assets.ensure_root()
        records = create_record_store(settings)
        await records.init()
        app.state.inventory = InventoryManager(records, assets)
        LOG.info(
            "inventory ready record_store=%s cache_dir=%s",
            records.name,
            settings.cache_path,
        )

    @app.on_event("shutdown")
    async def _close_inventory() -> None:
        inventory = getattr(app.state, "inventory", None)
        if inventory is not None:
            await inventory.records.close()

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


# Configure logging before app initialization
configure_logging()

app = create_app()
