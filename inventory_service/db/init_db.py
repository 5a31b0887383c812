import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from inventory_service.db.base import Base

# Register models on the metadata before create_all
from inventory_service.models import item as _item  # noqa: F401


LOG = logging.getLogger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    """Create database tables if they do not exist.

    This acts as a simple bootstrap in environments without Alembic migrations.
    Safe to run multiple times.
    """

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        LOG.info("database initialized: ensured tables exist")
    except Exception as exc:
        LOG.error("database initialization failed err=%s", exc)
        raise
