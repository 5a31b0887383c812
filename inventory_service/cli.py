from __future__ import annotations

import argparse
import asyncio

from inventory_service.core.config import Settings, get_settings
from inventory_service.crud.registry import create_record_store
from inventory_service.services.inventory import InventoryManager
from inventory_service.storage.assets import AssetStore


async def find_orphans(settings: Settings) -> list[str]:
    """Report stored photos that no item references; nothing is deleted."""
    # No init(): a missing record file or cache directory must stay missing
    records = create_record_store(settings)
    try:
        assets = AssetStore(
            settings.cache_path,
            reserved={settings.JSON_DB_FILENAME, f"{settings.JSON_DB_FILENAME}.tmp"},
        )
        return await InventoryManager(records, assets).orphaned_assets()
    finally:
        await records.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Inventory maintenance CLI")
    parser.add_argument(
        "command",
        choices=["orphans"],
        help="Command to run",
    )
    parser.add_argument("--cache", type=str, default=None, help="Content directory (defaults to CACHE_DIR)")
    parser.add_argument("--record-store", choices=["json", "sql"], default=None)
    args = parser.parse_args(argv)

    overrides: dict[str, object] = {}
    if args.cache:
        overrides["CACHE_DIR"] = args.cache
    if args.record_store:
        overrides["RECORD_STORE"] = args.record_store
    settings = get_settings().model_copy(update=overrides) if overrides else get_settings()

    if args.command == "orphans":
        orphans = asyncio.run(find_orphans(settings))
        for ref in orphans:
            print(ref)
        print(f"{len(orphans)} orphaned file(s) in {settings.cache_path}")


if __name__ == "__main__":
    main()
