"""Error taxonomy shared by the record store, the asset store and the manager.

The HTTP layer maps these onto status codes in
:mod:`inventory_service.core.exception_handlers`; nothing below it retries.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for all inventory failures."""


class ValidationError(InventoryError):
    """Caller-supplied input violates a precondition."""


class NoFieldsProvided(ValidationError):
    """A field update carried neither a name nor a description."""

    def __init__(self, message: str = "No fields provided") -> None:
        super().__init__(message)


class NotFoundError(InventoryError):
    """Base class for the not-found family."""


class ItemNotFound(NotFoundError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class NoPhoto(NotFoundError):
    """The item exists but has no photo attached."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item has no photo: {item_id}")
        self.item_id = item_id


class AssetMissing(NotFoundError):
    """The item references a photo whose file is gone."""

    def __init__(self, item_id: str, ref: str) -> None:
        super().__init__(f"Photo file missing for item {item_id}: {ref}")
        self.item_id = item_id
        self.ref = ref


class AssetNotFound(NotFoundError):
    def __init__(self, ref: str) -> None:
        super().__init__(f"Asset not found: {ref}")
        self.ref = ref


class DuplicateId(InventoryError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item already exists: {item_id}")
        self.item_id = item_id


class StorageIOError(InventoryError):
    """An underlying record or asset store operation failed."""
