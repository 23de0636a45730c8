"""Error taxonomy for part and stock operations.

Business-rule failures (not found, negative stock, duplicates, invalid data)
are never retried by the core. ``TransientStorageError`` marks storage or
transaction failures after a full rollback; callers may retry the whole
operation.
"""


class InventoryError(Exception):
    """Base class for every error raised by the inventory core."""


class PartNotFoundError(InventoryError):
    def __init__(self, part_id):
        self.part_id = part_id
        super().__init__("Part not found")


class NegativeStockError(InventoryError):
    default_message = "Cannot reduce quantity below zero"

    def __init__(self, part_id, available: int, delta: int, message: str | None = None):
        self.part_id = part_id
        self.available = available
        self.delta = delta
        super().__init__(message or self.default_message)


class SellExceedsStockError(NegativeStockError):
    default_message = "Cannot sell more than available quantity"


class DuplicatePartNumberError(InventoryError):
    def __init__(self, part_number: str):
        self.part_number = part_number
        super().__init__("Part with this part number already exists")


class InvalidPartDataError(InventoryError, ValueError):
    pass


class InvalidQuantityError(InventoryError, ValueError):
    pass


class TransientStorageError(InventoryError):
    pass


__all__ = [
    "DuplicatePartNumberError",
    "InvalidPartDataError",
    "InvalidQuantityError",
    "InventoryError",
    "NegativeStockError",
    "PartNotFoundError",
    "SellExceedsStockError",
    "TransientStorageError",
]
