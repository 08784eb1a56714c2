# billing/errors.py


class BillingError(Exception):
    """Base class for business-rule violations raised by billing services."""


class ReceiptError(BillingError):
    pass


class InventoryError(BillingError):
    """Raised when receipt items are missing from stock or exceed on-hand quantity."""

    def __init__(self, invalid_items):
        self.invalid_items = list(invalid_items)
        summary = ", ".join(f"{row['name']}: {row['error']}" for row in self.invalid_items)
        super().__init__(f"Inventory error: {summary}")


class StockError(BillingError):
    pass


class AttendanceError(BillingError):
    pass


class ShopError(BillingError):
    pass


class RecordStoreError(Exception):
    """The record store could not be reached or rejected a query."""


class RecordNotFound(RecordStoreError):
    pass
