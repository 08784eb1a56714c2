# billing/store.py
"""
Record-store adapter used by the sales aggregation.

The aggregation only ever needs two reads: every receipt of a shop, and the
current cost price of a stock item by name.  ``OrmRecordStore`` serves both
from the database and hands back plain frozen records, so the aggregation
never touches querysets directly and can be fed from any other store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from django.db import DatabaseError

from .errors import RecordNotFound, RecordStoreError
from .models import Receipt, Shop, StockItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    price: Decimal
    quantity: int
    cost_price: Optional[Decimal] = None


@dataclass(frozen=True)
class ReceiptRecord:
    id: int
    shop_id: str
    timestamp: datetime
    total_amount: Decimal
    transaction_id: str = ""
    items: Tuple[ReceiptLine, ...] = field(default_factory=tuple)


def to_record(receipt: Receipt) -> ReceiptRecord:
    return ReceiptRecord(
        id=receipt.id,
        shop_id=receipt.shop_id,
        timestamp=receipt.timestamp,
        total_amount=Decimal(receipt.total_amount or 0),
        transaction_id=receipt.transaction_id,
        items=tuple(
            ReceiptLine(
                name=it.name,
                price=Decimal(it.price or 0),
                quantity=int(it.quantity or 1),
                cost_price=(Decimal(it.cost_price) if it.cost_price is not None else None),
            )
            for it in receipt.items.all()
        ),
    )


class OrmRecordStore:
    """Serves receipts and stock cost prices from the Django ORM."""

    def fetch_receipts_by_shop(self, shop_id: str) -> list[ReceiptRecord]:
        try:
            if not Shop.objects.filter(pk=shop_id).exists():
                raise RecordNotFound(f"shop {shop_id} not found")
            rows = Receipt.objects.filter(shop_id=shop_id).prefetch_related("items")
            return [to_record(r) for r in rows]
        except DatabaseError as exc:
            logger.error("receipt fetch failed", extra={"shop_id": shop_id, "error": type(exc).__name__})
            raise RecordStoreError("receipt fetch failed") from exc

    def fetch_stock_item_cost_price(self, shop_id: str, item_name: str) -> Decimal:
        try:
            rows = list(
                StockItem.objects
                .filter(shop_id=shop_id, name=item_name)
                .order_by("id")
                .values("name", "cost_price")
            )
        except DatabaseError as exc:
            logger.error("cost price lookup failed", extra={"shop_id": shop_id, "error": type(exc).__name__})
            raise RecordStoreError("cost price lookup failed") from exc
        # some collations compare case-insensitively; the match must be exact
        row = next((r for r in rows if r["name"] == item_name), None)
        if row is None:
            return Decimal("0")
        return Decimal(row["cost_price"] or 0)
