# billing/services.py

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.authtoken.models import Token

from .errors import AttendanceError, InventoryError, ReceiptError, ShopError, StockError
from .models import AttendanceRecord, Employee, Receipt, ReceiptItem, Shop, StockItem

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


# ================== Shop accounts ==================

def _clean_names(names: Iterable[str] | None) -> list[str]:
    out = []
    for n in names or []:
        n = (n or "").strip()
        if n and n not in out:
            out.append(n)
    return out


@transaction.atomic
def register_shop(*, email: str, password: str, shop_name: str, address: str = "",
                  phone_number: str = "") -> tuple[Shop, Token]:
    email = (email or "").strip().lower()
    if not email or not password:
        raise ShopError("email and password are required")
    if not (shop_name or "").strip():
        raise ShopError("Shop name is required.")

    User = get_user_model()
    if User.objects.filter(username=email).exists():
        raise ShopError("An account with this email already exists.")

    user = User.objects.create_user(username=email, email=email, password=password)
    phones = [phone_number.strip()] if (phone_number or "").strip() else []
    shop = Shop.objects.create(
        owner=user, shop_name=shop_name.strip(), address=(address or "").strip(),
        phone_number=(phone_number or "").strip(), phone_numbers=phones,
    )
    token, _ = Token.objects.get_or_create(user=user)
    logger.info("shop registered", extra={"shop_id": shop.id})
    return shop, token


def update_shop_settings(shop: Shop, *, shop_name: str, address: str = "",
                         phone_numbers: Optional[list] = None,
                         cashier_names: Optional[list] = None,
                         manager_names: Optional[list] = None) -> Shop:
    if not (shop_name or "").strip():
        raise ShopError("Shop name is required.")
    shop.shop_name = shop_name.strip()
    shop.address = (address or "").strip()
    shop.phone_numbers = _clean_names(phone_numbers)
    shop.phone_number = shop.phone_numbers[0] if shop.phone_numbers else ""
    shop.cashier_names = _clean_names(cashier_names)
    shop.manager_names = _clean_names(manager_names)
    shop.save()
    return shop


# ================== Stock ==================

def add_stock_item(shop: Shop, **data) -> StockItem:
    if int(data.get("quantity") or 0) < 0:
        raise StockError("quantity must be >= 0")
    return StockItem.objects.create(shop=shop, **data)


def get_shop_stock(shop: Shop, q: str = "", category: str = ""):
    qs = StockItem.objects.filter(shop=shop)
    q = (q or "").strip()
    if q:
        qs = qs.filter(
            Q(name__icontains=q) |
            Q(description__icontains=q) |
            Q(category__icontains=q)
        )
    if category:
        qs = qs.filter(category=category)
    return qs.order_by("name")


def stock_categories(shop: Shop) -> list[str]:
    rows = (StockItem.objects
            .filter(shop=shop)
            .exclude(category="")
            .values_list("category", flat=True)
            .distinct())
    return sorted(set(rows))


def get_stock_item(shop: Shop, item_id: int) -> StockItem:
    item = StockItem.objects.filter(shop=shop, pk=item_id).first()
    if item is None:
        raise StockError("Stock item not found")
    return item


def update_stock_item(item: StockItem, **data) -> StockItem:
    if "quantity" in data and int(data["quantity"]) < 0:
        raise StockError("quantity must be >= 0")
    for k, v in data.items():
        setattr(item, k, v)
    item.save()
    return item


def delete_stock_item(item: StockItem) -> None:
    item.delete()


@transaction.atomic
def update_stock_quantity(shop: Shop, items: Iterable) -> list[StockItem]:
    """Decrement stock for sold lines, matched by exact name; never below zero."""
    stock = {s.name: s for s in StockItem.objects.select_for_update().filter(shop=shop).order_by("-id")}
    touched = []
    for sold in items:
        name = sold["name"] if isinstance(sold, dict) else sold.name
        qty = int(sold["quantity"] if isinstance(sold, dict) else sold.quantity)
        rec = stock.get(name)
        if rec is None:
            continue
        rec.quantity = max(0, rec.quantity - qty)
        rec.save(update_fields=["quantity", "last_modified"])
        touched.append(rec)
    return touched


# ================== Receipts ==================

@dataclass
class LineIn:
    name: str
    price: Decimal
    quantity: int


def generate_transaction_id() -> str:
    return f"TXN-{int(time.time())}-{uuid.uuid4().hex[:6].upper()}"


def calculate_total(items: Iterable) -> Decimal:
    total = sum((Decimal(str(it.price)) * int(it.quantity) for it in items), Decimal("0.00"))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def _parse_lines(items) -> list[LineIn]:
    if not items:
        raise ReceiptError("At least one item is required")
    lines = []
    for raw in items:
        name = (raw.get("name") or "").strip()
        if not name or raw.get("price") in (None, "") or raw.get("quantity") in (None, ""):
            raise ReceiptError("All item details are required")
        try:
            price = Decimal(str(raw["price"]))
        except (InvalidOperation, ValueError):
            price = Decimal("0")
        if not price.is_finite() or price <= 0:
            raise ReceiptError("Item prices must be valid numbers greater than 0")
        try:
            quantity = int(raw["quantity"])
        except (TypeError, ValueError):
            quantity = 0
        if quantity <= 0:
            raise ReceiptError("Item quantities must be valid numbers greater than 0")
        lines.append(LineIn(name=name, price=price, quantity=quantity))
    return lines


def validate_inventory(lines: list[LineIn], stock: list[StockItem]) -> dict[str, StockItem]:
    """
    Check every line against stock by case-insensitive name.

    Quantities of repeated lines are summed before comparing with on-hand.
    Returns the matched stock item per lower-cased line name.
    """
    by_name: dict[str, StockItem] = {}
    for s in stock:
        by_name.setdefault(s.name.lower(), s)

    wanted: dict[str, int] = {}
    labels: dict[str, str] = {}
    for ln in lines:
        key = ln.name.lower()
        wanted[key] = wanted.get(key, 0) + ln.quantity
        labels.setdefault(key, ln.name)

    invalid = []
    for key, qty in wanted.items():
        match = by_name.get(key)
        if match is None:
            invalid.append({"name": labels[key], "error": "Item not found in inventory"})
        elif match.quantity < qty:
            invalid.append({"name": labels[key], "error": f"Insufficient quantity (Available: {match.quantity})"})
    if invalid:
        raise InventoryError(invalid)
    return {key: by_name[key] for key in wanted}


@transaction.atomic
def create_receipt(shop: Shop, *, cashier_name: str, items, payment_method: str = Receipt.CASH,
                   manager_name: str = "", transaction_id: Optional[str] = None) -> Receipt:
    """
    Save a sale and take the sold quantities out of stock.

    Lines are checked against the shop's stock (case-insensitive name) before
    anything is written; each saved line carries the stock cost price at
    sale time when one is set.
    """
    if not (cashier_name or "").strip():
        raise ReceiptError("Cashier name is required")
    lines = _parse_lines(items)

    stock = list(StockItem.objects.select_for_update().filter(shop=shop).order_by("id"))
    matched = validate_inventory(lines, stock)

    receipt = Receipt.objects.create(
        shop=shop,
        shop_details=shop.details_snapshot(),
        cashier_name=cashier_name.strip(),
        manager_name=(manager_name or "").strip(),
        payment_method=payment_method or Receipt.CASH,
        transaction_id=(transaction_id or "").strip() or generate_transaction_id(),
        total_amount=calculate_total(lines),
        timestamp=timezone.now(),
    )
    ReceiptItem.objects.bulk_create([
        ReceiptItem(receipt=receipt, name=ln.name, price=ln.price, quantity=ln.quantity,
                    cost_price=matched[ln.name.lower()].cost_price or None)
        for ln in lines
    ])
    # decrement the stock record the line was validated against
    update_stock_quantity(shop, [
        {"name": matched[ln.name.lower()].name, "quantity": ln.quantity} for ln in lines
    ])

    logger.info("receipt created", extra={
        "shop_id": shop.id, "receipt_id": receipt.id, "transaction_id": receipt.transaction_id,
    })
    return receipt


def search_receipts(shop: Shop, q: str = "", on_date: Optional[date] = None):
    qs = Receipt.objects.filter(shop=shop).prefetch_related("items")
    q = (q or "").strip()
    if q:
        qs = qs.filter(
            Q(transaction_id__icontains=q) |
            Q(cashier_name__icontains=q) |
            Q(items__name__icontains=q)
        ).distinct()
    if on_date:
        qs = qs.filter(timestamp__date=on_date)
    return qs.order_by("-timestamp", "-id")


# ================== Staff ==================

def _check_time(value: str) -> str:
    value = (value or "").strip()
    if not value:
        return ""
    parts = value.split(":")
    try:
        hh, mm = int(parts[0]), int(parts[1])
    except (IndexError, ValueError):
        raise AttendanceError(f"invalid time: {value}")
    if len(parts) != 2 or not (0 <= hh < 24 and 0 <= mm < 60):
        raise AttendanceError(f"invalid time: {value}")
    return f"{hh:02d}:{mm:02d}"


@transaction.atomic
def mark_attendance(shop: Shop, on_date: date, records: Iterable[dict]) -> list[AttendanceRecord]:
    """Create or update one attendance row per employee for ``on_date``."""
    employees = {e.id: e for e in Employee.objects.filter(shop=shop)}
    saved = []
    for rec in records:
        emp = employees.get(int(rec["employee_id"]))
        if emp is None:
            raise AttendanceError(f"Employee {rec['employee_id']} not found")

        status = rec.get("status") or AttendanceRecord.PRESENT
        if status not in dict(AttendanceRecord.STATUS_CHOICES):
            raise AttendanceError(f"invalid status: {status}")
        off = status in AttendanceRecord.OFF_WORK

        defaults = {
            "shop": shop,
            "status": status,
            "check_in": "" if off else _check_time(rec.get("check_in")),
            "check_out": "" if off else _check_time(rec.get("check_out")),
            "notes": rec.get("notes") or "",
        }
        row, _ = AttendanceRecord.objects.update_or_create(employee=emp, date=on_date, defaults=defaults)
        saved.append(row)
    return saved


def attendance_for(shop: Shop, on_date: Optional[date] = None, employee_id: Optional[int] = None):
    qs = AttendanceRecord.objects.filter(shop=shop).select_related("employee")
    if on_date:
        qs = qs.filter(date=on_date)
    if employee_id:
        qs = qs.filter(employee_id=employee_id)
    return qs.order_by("-date", "employee__name")


def today_attendance(shop: Shop) -> dict:
    statuses = list(
        AttendanceRecord.objects
        .filter(shop=shop, date=timezone.localdate())
        .values_list("status", flat=True)
    )
    return {
        "present": sum(1 for s in statuses if s in AttendanceRecord.AT_WORK),
        "absent": sum(1 for s in statuses if s in AttendanceRecord.OFF_WORK),
        "total": len(statuses),
    }


# ================== Dashboard ==================

def dashboard_summary(shop: Shop) -> dict:
    limit = getattr(settings, "RECENT_RECEIPTS_LIMIT", 5)
    receipts = Receipt.objects.filter(shop=shop)
    recent = receipts.order_by("-timestamp", "-id")[:limit]
    return {
        "shop": shop.details_snapshot(),
        "currency": getattr(settings, "DEFAULT_CURRENCY", "USD"),
        "receipt_count": receipts.count(),
        "recent_receipts": [
            {
                "id": r.id,
                "transaction_id": r.transaction_id,
                "cashier_name": r.cashier_name,
                "total_amount": f"{r.total_amount:.2f}",
                "timestamp": r.timestamp.isoformat(),
            }
            for r in recent
        ],
        "employee_count": Employee.objects.filter(shop=shop).count(),
        "today_attendance": today_attendance(shop),
    }
