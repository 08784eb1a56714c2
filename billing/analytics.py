# billing/analytics.py
"""
Sales and profit aggregation for a shop.

Receipts are fetched per shop and filtered to the requested window in
memory, then summed.  Profit per line is ``(price - cost_price) * quantity``
when a positive cost price is known (embedded on the receipt line, else the
current stock item with the exact same name); otherwise a fixed assumed
margin of the selling price is booked instead.

All amounts are ``Decimal`` so bucket totals add up exactly to the window
totals.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

logger = logging.getLogger(__name__)

DAILY = "daily"
MONTHLY = "monthly"
YEARLY = "yearly"

_PERIOD_ALIASES = {
    "day": DAILY, "daily": DAILY,
    "month": MONTHLY, "monthly": MONTHLY,
    "year": YEARLY, "yearly": YEARLY,
}

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_YEAR_RE = re.compile(r"^(\d{4})$")

ZERO = Decimal("0")

# booked as profit on lines with no known cost price
ASSUMED_MARGIN = Decimal("0.30")


@dataclass
class BucketTotals:
    key: str        # sortable: YYYY-MM-DD or YYYY-MM
    label: str      # DD or Mon
    sales: Decimal = ZERO
    profit: Decimal = ZERO


@dataclass
class SalesTotals:
    sales: Decimal = ZERO
    profit: Decimal = ZERO
    total_items: int = 0
    transaction_count: int = 0
    period: str = DAILY
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    breakdown: List[BucketTotals] = field(default_factory=list)

    def as_dict(self) -> dict:
        out = {
            "period": self.period,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "sales": f"{self.sales:.2f}",
            "profit": f"{self.profit:.2f}",
            "total_items": self.total_items,
            "transaction_count": self.transaction_count,
        }
        if self.period == MONTHLY:
            out["daily_data"] = [
                {"day": b.label, "sales": f"{b.sales:.2f}", "profit": f"{b.profit:.2f}"}
                for b in self.breakdown
            ]
        elif self.period == YEARLY:
            out["monthly_data"] = [
                {"month": b.label, "sales": f"{b.sales:.2f}", "profit": f"{b.profit:.2f}"}
                for b in self.breakdown
            ]
        return out


def normalize_period(period: Optional[str]) -> str:
    """Map ``day``/``month``/``year`` style input to a period; anything else is daily."""
    return _PERIOD_ALIASES.get((period or "").strip().lower(), DAILY)


# ================== Windows ==================

def parse_reference_date(value) -> date:
    """
    Turn user input into the reference date of a window.

    Accepts ``date``/``datetime`` objects and ``YYYY-MM-DD``, ``YYYY-MM``,
    ``YYYY`` or ISO datetime strings.  Anything unusable (including
    well-formed but impossible dates such as ``2024-02-30``) falls back to
    today in the active time zone.
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()
    if isinstance(value, date):
        return value

    raw = (str(value).strip() if value is not None else "")
    if raw:
        try:
            parsed = parse_date(raw)
            if parsed:
                return parsed
            m = _YEAR_MONTH_RE.match(raw)
            if m:
                return date(int(m.group(1)), int(m.group(2)), 1)
            m = _YEAR_RE.match(raw)
            if m:
                return date(int(m.group(1)), 1, 1)
            dt = parse_datetime(raw)
            if dt:
                return parse_reference_date(dt)
        except (ValueError, TypeError, OverflowError):
            pass
        logger.info("invalid reference date, using today", extra={"value": raw[:32]})
    return timezone.localdate()


def window_for(reference, period: str = DAILY) -> Tuple[datetime, datetime]:
    """Inclusive [start, end] instants of the day, month or year holding ``reference``."""
    ref = parse_reference_date(reference)
    period = normalize_period(period)
    if period == MONTHLY:
        first = ref.replace(day=1)
        last = ref.replace(day=calendar.monthrange(ref.year, ref.month)[1])
    elif period == YEARLY:
        first = date(ref.year, 1, 1)
        last = date(ref.year, 12, 31)
    else:
        first = last = ref

    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(first, time.min), tz)
    end = timezone.make_aware(datetime.combine(last, time.max), tz)
    return start, end


def _aware(ts: datetime) -> datetime:
    if timezone.is_naive(ts):
        return timezone.make_aware(ts, timezone.get_current_timezone())
    return ts


def receipts_in_window(store, shop_id: str, start: datetime, end: datetime) -> list:
    receipts = store.fetch_receipts_by_shop(shop_id)
    return [r for r in receipts if start <= _aware(r.timestamp) <= end]


# ================== Totals ==================

def _cost_price_for(store, shop_id: str, name: str, cache: Dict[str, Decimal]) -> Decimal:
    if name not in cache:
        cache[name] = Decimal(store.fetch_stock_item_cost_price(shop_id, name) or 0)
    return cache[name]


def calculate_sales_and_profit(receipts: Iterable, store=None, shop_id: Optional[str] = None,
                               cost_cache: Optional[Dict[str, Decimal]] = None) -> SalesTotals:
    """
    Sum sales, profit, items sold and transaction count over ``receipts``.

    When ``store`` and ``shop_id`` are given, lines without a positive
    embedded cost price are priced from the stock item of the same name;
    lookups are memoised per name in ``cost_cache``.  Store errors propagate.
    """
    cache = {} if cost_cache is None else cost_cache

    sales = ZERO
    profit = ZERO
    total_items = 0
    count = 0

    for receipt in receipts:
        count += 1
        sales += Decimal(receipt.total_amount or 0)

        for item in receipt.items:
            quantity = int(item.quantity or 1)
            price = Decimal(item.price or 0)
            cost_price = Decimal(item.cost_price or 0)

            if cost_price <= 0 and store is not None and shop_id and item.name:
                cost_price = _cost_price_for(store, shop_id, item.name, cache)

            if cost_price > 0:
                profit += (price - cost_price) * quantity
            else:
                profit += price * ASSUMED_MARGIN * quantity

            total_items += quantity

    logger.debug("sales calculated", extra={
        "shop_id": shop_id, "sales": str(sales), "profit": str(profit),
        "total_items": total_items, "transaction_count": count,
    })
    return SalesTotals(sales=sales, profit=profit, total_items=total_items, transaction_count=count)


def _bucketed(receipts: list, key_fmt: str, label_fmt: str) -> List[Tuple[str, str, list]]:
    groups: Dict[str, Tuple[str, list]] = {}
    for r in receipts:
        local = timezone.localtime(_aware(r.timestamp))
        key = local.strftime(key_fmt)
        if key not in groups:
            groups[key] = (local.strftime(label_fmt), [])
        groups[key][1].append(r)
    return [(key, groups[key][0], groups[key][1]) for key in sorted(groups)]


def _aggregate(store, shop_id: str, reference, period: str) -> SalesTotals:
    start, end = window_for(reference, period)
    receipts = receipts_in_window(store, shop_id, start, end)
    cache: Dict[str, Decimal] = {}

    breakdown = []
    if period == MONTHLY:
        groups = _bucketed(receipts, "%Y-%m-%d", "%d")
    elif period == YEARLY:
        groups = _bucketed(receipts, "%Y-%m", "%b")
    else:
        groups = []
    for key, label, rows in groups:
        part = calculate_sales_and_profit(rows, store, shop_id, cache)
        breakdown.append(BucketTotals(key=key, label=label, sales=part.sales, profit=part.profit))

    totals = calculate_sales_and_profit(receipts, store, shop_id, cache)
    totals.period = period
    totals.start = start
    totals.end = end
    totals.breakdown = breakdown
    return totals


def get_daily_sales_and_profit(store, shop_id: str, reference=None) -> SalesTotals:
    return _aggregate(store, shop_id, reference, DAILY)


def get_monthly_sales_and_profit(store, shop_id: str, reference=None) -> SalesTotals:
    """Month totals plus one bucket per day that had sales."""
    return _aggregate(store, shop_id, reference, MONTHLY)


def get_yearly_sales_and_profit(store, shop_id: str, reference=None) -> SalesTotals:
    """Year totals plus one bucket per month that had sales."""
    return _aggregate(store, shop_id, reference, YEARLY)


def get_sales_and_profit(store, shop_id: str, period: Optional[str] = None, reference=None) -> SalesTotals:
    return _aggregate(store, shop_id, reference, normalize_period(period))
