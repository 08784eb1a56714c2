"""
Pytest configuration and fixtures for the shop billing backend.
"""

from decimal import Decimal

import pytest

from billing.errors import RecordStoreError
from billing.store import ReceiptLine, ReceiptRecord


class FakeRecordStore:
    """In-memory record store; counts cost-price lookups per item name."""

    def __init__(self, receipts=None, cost_prices=None, fail_on=None):
        self.receipts = list(receipts or [])
        self.cost_prices = dict(cost_prices or {})
        self.fail_on = fail_on
        self.lookups = []

    def fetch_receipts_by_shop(self, shop_id):
        if self.fail_on == "receipts":
            raise RecordStoreError("connection refused: 10.0.0.5:5432")
        return [r for r in self.receipts if r.shop_id == shop_id]

    def fetch_stock_item_cost_price(self, shop_id, item_name):
        self.lookups.append(item_name)
        if self.fail_on == "cost":
            raise RecordStoreError("query timeout")
        return self.cost_prices.get(item_name, Decimal("0"))


@pytest.fixture
def fake_store():
    return FakeRecordStore


@pytest.fixture
def make_record():
    """
    Build a ReceiptRecord from ``(name, price, quantity[, cost_price])`` tuples.
    """
    counter = {"n": 0}

    def _make(when, lines, shop_id="shop-1", total=None):
        counter["n"] += 1
        items = []
        for line in lines:
            name, price, qty = line[0], Decimal(str(line[1])), int(line[2])
            cost = Decimal(str(line[3])) if len(line) > 3 and line[3] is not None else None
            items.append(ReceiptLine(name=name, price=price, quantity=qty, cost_price=cost))
        if total is None:
            total = sum((it.price * it.quantity for it in items), Decimal("0"))
        return ReceiptRecord(
            id=counter["n"], shop_id=shop_id, timestamp=when,
            total_amount=Decimal(str(total)), items=tuple(items),
        )

    return _make


@pytest.fixture
def api_client():
    """
    Fixture for Django REST framework API client.
    """
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def shop(django_user_model):
    """
    Fixture for a registered shop and its owner.
    """
    from billing.models import Shop

    user = django_user_model.objects.create_user(
        username="owner@example.com", email="owner@example.com", password="testpass123"
    )
    return Shop.objects.create(
        owner=user, shop_name="Corner Store", address="1 Main St",
        phone_numbers=["555-0100", "555-0101"],
        cashier_names=["Asha"], manager_names=["Ravi"],
    )


@pytest.fixture
def other_shop(django_user_model):
    from billing.models import Shop

    user = django_user_model.objects.create_user(
        username="other@example.com", email="other@example.com", password="testpass123"
    )
    return Shop.objects.create(owner=user, shop_name="Other Store")


@pytest.fixture
def authenticated_client(api_client, shop):
    """
    Fixture for an API client logged in as the shop owner.
    """
    api_client.force_authenticate(user=shop.owner)
    return api_client


@pytest.fixture
def make_receipt(shop):
    """
    Persist a receipt with items at a given timestamp, bypassing stock checks.
    """
    from billing.models import Receipt, ReceiptItem

    def _make(when, lines, target=None, transaction_id=None):
        target = target or shop
        total = sum((Decimal(str(l[1])) * int(l[2]) for l in lines), Decimal("0"))
        receipt = Receipt.objects.create(
            shop=target, cashier_name="Asha", transaction_id=transaction_id or f"TXN-{when:%Y%m%d%H%M%S}",
            total_amount=total, timestamp=when,
        )
        for line in lines:
            ReceiptItem.objects.create(
                receipt=receipt, name=line[0], price=Decimal(str(line[1])), quantity=int(line[2]),
                cost_price=(Decimal(str(line[3])) if len(line) > 3 and line[3] is not None else None),
            )
        return receipt

    return _make
