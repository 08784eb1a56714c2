"""
Tests for recording sales.
"""

import re
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from billing import services
from billing.errors import InventoryError, ReceiptError
from billing.models import Receipt, StockItem


@pytest.fixture
def stocked(shop):
    rice = StockItem.objects.create(shop=shop, name="Rice", category="grains",
                                    price=Decimal("15"), cost_price=Decimal("10"), quantity=5)
    salt = StockItem.objects.create(shop=shop, name="Salt", category="spices",
                                    price=Decimal("1.50"), quantity=2)
    return {"rice": rice, "salt": salt}


def line(name, price, quantity):
    return {"name": name, "price": str(price), "quantity": str(quantity)}


@pytest.mark.django_db
class TestCreateReceipt:

    def test_saves_receipt_and_takes_stock(self, shop, stocked):
        receipt = services.create_receipt(
            shop, cashier_name=" Asha ", manager_name="Ravi",
            payment_method=Receipt.CREDIT_CARD,
            items=[line("Rice", "15", 2), line("Salt", "1.50", 1)],
        )

        assert receipt.total_amount == Decimal("31.50")
        assert receipt.cashier_name == "Asha"
        assert receipt.payment_method == "Credit Card"
        assert receipt.shop_details == {
            "name": "Corner Store", "address": "1 Main St", "phone": "555-0100, 555-0101",
        }
        assert re.match(r"^TXN-\d+-[0-9A-F]{6}$", receipt.transaction_id)

        items = list(receipt.items.all())
        assert [(i.name, i.quantity) for i in items] == [("Rice", 2), ("Salt", 1)]
        assert items[0].cost_price == Decimal("10.00")
        assert items[1].cost_price is None

        stocked["rice"].refresh_from_db()
        stocked["salt"].refresh_from_db()
        assert stocked["rice"].quantity == 3
        assert stocked["salt"].quantity == 1

    def test_name_match_ignores_case(self, shop, stocked):
        receipt = services.create_receipt(shop, cashier_name="Asha", items=[line("rICE", 15, 5)])

        stocked["rice"].refresh_from_db()
        assert stocked["rice"].quantity == 0
        assert receipt.items.get().name == "rICE"

    def test_explicit_transaction_id_kept(self, shop, stocked):
        receipt = services.create_receipt(
            shop, cashier_name="Asha", transaction_id="TXN-CUSTOM-1", items=[line("Rice", 15, 1)],
        )
        assert receipt.transaction_id == "TXN-CUSTOM-1"

    def test_unknown_and_short_items_rejected(self, shop, stocked):
        with pytest.raises(InventoryError) as excinfo:
            services.create_receipt(
                shop, cashier_name="Asha",
                items=[line("Rice", 15, 6), line("Sugar", 2, 1), line("Salt", "1.50", 1)],
            )

        assert excinfo.value.invalid_items == [
            {"name": "Rice", "error": "Insufficient quantity (Available: 5)"},
            {"name": "Sugar", "error": "Item not found in inventory"},
        ]
        assert str(excinfo.value).startswith("Inventory error: ")
        assert Receipt.objects.count() == 0
        stocked["salt"].refresh_from_db()
        assert stocked["salt"].quantity == 2

    def test_repeated_lines_are_summed(self, shop, stocked):
        with pytest.raises(InventoryError):
            services.create_receipt(
                shop, cashier_name="Asha", items=[line("Salt", "1.50", 2), line("salt", "1.50", 1)],
            )

    def test_other_shops_stock_is_not_visible(self, shop, other_shop):
        StockItem.objects.create(shop=other_shop, name="Rice", price=Decimal("15"), quantity=10)

        with pytest.raises(InventoryError):
            services.create_receipt(shop, cashier_name="Asha", items=[line("Rice", 15, 1)])

    @pytest.mark.parametrize("items,message", [
        ([], "At least one item is required"),
        ([{"name": "Rice", "price": "", "quantity": "1"}], "All item details are required"),
        ([{"name": "  ", "price": "15", "quantity": "1"}], "All item details are required"),
        ([line("Rice", "abc", 1)], "Item prices must be valid numbers greater than 0"),
        ([line("Rice", "-3", 1)], "Item prices must be valid numbers greater than 0"),
        ([line("Rice", "NaN", 1)], "Item prices must be valid numbers greater than 0"),
        ([line("Rice", 15, 0)], "Item quantities must be valid numbers greater than 0"),
        ([line("Rice", 15, "two")], "Item quantities must be valid numbers greater than 0"),
    ])
    def test_line_validation(self, shop, stocked, items, message):
        with pytest.raises(ReceiptError, match=message):
            services.create_receipt(shop, cashier_name="Asha", items=items)

    def test_cashier_required(self, shop, stocked):
        with pytest.raises(ReceiptError, match="Cashier name is required"):
            services.create_receipt(shop, cashier_name="  ", items=[line("Rice", 15, 1)])

    def test_receipts_are_immutable(self, shop, stocked):
        receipt = services.create_receipt(shop, cashier_name="Asha", items=[line("Rice", 15, 1)])

        receipt.cashier_name = "Someone else"
        with pytest.raises(ValidationError):
            receipt.save()

    def test_receipt_lines_are_immutable(self, shop, stocked):
        receipt = services.create_receipt(shop, cashier_name="Asha", items=[line("Rice", 5, 1)])
        item = receipt.items.first()

        item.price = Decimal("999")
        with pytest.raises(ValidationError):
            item.save()

        item.refresh_from_db()
        assert item.price == Decimal("5.00")

    def test_logs_creation(self, shop, stocked, caplog):
        with caplog.at_level("INFO", logger="billing.services"):
            services.create_receipt(shop, cashier_name="Asha", items=[line("Rice", 15, 1)])

        assert "receipt created" in caplog.text


class TestCalculateTotal:

    def test_rounds_to_cents(self):
        lines = [services.LineIn("A", Decimal("0.333"), 3), services.LineIn("B", Decimal("2.005"), 1)]
        assert services.calculate_total(lines) == Decimal("3.00")

    def test_empty(self):
        assert services.calculate_total([]) == Decimal("0.00")


@pytest.mark.django_db
class TestSearchReceipts:

    def test_search_by_text_and_date(self, shop, stocked):
        first = services.create_receipt(shop, cashier_name="Asha", transaction_id="TXN-A",
                                        items=[line("Rice", 15, 1)])
        second = services.create_receipt(shop, cashier_name="Bilal", transaction_id="TXN-B",
                                         items=[line("Salt", "1.50", 1)])

        assert list(services.search_receipts(shop)) == [second, first]
        assert list(services.search_receipts(shop, q="bilal")) == [second]
        assert list(services.search_receipts(shop, q="rice")) == [first]
        assert list(services.search_receipts(shop, q="TXN-A")) == [first]
        assert list(services.search_receipts(shop, on_date=first.timestamp.date())) == [second, first]
