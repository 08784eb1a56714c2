import time
import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.core.exceptions import ValidationError


def _new_shop_id() -> str:
    return uuid.uuid4().hex


class Shop(models.Model):
    id = models.CharField(max_length=60, primary_key=True, default=_new_shop_id, editable=False)
    owner = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="shop")
    shop_name = models.CharField(max_length=120)
    address = models.CharField(max_length=255, blank=True, default="")
    phone_number = models.CharField(max_length=40, blank=True, default="")
    phone_numbers = models.JSONField(default=list, blank=True)
    cashier_names = models.JSONField(default=list, blank=True)
    manager_names = models.JSONField(default=list, blank=True)

    date_created = models.BigIntegerField(editable=False, blank=True)
    last_modified = models.BigIntegerField(editable=False)

    class Meta:
        db_table = "shops"

    def __str__(self):
        return self.shop_name

    def save(self, *args, **kwargs):
        now = int(time.time())
        self.last_modified = now
        if not self.date_created:
            self.date_created = now
        # first phone stays the primary contact number
        if self.phone_numbers:
            self.phone_number = self.phone_numbers[0]
        return super().save(*args, **kwargs)

    def details_snapshot(self) -> dict:
        phones = ", ".join(self.phone_numbers) if self.phone_numbers else self.phone_number
        return {"name": self.shop_name, "address": self.address, "phone": phones}


class StockItem(models.Model):
    id = models.AutoField(primary_key=True)
    shop = models.ForeignKey("Shop", db_column="shop", on_delete=models.CASCADE, related_name="stock_items")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    sku = models.CharField(max_length=100, blank=True, default="")
    supplier = models.CharField(max_length=255, blank=True, default="")

    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    quantity = models.IntegerField(default=0)

    date_created = models.BigIntegerField(editable=False, blank=True)
    last_modified = models.BigIntegerField(editable=False)

    class Meta:
        db_table = "stock"
        indexes = [
            models.Index(fields=["shop"], name="idx_stock_shop"),
            models.Index(fields=["shop", "name"], name="idx_stock_shop_name"),
            models.Index(fields=["category"], name="idx_stock_category"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name="ck_stock_quantity_non_negative"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError("quantity must be >= 0")
        if self.cost_price is not None and self.cost_price < 0:
            raise ValidationError("cost_price must be >= 0")

    def save(self, *args, **kwargs):
        now = int(time.time())
        self.last_modified = now
        if not self.date_created:
            self.date_created = now
        return super().save(*args, **kwargs)


class Receipt(models.Model):
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    BANK_TRANSFER = "Bank Transfer"
    MOBILE_PAYMENT = "Mobile Payment"
    PAYMENT_METHODS = [
        (CASH, CASH), (CREDIT_CARD, CREDIT_CARD), (DEBIT_CARD, DEBIT_CARD),
        (BANK_TRANSFER, BANK_TRANSFER), (MOBILE_PAYMENT, MOBILE_PAYMENT),
    ]

    id = models.AutoField(primary_key=True)
    shop = models.ForeignKey("Shop", db_column="shop", on_delete=models.CASCADE, related_name="receipts")
    cashier_name = models.CharField(max_length=120)
    manager_name = models.CharField(max_length=120, blank=True, default="")
    payment_method = models.CharField(max_length=32, choices=PAYMENT_METHODS, default=CASH)
    transaction_id = models.CharField(max_length=64)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    timestamp = models.DateTimeField(default=timezone.now)

    # shop name/address/phone as printed at sale time
    shop_details = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "receipts"
        indexes = [
            models.Index(fields=["shop"], name="idx_receipts_shop"),
            models.Index(fields=["timestamp"], name="idx_receipts_timestamp"),
            models.Index(fields=["transaction_id"], name="idx_receipts_txn"),
        ]

    def __str__(self):
        return self.transaction_id

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("receipts are immutable once created")
        return super().save(*args, **kwargs)


class ReceiptItem(models.Model):
    id = models.AutoField(primary_key=True)
    receipt = models.ForeignKey("Receipt", on_delete=models.CASCADE, related_name="items")
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    quantity = models.IntegerField(default=1)
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    class Meta:
        db_table = "receipt_items"
        ordering = ["id"]

    @property
    def line_total(self):
        return self.price * self.quantity

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("receipt items are immutable once created")
        return super().save(*args, **kwargs)


class Employee(models.Model):
    id = models.AutoField(primary_key=True)
    shop = models.ForeignKey("Shop", db_column="shop", on_delete=models.CASCADE, related_name="employees")
    name = models.CharField(max_length=120)
    position = models.CharField(max_length=120)
    contact = models.CharField(max_length=60)
    email = models.EmailField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    joining_date = models.DateField(default=timezone.localdate)
    salary = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    date_created = models.BigIntegerField(editable=False, blank=True)
    last_modified = models.BigIntegerField(editable=False)

    class Meta:
        db_table = "employees"
        indexes = [
            models.Index(fields=["shop"], name="idx_employees_shop"),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        now = int(time.time())
        self.last_modified = now
        if not self.date_created:
            self.date_created = now
        return super().save(*args, **kwargs)


class AttendanceRecord(models.Model):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"
    STATUS_CHOICES = [
        (PRESENT, "Present"), (ABSENT, "Absent"),
        (HALF_DAY, "Half Day"), (LEAVE, "Leave"),
    ]
    AT_WORK = (PRESENT, HALF_DAY)
    OFF_WORK = (ABSENT, LEAVE)

    id = models.AutoField(primary_key=True)
    shop = models.ForeignKey("Shop", db_column="shop", on_delete=models.CASCADE, related_name="attendance")
    employee = models.ForeignKey("Employee", db_column="employee", on_delete=models.CASCADE,
                                 related_name="attendance")
    date = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PRESENT)
    check_in = models.CharField(max_length=8, blank=True, default="")    # "HH:MM"
    check_out = models.CharField(max_length=8, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    date_created = models.BigIntegerField(editable=False, blank=True)
    last_modified = models.BigIntegerField(editable=False)

    class Meta:
        db_table = "attendance"
        constraints = [
            models.UniqueConstraint(fields=["employee", "date"], name="uq_attendance_employee_date"),
        ]
        indexes = [
            models.Index(fields=["shop", "date"], name="idx_attendance_shop_date"),
        ]

    def save(self, *args, **kwargs):
        now = int(time.time())
        self.last_modified = now
        if not self.date_created:
            self.date_created = now
        return super().save(*args, **kwargs)
