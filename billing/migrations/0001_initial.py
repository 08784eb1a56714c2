import billing.models
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Shop",
            fields=[
                ("id", models.CharField(default=billing.models._new_shop_id, editable=False, max_length=60, primary_key=True, serialize=False)),
                ("shop_name", models.CharField(max_length=120)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("phone_number", models.CharField(blank=True, default="", max_length=40)),
                ("phone_numbers", models.JSONField(blank=True, default=list)),
                ("cashier_names", models.JSONField(blank=True, default=list)),
                ("manager_names", models.JSONField(blank=True, default=list)),
                ("date_created", models.BigIntegerField(blank=True, editable=False)),
                ("last_modified", models.BigIntegerField(editable=False)),
                ("owner", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="shop", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "shops",
            },
        ),
        migrations.CreateModel(
            name="StockItem",
            fields=[
                ("id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("sku", models.CharField(blank=True, default="", max_length=100)),
                ("supplier", models.CharField(blank=True, default="", max_length=255)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("cost_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("quantity", models.IntegerField(default=0)),
                ("date_created", models.BigIntegerField(blank=True, editable=False)),
                ("last_modified", models.BigIntegerField(editable=False)),
                ("shop", models.ForeignKey(db_column="shop", on_delete=django.db.models.deletion.CASCADE, related_name="stock_items", to="billing.shop")),
            ],
            options={
                "db_table": "stock",
                "indexes": [
                    models.Index(fields=["shop"], name="idx_stock_shop"),
                    models.Index(fields=["shop", "name"], name="idx_stock_shop_name"),
                    models.Index(fields=["category"], name="idx_stock_category"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gte", 0)), name="ck_stock_quantity_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Receipt",
            fields=[
                ("id", models.AutoField(primary_key=True, serialize=False)),
                ("cashier_name", models.CharField(max_length=120)),
                ("manager_name", models.CharField(blank=True, default="", max_length=120)),
                ("payment_method", models.CharField(choices=[("Cash", "Cash"), ("Credit Card", "Credit Card"), ("Debit Card", "Debit Card"), ("Bank Transfer", "Bank Transfer"), ("Mobile Payment", "Mobile Payment")], default="Cash", max_length=32)),
                ("transaction_id", models.CharField(max_length=64)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("shop_details", models.JSONField(blank=True, default=dict)),
                ("shop", models.ForeignKey(db_column="shop", on_delete=django.db.models.deletion.CASCADE, related_name="receipts", to="billing.shop")),
            ],
            options={
                "db_table": "receipts",
                "indexes": [
                    models.Index(fields=["shop"], name="idx_receipts_shop"),
                    models.Index(fields=["timestamp"], name="idx_receipts_timestamp"),
                    models.Index(fields=["transaction_id"], name="idx_receipts_txn"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceiptItem",
            fields=[
                ("id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("quantity", models.IntegerField(default=1)),
                ("cost_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("receipt", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="billing.receipt")),
            ],
            options={
                "db_table": "receipt_items",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("position", models.CharField(max_length=120)),
                ("contact", models.CharField(max_length=60)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("joining_date", models.DateField(default=django.utils.timezone.localdate)),
                ("salary", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("date_created", models.BigIntegerField(blank=True, editable=False)),
                ("last_modified", models.BigIntegerField(editable=False)),
                ("shop", models.ForeignKey(db_column="shop", on_delete=django.db.models.deletion.CASCADE, related_name="employees", to="billing.shop")),
            ],
            options={
                "db_table": "employees",
                "indexes": [
                    models.Index(fields=["shop"], name="idx_employees_shop"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AttendanceRecord",
            fields=[
                ("id", models.AutoField(primary_key=True, serialize=False)),
                ("date", models.DateField()),
                ("status", models.CharField(choices=[("present", "Present"), ("absent", "Absent"), ("half-day", "Half Day"), ("leave", "Leave")], default="present", max_length=16)),
                ("check_in", models.CharField(blank=True, default="", max_length=8)),
                ("check_out", models.CharField(blank=True, default="", max_length=8)),
                ("notes", models.TextField(blank=True, default="")),
                ("date_created", models.BigIntegerField(blank=True, editable=False)),
                ("last_modified", models.BigIntegerField(editable=False)),
                ("employee", models.ForeignKey(db_column="employee", on_delete=django.db.models.deletion.CASCADE, related_name="attendance", to="billing.employee")),
                ("shop", models.ForeignKey(db_column="shop", on_delete=django.db.models.deletion.CASCADE, related_name="attendance", to="billing.shop")),
            ],
            options={
                "db_table": "attendance",
                "indexes": [
                    models.Index(fields=["shop", "date"], name="idx_attendance_shop_date"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("employee", "date"), name="uq_attendance_employee_date"),
                ],
            },
        ),
    ]
