# billing/serializers.py

from rest_framework import serializers

from .models import AttendanceRecord, Employee, Receipt, ReceiptItem, Shop, StockItem


# ============ Shop / accounts ============
class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    confirm_password = serializers.CharField(write_only=True, required=False)
    shop_name = serializers.CharField(max_length=120)
    address = serializers.CharField(required=False, allow_blank=True, default="")
    phone_number = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        confirm = attrs.pop("confirm_password", None)
        if confirm is not None and confirm != attrs["password"]:
            raise serializers.ValidationError({"confirm_password": "Passwords do not match"})
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ShopSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source="owner.email", read_only=True)

    class Meta:
        model = Shop
        fields = [
            "id", "email", "shop_name", "address",
            "phone_number", "phone_numbers", "cashier_names", "manager_names",
            "date_created", "last_modified",
        ]
        read_only_fields = ["id", "email", "phone_number", "date_created", "last_modified"]


class ShopSettingsSerializer(serializers.Serializer):
    shop_name = serializers.CharField(max_length=120)
    address = serializers.CharField(required=False, allow_blank=True, default="")
    phone_numbers = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    cashier_names = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    manager_names = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)


# ============ Stock ============
class StockItemSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    cost_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0,
                                          required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=0)

    class Meta:
        model = StockItem
        fields = [
            "id", "name", "description", "category", "sku", "supplier",
            "price", "cost_price", "quantity",
            "date_created", "last_modified",
        ]
        read_only_fields = ["date_created", "last_modified"]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Item name is required")
        return value


# ============ Receipts ============
class ReceiptLineInSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True)
    price = serializers.CharField()
    quantity = serializers.CharField()


class CreateReceiptSerializer(serializers.Serializer):
    cashier_name = serializers.CharField(allow_blank=True)
    manager_name = serializers.CharField(required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(choices=[c for c, _ in Receipt.PAYMENT_METHODS],
                                             default=Receipt.CASH)
    transaction_id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    items = ReceiptLineInSerializer(many=True)


class ReceiptItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = ReceiptItem
        fields = ["name", "price", "quantity", "cost_price", "line_total"]


class ReceiptSerializer(serializers.ModelSerializer):
    items = ReceiptItemSerializer(many=True, read_only=True)
    print_url = serializers.SerializerMethodField()

    class Meta:
        model = Receipt
        fields = [
            "id", "shop", "shop_details", "cashier_name", "manager_name",
            "payment_method", "transaction_id", "total_amount", "timestamp",
            "items", "print_url",
        ]
        read_only_fields = fields

    def get_print_url(self, obj):
        return f"/api/receipts/{obj.id}/html"


# ============ Staff ============
class EmployeeSerializer(serializers.ModelSerializer):
    salary = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)

    class Meta:
        model = Employee
        fields = [
            "id", "name", "position", "contact", "email", "address",
            "joining_date", "salary", "date_created", "last_modified",
        ]
        read_only_fields = ["date_created", "last_modified"]


class AttendanceLineSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField(min_value=1)
    status = serializers.ChoiceField(choices=[c for c, _ in AttendanceRecord.STATUS_CHOICES],
                                     default=AttendanceRecord.PRESENT)
    check_in = serializers.CharField(required=False, allow_blank=True, default="")
    check_out = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class MarkAttendanceSerializer(serializers.Serializer):
    date = serializers.DateField()
    records = AttendanceLineSerializer(many=True)


class AttendanceRecordSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source="employee.name", read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = [
            "id", "employee", "employee_name", "date", "status",
            "check_in", "check_out", "notes",
        ]
        read_only_fields = fields
