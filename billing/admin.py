from django.contrib import admin
from .models import AttendanceRecord, Employee, Receipt, ReceiptItem, Shop, StockItem


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ("id", "shop_name", "owner", "phone_number")
    search_fields = ("shop_name", "owner__email")


@admin.register(StockItem)
class StockItemAdmin(admin.ModelAdmin):
    list_display = ("id", "shop", "name", "sku", "category", "price", "cost_price", "quantity")
    search_fields = ("name", "sku", "category")
    list_filter = ("category",)


class ReceiptItemInline(admin.TabularInline):
    model = ReceiptItem
    extra = 0
    can_delete = False
    readonly_fields = ("name", "price", "quantity", "cost_price")


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "shop", "cashier_name", "payment_method", "total_amount", "timestamp")
    search_fields = ("transaction_id", "cashier_name")
    inlines = [ReceiptItemInline]

    def has_change_permission(self, request, obj=None):
        return False   # receipts are immutable


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("id", "shop", "name", "position", "contact", "joining_date")
    search_fields = ("name", "position")


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "status", "check_in", "check_out")
    list_filter = ("status", "date")
