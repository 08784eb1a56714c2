# billing/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import StockItemViewSet, ReceiptViewSet, EmployeeViewSet, AttendanceView, ShopView, \
    register, login, logout, dashboard, receipt_html, sales_analytics

router = DefaultRouter()
router.register(r"stock", StockItemViewSet, basename="stock")            # /api/stock/
router.register(r"receipts", ReceiptViewSet, basename="receipt")         # /api/receipts/
router.register(r"employees", EmployeeViewSet, basename="employee")      # /api/employees/

urlpatterns = [
    path("auth/register/", register, name="register"),
    path("auth/login/", login, name="login"),
    path("auth/logout/", logout, name="logout"),
    path("shop/", ShopView.as_view(), name="shop"),
    path("dashboard/", dashboard, name="dashboard"),
    path("receipts/<int:pk>/html", receipt_html, name="receipt-html"),
    path("attendance/", AttendanceView.as_view(), name="attendance"),
    path("analytics/sales/", sales_analytics, name="sales-analytics"),
    path("", include(router.urls)),
]
