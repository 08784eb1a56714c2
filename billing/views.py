# billing/views.py
# ============================================================
# Imports
# ============================================================
import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.http import Http404, HttpResponse
from django.shortcuts import get_object_or_404
from django.template.loader import render_to_string
from django.utils.dateparse import parse_date

from rest_framework import filters, viewsets, mixins, permissions, status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .analytics import get_sales_and_profit, normalize_period
from .errors import BillingError, InventoryError, RecordNotFound, RecordStoreError
from .models import Employee, Receipt, Shop
from .serializers import (
    AttendanceRecordSerializer,
    CreateReceiptSerializer,
    EmployeeSerializer,
    LoginSerializer,
    MarkAttendanceSerializer,
    ReceiptSerializer,
    RegisterSerializer,
    ShopSerializer,
    ShopSettingsSerializer,
    StockItemSerializer,
)
from .store import OrmRecordStore

logger = logging.getLogger(__name__)

ANALYTICS_FAILED = "Failed to load analytics data. Please try again later."


def _shop(request) -> Shop:
    """The shop owned by the authenticated user; every query is scoped to it."""
    shop = Shop.objects.filter(owner=request.user).first()
    if shop is None:
        raise Http404("No shop registered for this account.")
    return shop


def _error(exc: BillingError):
    body = {"detail": str(exc)}
    if isinstance(exc, InventoryError):
        body["invalid_items"] = exc.invalid_items
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


# ============================================================
# Auth
# ============================================================
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def register(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        shop, token = services.register_shop(**s.validated_data)
    except BillingError as e:
        return _error(e)
    return Response({"token": token.key, "shop": ShopSerializer(shop).data}, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def login(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data["email"].strip().lower()
    user = authenticate(request, username=email, password=s.validated_data["password"])
    if user is None:
        return Response({"detail": "Invalid email or password."}, status=status.HTTP_400_BAD_REQUEST)
    token, _ = Token.objects.get_or_create(user=user)
    return Response({"token": token.key})


@api_view(["POST"])
def logout(request):
    Token.objects.filter(user=request.user).delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# ============================================================
# Shop settings & dashboard
# ============================================================
class ShopView(APIView):

    def get(self, request):
        return Response(ShopSerializer(_shop(request)).data)

    def patch(self, request):
        shop = _shop(request)
        s = ShopSettingsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            shop = services.update_shop_settings(shop, **s.validated_data)
        except BillingError as e:
            return _error(e)
        return Response(ShopSerializer(shop).data)

    put = patch


@api_view(["GET"])
def dashboard(request):
    return Response(services.dashboard_summary(_shop(request)))


# ============================================================
# StockItemViewSet
# ============================================================
class StockItemViewSet(viewsets.ModelViewSet):
    """
    /api/stock/
      - q=rice          # name / description / category
      - category=grains
    """
    serializer_class = StockItemSerializer
    filter_backends = []

    def get_queryset(self):
        params = self.request.query_params
        return services.get_shop_stock(
            _shop(self.request),
            q=params.get("q", ""),
            category=params.get("category", ""),
        )

    def perform_create(self, serializer):
        serializer.instance = services.add_stock_item(_shop(self.request), **serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_stock_item(serializer.instance, **serializer.validated_data)

    def perform_destroy(self, instance):
        services.delete_stock_item(instance)

    def handle_exception(self, exc):
        if isinstance(exc, BillingError):
            return _error(exc)
        return super().handle_exception(exc)

    @action(detail=False, methods=["GET"], url_path="categories")
    def categories(self, request):
        return Response({"categories": services.stock_categories(_shop(request))})


# ============================================================
# Receipts
# ============================================================
class ReceiptViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Receipts are created once and never edited.

    /api/receipts/?q=TXN-&date=2024-05-01&ordering=-total_amount
    """
    serializer_class = ReceiptSerializer
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["timestamp", "total_amount"]
    ordering = ["-timestamp", "-id"]

    def get_queryset(self):
        params = self.request.query_params
        on_date = None
        if params.get("date"):
            try:
                on_date = parse_date(params["date"])
            except ValueError:
                on_date = None
        return services.search_receipts(_shop(self.request), q=params.get("q", ""), on_date=on_date)

    def create(self, request):
        s = CreateReceiptSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        try:
            receipt = services.create_receipt(
                _shop(request),
                cashier_name=data["cashier_name"],
                manager_name=data.get("manager_name", ""),
                payment_method=data["payment_method"],
                transaction_id=data.get("transaction_id"),
                items=data["items"],
            )
        except BillingError as e:
            return _error(e)
        return Response(ReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def receipt_html(request, pk):
    """
    GET /api/receipts/<id>/html  -> printable receipt page
    """
    receipt = get_object_or_404(
        Receipt.objects.prefetch_related("items"), pk=pk, shop=_shop(request)
    )
    html = render_to_string("billing/receipt.html", {"receipt": receipt, "items": receipt.items.all()})
    return HttpResponse(html)


# ============================================================
# Employees & attendance
# ============================================================
class EmployeeViewSet(viewsets.ModelViewSet):
    serializer_class = EmployeeSerializer
    filter_backends = []

    def get_queryset(self):
        return Employee.objects.filter(shop=_shop(self.request)).order_by("name")

    def perform_create(self, serializer):
        serializer.save(shop=_shop(self.request))


class AttendanceView(APIView):
    """
    GET  /api/attendance/?date=2024-05-01&employee=3
    POST /api/attendance/  {date, records: [{employee_id, status, check_in, check_out, notes}]}
    """

    def get(self, request):
        shop = _shop(request)
        on_date = None
        if request.GET.get("date"):
            try:
                on_date = parse_date(request.GET["date"])
            except ValueError:
                return Response({"detail": "invalid date"}, status=400)
        employee = request.GET.get("employee")
        employee_id = int(employee) if employee and employee.isdigit() else None
        rows = services.attendance_for(shop, on_date=on_date, employee_id=employee_id)
        return Response({"items": AttendanceRecordSerializer(rows, many=True).data})

    def post(self, request):
        s = MarkAttendanceSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            rows = services.mark_attendance(_shop(request), s.validated_data["date"], s.validated_data["records"])
        except BillingError as e:
            return _error(e)
        return Response({"items": AttendanceRecordSerializer(rows, many=True).data}, status=201)


# ============================================================
# Sales analytics
# ============================================================
@api_view(["GET"])
def sales_analytics(request):
    """
    GET /api/analytics/sales/?period=daily|monthly|yearly&date=2024-05-01
    An unusable date falls back to today.
    """
    shop = _shop(request)
    period = normalize_period(request.GET.get("period"))
    try:
        totals = get_sales_and_profit(OrmRecordStore(), shop.id, period, request.GET.get("date"))
    except RecordNotFound:
        logger.warning("analytics: shop record missing", extra={"shop_id": shop.id})
        return Response({"detail": ANALYTICS_FAILED}, status=status.HTTP_404_NOT_FOUND)
    except RecordStoreError:
        logger.warning("analytics: record store unavailable", extra={"shop_id": shop.id})
        return Response({"detail": ANALYTICS_FAILED}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response({"currency": settings.DEFAULT_CURRENCY, **totals.as_dict()})
