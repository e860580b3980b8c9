"""
PATH: inventory/api/views/stock.py

STOCK LEDGER API

POST /api/inventory/stock-moves/create/           draft (or {"post": true})
POST /api/inventory/stock-moves/<id>/post/        apply to balances (once)
GET  /api/inventory/stock-moves/                  read-only (router)
GET  /api/inventory/stock-moves/<id>/
GET  /api/inventory/stock-balances/?product_id=&location_id=&include_zero=
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from core.query_params import parse_bool_param, parse_uuid_param
from inventory.api.serializers import StockBalanceSerializer, StockMoveCreateSerializer, StockMoveSerializer
from inventory.models import StockMove
from inventory.services import stock_move_service
from tenants.api.views import TenantAPIView, TenantReadOnlyViewSet
from tenants.models import Module


class StockMoveCreateView(TenantAPIView):
    required_module = Module.INVENTORY
    serializer_class = StockMoveCreateSerializer

    @extend_schema(tags=["inventory"], request=StockMoveCreateSerializer, responses={201: StockMoveSerializer})
    def post(self, request):
        s = StockMoveCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        move = stock_move_service.create_stock_move(
            tenant_id=self.tenant_id,
            move_type=data["move_type"],
            lines=[dict(line) for line in data["lines"]],
            date=data.get("date"),
            memo=data.get("memo", ""),
        )
        if data.get("post"):
            move = stock_move_service.post_stock_move(tenant_id=self.tenant_id, stock_move_id=move.id)

        move = stock_move_service.get_stock_move(tenant_id=self.tenant_id, stock_move_id=move.id)
        return Response(StockMoveSerializer(move).data, status=status.HTTP_201_CREATED)


class StockMovePostView(TenantAPIView):
    required_module = Module.INVENTORY

    @extend_schema(tags=["inventory"], request=None, responses=StockMoveSerializer)
    def post(self, request, stock_move_id):
        stock_move_service.post_stock_move(tenant_id=self.tenant_id, stock_move_id=stock_move_id)
        move = stock_move_service.get_stock_move(tenant_id=self.tenant_id, stock_move_id=stock_move_id)
        return Response(StockMoveSerializer(move).data, status=status.HTTP_200_OK)


@extend_schema(tags=["inventory"])
class StockMoveViewSet(TenantReadOnlyViewSet):
    """
    Filtering (django-filter):
    - ?move_type=RECEIPT
    - ?is_posted=true
    - ?date=<YYYY-MM-DD>
    """

    required_module = Module.INVENTORY
    serializer_class = StockMoveSerializer
    queryset = StockMove.objects.prefetch_related("lines__product").order_by("-date", "-created_at")
    filterset_fields = ["move_type", "is_posted", "date", "source_reference"]


class StockBalanceListView(TenantAPIView):
    required_module = Module.INVENTORY

    @extend_schema(
        tags=["inventory"],
        parameters=[
            OpenApiParameter(name="product_id", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="location_id", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="include_zero", type=bool, location=OpenApiParameter.QUERY, required=False),
        ],
        responses=StockBalanceSerializer(many=True),
    )
    def get(self, request):
        qs = stock_move_service.list_stock_balances(
            tenant_id=self.tenant_id,
            product_id=parse_uuid_param(request, "product_id"),
            location_id=parse_uuid_param(request, "location_id"),
            include_zero=parse_bool_param(request, "include_zero"),
        )
        return Response(StockBalanceSerializer(qs, many=True).data, status=status.HTTP_200_OK)
