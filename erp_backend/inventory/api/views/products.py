"""
PATH: inventory/api/views/products.py

PRODUCT CATALOG API

GET   /api/inventory/products/?search=&include_inactive=
POST  /api/inventory/products/
GET   /api/inventory/products/<id>/
PATCH /api/inventory/products/<id>/
"""

from __future__ import annotations

from django.db.models import Sum
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from core.query_params import parse_bool_param
from inventory.api.serializers import ProductCreateSerializer, ProductSerializer, ProductUpdateSerializer
from inventory.services import catalog_service
from inventory.services.stock_move_service import get_stock_balance
from tenants.api.views import TenantAPIView
from tenants.models import Module


class ProductListCreateView(TenantAPIView):
    required_module = Module.INVENTORY
    serializer_class = ProductCreateSerializer

    @extend_schema(
        tags=["inventory"],
        parameters=[
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="include_inactive", type=bool, location=OpenApiParameter.QUERY, required=False),
        ],
        responses=ProductSerializer(many=True),
    )
    def get(self, request):
        search = (request.query_params.get("search") or "").strip() or None
        qs = catalog_service.list_products(
            tenant_id=self.tenant_id,
            search=search,
            include_inactive=parse_bool_param(request, "include_inactive"),
        ).annotate(on_hand=Sum("stock_balances__quantity_on_hand"))
        return Response(ProductSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=ProductCreateSerializer, responses={201: ProductSerializer})
    def post(self, request):
        s = ProductCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        product = catalog_service.create_product(tenant_id=self.tenant_id, **s.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


class ProductDetailView(TenantAPIView):
    required_module = Module.INVENTORY
    serializer_class = ProductUpdateSerializer

    def _render(self, product):
        product.on_hand = get_stock_balance(tenant_id=self.tenant_id, product_id=product.id)
        return ProductSerializer(product).data

    @extend_schema(tags=["inventory"], responses=ProductSerializer)
    def get(self, request, product_id):
        product = catalog_service.get_product(tenant_id=self.tenant_id, product_id=product_id)
        return Response(self._render(product), status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=ProductUpdateSerializer, responses=ProductSerializer)
    def patch(self, request, product_id):
        s = ProductUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        product = catalog_service.update_product(
            tenant_id=self.tenant_id, product_id=product_id, **s.validated_data
        )
        return Response(self._render(product), status=status.HTTP_200_OK)
