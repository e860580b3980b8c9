# purchases/api/views.py

"""
PROCURE-TO-PAY API (module PURCHASE)

Lists / detail come from read-only router viewsets; every state change is
an explicit POST action that delegates to purchases/services.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from core.query_params import parse_bool_param
from purchases.api.serializers import (
    BillFromOrderSerializer,
    ConvertRequisitionSerializer,
    GoodsReceiptCreateSerializer,
    GoodsReceiptSerializer,
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    RequisitionCreateSerializer,
    RequisitionSerializer,
    VendorBillCreateSerializer,
    VendorBillSerializer,
    VendorPaymentCreateSerializer,
    VendorPaymentSerializer,
    VendorSerializer,
)
from purchases.models import GoodsReceipt, PurchaseOrder, Requisition, VendorBill
from purchases.services import (
    billing_service,
    payment_service,
    purchase_order_service,
    receiving_service,
    requisition_service,
    vendor_service,
)
from tenants.api.views import TenantAPIView, TenantReadOnlyViewSet
from tenants.models import Module


class PurchasesAPIView(TenantAPIView):
    required_module = Module.PURCHASE


# ============================================================
# VENDORS
# ============================================================


class VendorListCreateView(PurchasesAPIView):
    serializer_class = VendorSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[
            OpenApiParameter(name="include_inactive", type=bool, location=OpenApiParameter.QUERY, required=False)
        ],
        responses=VendorSerializer(many=True),
    )
    def get(self, request):
        qs = vendor_service.list_vendors(
            tenant_id=self.tenant_id,
            include_inactive=parse_bool_param(request, "include_inactive"),
        )
        return Response(VendorSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=VendorSerializer, responses={201: VendorSerializer})
    def post(self, request):
        s = VendorSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vendor = vendor_service.create_vendor(tenant_id=self.tenant_id, **s.validated_data)
        return Response(VendorSerializer(vendor).data, status=status.HTTP_201_CREATED)


# ============================================================
# REQUISITIONS
# ============================================================


class RequisitionCreateView(PurchasesAPIView):
    serializer_class = RequisitionCreateSerializer

    @extend_schema(tags=["purchases"], request=RequisitionCreateSerializer, responses={201: RequisitionSerializer})
    def post(self, request):
        s = RequisitionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        requisition = requisition_service.create_requisition(
            tenant_id=self.tenant_id,
            lines=[dict(line) for line in data["lines"]],
            date=data.get("date"),
            notes=data.get("notes", ""),
            tax_rate=data.get("tax_rate", 0),
            requested_by=request.user,
        )
        requisition = requisition_service.get_requisition(tenant_id=self.tenant_id, requisition_id=requisition.id)
        return Response(RequisitionSerializer(requisition).data, status=status.HTTP_201_CREATED)


class RequisitionActionView(PurchasesAPIView):
    """POST requisitions/<id>/{submit,approve,reject,cancel}/"""

    handlers = {
        "submit": requisition_service.submit_requisition,
        "approve": requisition_service.approve_requisition,
        "reject": requisition_service.reject_requisition,
        "cancel": requisition_service.cancel_requisition,
    }
    action_name: str = ""

    @extend_schema(tags=["purchases"], request=None, responses=RequisitionSerializer)
    def post(self, request, requisition_id):
        self.handlers[self.action_name](tenant_id=self.tenant_id, requisition_id=requisition_id)
        requisition = requisition_service.get_requisition(tenant_id=self.tenant_id, requisition_id=requisition_id)
        return Response(RequisitionSerializer(requisition).data, status=status.HTTP_200_OK)


class RequisitionConvertView(PurchasesAPIView):
    serializer_class = ConvertRequisitionSerializer

    @extend_schema(
        tags=["purchases"],
        request=ConvertRequisitionSerializer,
        responses={201: PurchaseOrderSerializer},
    )
    def post(self, request, requisition_id):
        s = ConvertRequisitionSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        order = requisition_service.convert_requisition_to_po(
            tenant_id=self.tenant_id,
            requisition_id=requisition_id,
            vendor_id=s.validated_data.get("vendor_id"),
        )
        order = purchase_order_service.get_purchase_order(tenant_id=self.tenant_id, purchase_order_id=order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["purchases"])
class RequisitionViewSet(TenantReadOnlyViewSet):
    required_module = Module.PURCHASE
    serializer_class = RequisitionSerializer
    queryset = Requisition.objects.prefetch_related("lines__product").order_by("-date", "-created_at")
    filterset_fields = ["status", "date"]


# ============================================================
# PURCHASE ORDERS
# ============================================================


class PurchaseOrderCreateView(PurchasesAPIView):
    serializer_class = PurchaseOrderCreateSerializer

    @extend_schema(tags=["purchases"], request=PurchaseOrderCreateSerializer, responses={201: PurchaseOrderSerializer})
    def post(self, request):
        s = PurchaseOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        order = purchase_order_service.create_purchase_order(
            tenant_id=self.tenant_id,
            lines=[dict(line) for line in data["lines"]],
            vendor_id=data.get("vendor_id"),
            date=data.get("date"),
            expected_date=data.get("expected_date"),
            notes=data.get("notes", ""),
            tax_rate=data.get("tax_rate", 0),
        )
        order = purchase_order_service.get_purchase_order(tenant_id=self.tenant_id, purchase_order_id=order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class PurchaseOrderActionView(PurchasesAPIView):
    """POST purchase-orders/<id>/{confirm,cancel}/"""

    handlers = {
        "confirm": purchase_order_service.confirm_purchase_order,
        "cancel": purchase_order_service.cancel_purchase_order,
    }
    action_name: str = ""

    @extend_schema(tags=["purchases"], request=None, responses=PurchaseOrderSerializer)
    def post(self, request, purchase_order_id):
        self.handlers[self.action_name](tenant_id=self.tenant_id, purchase_order_id=purchase_order_id)
        order = purchase_order_service.get_purchase_order(tenant_id=self.tenant_id, purchase_order_id=purchase_order_id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_200_OK)


class PurchaseOrderReceiveView(PurchasesAPIView):
    serializer_class = GoodsReceiptCreateSerializer

    @extend_schema(tags=["purchases"], responses=GoodsReceiptSerializer(many=True))
    def get(self, request, purchase_order_id):
        purchase_order_service.get_purchase_order(tenant_id=self.tenant_id, purchase_order_id=purchase_order_id)
        qs = receiving_service.list_goods_receipts(tenant_id=self.tenant_id, purchase_order_id=purchase_order_id)
        return Response(GoodsReceiptSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=GoodsReceiptCreateSerializer, responses={201: GoodsReceiptSerializer})
    def post(self, request, purchase_order_id):
        s = GoodsReceiptCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        lines = data.get("lines")
        receipt = receiving_service.create_goods_receipt(
            tenant_id=self.tenant_id,
            purchase_order_id=purchase_order_id,
            lines=[dict(line) for line in lines] if lines is not None else None,
            date=data.get("date"),
            notes=data.get("notes", ""),
        )
        return Response(GoodsReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)


class PurchaseOrderBillView(PurchasesAPIView):
    serializer_class = BillFromOrderSerializer

    @extend_schema(tags=["purchases"], request=BillFromOrderSerializer, responses={201: VendorBillSerializer})
    def post(self, request, purchase_order_id):
        s = BillFromOrderSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        bill = billing_service.create_bill_from_po(
            tenant_id=self.tenant_id,
            purchase_order_id=purchase_order_id,
            date=s.validated_data.get("date"),
            due_date=s.validated_data.get("due_date"),
        )
        bill = billing_service.get_vendor_bill(tenant_id=self.tenant_id, bill_id=bill.id)
        return Response(VendorBillSerializer(bill).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["purchases"])
class PurchaseOrderViewSet(TenantReadOnlyViewSet):
    required_module = Module.PURCHASE
    serializer_class = PurchaseOrderSerializer
    queryset = (
        PurchaseOrder.objects.select_related("vendor")
        .prefetch_related("lines__product")
        .order_by("-date", "-created_at")
    )
    filterset_fields = ["status", "vendor", "date"]


@extend_schema(tags=["purchases"])
class GoodsReceiptViewSet(TenantReadOnlyViewSet):
    required_module = Module.PURCHASE
    serializer_class = GoodsReceiptSerializer
    queryset = GoodsReceipt.objects.prefetch_related("lines").order_by("-date", "-created_at")
    filterset_fields = ["purchase_order", "date"]


# ============================================================
# VENDOR BILLS
# ============================================================


class VendorBillCreateView(PurchasesAPIView):
    serializer_class = VendorBillCreateSerializer

    @extend_schema(tags=["purchases"], request=VendorBillCreateSerializer, responses={201: VendorBillSerializer})
    def post(self, request):
        s = VendorBillCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        bill = billing_service.create_vendor_bill(
            tenant_id=self.tenant_id,
            lines=[dict(line) for line in data["lines"]],
            vendor_id=data.get("vendor_id"),
            date=data.get("date"),
            due_date=data.get("due_date"),
            tax_rate=data.get("tax_rate", 0),
            notes=data.get("notes", ""),
        )
        bill = billing_service.get_vendor_bill(tenant_id=self.tenant_id, bill_id=bill.id)
        return Response(VendorBillSerializer(bill).data, status=status.HTTP_201_CREATED)


class VendorBillActionView(PurchasesAPIView):
    """POST bills/<id>/{post,cancel}/"""

    handlers = {
        "post": billing_service.post_vendor_bill,
        "cancel": billing_service.cancel_vendor_bill,
    }
    action_name: str = ""

    @extend_schema(tags=["purchases"], request=None, responses=VendorBillSerializer)
    def post(self, request, bill_id):
        self.handlers[self.action_name](tenant_id=self.tenant_id, bill_id=bill_id)
        bill = billing_service.get_vendor_bill(tenant_id=self.tenant_id, bill_id=bill_id)
        return Response(VendorBillSerializer(bill).data, status=status.HTTP_200_OK)


class VendorPaymentListCreateView(PurchasesAPIView):
    serializer_class = VendorPaymentCreateSerializer

    @extend_schema(tags=["purchases"], responses=VendorPaymentSerializer(many=True))
    def get(self, request, bill_id):
        billing_service.get_vendor_bill(tenant_id=self.tenant_id, bill_id=bill_id)
        qs = payment_service.list_vendor_payments(tenant_id=self.tenant_id, bill_id=bill_id)
        return Response(VendorPaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=VendorPaymentCreateSerializer, responses={201: VendorPaymentSerializer})
    def post(self, request, bill_id):
        s = VendorPaymentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        payment = payment_service.record_vendor_payment(
            tenant_id=self.tenant_id,
            bill_id=bill_id,
            amount=data["amount"],
            method=data["method"],
            date=data.get("date"),
            memo=data.get("memo", ""),
        )
        return Response(VendorPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["purchases"])
class VendorBillViewSet(TenantReadOnlyViewSet):
    required_module = Module.PURCHASE
    serializer_class = VendorBillSerializer
    queryset = (
        VendorBill.objects.select_related("vendor")
        .prefetch_related("lines__product", "payments")
        .order_by("-date", "-created_at")
    )
    filterset_fields = ["status", "vendor", "purchase_order", "date", "due_date"]
