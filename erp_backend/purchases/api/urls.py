# purchases/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from purchases.api.views import (
    GoodsReceiptViewSet,
    PurchaseOrderActionView,
    PurchaseOrderBillView,
    PurchaseOrderCreateView,
    PurchaseOrderReceiveView,
    PurchaseOrderViewSet,
    RequisitionActionView,
    RequisitionConvertView,
    RequisitionCreateView,
    RequisitionViewSet,
    VendorBillActionView,
    VendorBillCreateView,
    VendorBillViewSet,
    VendorListCreateView,
    VendorPaymentListCreateView,
)

router = DefaultRouter()
router.register("requisitions", RequisitionViewSet, basename="requisition")
router.register("purchase-orders", PurchaseOrderViewSet, basename="purchase-order")
router.register("goods-receipts", GoodsReceiptViewSet, basename="goods-receipt")
router.register("bills", VendorBillViewSet, basename="vendor-bill")

urlpatterns = [
    path("vendors/", VendorListCreateView.as_view(), name="purchase-vendors"),
    # requisitions
    path("requisitions/create/", RequisitionCreateView.as_view(), name="requisition-create"),
    *[
        path(
            f"requisitions/<uuid:requisition_id>/{name}/",
            RequisitionActionView.as_view(action_name=name),
            name=f"requisition-{name}",
        )
        for name in RequisitionActionView.handlers
    ],
    path("requisitions/<uuid:requisition_id>/convert/", RequisitionConvertView.as_view(), name="requisition-convert"),
    # purchase orders
    path("purchase-orders/create/", PurchaseOrderCreateView.as_view(), name="purchase-order-create"),
    *[
        path(
            f"purchase-orders/<uuid:purchase_order_id>/{name}/",
            PurchaseOrderActionView.as_view(action_name=name),
            name=f"purchase-order-{name}",
        )
        for name in PurchaseOrderActionView.handlers
    ],
    path(
        "purchase-orders/<uuid:purchase_order_id>/receipts/",
        PurchaseOrderReceiveView.as_view(),
        name="purchase-order-receipts",
    ),
    path(
        "purchase-orders/<uuid:purchase_order_id>/bill/",
        PurchaseOrderBillView.as_view(),
        name="purchase-order-bill",
    ),
    # bills
    path("bills/create/", VendorBillCreateView.as_view(), name="vendor-bill-create"),
    *[
        path(
            f"bills/<uuid:bill_id>/{name}/",
            VendorBillActionView.as_view(action_name=name),
            name=f"vendor-bill-{name}",
        )
        for name in VendorBillActionView.handlers
    ],
    path("bills/<uuid:bill_id>/payments/", VendorPaymentListCreateView.as_view(), name="vendor-bill-payments"),
    path("", include(router.urls)),
]
