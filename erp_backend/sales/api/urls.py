# sales/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.views.crm import (
    CustomerListCreateView,
    LeadConvertView,
    LeadListCreateView,
    LeadPipelineView,
    LeadStatusView,
)
from sales.api.views.invoices import (
    CreditNoteActionView,
    CreditNoteCreateView,
    CreditNoteViewSet,
    CustomerPaymentListCreateView,
    SalesInvoiceActionView,
    SalesInvoiceCreateView,
    SalesInvoiceViewSet,
)
from sales.api.views.orders import (
    SalesOrderActionView,
    SalesOrderCreateView,
    SalesOrderInvoiceView,
    SalesOrderViewSet,
)
from sales.api.views.quotations import (
    QuotationActionView,
    QuotationConvertView,
    QuotationCreateView,
    QuotationExpireView,
    QuotationViewSet,
)

router = DefaultRouter()
router.register("quotations", QuotationViewSet, basename="quotation")
router.register("orders", SalesOrderViewSet, basename="sales-order")
router.register("invoices", SalesInvoiceViewSet, basename="sales-invoice")
router.register("credit-notes", CreditNoteViewSet, basename="credit-note")


def _actions(prefix: str, id_param: str, view, name_prefix: str):
    return [
        path(f"{prefix}/<uuid:{id_param}>/{name}/", view.as_view(action_name=name), name=f"{name_prefix}-{name}")
        for name in view.handlers
    ]


urlpatterns = [
    # crm
    path("customers/", CustomerListCreateView.as_view(), name="sales-customers"),
    path("leads/", LeadListCreateView.as_view(), name="sales-leads"),
    path("leads/pipeline/", LeadPipelineView.as_view(), name="sales-lead-pipeline"),
    path("leads/<uuid:lead_id>/status/", LeadStatusView.as_view(), name="sales-lead-status"),
    path("leads/<uuid:lead_id>/convert/", LeadConvertView.as_view(), name="sales-lead-convert"),
    # quotations
    path("quotations/create/", QuotationCreateView.as_view(), name="quotation-create"),
    path("quotations/expire/", QuotationExpireView.as_view(), name="quotation-expire"),
    *_actions("quotations", "quotation_id", QuotationActionView, "quotation"),
    path("quotations/<uuid:quotation_id>/convert/", QuotationConvertView.as_view(), name="quotation-convert"),
    # orders
    path("orders/create/", SalesOrderCreateView.as_view(), name="sales-order-create"),
    *_actions("orders", "sales_order_id", SalesOrderActionView, "sales-order"),
    path("orders/<uuid:sales_order_id>/invoice/", SalesOrderInvoiceView.as_view(), name="sales-order-invoice"),
    # invoices
    path("invoices/create/", SalesInvoiceCreateView.as_view(), name="sales-invoice-create"),
    *_actions("invoices", "invoice_id", SalesInvoiceActionView, "sales-invoice"),
    path("invoices/<uuid:invoice_id>/payments/", CustomerPaymentListCreateView.as_view(), name="sales-invoice-payments"),
    # credit notes
    path("credit-notes/create/", CreditNoteCreateView.as_view(), name="credit-note-create"),
    *_actions("credit-notes", "credit_note_id", CreditNoteActionView, "credit-note"),
    path("", include(router.urls)),
]
