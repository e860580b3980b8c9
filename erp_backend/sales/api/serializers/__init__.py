from sales.api.serializers.crm import (
    CustomerSerializer,
    LeadConvertSerializer,
    LeadCreateSerializer,
    LeadSerializer,
    LeadStatusSerializer,
    PipelineSerializer,
)
from sales.api.serializers.documents import (
    CreditNoteCreateSerializer,
    CreditNoteSerializer,
    CustomerPaymentCreateSerializer,
    CustomerPaymentSerializer,
    ExpireQuotationsSerializer,
    InvoiceFromOrderSerializer,
    QuotationCreateSerializer,
    QuotationSerializer,
    SalesInvoiceCreateSerializer,
    SalesInvoiceSerializer,
    SalesOrderCreateSerializer,
    SalesOrderSerializer,
)

__all__ = [
    "CustomerSerializer",
    "LeadSerializer",
    "LeadCreateSerializer",
    "LeadStatusSerializer",
    "LeadConvertSerializer",
    "PipelineSerializer",
    "QuotationSerializer",
    "QuotationCreateSerializer",
    "ExpireQuotationsSerializer",
    "SalesOrderSerializer",
    "SalesOrderCreateSerializer",
    "SalesInvoiceSerializer",
    "SalesInvoiceCreateSerializer",
    "InvoiceFromOrderSerializer",
    "CustomerPaymentSerializer",
    "CustomerPaymentCreateSerializer",
    "CreditNoteSerializer",
    "CreditNoteCreateSerializer",
]
