"""
PROCURE-TO-PAY LIFECYCLE RULES

This module defines the ONLY allowed lifecycle transitions
for requisitions, purchase orders and vendor bills.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from core.lifecycle import build_lifecycle
from purchases.models import BillStatus, PurchaseOrderStatus, RequisitionStatus

# ============================================================
# REQUISITION
# ============================================================

REQUISITION = build_lifecycle(
    "Requisition",
    {
        RequisitionStatus.DRAFT: {RequisitionStatus.SUBMITTED, RequisitionStatus.CANCELLED},
        RequisitionStatus.SUBMITTED: {
            RequisitionStatus.APPROVED,
            RequisitionStatus.REJECTED,
            RequisitionStatus.CANCELLED,
        },
        RequisitionStatus.APPROVED: {RequisitionStatus.CANCELLED},
    },
    terminal={RequisitionStatus.REJECTED, RequisitionStatus.CANCELLED},
)

# ============================================================
# PURCHASE ORDER
# ============================================================

# CONFIRMED -> BILLED is only legal in BILL recognition mode;
# billing_service checks the mode.
PURCHASE_ORDER = build_lifecycle(
    "Purchase order",
    {
        PurchaseOrderStatus.DRAFT: {PurchaseOrderStatus.CONFIRMED, PurchaseOrderStatus.CANCELLED},
        PurchaseOrderStatus.CONFIRMED: {
            PurchaseOrderStatus.RECEIVED,
            PurchaseOrderStatus.BILLED,
            PurchaseOrderStatus.CANCELLED,
        },
        PurchaseOrderStatus.RECEIVED: {PurchaseOrderStatus.BILLED},
    },
    terminal={PurchaseOrderStatus.BILLED, PurchaseOrderStatus.CANCELLED},
)

# ============================================================
# VENDOR BILL
# ============================================================

VENDOR_BILL = build_lifecycle(
    "Vendor bill",
    {
        BillStatus.DRAFT: {BillStatus.POSTED, BillStatus.CANCELLED},
        BillStatus.POSTED: {BillStatus.PARTIALLY_PAID, BillStatus.PAID},
        BillStatus.PARTIALLY_PAID: {BillStatus.PARTIALLY_PAID, BillStatus.PAID},
    },
    terminal={BillStatus.PAID, BillStatus.CANCELLED},
)

PAYABLE_STATUSES = (BillStatus.POSTED, BillStatus.PARTIALLY_PAID)
