"""
Integrations layer.
This package contains all code used to communicate with external systems such as:
- Wholesale data suppliers (DataXpress, Hubnet, plus an in-process sandbox)
- The payment gateway webhook (Paystack)

Key rule:
- API endpoints MUST NOT call supplier APIs directly.
- Endpoints call the FulfillmentService / SupplierRouter (under src/integrations/policy),
  which dispatch to supplier clients (under src/integrations/clients).

Switching suppliers:
- The active supplier is a persisted setting changed through the admin API; adapters
  are built in ONE place (src/api/main.py).
"""

from .contracts.interfaces import (
    BalanceResult,
    CostPriceResult,
    OrderStatusResult,
    PurchaseResult,
    SupplierAdapter,
    SupplierId,
)
from .contracts.orders import (
    FulfillmentStatus,
    InvalidTransitionError,
    PaymentStatus,
    compute_order_totals,
)
from .contracts.packages import validate_data_amount
from .contracts.payments import PaymentWebhookEvent, parse_webhook_event, verify_webhook_signature

__all__ = [
    # interfaces
    "BalanceResult", "CostPriceResult", "OrderStatusResult", "PurchaseResult",
    "SupplierAdapter", "SupplierId",
    # orders
    "FulfillmentStatus", "InvalidTransitionError", "PaymentStatus", "compute_order_totals",
    # packages
    "validate_data_amount",
    # payments
    "PaymentWebhookEvent", "parse_webhook_event", "verify_webhook_signature",
]
