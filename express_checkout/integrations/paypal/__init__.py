"""
PayPal NVP integration

Client, response envelope and status codes for the Express Checkout API.
"""

from .client import ExpressCheckoutClient
from .response import Response
from .statuses import (
    CheckoutStatus,
    CompleteType,
    PayerStatus,
    PaymentAction,
    PaymentStatus,
    PendingReason,
    RefundStatus,
)

__all__ = [
    "ExpressCheckoutClient",
    "Response",
    "CheckoutStatus",
    "CompleteType",
    "PayerStatus",
    "PaymentAction",
    "PaymentStatus",
    "PendingReason",
    "RefundStatus",
]
