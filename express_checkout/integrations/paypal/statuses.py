"""
Closed sets of PayPal status codes.

Values the gateway may send but that are not listed here resolve to
``UNKNOWN`` instead of raising, so callers can treat them explicitly.
"""

from enum import Enum


class GatewayEnum(str, Enum):
    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class PaymentAction(str, Enum):
    AUTHORIZATION = "Authorization"
    SALE = "Sale"


class CompleteType(str, Enum):
    COMPLETE = "Complete"
    NOT_COMPLETE = "NotComplete"


class CheckoutStatus(GatewayEnum):
    """CHECKOUTSTATUS of GetExpressCheckoutDetails."""
    NOT_INITIATED = "PaymentActionNotInitiated"
    IN_PROGRESS = "PaymentActionInProgress"
    FAILED = "PaymentActionFailed"
    COMPLETED = "PaymentActionCompleted"
    UNKNOWN = "Unknown"


class PayerStatus(GatewayEnum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    UNKNOWN = "Unknown"


class PaymentStatus(GatewayEnum):
    """PAYMENTSTATUS as returned by payment, capture and detail calls."""
    NONE = "None"
    CANCELED_REVERSAL = "Canceled-Reversal"
    COMPLETED = "Completed"
    COMPLETED_FUNDS_HELD = "Completed-Funds-Held"
    DENIED = "Denied"
    EXPIRED = "Expired"
    FAILED = "Failed"
    IN_PROGRESS = "In-Progress"
    PARTIALLY_REFUNDED = "Partially-Refunded"
    PENDING = "Pending"
    PROCESSED = "Processed"
    REFUNDED = "Refunded"
    REVERSED = "Reversed"
    VOIDED = "Voided"
    UNKNOWN = "Unknown"


class PendingReason(GatewayEnum):
    NONE = "none"
    ADDRESS = "address"
    AUTHORIZATION = "authorization"
    ECHECK = "echeck"
    INTL = "intl"
    MULTI_CURRENCY = "multi-currency"
    ORDER = "order"
    PAYMENT_REVIEW = "paymentreview"
    REGULATORY_REVIEW = "regulatoryreview"
    UNILATERAL = "unilateral"
    VERIFY = "verify"
    OTHER = "other"
    UNKNOWN = "Unknown"


class RefundStatus(GatewayEnum):
    """REFUNDSTATUS of RefundTransaction."""
    INSTANT = "instant"
    DELAYED = "delayed"
    NONE = "none"
    UNKNOWN = "Unknown"
