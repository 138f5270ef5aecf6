from express_checkout.models.base import Base
from express_checkout.models.extended_data import ExtendedData
from express_checkout.models.payment import Payment, PaymentInstruction
from express_checkout.models.transaction import FinancialTransaction, TransactionState, TransactionType

__all__ = [
    "Base",
    "ExtendedData",
    "FinancialTransaction",
    "Payment",
    "PaymentInstruction",
    "TransactionState",
    "TransactionType",
]
