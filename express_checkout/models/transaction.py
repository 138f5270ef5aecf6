from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, Enum as SAEnum, ForeignKey, Integer, Numeric, String
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, mapped_column, relationship

from express_checkout.models.base import Base, TimestampMixin
from express_checkout.models.extended_data import ExtendedData

if TYPE_CHECKING:
    from express_checkout.models.payment import Payment


class TransactionType(str, Enum):
    APPROVE = "approve"
    APPROVE_AND_DEPOSIT = "approve_and_deposit"
    DEPOSIT = "deposit"
    CREDIT = "credit"
    REVERSE_APPROVAL = "reverse_approval"
    REVERSE_DEPOSIT = "reverse_deposit"


class TransactionState(str, Enum):
    NEW = "new"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class FinancialTransaction(TimestampMixin, Base):
    __tablename__ = "financial_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payment_id: Mapped[int | None] = mapped_column(
        ForeignKey("payments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    transaction_type: Mapped[TransactionType] = mapped_column(SAEnum(TransactionType), nullable=False)
    requested_amount: Mapped[Decimal] = mapped_column(Numeric(precision=14, scale=5), nullable=False)
    processed_amount: Mapped[Decimal | None] = mapped_column(Numeric(precision=14, scale=5), nullable=True)
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    response_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[TransactionState] = mapped_column(
        SAEnum(TransactionState), nullable=False, default=TransactionState.NEW
    )
    reason_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    extended_data: Mapped[dict[str, Any] | None] = mapped_column(
        MutableDict.as_mutable(JSON), nullable=True, default=dict
    )

    payment: Mapped[Optional["Payment"]] = relationship(back_populates="transactions")

    @property
    def data(self) -> ExtendedData:
        return ExtendedData(self)

    def __repr__(self) -> str:
        return (
            f"FinancialTransaction(id={self.id!r}, type={self.transaction_type!r}, "
            f"requested={self.requested_amount!r}, reference={self.reference_number!r}, state={self.state!r})"
        )
