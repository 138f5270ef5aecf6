from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from express_checkout.models.base import Base, TimestampMixin
from express_checkout.models.transaction import FinancialTransaction, TransactionType

APPROVE_TYPES = (TransactionType.APPROVE, TransactionType.APPROVE_AND_DEPOSIT)


class PaymentInstruction(TimestampMixin, Base):
    __tablename__ = "payment_instructions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=14, scale=5), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    payment_system_name: Mapped[str] = mapped_column(String(100), nullable=False)

    payments: Mapped[list["Payment"]] = relationship(
        back_populates="payment_instruction", cascade="all, delete-orphan"
    )


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payment_instruction_id: Mapped[int] = mapped_column(
        ForeignKey("payment_instructions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_amount: Mapped[Decimal] = mapped_column(Numeric(precision=14, scale=5), nullable=False)
    approved_amount: Mapped[Decimal] = mapped_column(Numeric(precision=14, scale=5), nullable=False, default=Decimal("0"))
    deposited_amount: Mapped[Decimal] = mapped_column(Numeric(precision=14, scale=5), nullable=False, default=Decimal("0"))

    payment_instruction: Mapped[PaymentInstruction] = relationship(back_populates="payments")
    transactions: Mapped[list[FinancialTransaction]] = relationship(
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by=FinancialTransaction.id,
    )

    @property
    def currency(self) -> str:
        return self.payment_instruction.currency

    def get_approve_transaction(self) -> FinancialTransaction | None:
        """Latest approve or approve-and-deposit transaction, if any."""
        for transaction in reversed(self.transactions):
            if transaction.transaction_type in APPROVE_TYPES:
                return transaction
        return None

    def get_deposit_transactions(self) -> list[FinancialTransaction]:
        return [t for t in self.transactions if t.transaction_type is TransactionType.DEPOSIT]
