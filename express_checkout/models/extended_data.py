"""
Typed access to a transaction's extended data.

The framework stores per-transaction scratch data as a JSON object. The
Express Checkout flow spans two requests (before and after the buyer visits
PayPal), so everything it needs to resume lives here. Only the fields below
are known; reading or writing any other attribute raises AttributeError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from express_checkout.models.transaction import FinancialTransaction

T = TypeVar("T")


class _Field(Generic[T]):
    def __init__(self, key: str):
        self.key = key

    def __set_name__(self, owner: type, name: str) -> None:
        owner.FIELDS = owner.FIELDS | {name}

    def __get__(self, instance: Optional["ExtendedData"], owner: type) -> Any:
        if instance is None:
            return self
        return instance._data.get(self.key)

    def __set__(self, instance: "ExtendedData", value: Optional[T]) -> None:
        if value is None:
            instance._data.pop(self.key, None)
        else:
            instance._data[self.key] = value


class ExtendedData:
    """Accessor over ``FinancialTransaction.extended_data``."""

    __slots__ = ("_transaction",)

    FIELDS: frozenset = frozenset()

    express_checkout_token: _Field[str] = _Field("express_checkout_token")
    return_url: _Field[str] = _Field("return_url")
    cancel_url: _Field[str] = _Field("cancel_url")
    checkout_params: _Field[Dict[str, str]] = _Field("checkout_params")
    paypal_payer_id: _Field[str] = _Field("paypal_payer_id")
    authorization_id: _Field[str] = _Field("authorization_id")

    def __init__(self, transaction: "FinancialTransaction"):
        self._transaction = transaction

    @property
    def _data(self) -> Dict[str, Any]:
        # Attribute defaults only apply on flush, so detached transactions start with None
        if self._transaction.extended_data is None:
            self._transaction.extended_data = {}
        return self._transaction.extended_data

    def has(self, name: str) -> bool:
        if name not in self.FIELDS:
            raise AttributeError(f"unknown extended data field: {name}")
        return getattr(self, name) is not None

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.FIELDS) if self.has(name)}

    def __repr__(self) -> str:
        return f"ExtendedData({self.as_dict()!r})"
