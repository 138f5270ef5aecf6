"""
Shared test configuration and fixtures for the Express Checkout test suite.
"""

from decimal import Decimal
from typing import Any, Callable, Dict
from unittest.mock import Mock

import pytest

from express_checkout.core.config import clear_settings_cache
from express_checkout.integrations.paypal.client import ExpressCheckoutClient
from express_checkout.integrations.paypal.response import Response
from express_checkout.models import FinancialTransaction, Payment, PaymentInstruction, TransactionType
from express_checkout.plugins.express_checkout import PAYMENT_SYSTEM_NAME, ExpressCheckoutPlugin

RETURN_URL = "https://shop.example.com/checkout/return"
CANCEL_URL = "https://shop.example.com/checkout/cancel"


def paypal_response(ack: str = "Success", **fields: Any) -> Response:
    """Build a canned NVP response."""
    return Response(body={"ACK": ack, **{key: str(value) for key, value in fields.items()}})


def paypal_failure(error_code: str = "10001", **fields: Any) -> Response:
    return paypal_response(
        "Failure",
        L_ERRORCODE0=error_code,
        L_SHORTMESSAGE0="Internal Error",
        L_LONGMESSAGE0="Internal Error",
        **fields,
    )


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch):
    """Keep PAYPAL_* variables of the developer environment out of the tests."""
    for name in ("USERNAME", "PASSWORD", "SIGNATURE", "SANDBOX", "API_VERSION", "TIMEOUT_SECONDS", "LOG_LEVEL", "RETURN_URL", "CANCEL_URL"):
        monkeypatch.delenv(f"PAYPAL_{name}", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_client():
    """NVP client whose API calls are mocked but whose formatting helpers are real."""
    real_client = ExpressCheckoutClient(username="user", password="pwd", signature="sig", sandbox=True)
    client = Mock(spec=ExpressCheckoutClient)
    client.convert_amount_to_paypal_format.side_effect = real_client.convert_amount_to_paypal_format
    client.get_authenticate_express_checkout_token_url.side_effect = (
        real_client.get_authenticate_express_checkout_token_url
    )
    return client


@pytest.fixture
def plugin(mock_client):
    return ExpressCheckoutPlugin(return_url=RETURN_URL, cancel_url=CANCEL_URL, client=mock_client)


@pytest.fixture
def make_payment() -> Callable[..., Payment]:
    def _make_payment(
        amount: str = "100.00",
        currency: str = "EUR",
        approved_amount: str = "0",
    ) -> Payment:
        instruction = PaymentInstruction(
            amount=Decimal(amount),
            currency=currency,
            payment_system_name=PAYMENT_SYSTEM_NAME,
        )
        return Payment(
            payment_instruction=instruction,
            target_amount=Decimal(amount),
            approved_amount=Decimal(approved_amount),
            deposited_amount=Decimal("0"),
        )

    return _make_payment


@pytest.fixture
def add_transaction() -> Callable[..., FinancialTransaction]:
    def _add_transaction(
        payment: Payment,
        transaction_type: TransactionType,
        requested_amount: str,
        extended_data: Dict[str, Any] | None = None,
        **attributes: Any,
    ) -> FinancialTransaction:
        transaction = FinancialTransaction(
            transaction_type=transaction_type,
            requested_amount=Decimal(requested_amount),
            extended_data=dict(extended_data or {}),
            **attributes,
        )
        payment.transactions.append(transaction)
        return transaction

    return _add_transaction


@pytest.fixture
def approved_payment(make_payment, add_transaction):
    """A payment whose 100.00 EUR authorization succeeded."""
    payment = make_payment(approved_amount="100.00")
    add_transaction(
        payment,
        TransactionType.APPROVE,
        "100.00",
        processed_amount=Decimal("100.00"),
        reference_number="AUTH-1",
        response_code="success",
        reason_code="none",
    )
    return payment
