"""
PayPal NVP API Client

Thin transport for the Express Checkout API methods. Requests are
form-encoded POSTs carrying the API credentials; responses are parsed into
``Response`` envelopes. Transport failures are returned as unsuccessful
envelopes so that callers handle every failure through the same path.
"""

import logging
import threading
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from express_checkout.core.config import Settings, get_settings
from express_checkout.utils.number import Amount, to_decimal

from .response import Response

logger = logging.getLogger(__name__)

LIVE_API_ENDPOINT = "https://api-3t.paypal.com/nvp"
SANDBOX_API_ENDPOINT = "https://api-3t.sandbox.paypal.com/nvp"
LIVE_CHECKOUT_URL = "https://www.paypal.com/cgi-bin/webscr"
SANDBOX_CHECKOUT_URL = "https://www.sandbox.paypal.com/cgi-bin/webscr"


class ExpressCheckoutClient:
    """PayPal NVP client for the Express Checkout integration."""

    def __init__(
        self,
        username: str,
        password: str,
        signature: str,
        sandbox: bool = True,
        api_version: str = "65.1",
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the NVP client.

        Args:
            username: API username
            password: API password
            signature: API signature
            sandbox: Whether to use sandbox environment
            api_version: NVP API version sent with every call
            timeout_seconds: Request timeout
            http_client: Optional preconfigured httpx client
        """
        self.username = username
        self.password = password
        self.signature = signature
        self.sandbox = sandbox
        self.api_version = api_version
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "ExpressCheckoutClient":
        settings = settings or get_settings()
        return cls(
            username=settings.username,
            password=settings.password,
            signature=settings.signature,
            sandbox=settings.sandbox,
            api_version=settings.api_version,
            timeout_seconds=settings.timeout_seconds,
            **kwargs,
        )

    @property
    def http_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        with self._lock:
            if self._http_client is None or self._http_client.is_closed:
                self._http_client = httpx.Client(timeout=httpx.Timeout(self.timeout_seconds))
            return self._http_client

    def close(self) -> None:
        if self._http_client is not None and not self._http_client.is_closed:
            self._http_client.close()

    def __enter__(self) -> "ExpressCheckoutClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def api_endpoint(self) -> str:
        return SANDBOX_API_ENDPOINT if self.sandbox else LIVE_API_ENDPOINT

    def request_set_express_checkout(
        self,
        amount: Amount,
        return_url: str,
        cancel_url: str,
        optional_parameters: Optional[Dict[str, Any]] = None,
    ) -> Response:
        return self.send_api_request({
            **(optional_parameters or {}),
            "METHOD": "SetExpressCheckout",
            "PAYMENTREQUEST_0_AMT": self.convert_amount_to_paypal_format(amount),
            "RETURNURL": return_url,
            "CANCELURL": cancel_url,
        })

    def request_get_express_checkout_details(self, token: str) -> Response:
        return self.send_api_request({
            "METHOD": "GetExpressCheckoutDetails",
            "TOKEN": token,
        })

    def request_do_express_checkout_payment(
        self,
        token: str,
        amount: Amount,
        payment_action: str,
        payer_id: str,
        optional_parameters: Optional[Dict[str, Any]] = None,
    ) -> Response:
        return self.send_api_request({
            **(optional_parameters or {}),
            "METHOD": "DoExpressCheckoutPayment",
            "TOKEN": token,
            "PAYMENTREQUEST_0_AMT": self.convert_amount_to_paypal_format(amount),
            "PAYMENTREQUEST_0_PAYMENTACTION": payment_action,
            "PAYERID": payer_id,
        })

    def request_do_capture(
        self,
        authorization_id: str,
        amount: Amount,
        complete_type: str,
        optional_parameters: Optional[Dict[str, Any]] = None,
    ) -> Response:
        return self.send_api_request({
            **(optional_parameters or {}),
            "METHOD": "DoCapture",
            "AUTHORIZATIONID": authorization_id,
            "AMT": self.convert_amount_to_paypal_format(amount),
            "COMPLETETYPE": complete_type,
        })

    def request_do_reauthorization(
        self,
        authorization_id: str,
        amount: Amount,
        complete_type: Optional[str] = None,
        optional_parameters: Optional[Dict[str, Any]] = None,
    ) -> Response:
        """
        Renew an authorization.

        complete_type is accepted so callers can pass the same arguments as
        for DoCapture. DoReauthorization has no COMPLETETYPE field, so it is
        not sent.
        """
        return self.send_api_request({
            **(optional_parameters or {}),
            "METHOD": "DoReauthorization",
            "AUTHORIZATIONID": authorization_id,
            "AMT": self.convert_amount_to_paypal_format(amount),
        })

    def request_get_transaction_details(self, transaction_id: str) -> Response:
        return self.send_api_request({
            "METHOD": "GetTransactionDetails",
            "TRANSACTIONID": transaction_id,
        })

    def request_refund_transaction(
        self,
        transaction_id: str,
        optional_parameters: Optional[Dict[str, Any]] = None,
    ) -> Response:
        return self.send_api_request({
            **(optional_parameters or {}),
            "METHOD": "RefundTransaction",
            "TRANSACTIONID": transaction_id,
        })

    def request_do_void(
        self,
        authorization_id: str,
        optional_parameters: Optional[Dict[str, Any]] = None,
    ) -> Response:
        return self.send_api_request({
            **(optional_parameters or {}),
            "METHOD": "DoVoid",
            "AUTHORIZATIONID": authorization_id,
        })

    def get_authenticate_express_checkout_token_url(self, token: str) -> str:
        base_url = SANDBOX_CHECKOUT_URL if self.sandbox else LIVE_CHECKOUT_URL
        return f"{base_url}?{urlencode({'cmd': '_express-checkout', 'token': token})}"

    def convert_amount_to_paypal_format(self, amount: Amount) -> str:
        value = to_decimal(amount)
        if value is None:
            raise ValueError("amount is required")
        return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

    def send_api_request(self, parameters: Dict[str, Any]) -> Response:
        """
        Send a single NVP request.

        Args:
            parameters: API method and its fields; credentials are added here

        Returns:
            Parsed Response; transport errors yield an unsuccessful Response
        """
        method = parameters.get("METHOD")
        payload = {
            "VERSION": self.api_version,
            "USER": self.username,
            "PWD": self.password,
            "SIGNATURE": self.signature,
            **{key: str(value) for key, value in parameters.items() if value is not None},
        }

        try:
            http_response = self.http_client.post(self.api_endpoint, data=payload)
            http_response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"PayPal {method} request failed: {e}")
            return Response.from_transport_error(e, method=method)

        response = Response.from_nvp(http_response.text, method=method)
        logger.info(f"PayPal {method} answered with ACK={response.ack}")
        return response
