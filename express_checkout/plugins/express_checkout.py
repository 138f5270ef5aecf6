"""
PayPal Express Checkout Plugin

Maps the framework's financial operations onto the Express Checkout NVP
calls. Approvals run in two phases: the first call registers the checkout
and sends the buyer to PayPal, the second call (after the buyer returns)
reuses the stored token and completes the payment.
"""

from decimal import Decimal
from typing import NoReturn, Optional

from express_checkout.core.config import Settings, get_settings
from express_checkout.core.logging import configure_logging, get_logger
from express_checkout.integrations.paypal.client import ExpressCheckoutClient
from express_checkout.integrations.paypal.response import Response
from express_checkout.integrations.paypal.statuses import (
    CheckoutStatus,
    CompleteType,
    PayerStatus,
    PaymentAction,
    PaymentStatus,
    PendingReason,
    RefundStatus,
)
from express_checkout.models.payment import Payment
from express_checkout.models.transaction import FinancialTransaction
from express_checkout.utils import number

from .base import (
    ActionRequired,
    ConfigurationError,
    FinancialError,
    PaymentPending,
    PaymentPlugin,
    REASON_CODE_MISSING_AMOUNT,
    REASON_CODE_SUCCESS,
    REASON_CODE_UNKNOWN,
    RESPONSE_CODE_FAILED,
    RESPONSE_CODE_SUCCESS,
    financial_operation,
)

logger = get_logger(__name__)

PAYMENT_SYSTEM_NAME = "paypal_express_checkout"


class ExpressCheckoutPlugin(PaymentPlugin):
    """PayPal Express Checkout payment plugin."""

    def __init__(self, return_url: str, cancel_url: str, client: ExpressCheckoutClient):
        """
        Initialize the plugin.

        Args:
            return_url: Default url PayPal sends the buyer to after authorizing
            cancel_url: Default url PayPal sends the buyer to after cancelling
            client: NVP client used for every gateway call
        """
        self.return_url = return_url
        self.cancel_url = cancel_url
        self.client = client

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        client: Optional[ExpressCheckoutClient] = None,
    ) -> "ExpressCheckoutPlugin":
        settings = settings or get_settings()
        configure_logging(settings.log_level)
        return cls(
            return_url=settings.return_url,
            cancel_url=settings.cancel_url,
            client=client or ExpressCheckoutClient.from_settings(settings),
        )

    @financial_operation
    def approve(self, transaction: FinancialTransaction) -> None:
        self._create_checkout_billing_agreement(transaction, PaymentAction.AUTHORIZATION)

    @financial_operation
    def approve_and_deposit(self, transaction: FinancialTransaction) -> None:
        self._create_checkout_billing_agreement(transaction, PaymentAction.SALE)

    @financial_operation
    def credit(self, transaction: FinancialTransaction) -> None:
        payment = self._get_payment(transaction)
        approve_transaction = self._get_approve_transaction(transaction, payment)
        authorization_id = (
            transaction.data.authorization_id
            or approve_transaction.data.authorization_id
            or approve_transaction.reference_number
        )

        amount = self._get_requested_amount(transaction)
        previously_processed = approve_transaction.processed_amount
        if previously_processed is None:
            previously_processed = payment.approved_amount
        if previously_processed is None:
            previously_processed = Decimal("0")

        parameters = {}
        if number.compare(amount, previously_processed) != 0:
            parameters["REFUNDTYPE"] = "Partial"
            parameters["AMT"] = self.client.convert_amount_to_paypal_format(amount)
            parameters["CURRENCYCODE"] = payment.currency

        response = self.client.request_refund_transaction(authorization_id, parameters)
        self._throw_unless_success_response(response, transaction)

        self._mark_success(
            transaction,
            response.get("REFUNDTRANSACTIONID"),
            number.to_decimal(response.get("NETREFUNDAMT")),
        )

    @financial_operation
    def deposit(self, transaction: FinancialTransaction) -> None:
        transaction_id = self._do_capture(transaction)

        details = self.client.request_get_transaction_details(transaction_id)
        self._throw_unless_success_response(details, transaction)

        status = PaymentStatus(details.get("PAYMENTSTATUS"))
        if status is PaymentStatus.PENDING:
            pending_reason = details.get("PENDINGREASON")
            raise PaymentPending(f"Payment is still pending: {pending_reason}", transaction, pending_reason)
        if status is not PaymentStatus.COMPLETED:
            self._fail(
                transaction,
                details.get("PAYMENTSTATUS"),
                f"PaymentStatus is not completed: {details.get('PAYMENTSTATUS')}",
            )

        self._mark_success(
            transaction,
            details.get("TRANSACTIONID"),
            number.to_decimal(details.get("AMT")),
        )

    @financial_operation
    def reverse_approval(self, transaction: FinancialTransaction) -> None:
        approve_transaction = self._get_approve_transaction(transaction, self._get_payment(transaction))

        response = self.client.request_do_void(approve_transaction.reference_number)
        self._throw_unless_success_response(response, transaction)

        # DoVoid reports no amount; the whole requested amount is released
        self._mark_success(transaction, response.get("AUTHORIZATIONID"), transaction.requested_amount)

    @financial_operation
    def reverse_deposit(self, transaction: FinancialTransaction) -> None:
        deposit_transactions = self._get_payment(transaction).get_deposit_transactions()
        if not deposit_transactions:
            self._fail(transaction, "NoDepositTransaction", "Payment has no deposit transaction to refund.")

        response = self.client.request_refund_transaction(deposit_transactions[0].reference_number)
        self._throw_unless_success_response(response, transaction)

        refund_status = RefundStatus(response.get("REFUNDSTATUS"))
        if refund_status is RefundStatus.DELAYED:
            pending_reason = response.get("PENDINGREASON")
            raise PaymentPending(f"The refund status is delayed: {pending_reason}", transaction, pending_reason)
        if refund_status is not RefundStatus.INSTANT:
            logger.warning(
                "express_checkout.refund.status_unrecognized",
                transaction_id=transaction.id,
                refund_status=response.get("REFUNDSTATUS"),
            )

        self._mark_success(
            transaction,
            response.get("REFUNDTRANSACTIONID"),
            number.to_decimal(response.get("GROSSREFUNDAMT")),
        )

    def processes(self, payment_system_name: str) -> bool:
        return payment_system_name == PAYMENT_SYSTEM_NAME

    def is_independent_credit_supported(self) -> bool:
        return False

    def _create_checkout_billing_agreement(
        self,
        transaction: FinancialTransaction,
        payment_action: PaymentAction,
    ) -> None:
        data = transaction.data
        token = self._obtain_express_checkout_token(transaction, payment_action)

        details = self.client.request_get_express_checkout_details(token)
        self._throw_unless_success_response(details, transaction)

        checkout_status = CheckoutStatus(details.get("CHECKOUTSTATUS"))
        if checkout_status is CheckoutStatus.FAILED:
            self._fail(transaction, CheckoutStatus.FAILED.value, "PaymentAction failed.")

        buyer_authorized = checkout_status is CheckoutStatus.COMPLETED or (
            checkout_status is CheckoutStatus.NOT_INITIATED
            and PayerStatus(details.get("PAYERSTATUS")) is PayerStatus.VERIFIED
        )
        if not buyer_authorized:
            logger.info(
                "express_checkout.buyer.authorization_pending",
                transaction_id=transaction.id,
                checkout_status=details.get("CHECKOUTSTATUS"),
            )
            raise ActionRequired(
                "User has not yet authorized the transaction.",
                self.client.get_authenticate_express_checkout_token_url(token),
                transaction,
            )

        payer_id = details.get("PAYERID")
        data.paypal_payer_id = payer_id

        response = self.client.request_do_express_checkout_payment(
            token,
            self._get_requested_amount(transaction),
            payment_action.value,
            payer_id,
            {"PAYMENTREQUEST_0_CURRENCYCODE": self._get_payment(transaction).currency},
        )
        self._throw_unless_success_response(response, transaction)

        transaction_id = response.get("PAYMENTINFO_0_TRANSACTIONID")
        payment_status = PaymentStatus(response.get("PAYMENTINFO_0_PAYMENTSTATUS"))
        if payment_status is PaymentStatus.PENDING:
            transaction.reference_number = transaction_id

            # Authorizations stay pending until captured, which deposit() takes care of
            pending_reason = response.get("PAYMENTINFO_0_PENDINGREASON")
            if PendingReason(pending_reason) is not PendingReason.AUTHORIZATION:
                raise PaymentPending(f"Payment is still pending: {pending_reason}", transaction, pending_reason)
        elif payment_status is not PaymentStatus.COMPLETED:
            self._fail(
                transaction,
                response.get("PAYMENTINFO_0_PAYMENTSTATUS"),
                f"PaymentStatus is not completed: {response.get('PAYMENTINFO_0_PAYMENTSTATUS')}",
            )

        data.authorization_id = transaction_id
        self._mark_success(transaction, transaction_id, number.to_decimal(response.get("PAYMENTINFO_0_AMT")))

    def _obtain_express_checkout_token(
        self,
        transaction: FinancialTransaction,
        payment_action: PaymentAction,
    ) -> str:
        """
        Return the stored checkout token or register a new checkout.

        Raises:
            ActionRequired: after registering a new checkout; the buyer has
                to authorize it on PayPal first
            ConfigurationError: if no return or cancel url is available
        """
        data = transaction.data
        if data.express_checkout_token:
            return data.express_checkout_token

        return_url = self._get_return_url(transaction)
        cancel_url = self._get_cancel_url(transaction)

        options = dict(data.checkout_params or {})
        options["PAYMENTREQUEST_0_PAYMENTACTION"] = payment_action.value
        options["PAYMENTREQUEST_0_CURRENCYCODE"] = self._get_payment(transaction).currency

        response = self.client.request_set_express_checkout(
            self._get_requested_amount(transaction),
            return_url,
            cancel_url,
            options,
        )
        self._throw_unless_success_response(response, transaction)

        token = response.get("TOKEN")
        data.express_checkout_token = token
        logger.info(
            "express_checkout.token.registered",
            transaction_id=transaction.id,
            payment_action=payment_action.value,
            token=token,
        )

        raise ActionRequired(
            "User must authorize the transaction.",
            self.client.get_authenticate_express_checkout_token_url(token),
            transaction,
        )

    def _do_capture(self, transaction: FinancialTransaction) -> Optional[str]:
        """
        Capture the approved funds and return the capture's transaction id.

        An authorization past its honor period comes back as Expired; it is
        reauthorized and captured once more.
        """
        payment = self._get_payment(transaction)
        authorization_id = self._get_approve_transaction(transaction, payment).reference_number
        amount = self._get_requested_amount(transaction)
        approved_amount = payment.approved_amount if payment.approved_amount is not None else Decimal("0")

        if number.compare(approved_amount, amount) == 0:
            complete_type = CompleteType.COMPLETE
        else:
            complete_type = CompleteType.NOT_COMPLETE

        currency_parameters = {"CURRENCYCODE": payment.currency}

        capture = self.client.request_do_capture(authorization_id, amount, complete_type.value, currency_parameters)
        self._throw_unless_success_response(capture, transaction)

        if PaymentStatus(capture.get("PAYMENTSTATUS")) is PaymentStatus.EXPIRED:
            logger.info(
                "express_checkout.capture.expired",
                transaction_id=transaction.id,
                authorization_id=authorization_id,
            )
            reauthorization = self.client.request_do_reauthorization(
                authorization_id, amount, complete_type.value, currency_parameters
            )
            self._throw_unless_success_response(reauthorization, transaction)

            if PaymentStatus(reauthorization.get("PAYMENTSTATUS")) is PaymentStatus.COMPLETED:
                authorization_id = reauthorization.get("AUTHORIZATIONID")
                transaction.data.authorization_id = authorization_id

                capture = self.client.request_do_capture(
                    authorization_id, amount, complete_type.value, currency_parameters
                )
                self._throw_unless_success_response(capture, transaction)

        if PaymentStatus(capture.get("PAYMENTSTATUS")) is PaymentStatus.EXPIRED:
            self._fail(
                transaction,
                PaymentStatus.EXPIRED.value,
                f"Authorization {authorization_id} expired and could not be renewed.",
            )

        return capture.get("TRANSACTIONID")

    def _throw_unless_success_response(self, response: Response, transaction: FinancialTransaction) -> None:
        if response.is_success:
            return

        transaction.response_code = response.ack or RESPONSE_CODE_FAILED
        transaction.reason_code = response.get("L_ERRORCODE0") or REASON_CODE_UNKNOWN
        logger.warning(
            "express_checkout.gateway.failure",
            transaction_id=transaction.id,
            method=response.method,
            response_code=transaction.response_code,
            reason_code=transaction.reason_code,
            error_message=response.get_error_message(),
        )

        raise FinancialError(f"PayPal-Response was not successful: {response}", transaction)

    def _fail(self, transaction: FinancialTransaction, reason_code: Optional[str], message: str) -> NoReturn:
        transaction.response_code = RESPONSE_CODE_FAILED
        transaction.reason_code = reason_code or REASON_CODE_UNKNOWN
        logger.warning(
            "express_checkout.failure",
            transaction_id=transaction.id,
            reason_code=transaction.reason_code,
        )
        raise FinancialError(message, transaction)

    def _mark_success(
        self,
        transaction: FinancialTransaction,
        reference_number: Optional[str],
        processed_amount: Optional[Decimal],
    ) -> None:
        transaction.reference_number = reference_number
        transaction.processed_amount = processed_amount
        transaction.response_code = RESPONSE_CODE_SUCCESS
        transaction.reason_code = REASON_CODE_SUCCESS

    def _get_requested_amount(self, transaction: FinancialTransaction) -> Decimal:
        if transaction.requested_amount is None:
            self._fail(transaction, REASON_CODE_MISSING_AMOUNT, "Transaction has no requested amount.")
        return transaction.requested_amount

    def _get_payment(self, transaction: FinancialTransaction) -> Payment:
        if transaction.payment is None:
            self._fail(transaction, "NoPayment", "Transaction is not attached to a payment.")
        return transaction.payment

    def _get_approve_transaction(self, transaction: FinancialTransaction, payment: Payment) -> FinancialTransaction:
        approve_transaction = payment.get_approve_transaction()
        if approve_transaction is None:
            self._fail(transaction, "NoApproveTransaction", "Payment has no approve transaction.")
        return approve_transaction

    def _get_return_url(self, transaction: FinancialTransaction) -> str:
        if transaction.data.return_url:
            return transaction.data.return_url
        if self.return_url:
            return self.return_url
        raise ConfigurationError("You must configure a return url.", transaction)

    def _get_cancel_url(self, transaction: FinancialTransaction) -> str:
        if transaction.data.cancel_url:
            return transaction.data.cancel_url
        if self.cancel_url:
            return self.cancel_url
        raise ConfigurationError("You must configure a cancel url.", transaction)
