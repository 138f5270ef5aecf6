"""
Payment Plugin Base Classes and Interfaces

Defines the contract every payment plugin fulfils towards the host
framework, the result value returned by each financial operation and the
errors used internally to leave an operation early.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Callable, List, Optional

from express_checkout.core.logging import get_logger
from express_checkout.models.transaction import FinancialTransaction, TransactionState

logger = get_logger(__name__)

RESPONSE_CODE_SUCCESS = "success"
RESPONSE_CODE_PENDING = "Pending"
RESPONSE_CODE_FAILED = "Failed"
REASON_CODE_SUCCESS = "none"
REASON_CODE_CONFIGURATION = "ConfigurationError"
REASON_CODE_MISSING_AMOUNT = "MissingAmount"
REASON_CODE_UNKNOWN = "Unknown"


class Outcome(str, Enum):
    """How a financial operation ended."""
    SUCCESS = "success"
    PENDING = "pending"
    ACTION_REQUIRED = "action_required"
    FAILED = "failed"


@dataclass
class PluginResult:
    """
    Result of a financial operation.

    ``redirect_url`` is only set for ACTION_REQUIRED, ``pending_reason`` only
    for PENDING. The transaction carries the codes, amounts and reference
    number written during the operation.
    """
    outcome: Outcome
    transaction: FinancialTransaction
    message: Optional[str] = None
    redirect_url: Optional[str] = None
    pending_reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class PluginError(Exception):
    """Base class for errors that end a plugin operation early."""

    def __init__(self, message: str, transaction: Optional[FinancialTransaction] = None):
        super().__init__(message)
        self.error_message = message
        self.transaction = transaction

    def to_result(self, transaction: FinancialTransaction) -> PluginResult:
        raise NotImplementedError


class FinancialError(PluginError):
    """The gateway rejected the operation."""

    def to_result(self, transaction: FinancialTransaction) -> PluginResult:
        return PluginResult(Outcome.FAILED, transaction, message=self.error_message)


class ConfigurationError(PluginError):
    """The plugin is missing configuration needed for the operation."""

    def to_result(self, transaction: FinancialTransaction) -> PluginResult:
        transaction.response_code = RESPONSE_CODE_FAILED
        transaction.reason_code = REASON_CODE_CONFIGURATION
        return PluginResult(Outcome.FAILED, transaction, message=self.error_message)


class PaymentPending(PluginError):
    """The gateway accepted the operation but has not finalized it."""

    def __init__(
        self,
        message: str,
        transaction: Optional[FinancialTransaction] = None,
        pending_reason: Optional[str] = None,
    ):
        super().__init__(message, transaction)
        self.pending_reason = pending_reason

    def to_result(self, transaction: FinancialTransaction) -> PluginResult:
        transaction.response_code = RESPONSE_CODE_PENDING
        transaction.reason_code = self.pending_reason or REASON_CODE_UNKNOWN
        return PluginResult(
            Outcome.PENDING,
            transaction,
            message=self.error_message,
            pending_reason=self.pending_reason,
        )


class ActionRequired(PluginError):
    """The buyer has to visit ``redirect_url`` before the operation can continue."""

    def __init__(self, message: str, redirect_url: str, transaction: Optional[FinancialTransaction] = None):
        super().__init__(message, transaction)
        self.redirect_url = redirect_url

    def to_result(self, transaction: FinancialTransaction) -> PluginResult:
        return PluginResult(
            Outcome.ACTION_REQUIRED,
            transaction,
            message=self.error_message,
            redirect_url=self.redirect_url,
        )


class PluginNotFoundError(LookupError):
    pass


# Action required leaves the transaction as it was
OUTCOME_STATES = {
    Outcome.SUCCESS: TransactionState.SUCCESS,
    Outcome.PENDING: TransactionState.PENDING,
    Outcome.FAILED: TransactionState.FAILED,
}


OperationFunc = Callable[["PaymentPlugin", FinancialTransaction], None]


def financial_operation(func: OperationFunc) -> Callable[["PaymentPlugin", FinancialTransaction], PluginResult]:
    """
    Turn an operation that raises PluginError subclasses into one that
    returns a PluginResult.
    """

    @wraps(func)
    def wrapper(self: "PaymentPlugin", transaction: FinancialTransaction) -> PluginResult:
        try:
            func(self, transaction)
        except PluginError as e:
            result = e.to_result(transaction)
            if result.outcome in OUTCOME_STATES:
                transaction.state = OUTCOME_STATES[result.outcome]
            logger.info(
                "plugin.operation.finished",
                operation=func.__name__,
                outcome=result.outcome.value,
                response_code=transaction.response_code,
                reason_code=transaction.reason_code,
            )
            return result

        logger.info(
            "plugin.operation.finished",
            operation=func.__name__,
            outcome=Outcome.SUCCESS.value,
            reference_number=transaction.reference_number,
        )
        transaction.state = TransactionState.SUCCESS
        return PluginResult(Outcome.SUCCESS, transaction)

    return wrapper


class PaymentPlugin(ABC):
    """Abstract base class for payment plugins."""

    @abstractmethod
    def approve(self, transaction: FinancialTransaction) -> PluginResult:
        """Reserve funds without settling them."""

    @abstractmethod
    def approve_and_deposit(self, transaction: FinancialTransaction) -> PluginResult:
        """Reserve and settle funds in one step."""

    @abstractmethod
    def deposit(self, transaction: FinancialTransaction) -> PluginResult:
        """Settle previously approved funds."""

    @abstractmethod
    def credit(self, transaction: FinancialTransaction) -> PluginResult:
        """Refund funds of an approved payment."""

    @abstractmethod
    def reverse_approval(self, transaction: FinancialTransaction) -> PluginResult:
        """Release an approval that was not deposited."""

    @abstractmethod
    def reverse_deposit(self, transaction: FinancialTransaction) -> PluginResult:
        """Refund funds that were already deposited."""

    @abstractmethod
    def processes(self, payment_system_name: str) -> bool:
        """Whether this plugin handles the given payment system."""

    def is_independent_credit_supported(self) -> bool:
        return False


class PluginRegistry:
    """Registry resolving payment system names to plugins."""

    def __init__(self) -> None:
        self._plugins: List[PaymentPlugin] = []

    def register(self, plugin: PaymentPlugin) -> None:
        self._plugins.append(plugin)

    def find_plugin(self, payment_system_name: str) -> PaymentPlugin:
        for plugin in self._plugins:
            if plugin.processes(payment_system_name):
                return plugin
        raise PluginNotFoundError(f"No plugin processes payment system: {payment_system_name}")
