from .base import (
    ActionRequired,
    ConfigurationError,
    FinancialError,
    Outcome,
    PaymentPending,
    PaymentPlugin,
    PluginError,
    PluginNotFoundError,
    PluginRegistry,
    PluginResult,
)
from .express_checkout import PAYMENT_SYSTEM_NAME, ExpressCheckoutPlugin

__all__ = [
    "ActionRequired",
    "ConfigurationError",
    "ExpressCheckoutPlugin",
    "FinancialError",
    "Outcome",
    "PAYMENT_SYSTEM_NAME",
    "PaymentPending",
    "PaymentPlugin",
    "PluginError",
    "PluginNotFoundError",
    "PluginRegistry",
    "PluginResult",
]
