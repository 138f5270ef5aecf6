"""
PayPal Express Checkout payment plugin.

Implements the approve / deposit / credit / reverse operations of a payment
framework on top of the PayPal NVP Express Checkout API.
"""

__version__ = "0.1.0"
