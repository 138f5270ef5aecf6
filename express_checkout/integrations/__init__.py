"""
Integration modules for the Express Checkout plugin

Contains transport clients for external payment gateways.
"""
