"""Storefront cart & session-synchronization core."""

__version__ = "0.1.0"
