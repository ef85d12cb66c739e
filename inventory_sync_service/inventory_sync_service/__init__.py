"""Inventory change stream processor that keeps the storefront in sync."""

__version__ = "0.1.0"
