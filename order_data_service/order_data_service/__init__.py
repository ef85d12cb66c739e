"""Order ledger and inventory allocation service."""

__version__ = "0.1.0"
