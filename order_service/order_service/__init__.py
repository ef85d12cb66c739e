"""Order intake, processing and inventory event publishing."""

__version__ = "0.1.0"
