"""Logger module for logging messages."""

from logging_utils.config import setup_service_logger

logger = setup_service_logger("order-data-service")

__all__ = ["logger"]
