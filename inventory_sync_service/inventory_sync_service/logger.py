"""Logger module for logging messages."""

from logging_utils.config import get_kafka_logger, setup_service_logger

logger = setup_service_logger("inventory-sync-service")

kafka_logger = get_kafka_logger("inventory-sync-service")

__all__ = ["logger", "kafka_logger"]
