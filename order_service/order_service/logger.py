"""Logger module for logging messages."""

from logging_utils.config import get_kafka_logger, setup_service_logger

logger = setup_service_logger("order-service")

# Kafka producer callbacks log under their own name
kafka_logger = get_kafka_logger("order-service")

__all__ = ["logger", "kafka_logger"]
