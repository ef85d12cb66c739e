"""Logging configuration shared by the order pipeline services."""

import os
import sys
from typing import Optional

from loguru import logger as loguru_logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[service]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[service]} | {name}:{function}:{line} - {message}"


def setup_service_logger(
    service_name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    serialize: Optional[bool] = None,
) -> loguru_logger:
    """Configure loguru for a service and return a logger bound to it.

    Unset arguments fall back to ``LOG_LEVEL``, ``LOG_FILE`` and ``LOG_JSON``.

    Args:
        service_name: Name of the service (e.g., 'order-service')
        log_level: Logging level (default: INFO)
        log_file: Optional path to a rotating log file
        serialize: Emit JSON records instead of the coloured console format

    Returns:
        logger: Loguru logger with ``service`` bound in ``extra``
    """
    log_level = log_level or os.getenv("LOG_LEVEL", "INFO")
    log_file = log_file or os.getenv("LOG_FILE")
    if serialize is None:
        serialize = os.getenv("LOG_JSON", "false").lower() == "true"

    loguru_logger.remove()
    loguru_logger.configure(extra={"service": service_name})

    loguru_logger.add(
        sys.stderr,
        level=log_level,
        format=CONSOLE_FORMAT,
        colorize=not serialize,
        serialize=serialize,
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        loguru_logger.add(
            log_file,
            level=log_level,
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="1 week",
            compression="gz",
            enqueue=True,
        )

    return loguru_logger.bind(service=service_name)


def get_kafka_logger(service_name: str) -> loguru_logger:
    """Get a logger for Kafka client code without reconfiguring the sinks.

    Args:
        service_name: Name of the service

    Returns:
        logger: Logger bound to ``<service>.kafka``
    """
    return loguru_logger.bind(service=f"{service_name}.kafka")
