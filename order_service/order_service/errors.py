"""Errors raised along the order processing flow.

Terminal errors abort the order and become the webhook's error response.
``PublishError`` and ``FulfillmentError`` are side-effect failures: they are
logged and recorded but never change the outcome of an accepted order.
"""


class OrderProcessingError(Exception):
    """Base class for order flow failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderValidationError(OrderProcessingError):
    """The inbound order is malformed or not processable."""


class AvailabilityError(OrderProcessingError):
    """The order is a completed duplicate or stock was short at check time."""


class AllocationError(OrderProcessingError):
    """Stock could not be allocated; nothing was committed."""


class PersistenceError(OrderProcessingError):
    """The ledger write failed or its outcome is unknown."""


class PublishError(OrderProcessingError):
    """An inventory change event could not be handed to Kafka."""


class FulfillmentError(OrderProcessingError):
    """The warehouse did not accept the fulfillment order."""
