"""Errors raised by the ledger service."""


class LedgerError(Exception):
    """Base class for ledger failures."""

    error_type = "ledger"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InventoryAllocationError(LedgerError):
    """A line item could not be allocated; nothing was committed."""

    error_type = "allocation"


class LedgerPersistenceError(LedgerError):
    """The ledger write failed; the allocation was rolled back with it."""

    error_type = "persistence"


class DuplicateOrderError(LedgerError):
    """The order number is already in the ledger; nothing was allocated."""

    error_type = "duplicate"


class OrderNotFoundError(LedgerError):
    error_type = "not_found"


class InvalidStatusTransition(LedgerError):
    error_type = "invalid_transition"
