"""Errors raised by the inventory sync service."""


class SyncError(Exception):
    """The storefront did not accept an inventory level update."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
