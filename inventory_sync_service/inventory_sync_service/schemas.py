"""Pydantic models for inventory change events and their processing outcome."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InventoryChangeEvent(BaseModel):
    """Absolute "set available to this value" instruction for one product.

    Field ranges are not enforced here so that an out-of-range event can be
    decoded, reported and dropped by the processor.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: int = Field(..., description="Storefront inventory item id.")
    quantity: int = Field(..., description="Available quantity to set.")
    location_id: int = Field(..., description="Storefront location id.")


class SyncState(str, Enum):
    IDLE = "idle"
    RECEIVED = "received"
    VALIDATED = "validated"
    DISPATCHED = "dispatched"
    ACKED = "acked"
    FAILED = "failed"
    INVALID = "invalid"
    DROPPED = "dropped"


TERMINAL_STATES = frozenset({SyncState.ACKED, SyncState.FAILED, SyncState.DROPPED})


class SyncResult(BaseModel):
    """Outcome of processing one event, with the states it went through."""

    state: SyncState
    message: str
    history: list[SyncState] = Field(default_factory=list)
