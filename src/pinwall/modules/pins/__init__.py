"""Pinwall Pins Module - save/unsave, comments, and tags on shared pins."""

from pinwall.modules.pins.repository import (
    InMemoryPinRepository,
    PinChange,
    PinRepository,
    SupabasePinRepository,
)
from pinwall.modules.pins.router import router
from pinwall.modules.pins.service import PinsService
from pinwall.modules.pins.shaper import shape_pin

__all__ = [
    "router",
    "PinsService",
    "PinRepository",
    "InMemoryPinRepository",
    "SupabasePinRepository",
    "PinChange",
    "shape_pin",
]
