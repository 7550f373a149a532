"""Pinwall Modules - All application modules."""

from pinwall.modules.pins import router as pins_router

__all__ = ["pins_router"]
