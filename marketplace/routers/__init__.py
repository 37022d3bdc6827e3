# Routers package
from . import items_router

__all__ = [
    "items_router",
]
