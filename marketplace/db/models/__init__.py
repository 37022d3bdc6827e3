# Models package (re-export feature modules for stable imports)
from .catalog.category import Category
from .catalog.item import Item

__all__ = [
    "Category",
    "Item",
]
