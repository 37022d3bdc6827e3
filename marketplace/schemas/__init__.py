# Schemas package (re-export feature modules for stable imports)
from .items.item import *
