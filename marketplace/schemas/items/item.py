# marketplace/schemas/items/item.py
from pydantic import BaseModel
from typing import List

class ItemResponse(BaseModel):
    id: int
    name: str
    category: str
    image_name: str

class ItemsResponse(BaseModel):
    items: List[ItemResponse] = []

class MessageResponse(BaseModel):
    message: str
