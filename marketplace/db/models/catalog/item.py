# marketplace/db/models/catalog/item.py
from typing import Optional
from sqlmodel import SQLModel, Field

class Item(SQLModel, table=True):
    __tablename__ = "items"
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    category_id: int = Field(foreign_key="categories.id", nullable=False, index=True)
    image_name: str = Field(nullable=False)
