from dataclasses import dataclass
from typing import List, Protocol


@dataclass
class ItemDto:
    id: int
    name: str
    category: str
    image_name: str


class CatalogRepository(Protocol):
    def insert(self, name: str, category: str, image_name: str) -> ItemDto:
        ...

    def get_all(self) -> List[ItemDto]:
        ...

    def get_by_id(self, item_id: int) -> ItemDto:
        ...

    def search_by_keyword(self, keyword: str) -> List[ItemDto]:
        ...
