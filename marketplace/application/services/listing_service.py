import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from ..ports.catalog_repo import CatalogRepository, ItemDto
from ..ports.image_store import ImageStore
from ...exceptions import InvalidRequest, NotFound

logger = logging.getLogger(__name__)


@dataclass
class ListingService:
    catalog: CatalogRepository
    images: ImageStore

    def add_item(self, name: str, category: str, image_bytes: Optional[bytes] = None) -> ItemDto:
        name = (name or "").strip()
        category = (category or "").strip()
        if not name:
            raise InvalidRequest("name is required")
        if not category:
            raise InvalidRequest("category is required")

        if image_bytes:
            image_name = self.images.store(image_bytes)
        else:
            image_name = self.images.default_image

        item = self.catalog.insert(name, category, image_name)
        logger.info(f"item received: {item.name}")
        return item

    def list_items(self) -> List[ItemDto]:
        return self.catalog.get_all()

    def get_item(self, item_id: Union[str, int]) -> ItemDto:
        try:
            parsed_id = int(item_id)
        except (TypeError, ValueError):
            raise InvalidRequest(f"invalid item id: {item_id}")
        if parsed_id < 1:
            raise InvalidRequest(f"invalid item id: {item_id}")
        return self.catalog.get_by_id(parsed_id)

    def search(self, keyword: str) -> List[ItemDto]:
        if not keyword:
            raise InvalidRequest("keyword is required")
        return self.catalog.search_by_keyword(keyword)

    def image_path(self, filename: str) -> str:
        """Path to serve for ``filename``; the default image when it is missing."""
        try:
            return self.images.resolve(filename)
        except NotFound:
            logger.debug(f"image not found: {filename}")
            return self.images.default_path
