import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select, col

from .....database import transaction
from .....db.models import Category, Item
from .....exceptions import InvalidRequest, NotFound, PersistenceError
from .....application.ports.catalog_repo import CatalogRepository, ItemDto

logger = logging.getLogger(__name__)

# Lookup passes allowed after losing a category-name uniqueness race.
CATEGORY_RESOLVE_ATTEMPTS = 3


class _CategoryConflict(Exception):
    """Another writer created the category between our lookup and insert."""


class SqlCatalogRepository(CatalogRepository):
    def __init__(self, session: Session):
        self.session = session

    def _item_query(self):
        return (
            select(Item.id, Item.name, Category.name, Item.image_name)
            .join(Category, Item.category_id == Category.id)
            .order_by(Item.id)
        )

    def _to_dto(self, row) -> ItemDto:
        item_id, name, category, image_name = row
        return ItemDto(id=item_id, name=name, category=category, image_name=image_name)

    def _find_category_id(self, name: str) -> Optional[int]:
        return self.session.exec(select(Category.id).where(Category.name == name)).first()

    def _get_or_create_category(self, name: str) -> int:
        category_id = self._find_category_id(name)
        if category_id is not None:
            return category_id
        category = Category(name=name)
        self.session.add(category)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise _CategoryConflict(name) from e
        logger.info(f"Created category {name!r} with id {category.id}")
        return category.id

    def insert(self, name: str, category: str, image_name: str) -> ItemDto:
        if not name:
            raise InvalidRequest("name is required")
        if not category:
            raise InvalidRequest("category is required")
        if not image_name:
            raise InvalidRequest("image name is required")

        for attempt in range(1, CATEGORY_RESOLVE_ATTEMPTS + 1):
            try:
                with transaction(self.session):
                    category_id = self._get_or_create_category(category)
                    item = Item(name=name, category_id=category_id, image_name=image_name)
                    self.session.add(item)
                    self.session.flush()
                    item_id = item.id
            except _CategoryConflict:
                logger.info(f"Category {category!r} was created concurrently, resolving again (attempt {attempt})")
                continue
            except SQLAlchemyError as e:
                logger.error(f"failed to insert item {name!r}: {e}")
                raise PersistenceError(f"failed to insert item: {e}") from e
            return ItemDto(id=item_id, name=name, category=category, image_name=image_name)

        raise PersistenceError(f"could not resolve category {category!r}")

    def get_all(self) -> List[ItemDto]:
        try:
            rows = self.session.exec(self._item_query()).all()
        except SQLAlchemyError as e:
            logger.error(f"failed to list items: {e}")
            raise PersistenceError(f"failed to list items: {e}") from e
        return [self._to_dto(r) for r in rows]

    def get_by_id(self, item_id: int) -> ItemDto:
        try:
            row = self.session.exec(self._item_query().where(Item.id == item_id)).first()
        except SQLAlchemyError as e:
            logger.error(f"failed to get item {item_id}: {e}")
            raise PersistenceError(f"failed to get item: {e}") from e
        if row is None:
            raise NotFound(f"item not found: {item_id}")
        return self._to_dto(row)

    def search_by_keyword(self, keyword: str) -> List[ItemDto]:
        if not keyword:
            raise InvalidRequest("keyword is required")
        # autoescape keeps % and _ in the keyword literal
        query = self._item_query().where(col(Item.name).icontains(keyword, autoescape=True))
        try:
            rows = self.session.exec(query).all()
        except SQLAlchemyError as e:
            logger.error(f"failed to search items for {keyword!r}: {e}")
            raise PersistenceError(f"failed to search items: {e}") from e
        return [self._to_dto(r) for r in rows]
