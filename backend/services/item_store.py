from typing import Protocol

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from core import crud
from core.exceptions import PersistenceError
from models.wishlist import CreateWishlistItemData, WishlistItem

log = structlog.get_logger()


class ItemStore(Protocol):
    async def create(self, wishlist_id: int, data: CreateWishlistItemData) -> WishlistItem:
        ...


class SqlItemStore:
    """Creates each item in its own transaction."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def create(self, wishlist_id: int, data: CreateWishlistItemData) -> WishlistItem:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = await crud.insert_item(session, wishlist_id, data)
                # committed; build the response from the persisted row
                return WishlistItem.model_validate(row)
        except SQLAlchemyError as e:
            log.error(
                "failed to persist wishlist item",
                wishlist_id=wishlist_id,
                url=data.source_url,
                error=str(e),
            )
            raise PersistenceError(f"could not save item: {e.__class__.__name__}", wishlist_id) from e
