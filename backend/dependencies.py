from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from services.firecrawl import FirecrawlClient
from services.item_store import SqlItemStore
from services.wishlist_item_service import WishlistItemService


# everything below is created once in main.lifespan and kept on app.state

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_firecrawl_client(request: Request) -> FirecrawlClient:
    return request.app.state.firecrawl


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.session_factory() as session:
        yield session


def get_item_store(request: Request) -> SqlItemStore:
    return SqlItemStore(request.app.state.session_factory)


def get_wishlist_item_service(
    firecrawl: FirecrawlClient = Depends(get_firecrawl_client),
    item_store: SqlItemStore = Depends(get_item_store)
) -> WishlistItemService:
    return WishlistItemService(scraper=firecrawl, item_store=item_store)
