from typing import Protocol

import structlog

from core.exceptions import PersistenceError, UpstreamError
from models.product import ScrapedProduct
from models.wishlist import CreateWishlistItemData, WishlistItem
from services.item_store import ItemStore
from utils.urls import validate_product_url

log = structlog.get_logger()


class ProductScraper(Protocol):
    async def scrape_product(self, url: str) -> ScrapedProduct:
        ...


class WishlistItemService:
    """Adds items to a wishlist: scrape, normalize, then persist.

    Nothing is written unless the scrape succeeded, and a failed write is not
    compensated; the caller retries the whole operation, which scrapes again.
    Two calls for the same URL produce two items.
    """

    def __init__(self, scraper: ProductScraper, item_store: ItemStore):
        self.scraper = scraper
        self.item_store = item_store

    async def add_item_to_wishlist(self, wishlist_id: int, url: str) -> WishlistItem:
        # checked here as well as in the route: no upstream call for bad input
        url = validate_product_url(url)
        bound = log.bind(wishlist_id=wishlist_id, url=url)

        bound.info("add item", stage="scraping")
        try:
            product = await self.scraper.scrape_product(url)
        except UpstreamError as e:
            bound.warning("add item", stage="scrape_failed", reason=e.reason)
            raise

        bound.info("add item", stage="normalizing", retailer=product.retailer.name, title=product.title)
        data = CreateWishlistItemData.from_scraped(product)

        bound.info("add item", stage="persisting")
        try:
            item = await self.item_store.create(wishlist_id, data)
        except PersistenceError as e:
            bound.error("add item", stage="persist_failed", reason=e.reason)
            raise

        bound.info("add item", stage="created", item_id=item.id)
        return item
