from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .product import CamelModel, ScrapedProduct


class Wishlist(CamelModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class WishlistItem(CamelModel):
    id: int
    wishlist_id: int
    source_url: str
    product_name: Optional[str] = None
    product_description: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    retailer_name: Optional[str] = None
    retailer_domain: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CreateWishlistItemData(BaseModel):
    source_url: str
    product_name: Optional[str] = None
    product_description: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    retailer_name: Optional[str] = None
    retailer_domain: Optional[str] = None

    @classmethod
    def from_scraped(cls, product: ScrapedProduct) -> "CreateWishlistItemData":
        return cls(
            source_url=product.source_url,
            product_name=product.title,
            product_description=product.description,
            price=product.price,
            currency=product.currency,
            image_url=product.image_url,
            retailer_name=product.retailer.name,
            retailer_domain=product.retailer.domain,
        )
