from pydantic import BaseModel
from typing import Optional

from models.product import CamelModel, ScrapedProduct


class UrlRequest(BaseModel):
    url: str


class AddItemRequest(UrlRequest):
    pass


class ScrapeRequest(UrlRequest):
    pass


class ScrapeResponse(BaseModel):
    success: bool
    data: Optional[ScrapedProduct] = None
    error: Optional[str] = None


class CreateWishlistRequest(BaseModel):
    name: str


class UpdateWishlistRequest(BaseModel):
    name: str


class UpdateItemRequest(CamelModel):
    product_name: Optional[str] = None
    product_description: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    retailer_name: Optional[str] = None
    retailer_domain: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str


class SuccessResponse(BaseModel):
    success: bool
