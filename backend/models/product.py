from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class RetailerInfo(CamelModel):
    name: str
    domain: str
    logo_url: Optional[str] = None
    brand_color: Optional[str] = None


class ScrapedProduct(CamelModel):
    """Normalized product data extracted from a retailer page."""

    title: str = "Unknown Product"
    description: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[float] = None
    currency: str = "INR"
    original_price: Optional[float] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    highlights: List[str] = Field(default_factory=list)
    additional_images: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    review_count: Optional[int] = None
    availability: Optional[str] = None
    retailer: RetailerInfo
    source_url: str
    # epoch milliseconds
    scraped_at: int
