from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class WishlistRow(Base):
    __tablename__ = "wishlists"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # soft delete; items are left in place
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship("WishlistItemRow", back_populates="wishlist")


class WishlistItemRow(Base):
    __tablename__ = "wishlist_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    wishlist_id = Column(Integer, ForeignKey("wishlists.id"), index=True, nullable=False)
    source_url = Column(String(2048), nullable=False)

    # normalized scraped product data
    product_name = Column(String(500), nullable=True)
    product_description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    currency = Column(String(10), nullable=True)
    image_url = Column(String(2048), nullable=True)
    retailer_name = Column(String(100), nullable=True)
    retailer_domain = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    wishlist = relationship("WishlistRow", back_populates="items")
