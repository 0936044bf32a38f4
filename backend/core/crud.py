from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.wishlist import CreateWishlistItemData
from .tables import WishlistItemRow, WishlistRow

# text fields clipped to their column width on write
_CLIPPED = ("product_name", "currency", "retailer_name", "retailer_domain")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clip(field: str, value: Optional[str]) -> Optional[str]:
    if value is None or field not in _CLIPPED:
        return value
    limit = WishlistItemRow.__table__.c[field].type.length
    if limit is None:
        return value
    return value[:limit]


# --- wishlists ---

async def create_wishlist(db: AsyncSession, name: str) -> WishlistRow:
    now = _now()
    wishlist = WishlistRow(name=name, created_at=now, updated_at=now)
    db.add(wishlist)
    await db.commit()
    await db.refresh(wishlist)
    return wishlist


async def get_active_wishlists(db: AsyncSession) -> List[WishlistRow]:
    result = await db.execute(
        select(WishlistRow)
        .filter(WishlistRow.deleted_at.is_(None))
        .order_by(WishlistRow.created_at.desc(), WishlistRow.id.desc())
    )
    return list(result.scalars().all())


async def get_active_wishlist(db: AsyncSession, wishlist_id: int) -> Optional[WishlistRow]:
    result = await db.execute(
        select(WishlistRow)
        .filter(WishlistRow.id == wishlist_id)
        .filter(WishlistRow.deleted_at.is_(None))
    )
    return result.scalar_one_or_none()


async def rename_wishlist(db: AsyncSession, wishlist_id: int, name: str) -> bool:
    result = await db.execute(
        update(WishlistRow)
        .where(WishlistRow.id == wishlist_id, WishlistRow.deleted_at.is_(None))
        .values(name=name, updated_at=_now())
    )
    await db.commit()
    return result.rowcount > 0


async def soft_delete_wishlist(db: AsyncSession, wishlist_id: int) -> bool:
    now = _now()
    result = await db.execute(
        update(WishlistRow)
        .where(WishlistRow.id == wishlist_id, WishlistRow.deleted_at.is_(None))
        .values(deleted_at=now, updated_at=now)
    )
    await db.commit()
    return result.rowcount > 0


# --- wishlist items ---

async def insert_item(db: AsyncSession, wishlist_id: int, data: CreateWishlistItemData) -> WishlistItemRow:
    """Stage a new item row; the caller owns the transaction."""
    now = _now()
    item = WishlistItemRow(
        wishlist_id=wishlist_id,
        source_url=data.source_url,
        product_name=_clip("product_name", data.product_name),
        product_description=data.product_description,
        price=data.price,
        currency=_clip("currency", data.currency),
        image_url=data.image_url,
        retailer_name=_clip("retailer_name", data.retailer_name),
        retailer_domain=_clip("retailer_domain", data.retailer_domain),
        created_at=now,
        updated_at=now,
    )
    db.add(item)
    await db.flush()
    return item


async def get_items_by_wishlist(db: AsyncSession, wishlist_id: int) -> List[WishlistItemRow]:
    result = await db.execute(
        select(WishlistItemRow)
        .filter(WishlistItemRow.wishlist_id == wishlist_id)
        .order_by(WishlistItemRow.created_at.desc(), WishlistItemRow.id.desc())
    )
    return list(result.scalars().all())


async def get_item(db: AsyncSession, item_id: int) -> Optional[WishlistItemRow]:
    result = await db.execute(select(WishlistItemRow).filter(WishlistItemRow.id == item_id))
    return result.scalar_one_or_none()


async def update_item(db: AsyncSession, item_id: int, data: CreateWishlistItemData) -> bool:
    """Manual edit; the source URL of an item never changes."""
    result = await db.execute(
        update(WishlistItemRow)
        .where(WishlistItemRow.id == item_id)
        .values(
            product_name=_clip("product_name", data.product_name),
            product_description=data.product_description,
            price=data.price,
            currency=_clip("currency", data.currency),
            image_url=data.image_url,
            retailer_name=_clip("retailer_name", data.retailer_name),
            retailer_domain=_clip("retailer_domain", data.retailer_domain),
            updated_at=_now(),
        )
    )
    await db.commit()
    return result.rowcount > 0


async def delete_item(db: AsyncSession, item_id: int) -> bool:
    result = await db.execute(delete(WishlistItemRow).where(WishlistItemRow.id == item_id))
    await db.commit()
    return result.rowcount > 0
