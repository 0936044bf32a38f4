import asyncio
from typing import List

import structlog
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import AddItemRequest, ErrorResponse, SuccessResponse, UpdateItemRequest
from core import crud
from core.config import Settings
from core.exceptions import NotFoundError, PersistenceError, UpstreamError, WistException
from dependencies import get_app_settings, get_db, get_wishlist_item_service
from models.wishlist import CreateWishlistItemData, WishlistItem
from services.wishlist_item_service import WishlistItemService
from utils.urls import validate_product_url

router = APIRouter(tags=["items"])
log = structlog.get_logger()


async def _require_wishlist(db: AsyncSession, wishlist_id: int):
    wishlist = await crud.get_active_wishlist(db, wishlist_id)
    if wishlist is None:
        raise NotFoundError("Wishlist", wishlist_id)
    return wishlist


async def _require_item(db: AsyncSession, wishlist_id: int, item_id: int):
    item = await crud.get_item(db, item_id)
    if item is None or item.wishlist_id != wishlist_id:
        raise NotFoundError("Item", item_id)
    return item


@router.get("", response_model=List[WishlistItem])
async def list_items(wishlist_id: int, db: AsyncSession = Depends(get_db)):
    await _require_wishlist(db, wishlist_id)
    items = await crud.get_items_by_wishlist(db, wishlist_id)
    return [WishlistItem.model_validate(item) for item in items]


@router.post(
    "",
    response_model=WishlistItem,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse},
               500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}
)
async def add_item(
    wishlist_id: int,
    payload: AddItemRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    service: WishlistItemService = Depends(get_wishlist_item_service)
):
    await _require_wishlist(db, wishlist_id)
    url = validate_product_url(payload.url)
    # hand the connection back before the slow upstream call
    await db.close()

    try:
        async with asyncio.timeout(settings.REQUEST_TIMEOUT_SECONDS):
            return await service.add_item_to_wishlist(wishlist_id, url)
    except asyncio.TimeoutError:
        log.warning("add item timed out", wishlist_id=wishlist_id, url=url)
        raise WistException("Request timed out", status_code=status.HTTP_504_GATEWAY_TIMEOUT)
    except UpstreamError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"error": f"Scraping failed: {e.message}"}
        )
    except PersistenceError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"error": f"Failed to add item: {e.message}"}
        )
    except WistException:
        raise
    except Exception as e:
        log.exception("unexpected error while adding item", wishlist_id=wishlist_id, url=url)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": f"Failed to add item: {e.__class__.__name__}"}
        )


@router.put("/{item_id}", response_model=SuccessResponse)
async def update_item(
    wishlist_id: int,
    item_id: int,
    payload: UpdateItemRequest,
    db: AsyncSession = Depends(get_db)
):
    await _require_wishlist(db, wishlist_id)
    existing = await _require_item(db, wishlist_id, item_id)

    data = CreateWishlistItemData(
        source_url=existing.source_url,
        **payload.model_dump()
    )
    if not await crud.update_item(db, item_id, data):
        raise WistException("Failed to update item")
    return {"success": True}


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(wishlist_id: int, item_id: int, db: AsyncSession = Depends(get_db)):
    await _require_wishlist(db, wishlist_id)
    await _require_item(db, wishlist_id, item_id)

    if not await crud.delete_item(db, item_id):
        raise WistException("Failed to delete item")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
