from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import CreateWishlistRequest, SuccessResponse, UpdateWishlistRequest
from core import crud
from core.exceptions import NotFoundError, ValidationError
from dependencies import get_db
from models.wishlist import Wishlist

router = APIRouter(tags=["wishlists"])


def _clean_name(name: str) -> str:
    if not name or not name.strip():
        raise ValidationError("Name is required", field="name")
    return name.strip()


@router.get("", response_model=List[Wishlist])
async def list_wishlists(db: AsyncSession = Depends(get_db)):
    wishlists = await crud.get_active_wishlists(db)
    return [Wishlist.model_validate(w) for w in wishlists]


@router.post("", response_model=Wishlist, status_code=status.HTTP_201_CREATED)
async def create_wishlist(payload: CreateWishlistRequest, db: AsyncSession = Depends(get_db)):
    wishlist = await crud.create_wishlist(db, _clean_name(payload.name))
    return Wishlist.model_validate(wishlist)


@router.get("/{wishlist_id}", response_model=Wishlist)
async def get_wishlist(wishlist_id: int, db: AsyncSession = Depends(get_db)):
    wishlist = await crud.get_active_wishlist(db, wishlist_id)
    if wishlist is None:
        raise NotFoundError("Wishlist", wishlist_id)
    return Wishlist.model_validate(wishlist)


@router.put("/{wishlist_id}", response_model=SuccessResponse)
async def rename_wishlist(
    wishlist_id: int,
    payload: UpdateWishlistRequest,
    db: AsyncSession = Depends(get_db)
):
    if not await crud.rename_wishlist(db, wishlist_id, _clean_name(payload.name)):
        raise NotFoundError("Wishlist", wishlist_id)
    return {"success": True}


@router.delete("/{wishlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wishlist(wishlist_id: int, db: AsyncSession = Depends(get_db)):
    # soft delete: the wishlist's items stay in the table
    if not await crud.soft_delete_wishlist(db, wishlist_id):
        raise NotFoundError("Wishlist", wishlist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
