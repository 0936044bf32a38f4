from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from core import crud, database
from core.exceptions import PersistenceError
from core.tables import WishlistItemRow
from models.wishlist import CreateWishlistItemData
from services.item_store import SqlItemStore


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    factory = database.init_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await database.create_tables(retries=1)
    yield factory
    await database.dispose_engine()


def _item_data(**overrides) -> CreateWishlistItemData:
    fields = dict(
        source_url="https://www.flipkart.com/shoe",
        product_name="Shoe",
        price=49.99,
        currency="USD",
        retailer_name="Flipkart",
        retailer_domain="flipkart.com",
    )
    fields.update(overrides)
    return CreateWishlistItemData(**fields)


@pytest.mark.asyncio
async def test_create_assigns_id_and_timestamps(session_factory):
    async with session_factory() as db:
        wishlist = await crud.create_wishlist(db, "Birthday")

    item = await SqlItemStore(session_factory).create(wishlist.id, _item_data())

    assert item.id is not None
    assert item.wishlist_id == wishlist.id
    assert item.product_name == "Shoe"
    assert item.created_at == item.updated_at

    async with session_factory() as db:
        stored = await crud.get_items_by_wishlist(db, wishlist.id)
    assert [row.id for row in stored] == [item.id]
    assert stored[0].price == 49.99


@pytest.mark.asyncio
async def test_long_text_fields_are_clipped_to_column_width(session_factory):
    async with session_factory() as db:
        wishlist = await crud.create_wishlist(db, "Gadgets")

    item = await SqlItemStore(session_factory).create(
        wishlist.id, _item_data(product_name="x" * 800, currency="RUPEES-INDIAN")
    )

    assert len(item.product_name) == 500
    assert item.currency == "RUPEES-IND"


@pytest.mark.asyncio
async def test_database_failure_becomes_persistence_error(session_factory):
    store = SqlItemStore(session_factory)

    with patch("core.crud.insert_item", side_effect=OperationalError("INSERT", {}, Exception("db down"))):
        with pytest.raises(PersistenceError) as exc_info:
            await store.create(1, _item_data())

    assert exc_info.value.status_code == 500
    assert exc_info.value.details == {"wishlist_id": 1}

    async with session_factory() as db:
        assert await crud.get_items_by_wishlist(db, 1) == []


@pytest.mark.asyncio
async def test_soft_deleted_wishlist_keeps_its_items(session_factory):
    async with session_factory() as db:
        wishlist = await crud.create_wishlist(db, "Old")
    await SqlItemStore(session_factory).create(wishlist.id, _item_data())

    async with session_factory() as db:
        assert await crud.soft_delete_wishlist(db, wishlist.id) is True
        assert await crud.get_active_wishlist(db, wishlist.id) is None
        assert len(await crud.get_items_by_wishlist(db, wishlist.id)) == 1
        # second delete finds nothing active
        assert await crud.soft_delete_wishlist(db, wishlist.id) is False


@pytest.mark.parametrize("field", ["product_name", "currency", "retailer_name", "retailer_domain"])
def test_clip_width_follows_table_definition(field):
    width = WishlistItemRow.__table__.c[field].type.length

    assert len(crud._clip(field, "x" * (width + 50))) == width
    assert crud._clip(field, "short") == "short"


def test_unclipped_fields_are_left_alone():
    description = "d" * 5000

    assert crud._clip("product_description", description) == description
