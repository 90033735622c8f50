import pytest

from errors import NotFoundError
from schemas import CatalogFilters, Product
from services import catalog_service


def product(**values):
    base = {"id": "x", "name": "Item", "price": 10.0, "category": "Games", "stock": 1, "rating": 3}
    base.update(values)
    return Product(**base)


PRODUCTS = [
    product(id="1", name="Xbox Controller", price=59.99, rating=4.6, stock=0),
    product(id="2", name="Nintendo Switch", price=299.0, rating=4.9, stock=3),
    product(id="3", name="PlayStation Gift", price=25.0, rating=3.5, stock=10),
]


def ids(products):
    return [p.id for p in products]


def test_default_sort_is_by_name():
    assert ids(catalog_service.apply_filters(PRODUCTS, CatalogFilters())) == ["2", "3", "1"]


@pytest.mark.parametrize(
    "sort, expected",
    [
        ("popularity", ["2", "1", "3"]),
        ("price-low-high", ["3", "1", "2"]),
        ("price-high-low", ["2", "1", "3"]),
    ],
)
def test_sorts(sort, expected):
    assert ids(catalog_service.apply_filters(PRODUCTS, CatalogFilters(sort=sort))) == expected


def test_filters_combine():
    filters = CatalogFilters(
        brands=["nintendo", "Xbox"], max_price=100, min_rating=4, in_stock_only=False
    )
    assert ids(catalog_service.apply_filters(PRODUCTS, filters)) == ["1"]

    in_stock = CatalogFilters(in_stock_only=True, min_price=30)
    assert ids(catalog_service.apply_filters(PRODUCTS, in_stock)) == ["2"]


def test_unknown_category_slug():
    assert catalog_service.category_for_slug("board-games") == "Board Games"
    with pytest.raises(NotFoundError):
        catalog_service.category_for_slug("weapons")


async def test_category_listing_reads_matching_rows(stocked_cart):
    items = await catalog_service.get_category_products("technology", CatalogFilters())
    assert ids(items) == ["p-1"]


async def test_search_is_case_insensitive(stocked_cart):
    assert ids(await catalog_service.search_products("  SONY ")) == ["p-1"]
    assert await catalog_service.search_products("") == []


async def test_missing_product(fake_db):
    with pytest.raises(NotFoundError):
        await catalog_service.get_product("nope")


async def test_featured_products_are_newest_first(stocked_cart):
    items = await catalog_service.get_featured_products(limit=1)
    assert ids(items) == ["p-2"]
