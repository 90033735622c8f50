import asyncio
from typing import Any, Dict, Iterable, List, Optional

from config import settings
from errors import NotFoundError
from repositories import products_repository
from schemas import CatalogFilters, Product

CATEGORY_SLUGS = {
    "technology": "Technology",
    "gift-cards": "Gift Cards",
    "home-essentials": "Home Essentials",
    "games": "Games",
    "board-games": "Board Games",
    "groceries": "Groceries",
}
BRANDS_BY_CATEGORY = {
    "Technology": ["Apple", "Samsung", "Sony", "Microsoft", "Google"],
    "Gift Cards": ["Amazon", "iTunes", "Google Play", "Steam", "Netflix"],
    "Home Essentials": ["Dyson", "Instant Pot", "Ninja", "KitchenAid", "Philips"],
    "Games": ["PlayStation", "Xbox", "Nintendo", "Steam", "Epic Games"],
    "Board Games": ["Hasbro", "Mattel", "Ravensburger", "Days of Wonder", "Fantasy Flight"],
    "Groceries": ["Organic", "Fresh", "Local", "Premium", "Store Brand"],
}
SORT_OPTIONS = ("relevance", "popularity", "price-low-high", "price-high-low")


def _format_product(row: Dict[str, Any]) -> Product:
    return Product(**row)


def category_for_slug(slug: str) -> str:
    category = CATEGORY_SLUGS.get(slug)
    if not category:
        raise NotFoundError(f"Unknown category: {slug}")
    return category


def apply_filters(products: Iterable[Product], filters: CatalogFilters) -> List[Product]:
    filtered = list(products)
    if filters.brands:
        brands = [brand.lower() for brand in filters.brands]
        filtered = [p for p in filtered if any(b in p.name.lower() for b in brands)]
    if filters.min_price is not None:
        filtered = [p for p in filtered if p.price >= filters.min_price]
    if filters.max_price is not None:
        filtered = [p for p in filtered if p.price <= filters.max_price]
    if filters.min_rating:
        filtered = [p for p in filtered if p.rating >= filters.min_rating]
    if filters.in_stock_only:
        filtered = [p for p in filtered if p.stock > 0]

    if filters.sort == "popularity":
        filtered.sort(key=lambda p: p.rating, reverse=True)
    elif filters.sort == "price-low-high":
        filtered.sort(key=lambda p: p.price)
    elif filters.sort == "price-high-low":
        filtered.sort(key=lambda p: p.price, reverse=True)
    else:
        filtered.sort(key=lambda p: p.name.lower())
    return filtered


async def get_featured_products(limit: Optional[int] = None) -> List[Product]:
    rows = await asyncio.to_thread(
        products_repository.fetch_products,
        limit=limit or settings.featured_products_limit,
    )
    return [_format_product(row) for row in rows]


async def get_product(product_id: str) -> Product:
    row = await asyncio.to_thread(products_repository.fetch_product, product_id)
    if not row:
        raise NotFoundError("Product not found")
    return _format_product(row)


async def get_category_products(slug: str, filters: CatalogFilters) -> List[Product]:
    category = category_for_slug(slug)
    rows = await asyncio.to_thread(products_repository.fetch_products_by_category, category)
    return apply_filters((_format_product(row) for row in rows), filters)


async def search_products(query: str) -> List[Product]:
    text = query.strip()
    if not text:
        return []
    rows = await asyncio.to_thread(products_repository.search_products, f"%{text}%")
    return [_format_product(row) for row in rows]
