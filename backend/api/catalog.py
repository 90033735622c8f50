from typing import List

from fastapi import APIRouter, Query

from schemas import CatalogFilters, CategoryProductsResponse, Product, ProductListResponse
from services import catalog_service

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/products", response_model=ProductListResponse)
async def read_featured_products(
    limit: int | None = Query(default=None, ge=1, le=100),
) -> ProductListResponse:
    items = await catalog_service.get_featured_products(limit)
    return ProductListResponse(items=items)


@router.get("/products/search", response_model=ProductListResponse)
async def search_products(q: str = Query(default="")) -> ProductListResponse:
    items = await catalog_service.search_products(q)
    return ProductListResponse(items=items)


@router.get("/products/{product_id}", response_model=Product)
async def read_product(product_id: str) -> Product:
    return await catalog_service.get_product(product_id)


@router.get("/categories/{slug}/products", response_model=CategoryProductsResponse)
async def read_category_products(
    slug: str,
    brands: List[str] = Query(default=[]),
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    min_rating: float = Query(default=0, ge=0, le=5),
    in_stock_only: bool = False,
    sort: str = Query(default="relevance", pattern="^(relevance|popularity|price-low-high|price-high-low)$"),
) -> CategoryProductsResponse:
    filters = CatalogFilters(
        brands=brands,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        in_stock_only=in_stock_only,
        sort=sort,
    )
    category = catalog_service.category_for_slug(slug)
    items = await catalog_service.get_category_products(slug, filters)
    return CategoryProductsResponse(
        category=category,
        brands=catalog_service.BRANDS_BY_CATEGORY.get(category, []),
        items=items,
    )
