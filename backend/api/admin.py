from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from auth import UserContext, require_admin
from schemas import (
    ImageUploadResponse,
    Product,
    ProductCreate,
    ProductListResponse,
    ProductUpdate,
)
from services import admin_products_service

router = APIRouter(prefix="/api/admin/products", tags=["admin"])


@router.get("", response_model=ProductListResponse)
async def list_products(_: UserContext = Depends(require_admin)) -> ProductListResponse:
    items = await admin_products_service.list_products()
    return ProductListResponse(items=items)


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    _: UserContext = Depends(require_admin),
) -> Product:
    return await admin_products_service.create_product(payload)


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    _: UserContext = Depends(require_admin),
) -> Product:
    return await admin_products_service.update_product(product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    _: UserContext = Depends(require_admin),
) -> Response:
    await admin_products_service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    _: UserContext = Depends(require_admin),
) -> ImageUploadResponse:
    content = await file.read()
    return await admin_products_service.upload_image(
        file.filename or "", content, file.content_type
    )
